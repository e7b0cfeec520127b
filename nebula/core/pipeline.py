import logging
from typing import List, Optional, Sequence

from ..config import AppConfig
from ..scene.camera import OrbitCamera
from ..scene.controller import CameraController
from ..scene.model import SceneRegistry
from ..scene.rig import CameraRig
from ..scene.selector import ObjectSelector
from ..vision.gesture_detector import GestureDetector, GestureEvent, GestureType

log = logging.getLogger(__name__)


class GesturePipeline:
    """
    hands -> gesture detector -> camera controller / selector -> focus rig.

    Frame driven and single threaded: process_hands() applies at most one
    event per call, tick() advances the animation once per rendered frame.
    """

    def __init__(self, config: Optional[AppConfig] = None, camera: Optional[OrbitCamera] = None,
                 registry: Optional[SceneRegistry] = None):
        self.config = config or AppConfig()
        cam_cfg = self.config.camera
        self.camera = camera or OrbitCamera(position=cam_cfg.start_position, fov=cam_cfg.fov)
        self.registry = registry or SceneRegistry()

        self.detector = GestureDetector(self.config.gesture)
        self.rig = CameraRig(self.camera, self.config.focus)
        self.selector = ObjectSelector(self.config.selector)
        self.controller = CameraController(
            self.camera, self.rig, self.registry, self.selector, cam_cfg
        )
        self.last_event = GestureEvent()
        # Hands from the last detected frame; skipped frames keep them
        self.last_hands: List = []

    @property
    def preview_mode(self) -> bool:
        return self.rig.preview_mode

    @property
    def paused(self) -> bool:
        return self.rig.paused

    def process_hands(self, hands: Optional[Sequence]) -> GestureEvent:
        event = self.detector.detect(hands, preview_mode=self.preview_mode)
        if event.type is GestureType.GRAB:
            log.info("Grab gesture")
        self.controller.handle(event)
        self.last_event = event
        self.last_hands = list(hands or [])
        return event

    def tick(self, dt: float):
        self.rig.tick(dt)
        self.registry.update(paused=self.paused)

    def stop(self):
        """Camera stopped: forget hand tracking and any focus animation."""
        self.detector.reset()
        self.rig.cancel()
        self.last_event = GestureEvent()
        self.last_hands = []
