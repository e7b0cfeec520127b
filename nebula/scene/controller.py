import logging
import math
from typing import Optional

import numpy as np

from ..config import CameraSettings
from ..vision.gesture_detector import GestureEvent, GestureType
from .camera import OrbitCamera
from .model import FocusTarget, InteractableObject, SceneRegistry
from .rig import CameraRig
from .selector import ObjectSelector

log = logging.getLogger(__name__)

PRESET_VIEWS = {
    "front": (0.0, math.pi / 2),
    "top": (0.0, 0.0),
    "side": (math.pi / 2, math.pi / 2),
}


class CameraController:
    """Applies gesture events (and mouse input) to the orbit camera."""

    def __init__(self, camera: OrbitCamera, rig: CameraRig, registry: SceneRegistry,
                 selector: Optional[ObjectSelector] = None, settings: Optional[CameraSettings] = None):
        self.camera = camera
        self.rig = rig
        self.registry = registry
        self.selector = selector or ObjectSelector()
        self.settings = settings or CameraSettings()

    @property
    def accepts_orbit_input(self) -> bool:
        return self.rig.focus_target is None and self.camera.controls_enabled

    def handle(self, event: GestureEvent):
        t = event.type
        if t is GestureType.ROTATE:
            self.orbit(event.dx, event.dy)
        elif t is GestureType.ZOOM_IN:
            self.zoom(1)
        elif t is GestureType.ZOOM_OUT:
            self.zoom(-1)
        elif t is GestureType.GRAB:
            self.grab()
        elif t is GestureType.RELEASE:
            self.release()

    def orbit(self, dx: float, dy: float):
        if not self.accepts_orbit_input:
            return
        s = self.settings
        self.camera.set_azimuth(self.camera.azimuth - dx * s.sensitivity)
        self.camera.set_polar(self._clamp_polar(self.camera.polar - dy * s.sensitivity))

    def zoom(self, direction: int) -> bool:
        """Moves camera and target together along the view direction; +1 is in."""
        if not self.accepts_orbit_input:
            return False
        s = self.settings
        offset = self.camera.view_direction() * (s.zoom_step * direction)
        new_position = self.camera.position + offset
        radius = float(np.linalg.norm(new_position))
        if direction > 0 and radius < s.min_distance:
            return False
        if direction < 0 and radius > s.max_distance:
            return False
        self.camera.set_position(new_position)
        self.camera.set_target(self.camera.target + offset)
        return True

    def grab(self) -> Optional[InteractableObject]:
        obj = self.selector.select(self.camera, self.registry.interactable_objects())
        if obj is not None:
            self.rig.focus(FocusTarget.from_object(obj))
        return obj

    def pick(self, ndc_x: float, ndc_y: float) -> Optional[InteractableObject]:
        obj = self.selector.pick(self.camera, self.registry.interactable_objects(), ndc_x, ndc_y)
        if obj is not None:
            self.rig.focus(FocusTarget.from_object(obj))
        return obj

    def release(self):
        self.rig.release()

    def set_preset_view(self, name: str):
        if name not in PRESET_VIEWS:
            raise ValueError(f"Unknown preset view '{name}'")
        if not self.accepts_orbit_input:
            return
        azimuth, polar = PRESET_VIEWS[name]
        self.camera.set_azimuth(azimuth)
        self.camera.set_polar(self._clamp_polar(polar))
        log.debug("Preset view %s", name)

    def _clamp_polar(self, polar: float) -> float:
        eps = self.settings.polar_margin
        return min(math.pi - eps, max(eps, polar))
