import logging
import math
from enum import Enum
from typing import Optional

import numpy as np

from ..config import FocusSettings
from .camera import CameraPose, OrbitCamera
from .model import FocusTarget
from .transforms import lerp, look_at_quaternion, quat_slerp

log = logging.getLogger(__name__)


class RigState(Enum):
    FREE = "free"
    FOCUSED = "focused"
    RESTORING = "restoring"


class CameraRig:
    """
    Animates the camera in front of a focused object and back again.

    Entering focus snapshots the camera pose; after release the camera eases
    back to that snapshot and orbit input is handed back once it is within
    restore_epsilon. All easing is scaled by elapsed time.
    """

    def __init__(self, camera: OrbitCamera, settings: Optional[FocusSettings] = None):
        self.camera = camera
        self.settings = settings or FocusSettings()
        self._focus_target: Optional[FocusTarget] = None
        self.saved_pose: Optional[CameraPose] = None

    @property
    def focus_target(self) -> Optional[FocusTarget]:
        return self._focus_target

    @property
    def preview_mode(self) -> bool:
        return self._focus_target is not None

    # Layer animation freezes while previewing
    paused = preview_mode

    @property
    def state(self) -> RigState:
        if self._focus_target is not None:
            return RigState.FOCUSED
        if self.saved_pose is not None:
            return RigState.RESTORING
        return RigState.FREE

    def focus(self, target: FocusTarget):
        if self.saved_pose is None:
            self.saved_pose = self.camera.pose()
        self._focus_target = target
        self.camera.controls_enabled = False
        log.info("Focus on %r", target.handle)

    def release(self):
        if self._focus_target is None:
            return
        self._focus_target = None
        log.info("Focus released, restoring camera")

    def ideal_distance(self, target: FocusTarget) -> float:
        half_fov = math.radians(self.camera.fov) / 2.0
        return (target.height / 2.0) / math.tan(half_fov) * self.settings.margin

    def ideal_position(self, target: FocusTarget) -> np.ndarray:
        return target.position + target.normal * self.ideal_distance(target)

    def tick(self, dt: float):
        step = min(1.0, max(0.0, self.settings.rate * dt))
        cam = self.camera

        if self._focus_target is not None:
            target = self._focus_target
            cam.position = lerp(cam.position, self.ideal_position(target), step)
            look = look_at_quaternion(cam.position, target.position)
            if look is not None:
                cam.orientation = quat_slerp(cam.orientation, look, step)
            cam.target = lerp(cam.target, target.position, step)

        elif self.saved_pose is not None:
            saved = self.saved_pose
            cam.position = lerp(cam.position, saved.position, step)
            cam.orientation = quat_slerp(cam.orientation, saved.orientation, step)
            cam.target = lerp(cam.target, saved.target, step)

            if np.linalg.norm(cam.position - saved.position) < self.settings.restore_epsilon:
                cam.apply_pose(saved)
                self.saved_pose = None
                cam.controls_enabled = True
                log.debug("Camera restore complete")

    def cancel(self):
        """Drops any animation in flight and hands the camera back as-is."""
        self._focus_target = None
        self.saved_pose = None
        self.camera.controls_enabled = True
