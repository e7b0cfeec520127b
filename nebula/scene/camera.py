# nebula/scene/camera.py
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .transforms import (
    FORWARD, IDENTITY_QUAT, WORLD_UP,
    look_at_quaternion, normalize, quat_normalize, quat_rotate, quat_to_matrix, vec3,
)


@dataclass
class CameraPose:
    position: np.ndarray
    orientation: np.ndarray
    target: np.ndarray

    def copy(self) -> "CameraPose":
        return CameraPose(self.position.copy(), self.orientation.copy(), self.target.copy())


class OrbitCamera:
    """
    Perspective camera orbiting a target point.

    Azimuth and polar angle are measured on the offset from the target,
    y-up: azimuth 0 / polar pi/2 puts the camera on +Z looking at the target.
    """

    def __init__(self, position=(0.0, 0.0, 30.0), target=(0.0, 0.0, 0.0),
                 fov: float = 60.0, aspect: float = 16 / 9, near: float = 0.1, far: float = 1000.0):
        self.position = vec3(position)
        self.target = vec3(target)
        self.orientation = IDENTITY_QUAT.copy()
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        # Cleared while the focus rig owns the camera
        self.controls_enabled = True
        self.look_at(self.target)

    # --- Orbit parameters ---

    def _spherical(self) -> Tuple[float, float, float]:
        offset = self.position - self.target
        radius = float(np.linalg.norm(offset))
        if radius < 1e-9:
            return 0.0, 0.0, math.pi / 2
        azimuth = math.atan2(offset[0], offset[2])
        polar = math.acos(max(-1.0, min(1.0, offset[1] / radius)))
        return radius, azimuth, polar

    @property
    def distance(self) -> float:
        return self._spherical()[0]

    @property
    def azimuth(self) -> float:
        return self._spherical()[1]

    @property
    def polar(self) -> float:
        return self._spherical()[2]

    def _set_spherical(self, radius: float, azimuth: float, polar: float):
        sin_p = math.sin(polar)
        offset = np.array([
            radius * sin_p * math.sin(azimuth),
            radius * math.cos(polar),
            radius * sin_p * math.cos(azimuth),
        ])
        self.position = self.target + offset
        self.look_at(self.target)

    def set_azimuth(self, azimuth: float):
        radius, _, polar = self._spherical()
        self._set_spherical(radius, azimuth, polar)

    def set_polar(self, polar: float):
        radius, azimuth, _ = self._spherical()
        self._set_spherical(radius, azimuth, polar)

    # --- Direct pose access ---

    def set_position(self, position):
        self.position = vec3(position)

    def set_target(self, target):
        self.target = vec3(target)

    def set_orientation(self, orientation):
        self.orientation = quat_normalize(orientation)

    def look_at(self, point):
        q = look_at_quaternion(self.position, point, WORLD_UP)
        if q is not None:
            self.orientation = q

    def pose(self) -> CameraPose:
        return CameraPose(self.position.copy(), self.orientation.copy(), self.target.copy())

    def apply_pose(self, pose: CameraPose):
        self.position = pose.position.copy()
        self.orientation = pose.orientation.copy()
        self.target = pose.target.copy()

    # --- Projection ---

    def view_direction(self) -> np.ndarray:
        return normalize(quat_rotate(self.orientation, FORWARD))

    def view_matrix(self) -> np.ndarray:
        rot = quat_to_matrix(self.orientation)
        view = np.eye(4)
        view[:3, :3] = rot.T
        view[:3, 3] = -rot.T @ self.position
        return view

    def projection_matrix(self) -> np.ndarray:
        f = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        n, fa = self.near, self.far
        return np.array([
            [f / self.aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (fa + n) / (n - fa), 2.0 * fa * n / (n - fa)],
            [0.0, 0.0, -1.0, 0.0],
        ])

    def view_projection(self) -> np.ndarray:
        return self.projection_matrix() @ self.view_matrix()

    def project(self, point) -> Optional[np.ndarray]:
        """
        World point to normalized device coordinates.

        Returns None for points on or behind the camera plane.
        """
        clip = self.view_projection() @ np.append(vec3(point), 1.0)
        if clip[3] <= 1e-9:
            return None
        return clip[:3] / clip[3]

    def ray_from_ndc(self, x: float, y: float) -> Tuple[np.ndarray, np.ndarray]:
        """Origin and unit direction of the ray through an NDC point."""
        inv = np.linalg.inv(self.view_projection())
        far = inv @ np.array([x, y, 1.0, 1.0])
        far = far[:3] / far[3]
        return self.position.copy(), normalize(far - self.position)
