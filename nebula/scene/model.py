import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import numpy as np

from .transforms import (
    FACING, IDENTITY_QUAT,
    quat_from_axis_angle, quat_from_euler, quat_from_unit_vectors,
    quat_multiply, quat_normalize, quat_rotate, vec3,
)

ALBUM_LAYOUTS = ("spiral", "grid", "sphere", "random")

IMAGE_WIDTH = 3.0
IMAGE_HEIGHT = 2.0
ALBUM_SPIN_PER_UPDATE = 0.002


@dataclass
class InteractableObject:
    position: np.ndarray
    orientation: np.ndarray = field(default_factory=lambda: IDENTITY_QUAT.copy())
    width: float = IMAGE_WIDTH
    height: float = IMAGE_HEIGHT
    # Opaque reference the scene uses to find the object again
    handle: Any = None

    def __post_init__(self):
        self.position = vec3(self.position)
        self.orientation = quat_normalize(self.orientation)

    @classmethod
    def facing(cls, position, normal, width: float = IMAGE_WIDTH,
               height: float = IMAGE_HEIGHT, handle: Any = None) -> "InteractableObject":
        return cls(position, quat_from_unit_vectors(FACING, normal), width, height, handle)

    @property
    def normal(self) -> np.ndarray:
        return quat_rotate(self.orientation, FACING)

    def corners(self) -> List[np.ndarray]:
        right = quat_rotate(self.orientation, (1.0, 0.0, 0.0)) * (self.width / 2)
        up = quat_rotate(self.orientation, (0.0, 1.0, 0.0)) * (self.height / 2)
        p = self.position
        return [p - right - up, p + right - up, p + right + up, p - right + up]


@dataclass(frozen=True)
class FocusTarget:
    position: np.ndarray
    orientation: np.ndarray
    width: float
    height: float
    handle: Any = None

    @classmethod
    def from_object(cls, obj: InteractableObject) -> "FocusTarget":
        return cls(obj.position.copy(), obj.orientation.copy(), obj.width, obj.height, obj.handle)

    @property
    def normal(self) -> np.ndarray:
        return quat_rotate(self.orientation, FACING)


def _pseudo_random(seed: float) -> float:
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def album_layout(count: int, layout: str = "spiral", spacing: float = 1.0
                 ) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Local (position, orientation) of each image in an album group."""
    if layout not in ALBUM_LAYOUTS:
        raise ValueError(f"Unknown album layout '{layout}'")

    items = []
    for i in range(count):
        x = y = z = 0.0
        rot_x = rot_y = 0.0

        if layout == "spiral":
            angle = i * 0.8
            radius = spacing * 2 + i * 0.2
            x = math.cos(angle) * radius
            z = math.sin(angle) * radius
            y = i * 0.5 - count * 0.25
            rot_y = -angle + math.pi / 2
        elif layout == "grid":
            col = i % 4
            row = i // 4
            x = (col - 1.5) * (spacing * 2)
            y = (row - 1) * (spacing * 2)
        elif layout == "sphere":
            phi = math.acos(-1 + (2 * i) / count)
            theta = math.sqrt(count * math.pi) * phi
            r = spacing * 5
            x = r * math.cos(theta) * math.sin(phi)
            y = r * math.sin(theta) * math.sin(phi)
            z = r * math.cos(phi)
            rot_y = math.atan2(x, z)
            rot_x = -math.atan2(y, math.sqrt(x * x + z * z))
        else:
            spread = spacing * 40
            x = (_pseudo_random(i * 13) - 0.5) * spread
            y = (_pseudo_random(i * 29) - 0.5) * spread
            z = (_pseudo_random(i * 47) - 0.5) * spread
            rot_y = math.atan2(x, z)
            rot_x = -math.atan2(y, math.sqrt(x * x + z * z))

        # Yaw then pitch, so sphere and random items face straight out
        orientation = quat_multiply(
            quat_from_axis_angle((0.0, 1.0, 0.0), rot_y),
            quat_from_axis_angle((1.0, 0.0, 0.0), rot_x),
        )
        items.append((np.array([x, y, z]), orientation))
    return items


class AlbumLayer:
    """A group of image frames, each one an interactable object."""

    def __init__(self, images: List[str], layout: str = "spiral", spacing: float = 1.0,
                 position=(0.0, 0.0, 0.0), rotation=(0.0, 0.0, 0.0), scale: float = 1.0,
                 name: str = "Album", visible: bool = True):
        self.name = name
        self.images = list(images)
        self.layout = layout
        self.spacing = spacing
        self.position = vec3(position)
        self.rotation = list(rotation)
        self.scale = scale
        self.visible = visible
        self._items = album_layout(len(self.images), layout, spacing)

    def set_layout(self, layout: str, spacing: Optional[float] = None):
        if spacing is not None:
            self.spacing = spacing
        self._items = album_layout(len(self.images), layout, self.spacing)
        self.layout = layout

    def update(self, paused: bool = False):
        if paused or self.layout == "grid":
            return
        self.rotation[1] += ALBUM_SPIN_PER_UPDATE

    def interactable_objects(self) -> List[InteractableObject]:
        if not self.visible:
            return []
        group_q = quat_from_euler(*self.rotation)
        objects = []
        for i, (local_pos, local_q) in enumerate(self._items):
            world_pos = self.position + quat_rotate(group_q, local_pos * self.scale)
            objects.append(InteractableObject(
                position=world_pos,
                orientation=quat_multiply(group_q, local_q),
                width=IMAGE_WIDTH * self.scale,
                height=IMAGE_HEIGHT * self.scale,
                handle=(self.name, i, self.images[i]),
            ))
        return objects


class SceneRegistry:
    """
    Table of everything a grab can select.

    Layers contribute objects computed from their current animation state;
    loose objects are registered directly.
    """

    def __init__(self):
        self.layers: List[AlbumLayer] = []
        self._objects: List[InteractableObject] = []

    def add_layer(self, layer: AlbumLayer) -> AlbumLayer:
        self.layers.append(layer)
        return layer

    def remove_layer(self, layer: AlbumLayer):
        if layer in self.layers:
            self.layers.remove(layer)

    def register(self, obj: InteractableObject) -> InteractableObject:
        self._objects.append(obj)
        return obj

    def unregister(self, handle: Any):
        self._objects = [o for o in self._objects if o.handle != handle]

    def clear(self):
        self.layers.clear()
        self._objects.clear()

    def update(self, paused: bool = False):
        for layer in self.layers:
            layer.update(paused)

    def interactable_objects(self) -> Tuple[InteractableObject, ...]:
        objects = list(self._objects)
        for layer in self.layers:
            objects.extend(layer.interactable_objects())
        return tuple(objects)

    def find(self, handle: Any) -> Optional[InteractableObject]:
        for obj in self.interactable_objects():
            if obj.handle == handle:
                return obj
        return None
