import math

import numpy as np
import pytest

from nebula.config import CameraSettings
from nebula.scene.camera import OrbitCamera
from nebula.scene.controller import CameraController
from nebula.scene.model import InteractableObject, SceneRegistry
from nebula.scene.rig import CameraRig
from nebula.vision.gesture_detector import GestureEvent, GestureType


def make_controller(position=(0.0, 0.0, 30.0), objects=()):
    camera = OrbitCamera(position=position)
    rig = CameraRig(camera)
    registry = SceneRegistry()
    for obj in objects:
        registry.register(obj)
    return CameraController(camera, rig, registry), camera, rig


def rotate(dx, dy):
    return GestureEvent(GestureType.ROTATE, dx=dx, dy=dy, label="move")


def test_rotate_moves_azimuth():
    controller, camera, _ = make_controller()
    controller.handle(rotate(0.01, 0.0))
    assert camera.azimuth == pytest.approx(-0.2)
    assert camera.polar == pytest.approx(math.pi / 2)
    assert camera.distance == pytest.approx(30.0)


def test_rotate_keeps_looking_at_target():
    controller, camera, _ = make_controller()
    controller.handle(rotate(0.03, 0.02))
    to_target = (camera.target - camera.position) / camera.distance
    assert camera.view_direction() == pytest.approx(to_target)


@pytest.mark.parametrize("dy, expected", [(1.0, 0.1), (-1.0, math.pi - 0.1)])
def test_polar_is_clamped(dy, expected):
    controller, camera, _ = make_controller()
    controller.handle(rotate(0.0, dy))
    assert camera.polar == pytest.approx(expected)


def test_rotate_ignored_while_focused():
    obj = InteractableObject.facing((0, 0, 0), (0, 0, 1), handle="photo")
    controller, camera, rig = make_controller(objects=[obj])
    controller.handle(GestureEvent(GestureType.GRAB))
    assert rig.focus_target is not None

    before = camera.position.copy()
    controller.handle(rotate(0.05, 0.05))
    assert np.array_equal(camera.position, before)


def test_zoom_in_moves_camera_and_target():
    controller, camera, _ = make_controller()
    controller.handle(GestureEvent(GestureType.ZOOM_IN))
    assert camera.position == pytest.approx([0, 0, 29.5])
    assert camera.target == pytest.approx([0, 0, -0.5])


def test_zoom_out_moves_back():
    controller, camera, _ = make_controller()
    controller.handle(GestureEvent(GestureType.ZOOM_OUT))
    assert camera.position == pytest.approx([0, 0, 30.5])


def test_zoom_in_stops_at_min_distance():
    controller, camera, _ = make_controller(position=(0.0, 0.0, 2.3))
    assert not controller.zoom(1)
    assert camera.position == pytest.approx([0, 0, 2.3])


def test_zoom_out_stops_at_max_distance():
    controller, camera, _ = make_controller(position=(0.0, 0.0, 99.8))
    assert not controller.zoom(-1)
    assert camera.position == pytest.approx([0, 0, 99.8])


def test_zoom_step_from_settings():
    camera = OrbitCamera()
    rig = CameraRig(camera)
    controller = CameraController(camera, rig, SceneRegistry(), settings=CameraSettings(zoom_step=2.0))
    controller.zoom(1)
    assert camera.position == pytest.approx([0, 0, 28.0])


def test_grab_without_objects_is_noop():
    controller, camera, rig = make_controller()
    controller.handle(GestureEvent(GestureType.GRAB))
    assert rig.focus_target is None
    assert camera.controls_enabled


def test_grab_focuses_object_in_front():
    front = InteractableObject.facing((0, 0, 0), (0, 0, 1), handle="front")
    away = InteractableObject.facing((0, 0, 5), (0, 0, -1), handle="away")
    controller, _, rig = make_controller(objects=[front, away])
    controller.handle(GestureEvent(GestureType.GRAB))
    assert rig.focus_target.handle == "front"


def test_release_is_idempotent():
    obj = InteractableObject.facing((0, 0, 0), (0, 0, 1), handle="photo")
    controller, _, rig = make_controller(objects=[obj])
    controller.handle(GestureEvent(GestureType.GRAB))
    controller.handle(GestureEvent(GestureType.RELEASE))
    controller.handle(GestureEvent(GestureType.RELEASE))
    assert rig.focus_target is None


def test_pick_focuses_clicked_object():
    obj = InteractableObject.facing((0, 0, 0), (0, 0, 1), handle="photo")
    controller, _, rig = make_controller(objects=[obj])
    assert controller.pick(0.0, 0.0) is obj
    assert rig.focus_target.handle == "photo"


def test_preset_views():
    controller, camera, _ = make_controller()
    controller.set_preset_view("side")
    assert camera.azimuth == pytest.approx(math.pi / 2)
    controller.set_preset_view("top")
    assert camera.polar == pytest.approx(0.1)
    controller.set_preset_view("front")
    assert camera.position == pytest.approx([0, 0, 30])


def test_unknown_preset_view():
    controller, _, _ = make_controller()
    with pytest.raises(ValueError):
        controller.set_preset_view("diagonal")
