import math

import numpy as np
import pytest

from nebula.scene.model import (
    ALBUM_LAYOUTS, ALBUM_SPIN_PER_UPDATE, AlbumLayer, FocusTarget, InteractableObject,
    SceneRegistry, album_layout,
)


def test_facing_constructor_sets_normal():
    obj = InteractableObject.facing((1, 2, 3), (1, 0, 0), handle="x")
    assert obj.normal == pytest.approx([1, 0, 0])
    assert FocusTarget.from_object(obj).normal == pytest.approx([1, 0, 0])


def test_corners_span_width_and_height():
    obj = InteractableObject((0, 0, 0), width=3.0, height=2.0)
    corners = np.array(obj.corners())
    assert corners[:, 0].max() - corners[:, 0].min() == pytest.approx(3.0)
    assert corners[:, 1].max() - corners[:, 1].min() == pytest.approx(2.0)


@pytest.mark.parametrize("layout", ALBUM_LAYOUTS)
def test_album_layouts(layout):
    items = album_layout(6, layout, spacing=1.0)
    assert len(items) == 6
    positions = {tuple(np.round(p, 6)) for p, _ in items}
    assert len(positions) == 6


def test_sphere_layout_faces_outwards():
    for position, orientation in album_layout(5, "sphere", spacing=1.0):
        obj = InteractableObject(position, orientation)
        outward = position / np.linalg.norm(position)
        assert float(np.dot(obj.normal, outward)) == pytest.approx(1.0, abs=1e-6)


def test_unknown_layout():
    with pytest.raises(ValueError):
        album_layout(3, "pyramid")


def test_album_spins_unless_paused_or_grid():
    spiral = AlbumLayer(["a", "b"], layout="spiral")
    spiral.update()
    assert spiral.rotation[1] == pytest.approx(ALBUM_SPIN_PER_UPDATE)
    spiral.update(paused=True)
    assert spiral.rotation[1] == pytest.approx(ALBUM_SPIN_PER_UPDATE)

    grid = AlbumLayer(["a", "b"], layout="grid")
    grid.update()
    assert grid.rotation[1] == 0.0


def test_album_world_transform():
    layer = AlbumLayer(["a"], layout="grid", position=(0, 0, -5), rotation=(0, math.pi, 0), scale=2.0)
    obj = layer.interactable_objects()[0]
    # grid item 0 sits at (-3, -2, 0) locally; half a turn about Y flips x
    assert obj.position == pytest.approx([6, -4, -5])
    assert obj.normal == pytest.approx([0, 0, -1])
    assert obj.width == 6.0
    assert obj.handle == ("Album", 0, "a")


def test_hidden_layer_has_no_objects():
    layer = AlbumLayer(["a", "b"], visible=False)
    assert layer.interactable_objects() == []


def test_registry_collects_and_finds():
    registry = SceneRegistry()
    registry.add_layer(AlbumLayer(["a", "b"], name="Album"))
    loose = registry.register(InteractableObject((0, 0, 0), handle="loose"))

    objects = registry.interactable_objects()
    assert isinstance(objects, tuple)
    assert len(objects) == 3
    assert registry.find("loose") is loose
    assert registry.find(("Album", 1, "b")) is not None

    registry.unregister("loose")
    assert registry.find("loose") is None
    registry.clear()
    assert registry.interactable_objects() == ()
