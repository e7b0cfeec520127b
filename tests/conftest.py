import numpy as np
import pytest

from nebula.scene.camera import OrbitCamera
from nebula.scene.model import InteractableObject
from nebula.vision.landmarks import HAND_LANDMARK_COUNT, Landmark
from nebula.vision.pose import FINGERS

WRIST_POS = (0.5, 0.9)
# Index tip sits on x=0 so the thumb offset equals the pinch distance exactly
FINGER_X = (0.0, 0.47, 0.54, 0.61)


def build_hand(index=True, middle=True, ring=True, pinky=True, pinch=0.2, palm=(0.5, 0.6)):
    pts = [Landmark(0.5, 0.7)] * HAND_LANDMARK_COUNT
    pts[0] = Landmark(*WRIST_POS)
    for (tip, pip), fx, extended in zip(FINGERS, FINGER_X, (index, middle, ring, pinky)):
        pts[pip] = Landmark(fx, 0.6)
        pts[tip] = Landmark(fx, 0.4 if extended else 0.75)
    index_tip = pts[8]
    pts[4] = Landmark(index_tip.x + pinch, index_tip.y)
    pts[9] = Landmark(*palm)
    return pts


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def fist(make_hand):
    return make_hand(False, False, False, False)


@pytest.fixture
def open_palm(make_hand):
    return make_hand(True, True, True, True)


@pytest.fixture
def two_fingers(make_hand):
    def _at(x, y):
        return make_hand(True, True, False, False, palm=(x, y))
    return _at


@pytest.fixture
def pinch(make_hand):
    # Index pointing alone is none of the discrete poses
    def _with(distance):
        return make_hand(True, False, False, False, pinch=distance)
    return _with


@pytest.fixture
def origin_camera():
    return OrbitCamera(position=(0.0, 0.0, 0.0), target=(0.0, 0.0, -1.0))


def facing_object(position, alignment, handle):
    """Object whose normal gives the requested alignment with a -Z view."""
    z = -alignment
    x = float(np.sqrt(max(0.0, 1.0 - z * z)))
    return InteractableObject.facing(position, (x, 0.0, z), handle=handle)


@pytest.fixture
def make_facing_object():
    return facing_object
