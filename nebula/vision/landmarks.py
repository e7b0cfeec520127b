import math
from typing import Iterable, List, NamedTuple, Sequence


class Landmark(NamedTuple):
    """Normalized hand point: x, y in [0, 1] of the frame, z is relative depth."""
    x: float
    y: float
    z: float = 0.0


Hand = Sequence[Landmark]

HAND_LANDMARK_COUNT = 21

WRIST = 0
THUMB_TIP = 4
INDEX_PIP = 6
INDEX_TIP = 8
PALM_CENTER = 9
MIDDLE_PIP = 10
MIDDLE_TIP = 12
RING_PIP = 14
RING_TIP = 16
PINKY_PIP = 18
PINKY_TIP = 20

HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (17, 18), (18, 19), (19, 20),
    (0, 17),
)


def hand_from_points(points: Iterable) -> List[Landmark]:
    """
    Accepts (x, y, z) / (x, y) tuples or detector landmark objects
    with .x/.y/.z attributes.
    """
    hand = []
    for p in points:
        if hasattr(p, "x"):
            hand.append(Landmark(float(p.x), float(p.y), float(getattr(p, "z", 0.0))))
        else:
            hand.append(Landmark(*(float(v) for v in p)))
    return hand


def is_valid_hand(hand) -> bool:
    if hand is None:
        return False
    try:
        if len(hand) != HAND_LANDMARK_COUNT:
            return False
        return all(math.isfinite(p.x) and math.isfinite(p.y) for p in hand)
    except (TypeError, AttributeError):
        return False
