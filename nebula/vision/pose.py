# nebula/vision/pose.py
from dataclasses import dataclass

import numpy as np

from .landmarks import (
    WRIST, THUMB_TIP,
    INDEX_TIP, INDEX_PIP, MIDDLE_TIP, MIDDLE_PIP,
    RING_TIP, RING_PIP, PINKY_TIP, PINKY_PIP,
    is_valid_hand,
)

# (tip, pip) for index, middle, ring, pinky. The thumb is left out on purpose:
# its extension is unreliable across hand orientations.
FINGERS = (
    (INDEX_TIP, INDEX_PIP),
    (MIDDLE_TIP, MIDDLE_PIP),
    (RING_TIP, RING_PIP),
    (PINKY_TIP, PINKY_PIP),
)


@dataclass(frozen=True)
class PoseFeatures:
    is_fist: bool = False
    is_open_palm: bool = False
    is_two_finger_point: bool = False
    pinch_distance: float = 0.0


def _dist(p1, p2) -> float:
    return float(np.hypot(p1.x - p2.x, p1.y - p2.y))


def finger_states(hand):
    """
    Returns (extended, folded) lists for [index, middle, ring, pinky].

    Distance from the wrist is used as a depth-invariant proxy: a tip further
    from the wrist than its pip is extended, closer is folded. A tip exactly
    as far as its pip is neither.
    """
    wrist = hand[WRIST]
    extended, folded = [], []
    for tip_id, pip_id in FINGERS:
        d_tip = _dist(hand[tip_id], wrist)
        d_pip = _dist(hand[pip_id], wrist)
        extended.append(d_tip > d_pip)
        folded.append(d_tip < d_pip)
    return extended, folded


def classify_pose(hand) -> PoseFeatures:
    if not is_valid_hand(hand):
        return PoseFeatures()

    extended, folded = finger_states(hand)
    index_ext, middle_ext, _, _ = extended
    _, _, ring_fold, pinky_fold = folded

    return PoseFeatures(
        is_fist=all(folded),
        is_open_palm=all(extended),
        is_two_finger_point=index_ext and middle_ext and ring_fold and pinky_fold,
        pinch_distance=_dist(hand[THUMB_TIP], hand[INDEX_TIP]),
    )
