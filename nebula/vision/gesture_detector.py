import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import GestureSettings
from .landmarks import PALM_CENTER, is_valid_hand
from .pose import PoseFeatures, classify_pose

log = logging.getLogger(__name__)


class GestureType(Enum):
    GRAB = "grab"
    RELEASE = "release"
    ROTATE = "rotate"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    IDLE = "idle"


@dataclass(frozen=True)
class GestureEvent:
    type: GestureType = GestureType.IDLE
    dx: float = 0.0
    dy: float = 0.0
    # Human-readable state for UI feedback, None when no hand is tracked
    label: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return self.type is GestureType.IDLE


@dataclass
class GestureTrackingState:
    was_fist: bool = False
    last_palm_position: Optional[Tuple[float, float]] = None
    smoothed_rotation: Tuple[float, float] = (0.0, 0.0)

    def reset(self):
        self.was_fist = False
        self.last_palm_position = None
        self.smoothed_rotation = (0.0, 0.0)


def _lerp(start: float, end: float, factor: float) -> float:
    return start + (end - start) * factor


class GestureDetector:
    """
    Turns the per-frame hand stream into at most one discrete event per frame.

    Grab is edge-triggered (fires once per contiguous run of fist frames).
    Release, rotate and zoom are level-triggered and repeat while held.
    Only the first hand is used.
    """

    def __init__(self, settings: Optional[GestureSettings] = None):
        self.settings = settings or GestureSettings()
        self.state = GestureTrackingState()
        self.last_features: Optional[PoseFeatures] = None
        self._listeners: List[Callable[[GestureEvent], None]] = []

    def add_listener(self, callback: Callable[[GestureEvent], None]):
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[GestureEvent], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def reset(self):
        self.state.reset()
        self.last_features = None

    def detect(self, hands: Optional[Sequence], preview_mode: bool = False) -> GestureEvent:
        if not hands:
            self.reset()
            return self._emit(GestureEvent())

        hand = hands[0]
        if not is_valid_hand(hand):
            log.debug("Dropping malformed hand data")
            self.reset()
            return self._emit(GestureEvent(label="invalid"))

        features = classify_pose(hand)
        self.last_features = features
        state = self.state

        if features.is_fist:
            if not state.was_fist:
                event = GestureEvent(GestureType.GRAB, label="grab")
            else:
                event = GestureEvent(label="holding")
            state.was_fist = True
            state.last_palm_position = None

        elif features.is_open_palm:
            state.was_fist = False
            state.last_palm_position = None
            event = GestureEvent(GestureType.RELEASE, label="release")

        elif features.is_two_finger_point:
            state.was_fist = False
            if preview_mode:
                event = GestureEvent(label="move (disabled in preview)")
            else:
                event = self._track_palm(hand[PALM_CENTER])

        else:
            # Pinch/spread: continuous zoom by thumb-index distance
            state.was_fist = False
            state.last_palm_position = None
            s = self.settings
            if features.pinch_distance < s.zoom_out_below:
                event = GestureEvent(GestureType.ZOOM_OUT, label="zoom out")
            elif features.pinch_distance > s.zoom_in_above:
                event = GestureEvent(GestureType.ZOOM_IN, label="zoom in")
            else:
                event = GestureEvent(label="idle")

        return self._emit(event)

    def _track_palm(self, palm) -> GestureEvent:
        state = self.state
        s = self.settings
        event = GestureEvent(label="move")

        if state.last_palm_position is not None:
            dx = palm.x - state.last_palm_position[0]
            dy = palm.y - state.last_palm_position[1]
            # Only deltas strictly below the deadzone on both axes are ignored
            if abs(dx) >= s.rotate_deadzone or abs(dy) >= s.rotate_deadzone:
                sx, sy = state.smoothed_rotation
                sx = _lerp(sx, dx, s.rotate_smoothing)
                sy = _lerp(sy, dy, s.rotate_smoothing)
                state.smoothed_rotation = (sx, sy)
                # x is negated for the mirrored camera view
                event = GestureEvent(GestureType.ROTATE, dx=-sx, dy=sy, label="move")

        state.last_palm_position = (palm.x, palm.y)
        return event

    def _emit(self, event: GestureEvent) -> GestureEvent:
        for callback in list(self._listeners):
            callback(event)
        return event
