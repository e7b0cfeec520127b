import pytest

from nebula.config import GestureSettings
from nebula.vision.gesture_detector import GestureDetector, GestureEvent, GestureType


@pytest.fixture
def detector():
    return GestureDetector()


def run(detector, frames, preview_mode=False):
    return [detector.detect([f] if f is not None else [], preview_mode).type for f in frames]


def test_grab_fires_once_per_fist_run(detector, fist, open_palm):
    types = run(detector, [open_palm, fist, fist, fist, open_palm])
    assert types == [
        GestureType.RELEASE, GestureType.GRAB, GestureType.IDLE, GestureType.IDLE, GestureType.RELEASE,
    ]


def test_holding_fist_is_labelled(detector, fist):
    detector.detect([fist])
    event = detector.detect([fist])
    assert event == GestureEvent(GestureType.IDLE, label="holding")


def test_grab_rearms_after_hand_lost(detector, fist):
    types = run(detector, [fist, None, fist])
    assert types.count(GestureType.GRAB) == 2


def test_release_repeats_every_open_frame(detector, open_palm):
    assert run(detector, [open_palm] * 3) == [GestureType.RELEASE] * 3


def test_rotate_after_palm_moves(detector, two_fingers):
    first = detector.detect([two_fingers(0.5, 0.5)])
    assert first.type is GestureType.IDLE
    assert first.label == "move"

    event = detector.detect([two_fingers(0.52, 0.51)])
    assert event.type is GestureType.ROTATE
    # lerp(0, delta, 0.4), x negated
    assert event.dx == pytest.approx(-0.008)
    assert event.dy == pytest.approx(0.004)


def test_rotate_smoothing_accumulates(detector, two_fingers):
    detector.detect([two_fingers(0.5, 0.5)])
    detector.detect([two_fingers(0.52, 0.5)])
    event = detector.detect([two_fingers(0.54, 0.5)])
    # 0.008 + (0.02 - 0.008) * 0.4
    assert event.dx == pytest.approx(-0.0128)


def test_deadzone_suppresses_but_tracks_palm(detector, two_fingers):
    detector.detect([two_fingers(0.5, 0.5)])
    event = detector.detect([two_fingers(0.503, 0.504)])
    assert event.type is not GestureType.ROTATE
    assert detector.state.last_palm_position == pytest.approx((0.503, 0.504))


def test_delta_equal_to_deadzone_rotates(two_fingers):
    detector = GestureDetector(GestureSettings(rotate_deadzone=0.25))
    detector.detect([two_fingers(0.5, 0.5)])
    assert detector.detect([two_fingers(0.75, 0.5)]).type is GestureType.ROTATE


def test_no_rotate_in_preview(detector, two_fingers):
    positions = [(0.5, 0.5), (0.56, 0.52), (0.62, 0.58), (0.4, 0.3)]
    for x, y in positions:
        event = detector.detect([two_fingers(x, y)], preview_mode=True)
        assert event.type is not GestureType.ROTATE
        assert "disabled" in event.label


def test_preview_two_fingers_clears_fist(detector, fist, two_fingers):
    detector.detect([fist])
    detector.detect([two_fingers(0.5, 0.5)], preview_mode=True)
    assert not detector.state.was_fist
    assert detector.detect([fist]).type is GestureType.GRAB


@pytest.mark.parametrize("distance, expected", [
    (0.049, GestureType.ZOOM_OUT),
    (0.05, GestureType.IDLE),
    (0.08, GestureType.IDLE),
    (0.12, GestureType.IDLE),
    (0.121, GestureType.ZOOM_IN),
])
def test_zoom_thresholds(detector, pinch, distance, expected):
    assert detector.detect([pinch(distance)]).type is expected


def test_zoom_clears_tracking(detector, fist, two_fingers, pinch):
    detector.detect([two_fingers(0.5, 0.5)])
    detector.detect([pinch(0.2)])
    assert detector.state.last_palm_position is None
    assert not detector.state.was_fist


def test_no_hand_resets_state_and_notifies(detector, fist, two_fingers):
    seen = []
    detector.add_listener(seen.append)
    detector.detect([two_fingers(0.5, 0.5)])
    detector.detect([two_fingers(0.53, 0.5)])
    event = detector.detect([])

    assert event == GestureEvent()
    assert event.label is None
    assert seen[-1] is event
    assert len(seen) == 3
    assert detector.state.last_palm_position is None
    assert detector.state.smoothed_rotation == (0.0, 0.0)


def test_invalid_hand_suppresses_frame(detector, fist):
    detector.detect([fist])
    event = detector.detect([fist[:10]])
    assert event.type is GestureType.IDLE
    assert event.label == "invalid"
    assert not detector.state.was_fist


def test_only_first_hand_is_used(detector, fist, open_palm):
    assert detector.detect([fist, open_palm]).type is GestureType.GRAB


def test_thresholds_come_from_settings(pinch):
    detector = GestureDetector(GestureSettings(zoom_out_below=0.1))
    assert detector.detect([pinch(0.08)]).type is GestureType.ZOOM_OUT


def test_remove_listener(detector, fist):
    seen = []
    detector.add_listener(seen.append)
    detector.remove_listener(seen.append)
    detector.detect([fist])
    assert seen == []
