import logging
from typing import List, Optional

from ..config import CaptureSettings
from .landmarks import Landmark, hand_from_points

log = logging.getLogger(__name__)


class HandDetector:
    """
    MediaPipe Hands behind a detect(frame) -> hands call.

    Detection is skipped when the frame timestamp has not advanced since the
    last processed frame, so the same video frame is never run twice.
    """

    def __init__(self, settings: Optional[CaptureSettings] = None, model=None):
        self.settings = settings or CaptureSettings()
        if model is None:
            import mediapipe as mp

            model = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=self.settings.max_num_hands,
                min_detection_confidence=self.settings.min_detection_confidence,
                min_tracking_confidence=self.settings.min_tracking_confidence,
            )
        self.model = model
        self.last_timestamp_ms: Optional[float] = None

    def detect(self, rgb_frame, timestamp_ms: float) -> Optional[List[List[Landmark]]]:
        """Returns None when the frame was skipped, else a (possibly empty) hand list."""
        if self.last_timestamp_ms is not None and timestamp_ms <= self.last_timestamp_ms:
            return None
        self.last_timestamp_ms = timestamp_ms

        results = self.model.process(rgb_frame)
        multi = getattr(results, "multi_hand_landmarks", None)
        if not multi:
            return []
        return [hand_from_points(hand.landmark) for hand in multi]

    def close(self):
        close = getattr(self.model, "close", None)
        if close is not None:
            close()
