# nebula/vision/camera_service.py
import logging
import time
from typing import Optional

import cv2

from ..config import CaptureSettings
from .frame_data import FrameData
from .hand_detector import HandDetector
from .landmarks import HAND_CONNECTIONS
from .metrics import MetricsCollector

log = logging.getLogger(__name__)


class CameraUnavailableError(RuntimeError):
    pass


class CameraService:
    def __init__(self, settings: Optional[CaptureSettings] = None, detector: Optional[HandDetector] = None):
        self.settings = settings or CaptureSettings()
        s = self.settings

        self.cap = cv2.VideoCapture(s.camera_index)
        if not self.cap.isOpened():
            raise CameraUnavailableError(f"Could not open camera {s.camera_index}")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, s.resolution[0])
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, s.resolution[1])

        self.detector = detector or HandDetector(s)
        self.metrics = MetricsCollector()

        self.last_frame_time = time.perf_counter()
        self.mirror = s.mirror
        log.info("Camera %d opened at %dx%d", s.camera_index, s.resolution[0], s.resolution[1])

    def _frame_timestamp_ms(self) -> float:
        # Webcams often report 0 for the position; fall back to the wall clock
        pos = self.cap.get(cv2.CAP_PROP_POS_MSEC)
        if pos and pos > 0:
            return float(pos)
        return time.perf_counter() * 1000.0

    def get_frame_data(self) -> FrameData:
        """
        Main entry point: grabs a frame and runs hand detection on it.
        Everything downstream consumes only FrameData.
        """
        frame_data = FrameData()

        current_time = time.perf_counter()
        frame_data.latency_ms = (current_time - self.last_frame_time) * 1000
        self.last_frame_time = current_time

        ret, frame = self.cap.read()
        if not ret:
            log.debug("Camera returned no frame")
            return frame_data

        if self.mirror:
            frame = cv2.flip(frame, 1)
        frame_data.raw_frame = frame
        frame_data.timestamp_ms = self._frame_timestamp_ms()

        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        hands = self.detector.detect(rgb_frame, frame_data.timestamp_ms)
        if hands is not None:
            frame_data.hands = hands
            frame_data.is_new = True

        frame_data.fps = self.metrics.update()
        return frame_data

    def release(self):
        if self.cap.isOpened():
            self.cap.release()
            self.detector.close()
            log.info("Camera released")

    def __del__(self):
        cap = getattr(self, "cap", None)
        if cap is not None and cap.isOpened():
            cap.release()


def draw_hand_skeleton(frame, hands, color=(255, 229, 0), joint_color=(255, 255, 255)):
    """Draws landmark connectors and joints onto a BGR frame in place."""
    h, w = frame.shape[:2]
    for hand in hands:
        points = [(int(p.x * w), int(p.y * h)) for p in hand]
        for a, b in HAND_CONNECTIONS:
            if a < len(points) and b < len(points):
                cv2.line(frame, points[a], points[b], color, 2, cv2.LINE_AA)
        for pt in points:
            cv2.circle(frame, pt, 3, joint_color, -1, cv2.LINE_AA)
    return frame
