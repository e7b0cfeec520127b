import logging
import time

import cv2
from PySide6.QtCore import QTimer
from PySide6.QtGui import QImage
from PySide6.QtWidgets import QApplication

from nebula.config import AppConfig
from nebula.core.pipeline import GesturePipeline
from nebula.scene.model import AlbumLayer, SceneRegistry
from nebula.scene.render import RenderEngine
from nebula.ui.ui import MainWindow
from nebula.vision.camera_service import CameraService, CameraUnavailableError, draw_hand_skeleton
from nebula.vision.gesture_detector import GestureEvent, GestureType

log = logging.getLogger(__name__)


def default_scene() -> SceneRegistry:
    registry = SceneRegistry()
    images = [f"image-{i + 1}" for i in range(8)]
    registry.add_layer(AlbumLayer(images, layout="spiral", spacing=2.0, name="Album"))
    return registry


class AppCore:
    def __init__(self, sys_argv, config: AppConfig = None):
        self.config = config or AppConfig()
        self.app = QApplication(sys_argv)
        self.app.setStyle("Fusion")

        self.pipeline = GesturePipeline(self.config, registry=default_scene())
        self.pipeline.detector.add_listener(self._on_gesture)
        self.engine = RenderEngine(self.pipeline.camera, self.pipeline.registry, self.pipeline.rig)

        self.window = MainWindow(self.pipeline, self.engine)
        self.window.show()
        self.window.camera_btn.clicked.connect(self.toggle_camera)

        self.camera = None
        self.camera_available = False
        self.start_camera()

        self._last_tick = time.perf_counter()
        self.timer = QTimer()
        self.timer.timeout.connect(self._game_loop)
        self.timer.start(self.config.frame_interval_ms)

    def run(self):
        try:
            return self.app.exec()
        finally:
            self.stop_camera()

    def start_camera(self) -> bool:
        if self.camera_available:
            return True
        try:
            self.camera = CameraService(self.config.capture)
        except CameraUnavailableError as e:
            log.warning("%s. Gesture control disabled, running in mouse-only mode.", e)
            self.window.set_camera_active(False)
            self.window.status_bar.showMessage("Camera unavailable: mouse-only mode")
            return False
        self.camera_available = True
        self.window.set_camera_active(True)
        return True

    def stop_camera(self):
        if self.camera is not None:
            self.camera.release()
            self.camera = None
        self.camera_available = False
        self.pipeline.stop()
        self.window.set_camera_active(False)

    def toggle_camera(self):
        if self.camera_available:
            log.info("Camera stopped by user")
            self.stop_camera()
            self.window.status_bar.showMessage("Camera off: mouse-only mode")
        else:
            self.start_camera()

    def _on_gesture(self, event: GestureEvent):
        # Audible cue for the one-shot gesture
        if event.type is GestureType.GRAB:
            QApplication.beep()

    def _game_loop(self):
        now = time.perf_counter()
        dt = now - self._last_tick
        self._last_tick = now

        if self.camera_available:
            data = self.camera.get_frame_data()
            if data.is_new:
                event = self.pipeline.process_hands(data.hands)
                self.window.update_gesture_hint(event.label)

            if data.raw_frame is not None:
                display_frame = draw_hand_skeleton(data.raw_frame.copy(), self.pipeline.last_hands)
                rgb_frame = cv2.cvtColor(display_frame, cv2.COLOR_BGR2RGB)
                h, w, ch = rgb_frame.shape
                qt_image = QImage(rgb_frame.data, w, h, ch * w, QImage.Format_RGB888)
                self.window.set_camera_frame(qt_image.copy())
                self.window.status_bar.showMessage(
                    f"FPS: {data.fps:.1f} | Hands: {len(self.pipeline.last_hands)}"
                )

        self.pipeline.tick(dt)
        self.window.refresh()
