from typing import Dict, Optional

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QImage, QMouseEvent, QPainter, QPaintEvent, QPixmap, QWheelEvent
from PySide6.QtWidgets import (
    QFrame, QHBoxLayout, QLabel, QMainWindow, QPushButton, QSizePolicy,
    QStatusBar, QVBoxLayout, QWidget,
)

from nebula.core.pipeline import GesturePipeline
from nebula.scene.render import RenderEngine

# Mouse drag in pixels is scaled to the same units as a hand delta
DRAG_SCALE = 1.0 / 600.0
CLICK_SLOP_PX = 4


# --- SCENE VIEWPORT ---
class SceneWidget(QWidget):
    def __init__(self, pipeline: GesturePipeline, engine: RenderEngine, parent=None):
        super().__init__(parent)
        self._pipeline = pipeline
        self._engine = engine
        self._press_pos: Optional[QPointF] = None
        self._last_pos: Optional[QPointF] = None
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(480, 320)

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        self._engine.render_to_painter(painter, self.rect())
        painter.end()

    def mousePressEvent(self, event: QMouseEvent):
        self._press_pos = event.position()
        self._last_pos = event.position()

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._last_pos is None:
            return
        pos = event.position()
        dx = (pos.x() - self._last_pos.x()) * DRAG_SCALE
        dy = (pos.y() - self._last_pos.y()) * DRAG_SCALE
        self._last_pos = pos
        self._pipeline.controller.orbit(dx, dy)
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent):
        if self._press_pos is not None:
            moved = event.position() - self._press_pos
            if abs(moved.x()) <= CLICK_SLOP_PX and abs(moved.y()) <= CLICK_SLOP_PX:
                x, y = self._engine.widget_to_ndc(event.position(), self.rect())
                self._pipeline.controller.pick(x, y)
        self._press_pos = None
        self._last_pos = None
        self.update()

    def wheelEvent(self, event: QWheelEvent):
        delta = event.angleDelta().y()
        if delta:
            self._pipeline.controller.zoom(1 if delta > 0 else -1)
            self.update()


# --- UI COMPONENTS ---
class ToolButton(QPushButton):
    def __init__(self, tooltip: str, icon_text: str, parent=None, size: int = 56):
        super().__init__(parent)
        self.setText(icon_text)
        self.setToolTip(tooltip)
        self.setFixedSize(size, size)
        self._size = size
        self.setStyleSheet(f"""
            QPushButton {{
                background-color: #1E272E; color: #ECF0F1; border: 2px solid #34495E;
                border-radius: {size // 2}px; font-size: 12px; font-weight: bold;
            }}
            QPushButton:hover {{ background-color: #2C3E50; border: 2px solid #00E5FF; }}
            QPushButton:checked {{ border: 2px solid #27AE60; }}
        """)


class GestureHintWidget(QLabel):
    STYLES = {
        "grab": "#27AE60",
        "holding": "#27AE60",
        "release": "#E67E22",
        "move": "#2980B9",
        "zoom in": "#8E44AD",
        "zoom out": "#8E44AD",
    }

    def __init__(self):
        super().__init__("Waiting for hand...")
        self.setAlignment(Qt.AlignCenter)
        self.setFixedHeight(40)
        self.update_hint(None)

    def update_hint(self, label: Optional[str]):
        self.setText(label.capitalize() if label else "No active gesture")
        bg = self.STYLES.get(label, "#2C3E50")
        self.setStyleSheet(
            f"background: {bg}; color: white; padding: 10px 20px; border-radius: 10px; font-weight: bold;"
        )


# --- MAIN WINDOW ---
class MainWindow(QMainWindow):
    def __init__(self, pipeline: GesturePipeline, engine: RenderEngine):
        super().__init__()
        self._pipeline = pipeline
        self._engine = engine
        self._view_buttons: Dict[str, ToolButton] = {}
        self._init_ui()

    def _init_ui(self):
        self.setWindowTitle("Nebula Gesture Canvas")
        self.resize(1280, 800)
        self.setStyleSheet("QMainWindow { background-color: #0B0F19; }")

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(12, 12, 12, 12)
        main_layout.setSpacing(12)

        self._create_side_panel(main_layout)

        viewport = QVBoxLayout()
        self.scene_widget = SceneWidget(self._pipeline, self._engine)
        viewport.addWidget(self.scene_widget, stretch=1)

        self.exit_preview_btn = QPushButton("Exit preview")
        self.exit_preview_btn.setStyleSheet(
            "QPushButton { background: #2C3E50; color: white; border-radius: 14px; padding: 6px 16px; }"
            "QPushButton:hover { background: #C0392B; }"
        )
        self.exit_preview_btn.clicked.connect(self._on_exit_preview)
        self.exit_preview_btn.setVisible(False)
        viewport.addWidget(self.exit_preview_btn, alignment=Qt.AlignRight)

        main_layout.addLayout(viewport, stretch=1)

        self.status_bar = QStatusBar()
        self.status_bar.setStyleSheet("color: #BDC3C7;")
        self.setStatusBar(self.status_bar)

    def _create_side_panel(self, layout):
        frame = QFrame()
        frame.setFixedWidth(340)
        frame.setStyleSheet("QFrame { background: #141B2D; border-radius: 16px; }")
        l = QVBoxLayout(frame)
        l.setContentsMargins(12, 12, 12, 12)
        l.setSpacing(12)

        self.camera_preview = QLabel("Camera off")
        self.camera_preview.setAlignment(Qt.AlignCenter)
        self.camera_preview.setFixedSize(316, 237)
        self.camera_preview.setStyleSheet("background: black; color: #7F8C8D; border-radius: 8px;")
        l.addWidget(self.camera_preview)

        self.camera_btn = ToolButton("Start or stop the gesture camera", "Cam", size=48)
        self.camera_btn.setCheckable(True)
        l.addWidget(self.camera_btn, alignment=Qt.AlignRight)

        self.gesture_hint = GestureHintWidget()
        l.addWidget(self.gesture_hint)

        views = QHBoxLayout()
        for name in ("front", "top", "side"):
            btn = ToolButton(f"{name.capitalize()} view", name.capitalize(), size=64)
            btn.clicked.connect(lambda ch=False, n=name: self._on_preset_view(n))
            views.addWidget(btn)
            self._view_buttons[name] = btn
        l.addLayout(views)

        help_label = QLabel(
            "✊ Fist: grab the object in front\n"
            "🖐 Open palm: release\n"
            "✌️ Two fingers: orbit\n"
            "🤏 Pinch / spread: zoom out / in"
        )
        help_label.setStyleSheet("color: #95A5A6; font-size: 12px;")
        l.addWidget(help_label)
        l.addStretch()
        layout.addWidget(frame)

    def _on_preset_view(self, name: str):
        self._pipeline.controller.set_preset_view(name)
        self.scene_widget.update()

    def _on_exit_preview(self):
        self._pipeline.controller.release()

    def set_camera_active(self, active: bool):
        self.camera_btn.setChecked(active)
        self.camera_btn.setToolTip("Stop camera" if active else "Start camera")
        if not active:
            self.camera_preview.clear()
            self.camera_preview.setText("Camera off")
            self.gesture_hint.update_hint(None)

    def set_camera_frame(self, image: QImage):
        pix = QPixmap.fromImage(image).scaled(
            self.camera_preview.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation
        )
        self.camera_preview.setPixmap(pix)

    def update_gesture_hint(self, label: Optional[str]):
        self.gesture_hint.update_hint(label)

    def refresh(self):
        self.exit_preview_btn.setVisible(self._pipeline.preview_mode)
        self.scene_widget.update()
