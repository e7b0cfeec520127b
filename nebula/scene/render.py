from typing import List, Optional

import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPolygonF

from .camera import OrbitCamera
from .model import InteractableObject, SceneRegistry
from .rig import CameraRig


class RenderEngine:
    """Wireframe preview of the scene: each interactable drawn as a projected quad."""

    def __init__(self, camera: OrbitCamera, registry: SceneRegistry, rig: Optional[CameraRig] = None):
        self.camera = camera
        self.registry = registry
        self.rig = rig
        self.background = QColor("#050510")
        self.frame_color = QColor("#00E5FF")
        self.focus_color = QColor("#FFC312")
        self.grid_extent = 20
        self.grid_step = 2

    def ndc_to_widget(self, ndc, rect: QRectF) -> QPointF:
        x = rect.left() + (ndc[0] + 1.0) / 2.0 * rect.width()
        y = rect.top() + (1.0 - ndc[1]) / 2.0 * rect.height()
        return QPointF(x, y)

    def widget_to_ndc(self, pos: QPointF, rect: QRectF):
        x = (pos.x() - rect.left()) / rect.width() * 2.0 - 1.0
        y = 1.0 - (pos.y() - rect.top()) / rect.height() * 2.0
        return x, y

    def render_to_painter(self, painter: QPainter, target_rect: QRectF):
        painter.save()
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(target_rect, self.background)

        if target_rect.height() > 0:
            self.camera.aspect = target_rect.width() / target_rect.height()

        self._draw_ground(painter, target_rect)

        focus = self.rig.focus_target if self.rig else None
        objects = list(self.registry.interactable_objects())
        # Painter's algorithm: far to near
        objects.sort(key=lambda o: -float(np.linalg.norm(o.position - self.camera.position)))
        for obj in objects:
            focused = focus is not None and obj.handle == focus.handle
            self._draw_object(painter, obj, target_rect, focused)

        painter.restore()

    def _project_polyline(self, points, rect: QRectF) -> Optional[List[QPointF]]:
        projected = []
        for p in points:
            ndc = self.camera.project(p)
            if ndc is None or abs(ndc[2]) > 1.0:
                return None
            projected.append(self.ndc_to_widget(ndc, rect))
        return projected

    def _draw_ground(self, painter: QPainter, rect: QRectF):
        pen = QPen(QColor(255, 255, 255, 25))
        pen.setWidthF(1.0)
        painter.setPen(pen)
        e = self.grid_extent
        y = -10.0
        for v in range(-e, e + 1, self.grid_step):
            for a, b in (((v, y, -e), (v, y, e)), ((-e, y, v), (e, y, v))):
                line = self._project_polyline([np.array(a, float), np.array(b, float)], rect)
                if line:
                    painter.drawLine(line[0], line[1])

    def _draw_object(self, painter: QPainter, obj: InteractableObject, rect: QRectF, focused: bool):
        quad = self._project_polyline(obj.corners(), rect)
        if not quad:
            return
        color = self.focus_color if focused else self.frame_color
        fill = QColor(color)
        # Back faces dimmer
        facing_camera = float(np.dot(self.camera.view_direction(), obj.normal)) < 0
        fill.setAlpha(90 if facing_camera else 30)

        pen = QPen(color, 3 if focused else 1.5)
        painter.setPen(pen)
        painter.setBrush(QBrush(fill))
        painter.drawPolygon(QPolygonF(quad))

        if focused:
            painter.setPen(Qt.NoPen)
            painter.setBrush(Qt.white)
            center = self._project_polyline([obj.position], rect)
            if center:
                painter.drawEllipse(center[0], 3, 3)
