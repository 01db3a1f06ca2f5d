# src/sanity/gui/confetti_overlay.py
import time
from typing import List

from PySide6.QtCore import Qt, QTimer, QRectF
from PySide6.QtGui import QPainter, QColor
from PySide6.QtWidgets import QWidget

from sanity.core.shipped_notifier import ConfettiBurst


class ConfettiOverlay(QWidget):
    """
    A transparent, click-through layer over the main window that plays
    confetti bursts. Uses a QTimer for manual frame updates, like the other
    animated widgets, and hides itself once the last particle has faded.
    """

    def __init__(self, parent: QWidget):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self._bursts: List[tuple[ConfettiBurst, float]] = []

        self.animation_timer = QTimer(self)
        self.animation_timer.setInterval(16)  # ~60 FPS
        self.animation_timer.timeout.connect(self._update_animation_frame)
        self.hide()

    def play(self, burst: ConfettiBurst):
        self._bursts.append((burst, time.monotonic()))
        self.setGeometry(self.parentWidget().rect())
        self.raise_()
        self.show()
        if not self.animation_timer.isActive():
            self.animation_timer.start()

    def _update_animation_frame(self):
        now = time.monotonic()
        self._bursts = [(b, started) for b, started in self._bursts if not b.is_finished(now - started)]
        if not self._bursts:
            self.animation_timer.stop()
            self.hide()
            return
        self.update()

    def paintEvent(self, event):
        if not self._bursts:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(Qt.PenStyle.NoPen)
        width, height = self.width(), self.height()
        now = time.monotonic()

        for burst, started in self._bursts:
            t = now - started
            for particle in burst.alive_at(t):
                x, y = particle.position_at(t)
                painter.save()
                painter.setOpacity(particle.opacity_at(t))
                painter.translate(x * width, y * height)
                painter.rotate(particle.rotation_at(t))
                painter.setBrush(QColor(particle.color))
                size = particle.size
                painter.drawRect(QRectF(-size / 2, -size / 4, size, size / 2))
                painter.restore()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.update()
