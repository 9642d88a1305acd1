"""Application icon helpers."""
from __future__ import annotations

from .config import StyleConfig


def create_icon(size: int = 64, style: StyleConfig | None = None):  # pragma: no cover - requires PyQt at runtime
    """Create the :class:`~PyQt5.QtGui.QIcon` of the inspector window.

    The import is performed lazily so that automated tests do not require a
    graphical backend.
    """

    try:
        from PyQt5.QtCore import Qt
        from PyQt5.QtGui import QBrush, QColor, QFont, QIcon, QPainter, QPen, QPixmap
    except Exception as exc:  # pragma: no cover - depends on environment
        raise RuntimeError("PyQt5 is required to generate the application icon") from exc

    style = style or StyleConfig()

    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.transparent)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing)
    painter.setBrush(QBrush(QColor(style.accent_secondary)))
    painter.setPen(Qt.NoPen)
    painter.drawRoundedRect(4, 4, size - 8, size - 8, size / 6, size / 6)

    painter.setPen(QPen(QColor(style.fg_secondary), 2))
    painter.setFont(QFont("Arial", size // 3, QFont.Bold))
    painter.drawText(pixmap.rect(), Qt.AlignCenter, "K/V")
    painter.end()

    return QIcon(pixmap)


__all__ = ["create_icon"]
