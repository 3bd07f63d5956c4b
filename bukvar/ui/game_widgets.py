"""Game screen widgets: grid cells, keyboard tiles, step dots and the finish overlay."""

from __future__ import annotations

import json
from typing import Callable, List, Optional

from PySide6.QtCore import QByteArray, QMimeData, QPoint, Qt, Signal
from PySide6.QtGui import QColor, QDrag, QMouseEvent, QPainter, QPen
from PySide6.QtWidgets import (
    QApplication,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from bukvar.core.grid import KEYBOARD_AREA, DragPayload, DropTarget, Origin, Tile
from bukvar.core.scoring import MAX_STARS
from bukvar.ui.colors import GameColors, blend_hex, tile_colors

KEYBOARD_LAYOUT = [
    "ЙЦУКЕНГШЩЗХЪ",
    "ФЫВАПРОЛДЖЭ",
    "ЯЧСМИТЬБЮЁ",
]

PAYLOAD_MIME = "application/x-bukvar-tile"

DropHandler = Callable[[DragPayload, DropTarget], None]


def payload_to_mime(payload: DragPayload) -> QMimeData:
    data = {
        "origin": payload.origin.value,
        "char": payload.char,
        "tile_id": payload.tile_id,
        "source_index": payload.source_index,
    }
    mime = QMimeData()
    mime.setData(PAYLOAD_MIME, QByteArray(json.dumps(data).encode("utf-8")))
    return mime


def payload_from_mime(mime: QMimeData) -> Optional[DragPayload]:
    if not mime.hasFormat(PAYLOAD_MIME):
        return None
    try:
        data = json.loads(bytes(mime.data(PAYLOAD_MIME)).decode("utf-8"))
        return DragPayload(
            origin=Origin(data["origin"]),
            char=str(data["char"]),
            tile_id=data.get("tile_id"),
            source_index=data.get("source_index"),
        )
    except (ValueError, KeyError, TypeError):
        return None


def _tile_style(char: str, font_px: int) -> str:
    fill, edge = tile_colors(char)
    return f"""
        QLabel {{
            background: {fill};
            color: {GameColors.TILE_TEXT};
            border: none;
            border-bottom: 4px solid {edge};
            border-radius: 8px;
            font-size: {font_px}px;
            font-weight: 800;
        }}
        QLabel:disabled {{ background: {blend_hex(fill, GameColors.BG, 0.35)}; }}
    """


class _DragSource(QLabel):
    """Label that starts a tile drag once the pointer has moved far enough."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._press_pos: Optional[QPoint] = None
        self.on_begin: Optional[Callable[[DragPayload], None]] = None
        self.on_drop: Optional[DropHandler] = None
        self.setAlignment(Qt.AlignCenter)

    def drag_payload(self) -> Optional[DragPayload]:
        return None

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.LeftButton:
            self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._press_pos is None or not (event.buttons() & Qt.LeftButton):
            return
        distance = (event.position().toPoint() - self._press_pos).manhattanLength()
        if distance < QApplication.startDragDistance():
            return
        self._press_pos = None
        payload = self.drag_payload()
        if payload is None:
            return
        if self.on_begin is not None:
            self.on_begin(payload)

        drag = QDrag(self)
        drag.setMimeData(payload_to_mime(payload))
        # ghost keeps the size of the tile that was picked up
        drag.setPixmap(self.grab())
        drag.setHotSpot(QPoint(self.width() // 2, self.height() // 2))
        result = drag.exec(Qt.MoveAction)
        if result == Qt.IgnoreAction and self.on_drop is not None:
            self.on_drop(payload, None)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._press_pos = None
        super().mouseReleaseEvent(event)


class CellWidget(_DragSource):
    """One grid cell. Accepts dropped tiles and can be dragged when it holds one."""

    def __init__(self, index: int, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.index = index
        self._tile: Optional[Tile] = None
        self._hover = False
        self._font_px = 28
        self.setAcceptDrops(True)
        self.setMinimumSize(36, 36)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._apply_style()

    def set_tile(self, tile: Optional[Tile]) -> None:
        if tile == self._tile:
            return
        self._tile = tile
        self.setText(tile.char.upper() if tile else "")
        self._apply_style()

    def drag_payload(self) -> Optional[DragPayload]:
        if self._tile is None:
            return None
        return DragPayload(Origin.GRID, self._tile.char, self._tile.id, self.index)

    def dragEnterEvent(self, event) -> None:
        if event.mimeData().hasFormat(PAYLOAD_MIME):
            self._hover = True
            self._apply_style()
            event.acceptProposedAction()

    def dragLeaveEvent(self, event) -> None:
        self._hover = False
        self._apply_style()

    def dropEvent(self, event) -> None:
        self._hover = False
        self._apply_style()
        payload = payload_from_mime(event.mimeData())
        if payload is None:
            return
        event.acceptProposedAction()
        if self.on_drop is not None:
            self.on_drop(payload, self.index)

    def _apply_style(self) -> None:
        if self._tile is not None:
            self.setStyleSheet(_tile_style(self._tile.char, self._font_px))
            return
        background = GameColors.CELL_HOVER if self._hover else GameColors.CELL
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {background};
                border: 1px solid {GameColors.CELL_BORDER};
                border-radius: 3px;
            }}
            """
        )


class KeyTile(_DragSource):
    """A keyboard letter; every drag from it creates a new tile."""

    def __init__(self, char: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.char = char
        self.setText(char)
        self.setMinimumSize(32, 32)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setStyleSheet(_tile_style(char, 22))

    def drag_payload(self) -> Optional[DragPayload]:
        return DragPayload(Origin.KEYBOARD, self.char)


class KeyboardPanel(QFrame):
    """Letter keyboard. Grid tiles dropped here are removed from the grid."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.on_drop: Optional[DropHandler] = None
        self.keys: List[KeyTile] = []
        self.setAcceptDrops(True)
        self.setObjectName("keyboardPanel")
        self.setStyleSheet(
            f"""
            QFrame#keyboardPanel {{
                background: {GameColors.BG};
                border: 1px solid {GameColors.PANEL_BORDER};
                border-radius: 12px;
            }}
            """
        )
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(2)
        for row in KEYBOARD_LAYOUT:
            row_layout = QHBoxLayout()
            row_layout.setSpacing(2)
            row_layout.addStretch(1)
            for char in row:
                key = KeyTile(char)
                self.keys.append(key)
                row_layout.addWidget(key, 4)
            row_layout.addStretch(1)
            layout.addLayout(row_layout)

    def dragEnterEvent(self, event) -> None:
        if event.mimeData().hasFormat(PAYLOAD_MIME):
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:
        payload = payload_from_mime(event.mimeData())
        if payload is None:
            return
        event.acceptProposedAction()
        if self.on_drop is not None:
            self.on_drop(payload, KEYBOARD_AREA)


class StepIndicator(QWidget):
    """Row of dots, one per task: green when done, lighter for the current task."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._done: List[bool] = []
        self._current = 0
        self.setFixedHeight(48)

    def set_state(self, done: List[bool], current: int) -> None:
        self._done = list(done)
        self._current = current
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if not self._done:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        size = 28
        spacing = 16
        total = len(self._done) * (size + spacing) - spacing
        x = max(0, (self.width() - total) // 2)
        y = (self.height() - size) // 2
        for i, done in enumerate(self._done):
            if done:
                fill = GameColors.STEP_DONE
            elif i == self._current:
                fill = GameColors.STEP_CURRENT
            else:
                fill = GameColors.STEP_PENDING
            painter.setBrush(QColor(fill))
            painter.setPen(QPen(QColor(GameColors.PANEL_BORDER), 2))
            painter.drawEllipse(x, y, size, size)
            x += size + spacing


class FinishedOverlay(QWidget):
    """Covers the board when a session ends and shows the earned stars."""

    closed = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.setStyleSheet(f"background: {GameColors.BG};")

        card = QFrame()
        card.setObjectName("finishedCard")
        card.setStyleSheet(
            f"""
            QFrame#finishedCard {{
                background: {GameColors.PANEL};
                border: 1px solid {GameColors.PANEL_BORDER};
                border-radius: 16px;
            }}
            """
        )
        content = QVBoxLayout(card)
        content.setContentsMargins(32, 32, 32, 32)
        content.setSpacing(24)

        title = QLabel("Молодец!")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 36px; font-weight: 800;")
        content.addWidget(title)

        self._stars_label = QLabel()
        self._stars_label.setAlignment(Qt.AlignCenter)
        self._stars_label.setTextFormat(Qt.RichText)
        content.addWidget(self._stars_label)

        next_button = QPushButton("Дальше")
        next_button.setCursor(Qt.PointingHandCursor)
        next_button.setStyleSheet(
            f"""
            QPushButton {{
                background: {GameColors.BUTTON_NEXT};
                color: white;
                padding: 14px 48px;
                border: none;
                border-radius: 12px;
                font-size: 20px;
                font-weight: 700;
            }}
            """
        )
        next_button.clicked.connect(lambda: (self.hide(), self.closed.emit()))
        content.addWidget(next_button, 0, Qt.AlignCenter)

        layout.addWidget(card, 0, 0, Qt.AlignCenter)
        self.hide()

    def show_stars(self, stars: int) -> None:
        parts = []
        for i in range(1, MAX_STARS + 1):
            color = GameColors.STAR_ON if i <= stars else GameColors.STAR_OFF
            parts.append(f'<span style="color: {color}; font-size: 64px;">★</span>')
        self._stars_label.setText("&nbsp;".join(parts))
        self.setGeometry(self.parentWidget().rect() if self.parentWidget() else self.rect())
        self.raise_()
        self.show()
