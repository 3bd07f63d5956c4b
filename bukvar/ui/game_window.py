from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from bukvar.core.grid import DragPayload, DropTarget
from bukvar.core.matching import normalize_target
from bukvar.core.session import GameController, Phase, Session
from bukvar.ui.colors import GameColors
from bukvar.ui.game_widgets import CellWidget, FinishedOverlay, KeyboardPanel, StepIndicator


def _button_style(background: str, hover: str) -> str:
    return f"""
        QPushButton {{
            background: {background};
            color: white;
            padding: 10px 16px;
            border: none;
            border-radius: 10px;
            font-size: 16px;
            font-weight: 700;
        }}
        QPushButton:hover {{ background: {hover}; }}
    """


class GameWindow(QMainWindow):
    """Spelling board for one letter: header, placement grid, step dots and keyboard.

    The window only forwards gestures and button presses to the controller
    and repaints itself from the session after every handled message.
    """

    def __init__(self, controller: GameController, letter: str, cols: int, rows: int) -> None:
        super().__init__()
        self._controller = controller
        self._letter = letter
        self._cols = cols
        self._rows = rows
        self._cells: List[CellWidget] = []
        self._task_label: Optional[QLabel] = None
        self._repeat_button: Optional[QPushButton] = None
        self._steps: Optional[StepIndicator] = None
        self._keyboard: Optional[KeyboardPanel] = None
        self._overlay: Optional[FinishedOverlay] = None

        self.setWindowTitle(f"Букварь: {letter}")
        self._build_ui()
        self._controller.add_listener(self._refresh)

    def start(self) -> None:
        self._controller.start(self._letter)

    def _build_ui(self) -> None:
        root = QWidget()
        root.setStyleSheet(f"background: {GameColors.BG};")
        layout = QVBoxLayout(root)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(16)

        header = QHBoxLayout()
        back_button = QPushButton("←")
        back_button.setStyleSheet(_button_style(GameColors.BUTTON_BACK, GameColors.CELL_HOVER))
        back_button.clicked.connect(self._leave)
        header.addWidget(back_button)
        header.addStretch(1)

        self._task_label = QLabel()
        self._task_label.setAlignment(Qt.AlignCenter)
        self._task_label.setStyleSheet(
            f"color: {GameColors.TEXT_PRIMARY}; font-size: 26px; font-weight: 800; letter-spacing: 4px;"
        )
        header.addWidget(self._task_label)
        header.addStretch(1)

        self._repeat_button = QPushButton("Повторить")
        self._repeat_button.setToolTip("Повторить задание")
        self._repeat_button.setStyleSheet(_button_style(GameColors.BUTTON, GameColors.BUTTON_HOVER))
        self._repeat_button.clicked.connect(self._controller.reannounce)
        header.addWidget(self._repeat_button)
        layout.addLayout(header)

        board = QFrame()
        board.setObjectName("board")
        board.setStyleSheet(
            f"""
            QFrame#board {{
                background: {GameColors.BG};
                border: 1px solid {GameColors.PANEL_BORDER};
                border-radius: 12px;
            }}
            """
        )
        grid = QGridLayout(board)
        grid.setContentsMargins(16, 16, 16, 16)
        grid.setSpacing(2)
        for index in range(self._cols * self._rows):
            cell = CellWidget(index)
            cell.on_begin = self._begin_move
            cell.on_drop = self._end_move
            self._cells.append(cell)
            grid.addWidget(cell, index // self._cols, index % self._cols)
        layout.addWidget(board, 1)

        self._steps = StepIndicator()
        layout.addWidget(self._steps)

        self._keyboard = KeyboardPanel()
        self._keyboard.on_drop = self._end_move
        for key in self._keyboard.keys:
            key.on_begin = self._begin_move
            key.on_drop = self._end_move
        layout.addWidget(self._keyboard)

        self.setCentralWidget(root)
        self._overlay = FinishedOverlay(root)
        self._overlay.closed.connect(self._leave)

    def _begin_move(self, payload: DragPayload) -> None:
        self._controller.begin_move(payload)

    def _end_move(self, payload: DragPayload, target: DropTarget) -> None:
        self._controller.end_move(payload, target)

    def _refresh(self, session: Optional[Session]) -> None:
        if session is None:
            return
        if session.phase is Phase.ERROR:
            self._task_label.setText(f"Нет заданий для буквы {session.letter}")
            self._set_input_enabled(False)
            self._repeat_button.setEnabled(False)
            return

        for cell in self._cells:
            cell.set_tile(session.grid.get(cell.index))
        task = session.current_task
        self._task_label.setText(normalize_target(task.text).upper() if task else "")
        self._steps.set_state(session.completed_flags, session.current_index)
        self._set_input_enabled(session.accepts_input)
        self._repeat_button.setEnabled(session.phase is Phase.AWAITING_INPUT)

        if session.is_finished and session.stars is not None and not self._overlay.isVisible():
            self._overlay.show_stars(session.stars)

    def _set_input_enabled(self, enabled: bool) -> None:
        for cell in self._cells:
            cell.setEnabled(enabled)
        for key in self._keyboard.keys:
            key.setEnabled(enabled)

    def _leave(self) -> None:
        self.close()

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self._overlay is not None and self._overlay.isVisible():
            self._overlay.setGeometry(self.centralWidget().rect())

    def closeEvent(self, event: QCloseEvent) -> None:
        """Drop the session when the window goes away; unfinished sessions save nothing."""
        self._controller.exit()
        super().closeEvent(event)
