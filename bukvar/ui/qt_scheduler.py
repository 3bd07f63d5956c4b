from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QTimer


class QtScheduler:
    """Runs delayed callbacks on the Qt event loop."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> None:
        QTimer.singleShot(max(0, int(delay_ms)), callback)
