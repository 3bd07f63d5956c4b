"""Application entry point and setup for the Bukvar letter game."""

import logging
import sys
from typing import List

from PySide6.QtCore import QTimer
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from bukvar.audio.effects import NullSoundPlayer, SoundPlayer
from bukvar.audio.speech import NullSpeechBackend, SpeechBackend, SpeechEngine
from bukvar.core.content import ContentRepository
from bukvar.core.progress import ProgressStore
from bukvar.core.session import GameController
from bukvar.core.settings import Settings
from bukvar.ui.game_window import GameWindow
from bukvar.ui.qt_scheduler import QtScheduler


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_sound_player(settings: Settings) -> SoundPlayer:
    if settings.muted:
        return NullSoundPlayer()
    try:
        from bukvar.audio.player import QtSoundPlayer

        return QtSoundPlayer()
    except Exception as e:
        logging.info(f"Sound effects unavailable: {e}")
        return NullSoundPlayer()


def create_speech_backend(settings: Settings) -> SpeechBackend:
    if settings.muted:
        return NullSpeechBackend()
    try:
        from bukvar.audio.qt_speech import QtSpeechBackend

        return QtSpeechBackend()
    except Exception as e:
        logging.info(f"Speech unavailable: {e}")
        return NullSpeechBackend()


def pick_letter(argv: List[str], content: ContentRepository) -> str:
    """First command-line argument, else the first letter taught."""
    if len(argv) > 1 and argv[1].strip():
        return argv[1].strip().upper()
    return content.letters()[0]


def run() -> None:
    """Initialize the application, wire the game together, and start the window."""
    configure_logging()
    settings = Settings.from_env()
    app = QApplication(sys.argv)
    app.setApplicationName("Bukvar")
    app.setApplicationDisplayName("Букварь")

    content = ContentRepository()
    progress_store = ProgressStore(settings.home_dir)
    speech = SpeechEngine(create_speech_backend(settings), settings.voice_locale)
    controller = GameController(
        content=content,
        progress=progress_store,
        sounds=create_sound_player(settings),
        speech=speech,
        scheduler=QtScheduler(),
        grid_cols=settings.grid_cols,
        grid_rows=settings.grid_rows,
    )

    letter = pick_letter(sys.argv, content)
    window = GameWindow(controller, letter, settings.grid_cols, settings.grid_rows)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        window.setGeometry(screen.availableGeometry())
    window.show()

    speech.warm_up()
    QTimer.singleShot(0, window.start)

    sys.exit(app.exec())
