from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from bukvar.core.scoring import MAX_STARS

logger = logging.getLogger(__name__)

PROGRESS_FILE_NAME = "progress.json"


def default_progress_dir() -> Path:
    return Path.home() / ".bukvar"


class ProgressStore:
    """Star rating per letter, persisted as JSON across app restarts.

    File: ~/.bukvar/progress.json unless another directory is given. Every
    finished session overwrites the letter's rating, even with a lower one.
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._file_path = (directory or default_progress_dir()) / PROGRESS_FILE_NAME
        self._ratings = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def read_all(self) -> Dict[str, int]:
        return dict(self._ratings)

    def get(self, letter: str) -> Optional[int]:
        return self._ratings.get(letter)

    def save_letter_score(self, letter: str, stars: int) -> None:
        self._ratings[letter] = max(0, min(MAX_STARS, int(stars)))
        self._save()

    def clear(self) -> None:
        """Forget every letter's rating."""
        self._ratings = {}
        try:
            self._file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove progress file %s: %s", self._file_path, e)

    def _load(self) -> Dict[str, int]:
        ratings: Dict[str, int] = {}
        if not self._file_path.exists():
            return ratings
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return ratings

        if not isinstance(payload, dict):
            logger.warning("Ignoring progress file %s: expected a JSON object", self._file_path)
            return ratings
        for letter, value in payload.items():
            # bool is an int subclass; true/false are not ratings
            if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_STARS:
                ratings[str(letter)] = value
        return ratings

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                json.dumps(self._ratings, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
