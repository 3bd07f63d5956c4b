from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import yaml

TASKS_PER_KIND = 3


class TaskKind(Enum):
    SYLLABLE = "syllable"
    WORD = "word"


@dataclass(frozen=True)
class Task:
    text: str
    kind: TaskKind


@dataclass(frozen=True)
class LetterContent:
    letter: str
    syllables: List[str]
    words: List[str]


def default_content_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "letters.yaml"


class ContentRepository:
    """Read-only per-letter syllable and word lists loaded from YAML."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or default_content_path()
        self._letters = self._load_letters()

    def letters(self) -> List[str]:
        """Letters in the order they are taught."""
        return list(self._letters)

    def get(self, letter: str) -> LetterContent:
        return self._letters[letter]

    def __contains__(self, letter: object) -> bool:
        return letter in self._letters

    def _load_letters(self) -> Dict[str, LetterContent]:
        if not self._path.exists():
            raise FileNotFoundError(f"Content file not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("letters"), dict):
            raise ValueError(f"{self._path.name}: expected YAML with a 'letters' mapping")

        letters: Dict[str, LetterContent] = {}
        for letter, entry in raw["letters"].items():
            letter = str(letter).strip()
            if not isinstance(entry, dict):
                raise ValueError(f"{self._path.name}: letter {letter!r} must map to 'syllables' and 'words'")
            syllables = _clean_items(entry.get("syllables"))
            words = _clean_items(entry.get("words"))
            if len(syllables) < TASKS_PER_KIND:
                raise ValueError(
                    f"{self._path.name}: letter {letter!r} needs at least {TASKS_PER_KIND} syllables"
                )
            if len(words) < TASKS_PER_KIND:
                raise ValueError(
                    f"{self._path.name}: letter {letter!r} needs at least {TASKS_PER_KIND} words"
                )
            letters[letter] = LetterContent(letter=letter, syllables=syllables, words=words)

        if not letters:
            raise ValueError(f"{self._path.name}: no letters defined")
        return letters


def _clean_items(items: object) -> List[str]:
    if not isinstance(items, list):
        return []
    cleaned: List[str] = []
    for item in items:
        text = str(item).strip()
        # duplicates would let the same task be drawn twice
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def draw_tasks(content: LetterContent, rng: Optional[random.Random] = None) -> List[Task]:
    """Pick three distinct syllables followed by three distinct words."""
    rng = rng or random.Random()
    syllables = rng.sample(content.syllables, min(TASKS_PER_KIND, len(content.syllables)))
    words = rng.sample(content.words, min(TASKS_PER_KIND, len(content.words)))
    return [Task(text, TaskKind.SYLLABLE) for text in syllables] + [
        Task(text, TaskKind.WORD) for text in words
    ]
