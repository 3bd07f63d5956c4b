"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from bukvar.core.grid import GRID_COLS, GRID_ROWS
from bukvar.core.progress import default_progress_dir

logger = logging.getLogger(__name__)

DEFAULT_VOICE_LOCALE = "ru-RU"


@dataclass(frozen=True)
class Settings:
    home_dir: Path
    muted: bool = False
    voice_locale: str = DEFAULT_VOICE_LOCALE
    grid_cols: int = GRID_COLS
    grid_rows: int = GRID_ROWS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        home = env.get("BUKVAR_HOME")
        return cls(
            home_dir=Path(home).expanduser() if home else default_progress_dir(),
            muted=env.get("BUKVAR_MUTE") == "1",
            voice_locale=env.get("BUKVAR_VOICE_LOCALE") or DEFAULT_VOICE_LOCALE,
            grid_cols=_positive_int(env, "BUKVAR_GRID_COLS", GRID_COLS),
            grid_rows=_positive_int(env, "BUKVAR_GRID_ROWS", GRID_ROWS),
        )


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value
