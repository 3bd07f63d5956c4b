"""Tests for bukvar.core.settings – environment overrides."""

from __future__ import annotations

from pathlib import Path

from bukvar.core.grid import GRID_COLS, GRID_ROWS
from bukvar.core.progress import default_progress_dir
from bukvar.core.settings import Settings


class TestSettingsFromEnv:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.home_dir == default_progress_dir()
        assert settings.muted is False
        assert settings.voice_locale == "ru-RU"
        assert (settings.grid_cols, settings.grid_rows) == (GRID_COLS, GRID_ROWS)

    def test_overrides(self, tmp_path: Path):
        settings = Settings.from_env(
            {
                "BUKVAR_HOME": str(tmp_path),
                "BUKVAR_MUTE": "1",
                "BUKVAR_VOICE_LOCALE": "ru-UA",
                "BUKVAR_GRID_COLS": "8",
                "BUKVAR_GRID_ROWS": "3",
            }
        )
        assert settings.home_dir == tmp_path
        assert settings.muted is True
        assert settings.voice_locale == "ru-UA"
        assert (settings.grid_cols, settings.grid_rows) == (8, 3)

    def test_mute_needs_exact_one(self):
        assert Settings.from_env({"BUKVAR_MUTE": "yes"}).muted is False

    def test_bad_grid_values_fall_back(self, caplog):
        settings = Settings.from_env({"BUKVAR_GRID_COLS": "wide", "BUKVAR_GRID_ROWS": "0"})
        assert (settings.grid_cols, settings.grid_rows) == (GRID_COLS, GRID_ROWS)
        assert "BUKVAR_GRID_COLS" in caplog.text
        assert "BUKVAR_GRID_ROWS" in caplog.text
