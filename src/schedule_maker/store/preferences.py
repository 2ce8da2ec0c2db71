# src/schedule_maker/store/preferences.py

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..core.models import PaletteMode
from ..core.ports import KeyValueStorage

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "schedule-maker-settings"


@dataclass(slots=True, frozen=True)
class Preferences:
    dark_mode: bool = False
    palette_mode: PaletteMode = PaletteMode.PASTEL


class PreferencesStore:
    """Global display preferences, persisted independently of the schedules."""

    def __init__(self, storage: KeyValueStorage | None = None) -> None:
        self._storage = storage
        self._prefs = self._load()

    @property
    def current(self) -> Preferences:
        return self._prefs

    def _load(self) -> Preferences:
        if self._storage is None:
            return Preferences()
        try:
            raw = self._storage.get(PREFERENCES_KEY)
        except Exception:
            logger.exception("Failed to load preferences")
            return Preferences()
        if not isinstance(raw, dict):
            return Preferences()
        try:
            mode = PaletteMode(raw.get("paletteMode", PaletteMode.PASTEL))
        except ValueError:
            mode = PaletteMode.PASTEL
        return Preferences(dark_mode=bool(raw.get("darkMode", False)), palette_mode=mode)

    def _save(self, prefs: Preferences) -> None:
        self._prefs = prefs
        if self._storage is None:
            return
        try:
            self._storage.put(
                PREFERENCES_KEY,
                {"darkMode": prefs.dark_mode, "paletteMode": prefs.palette_mode.value},
            )
        except Exception:
            logger.exception("Failed to persist preferences")

    def toggle_dark_mode(self) -> bool:
        self._save(replace(self._prefs, dark_mode=not self._prefs.dark_mode))
        return self._prefs.dark_mode

    def set_palette_mode(self, mode: PaletteMode | str) -> None:
        self._save(replace(self._prefs, palette_mode=PaletteMode(mode)))
