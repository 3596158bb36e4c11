from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, List, Optional
from pocketduel.core.logging import logger

SETTINGS_FILENAME = ".pocketduel_settings.json"
ENEMY_STRATEGIES = {"random", "first", "strongest"}
LOG_LEVELS = {"DEBUG","INFO","WARN","ERROR"}

@dataclass
class SettingsData:
    log_level: str = "WARN"             # DEBUG / INFO / WARN / ERROR
    critical_chance: float = 1 / 16     # probability of a critical hit per damaging move
    critical_multiplier: float = 1.5
    enemy_strategy: str = "random"      # random / first / strongest
    wild_level_min: int = 10
    wild_level_max: int = 19
    single_active_battle: bool = False  # reject start while the player has a battle in progress
    recent_log_limit: int = 5           # log entries included in battle views

    def normalize(self):
        if self.log_level not in LOG_LEVELS:
            self.log_level = "WARN"
        if not 0.0 <= float(self.critical_chance) <= 1.0:
            self.critical_chance = 1 / 16
        if float(self.critical_multiplier) < 1.0:
            self.critical_multiplier = 1.5
        if self.enemy_strategy not in ENEMY_STRATEGIES:
            self.enemy_strategy = "random"
        self.wild_level_min = max(1, int(self.wild_level_min))
        if int(self.wild_level_max) < self.wild_level_min:
            self.wild_level_max = self.wild_level_min
        self.recent_log_limit = max(0, int(self.recent_log_limit))

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                # Backfill missing fields (migration safe)
                field_names = {f.name for f in fields(SettingsData)}
                data_kwargs = {name: raw[name] for name in field_names if name in raw}
                data = SettingsData(**data_kwargs)
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        self.path.write_text(json.dumps(asdict(self.data), indent=2), encoding="utf-8")
        logger.debug("SettingsSaved", path=str(self.path))

    def update(self, **changes):
        for name, value in changes.items():
            if not hasattr(self.data, name):
                raise AttributeError(f"Unknown setting '{name}'")
            setattr(self.data, name, value)
        self.data.normalize()
        self.apply_log_level()
        self._notify()

    def apply_log_level(self):
        logger.set_level(self.data.log_level)  # type: ignore[arg-type]

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)
