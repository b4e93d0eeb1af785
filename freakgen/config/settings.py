"""
User settings store.

Persists library location, history depth and MIDI preferences.

Storage: <app data dir>/settings.json (see freakgen.utils.app_paths)
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from . import DEFAULT_HISTORY_DEPTH, MAX_HISTORY_DEPTH
from ..utils.app_paths import get_default_library_dir, get_settings_path
from ..utils.logger import logger


def clamp_history_depth(depth: Any) -> int:
    """Coerce a history depth to 1..MAX_HISTORY_DEPTH (default on garbage)."""
    try:
        depth = int(depth)
    except (TypeError, ValueError):
        return DEFAULT_HISTORY_DEPTH
    return max(1, min(MAX_HISTORY_DEPTH, depth))


@dataclass
class Settings:
    library_path: Path = field(default_factory=get_default_library_dir)
    history_depth: int = DEFAULT_HISTORY_DEPTH
    midi_port: Optional[str] = None
    emulate_synth: bool = False
    debug: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["library_path"] = str(self.library_path)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        defaults = cls()
        library_path = data.get("library_path")
        return cls(
            library_path=Path(library_path).expanduser() if library_path else defaults.library_path,
            history_depth=clamp_history_depth(data.get("history_depth", DEFAULT_HISTORY_DEPTH)),
            midi_port=data.get("midi_port") or None,
            emulate_synth=bool(data.get("emulate_synth", False)),
            debug=bool(data.get("debug", False)),
        )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk. Missing or unreadable files give defaults."""
    path = Path(path) if path else get_settings_path()
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Unreadable settings file {path}, using defaults", details=str(e))
        return Settings()
    if not isinstance(data, dict):
        logger.warning(f"Settings file {path} is not an object, using defaults")
        return Settings()
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Save settings to disk and return the file path."""
    path = Path(path) if path else get_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    return path
