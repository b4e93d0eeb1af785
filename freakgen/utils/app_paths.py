"""App path helpers (cross-platform).

Environment overrides (useful for portable/dev launches):
- FREAKGEN_CFG_DIR: base dir holding settings.json
- FREAKGEN_LIBRARY: preset library dir (overrides the saved setting)
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "FreakGEN"


def _env_path(name: str) -> Path | None:
    v = os.environ.get(name)
    if not v:
        return None
    return Path(os.path.expanduser(v)).resolve()


def get_app_data_dir() -> Path:
    """Base app data dir."""
    cfg_dir = _env_path("FREAKGEN_CFG_DIR")
    if cfg_dir is not None:
        return cfg_dir
    return Path(user_data_dir(APP_NAME, appauthor=False, roaming=True)).resolve()


def get_settings_path() -> Path:
    return get_app_data_dir() / "settings.json"


def get_log_path() -> Path:
    return get_app_data_dir() / "freakgen.log"


def get_default_library_dir() -> Path:
    """Preset library dir: FREAKGEN_LIBRARY, else ~/Documents/FreakGEN_Library."""
    lib_dir = _env_path("FREAKGEN_LIBRARY")
    if lib_dir is not None:
        return lib_dir
    return Path.home() / "Documents" / "FreakGEN_Library"
