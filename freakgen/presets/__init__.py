"""
Presets module - preset library, .freakgen exchange files and backups.
"""

from ..errors import PresetError, PresetValidationError
from .preset_schema import PresetRecord, validate_preset
from .preset_manager import (
    PresetLibrary,
    default_export_name,
    export_freakgen,
    import_freakgen,
)
from .preset_utils import TimestampProvider, slugify

__all__ = [
    "PresetRecord",
    "validate_preset",
    "PresetLibrary",
    "PresetError",
    "PresetValidationError",
    "export_freakgen",
    "import_freakgen",
    "default_export_name",
    "TimestampProvider",
    "slugify",
]
