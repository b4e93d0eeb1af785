"""
Preset record definition and validation.

A preset file holds one generated patch plus library metadata:

    {
      "name": "My bass 12",
      "description": "",
      "date": "2026-10-19T12:34:56.789Z",
      "style": "bass",            # the style actually generated
      "intensity": "simple",
      "engine": "SawX",
      "favorite": false,
      "patch": { ...Patch.to_dict()... }
    }
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..config import INTENSITIES, STYLES
from ..engine.patch import MODULES, Patch
from ..errors import PresetValidationError
from .preset_utils import parse_timestamp

UNTITLED = "Untitled"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class PresetRecord:
    name: str = UNTITLED
    description: str = ""
    date: str = ""
    style: str = ""
    intensity: str = ""
    engine: str = "Unknown"
    favorite: bool = False
    patch: Patch = field(default_factory=Patch)
    filename: Optional[str] = None  # set when read from / written to a library

    @property
    def created(self) -> datetime:
        """Creation time; epoch for missing or malformed dates."""
        return parse_timestamp(self.date) or _EPOCH

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "date": self.date,
            "style": self.style,
            "intensity": self.intensity,
            "engine": self.engine,
            "favorite": self.favorite,
            "patch": self.patch.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict, filename: Optional[str] = None) -> "PresetRecord":
        patch = Patch.from_dict(data.get("patch", {}))
        return cls(
            name=data.get("name") or UNTITLED,
            description=data.get("description", ""),
            date=data.get("date", ""),
            style=data.get("style") or patch.real_style,
            intensity=data.get("intensity") or patch.intensity,
            engine=data.get("engine") or patch.engine,
            favorite=bool(data.get("favorite", False)),
            patch=patch,
            filename=filename,
        )

    @classmethod
    def for_patch(cls, patch: Patch, name: str, description: str = "",
                  date: str = "") -> "PresetRecord":
        return cls(
            name=name.strip() or UNTITLED,
            description=description.strip(),
            date=date,
            style=patch.real_style,
            intensity=patch.intensity,
            engine=patch.engine,
            patch=patch,
        )


def validate_preset(data: Any, strict: bool = False) -> Tuple[bool, List[str]]:
    """
    Validate preset data.

    Args:
        data: Parsed preset JSON
        strict: If True, raise PresetValidationError on any error

    Returns:
        (is_valid, errors_and_warnings)
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(data, dict):
        errors.append(f"preset must be an object, got {type(data).__name__}")
    else:
        if not isinstance(data.get("name", ""), str):
            errors.append("name must be a string")

        style = data.get("style")
        if style is not None and style not in STYLES:
            warnings.append(f"unknown style {style!r}")

        intensity = data.get("intensity")
        if intensity is not None and intensity not in INTENSITIES:
            warnings.append(f"unknown intensity {intensity!r}")

        if data.get("date") and parse_timestamp(data["date"]) is None:
            warnings.append(f"date is not ISO 8601: {data['date']!r}")

        patch = data.get("patch")
        if not isinstance(patch, dict):
            errors.append("patch must be an object")
        else:
            errors.extend(_validate_patch(patch))

    is_valid = len(errors) == 0

    if strict and not is_valid:
        raise PresetValidationError(f"Invalid preset: {'; '.join(errors)}")

    return is_valid, errors + warnings


def _validate_patch(patch: Dict[str, Any]) -> List[str]:
    errors = []
    for module in MODULES:
        if module == "matrix":
            matrix = patch.get("matrix", patch.get("matrixData"))
            if matrix is not None and not isinstance(matrix, dict):
                errors.append("patch.matrix must be an object")
            continue
        rows = patch.get(module)
        if rows is None:
            continue
        if not isinstance(rows, list):
            errors.append(f"patch.{module} must be a list of rows")
            continue
        for i, row in enumerate(rows):
            if not isinstance(row, dict) or "label" not in row:
                errors.append(f"patch.{module}[{i}] must be an object with a label")
                continue
            raw = row.get("raw")
            if raw is not None and (not isinstance(raw, int) or not 0 <= raw <= 127):
                errors.append(f"patch.{module}[{i}].raw must be 0-127, got {raw!r}")
    return errors
