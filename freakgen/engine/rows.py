"""
Parameter rows - the atomic unit of a generated patch.

A row with value None is "not applicable" and is suppressed by renderers.
raw, when present, is the 0-127 CC value the display was derived from.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..config import BLANK

Value = Union[str, int, float, None]
Block = Tuple["ParamRow", ...]

BLANK_TOOLTIP = "This module is not active in the modulation matrix."


@dataclass(frozen=True)
class ParamRow:
    """One labelled parameter value."""
    label: str
    value: Value
    raw: Optional[int] = None
    tooltip: Optional[str] = None

    @property
    def visible(self) -> bool:
        return self.value is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"label": self.label, "value": self.value}
        if self.raw is not None:
            data["raw"] = self.raw
        if self.tooltip:
            data["tooltip"] = self.tooltip
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParamRow":
        # Older exports used "val"
        value = data["value"] if "value" in data else data.get("val")
        raw = data.get("raw")
        return cls(
            label=str(data["label"]),
            value=value,
            raw=int(raw) if raw is not None else None,
            tooltip=data.get("tooltip"),
        )


def blank_block() -> Block:
    """Single-row block for a modulator nothing routes from."""
    return (ParamRow("Status", BLANK, tooltip=BLANK_TOOLTIP),)


def is_blank(block: Optional[Iterable[ParamRow]]) -> bool:
    if not block:
        return False
    rows = tuple(block)
    return len(rows) == 1 and rows[0].label == "Status" and rows[0].value == BLANK


def find_row(block: Optional[Iterable[ParamRow]], label: str) -> Optional[ParamRow]:
    """First row with the given label, or None."""
    for row in block or ():
        if row.label == label:
            return row
    return None


def block_to_list(block: Iterable[ParamRow]) -> list:
    return [row.to_dict() for row in block]


def block_from_list(data: Iterable[Dict[str, Any]]) -> Block:
    return tuple(ParamRow.from_dict(d) for d in data)
