"""
MicroFreak CC dispatch.

build_dispatch() turns a patch into the CC messages the synth accepts plus
the settings that must be made by hand (buttons, Shift functions and the
modulation matrix have no CC).
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config import BLANK, FIXED_ATTACK, PROGRAM_COUNT, PROGRAMS_PER_BANK
from ..engine.engines import Engine
from ..engine.patch import Patch
from ..engine.rows import ParamRow, find_row, is_blank
from ..engine.sampling import RAW_MAX

CC_MAP = {
    "Type": 9,
    "Wave": 10,
    "Timbre": 12,
    "Shape": 13,
    "Cutoff": 23,
    "Resonance": 83,
    "Attack": 105,
    "Decay": 106,
    "Sustain": 29,
    "Filter Amt": 26,
    "LFO Rate Free": 93,
    "LFO Rate Sync": 94,
    "Cyc Rise": 102,
    "Cyc Fall": 103,
    "Cyc Hold": 28,
    "Cyc Amount": 24,
    "Glide": 5,
}

BANK_SELECT_MSB = 0
BANK_SELECT_LSB = 32


@dataclass(frozen=True)
class CCMessage:
    """One control change on the synth's channel."""
    control: int
    value: int
    label: str = ""

    def __str__(self) -> str:
        return f"CC {self.control} -> {self.value}" + (f" ({self.label})" if self.label else "")


@dataclass
class DispatchPlan:
    """CC messages to send and instructions the player follows by hand."""
    messages: List[CCMessage] = field(default_factory=list)
    manual: List[str] = field(default_factory=list)

    def add(self, label: str, value) -> None:
        self.messages.append(CCMessage(CC_MAP[label], clamp_cc(value), label))

    def controls(self) -> List[int]:
        return [m.control for m in self.messages]

    def __len__(self) -> int:
        return len(self.messages)


def clamp_cc(value) -> int:
    return max(0, min(RAW_MAX, int(value)))


def estimate_raw(value) -> int:
    """Best-effort CC value for a row saved without raw (older presets)."""
    if not isinstance(value, str):
        return int(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0
    match = re.match(r"\s*(-?\d+(?:\.\d+)?)", value)
    if not match:
        return 0
    number = float(match.group(1))
    if value.endswith("%"):
        return int(number * 1.27)
    if value.endswith("ms"):
        return int(number)
    if value.endswith("s"):
        return int(number * 10)
    return 0


def is_fixed_attack(row: Optional[ParamRow]) -> bool:
    """The fixed "5ms" attack carries a sampled raw that does not map to 5ms."""
    return row is not None and row.value == FIXED_ATTACK and row.raw is not None


def row_raw(row: ParamRow) -> int:
    return row.raw if row.raw is not None else estimate_raw(row.value)


def _dispatch_osc(patch: Patch, plan: DispatchPlan) -> None:
    rows = patch.osc or ()
    type_row = find_row(rows, "Type")
    if type_row is not None:
        try:
            plan.add("Type", Engine.from_name(str(type_row.value)).type_cc)
        except ValueError:
            plan.manual.append(f"Osc Type: {type_row.value}")

    # Wave/Timbre/Shape labels change per engine; position is fixed
    if len(rows) >= 4:
        for label, row in zip(("Wave", "Timbre", "Shape"), rows[1:4]):
            plan.add(label, row_raw(row))


def _dispatch_master(patch: Patch, plan: DispatchPlan) -> None:
    rows = patch.master or ()
    octave = find_row(rows, "Octave")
    voice = find_row(rows, "Voice Mode")
    spread = find_row(rows, "Unison Spread")
    filter_type = find_row(rows, "Filter Type")

    if octave is not None and octave.value not in (0, "0", None):
        value = int(octave.value)
        plan.manual.append(f"Octave: {value:+d}")
    if voice is not None:
        plan.manual.append(f"Voice Mode: {voice.value}")
    if spread is not None and spread.value not in (None, "0"):
        plan.manual.append(f"Unison Spread: {spread.value}")
    if filter_type is not None:
        plan.manual.append(f"Filter Type: {filter_type.value}")

    for label in ("Cutoff", "Resonance"):
        row = find_row(rows, label)
        if row is not None:
            plan.add(label, row_raw(row))

    glide = find_row(rows, "Glide")
    if glide is not None:
        plan.add("Glide", row_raw(glide) if glide.value is not None else 0)


def _dispatch_env(patch: Patch, plan: DispatchPlan) -> None:
    rows = patch.env or ()
    for row_label, cc_label in (("Attack", "Attack"), ("Decay/Rel", "Decay"), ("Sustain", "Sustain")):
        row = find_row(rows, row_label)
        if row is not None:
            plan.add(cc_label, row_raw(row))

    attack = find_row(rows, "Attack")
    if is_fixed_attack(attack):
        plan.manual.append(
            f"Attack: set {FIXED_ATTACK} by hand (CC {CC_MAP['Attack']} sent raw {attack.raw})"
        )

    amount = find_row(rows, "Filter Amt")
    if amount is not None:
        if amount.raw is not None:
            plan.add("Filter Amt", amount.raw)
        else:
            plan.add("Filter Amt", 64 + estimate_raw(amount.value) * 0.64)


def _dispatch_lfo(patch: Patch, plan: DispatchPlan) -> None:
    rows = patch.lfo
    if not rows or is_blank(rows):
        return
    shape = find_row(rows, "Shape")
    sync = find_row(rows, "Sync")
    rate = find_row(rows, "Rate")

    if shape is not None:
        plan.manual.append(f"LFO Shape: {shape.value}")
    if sync is not None:
        plan.manual.append(f"LFO Sync: {sync.value}")
    if rate is not None:
        synced = sync is not None and str(sync.value).upper() == "ON"
        plan.add("LFO Rate Sync" if synced else "LFO Rate Free", row_raw(rate))


def _dispatch_cyc(patch: Patch, plan: DispatchPlan) -> None:
    rows = patch.cyc
    if not rows or is_blank(rows):
        return
    mode = find_row(rows, "Mode")
    if mode is not None:
        plan.manual.append(f"Cycling Env Mode: {mode.value}")

    hold = find_row(rows, "Hold") or find_row(rows, "Sustain")
    for label, row in (("Cyc Rise", find_row(rows, "Rise")),
                       ("Cyc Fall", find_row(rows, "Fall")),
                       ("Cyc Hold", hold),
                       ("Cyc Amount", find_row(rows, "Amount"))):
        if row is not None:
            plan.add(label, row_raw(row))


def _dispatch_matrix(patch: Patch, plan: DispatchPlan) -> None:
    matrix = patch.matrix
    if matrix is None:
        return
    for slot, target in enumerate(matrix.config, start=1):
        if target != BLANK:
            plan.manual.append(f"Assign {slot}: {target}")
    for conn in matrix.connections:
        if conn.amount:
            plan.manual.append(f"Matrix: {conn.describe(patch.voice_mode)}")


def build_dispatch(patch: Patch) -> DispatchPlan:
    """
    Plan a MIDI push for a patch.

    Rows carry their 0-127 raw value; rows from older presets without one
    get an estimate from their display text. Blank modulators send nothing.
    """
    plan = DispatchPlan()
    _dispatch_osc(patch, plan)
    _dispatch_master(patch, plan)
    _dispatch_env(patch, plan)
    _dispatch_lfo(patch, plan)
    _dispatch_cyc(patch, plan)
    _dispatch_matrix(patch, plan)
    return plan


def program_change(preset_number: int) -> Tuple[int, int]:
    """
    (bank, program) selecting a stored preset.

    Bank 0 holds presets 1-128, bank 1 129-256, bank 2 257-384.
    """
    n = clamp_program(preset_number)
    return (n - 1) // PROGRAMS_PER_BANK, (n - 1) % PROGRAMS_PER_BANK


def clamp_program(preset_number: Optional[int]) -> int:
    try:
        n = int(preset_number)
    except (TypeError, ValueError):
        return 1
    return max(1, min(PROGRAM_COUNT, n))
