"""
Central Configuration
Parameter space for patch generation: styles, intensities, modulation
vocabularies and the value ranges the generators sample from.

Engine catalog lives in freakgen.engine.engines (one enum member per engine).
"""

from typing import Dict, List, Tuple

APP_VERSION = "3.3.2"
FREAKGEN_FORMAT = "freakgen"
FREAKGEN_FORMAT_VERSION = "1.0"

# === STYLES ===
RANDOM = "random"

CONCRETE_STYLES: List[str] = [
    "bass", "brass", "keys", "lead", "organ", "pad", "percussion",
    "sequence", "sfx", "strings", "vocoder",
]
STYLES: List[str] = CONCRETE_STYLES + [RANDOM]

# Styles that always play monophonic
MONO_STYLES = ("lead", "bass", "percussion")

# === INTENSITY ===
# Order matters: gallery grouping and sort use this order
INTENSITIES: List[str] = ["simple", "moderate", "high", "extreme"]
DEFAULT_INTENSITY = "simple"

# Number of matrix connections requested per intensity (inclusive bounds)
CONNECTION_COUNTS: Dict[str, Tuple[int, int]] = {
    "simple": (2, 3),
    "moderate": (4, 7),
    "high": (8, 12),
    "extreme": (15, 20),
}

# Glide: (probability, raw band, ms range) - absent intensities never glide
GLIDE_POLICY: Dict[str, Tuple[float, Tuple[int, int], Tuple[int, int]]] = {
    "high": (0.25, (5, 40), (10, 500)),
    "extreme": (0.50, (5, 100), (10, 10000)),
}

# Intensities that keep the cycling envelope shape rows hidden
SHAPELESS_INTENSITIES = ("simple",)

# Pitch modulation guardrail applies to these intensities
PITCH_GUARD_INTENSITIES = ("simple", "moderate")
PITCH_GUARD_STEPS = 8  # amount = r_val(-8, 8) / 10

# === VOICE ===
VOICE_MODES = ["Monophonic", "Paraphonic", "Unison"]
PAD_PARAPHONIC_CHANCE = 0.7
UNISON_SPREAD_SPOTS = [0, 4, 7, 8, 12]
UNISON_SPREAD_JITTER = 0.123

FILTER_TYPES = ["LP", "BP", "HP"]
PERCUSSION_FILTER_TYPES = ["BP", "HP"]
RESONANCE_BAND = (10, 80)  # percent

# Cutoff display spans
CUTOFF_KHZ_SPAN = (0.5, 20.0)
PERCUSSION_CUTOFF_HZ_SPAN = (500, 5000)

# === OSCILLATOR ===
CHORD_TYPES = ["Oct", "5th", "sus4", "minor", "m7", "m9", "m11", "69", "maj9", "maj7", "Major"]
WAVETABLE_COUNT = 16

# === ENVELOPE ===
PAD_ATTACK_MS = (1000, 3000)
FIXED_ATTACK = "5ms"
PERCUSSION_ATTACK = "0ms"

DECAY_MS: Dict[str, Tuple[int, int]] = {
    "percussion": (20, 400),
    "bass": (100, 2000),
    "pad": (1000, 8000),
}
DEFAULT_DECAY_MS = (200, 4000)

# Styles whose filter envelope leans strongly positive (raw 80-127)
PUNCHY_FILTER_STYLES = ("percussion", "brass", "pad")
PUNCHY_FILTER_RAW = (80, 127)

# Bass/lead sustain override
HIGH_SUSTAIN_STYLES = ("bass", "lead")
HIGH_SUSTAIN_CHANCE = 0.7
HIGH_SUSTAIN_RAW = (100, 127)

# === CYCLING ENVELOPE ===
CYC_MODES = ["Env", "Run", "Loop"]
CYC_RISE_FALL_MS = (10, 1000)
CYC_HOLD_MS = (0, 5000)
CYC_SHAPE_PERCENT = (1, 100)

# === LFO ===
LFO_SHAPES = ["Sine", "Triangle", "Saw", "Square", "S&H (Random)", "S&H Smooth"]
LFO_SYNC_RATES = ["8 bars", "4 bars", "2 bars", "1 bar", "1/2", "1/4", "1/8", "1/16"]
LFO_SYNC_OPTIONS = ["ON", "OFF"]
LFO_MAX_HZ = 50.0

# === MODULATION MATRIX ===
CYC_ENV = "CycEnv"
LFO = "LFO"
MOD_SOURCES = [CYC_ENV, "Envelope", LFO, "Pressure", "Key/Arp"]

PITCH = "Pitch"
FIXED_DESTINATIONS = [PITCH, "Wave", "Timbre", "Cutoff"]
ASSIGN_SLOTS = ["Assign 1", "Assign 2", "Assign 3"]
MATRIX_COLUMNS = FIXED_DESTINATIONS + ASSIGN_SLOTS

ASSIGN_TARGETS = [
    "LFO Rate", "Reso", "Env Dec", "Env Sus", "Cyc Rise", "Cyc Fall",
    "Cyc Hold", "Cyc Amt", "Glide", "Osc Shape", "Spread", "Unispread", "Arp Rate",
]
CYC_OWNED_TARGETS = ("Cyc Rise", "Cyc Fall", "Cyc Hold", "Cyc Amt")
UNISPREAD = "Unispread"
UNISON_ONLY_TARGETS = ("Spread", UNISPREAD)

AMOUNT_RANGE = (-100, 100)

# Sentinel for unused assign slots and unrouted modulators
BLANK = "INT - Blank"

# === HISTORY ===
DEFAULT_HISTORY_DEPTH = 3
MAX_HISTORY_DEPTH = 50

# === MIDI ===
PROGRAM_COUNT = 384
PROGRAMS_PER_BANK = 128
