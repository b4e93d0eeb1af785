"""
Oscillator engine catalog.

Each Engine member carries its display name, the labels its three
continuous controls (Wave, Timbre, Shape) show on the instrument, and the
CC value that selects it on the Type knob.
"""

from enum import Enum
from typing import Dict, List, Tuple

from ..config import RANDOM


class Engine(Enum):
    """Digital oscillator engines in catalog order."""
    BASIC_WAVES = ("BasicWaves", ("Morph: Sqr->Saw", "Sym/Pulse Width", "Sub-Osc Sine"), 5)
    SUPERWAVE = ("Superwave", ("Wave Select", "Detune", "Volume"), 11)
    WAVETABLE = ("Wavetable", ("Table Select", "Cycle Pos", "Chorus"), 17)
    HARMONIC = ("Harmonic", ("Table Morph", "Sine-Tri Morph", "Chorus"), 23)
    KARPLUS_STRONG = ("KarplusStrong", ("Bow Amount", "Strike Pos", "Decay"), 29)
    VIRTUAL_ANALOG = ("Virtual Analog", ("Detune", "Shape (Sqr)", "Shape (Saw)"), 34)
    WAVESHAPER = ("Waveshaper", ("Waveform", "Wavefolder", "Asymmetry"), 40)
    TWO_OP_FM = ("Two Op FM", ("Ratio", "Mod Index", "Feedback"), 46)
    FORMANT = ("Formant", ("Ratio", "Formant Freq", "Window Shape"), 52)
    CHORDS = ("Chords", ("Chord Type", "Inv/Freq", "Waveform"), 58)
    SPEECH = ("Speech", ("Library", "Formant Shift", "Word Subset"), 64)
    MODAL = ("Modal", ("Inharm", "Brightness", "Damping"), 69)
    NOISE = ("Noise", ("Rate/SampleRed", "Noise Type", "Filt/Reso"), 75)
    BASS = ("Bass", ("Saturation", "Pulse Width", "Noise/Sub"), 87)
    SAWX = ("SawX", ("Saw Spread", "Saw Shape", "Chorus"), 93)
    VOCODER = ("Vocoder", ("Waveform", "Timbre", "Shape"), 81)
    HARM = ("Harm", ("Spread", "Rectification", "Noise/Clip"), 98)
    WAVE_USER = ("WaveUser", ("Table Select", "Cycle Pos", "Bitdepth"), 104)
    SAMPLE = ("Sample", ("Start", "Length", "Loop"), 110)
    SCAN_GRAINS = ("Scan Grains", ("Scan Speed", "Density", "Chaos"), 116)
    CLOUD_GRAINS = ("Cloud Grains", ("Start Pos", "Density", "Chaos"), 122)
    HIT_GRAINS = ("Hit Grains", ("Start Pos", "Density", "Chaos"), 127)

    def __init__(self, display_name: str, labels: Tuple[str, str, str], type_cc: int):
        self.display_name = display_name
        self.labels = labels
        self.type_cc = type_cc

    @property
    def wave_label(self) -> str:
        return self.labels[0]

    @property
    def timbre_label(self) -> str:
        return self.labels[1]

    @property
    def shape_label(self) -> str:
        return self.labels[2]

    def __str__(self) -> str:
        return self.display_name

    @classmethod
    def from_name(cls, name: str) -> "Engine":
        """Look up an engine by display name (case-insensitive)."""
        engine = _BY_NAME.get(name.strip().lower())
        if engine is None:
            raise ValueError(f"Unknown engine: {name!r}")
        return engine


_BY_NAME: Dict[str, Engine] = {e.display_name.lower(): e for e in Engine}

ALL_ENGINES: List[Engine] = list(Engine)

E = Engine
STYLE_ENGINES: Dict[str, List[Engine]] = {
    "bass": [E.BASS, E.SAWX, E.VIRTUAL_ANALOG, E.BASIC_WAVES, E.SUPERWAVE, E.HARM, E.WAVETABLE, E.TWO_OP_FM],
    "lead": [E.VIRTUAL_ANALOG, E.BASIC_WAVES, E.SUPERWAVE, E.WAVETABLE, E.SAWX, E.HARM, E.KARPLUS_STRONG, E.FORMANT],
    "pad": [E.SUPERWAVE, E.WAVETABLE, E.HARMONIC, E.CLOUD_GRAINS, E.SAMPLE, E.VIRTUAL_ANALOG, E.CHORDS, E.MODAL],
    "keys": [E.KARPLUS_STRONG, E.TWO_OP_FM, E.MODAL, E.CHORDS, E.VIRTUAL_ANALOG, E.WAVETABLE],
    "strings": [E.KARPLUS_STRONG, E.MODAL, E.HARMONIC, E.SCAN_GRAINS],
    "brass": [E.VIRTUAL_ANALOG, E.SAWX, E.BASIC_WAVES, E.WAVETABLE, E.FORMANT],
    "organ": [E.BASIC_WAVES, E.HARMONIC, E.WAVETABLE, E.VIRTUAL_ANALOG],
    "percussion": [E.NOISE, E.TWO_OP_FM, E.BASIC_WAVES, E.HIT_GRAINS, E.KARPLUS_STRONG],
    "sequence": [E.VIRTUAL_ANALOG, E.BASIC_WAVES, E.WAVETABLE, E.SAWX, E.TWO_OP_FM],
    "sfx": ALL_ENGINES,
    "vocoder": [E.VOCODER],
    RANDOM: ALL_ENGINES,
}
del E


def engines_for_style(style: str) -> List[Engine]:
    """Engines a style may pick from; unknown styles get the full catalog."""
    return STYLE_ENGINES.get(style, ALL_ENGINES)
