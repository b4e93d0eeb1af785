"""
Module generators.

One function per synthesizer module. Each is a pure function of its inputs
and the RandomSource it is handed, returning a tuple of ParamRows.
"""

from typing import List, Optional, Union

from ..config import (
    CHORD_TYPES,
    CYC_HOLD_MS,
    CYC_MODES,
    CYC_RISE_FALL_MS,
    CYC_SHAPE_PERCENT,
    DECAY_MS,
    DEFAULT_DECAY_MS,
    FILTER_TYPES,
    FIXED_ATTACK,
    GLIDE_POLICY,
    HIGH_SUSTAIN_CHANCE,
    HIGH_SUSTAIN_RAW,
    HIGH_SUSTAIN_STYLES,
    LFO_SHAPES,
    LFO_SYNC_OPTIONS,
    LFO_SYNC_RATES,
    MONO_STYLES,
    PAD_ATTACK_MS,
    PAD_PARAPHONIC_CHANCE,
    PERCUSSION_ATTACK,
    PERCUSSION_FILTER_TYPES,
    PUNCHY_FILTER_RAW,
    PUNCHY_FILTER_STYLES,
    RESONANCE_BAND,
    SHAPELESS_INTENSITIES,
    UNISON_SPREAD_JITTER,
    UNISON_SPREAD_SPOTS,
    VOICE_MODES,
    WAVETABLE_COUNT,
)
from .engines import Engine, engines_for_style
from .rows import Block, ParamRow, blank_block
from .sampling import (
    RAW_MAX,
    RandomSource,
    bipolar_display,
    cutoff_display,
    format_percent,
    lfo_rate_display,
    percent_bounds,
    time_display,
)


def percent_row(label: str, rng: RandomSource, min_pc: float = 0, max_pc: float = 100,
                tooltip: Optional[str] = None) -> ParamRow:
    """Row with a raw sampled so that its percentage lies in [min_pc, max_pc]."""
    raw = rng.r_val(*percent_bounds(min_pc, max_pc))
    return ParamRow(label, format_percent(raw), raw, tooltip)


# =============================================================================
# MASTER / VOICE
# =============================================================================

def pick_voice_mode(style: str, force_mono: bool, rng: RandomSource) -> str:
    if style in MONO_STYLES or force_mono:
        return "Monophonic"
    if style == "pad":
        if rng.chance(PAD_PARAPHONIC_CHANCE):
            return "Paraphonic"
        return rng.pick(["Monophonic", "Unison"])
    return rng.pick(VOICE_MODES)


def generate_master(style: str, intensity: str, force_mono: bool,
                    rng: RandomSource) -> Block:
    """Octave, voicing, glide and analog filter settings."""
    voice_mode = pick_voice_mode(style, force_mono, rng)

    spread = None
    if voice_mode == "Unison":
        spot = rng.pick(UNISON_SPREAD_SPOTS)
        spread = f"{spot + rng.uniform(-UNISON_SPREAD_JITTER, UNISON_SPREAD_JITTER):.3f}"

    percussion = style == "percussion"
    filter_type = rng.pick(PERCUSSION_FILTER_TYPES if percussion else FILTER_TYPES)

    cutoff_raw = rng.raw()

    glide_val = None
    glide_raw = 0
    policy = GLIDE_POLICY.get(intensity)
    if policy is not None:
        probability, (raw_lo, raw_hi), (min_ms, max_ms) = policy
        if rng.chance(probability):
            glide_raw = rng.r_val(raw_lo, raw_hi)
            glide_val = time_display(glide_raw, min_ms, max_ms, raw_lo, raw_hi)

    return (
        ParamRow("Octave", -2 if style == "bass" else 0,
                 tooltip="Use the Octave |< >| buttons above the keyboard."),
        ParamRow("Voice Mode", voice_mode,
                 tooltip="Press 'Paraphonic'. Shift+Para for Unison/Mono."),
        ParamRow("Unison Spread", spread,
                 tooltip="Amount of detune (Utility menu or Shift functions)."),
        ParamRow("Glide", glide_val, glide_raw, tooltip="Turn the Glide knob."),
        ParamRow("Filter Type", filter_type,
                 tooltip="Press the 'Filter Type' button to cycle (LP/BP/HP)."),
        ParamRow("Cutoff", cutoff_display(cutoff_raw, percussion), cutoff_raw,
                 tooltip="Turn the Cutoff knob in the Analog Filter section."),
        percent_row("Resonance", rng, *RESONANCE_BAND,
                    tooltip="Turn the Resonance knob in the Analog Filter section."),
    )


# =============================================================================
# OSCILLATOR
# =============================================================================

def pick_engine(style: str, rng: RandomSource) -> Engine:
    return rng.pick(engines_for_style(style))


def generate_osc(style: str, engine: Union[Engine, str], rng: RandomSource) -> Block:
    """Engine type plus its three labelled controls."""
    if not isinstance(engine, Engine):
        engine = pick_engine(style, rng)

    w_raw, t_raw, s_raw = rng.raw(), rng.raw(), rng.raw()
    wave_val = format_percent(w_raw)

    if engine is Engine.CHORDS:
        index = rng.r_int(len(CHORD_TYPES))
        wave_val = CHORD_TYPES[index]
        w_raw = int(index * RAW_MAX / (len(CHORD_TYPES) - 1))
    elif engine is Engine.WAVETABLE:
        table = rng.r_val(1, WAVETABLE_COUNT)
        wave_val = table
        w_raw = int(round((table - 1) / (WAVETABLE_COUNT - 1) * RAW_MAX))

    return (
        ParamRow("Type", engine.display_name,
                 tooltip="Turn the Type knob in the Digital Oscillator section."),
        ParamRow(engine.wave_label, wave_val, w_raw, tooltip="Turn the Wave knob (Orange)."),
        ParamRow(engine.timbre_label, format_percent(t_raw), t_raw,
                 tooltip="Turn the Timbre knob (White)."),
        ParamRow(engine.shape_label, format_percent(s_raw), s_raw,
                 tooltip="Turn the Shape knob (White)."),
    )


# =============================================================================
# ENVELOPE
# =============================================================================

def generate_env(style: str, rng: RandomSource) -> Block:
    """Amp/filter envelope, shaped by style."""
    attack_raw = rng.raw()
    if style == "percussion":
        attack_raw = 0
        attack = PERCUSSION_ATTACK
    elif style == "pad":
        attack = time_display(attack_raw, *PAD_ATTACK_MS)
    else:
        attack = FIXED_ATTACK

    decay_raw = rng.raw()
    decay = time_display(decay_raw, *DECAY_MS.get(style, DEFAULT_DECAY_MS))

    if style in PUNCHY_FILTER_STYLES:
        filter_raw = rng.r_val(*PUNCHY_FILTER_RAW)
    else:
        filter_raw = rng.r_val(0, RAW_MAX)

    sustain = percent_row("Sustain", rng,
                          tooltip="Adjust the Sustain slider in the Envelope section.")
    if style in HIGH_SUSTAIN_STYLES and rng.chance(HIGH_SUSTAIN_CHANCE):
        raw = rng.r_val(*HIGH_SUSTAIN_RAW)
        sustain = ParamRow("Sustain", format_percent(raw), raw, sustain.tooltip)

    return (
        ParamRow("Attack", attack, attack_raw,
                 tooltip="Adjust the Attack slider in the Envelope section."),
        ParamRow("Decay/Rel", decay, decay_raw,
                 tooltip="Adjust the Decay/Release slider in the Envelope section."),
        sustain,
        ParamRow("Filter Amt", bipolar_display(filter_raw), filter_raw,
                 tooltip="Turn the Filter Amt knob in the Envelope section."),
    )


# =============================================================================
# CYCLING ENVELOPE / LFO
# =============================================================================

def generate_cyc(active: bool, intensity: str, rng: RandomSource) -> Block:
    """Cycling envelope; blank unless the matrix routes from it."""
    if not active:
        return blank_block()

    mode = rng.pick(CYC_MODES)
    rise_raw, fall_raw, hold_raw = rng.raw(), rng.raw(), rng.raw()
    with_shapes = intensity not in SHAPELESS_INTENSITIES

    rows: List[ParamRow] = [
        ParamRow("Mode", mode, tooltip="Press the Mode button in the Cycling Envelope section."),
        ParamRow("Rise", time_display(rise_raw, *CYC_RISE_FALL_MS), rise_raw,
                 tooltip="Turn the Rise knob in the Cycling Envelope section."),
    ]
    # Shape rows have no CC: set by hand with Shift
    if with_shapes:
        rows.append(ParamRow("Rise Shape", f"{rng.r_val(*CYC_SHAPE_PERCENT)}%",
                             tooltip="Hold Shift and turn the Rise knob."))
    rows.append(ParamRow("Fall", time_display(fall_raw, *CYC_RISE_FALL_MS), fall_raw,
                         tooltip="Turn the Fall knob in the Cycling Envelope section."))
    if with_shapes:
        rows.append(ParamRow("Fall Shape", f"{rng.r_val(*CYC_SHAPE_PERCENT)}%",
                             tooltip="Hold Shift and turn the Fall knob."))

    hold_tooltip = "Turn the Hold/Sustain knob in the Cycling Envelope section."
    if mode == "Env":
        rows.append(ParamRow("Sustain", format_percent(hold_raw), hold_raw, hold_tooltip))
    else:
        rows.append(ParamRow("Hold", time_display(hold_raw, *CYC_HOLD_MS), hold_raw, hold_tooltip))

    rows.append(percent_row("Amount", rng,
                            tooltip="Turn the Amount knob in the Cycling Envelope section."))
    return tuple(rows)


def generate_lfo(active: bool, rng: RandomSource) -> Block:
    """LFO; blank unless the matrix routes from it."""
    if not active:
        return blank_block()

    sync = rng.pick(LFO_SYNC_OPTIONS)
    # Raw is kept even when synced: last free-rate position for the CC push
    rate_raw = rng.raw()
    if sync == "ON":
        rate = rng.pick(LFO_SYNC_RATES)
    else:
        rate = lfo_rate_display(rate_raw)

    return (
        ParamRow("Shape", rng.pick(LFO_SHAPES), tooltip="Press the Shape button in the LFO section."),
        ParamRow("Sync", sync, tooltip="Press the Sync button in the LFO section."),
        ParamRow("Rate", rate, rate_raw, tooltip="Turn the Rate knob in the LFO section."),
    )
