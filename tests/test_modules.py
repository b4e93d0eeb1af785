"""
Tests for the per-module generators (master, oscillator, envelope,
cycling envelope, LFO).

Property tests loop over many seeds and recompute every display value from
the row's raw value.
"""

import re

import pytest

from freakgen.config import (
    BLANK,
    CHORD_TYPES,
    CONCRETE_STYLES,
    CYC_HOLD_MS,
    CYC_RISE_FALL_MS,
    DECAY_MS,
    DEFAULT_DECAY_MS,
    INTENSITIES,
    LFO_SYNC_RATES,
    PAD_ATTACK_MS,
    UNISON_SPREAD_JITTER,
    UNISON_SPREAD_SPOTS,
)
from freakgen.engine.engines import Engine
from freakgen.engine.modules import (
    generate_cyc,
    generate_env,
    generate_lfo,
    generate_master,
    generate_osc,
    percent_row,
)
from freakgen.engine.rows import find_row, is_blank
from freakgen.engine.sampling import (
    RandomSource,
    bipolar_display,
    cutoff_display,
    format_percent,
    lfo_rate_display,
    time_display,
)

SEEDS = range(1, 301)


def row(block, label):
    found = find_row(block, label)
    assert found is not None, f"missing row {label}"
    return found


class TestPercentRow:

    def test_band(self):
        rng = RandomSource(3)
        for _ in range(300):
            r = percent_row("Resonance", rng, 10, 80)
            assert r.value == format_percent(r.raw)
            assert 10 <= int(r.value.rstrip("%")) <= 80


class TestMaster:

    def test_row_order(self, rng):
        block = generate_master("keys", "simple", False, rng)
        assert [r.label for r in block] == [
            "Octave", "Voice Mode", "Unison Spread", "Glide",
            "Filter Type", "Cutoff", "Resonance",
        ]

    def test_bass_octave(self):
        for seed in SEEDS:
            block = generate_master("bass", "simple", False, RandomSource(seed))
            assert row(block, "Octave").value == -2

    def test_other_octave_zero(self):
        block = generate_master("lead", "simple", False, RandomSource(1))
        assert row(block, "Octave").value == 0

    @pytest.mark.parametrize("style", ["lead", "bass", "percussion"])
    def test_mono_styles(self, style):
        for seed in SEEDS:
            block = generate_master(style, "extreme", False, RandomSource(seed))
            assert row(block, "Voice Mode").value == "Monophonic"

    def test_force_mono(self):
        for seed in SEEDS:
            block = generate_master("pad", "simple", True, RandomSource(seed))
            assert row(block, "Voice Mode").value == "Monophonic"

    def test_pad_voice_modes(self):
        modes = {row(generate_master("pad", "simple", False, RandomSource(s)), "Voice Mode").value
                 for s in SEEDS}
        assert modes <= {"Monophonic", "Paraphonic", "Unison"}
        assert "Paraphonic" in modes

    def test_unison_spread_only_with_unison(self):
        for seed in SEEDS:
            block = generate_master("keys", "simple", False, RandomSource(seed))
            spread = row(block, "Unison Spread").value
            if row(block, "Voice Mode").value == "Unison":
                value = float(spread)
                assert any(abs(value - spot) <= UNISON_SPREAD_JITTER + 1e-9
                           for spot in UNISON_SPREAD_SPOTS)
                assert re.fullmatch(r"-?\d+\.\d{3}", spread)
            else:
                assert spread is None

    @pytest.mark.parametrize("intensity", ["simple", "moderate"])
    def test_no_glide_at_low_intensity(self, intensity):
        for seed in SEEDS:
            glide = row(generate_master("keys", intensity, False, RandomSource(seed)), "Glide")
            assert glide.value is None
            assert glide.raw == 0

    def test_high_glide_band(self):
        seen = False
        for seed in SEEDS:
            glide = row(generate_master("keys", "high", False, RandomSource(seed)), "Glide")
            if glide.value is not None:
                seen = True
                assert 5 <= glide.raw <= 40
                assert glide.value == time_display(glide.raw, 10, 500, 5, 40)
        assert seen

    def test_extreme_glide_band(self):
        for seed in SEEDS:
            glide = row(generate_master("keys", "extreme", False, RandomSource(seed)), "Glide")
            if glide.value is not None:
                assert 5 <= glide.raw <= 100
                assert glide.value == time_display(glide.raw, 10, 10000, 5, 100)

    def test_percussion_filter(self):
        for seed in SEEDS:
            block = generate_master("percussion", "simple", False, RandomSource(seed))
            assert row(block, "Filter Type").value in ("BP", "HP")
            cutoff = row(block, "Cutoff")
            assert cutoff.value.endswith("Hz") and not cutoff.value.endswith("kHz")
            assert cutoff.value == cutoff_display(cutoff.raw, percussion=True)

    def test_cutoff_and_resonance_consistent(self):
        for seed in SEEDS:
            block = generate_master("lead", "simple", False, RandomSource(seed))
            cutoff = row(block, "Cutoff")
            assert cutoff.value == cutoff_display(cutoff.raw)
            reso = row(block, "Resonance")
            assert reso.value == format_percent(reso.raw)
            assert 10 <= int(reso.value.rstrip("%")) <= 80


class TestOscillator:

    def test_forced_engine(self, rng):
        block = generate_osc("bass", Engine.MODAL, rng)
        assert row(block, "Type").value == "Modal"
        assert [r.label for r in block[1:]] == list(Engine.MODAL.labels)

    def test_random_engine_from_style_list(self):
        for seed in SEEDS:
            block = generate_osc("vocoder", "random", RandomSource(seed))
            assert row(block, "Type").value == "Vocoder"

    def test_percent_controls(self):
        for seed in SEEDS:
            block = generate_osc("lead", Engine.SAWX, RandomSource(seed))
            for r in block[1:]:
                assert r.value == format_percent(r.raw)

    def test_chords_wave_is_chord_type(self):
        for seed in SEEDS:
            block = generate_osc("keys", Engine.CHORDS, RandomSource(seed))
            wave = block[1]
            assert wave.label == "Chord Type"
            assert wave.value in CHORD_TYPES
            assert wave.raw == int(CHORD_TYPES.index(wave.value) * 127 / 10)

    def test_wavetable_wave_is_table_number(self):
        for seed in SEEDS:
            wave = generate_osc("pad", Engine.WAVETABLE, RandomSource(seed))[1]
            assert 1 <= wave.value <= 16
            assert wave.raw == round((wave.value - 1) / 15 * 127)

    def test_type_row_has_no_raw(self, rng):
        assert row(generate_osc("lead", Engine.BASS, rng), "Type").raw is None


class TestEnvelope:

    def test_row_labels(self, rng):
        assert [r.label for r in generate_env("keys", rng)] == [
            "Attack", "Decay/Rel", "Sustain", "Filter Amt"]

    def test_percussion_zero_attack(self):
        for seed in SEEDS:
            attack = row(generate_env("percussion", RandomSource(seed)), "Attack")
            assert attack.value == "0ms"
            assert attack.raw == 0

    def test_pad_slow_attack(self):
        for seed in SEEDS:
            attack = row(generate_env("pad", RandomSource(seed)), "Attack")
            assert attack.value == time_display(attack.raw, *PAD_ATTACK_MS)

    @pytest.mark.parametrize("style", ["bass", "lead", "keys", "organ", "sfx"])
    def test_fixed_attack(self, style):
        attack = row(generate_env(style, RandomSource(1)), "Attack")
        assert attack.value == "5ms"

    @pytest.mark.parametrize("style", CONCRETE_STYLES)
    def test_decay_range_by_style(self, style):
        span = DECAY_MS.get(style, DEFAULT_DECAY_MS)
        for seed in range(1, 50):
            decay = row(generate_env(style, RandomSource(seed)), "Decay/Rel")
            assert decay.value == time_display(decay.raw, *span)

    @pytest.mark.parametrize("style", ["percussion", "brass", "pad"])
    def test_punchy_filter_amount(self, style):
        for seed in SEEDS:
            amount = row(generate_env(style, RandomSource(seed)), "Filter Amt")
            assert 80 <= amount.raw <= 127
            assert amount.value == bipolar_display(amount.raw)

    def test_filter_amount_bipolar(self):
        for seed in SEEDS:
            amount = row(generate_env("keys", RandomSource(seed)), "Filter Amt")
            assert -100 <= amount.value <= 100
            assert amount.value == bipolar_display(amount.raw)

    @pytest.mark.parametrize("style", ["bass", "lead"])
    def test_high_sustain_override(self, style):
        high = 0
        for seed in SEEDS:
            sustain = row(generate_env(style, RandomSource(seed)), "Sustain")
            assert sustain.value == format_percent(sustain.raw)
            if sustain.raw >= 100:
                high += 1
        # 70% override plus the natural top of the range
        assert high > len(SEEDS) // 2


class TestCyclingEnvelope:

    def test_inactive_is_blank(self, rng):
        block = generate_cyc(False, "extreme", rng)
        assert is_blank(block)
        assert block[0].value == BLANK

    def test_simple_has_no_shape_rows(self):
        for seed in SEEDS:
            block = generate_cyc(True, "simple", RandomSource(seed))
            labels = [r.label for r in block]
            assert "Rise Shape" not in labels
            assert "Fall Shape" not in labels

    @pytest.mark.parametrize("intensity", ["moderate", "high", "extreme"])
    def test_shape_rows_above_simple(self, intensity):
        block = generate_cyc(True, intensity, RandomSource(9))
        labels = [r.label for r in block]
        assert labels.index("Rise Shape") == labels.index("Rise") + 1
        assert labels.index("Fall Shape") == labels.index("Fall") + 1
        for label in ("Rise Shape", "Fall Shape"):
            value = int(row(block, label).value.rstrip("%"))
            assert 1 <= value <= 100

    def test_env_mode_sustain_else_hold(self):
        for seed in SEEDS:
            block = generate_cyc(True, "moderate", RandomSource(seed))
            mode = row(block, "Mode").value
            if mode == "Env":
                sustain = row(block, "Sustain")
                assert find_row(block, "Hold") is None
                assert sustain.value == format_percent(sustain.raw)
            else:
                hold = row(block, "Hold")
                assert find_row(block, "Sustain") is None
                assert hold.value == time_display(hold.raw, *CYC_HOLD_MS)

    def test_rise_fall_amount_consistent(self):
        for seed in SEEDS:
            block = generate_cyc(True, "high", RandomSource(seed))
            for label in ("Rise", "Fall"):
                r = row(block, label)
                assert r.value == time_display(r.raw, *CYC_RISE_FALL_MS)
            amount = row(block, "Amount")
            assert amount.value == format_percent(amount.raw)
            assert block[-1].label == "Amount"


class TestLFO:

    def test_inactive_is_blank(self, rng):
        assert is_blank(generate_lfo(False, rng))

    def test_rows(self, rng):
        assert [r.label for r in generate_lfo(True, rng)] == ["Shape", "Sync", "Rate"]

    def test_rate_follows_sync(self):
        for seed in SEEDS:
            block = generate_lfo(True, RandomSource(seed))
            sync = row(block, "Sync").value
            rate = row(block, "Rate")
            assert sync in ("ON", "OFF")
            if sync == "ON":
                assert rate.value in LFO_SYNC_RATES
            else:
                assert rate.value == lfo_rate_display(rate.raw)
            assert 0 <= rate.raw <= 127
