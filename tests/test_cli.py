"""
Tests for the command line interface.
"""

import io
import json

import pytest

from freakgen.cli import format_patch, main
from freakgen.config import BLANK, UNISPREAD
from freakgen.config.settings import load_settings
from freakgen.engine import MatrixData, ModConnection, RandomSource, generate_patch
from freakgen.engine.rows import ParamRow, find_row
from freakgen.presets import PresetLibrary, export_freakgen


@pytest.fixture
def lib_args(library_dir):
    return ["--library", str(library_dir)]


def run_json(capsys, argv):
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


class TestFormatPatch:

    def test_sections(self, bass_patch):
        text = format_patch(bass_patch)
        for title in ("[OSCILLATOR]", "[MASTER]", "[ENVELOPE]", "[CYCLING ENV]", "[LFO]", "[MATRIX]"):
            assert title in text
        assert text.splitlines()[0].startswith("bass / simple / ")

    def test_none_rows_suppressed(self, bass_patch):
        assert "Unison Spread" not in format_patch(bass_patch)

    def test_blank_sentinel_shown(self):
        for seed in range(1, 100):
            patch = generate_patch("keys", "simple", rng=RandomSource(seed))
            if patch.lfo[0].value == "INT - Blank":
                assert "INT - Blank" in format_patch(patch)
                return
        pytest.fail("no blank LFO in sampled patches")

    def test_unispread_outside_unison_flagged(self, bass_patch):
        bass_patch.matrix = MatrixData(
            used_sources={"LFO"},
            connections=[ModConnection("LFO", "Assign 1", 20, UNISPREAD)],
            config=[UNISPREAD, BLANK, BLANK],
        )
        assert bass_patch.voice_mode == "Monophonic"
        assert "LFO -> Assign 1: +20 (No Unison)" in format_patch(bass_patch)

        bass_patch.master = (ParamRow("Voice Mode", "Unison"),)
        text = format_patch(bass_patch)
        assert "LFO -> Assign 1: +20" in text
        assert "(No Unison)" not in text

    def test_fixed_attack_shows_pushed_raw(self, bass_patch):
        attack = find_row(bass_patch.env, "Attack")
        assert attack.value == "5ms" and attack.raw is not None
        assert f"5ms  (push sends raw {attack.raw})" in format_patch(bass_patch)

    def test_percussion_attack_not_annotated(self):
        patch = generate_patch("percussion", "simple", rng=RandomSource(3))
        assert "push sends raw" not in format_patch(patch)


class TestGenerate:

    def test_text_output(self, capsys):
        assert main(["generate", "--style", "bass", "--seed", "42"]) == 0
        out = capsys.readouterr().out
        assert "[OSCILLATOR]" in out
        assert "seed 42" in out

    def test_json_output(self, capsys):
        data = run_json(capsys, ["generate", "--style", "percussion", "--intensity", "high", "--json", "-s", "7"])
        assert data["real_style"] == "percussion"
        assert data["intensity"] == "high"
        assert data["seed"] == 7

    def test_seed_is_reproducible(self, capsys):
        a = run_json(capsys, ["generate", "--seed", "warm", "--json"])
        b = run_json(capsys, ["generate", "--seed", "warm", "--json"])
        assert a == b

    def test_engine_option(self, capsys):
        data = run_json(capsys, ["generate", "--engine", "Chords", "--style", "pad", "--json", "-s", "1"])
        assert data["engine"] == "Chords"

    def test_save(self, capsys, lib_args, library_dir):
        assert main(lib_args + ["generate", "--style", "lead", "--save", "Solo", "-d", "bright", "-s", "3"]) == 0
        captured = capsys.readouterr()
        assert "Saved:" in captured.err
        records = PresetLibrary(library_dir).list_presets()
        assert [(r.name, r.description) for r in records] == [("Solo", "bright")]

    def test_save_default_name(self, lib_args, library_dir):
        assert main(lib_args + ["generate", "--style", "organ", "--save", "-s", "3"]) == 0
        assert PresetLibrary(library_dir).list_presets()[0].name.startswith("My organ ")

    def test_export(self, capsys, tmp_path):
        dest = tmp_path / "out.freakgen"
        assert main(["generate", "--export", str(dest), "-s", "4"]) == 0
        assert json.loads(dest.read_text())["format"] == "freakgen"

    def test_lock_needs_previous(self, capsys):
        assert main(["generate", "--lock", "osc"]) == 1
        assert "ERROR" in capsys.readouterr().out

    def test_lock_from_preset(self, capsys, lib_args, library):
        previous = generate_patch("bass", "simple", rng=RandomSource(1))
        path = library.save(previous, "Base")
        data = run_json(capsys, lib_args + ["generate", "--style", "pad", "--from", path.name,
                                            "--lock", "osc", "--lock", "env", "--json", "-s", "9"])
        assert data["osc"] == previous.to_dict()["osc"]
        assert data["env"] == previous.to_dict()["env"]

    def test_from_missing_preset(self, capsys, lib_args):
        assert main(lib_args + ["generate", "--from", "missing.json", "--lock", "osc"]) == 1
        assert capsys.readouterr().out.startswith("ERROR:")


class TestLibraryCommands:

    @pytest.fixture
    def saved(self, library, bass_patch):
        return library.save(bass_patch, "Deep Bass", "sub heavy")

    def test_engines(self, capsys):
        assert main(["engines"]) == 0
        lines = [l for l in capsys.readouterr().out.splitlines() if l.strip()]
        assert len(lines) == 22
        assert any("Chords" in l and "58" in l for l in lines)

    def test_list(self, capsys, lib_args, saved):
        assert main(lib_args + ["list"]) == 0
        out = capsys.readouterr().out
        assert "SIMPLE" in out
        assert "Deep Bass" in out
        assert "1 preset(s), 0 favorite(s)" in out

    def test_list_empty(self, capsys, lib_args):
        assert main(lib_args + ["list", "--favorites"]) == 0
        assert "No presets found." in capsys.readouterr().out

    def test_show(self, capsys, lib_args, saved):
        assert main(lib_args + ["show", saved.name]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Deep Bass")
        assert "sub heavy" in out

    def test_show_json(self, capsys, lib_args, saved, bass_patch):
        assert run_json(capsys, lib_args + ["show", saved.name, "--json"]) == bass_patch.to_dict()

    def test_show_missing(self, capsys, lib_args):
        assert main(lib_args + ["show", "nope.json"]) == 1
        assert "ERROR:" in capsys.readouterr().out

    def test_favorite(self, capsys, lib_args, saved, library):
        assert main(lib_args + ["favorite", saved.name]) == 0
        assert library.load(saved.name).favorite

    def test_delete(self, capsys, lib_args, saved):
        assert main(lib_args + ["delete", saved.name]) == 0
        assert not saved.exists()
        assert main(lib_args + ["delete", saved.name]) == 1

    def test_backup_restore(self, capsys, lib_args, saved, tmp_path):
        dest = tmp_path / "b.zip"
        assert main(lib_args + ["backup", str(dest)]) == 0
        fresh = tmp_path / "fresh"
        assert main(["--library", str(fresh), "restore", str(dest)]) == 0
        assert "Imported 1 new preset(s)" in capsys.readouterr().out

    def test_import(self, capsys, lib_args, library_dir, bass_patch, tmp_path):
        path = export_freakgen(bass_patch, tmp_path / "x.freakgen")
        assert run_json(capsys, lib_args + ["import", str(path), "--json"]) == bass_patch.to_dict()
        assert main(lib_args + ["import", str(path), "--save", "Imported"]) == 0
        assert PresetLibrary(library_dir).list_presets()[0].name == "Imported"

    def test_import_wrong_format(self, capsys, tmp_path):
        path = tmp_path / "bad.freakgen"
        path.write_text(json.dumps({"format": "other"}))
        assert main(["import", str(path)]) == 1


class TestMidiCommands:

    def test_push_virtual(self, capsys, lib_args, library, bass_patch):
        path = library.save(bass_patch, "Push Me")
        assert main(lib_args + ["push", path.name, "--virtual"]) == 0
        out = capsys.readouterr().out
        assert "params via MIDI" in out
        assert "Voice Mode: Monophonic" in out

    def test_push_freakgen_file(self, capsys, bass_patch, tmp_path):
        path = export_freakgen(bass_patch, tmp_path / "p.freakgen")
        assert main(["push", str(path), "--virtual"]) == 0

    def test_program_virtual(self, capsys):
        assert main(["program", "129", "--virtual"]) == 0
        assert "bank 1, program 0" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestDebugFlag:

    def test_debug_writes_log_file(self, capsys):
        from freakgen.utils.app_paths import get_log_path
        from freakgen.utils.logger import LogLevel, logger, set_log_level

        try:
            assert main(["--debug", "generate", "-s", "1"]) == 0
        finally:
            logger.disable_file_logging()
            set_log_level(LogLevel.INFO)
        assert "[GEN] Generated" in get_log_path().read_text()


class TestExportToDirectory:

    def test_default_file_name(self, capsys, tmp_path):
        assert main(["generate", "--style", "keys", "--export", str(tmp_path), "-s", "2"]) == 0
        files = list(tmp_path.glob("FreakGEN_keys_*.freakgen"))
        assert len(files) == 1


class TestSettingsCommand:

    def test_show_defaults(self, capsys):
        assert main(["settings"]) == 0
        out = capsys.readouterr().out
        assert "history_depth  3" in out
        assert "midi_port      None" in out

    def test_update_and_save(self, capsys, tmp_path):
        argv = ["settings", "--history-depth", "7", "--midi-port", "MicroFreak",
                "--emulate", "--library-path", str(tmp_path / "presets")]
        assert main(argv) == 0
        assert "Saved:" in capsys.readouterr().err
        settings = load_settings()
        assert settings.history_depth == 7
        assert settings.midi_port == "MicroFreak"
        assert settings.emulate_synth is True
        assert settings.library_path == tmp_path / "presets"

    def test_depth_clamped_and_port_cleared(self):
        main(["settings", "--midi-port", "MicroFreak"])
        assert main(["settings", "--history-depth", "500", "--midi-port", "", "--no-emulate"]) == 0
        settings = load_settings()
        assert settings.history_depth == 50
        assert settings.midi_port is None
        assert settings.emulate_synth is False

    def test_saved_library_path_used(self, capsys, tmp_path):
        presets = tmp_path / "elsewhere"
        main(["settings", "--library-path", str(presets)])
        assert main(["generate", "--save", "Moved", "-s", "1"]) == 0
        assert [r.name for r in PresetLibrary(presets).list_presets()] == ["Moved"]


class TestSessionCommand:

    def run_session(self, monkeypatch, capsys, script, *argv):
        monkeypatch.setattr("sys.stdin", io.StringIO(script))
        assert main(["session", *argv]) == 0
        return capsys.readouterr().out

    def test_generate_lock_undo_redo(self, monkeypatch, capsys):
        out = self.run_session(monkeypatch, capsys,
                               "gen bass simple\nlock osc\ngen pad high\nundo\nredo\nquit\n", "-s", "5")
        assert "history depth 3" in out
        assert "bass / simple / " in out
        assert "osc: locked" in out
        assert "pad / high / " in out
        assert "Nothing to" not in out

    def test_history_depth_from_settings(self, monkeypatch, capsys):
        main(["settings", "--history-depth", "1"])
        capsys.readouterr()
        out = self.run_session(monkeypatch, capsys,
                               "gen\ngen\ngen\nundo\nundo\n", "-s", "5")
        assert "history depth 1" in out
        assert out.count("Nothing to undo") == 1

    def test_save(self, monkeypatch, capsys, library_dir):
        self.run_session(monkeypatch, capsys, "save\ngen keys\nsave Night Keys\n", "-s", "2")
        assert [r.name for r in PresetLibrary(library_dir).list_presets()] == ["Night Keys"]

    def test_bad_input_keeps_running(self, monkeypatch, capsys):
        out = self.run_session(monkeypatch, capsys, "lock filter\nfoo\nshow\nexit\n")
        assert "ERROR: Unknown module: filter" in out
        assert "Unknown command: foo" in out
        assert "No patch yet" in out
