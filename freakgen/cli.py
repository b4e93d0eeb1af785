"""
freakgen/cli.py
Command-line interface for FreakGEN

Usage:
    python -m freakgen generate --style bass --intensity high --seed 42
    python -m freakgen generate --style pad --save "Slow Pad" --json
    python -m freakgen list --style bass --favorites --sort date
    python -m freakgen push my_bass_1760000000000.json --virtual
    python -m freakgen program 129
    python -m freakgen settings --history-depth 10 --midi-port "MicroFreak"
    python -m freakgen session --seed 7
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import INTENSITIES, RANDOM, STYLES
from .config.settings import clamp_history_depth, load_settings, save_settings
from .engine import Engine, LockSet, Patch, RandomSource, generate_patch, seed_from_string
from .engine.patch import MODULES
from .engine.rows import ParamRow
from .engine.session import PatchSession
from .errors import FreakGenError
from .midi import VIRTUAL_PORT, MidiOutput, build_dispatch, find_preferred_port, program_change
from .midi.cc_map import is_fixed_attack
from .presets import PresetLibrary, default_export_name, export_freakgen, import_freakgen
from .utils.app_paths import get_log_path
from .utils.logger import LogLevel, logger, set_log_level

MODULE_TITLES = {
    "master": "MASTER",
    "osc": "OSCILLATOR",
    "env": "ENVELOPE",
    "cyc": "CYCLING ENV",
    "lfo": "LFO",
}


# =============================================================================
# RENDERING
# =============================================================================

def format_rows(rows: Optional[tuple]) -> List[str]:
    lines = []
    for row in rows or ():
        if not isinstance(row, ParamRow) or not row.visible:
            continue
        line = f"  {row.label:<14} {row.value}"
        if row.label == "Attack" and is_fixed_attack(row):
            line += f"  (push sends raw {row.raw})"
        lines.append(line)
    return lines


def format_patch(patch: Patch) -> str:
    """Plain-text patch sheet, one module per section."""
    lines = [f"{patch.real_style} / {patch.intensity} / {patch.engine}"]
    if patch.style != patch.real_style:
        lines[0] += f"  (selected: {patch.style})"
    if patch.seed is not None:
        lines.append(f"seed {patch.seed}")

    for name in ("osc", "master", "env", "cyc", "lfo"):
        lines.append("")
        lines.append(f"[{MODULE_TITLES[name]}]")
        lines.extend(format_rows(getattr(patch, name)))

    lines.append("")
    lines.append("[MATRIX]")
    if patch.matrix is not None:
        for slot, target in enumerate(patch.matrix.config, start=1):
            lines.append(f"  Assign {slot:<7} {target}")
        for conn in patch.matrix.connections:
            lines.append(f"  {conn.describe(patch.voice_mode)}")
    return "\n".join(lines)


def _emit(patch: Patch, as_json: bool):
    if as_json:
        print(json.dumps(patch.to_dict(), indent=2))
    else:
        print(format_patch(patch))


def _library(args: argparse.Namespace) -> PresetLibrary:
    if args.library:
        return PresetLibrary(Path(args.library))
    return PresetLibrary(load_settings().library_path)


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_generate(args: argparse.Namespace) -> int:
    """Generate a patch, optionally saving or exporting it."""
    rng = RandomSource(seed_from_string(args.seed) if args.seed else None)

    if args.lock and not args.previous:
        print("ERROR: --lock needs --from PRESET")
        return 1

    previous = None
    locks = LockSet.of(*args.lock) if args.lock else LockSet()
    if args.previous:
        library = _library(args)
        previous = library.load(args.previous).patch

    patch = generate_patch(args.style, args.intensity, args.engine,
                           locks=locks, previous=previous, rng=rng)
    _emit(patch, args.json)

    if args.save is not None:
        library = _library(args)
        name = args.save or library.default_name(patch, rng)
        path = library.save(patch, name, args.description or "")
        print(f"Saved: {path}", file=sys.stderr)

    if args.export:
        dest = Path(args.export)
        if dest.is_dir():
            dest = dest / default_export_name(patch)
        path = export_freakgen(patch, dest)
        print(f"Exported: {path}", file=sys.stderr)
    return 0


def cmd_engines(args: argparse.Namespace) -> int:
    """List oscillator engines with their control labels."""
    for engine in Engine:
        labels = " / ".join(engine.labels)
        print(f"  {engine.display_name:<16} CC {engine.type_cc:>3}  {labels}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List presets in the library."""
    library = _library(args)
    records = library.query(
        search=args.search or "",
        style=args.style,
        engine=args.engine,
        intensity=args.intensity,
        favorites_only=args.favorites,
        sort=args.sort,
    )
    if not records:
        print("No presets found.")
        return 0

    current = None
    for record in records:
        if record.intensity != current:
            current = record.intensity
            print(f"\n{(current or 'unknown').upper()}")
        star = "*" if record.favorite else " "
        print(f" {star} {record.name:<28} {record.style:<11} {record.engine:<16} {record.filename}")

    stats = library.stats()
    print(f"\n{stats['total']} preset(s), {stats['favorites']} favorite(s)")
    if library.corrupted_count:
        print(f"WARNING: {library.corrupted_count} corrupted file(s) skipped")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Show a saved preset."""
    record = _library(args).load(args.preset)
    if not args.json:
        print(f"{record.name}{'  *' if record.favorite else ''}")
        if record.description:
            print(record.description)
        print(record.date)
        print()
    _emit(record.patch, args.json)
    return 0


def cmd_favorite(args: argparse.Namespace) -> int:
    favorite = _library(args).toggle_favorite(args.preset)
    print(f"{args.preset}: {'favorite' if favorite else 'not favorite'}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    if not _library(args).delete(args.preset):
        print(f"ERROR: Preset not found: {args.preset}")
        return 1
    print(f"Deleted {args.preset}")
    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    count = _library(args).backup(Path(args.output))
    print(f"Backed up {count} preset(s) to {args.output}")
    return 0


def cmd_restore(args: argparse.Namespace) -> int:
    count = _library(args).restore(Path(args.zip))
    print(f"Imported {count} new preset(s)")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Import a .freakgen file, printing it or saving it to the library."""
    patch = import_freakgen(Path(args.file))
    _emit(patch, args.json)
    if args.save is not None:
        library = _library(args)
        path = library.save(patch, args.save or library.default_name(patch))
        print(f"Saved: {path}", file=sys.stderr)
    return 0


def _open_output(args: argparse.Namespace) -> MidiOutput:
    if args.virtual:
        return MidiOutput(VIRTUAL_PORT)
    settings = load_settings()
    if settings.emulate_synth and not args.port:
        return MidiOutput(VIRTUAL_PORT)
    return MidiOutput(args.port or settings.midi_port or find_preferred_port())


def cmd_push(args: argparse.Namespace) -> int:
    """Send a preset to the synth and print what must be set by hand."""
    path = Path(args.preset)
    if path.suffix == ".freakgen":
        patch = import_freakgen(path)
    else:
        patch = _library(args).load(args.preset).patch

    plan = build_dispatch(patch)
    with _open_output(args) as out:
        sent = out.push(plan)

    print(f"Sent {sent} params via MIDI")
    if plan.manual:
        print("\nSet by hand:")
        for instruction in plan.manual:
            print(f"  - {instruction}")
    return 0


def cmd_program(args: argparse.Namespace) -> int:
    """Select a stored preset (1-384) on the synth."""
    bank, program = program_change(args.number)
    with _open_output(args) as out:
        out.send_program_change(args.number)
    print(f"Selected preset {bank * 128 + program + 1} (bank {bank}, program {program})")
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    """Show settings; any option given is changed and saved first."""
    settings = load_settings()
    updates = {
        "library_path": Path(args.library_path).expanduser() if args.library_path else None,
        "history_depth": clamp_history_depth(args.history_depth) if args.history_depth is not None else None,
        "midi_port": args.midi_port,
        "emulate_synth": args.emulate,
        "debug": args.debug_log,
    }
    updates = {key: value for key, value in updates.items() if value is not None}
    if updates:
        if updates.get("midi_port") == "":
            updates["midi_port"] = None
        for key, value in updates.items():
            setattr(settings, key, value)
        path = save_settings(settings)
        print(f"Saved: {path}", file=sys.stderr)

    for key, value in settings.to_dict().items():
        print(f"  {key:<14} {value}")
    return 0


SESSION_HELP = """\
  gen [STYLE] [INTENSITY] [ENGINE]   new patch, locked modules carried over
  lock MODULE                        toggle a lock (master osc env cyc lfo matrix)
  undo | redo                        step through history
  show                               print the current patch
  save [NAME]                        save the current patch to the library
  quit"""


def _session_step(session: PatchSession, words: List[str], args: argparse.Namespace) -> None:
    command, rest = words[0].lower(), words[1:]

    if command in ("gen", "g"):
        print(format_patch(session.generate(*rest[:3])))
    elif command == "lock":
        if not rest:
            print(f"Locked: {', '.join(session.locks.locked) or 'none'}")
            return
        state = session.toggle_lock(rest[0].lower())
        print(f"{rest[0].lower()}: {'locked' if state else 'unlocked'}")
    elif command in ("undo", "redo"):
        patch = session.undo() if command == "undo" else session.redo()
        if patch is None:
            print(f"Nothing to {command}")
        else:
            print(format_patch(patch))
    elif command == "show":
        print(format_patch(session.current) if session.current else "No patch yet")
    elif command == "save":
        if session.current is None:
            print("No patch yet")
            return
        library = _library(args)
        name = " ".join(rest) or library.default_name(session.current)
        print(f"Saved: {library.save(session.current, name)}")
    elif command == "help":
        print(SESSION_HELP)
    else:
        print(f"Unknown command: {command} (try 'help')")


def cmd_session(args: argparse.Namespace) -> int:
    """Interactive generate / lock / undo loop."""
    settings = load_settings()
    rng = RandomSource(seed_from_string(args.seed) if args.seed else None)
    session = PatchSession(history_depth=settings.history_depth, rng=rng)
    print(f"FreakGEN session, history depth {session.history.depth}. Type 'help' for commands.")

    while True:
        try:
            line = input("freakgen> ")
        except EOFError:
            print()
            break
        words = line.split()
        if not words:
            continue
        if words[0].lower() in ("quit", "exit", "q"):
            break
        try:
            _session_step(session, words, args)
        except (FreakGenError, ValueError) as e:
            print(f"ERROR: {e}")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

def _add_midi_args(parser: argparse.ArgumentParser):
    parser.add_argument("--port", "-p", type=str, help="MIDI output port name")
    parser.add_argument("--virtual", action="store_true", help="Log instead of sending")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="freakgen",
        description="FreakGEN - MicroFreak patch generator",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--library", "-L", type=str, help="Preset library directory")
    parser.add_argument("--debug", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    gen_parser = subparsers.add_parser("generate", help="Generate a patch")
    gen_parser.add_argument("--style", default=RANDOM, help=f"One of: {', '.join(STYLES)}")
    gen_parser.add_argument("--intensity", "-i", default="simple", help=f"One of: {', '.join(INTENSITIES)}")
    gen_parser.add_argument("--engine", "-e", default=RANDOM, help="Engine name or 'random'")
    gen_parser.add_argument("--seed", "-s", type=str, help="Run seed (integer or text)")
    gen_parser.add_argument("--from", dest="previous", type=str, help="Preset to carry locked modules from")
    gen_parser.add_argument("--lock", action="append", choices=MODULES, help="Module to keep (repeatable)")
    gen_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    gen_parser.add_argument("--save", nargs="?", const="", default=None, help="Save to library (optional name)")
    gen_parser.add_argument("--description", "-d", type=str, help="Description for --save")
    gen_parser.add_argument("--export", "-o", type=str, help="Write a .freakgen file")
    gen_parser.set_defaults(func=cmd_generate)

    engines_parser = subparsers.add_parser("engines", help="List oscillator engines")
    engines_parser.set_defaults(func=cmd_engines)

    list_parser = subparsers.add_parser("list", help="List library presets")
    list_parser.add_argument("--search", "-q", type=str, help="Name/description filter")
    list_parser.add_argument("--style", type=str, help="Style filter")
    list_parser.add_argument("--engine", "-e", type=str, help="Engine filter")
    list_parser.add_argument("--intensity", "-i", type=str, help="Intensity filter")
    list_parser.add_argument("--favorites", "-f", action="store_true", help="Favorites only")
    list_parser.add_argument("--sort", choices=["name", "date"], default="name", help="Order within groups")
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser("show", help="Show a preset")
    show_parser.add_argument("preset", help="Preset filename or path")
    show_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    show_parser.set_defaults(func=cmd_show)

    fav_parser = subparsers.add_parser("favorite", help="Toggle a preset's favorite flag")
    fav_parser.add_argument("preset", help="Preset filename or path")
    fav_parser.set_defaults(func=cmd_favorite)

    delete_parser = subparsers.add_parser("delete", help="Delete a preset")
    delete_parser.add_argument("preset", help="Preset filename or path")
    delete_parser.set_defaults(func=cmd_delete)

    backup_parser = subparsers.add_parser("backup", help="Zip the library")
    backup_parser.add_argument("output", help="Destination .zip")
    backup_parser.set_defaults(func=cmd_backup)

    restore_parser = subparsers.add_parser("restore", help="Import presets from a backup zip")
    restore_parser.add_argument("zip", help="Backup .zip")
    restore_parser.set_defaults(func=cmd_restore)

    import_parser = subparsers.add_parser("import", help="Read a .freakgen file")
    import_parser.add_argument("file", help=".freakgen file")
    import_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    import_parser.add_argument("--save", nargs="?", const="", default=None, help="Save to library (optional name)")
    import_parser.set_defaults(func=cmd_import)

    push_parser = subparsers.add_parser("push", help="Send a preset to the synth")
    push_parser.add_argument("preset", help="Preset filename, path or .freakgen file")
    _add_midi_args(push_parser)
    push_parser.set_defaults(func=cmd_push)

    program_parser = subparsers.add_parser("program", help="Select a stored preset on the synth")
    program_parser.add_argument("number", type=int, help="Preset number 1-384")
    _add_midi_args(program_parser)
    program_parser.set_defaults(func=cmd_program)

    settings_parser = subparsers.add_parser("settings", help="Show or change saved settings")
    settings_parser.add_argument("--library-path", type=str, help="Default preset library directory")
    settings_parser.add_argument("--history-depth", type=int, help="Undo steps kept by 'session' (1-50)")
    settings_parser.add_argument("--midi-port", type=str, help="Default MIDI output port ('' to clear)")
    settings_parser.add_argument("--emulate", dest="emulate", action="store_true", default=None,
                                 help="Push to the virtual port by default")
    settings_parser.add_argument("--no-emulate", dest="emulate", action="store_false")
    settings_parser.add_argument("--debug-log", dest="debug_log", action="store_true", default=None,
                                 help="Always log at DEBUG level to the log file")
    settings_parser.add_argument("--no-debug-log", dest="debug_log", action="store_false")
    settings_parser.set_defaults(func=cmd_settings)

    session_parser = subparsers.add_parser("session", help="Interactive generate/lock/undo loop")
    session_parser.add_argument("--seed", "-s", type=str, help="Run seed (integer or text)")
    session_parser.set_defaults(func=cmd_session)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.debug or load_settings().debug:
        set_log_level(LogLevel.DEBUG)
        log_path = get_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.enable_file_logging(str(log_path))

    try:
        return args.func(args)
    except FreakGenError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
