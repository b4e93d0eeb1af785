"""
Preset library - save/load/browse operations on a directory of preset JSON
files, plus .freakgen export/import and ZIP backup/restore.

Files are named <slug>_<epoch-ms>.json and written atomically.
"""

import json
import os
import tempfile
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import APP_VERSION, FREAKGEN_FORMAT, FREAKGEN_FORMAT_VERSION, INTENSITIES
from ..engine.patch import Patch
from ..engine.sampling import RandomSource
from ..errors import PresetError
from ..utils.logger import logger
from .preset_schema import PresetRecord, validate_preset
from .preset_utils import TimestampProvider, format_timestamp, slugify

PathLike = Union[str, Path]

SORT_NAME = "name"
SORT_DATE = "date"


def write_json_atomic(dest_path: PathLike, data: dict, *, allow_overwrite: bool = True) -> None:
    """
    Write JSON to dest_path atomically.

    1. Serialize with json.dumps(indent=2)
    2. Write temp file in dirname(dest_path)
    3. Commit using os.replace(temp, dest_path)

    Raises:
        PresetError: If the write fails or the file exists when allow_overwrite=False
    """
    dest_path = Path(dest_path)

    if not allow_overwrite and dest_path.exists():
        raise PresetError(f"File already exists: {dest_path}")

    json_str = json.dumps(data, indent=2)

    try:
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(suffix='.tmp', prefix='.preset_', dir=dest_path.parent)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(json_str)
            os.replace(temp_path, dest_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
    except OSError as e:
        raise PresetError(f"Failed to write {dest_path}: {e}")


def read_json(filepath: PathLike):
    filepath = Path(filepath)
    if not filepath.exists():
        raise PresetError(f"File not found: {filepath}")
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise PresetError(f"Invalid JSON in {filepath.name}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise PresetError(f"Failed to read {filepath}: {e}")


class PresetLibrary:
    """
    Manages the preset library directory.

    Usage:
        library = PresetLibrary(settings.library_path)
        path = library.save(patch, "Fat Bass", "detuned SawX")
        for record in library.query(style="bass", favorites_only=True):
            print(record.name)
    """

    def __init__(self, library_dir: PathLike):
        self.library_dir = Path(library_dir)
        self.library_dir.mkdir(parents=True, exist_ok=True)
        self.corrupted_count = 0

    # -------------------------------------------------------------------------
    # Save / load
    # -------------------------------------------------------------------------

    def save(self, patch: Patch, name: str = "", description: str = "") -> Path:
        """
        Save a patch as a new preset.

        Returns:
            Path to the written file
        """
        timestamp, epoch_ms = TimestampProvider.now()
        record = PresetRecord.for_patch(patch, name, description, date=timestamp)

        filepath = self.library_dir / f"{slugify(record.name)}_{epoch_ms}.json"
        write_json_atomic(filepath, record.to_dict(), allow_overwrite=False)
        record.filename = filepath.name

        logger.info(f"Saved preset '{record.name}'", component="PRESET", details=filepath.name)
        return filepath

    def load(self, filepath: PathLike) -> PresetRecord:
        """
        Load a preset file.

        Raises:
            PresetError: If the file doesn't exist, is invalid JSON, or fails validation
        """
        filepath = self._resolve(filepath)
        data = read_json(filepath)

        is_valid, errors = validate_preset(data)
        if not is_valid:
            raise PresetError(f"Invalid preset {filepath.name}: {'; '.join(errors)}")
        for warning in errors:
            logger.preset(f"{filepath.name}: {warning}")

        return PresetRecord.from_dict(data, filename=filepath.name)

    def list_presets(self) -> List[PresetRecord]:
        """
        Every readable preset in the library.

        Corrupted files are skipped; their number is kept in corrupted_count.
        """
        records = []
        self.corrupted_count = 0
        for path in sorted(self.library_dir.glob("*.json")):
            try:
                records.append(self.load(path))
            except PresetError as e:
                logger.error(f"Failed to load preset {path.name}", component="PRESET", details=str(e))
                self.corrupted_count += 1

        if self.corrupted_count:
            logger.warning(f"Skipped {self.corrupted_count} corrupted preset file(s)", component="PRESET")
        return records

    # -------------------------------------------------------------------------
    # Library edits
    # -------------------------------------------------------------------------

    def toggle_favorite(self, filename: PathLike) -> bool:
        """Flip the favorite flag in place. Returns the new value."""
        filepath = self._resolve(filename)
        data = read_json(filepath)
        if not isinstance(data, dict):
            raise PresetError(f"Invalid preset {filepath.name}")
        data["favorite"] = not data.get("favorite", False)
        write_json_atomic(filepath, data)
        return data["favorite"]

    def delete(self, filename: PathLike) -> bool:
        """
        Delete a preset file.

        Returns:
            True if deleted, False if file didn't exist
        """
        filepath = self._resolve(filename)
        if not filepath.exists():
            return False
        try:
            filepath.unlink()
        except OSError as e:
            raise PresetError(f"Failed to delete {filepath.name}: {e}")
        logger.info(f"Deleted preset {filepath.name}", component="PRESET")
        return True

    # -------------------------------------------------------------------------
    # Browsing
    # -------------------------------------------------------------------------

    def query(self, search: str = "", style: Optional[str] = None,
              engine: Optional[str] = None, intensity: Optional[str] = None,
              favorites_only: bool = False, sort: str = SORT_NAME) -> List[PresetRecord]:
        """
        Filter and order presets the way the gallery shows them.

        Results are grouped by intensity (simple first, unknown last), then
        ordered by name or newest-first within each group.
        """
        search = search.lower()

        def matches(r: PresetRecord) -> bool:
            text = search in r.name.lower() or search in (r.description or "").lower()
            return (text
                    and (not style or style == "all" or r.style == style)
                    and (not engine or engine == "all" or r.engine == engine)
                    and (not intensity or intensity == "all" or r.intensity == intensity)
                    and (not favorites_only or r.favorite))

        results = [r for r in self.list_presets() if matches(r)]

        if sort == SORT_DATE:
            results.sort(key=lambda r: r.created, reverse=True)
        else:
            results.sort(key=lambda r: r.name.lower())
        # Stable sort keeps the within-group order
        results.sort(key=lambda r: intensity_rank(r.intensity))
        return results

    def stats(self) -> Dict[str, object]:
        """Totals for the gallery header."""
        records = self.list_presets()
        by_style: Dict[str, int] = {}
        for r in records:
            by_style[r.style] = by_style.get(r.style, 0) + 1
        return {
            "total": len(records),
            "favorites": sum(1 for r in records if r.favorite),
            "by_style": dict(sorted(by_style.items())),
        }

    # -------------------------------------------------------------------------
    # Backup / restore
    # -------------------------------------------------------------------------

    def backup(self, dest_zip: PathLike) -> int:
        """Zip every preset file. Returns the number of files written."""
        dest_zip = Path(dest_zip)
        files = sorted(self.library_dir.glob("*.json"))
        if not files:
            raise PresetError("No presets to backup")
        try:
            dest_zip.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(dest_zip, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for path in files:
                    zf.write(path, arcname=path.name)
        except OSError as e:
            raise PresetError(f"Backup failed: {e}")
        logger.info(f"Backed up {len(files)} preset(s)", component="PRESET", details=str(dest_zip))
        return len(files)

    def restore(self, zip_path: PathLike) -> int:
        """
        Import .json members of a backup zip.

        Existing files are never overwritten. Returns the number imported.
        """
        zip_path = Path(zip_path)
        imported = 0
        try:
            with zipfile.ZipFile(zip_path) as zf:
                for info in zf.infolist():
                    name = Path(info.filename).name
                    if info.is_dir() or not name.endswith(".json"):
                        continue
                    target = self.library_dir / name
                    if target.exists():
                        continue
                    target.write_bytes(zf.read(info))
                    imported += 1
        except (OSError, zipfile.BadZipFile) as e:
            raise PresetError(f"Import failed: {e}")
        logger.info(f"Imported {imported} new preset(s)", component="PRESET", details=str(zip_path))
        return imported

    @staticmethod
    def default_name(patch: Patch, rng: Optional[RandomSource] = None) -> str:
        """Suggested name for the save dialog, e.g. 'My bass 42'."""
        rng = rng or RandomSource()
        return f"My {patch.real_style or 'Patch'} {rng.r_int(99)}"

    def _resolve(self, filename: PathLike) -> Path:
        path = Path(filename)
        if path.is_absolute() or path.parent != Path("."):
            return path
        return self.library_dir / path


def intensity_rank(intensity: str) -> int:
    try:
        return INTENSITIES.index(intensity)
    except ValueError:
        return 99


# =============================================================================
# .freakgen EXPORT / IMPORT
# =============================================================================

def export_freakgen(patch: Patch, dest_path: PathLike) -> Path:
    """Write a single patch in the portable .freakgen format."""
    dest_path = Path(dest_path)
    data = {
        "format": FREAKGEN_FORMAT,
        "version": FREAKGEN_FORMAT_VERSION,
        "exported": format_timestamp(datetime.now(timezone.utc)),
        "appVersion": APP_VERSION,
        "patch": patch.to_dict(),
    }
    write_json_atomic(dest_path, data)
    logger.info(f"Exported patch to {dest_path.name}", component="PRESET")
    return dest_path


def import_freakgen(filepath: PathLike) -> Patch:
    """
    Read a .freakgen file.

    Raises:
        PresetError: If the file is unreadable or not in .freakgen format
    """
    data = read_json(filepath)
    if not isinstance(data, dict) or data.get("format") != FREAKGEN_FORMAT or not data.get("patch"):
        raise PresetError("Invalid FreakGEN file format")
    patch = Patch.from_dict(data["patch"])
    if not patch.is_complete:
        raise PresetError("FreakGEN file holds an incomplete patch")
    return patch


def default_export_name(patch: Patch) -> str:
    epoch_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"FreakGEN_{patch.real_style or 'Patch'}_{epoch_ms}.freakgen"
