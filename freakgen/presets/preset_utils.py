"""
Preset utilities.

Contains:
- TimestampProvider: monotonic timestamp generation
- slugify: filesystem-safe preset file stems
"""

import re
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple


class TimestampProvider:
    """
    Generates strictly increasing timestamps.

    Guarantees:
    - Strictly increasing within a session, so two presets saved in the same
      millisecond still get distinct filenames
    - ISO 8601 format with UTC timezone and millisecond precision
    - Handles wall clock going backward (adds 1ms to the last timestamp)
    """

    _instance: Optional['TimestampProvider'] = None
    _lock = threading.Lock()

    def __init__(self):
        self._last_dt = datetime.now(timezone.utc) - timedelta(milliseconds=1)

    @classmethod
    def get_instance(cls) -> 'TimestampProvider':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def now(cls) -> Tuple[str, int]:
        """Next timestamp as (ISO 8601 string, epoch milliseconds)."""
        dt = cls.get_instance()._generate()
        return format_timestamp(dt), int(dt.timestamp() * 1000)

    def _generate(self) -> datetime:
        with self._lock:
            now = datetime.now(timezone.utc)
            t = now.replace(microsecond=now.microsecond // 1000 * 1000)
            if t <= self._last_dt:
                # Clock went backward or same millisecond
                t = self._last_dt + timedelta(milliseconds=1)
            self._last_dt = t
            return t


def format_timestamp(dt: datetime) -> str:
    """Format datetime as ISO 8601 with ms precision and Z timezone."""
    # Format: 2025-01-23T12:34:56.789Z
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f'{dt.microsecond // 1000:03d}Z'


def parse_timestamp(ts: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp; None if malformed."""
    if not ts:
        return None
    if ts.endswith('Z'):
        ts = ts[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(ts)
    except ValueError:
        return None


def slugify(name: str) -> str:
    """Lower-case name with every non-alphanumeric character replaced by '_'."""
    return re.sub(r'[^a-z0-9]', '_', name, flags=re.IGNORECASE).lower()
