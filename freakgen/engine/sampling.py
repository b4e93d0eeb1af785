"""
Value samplers.

RandomSource is the only source of randomness in the engine. It is backed by
xorshift32 so a given seed produces the same patch on every platform and
Python version. Everything else here is a pure raw (0-127) <-> display
mapping.

CRITICAL: Do NOT use Python's built-in hash() for seeds - it's salted
per-process.
"""

import hashlib
import math
import random
from typing import Optional, Sequence, Tuple, TypeVar

from ..config import (
    CUTOFF_KHZ_SPAN,
    LFO_MAX_HZ,
    PERCUSSION_CUTOFF_HZ_SPAN,
)

T = TypeVar("T")

RAW_MAX = 127


def stable_u32(*parts) -> int:
    """
    Generate a stable 32-bit unsigned integer from arbitrary parts.

    Uses SHA-256 truncated to 4 bytes for cross-platform determinism.
    """
    s = "|".join(str(p) for p in parts).encode("utf-8")
    return int.from_bytes(hashlib.sha256(s).digest()[:4], "big")


def seed_from_string(text: str) -> int:
    """Convert arbitrary text (e.g. a CLI --seed value) to a run seed."""
    text = text.strip()
    if text.isdigit():
        return int(text) & 0xFFFFFFFF
    return stable_u32("run", text)


class XorShift32:
    """
    xorshift32 PRNG.
    State must never be 0; if 0 then use 0x6D2B79F5.
    """
    DEFAULT_SEED = 0x6D2B79F5

    def __init__(self, seed: int = 0):
        seed &= 0xFFFFFFFF
        if seed == 0:
            seed = self.DEFAULT_SEED
        self.state = seed

    def next_uint32(self) -> int:
        """Generate next random uint32."""
        x = self.state
        x ^= (x << 13) & 0xFFFFFFFF
        x ^= (x >> 17)
        x ^= (x << 5) & 0xFFFFFFFF
        self.state = x
        return x

    def choice(self, n: int) -> int:
        """
        Uniform choice over [0, n) using rejection sampling.
        Requires n >= 1.
        """
        if n <= 0:
            raise ValueError("n must be >= 1")
        if n == 1:
            return 0

        limit = (0x100000000 // n) * n

        while True:
            r = self.next_uint32()
            if r < limit:
                return r % n


class RandomSource:
    """
    Injectable random source for the generators.

    Usage:
        rng = RandomSource(seed=42)
        rng.r_val(2, 3)        # 2 or 3
        rng.pick(["LP", "HP"])
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = random.randint(1, 0xFFFFFFFF)
        self.seed = seed & 0xFFFFFFFF
        self._prng = XorShift32(self.seed)

    def r_int(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        return self._prng.choice(n)

    def r_val(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi] (inclusive)."""
        if hi < lo:
            raise ValueError(f"empty range {lo}..{hi}")
        return lo + self._prng.choice(hi - lo + 1)

    def random(self) -> float:
        """Float in [0, 1)."""
        return self._prng.next_uint32() / 0x100000000

    def chance(self, p: float) -> bool:
        """True with probability p."""
        return self.random() < p

    def uniform(self, lo: float, hi: float) -> float:
        return lo + (hi - lo) * self.random()

    def pick(self, seq: Sequence[T]) -> T:
        """Uniformly chosen element of a non-empty sequence."""
        return seq[self.r_int(len(seq))]

    def raw(self) -> int:
        """Uniform raw CC value 0-127."""
        return self.r_int(RAW_MAX + 1)


# =============================================================================
# RAW <-> DISPLAY MAPPINGS
# =============================================================================

def to_percent(raw: int) -> int:
    """Raw 0-127 to a whole percentage."""
    return int(round(raw / RAW_MAX * 100))


def format_percent(raw: int) -> str:
    return f"{to_percent(raw)}%"


def percent_bounds(min_pc: float, max_pc: float) -> Tuple[int, int]:
    """Raw bounds whose percentage display stays inside [min_pc, max_pc]."""
    return math.ceil(min_pc / 100 * RAW_MAX), math.floor(max_pc / 100 * RAW_MAX)


def format_time(ms: int) -> str:
    """1000ms and above render as seconds with two decimals."""
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    return f"{ms}ms"


def time_from_raw(raw: int, min_ms: int, max_ms: int,
                  raw_lo: int = 0, raw_hi: int = RAW_MAX) -> int:
    """Linear map of raw (within raw_lo..raw_hi) onto whole milliseconds."""
    span = raw_hi - raw_lo
    if span <= 0:
        return min_ms
    return min_ms + int(round((raw - raw_lo) / span * (max_ms - min_ms)))


def time_display(raw: int, min_ms: int, max_ms: int,
                 raw_lo: int = 0, raw_hi: int = RAW_MAX) -> str:
    return format_time(time_from_raw(raw, min_ms, max_ms, raw_lo, raw_hi))


def cutoff_display(raw: int, percussion: bool = False) -> str:
    """Percussion reads in Hz over 500-5000, everything else in kHz."""
    if percussion:
        lo, hi = PERCUSSION_CUTOFF_HZ_SPAN
        return f"{int(round(lo + raw / RAW_MAX * (hi - lo)))}Hz"
    lo, hi = CUTOFF_KHZ_SPAN
    return f"{lo + raw / RAW_MAX * (hi - lo):.1f}kHz"


def bipolar_display(raw: int) -> int:
    """Bipolar raw (64 = zero) to -100..100."""
    return max(-100, min(100, int(round((raw - 64) / 63 * 100))))


def lfo_rate_display(raw: int) -> str:
    """Free-running LFO rate in Hz."""
    return f"{raw / RAW_MAX * LFO_MAX_HZ:.2f} Hz"
