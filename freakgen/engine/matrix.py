"""
Modulation Matrix
Samples source -> destination connections for a patch and resolves the
three Assign slots to concrete parameters.

Each connection routes a modulation source to a matrix column with:
- amount: signed depth, -100..100 (Pitch guardrail and Unispread narrow it)
- target_param: the column itself, or the parameter an Assign slot points at

Rules enforced here:
- no two connections share a (source, destination) pair
- Spread/Unispread are only assignable in Unison voice mode
- a CycEnv-owned Assign slot forces at least one CycEnv connection
- CycEnv only counts as used when it modulates something other than itself
- an Assign slot no connection targets reads "INT - Blank"
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from ..config import (
    AMOUNT_RANGE,
    ASSIGN_SLOTS,
    ASSIGN_TARGETS,
    BLANK,
    CONNECTION_COUNTS,
    CYC_ENV,
    CYC_OWNED_TARGETS,
    DEFAULT_INTENSITY,
    FIXED_DESTINATIONS,
    LFO,
    MATRIX_COLUMNS,
    MOD_SOURCES,
    PITCH,
    PITCH_GUARD_INTENSITIES,
    PITCH_GUARD_STEPS,
    UNISON_ONLY_TARGETS,
    UNISPREAD,
)
from ..utils.logger import logger
from .sampling import RandomSource

Amount = float


@dataclass
class ModConnection:
    """A single modulation routing connection."""
    source: str           # CycEnv, Envelope, LFO, Pressure, Key/Arp
    destination: str      # Pitch, Wave, Timbre, Cutoff, Assign 1-3
    amount: Amount = 0
    target_param: str = ""

    def __post_init__(self):
        if not self.target_param:
            self.target_param = self.destination

    @property
    def key(self) -> Tuple[str, str]:
        """Unique key for this connection."""
        return (self.source, self.destination)

    @property
    def is_assign(self) -> bool:
        return self.destination in ASSIGN_SLOTS

    @property
    def label(self) -> str:
        amount = f"+{self.amount}" if self.amount > 0 else f"{self.amount}"
        return f"{self.source} -> {self.destination}: {amount}"

    def describe(self, voice_mode: Optional[str]) -> str:
        """Label, flagging a Unispread route that does nothing outside Unison."""
        if self.target_param == UNISPREAD and voice_mode != "Unison":
            return f"{self.label} (No Unison)"
        return self.label

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict for preset saving."""
        return {
            'source': self.source,
            'destination': self.destination,
            'amount': self.amount,
            'target_param': self.target_param,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModConnection':
        """Deserialize, accepting the short s/d/a keys of older exports."""
        return cls(
            source=data['source'] if 'source' in data else data['s'],
            destination=data['destination'] if 'destination' in data else data['d'],
            amount=data.get('amount', data.get('a', 0)),
            target_param=data.get('target_param', data.get('targetParam', '')),
        )


@dataclass(frozen=True)
class ActiveModulators:
    """Modulation sources that survive in the matrix.

    Required input for the cycling envelope and LFO generators: a module
    nothing routes from is generated blank.
    """
    sources: FrozenSet[str] = frozenset()

    @property
    def cyc_env(self) -> bool:
        return CYC_ENV in self.sources

    @property
    def lfo(self) -> bool:
        return LFO in self.sources

    def __contains__(self, source: str) -> bool:
        return source in self.sources


@dataclass
class MatrixData:
    """Generated matrix: connections plus Assign 1-3 configuration."""
    used_sources: Set[str] = field(default_factory=set)
    used_assigns: Set[str] = field(default_factory=set)  # diagnostic only
    connections: List[ModConnection] = field(default_factory=list)
    config: List[str] = field(default_factory=lambda: [BLANK] * len(ASSIGN_SLOTS))

    def active_modulators(self) -> ActiveModulators:
        return ActiveModulators(frozenset(self.used_sources))

    def connections_to(self, destination: str) -> List[ModConnection]:
        return [c for c in self.connections if c.destination == destination]

    def connections_from(self, source: str) -> List[ModConnection]:
        return [c for c in self.connections if c.source == source]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'used_sources': sorted(self.used_sources),
            'used_assigns': sorted(self.used_assigns),
            'connections': [c.to_dict() for c in self.connections],
            'config': list(self.config),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatrixData':
        """Rebuild from a saved matrix.

        Used sources and assigns are derived from the connections; the stored
        sets are ignored (older exports wrote them as empty objects).
        """
        connections = []
        for conn_data in data.get('connections', []):
            try:
                connections.append(ModConnection.from_dict(conn_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Invalid connection data: {conn_data}", component="MATRIX", details=str(e))
        return cls(
            used_sources={c.source for c in connections},
            used_assigns={c.destination for c in connections if c.is_assign},
            connections=connections,
            config=list(data.get('config', [BLANK] * len(ASSIGN_SLOTS))),
        )


# =============================================================================
# GENERATION
# =============================================================================

def assign_index(destination: str) -> Optional[int]:
    """0-based slot index for 'Assign N', None for fixed destinations."""
    try:
        return ASSIGN_SLOTS.index(destination)
    except ValueError:
        return None


def resolve_target(destination: str, config: List[str]) -> str:
    index = assign_index(destination)
    return destination if index is None else config[index]


def connection_count(intensity: str, rng: RandomSource) -> int:
    lo, hi = CONNECTION_COUNTS.get(intensity, CONNECTION_COUNTS[DEFAULT_INTENSITY])
    return rng.r_val(lo, hi)


def assign_pool(voice_mode: Optional[str]) -> List[str]:
    """Assignable targets for this voice mode (unison-only ones need Unison)."""
    if voice_mode == "Unison":
        return list(ASSIGN_TARGETS)
    return [t for t in ASSIGN_TARGETS if t not in UNISON_ONLY_TARGETS]


def sample_amount(style: str, intensity: str, destination: str, target_param: str,
                  rng: RandomSource) -> Amount:
    if (destination == PITCH and style != "percussion"
            and intensity in PITCH_GUARD_INTENSITIES):
        amount: Amount = rng.r_val(-PITCH_GUARD_STEPS, PITCH_GUARD_STEPS) / 10.0
    else:
        amount = rng.r_val(*AMOUNT_RANGE)
    if target_param == UNISPREAD:
        amount = abs(amount)
    return amount


def is_effective_cyc(conn: ModConnection) -> bool:
    """CycEnv routed into its own rise/fall/hold/amount does nothing."""
    if conn.source != CYC_ENV:
        return False
    if conn.destination in FIXED_DESTINATIONS:
        return True
    return conn.is_assign and conn.target_param not in CYC_OWNED_TARGETS


def generate_matrix(style: str, intensity: str, voice_mode: Optional[str],
                    rng: RandomSource) -> MatrixData:
    """Sample a modulation matrix; see module docstring for the rules."""
    count = connection_count(intensity, rng)
    pool = assign_pool(voice_mode)

    config = [pool.pop(rng.r_int(len(pool))) for _ in ASSIGN_SLOTS]
    forced_cyc = 1 if any(c in CYC_OWNED_TARGETS for c in config) else 0

    matrix = MatrixData(config=config)
    pairs = set()

    for _ in range(count):
        if forced_cyc > 0:
            source = CYC_ENV
            forced_cyc -= 1
        else:
            source = rng.pick(MOD_SOURCES)
        destination = rng.pick(MATRIX_COLUMNS)

        if (source, destination) in pairs:
            continue
        pairs.add((source, destination))

        target_param = resolve_target(destination, config)
        matrix.used_sources.add(source)
        if destination in ASSIGN_SLOTS:
            matrix.used_assigns.add(destination)

        amount = sample_amount(style, intensity, destination, target_param, rng)
        matrix.connections.append(ModConnection(source, destination, amount, target_param))

    if not any(is_effective_cyc(c) for c in matrix.connections):
        _retire_cyc_env(matrix, pool, rng)

    for i, slot in enumerate(ASSIGN_SLOTS):
        if not matrix.connections_to(slot):
            matrix.config[i] = BLANK

    logger.matrix(
        f"{len(matrix.connections)}/{count} connections",
        details=f"sources={sorted(matrix.used_sources)} config={matrix.config}",
    )
    return matrix


def _retire_cyc_env(matrix: MatrixData, pool: List[str], rng: RandomSource) -> None:
    """Drop CycEnv and move Assign slots off CycEnv-owned parameters."""
    matrix.used_sources.discard(CYC_ENV)
    matrix.connections = [c for c in matrix.connections if c.source != CYC_ENV]
    matrix.used_assigns = {c.destination for c in matrix.connections if c.is_assign}

    for i, slot in enumerate(ASSIGN_SLOTS):
        if matrix.config[i] not in CYC_OWNED_TARGETS:
            continue

        replacements = [t for t in pool if t not in CYC_OWNED_TARGETS]
        if not replacements:
            logger.warning(
                f"No replacement for {matrix.config[i]} in {slot}, leaving it in place",
                component="MATRIX",
            )
            continue

        replacement = rng.pick(replacements)
        pool.remove(replacement)
        matrix.config[i] = replacement

        for conn in matrix.connections_to(slot):
            conn.target_param = replacement
            if replacement == UNISPREAD:
                conn.amount = abs(conn.amount)
