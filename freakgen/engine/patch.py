"""
Patch assembler.

generate_patch() runs the module generators in dependency order:

    Oscillator -> (Chords forces mono) -> Master -> Envelope
    -> Matrix (reads voice mode) -> active modulators -> Cycling Env -> LFO

A locked module keeps the block from the previous patch. Nothing here reads
ambient state: style, intensity, engine, locks, previous patch and the
random source are all explicit.
"""

import copy
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Union

from ..config import CONCRETE_STYLES, DEFAULT_INTENSITY, INTENSITIES, RANDOM, STYLES
from ..utils.logger import logger
from .engines import Engine
from .matrix import MatrixData, generate_matrix
from .modules import generate_cyc, generate_env, generate_lfo, generate_master, generate_osc
from .rows import Block, block_from_list, block_to_list, find_row
from .sampling import RandomSource

MODULES = ("master", "osc", "env", "cyc", "lfo", "matrix")


@dataclass
class LockSet:
    """Modules to carry over unchanged from the previous patch."""
    master: bool = False
    osc: bool = False
    env: bool = False
    cyc: bool = False
    lfo: bool = False
    matrix: bool = False

    @classmethod
    def of(cls, *names: str) -> "LockSet":
        """LockSet.of("osc", "matrix")"""
        unknown = [n for n in names if n not in MODULES]
        if unknown:
            raise ValueError(f"Unknown module(s): {', '.join(unknown)}")
        return cls(**{n: True for n in names})

    @property
    def locked(self) -> tuple:
        return tuple(f.name for f in fields(self) if getattr(self, f.name))

    def toggle(self, name: str) -> bool:
        if name not in MODULES:
            raise ValueError(f"Unknown module: {name}")
        setattr(self, name, not getattr(self, name))
        return getattr(self, name)


@dataclass
class Patch:
    """One generated patch: a block per module plus the matrix and metadata."""
    master: Optional[Block] = None
    osc: Optional[Block] = None
    env: Optional[Block] = None
    cyc: Optional[Block] = None
    lfo: Optional[Block] = None
    matrix: Optional[MatrixData] = None
    style: str = RANDOM          # as selected
    real_style: str = RANDOM     # as generated
    intensity: str = DEFAULT_INTENSITY
    engine: str = "Unknown"
    seed: Optional[int] = None

    @property
    def voice_mode(self) -> Optional[str]:
        row = find_row(self.master, "Voice Mode")
        return row.value if row else None

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, name) is not None for name in MODULES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "master": block_to_list(self.master or ()),
            "osc": block_to_list(self.osc or ()),
            "env": block_to_list(self.env or ()),
            "cyc": block_to_list(self.cyc or ()),
            "lfo": block_to_list(self.lfo or ()),
            "matrix": self.matrix.to_dict() if self.matrix else None,
            "style": self.style,
            "real_style": self.real_style,
            "intensity": self.intensity,
            "engine": self.engine,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Patch":
        def block(key: str) -> Optional[Block]:
            rows = data.get(key)
            return block_from_list(rows) if rows else None

        matrix = data.get("matrix")
        if not isinstance(matrix, dict):
            matrix = data.get("matrixData")
        return cls(
            master=block("master"),
            osc=block("osc"),
            env=block("env"),
            cyc=block("cyc"),
            lfo=block("lfo"),
            matrix=MatrixData.from_dict(matrix) if isinstance(matrix, dict) else None,
            style=data.get("style", RANDOM),
            real_style=data.get("real_style", data.get("realStyle", data.get("style", RANDOM))),
            intensity=data.get("intensity", DEFAULT_INTENSITY),
            engine=data.get("engine", "Unknown"),
            seed=data.get("seed"),
        )


# =============================================================================
# INPUT NORMALIZATION
# =============================================================================

def normalize_style(style: Optional[str]) -> str:
    """Unknown styles fall back to random over the full style set."""
    key = (style or "").strip().lower()
    if key not in STYLES:
        logger.warning(f"Unknown style {style!r}, using random", component="GEN")
        return RANDOM
    return key


def normalize_intensity(intensity: Optional[str]) -> str:
    key = (intensity or "").strip().lower()
    if key not in INTENSITIES:
        logger.warning(f"Unknown intensity {intensity!r}, using {DEFAULT_INTENSITY}", component="GEN")
        return DEFAULT_INTENSITY
    return key


def normalize_engine(engine: Union[Engine, str, None]) -> Union[Engine, str]:
    """Engine member, or the RANDOM sentinel."""
    if isinstance(engine, Engine):
        return engine
    if not engine or engine.strip().lower() == RANDOM:
        return RANDOM
    try:
        return Engine.from_name(engine)
    except ValueError:
        logger.warning(f"Unknown engine {engine!r}, picking at random", component="GEN")
        return RANDOM


def resolve_style(style: str, rng: RandomSource) -> str:
    return rng.pick(CONCRETE_STYLES) if style == RANDOM else style


# =============================================================================
# ASSEMBLY
# =============================================================================

def _carried(name: str, locks: LockSet, previous: Optional[Patch]):
    """Previous block for a locked module, or None when it must be generated."""
    if not getattr(locks, name):
        return None
    block = getattr(previous, name, None) if previous is not None else None
    if block is None:
        logger.debug(f"Lock on {name} has no previous block, generating", component="GEN")
        return None
    return copy.deepcopy(block)


def generate_patch(style: Optional[str] = RANDOM,
                   intensity: Optional[str] = DEFAULT_INTENSITY,
                   engine: Union[Engine, str, None] = RANDOM,
                   locks: Optional[LockSet] = None,
                   previous: Optional[Patch] = None,
                   rng: Optional[RandomSource] = None) -> Patch:
    """Generate a complete patch.

    Args:
        style: one of STYLES; unknown tags are treated as random
        intensity: one of INTENSITIES; unknown tags fall back to simple
        engine: Engine, engine display name, or "random"
        locks: modules to carry over from `previous`
        previous: the patch the locked modules come from
        rng: random source (a fresh unseeded one if omitted)

    Returns:
        Patch with every module filled in
    """
    rng = rng or RandomSource()
    locks = locks or LockSet()
    selected = normalize_style(style)
    intensity = normalize_intensity(intensity)
    engine = normalize_engine(engine)
    real_style = resolve_style(selected, rng)

    patch = Patch(style=selected, real_style=real_style, intensity=intensity, seed=rng.seed)

    patch.osc = _carried("osc", locks, previous) or generate_osc(real_style, engine, rng)
    type_row = find_row(patch.osc, "Type")
    patch.engine = str(type_row.value) if type_row else "Unknown"
    force_mono = patch.engine == Engine.CHORDS.display_name

    patch.master = (_carried("master", locks, previous)
                    or generate_master(real_style, intensity, force_mono, rng))
    patch.env = _carried("env", locks, previous) or generate_env(real_style, rng)

    # Matrix before Cyc/LFO: it decides whether they are blank
    patch.matrix = (_carried("matrix", locks, previous)
                    or generate_matrix(real_style, intensity, patch.voice_mode, rng))
    modulators = patch.matrix.active_modulators()

    patch.cyc = _carried("cyc", locks, previous) or generate_cyc(modulators.cyc_env, intensity, rng)
    patch.lfo = _carried("lfo", locks, previous) or generate_lfo(modulators.lfo, rng)

    logger.gen(
        f"Generated {real_style} ({intensity}) on {patch.engine}",
        details=f"seed={rng.seed} locked={list(locks.locked)}",
    )
    return patch
