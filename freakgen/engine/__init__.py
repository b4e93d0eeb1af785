"""
Patch generation engine.
"""

from .engines import Engine, STYLE_ENGINES, engines_for_style
from .sampling import RandomSource, seed_from_string
from .rows import ParamRow, blank_block, find_row, is_blank
from .matrix import ActiveModulators, MatrixData, ModConnection, generate_matrix
from .modules import generate_cyc, generate_env, generate_lfo, generate_master, generate_osc
from .patch import (
    LockSet,
    Patch,
    generate_patch,
    normalize_engine,
    normalize_intensity,
    normalize_style,
)
from .history import PatchHistory
from .session import PatchSession

__all__ = [
    "Engine",
    "STYLE_ENGINES",
    "engines_for_style",
    "RandomSource",
    "seed_from_string",
    "ParamRow",
    "blank_block",
    "find_row",
    "is_blank",
    "ActiveModulators",
    "MatrixData",
    "ModConnection",
    "generate_matrix",
    "generate_master",
    "generate_osc",
    "generate_env",
    "generate_cyc",
    "generate_lfo",
    "LockSet",
    "Patch",
    "generate_patch",
    "normalize_engine",
    "normalize_intensity",
    "normalize_style",
    "PatchHistory",
    "PatchSession",
]
