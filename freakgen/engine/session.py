"""
Patch session: the current patch, its locks and its undo history.

Callers that want UI-style "generate again" behaviour use this instead of
threading previous patches and locks through generate_patch by hand.
"""

from typing import Optional, Union

from ..config import DEFAULT_HISTORY_DEPTH, DEFAULT_INTENSITY, RANDOM
from .engines import Engine
from .history import PatchHistory
from .patch import LockSet, Patch, generate_patch
from .sampling import RandomSource


class PatchSession:
    """
    Usage:
        session = PatchSession(rng=RandomSource(7))
        session.generate("bass", "simple")
        session.toggle_lock("osc")
        session.generate("bass", "high")   # same oscillator
        session.undo()
    """

    def __init__(self, history_depth: int = DEFAULT_HISTORY_DEPTH,
                 rng: Optional[RandomSource] = None):
        self.history = PatchHistory(history_depth)
        self.locks = LockSet()
        self.current: Optional[Patch] = None
        self._rng = rng

    def generate(self, style: str = RANDOM, intensity: str = DEFAULT_INTENSITY,
                 engine: Union[Engine, str] = RANDOM) -> Patch:
        """Generate a new patch, keeping locked modules from the current one."""
        if self.current is not None:
            self.history.push(self.current)
        self.current = generate_patch(
            style, intensity, engine,
            locks=self.locks, previous=self.current, rng=self._rng,
        )
        return self.current

    def load(self, patch: Patch) -> Patch:
        """Make a loaded/imported patch current (undoable)."""
        if self.current is not None:
            self.history.push(self.current)
        self.current = patch
        return patch

    def toggle_lock(self, name: str) -> bool:
        return self.locks.toggle(name)

    def undo(self) -> Optional[Patch]:
        if self.current is None:
            return None
        patch = self.history.undo(self.current)
        if patch is not None:
            self.current = patch
        return patch

    def redo(self) -> Optional[Patch]:
        if self.current is None:
            return None
        patch = self.history.redo(self.current)
        if patch is not None:
            self.current = patch
        return patch
