"""
Patch History
Undo/redo stacks of generated patches.

Snapshots are deep copies, so later edits to a patch never leak into the
history. The undo stack is capped at `depth`; pushing a new patch clears the
redo stack.
"""

import copy
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from ..config import DEFAULT_HISTORY_DEPTH
from ..config.settings import clamp_history_depth
from .patch import Patch


class PatchHistory(QObject):
    """
    Bounded undo/redo history.

    Emits history_changed so UI buttons can follow the stack sizes.
    """

    history_changed = pyqtSignal(int, int)  # undo_count, redo_count

    def __init__(self, depth: int = DEFAULT_HISTORY_DEPTH, parent=None):
        super().__init__(parent)
        self._depth = clamp_history_depth(depth)
        self._past: List[Patch] = []
        self._future: List[Patch] = []

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def undo_count(self) -> int:
        return len(self._past)

    @property
    def redo_count(self) -> int:
        return len(self._future)

    def set_depth(self, depth: int) -> None:
        """Change the cap, dropping the oldest snapshots if needed."""
        self._depth = clamp_history_depth(depth)
        self._trim()
        self._notify()

    def push(self, patch: Patch) -> None:
        """Record a patch being replaced by a new one."""
        self._past.append(copy.deepcopy(patch))
        self._trim()
        self._future.clear()
        self._notify()

    def undo(self, current: Patch) -> Optional[Patch]:
        """
        Step back.

        Returns the previous patch, or None if there is nothing to undo.
        """
        if not self._past:
            return None
        self._future.append(copy.deepcopy(current))
        patch = self._past.pop()
        self._notify()
        return patch

    def redo(self, current: Patch) -> Optional[Patch]:
        """
        Step forward again after an undo.

        Returns the next patch, or None if there is nothing to redo.
        """
        if not self._future:
            return None
        self._past.append(copy.deepcopy(current))
        self._trim()
        patch = self._future.pop()
        self._notify()
        return patch

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
        self._notify()

    def _trim(self) -> None:
        if len(self._past) > self._depth:
            del self._past[:len(self._past) - self._depth]

    def _notify(self) -> None:
        self.history_changed.emit(len(self._past), len(self._future))

    def __len__(self) -> int:
        return len(self._past)
