"""Undo/redo history over snapshots of the feature collection."""

from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from ..config import APP_CONFIG
from ..core import EmptyHistory, Feature, HistorySnapshot

logger = logging.getLogger(__name__)


class HistoryManager:
    """Bounded undo stack and unbounded redo stack of snapshots.

    Snapshots hold their own copies of every feature, so editing the live
    collection after a capture never changes what undo brings back.
    """

    def __init__(self, max_depth: int | None = None):
        self.max_depth = max_depth or APP_CONFIG.history_depth
        self.undo_stack: deque[HistorySnapshot] = deque(maxlen=self.max_depth)
        self.redo_stack: list[HistorySnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def capture(self, features: Sequence[Feature]) -> None:
        """Record ``features`` before a mutating action."""

        # deque(maxlen=...) drops the oldest snapshot on overflow
        self.undo_stack.append(HistorySnapshot.capture(features))
        self.redo_stack.clear()

    def undo(self, current: Sequence[Feature]) -> list[Feature]:
        """Return the previous collection, keeping ``current`` for redo."""

        if not self.undo_stack:
            raise EmptyHistory("Nothing to undo")
        self.redo_stack.append(HistorySnapshot.capture(current))
        snapshot = self.undo_stack.pop()
        logger.debug("Undo: restoring %d feature(s)", len(snapshot.features))
        return snapshot.restore()

    def redo(self, current: Sequence[Feature]) -> list[Feature]:
        """Return the collection undone last, keeping ``current`` for undo."""

        if not self.redo_stack:
            raise EmptyHistory("Nothing to redo")
        self.undo_stack.append(HistorySnapshot.capture(current))
        snapshot = self.redo_stack.pop()
        logger.debug("Redo: restoring %d feature(s)", len(snapshot.features))
        return snapshot.restore()

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()

    def depths(self) -> dict[str, int]:
        return {"undo": len(self.undo_stack), "redo": len(self.redo_stack)}
