import logging
from typing import Any, Callable, Dict, List, Optional

from studentcms.utils.delta import Delta

logger = logging.getLogger(__name__)


class HistoryLog:
    """Undo and redo stacks of deltas.

    Only user-originated mutations are recorded. Any new record empties the
    redo stack. ``undo``/``redo`` hand the popped delta to a callable that
    applies it against the store; the callable must not record anything.
    """

    def __init__(self, limit: Optional[int] = None):
        self.undo_stack: List[Delta] = []
        self.redo_stack: List[Delta] = []
        self.limit = limit

    def record(self, delta: Delta):
        self.undo_stack.append(delta)
        if self.limit is not None and len(self.undo_stack) > self.limit:
            drop = len(self.undo_stack) - self.limit
            self.undo_stack = self.undo_stack[drop:]
        self.redo_stack.clear()
        logger.debug("Recorded %s", delta.describe())

    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def undo(self, revert: Callable[[Delta], None]) -> Optional[Delta]:
        if not self.undo_stack:
            return None
        delta = self.undo_stack.pop()
        try:
            revert(delta)
        except Exception:
            self.undo_stack.append(delta)
            raise
        self.redo_stack.append(delta)
        logger.info("Undid %s", delta.describe())
        return delta

    def redo(self, reapply: Callable[[Delta], None]) -> Optional[Delta]:
        if not self.redo_stack:
            return None
        delta = self.redo_stack.pop()
        try:
            reapply(delta)
        except Exception:
            self.redo_stack.append(delta)
            raise
        self.undo_stack.append(delta)
        logger.info("Redid %s", delta.describe())
        return delta

    def list_history(self) -> List[Dict[str, Any]]:
        out = []
        for i, d in enumerate(self.undo_stack):
            out.append({"idx": i, "action": d.LABEL, "record_id": d.record_id, "stack": "undo"})
        for i, d in enumerate(reversed(self.redo_stack)):
            out.append({"idx": len(self.undo_stack) + i, "action": d.LABEL, "record_id": d.record_id, "stack": "redo"})
        return out
