"""
inbox/selection/controller.py
Multi-select state for list screens (batch archive / delete).

Two states:
  Inactive — is_selection_mode False, no ids
  Active   — is_selection_mode True, any number of ids (empty only
             transiently, until the owner exits or reconciles)

Invalid transitions are rejected with SelectionStateError and leave the
state untouched: enter() while Active, toggle()/select_all() while
Inactive. exit() is idempotent. reconcile() is always allowed.

One owner per controller; calls are sequenced by that owner.
"""

import logging
from typing import Iterable, Set

from inbox.models.record import SelectionState

logger = logging.getLogger(__name__)


class SelectionStateError(RuntimeError):
    """Operation not allowed in the controller's current state."""


class SelectionSetController:

    def __init__(self):
        self._active: bool     = False
        self._selected: Set[str] = set()

    # ── QUERIES ──────────────────────────────────────────────

    @property
    def state(self) -> SelectionState:
        return SelectionState(
            is_selection_mode = self._active,
            selected_ids      = frozenset(self._selected),
        )

    @property
    def is_selection_mode(self) -> bool:
        return self._active

    @property
    def selected_ids(self) -> frozenset:
        return frozenset(self._selected)

    @property
    def count(self) -> int:
        return len(self._selected)

    def is_selected(self, item_id: str) -> bool:
        return item_id in self._selected

    # ── TRANSITIONS ──────────────────────────────────────────

    def enter(self, item_id: str) -> SelectionState:
        """Long-press entry: start selection mode with one item selected."""
        if self._active:
            self._reject('enter')
        self._active   = True
        self._selected = {item_id}
        return self.state

    def toggle(self, item_id: str) -> SelectionState:
        if not self._active:
            self._reject('toggle')
        if item_id in self._selected:
            self._selected.discard(item_id)
        else:
            self._selected.add(item_id)
        return self.state

    def select_all(self, item_ids: Iterable[str]) -> SelectionState:
        """Replace the selection with exactly item_ids (not a union)."""
        if not self._active:
            self._reject('select_all')
        self._selected = set(item_ids)
        return self.state

    def exit(self) -> SelectionState:
        self._active = False
        self._selected.clear()
        return self.state

    def reconcile(self, current_ids: Iterable[str]) -> SelectionState:
        """
        Drop ids no longer in the backing list. An Active selection that
        ends up empty (or whose list emptied) exits automatically.
        """
        current = set(current_ids)
        stale = self._selected - current
        if stale:
            logger.debug(f"Reconcile dropped {len(stale)} stale selection ids")
        self._selected &= current

        if self._active and (not self._selected or not current):
            logger.debug("Selection emptied by list change, leaving selection mode")
            return self.exit()
        return self.state

    def _reject(self, operation: str) -> None:
        mode = 'active' if self._active else 'inactive'
        logger.debug(f"Rejected {operation}() while selection is {mode}")
        raise SelectionStateError(f"{operation}() is not allowed while selection is {mode}")
