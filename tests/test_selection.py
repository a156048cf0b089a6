"""
tests/test_selection.py
Multi-select state machine.
"""

import pytest

from inbox.models.record import SelectionState
from inbox.selection.controller import SelectionSetController, SelectionStateError


@pytest.fixture
def ctl():
    return SelectionSetController()


class TestTransitions:

    def test_starts_inactive(self, ctl):
        assert ctl.state == SelectionState()
        assert ctl.count == 0

    def test_enter_selects_one(self, ctl):
        state = ctl.enter("c1")
        assert state.is_selection_mode is True
        assert state.selected_ids == frozenset({"c1"})

    def test_toggle_adds_and_removes(self, ctl):
        ctl.enter("c1")
        ctl.toggle("c2")
        assert ctl.selected_ids == {"c1", "c2"}
        ctl.toggle("c1")
        assert ctl.selected_ids == {"c2"}

    def test_toggle_last_item_keeps_mode_until_reconcile(self, ctl):
        ctl.enter("c1")
        ctl.toggle("c1")
        assert ctl.is_selection_mode is True
        assert ctl.count == 0

    def test_select_all_replaces(self, ctl):
        ctl.enter("x")
        ctl.select_all(["c1", "c2", "c3"])
        assert ctl.selected_ids == {"c1", "c2", "c3"}
        assert not ctl.is_selected("x")

    def test_exit_clears_and_is_idempotent(self, ctl):
        ctl.enter("c1")
        ctl.exit()
        assert ctl.state == SelectionState()
        assert ctl.exit() == SelectionState()

    def test_state_snapshot_is_immutable_copy(self, ctl):
        state = ctl.enter("c1")
        ctl.toggle("c2")
        assert state.selected_ids == frozenset({"c1"})


class TestRejectedTransitions:

    def test_enter_while_active(self, ctl):
        ctl.enter("c1")
        with pytest.raises(SelectionStateError):
            ctl.enter("c2")
        assert ctl.selected_ids == {"c1"}

    def test_toggle_while_inactive(self, ctl):
        with pytest.raises(SelectionStateError):
            ctl.toggle("c1")
        assert ctl.state == SelectionState()

    def test_select_all_while_inactive(self, ctl):
        with pytest.raises(SelectionStateError):
            ctl.select_all(["c1"])
        assert ctl.count == 0


class TestReconcile:

    def test_drops_stale_ids(self, ctl):
        ctl.enter("c1")
        ctl.select_all(["c1", "c2", "c3"])
        ctl.reconcile(["c1", "c3", "c9"])
        assert ctl.selected_ids == {"c1", "c3"}
        assert ctl.is_selection_mode

    def test_exits_when_selection_empties(self, ctl):
        ctl.enter("c1")
        ctl.reconcile(["c2"])
        assert ctl.state == SelectionState()

    def test_exits_when_list_empties(self, ctl):
        ctl.enter("c1")
        ctl.reconcile([])
        assert not ctl.is_selection_mode

    def test_exits_after_deselecting_everything(self, ctl):
        ctl.enter("c1")
        ctl.toggle("c1")
        ctl.reconcile(["c1", "c2"])
        assert not ctl.is_selection_mode

    def test_inactive_reconcile_is_noop(self, ctl):
        assert ctl.reconcile(["c1"]) == SelectionState()


class TestToggleProperties:

    def test_toggle_twice_is_identity(self, ctl):
        ctl.enter("c1")
        ctl.toggle("c2")
        before = ctl.state
        ctl.toggle("c1")
        ctl.toggle("c1")
        assert ctl.state == before
