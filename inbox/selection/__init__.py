"""
inbox/selection — multi-select state machine for list screens.
"""

from inbox.selection.controller import SelectionSetController, SelectionStateError

__all__ = [
    "SelectionSetController",
    "SelectionStateError",
]
