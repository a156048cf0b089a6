"""
inbox/mutations.py
Optimistic mutations with explicit results.

Every mutating call returns a MutationResult instead of raising, so the
caller decides whether to keep or revert its local state:

    templates, result = toggle_faq_active(backend, templates, 'faq1')
    if not result.ok:
        show_error(result.message)   # templates is already the reverted list

Batch archive/delete mirror the server limits: at least one id, at most
MAX_BATCH_SIZE ids per atomic batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, List, Optional, Tuple

from inbox.models.record import FAQTemplate
from inbox.selection.controller import SelectionSetController
from inbox.store.base import InboxBackend

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 500


@dataclass
class MutationResult:
    ok:     bool
    value:  Any                  = None
    error:  Optional[Exception]  = None

    @classmethod
    def success(cls, value: Any = None) -> "MutationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "MutationResult":
        return cls(ok=False, error=error)

    @property
    def message(self) -> str:
        if self.error is None:
            return ''
        if isinstance(self.error, KeyError) and self.error.args:
            return str(self.error.args[0])
        return str(self.error)


def validate_batch(conversation_ids: Iterable[str]) -> List[str]:
    ids = list(conversation_ids or [])
    if not ids:
        raise ValueError('No conversations provided.')
    if len(ids) > MAX_BATCH_SIZE:
        raise ValueError(
            f'Batch operation limit exceeded. Maximum {MAX_BATCH_SIZE} conversations allowed.'
        )
    return ids


def batch_archive(
    backend:          InboxBackend,
    conversation_ids: Iterable[str],
    user_id:          str,
    archive:          bool = True,
) -> MutationResult:
    try:
        ids = validate_batch(conversation_ids)
        backend.archive_conversations(ids, user_id, archive)
    except Exception as exc:
        logger.error(f"Batch {'archive' if archive else 'unarchive'} failed: {exc}")
        return MutationResult.failure(exc)
    logger.info(f"{'Archived' if archive else 'Unarchived'} {len(ids)} conversations for {user_id}")
    return MutationResult.success(ids)


def batch_delete(
    backend:          InboxBackend,
    conversation_ids: Iterable[str],
    user_id:          str,
) -> MutationResult:
    try:
        ids = validate_batch(conversation_ids)
        backend.delete_conversations(ids, user_id)
    except Exception as exc:
        logger.error(f"Batch delete failed: {exc}")
        return MutationResult.failure(exc)
    logger.info(f"Deleted {len(ids)} conversations for {user_id}")
    return MutationResult.success(ids)


def apply_batch_action(
    controller:  SelectionSetController,
    current_ids: Iterable[str],
    action:      Callable[[List[str]], MutationResult],
) -> MutationResult:
    """
    Run a batch action over the current selection.

    Success: selection mode ends and the result value becomes the ids
    still in the list. Failure: the selection is left as it was so the
    user can retry.
    """
    current  = list(current_ids)
    selected = [i for i in current if controller.is_selected(i)]

    result = action(selected)
    if not result.ok:
        return result

    affected  = set(result.value or selected)
    remaining = [i for i in current if i not in affected]
    controller.reconcile(remaining)
    controller.exit()
    return MutationResult.success(remaining)


def toggle_faq_active(
    backend:     InboxBackend,
    templates:   Iterable[FAQTemplate],
    template_id: str,
) -> Tuple[List[FAQTemplate], MutationResult]:
    """
    Flip is_active locally, persist it, then settle on the server's copy.
    On failure the original list comes back unchanged.
    """
    original = list(templates)
    if not template_id or not template_id.strip():
        return original, MutationResult.failure(ValueError('Template ID is required'))

    target = next((t for t in original if t.id == template_id), None)
    if target is None:
        return original, MutationResult.failure(KeyError('FAQ template not found'))

    new_state = not target.is_active
    optimistic = [
        replace(t, is_active=new_state) if t.id == template_id else t
        for t in original
    ]

    try:
        server_copy = backend.set_faq_active(template_id, new_state)
    except Exception as exc:
        logger.warning(f"FAQ toggle failed for {template_id}, reverting: {exc}")
        return original, MutationResult.failure(exc)

    settled = [server_copy if t.id == template_id else t for t in optimistic]
    return settled, MutationResult.success(server_copy)
