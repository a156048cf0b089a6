"""
inbox/store/base.py
Abstract base class for inbox mutation backends.
To add a new backend: subclass InboxBackend and implement the three
mutations. The engine never knows which backend is running.
"""

from abc import ABC, abstractmethod
from typing import List

from inbox.models.record import FAQTemplate


class InboxBackend(ABC):
    """
    Server-side writes the client performs optimistically.
    Implementations raise on failure; inbox.mutations turns the
    outcome into a MutationResult for the caller.
    """

    @abstractmethod
    def archive_conversations(
        self,
        conversation_ids: List[str],
        user_id:          str,
        archive:          bool,
    ) -> None:
        """Set or clear the per-user archived flag on every conversation, atomically."""
        ...

    @abstractmethod
    def delete_conversations(
        self,
        conversation_ids: List[str],
        user_id:          str,
    ) -> None:
        """Soft-delete for one user: other participants keep the conversation."""
        ...

    @abstractmethod
    def set_faq_active(self, template_id: str, is_active: bool) -> FAQTemplate:
        """
        Persist the active flag and return the server's copy of the template.
        Raises KeyError when the template does not exist.
        """
        ...
