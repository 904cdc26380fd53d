"""Base class for assignee selection strategies."""

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence

from autoassigner.utils.exceptions import EmptyMembersError


class SelectionStrategy(ABC):
    """Abstract base class for assignee selection strategies.

    A strategy is a pure function of its inputs: it never reads or writes
    state and never checks availability.
    """

    name: str = ""

    @abstractmethod
    def select_next(
        self,
        users: Sequence[str],
        last_index: int,
        counts: Optional[Mapping[str, int]] = None
    ) -> int:
        """Pick the candidate index for the next assignment.

        Args:
            users: Ordered group members
            last_index: Index of the last assigned member, -1 if none yet
            counts: Assignment count per user; missing users count as zero

        Returns:
            Index into ``users``

        Raises:
            EmptyMembersError: If ``users`` is empty
        """
        pass

    @staticmethod
    def _require_users(users: Sequence[str]) -> None:
        if not users:
            raise EmptyMembersError()
