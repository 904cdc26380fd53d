"""Least-assigned selection strategy."""

from typing import Mapping, Optional, Sequence

from autoassigner.core.strategies.base import SelectionStrategy


class LeastAssignedStrategy(SelectionStrategy):
    """Selects the member with the fewest assignments so far.

    Ties go to the member listed first, so with all counts equal this
    behaves like starting from the top of the list.
    """

    name = "least_assigned"

    def select_next(
        self,
        users: Sequence[str],
        last_index: int,
        counts: Optional[Mapping[str, int]] = None
    ) -> int:
        """Get the lowest index whose count is minimal.

        Args:
            users: Ordered group members
            last_index: Not used in least-assigned
            counts: Assignment count per user; missing users count as zero

        Returns:
            Index of the least assigned member

        Example:
            users ["alice", "bob", "charlie"] with counts
            {"alice": 2, "bob": 1, "charlie": 2} selects 1 (bob).
        """
        self._require_users(users)
        counts = counts or {}

        best_index = 0
        best_count = counts.get(users[0], 0)
        for index, user in enumerate(users[1:], start=1):
            count = counts.get(user, 0)
            if count < best_count:
                best_index, best_count = index, count
        return best_index
