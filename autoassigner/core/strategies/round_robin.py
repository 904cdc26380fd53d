"""Round-robin selection strategy."""

from typing import Mapping, Optional, Sequence

from autoassigner.core.strategies.base import SelectionStrategy


class RoundRobinStrategy(SelectionStrategy):
    """Selects members in order, wrapping around after the last one."""

    name = "round_robin"

    def select_next(
        self,
        users: Sequence[str],
        last_index: int,
        counts: Optional[Mapping[str, int]] = None
    ) -> int:
        """Get the member following ``last_index``.

        Args:
            users: Ordered group members
            last_index: Index of the last assigned member, -1 if none yet
            counts: Not used in round-robin

        Returns:
            ``(last_index + 1) % len(users)``
        """
        self._require_users(users)
        return (last_index + 1) % len(users)
