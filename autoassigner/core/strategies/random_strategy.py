"""Random selection strategy."""

import random
from typing import Mapping, Optional, Sequence

from autoassigner.core.strategies.base import SelectionStrategy


class RandomStrategy(SelectionStrategy):
    """Selects a uniformly random member."""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize random strategy.

        Args:
            rng: Optional random generator, e.g. a seeded one for reproducible runs
        """
        self.rng = rng or random.Random()

    def select_next(
        self,
        users: Sequence[str],
        last_index: int,
        counts: Optional[Mapping[str, int]] = None
    ) -> int:
        self._require_users(users)
        return self.rng.randrange(len(users))
