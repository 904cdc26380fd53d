"""Availability checker that accepts everyone."""

from autoassigner.core.availability.base import AvailabilityChecker


class AlwaysAvailable(AvailabilityChecker):
    """Treats every member as available."""

    name = "always_available"

    async def is_available(self, username: str) -> bool:
        return True
