"""Base class for availability checkers."""

from abc import ABC, abstractmethod


class AvailabilityChecker(ABC):
    """Decides whether a group member can take an assignment right now."""

    name: str = ""

    @abstractmethod
    async def is_available(self, username: str) -> bool:
        """Check if a user is available for assignment.

        Args:
            username: Member to check

        Returns:
            True if the user can be assigned

        Raises:
            RemoteCheckFailure: If availability could not be determined
        """
        pass

    async def close(self) -> None:
        """Release resources held by the checker (optional)."""
        pass
