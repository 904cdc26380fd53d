"""In/Out board availability checker."""

from typing import Optional

import httpx

from autoassigner.core.availability.base import AvailabilityChecker
from autoassigner.models.config import AvailabilityConfig
from autoassigner.utils.exceptions import RemoteCheckFailure
from autoassigner.utils.logging import get_logger


logger = get_logger("autoassigner.availability")


class InOutChecker(AvailabilityChecker):
    """Looks up a member's status on the In/Out service.

    The status URL is the configured prefix followed by the username. A
    response without a status field counts as available; a status listed in
    ``inout_unavailable_statuses`` counts as unavailable.
    """

    name = "inout"

    def __init__(
        self,
        config: AvailabilityConfig,
        client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the In/Out checker.

        Args:
            config: Availability configuration
            client: Optional HTTP client; one is created (and owned) if omitted
        """
        self.config = config
        self.unavailable_statuses = set(config.inout_unavailable_statuses)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.timeout)

    def status_url(self, username: str) -> str:
        return f"{self.config.inout_api_url_prefix}{username}"

    async def is_available(self, username: str) -> bool:
        """Check the user's In/Out status.

        Args:
            username: Member to check

        Returns:
            False if the reported status is an unavailable one, True otherwise

        Raises:
            RemoteCheckFailure: On transport errors, non-success responses or
                a body that is not a JSON object
        """
        url = self.status_url(username)
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteCheckFailure(
                f"In/Out lookup for {username} returned {e.response.status_code}",
                details={"user": username, "url": url, "status_code": e.response.status_code}
            ) from e
        except httpx.HTTPError as e:
            raise RemoteCheckFailure(
                f"In/Out lookup for {username} failed: {e}",
                details={"user": username, "url": url}
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteCheckFailure(
                f"Invalid JSON from In/Out service for {username}: {e}",
                details={"user": username, "url": url}
            ) from e

        if not isinstance(payload, dict):
            raise RemoteCheckFailure(
                f"Unexpected In/Out response for {username}: expected an object",
                details={"user": username, "url": url}
            )

        status = payload.get(self.config.inout_status_field)
        if not isinstance(status, str):
            logger.debug("no status reported", user=username)
            return True

        available = status not in self.unavailable_statuses
        logger.debug("status reported", user=username, status=status, available=available)
        return available

    async def close(self) -> None:
        """Close the HTTP client if this checker created it."""
        if self._owns_client:
            await self.client.aclose()
