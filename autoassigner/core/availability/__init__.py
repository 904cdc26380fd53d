"""Member availability checkers."""

from enum import Enum
from typing import Callable, Dict, Optional

import httpx

from autoassigner.core.availability.base import AvailabilityChecker
from autoassigner.core.availability.always_available import AlwaysAvailable
from autoassigner.core.availability.inout_checker import InOutChecker
from autoassigner.models.config import AvailabilityConfig


class CheckerName(str, Enum):
    """Checker identifiers accepted in group configuration files."""

    INOUT = "inout"
    ALWAYS_AVAILABLE = "always_available"


CHECKERS: Dict[CheckerName, Callable[..., AvailabilityChecker]] = {
    CheckerName.INOUT: lambda config, client=None: InOutChecker(config, client=client),
    CheckerName.ALWAYS_AVAILABLE: lambda config, client=None: AlwaysAvailable(),
}


def create_checker(
    name: str,
    config: AvailabilityConfig,
    client: Optional[httpx.AsyncClient] = None
) -> AvailabilityChecker:
    """Build the availability checker registered under ``name``.

    Raises:
        ValueError: If ``name`` is not a known checker
    """
    try:
        key = CheckerName(name)
    except ValueError:
        raise ValueError(f"unknown availability checker: {name}") from None
    return CHECKERS[key](config, client=client)


__all__ = [
    "AvailabilityChecker",
    "AlwaysAvailable",
    "InOutChecker",
    "CheckerName",
    "CHECKERS",
    "create_checker",
]
