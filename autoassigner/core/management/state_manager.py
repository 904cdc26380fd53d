"""Per-group assignment state: position history, counts and audit log.

Each group keeps three files in ``<data_dir>/<group>/``:

- ``index.log``: append-only position history, one ``<timestamp> -- <index>``
  line per committed assignment. Only the last line matters.
- ``counts.json``: username to assignment count, rewritten in full.
- ``assignments.log``: append-only JSON lines audit log.

Missing or unreadable files read as "no prior state". Writes create the group
directory on demand and raise ``OSError`` on failure.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional

import aiofiles

from autoassigner.models.state import AssignmentLogEntry
from autoassigner.utils.logging import get_logger


INDEX_FILE = "index.log"
COUNTS_FILE = "counts.json"
ASSIGNMENTS_FILE = "assignments.log"

UNSET_POSITION = -1

logger = get_logger("autoassigner.state")


def _timestamp() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


class PositionLog:
    """Append-only record of the last selected index."""

    SEPARATOR = "--"

    def __init__(self, path: Path):
        self.path = Path(path)

    async def read(self) -> int:
        """Return the most recent index, or -1 if none was recorded."""
        if not self.path.exists():
            return UNSET_POSITION

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            logger.warning("failed to read position file", path=str(self.path), error=str(e))
            return UNSET_POSITION

        last_line = next(
            (line for line in reversed(content.splitlines()) if line.strip()),
            None
        )
        if last_line is None:
            return UNSET_POSITION

        parts = last_line.rsplit(self.SEPARATOR, 1)
        if len(parts) != 2:
            logger.warning("malformed position entry", path=str(self.path), line=last_line)
            return UNSET_POSITION
        try:
            return int(parts[1].strip())
        except ValueError:
            logger.warning("malformed position entry", path=str(self.path), line=last_line)
            return UNSET_POSITION

    async def write(self, index: int) -> None:
        """Append ``index`` with the current timestamp."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
            await f.write(f"{_timestamp()} {self.SEPARATOR} {index}\n")


class CountStore:
    """Durable username to assignment count mapping for one group."""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def read_persisted(self) -> Dict[str, int]:
        """Return the counts exactly as stored, ``{}`` if missing or unreadable."""
        if not self.path.exists():
            return {}

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            logger.warning("failed to read counts file", path=str(self.path), error=str(e))
            return {}

        if not content.strip():
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("failed to parse counts file", path=str(self.path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("counts file is not a mapping", path=str(self.path))
            return {}

        counts = {}
        for user, value in data.items():
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                counts[str(user)] = value
            else:
                logger.warning("ignoring invalid count", path=str(self.path), user=user, value=value)
        return counts

    async def read(self, users: Iterable[str] = ()) -> Dict[str, int]:
        """Return stored counts with a zero entry for every user in ``users``."""
        counts = await self.read_persisted()
        for user in users:
            counts.setdefault(user, 0)
        return counts

    async def write(self, counts: Dict[str, int]) -> None:
        """Overwrite the stored counts."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(counts, indent=2))

    async def increment(self, user: str, users: Iterable[str] = ()) -> Dict[str, int]:
        """Add one to ``user``'s count and persist.

        Args:
            user: User that was assigned
            users: Group members to backfill with zero

        Returns:
            The updated counts
        """
        counts = await self.read(users)
        counts[user] = counts.get(user, 0) + 1
        await self.write(counts)
        return counts

    async def reset(self, users: Iterable[str]) -> Dict[str, int]:
        """Replace the stored counts with zero for every user."""
        counts = {user: 0 for user in users}
        await self.write(counts)
        return counts


class AssignmentAuditLog:
    """Append-only JSON lines log of committed assignments."""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def append(self, entry: AssignmentLogEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
            await f.write(entry.model_dump_json() + "\n")


class GroupState:
    """The three state stores of one group."""

    def __init__(self, group_dir: Path):
        """Initialize group state.

        Args:
            group_dir: Directory of the group; not created until the first write
        """
        self.group_dir = Path(group_dir)
        self.positions = PositionLog(self.group_dir / INDEX_FILE)
        self.counts = CountStore(self.group_dir / COUNTS_FILE)
        self.audit_log = AssignmentAuditLog(self.group_dir / ASSIGNMENTS_FILE)

    @staticmethod
    def make_entry(
        group: str,
        user: str,
        strategy: str,
        last_index: int,
        next_index: int,
        total_count: int,
        user_count: int,
        timestamp: Optional[datetime] = None
    ) -> AssignmentLogEntry:
        return AssignmentLogEntry(
            timestamp=(timestamp or datetime.now().astimezone()).replace(microsecond=0),
            group=group,
            user=user,
            strategy=strategy,
            last_index=last_index,
            next_index=next_index,
            total_count=total_count,
            user_count=user_count,
        )
