"""Assignment orchestration: selection, availability scan and state commit."""

from typing import Dict, List, Optional

import httpx

from autoassigner.core.availability import AvailabilityChecker, create_checker
from autoassigner.core.management.group_store import GroupConfigStore
from autoassigner.core.management.state_manager import GroupState
from autoassigner.core.strategies import SelectionStrategy, create_strategy
from autoassigner.models.config import AutoAssignerConfig, GroupConfig
from autoassigner.models.state import AssignmentResult, GroupCounts
from autoassigner.utils.exceptions import (
    AutoAssignerError,
    AvailabilityError,
    CommitError,
    ConfigurationError,
    InvalidGroupError,
    NoAvailableAssigneeError,
    NoCountsFoundError,
    SelectionError,
)
from autoassigner.utils.logging import AutoAssignerLogger


class AssignmentOrchestrator:
    """Picks the next assignee of a group and records the assignment.

    An assignment run loads the group, reads its position and counts, asks
    the group's strategy for a candidate and then walks forward through the
    member list until the availability checker accepts someone. At most one
    full pass is made. A real run then appends the new position, increments
    the assignee's count and writes an audit entry; a dry run writes nothing.
    """

    def __init__(
        self,
        config: AutoAssignerConfig,
        group_store: Optional[GroupConfigStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[AutoAssignerLogger] = None
    ):
        """Initialize the orchestrator.

        Args:
            config: Process configuration
            group_store: Group configuration source; defaults to the
                configured conf_dir
            http_client: Optional HTTP client handed to remote checkers
            logger: Optional logger
        """
        self.config = config
        self.group_store = group_store or GroupConfigStore(config.storage.conf_path)
        self.http_client = http_client
        self.logger = logger or AutoAssignerLogger("autoassigner.orchestrator")

    def group_state(self, group: str) -> GroupState:
        return GroupState(self.config.group_data_dir(group))

    def resolve_strategy(self, group: str, group_config: GroupConfig) -> SelectionStrategy:
        try:
            return create_strategy(group_config.strategy)
        except ValueError as e:
            raise ConfigurationError(
                f"configuration error for group {group}: {e}",
                details={"group": group, "strategy": group_config.strategy}
            ) from e

    def resolve_checker(self, group: str, group_config: GroupConfig) -> AvailabilityChecker:
        try:
            return create_checker(
                group_config.availability_checker,
                self.config.availability,
                client=self.http_client
            )
        except ValueError as e:
            raise ConfigurationError(
                f"configuration error for group {group}: {e}",
                details={"group": group, "availability_checker": group_config.availability_checker}
            ) from e

    def _load_group(self, group: str) -> GroupConfig:
        group_config = self.group_store.load(group)
        if not group_config.users:
            raise ConfigurationError(
                f"configuration error for group {group}: no users found",
                details={"group": group}
            )
        return group_config

    async def assign(self, group: str, dry_run: bool = False) -> AssignmentResult:
        """Select the next available assignee of ``group``.

        Args:
            group: Group name
            dry_run: Compute the assignee without writing any state

        Returns:
            The assignment result

        Raises:
            ConfigurationError: Missing or invalid group, or unknown strategy
                or checker name
            SelectionError: The strategy failed
            AvailabilityError: An availability check could not be completed
            NoAvailableAssigneeError: Nobody in the group is available
            CommitError: Writing the assignment state failed
        """
        log = self.logger.bind(group=group, dry_run=dry_run)

        group_config = self._load_group(group)
        users = group_config.users
        state = self.group_state(group)

        last_index = await state.positions.read()
        counts = await state.counts.read(users)

        strategy = self.resolve_strategy(group, group_config)
        checker = self.resolve_checker(group, group_config)

        try:
            candidate = strategy.select_next(users, last_index, counts)
        except AutoAssignerError as e:
            await checker.close()
            raise SelectionError(
                f"selection error for group {group}: {e}",
                details={"group": group, "strategy": group_config.strategy}
            ) from e

        log.debug(
            "candidate selected",
            strategy=group_config.strategy,
            last_index=last_index,
            candidate=candidate
        )

        try:
            chosen, skipped = await self._scan(group, users, candidate, checker, log)
        finally:
            await checker.close()

        user = users[chosen]
        result = AssignmentResult(
            group=group,
            user=user,
            index=chosen,
            last_index=last_index,
            strategy=group_config.strategy,
            dry_run=dry_run,
            skipped=skipped,
        )

        if dry_run:
            log.info("dry run, state left untouched", user=user, index=chosen)
            return result

        result.user_count = await self._commit(group, group_config, state, result)
        log.info("assignment committed", user=user, index=chosen, user_count=result.user_count)
        return result

    async def _scan(
        self,
        group: str,
        users: List[str],
        candidate: int,
        checker: AvailabilityChecker,
        log: AutoAssignerLogger
    ) -> tuple:
        """Walk forward from ``candidate`` until someone is available.

        Returns:
            ``(chosen_index, skipped_users)``
        """
        skipped: List[str] = []
        for _ in range(len(users)):
            user = users[candidate]
            try:
                available = await checker.is_available(user)
            except AutoAssignerError as e:
                raise AvailabilityError(user, e, group=group) from e

            if available:
                return candidate, skipped

            log.debug("skipping unavailable user", user=user, index=candidate)
            skipped.append(user)
            candidate = (candidate + 1) % len(users)

        raise NoAvailableAssigneeError(group, checked=len(users))

    async def _commit(
        self,
        group: str,
        group_config: GroupConfig,
        state: GroupState,
        result: AssignmentResult
    ) -> int:
        """Write position, count and audit entry; return the updated count."""
        try:
            await state.positions.write(result.index)
            updated = await state.counts.increment(result.user, group_config.users)
            user_count = updated[result.user]
            await state.audit_log.append(GroupState.make_entry(
                group=group,
                user=result.user,
                strategy=group_config.strategy,
                last_index=result.last_index,
                next_index=result.index,
                total_count=len(group_config.users),
                user_count=user_count,
            ))
        except OSError as e:
            raise CommitError(
                f"failed to record assignment of {result.user} in group {group}: {e}",
                details={"group": group, "user": result.user, "data_dir": str(state.group_dir)}
            ) from e
        return user_count

    async def get_counts(self, group: str) -> GroupCounts:
        """Return the assignment counts of ``group``.

        Raises:
            InvalidGroupError: If the group configuration cannot be loaded
            NoCountsFoundError: If the group has no members and no stored counts
        """
        try:
            group_config = self.group_store.load(group)
        except InvalidGroupError:
            raise
        except ConfigurationError as e:
            raise InvalidGroupError(group, reason=e.message) from e

        counts = await self.group_state(group).counts.read(group_config.users)
        if not counts:
            raise NoCountsFoundError(group)

        return GroupCounts(group=group, users=list(group_config.users), counts=counts)

    async def reset_counts(self, group: str) -> Dict[str, int]:
        """Reset every member's count of ``group`` to zero.

        Raises:
            InvalidGroupError: If the group has no configuration file
            ConfigurationError: If the group configuration is invalid
            FileOperationError: If the counts file cannot be written
        """
        group_config = self.group_store.load(group)
        store = self.group_state(group).counts
        try:
            counts = await store.reset(group_config.users)
        except OSError as e:
            raise CommitError(
                f"failed to reset counts for group {group}: {e}",
                details={"group": group}
            ) from e

        self.logger.info("counts reset", group=group, users=len(counts))
        return counts
