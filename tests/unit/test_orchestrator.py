"""Tests for the assignment orchestrator."""

import json
from typing import Dict, List

import httpx
import pytest

from autoassigner.core.availability import AvailabilityChecker
from autoassigner.core.orchestrator import AssignmentOrchestrator
from autoassigner.core.strategies import RoundRobinStrategy
from autoassigner.utils.exceptions import (
    AvailabilityError,
    CommitError,
    ConfigurationError,
    InvalidGroupError,
    NoAvailableAssigneeError,
    NoCountsFoundError,
    RemoteCheckFailure,
    SelectionError,
)


def inout_client(statuses: Dict[str, str], calls: List[str]) -> httpx.AsyncClient:
    """HTTP client answering In/Out lookups from ``statuses``; unknown users get a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        user = request.url.path.rsplit("/", 1)[-1]
        calls.append(user)
        if user not in statuses:
            return httpx.Response(404)
        return httpx.Response(200, json={"inOutLocation": statuses[user]})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def read_audit(data_dir, group) -> List[dict]:
    path = data_dir / group / "assignments.log"
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines()]


def write_counts(data_dir, group, counts):
    group_dir = data_dir / group
    group_dir.mkdir(parents=True, exist_ok=True)
    (group_dir / "counts.json").write_text(json.dumps(counts))


class TestAssign:
    """Test assignment runs."""

    @pytest.mark.asyncio
    async def test_round_robin_reference_scenario(self, sample_config, data_dir, team):
        """Test the first run picks alice and records it, the second picks bob."""
        orchestrator = AssignmentOrchestrator(sample_config)

        first = await orchestrator.assign(team)

        assert first.user == "alice"
        assert first.index == 0
        assert first.last_index == -1
        assert first.user_count == 1
        assert await orchestrator.group_state(team).positions.read() == 0
        counts = json.loads((data_dir / team / "counts.json").read_text())
        assert counts == {"alice": 1, "bob": 0, "charlie": 0}

        audit = read_audit(data_dir, team)
        assert len(audit) == 1
        assert audit[0]["user"] == "alice"
        assert audit[0]["group"] == team
        assert audit[0]["strategy"] == "round_robin"
        assert audit[0]["last_index"] == -1
        assert audit[0]["next_index"] == 0
        assert audit[0]["total_count"] == 3
        assert audit[0]["user_count"] == 1

        second = await orchestrator.assign(team)
        assert second.user == "bob"
        assert second.last_index == 0

    @pytest.mark.asyncio
    async def test_round_robin_wraps(self, sample_config, team):
        orchestrator = AssignmentOrchestrator(sample_config)
        users = [(await orchestrator.assign(team)).user for _ in range(4)]

        assert users == ["alice", "bob", "charlie", "alice"]

    @pytest.mark.asyncio
    async def test_counts_increment_monotonically(self, sample_config, data_dir, team):
        orchestrator = AssignmentOrchestrator(sample_config)
        for _ in range(6):
            await orchestrator.assign(team)

        counts = json.loads((data_dir / team / "counts.json").read_text())
        assert counts == {"alice": 2, "bob": 2, "charlie": 2}
        assert [e["user_count"] for e in read_audit(data_dir, team)] == [1, 1, 1, 2, 2, 2]

    @pytest.mark.asyncio
    async def test_least_assigned_skips_unavailable(self, sample_config, data_dir, write_group):
        """Test bob is least assigned but out, so the scan moves on to charlie."""
        write_group("ops", ["alice", "bob", "charlie"], strategy="least_assigned", checker="inout")
        write_counts(data_dir, "ops", {"alice": 2, "bob": 1, "charlie": 2})
        calls: List[str] = []
        client = inout_client({"alice": "OFFICE", "bob": "OOO", "charlie": "OFFICE"}, calls)

        orchestrator = AssignmentOrchestrator(sample_config, http_client=client)
        result = await orchestrator.assign("ops")

        assert result.user == "charlie"
        assert result.index == 2
        assert result.skipped == ["bob"]
        assert calls == ["bob", "charlie"]
        assert result.user_count == 3
        await client.aclose()

    @pytest.mark.asyncio
    async def test_scan_wraps_around(self, sample_config, data_dir, write_group):
        write_group("ops", ["alice", "bob", "charlie"], checker="inout")
        (data_dir / "ops").mkdir(parents=True)
        (data_dir / "ops" / "index.log").write_text("2024-01-01T00:00:00+00:00 -- 1\n")
        calls: List[str] = []
        client = inout_client({"alice": "OFFICE", "bob": "OFFICE", "charlie": "AWAY"}, calls)

        result = await AssignmentOrchestrator(sample_config, http_client=client).assign("ops")

        assert result.user == "alice"
        assert calls == ["charlie", "alice"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_nobody_available(self, sample_config, data_dir, write_group):
        """Test the scan checks each slot once and then gives up without writing."""
        write_group("ops", ["alice", "bob", "charlie"], checker="inout")
        calls: List[str] = []
        client = inout_client({"alice": "OOO", "bob": "AWAY", "charlie": "OOO"}, calls)

        with pytest.raises(NoAvailableAssigneeError, match="no available assignee found for group ops"):
            await AssignmentOrchestrator(sample_config, http_client=client).assign("ops")

        assert len(calls) == 3
        assert not (data_dir / "ops").exists()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_check_failure_stops_scan(self, sample_config, data_dir, write_group):
        """Test a failed lookup aborts instead of being treated as unavailable."""
        write_group("ops", ["alice", "ghost", "charlie"], checker="inout")
        (data_dir / "ops").mkdir(parents=True)
        (data_dir / "ops" / "index.log").write_text("2024-01-01T00:00:00+00:00 -- 0\n")
        calls: List[str] = []
        client = inout_client({"alice": "OFFICE", "charlie": "OFFICE"}, calls)

        with pytest.raises(AvailabilityError, match="ghost") as exc_info:
            await AssignmentOrchestrator(sample_config, http_client=client).assign("ops")

        assert isinstance(exc_info.value.__cause__, RemoteCheckFailure)
        assert exc_info.value.user == "ghost"
        assert calls == ["ghost"]
        assert read_audit(data_dir, "ops") == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_duplicate_members_are_separate_slots(self, sample_config, write_group):
        write_group("dup", ["alice", "bob", "alice"])
        orchestrator = AssignmentOrchestrator(sample_config)

        results = [await orchestrator.assign("dup") for _ in range(3)]

        assert [r.index for r in results] == [0, 1, 2]
        assert [r.user for r in results] == ["alice", "bob", "alice"]
        assert results[2].user_count == 2

    @pytest.mark.asyncio
    async def test_random_strategy(self, sample_config, write_group):
        write_group("lottery", ["alice", "bob"], strategy="random")

        result = await AssignmentOrchestrator(sample_config).assign("lottery")

        assert result.user in {"alice", "bob"}
        assert result.strategy == "random"


class TestDryRun:
    """Test dry runs leave state untouched."""

    @pytest.mark.asyncio
    async def test_no_state_created(self, sample_config, data_dir, team):
        result = await AssignmentOrchestrator(sample_config).assign(team, dry_run=True)

        assert result.dry_run is True
        assert result.user == "alice"
        assert result.user_count is None
        assert not (data_dir / team).exists()

    @pytest.mark.asyncio
    async def test_existing_state_unchanged(self, sample_config, data_dir, team):
        orchestrator = AssignmentOrchestrator(sample_config)
        await orchestrator.assign(team)
        group_dir = data_dir / team
        before = {p.name: p.read_bytes() for p in group_dir.iterdir()}

        first = await orchestrator.assign(team, dry_run=True)
        second = await orchestrator.assign(team, dry_run=True)

        assert first.user == second.user == "bob"
        assert {p.name: p.read_bytes() for p in group_dir.iterdir()} == before


class TestAssignErrors:
    """Test configuration and selection failures."""

    @pytest.mark.asyncio
    async def test_missing_group(self, sample_config):
        with pytest.raises(InvalidGroupError) as exc_info:
            await AssignmentOrchestrator(sample_config).assign("non-existent")

        assert isinstance(exc_info.value, ConfigurationError)

    @pytest.mark.asyncio
    async def test_no_users(self, sample_config, write_group):
        write_group("empty", [])

        with pytest.raises(ConfigurationError, match="no users found"):
            await AssignmentOrchestrator(sample_config).assign("empty")

    @pytest.mark.asyncio
    async def test_unknown_strategy(self, sample_config, write_group):
        write_group("odd", ["alice"], strategy="fifo")

        with pytest.raises(ConfigurationError, match="unknown strategy: fifo"):
            await AssignmentOrchestrator(sample_config).assign("odd")

    @pytest.mark.asyncio
    async def test_unknown_checker(self, sample_config, write_group):
        write_group("odd", ["alice"], checker="calendar")

        with pytest.raises(ConfigurationError, match="unknown availability checker: calendar"):
            await AssignmentOrchestrator(sample_config).assign("odd")

    @pytest.mark.asyncio
    async def test_strategy_failure_is_selection_error(self, sample_config, team, monkeypatch):
        orchestrator = AssignmentOrchestrator(sample_config)

        class EmptyListStrategy(RoundRobinStrategy):
            def select_next(self, users, last_index, counts=None):
                return super().select_next([], last_index, counts)

        monkeypatch.setattr(orchestrator, "resolve_strategy", lambda group, config: EmptyListStrategy())

        with pytest.raises(SelectionError, match="selection error for group team-alpha: empty users list"):
            await orchestrator.assign(team)

    @pytest.mark.asyncio
    async def test_write_failure_is_commit_error(self, sample_config, data_dir, team):
        """Test an unwritable group directory fails the assignment."""
        data_dir.mkdir()
        (data_dir / team).write_text("not a directory")

        with pytest.raises(CommitError, match="failed to record assignment of alice"):
            await AssignmentOrchestrator(sample_config).assign(team)


class TestCounts:
    """Test count inspection and reset."""

    @pytest.mark.asyncio
    async def test_get_counts_in_configured_order(self, sample_config, data_dir, team):
        write_counts(data_dir, team, {"charlie": 4, "alice": 1})

        counts = await AssignmentOrchestrator(sample_config).get_counts(team)

        assert counts.users == ["alice", "bob", "charlie"]
        assert counts.counts == {"alice": 1, "bob": 0, "charlie": 4}
        assert counts.ordered() == [("alice", 1), ("bob", 0), ("charlie", 4)]

    @pytest.mark.asyncio
    async def test_get_counts_fresh_group_is_all_zero(self, sample_config, data_dir, team):
        """Test a group that was never assigned reports every member at zero."""
        counts = await AssignmentOrchestrator(sample_config).get_counts(team)

        assert counts.ordered() == [("alice", 0), ("bob", 0), ("charlie", 0)]
        assert not (data_dir / team).exists()

    @pytest.mark.asyncio
    async def test_get_counts_group_without_members(self, sample_config, write_group):
        write_group("empty", [])

        with pytest.raises(NoCountsFoundError, match="no counts found for group empty"):
            await AssignmentOrchestrator(sample_config).get_counts("empty")

    @pytest.mark.asyncio
    async def test_get_counts_invalid_group(self, sample_config, conf_dir):
        (conf_dir / "broken.yaml").write_text("users: [alice\n")
        orchestrator = AssignmentOrchestrator(sample_config)

        with pytest.raises(InvalidGroupError):
            await orchestrator.get_counts("broken")
        with pytest.raises(InvalidGroupError):
            await orchestrator.get_counts("missing")

    @pytest.mark.asyncio
    async def test_reset_then_get(self, sample_config, team):
        orchestrator = AssignmentOrchestrator(sample_config)
        for _ in range(2):
            await orchestrator.assign(team)

        reset = await orchestrator.reset_counts(team)
        counts = await orchestrator.get_counts(team)

        assert reset == {"alice": 0, "bob": 0, "charlie": 0}
        assert counts.counts == {"alice": 0, "bob": 0, "charlie": 0}

    @pytest.mark.asyncio
    async def test_reset_keeps_position(self, sample_config, team):
        orchestrator = AssignmentOrchestrator(sample_config)
        await orchestrator.assign(team)
        await orchestrator.reset_counts(team)

        assert (await orchestrator.assign(team)).user == "bob"

    @pytest.mark.asyncio
    async def test_reset_missing_group(self, sample_config):
        with pytest.raises(InvalidGroupError):
            await AssignmentOrchestrator(sample_config).reset_counts("non-existent")


class CountingChecker(AvailabilityChecker):
    """Checker that records calls and rejects everyone."""

    def __init__(self):
        self.calls: List[str] = []

    async def is_available(self, username: str) -> bool:
        self.calls.append(username)
        return False


class TestScanBound:
    """Test the scan never inspects more than one pass of the member list."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 2, 5])
    async def test_at_most_one_pass(self, sample_config, write_group, monkeypatch, size):
        users = [f"user{i}" for i in range(size)]
        write_group("big", users)
        orchestrator = AssignmentOrchestrator(sample_config)
        checker = CountingChecker()
        monkeypatch.setattr(orchestrator, "resolve_checker", lambda group, config: checker)

        with pytest.raises(NoAvailableAssigneeError):
            await orchestrator.assign("big")

        assert len(checker.calls) == size
        assert sorted(checker.calls) == sorted(users)
