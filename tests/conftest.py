"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Callable, List

import pytest
import structlog
import yaml

from autoassigner.core.management.config_manager import ConfigManager
from autoassigner.models.config import AutoAssignerConfig
from autoassigner.utils.logging import close_logging


@pytest.fixture
def conf_dir(tmp_path) -> Path:
    """Directory holding group configuration files."""
    path = tmp_path / "groups"
    path.mkdir()
    return path


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Base directory for group state (created on demand by the code)."""
    return tmp_path / "data"


@pytest.fixture
def config_dict(conf_dir, data_dir) -> dict:
    return {
        "storage": {
            "data_dir": str(data_dir),
            "conf_dir": str(conf_dir),
        },
        "availability": {
            "inout_api_url_prefix": "http://inout.test/status/",
            "inout_unavailable_statuses": ["OOO", "AWAY"],
        },
    }


@pytest.fixture
def sample_config(config_dict) -> AutoAssignerConfig:
    """A loaded process configuration pointing at temporary directories."""
    return AutoAssignerConfig(**config_dict)


@pytest.fixture
def config_file(tmp_path, config_dict) -> Path:
    """The process configuration written as config.json."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_dict, indent=2))
    return path


@pytest.fixture
def write_group(conf_dir) -> Callable[..., Path]:
    """Write a ``<group>.yaml`` file."""

    def _write(
        name: str,
        users: List[str],
        strategy: str = "round_robin",
        checker: str = "always_available"
    ) -> Path:
        path = conf_dir / f"{name}.yaml"
        path.write_text(yaml.safe_dump({
            "strategy": strategy,
            "availability_checker": checker,
            "users": users,
        }))
        return path

    return _write


@pytest.fixture
def team(write_group) -> str:
    """A round-robin group of three always available members."""
    write_group("team-alpha", ["alice", "bob", "charlie"])
    return "team-alpha"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host and .env variables out of the tests.

    Setting before deleting makes monkeypatch restore the original state,
    including variables that python-dotenv sets during a test.
    """
    for key in [*ConfigManager.ENV_MAPPINGS, "AUTOASSIGNER_LOG_FILE", "AUTOASSIGNER_LOG_LEVEL"]:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop logging configuration made by CLI invocations (their streams close)."""
    yield
    close_logging()
    structlog.reset_defaults()
