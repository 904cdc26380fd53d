"""Group configuration loading and discovery."""

from pathlib import Path
from typing import List

import yaml
from pydantic import ValidationError

from autoassigner.models.config import GroupConfig
from autoassigner.utils.exceptions import ConfigurationError, InvalidGroupError


GROUP_FILE_SUFFIX = ".yaml"


class GroupConfigStore:
    """Reads ``<conf_dir>/<group>.yaml`` files.

    Groups are read fresh on every call; nothing is cached.
    """

    def __init__(self, conf_dir: Path):
        self.conf_dir = Path(conf_dir)

    def config_path(self, group: str) -> Path:
        return self.conf_dir / f"{group}{GROUP_FILE_SUFFIX}"

    def exists(self, group: str) -> bool:
        return self.config_path(group).is_file()

    def load(self, group: str) -> GroupConfig:
        """Load a group's configuration.

        Args:
            group: Group name

        Returns:
            Parsed group configuration

        Raises:
            InvalidGroupError: If the group has no configuration file
            ConfigurationError: If the file cannot be read or parsed
        """
        path = self.config_path(group)
        if not self.exists(group):
            raise InvalidGroupError(group, reason=f"{path} not found")

        try:
            with open(path, "r", encoding="utf-8") as f:
                # Every scalar stays a string: ids like 10234 and names like "no" are usernames
                data = yaml.load(f, Loader=yaml.BaseLoader) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"failed to parse config file for group {group}: {e}",
                details={"group": group, "path": str(path)}
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"failed to read config file for group {group}: {e}",
                details={"group": group, "path": str(path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"config file for group {group} must be a mapping",
                details={"group": group, "path": str(path)}
            )

        try:
            return GroupConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"invalid config file for group {group}: {e}",
                details={"group": group, "path": str(path)}
            ) from e

    def list_groups(self) -> List[str]:
        """List groups that have a configuration file, sorted by name.

        Raises:
            ConfigurationError: If the configuration directory cannot be read
        """
        try:
            entries = list(self.conf_dir.iterdir())
        except OSError as e:
            raise ConfigurationError(
                f"failed to read config directory: {e}",
                details={"conf_dir": str(self.conf_dir)}
            ) from e

        return sorted(
            entry.name[:-len(GROUP_FILE_SUFFIX)]
            for entry in entries
            if entry.is_file() and entry.name.endswith(GROUP_FILE_SUFFIX)
        )
