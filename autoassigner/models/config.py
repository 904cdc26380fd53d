"""Configuration data models."""

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator


# Null spellings as they arrive from a loader that keeps scalars as strings
YAML_NULLS = ("", "~", "null", "Null", "NULL")


class StorageConfig(BaseModel):
    """Storage configuration."""

    data_dir: str = Field(..., description="Base directory for per-group state files")
    conf_dir: str = Field(..., description="Directory holding the <group>.yaml files")

    @field_validator("data_dir", "conf_dir")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Reject empty directory settings."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} is required in storage configuration")
        return v

    @property
    def data_path(self) -> Path:
        """Data directory as a path."""
        return Path(self.data_dir)

    @property
    def conf_path(self) -> Path:
        """Group configuration directory as a path."""
        return Path(self.conf_dir)


class AvailabilityConfig(BaseModel):
    """In/Out availability service configuration."""

    inout_api_url_prefix: str = Field(..., description="URL prefix the username is appended to")
    inout_unavailable_statuses: List[str] = Field(
        ...,
        description="Status values that mark a user as unavailable"
    )
    inout_status_field: str = Field(default="inOutLocation", description="Response field carrying the status")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @field_validator("inout_api_url_prefix")
    @classmethod
    def validate_url_prefix(cls, v: str) -> str:
        """Reject an empty URL prefix."""
        if not v or not v.strip():
            raise ValueError("inout_api_url_prefix is required in availability configuration")
        return v

    @field_validator("inout_unavailable_statuses")
    @classmethod
    def validate_statuses(cls, v: List[str]) -> List[str]:
        """Require at least one unavailable status."""
        if not v:
            raise ValueError("inout_unavailable_statuses is required in availability configuration")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class AutoAssignerConfig(BaseModel):
    """Process-wide AutoAssigner configuration.

    Built once at startup and handed to every component that needs it.
    """

    storage: StorageConfig
    availability: AvailabilityConfig

    def group_data_dir(self, group: str) -> Path:
        """Directory holding the state files of a group."""
        return self.storage.data_path / group


class GroupConfig(BaseModel):
    """Configuration of a single assignee group."""

    strategy: str = Field(default="", description="Selection strategy name")
    availability_checker: str = Field(default="", description="Availability checker name")
    users: List[str] = Field(default_factory=list, description="Ordered list of group members")

    @field_validator("users", mode="before")
    @classmethod
    def validate_users(cls, v):
        """Treat an empty ``users:`` key as no users."""
        if v is None or v in YAML_NULLS:
            return []
        return v
