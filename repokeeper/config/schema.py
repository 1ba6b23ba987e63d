# Repokeeper Configuration Schema
# Pydantic models for YAML configuration validation

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr, field_validator


class RepositoryConfig(BaseModel):
    """Defaults applied when a call omits them."""

    directory: str = Field(default=".", description="Working directory used when none is given")
    remote: str = Field(default="origin", description="Remote used for push and pull")

    @field_validator("directory")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class IdentityConfig(BaseModel):
    """Fallback commit author when a commit names none."""

    name: Optional[str] = Field(default=None, description="Author name")
    email: Optional[str] = Field(default=None, description="Author email")
    _from_environment: bool = PrivateAttr(default=False)

    def is_complete(self) -> bool:
        """Return True when both name and email are set."""
        return bool(self.name and self.email)

    def as_author(self) -> Optional[str]:
        """Return the identity in git's ``Name <email>`` form."""
        if not self.is_complete():
            return None
        return f"{self.name} <{self.email}>"


class GitConfig(BaseModel):
    """Settings for invoking git."""

    binary: str = Field(default="git", description="Git executable name or path")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level for the repokeeper logger")
    rich: bool = Field(default=True, description="Use rich console output")
    log_file: Optional[str] = Field(default=None, description="Path to log file")

    @field_validator("level")
    @classmethod
    def check_level(cls, v: str) -> str:
        """Accept stdlib level names only."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ in optional path."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class RepokeeperConfig(BaseModel):
    """Root configuration model for repokeeper."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig, description="Call defaults")
    identity: IdentityConfig = Field(default_factory=IdentityConfig, description="Fallback commit author")
    git: GitConfig = Field(default_factory=GitConfig, description="Git invocation settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")
