# Repokeeper Configuration Loader
# Load, save, and validate YAML configuration files

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from repokeeper.config.defaults import (
    ENV_USER_EMAIL,
    ENV_USER_NAME,
    generate_default_config,
    get_default_config,
)
from repokeeper.config.schema import IdentityConfig, RepokeeperConfig


def get_config_dir() -> Path:
    """Get the repokeeper configuration directory."""
    return Path.home() / ".config" / "repokeeper"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("REPOKEEPER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def resolve_identity(identity: Optional[IdentityConfig] = None) -> IdentityConfig:
    """
    Resolve the fallback commit author.

    A complete identity from configuration wins; otherwise both
    GIT_USER_NAME and GIT_USER_EMAIL must be set in the environment.

    Args:
        identity: Identity from the configuration file, if any.

    Returns:
        IdentityConfig, empty when neither source is complete.
    """
    if identity is not None and identity.is_complete():
        return identity

    name = os.environ.get(ENV_USER_NAME)
    email = os.environ.get(ENV_USER_EMAIL)
    if name and email:
        resolved = IdentityConfig(name=name, email=email)
        resolved._from_environment = True
        return resolved
    return IdentityConfig()


def load_config(config_path: Optional[Path] = None) -> RepokeeperConfig:
    """
    Load configuration from YAML file.

    A missing file yields the defaults. The identity is resolved from the
    environment here, once, when the file leaves it empty.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        RepokeeperConfig: Validated configuration object.

    Raises:
        ValidationError: If config file is invalid.
    """
    if config_path is None:
        config_path = get_config_path()

    data: dict = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    merged = _merge_with_defaults(data)
    config = RepokeeperConfig.model_validate(merged)
    config.identity = resolve_identity(config.identity)
    return config


def save_config(config: RepokeeperConfig, config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to YAML file.

    An identity taken from the environment is not written back.

    Args:
        config: Configuration object to save.
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Path: Path where config was saved.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    exclude = {"identity"} if config.identity._from_environment else None
    data = config.model_dump(exclude=exclude, exclude_none=True, mode="json")

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return config_path


def ensure_config_exists() -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    if not isinstance(data, dict):
        return False, ["Configuration root must be a mapping"]

    errors: list[str] = []
    try:
        RepokeeperConfig.model_validate(data)
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

    return len(errors) == 0, errors


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = get_default_config()

    for section in ("repository", "identity", "git", "logging"):
        if section in data and data[section]:
            result[section] = {**result[section], **data[section]}

    return result
