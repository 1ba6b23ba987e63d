# Repokeeper Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from repokeeper.config.defaults import (
    DEFAULT_CONFIG,
    ENV_USER_EMAIL,
    ENV_USER_NAME,
    generate_default_config,
)
from repokeeper.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    resolve_identity,
    save_config,
    validate_config_file,
)
from repokeeper.config.schema import (
    GitConfig,
    IdentityConfig,
    LoggingConfig,
    RepokeeperConfig,
    RepositoryConfig,
)

__all__ = [
    # Schema
    "RepokeeperConfig",
    "RepositoryConfig",
    "IdentityConfig",
    "GitConfig",
    "LoggingConfig",
    # Loader
    "load_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    "resolve_identity",
    # Defaults
    "DEFAULT_CONFIG",
    "ENV_USER_NAME",
    "ENV_USER_EMAIL",
    "generate_default_config",
]
