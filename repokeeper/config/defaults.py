# Repokeeper Default Configuration
# Default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

# Environment variables holding the fallback commit author
ENV_USER_NAME = "GIT_USER_NAME"
ENV_USER_EMAIL = "GIT_USER_EMAIL"

DEFAULT_CONFIG: dict[str, Any] = {
    "repository": {
        "directory": ".",
        "remote": "origin",
    },
    "identity": {
        "name": None,
        "email": None,
    },
    "git": {
        "binary": "git",
    },
    "logging": {
        "level": "INFO",
        "rich": True,
        "log_file": None,
    },
}


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of DEFAULT_CONFIG safe to mutate."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = f"""# repokeeper configuration
#
# repository: defaults used when a call omits the directory or remote
# identity:   fallback commit author; when empty, {ENV_USER_NAME} and
#             {ENV_USER_EMAIL} are read from the environment at load time
# git:        git executable to invoke
# logging:    level, rich console output and optional log file

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
