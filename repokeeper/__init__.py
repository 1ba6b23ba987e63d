"""repokeeper - async git repository operations.

A thin service that runs git against a working directory: init, add,
commit, push, pull, branch, merge, rebase, status and remotes, with
logging and unchanged error propagation.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "RepositoryOperations",
    "GitBinding",
    "GitError",
    "RepositoryError",
    "PreconditionError",
    "EmptyCommitMessageError",
    "BranchUndeterminableError",
    "ErrorKind",
    "ConflictDetail",
    "load_config",
    "configure_logging",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "RepositoryOperations":
        from repokeeper.service import RepositoryOperations

        return RepositoryOperations
    if name == "load_config":
        from repokeeper.config import load_config

        return load_config
    if name == "configure_logging":
        from repokeeper.logger import configure_logging

        return configure_logging
    if name in (
        "GitBinding",
        "GitError",
        "RepositoryError",
        "PreconditionError",
        "EmptyCommitMessageError",
        "BranchUndeterminableError",
        "ErrorKind",
        "ConflictDetail",
    ):
        from repokeeper import git

        return getattr(git, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
