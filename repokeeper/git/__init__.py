# Repokeeper Git Module
# Git command execution bound to a working directory

from repokeeper.git.binding import GitBinding, options_to_args
from repokeeper.git.errors import (
    BranchUndeterminableError,
    ConflictDetail,
    ConflictEntry,
    EmptyCommitMessageError,
    ErrorKind,
    GitError,
    PreconditionError,
    RepositoryError,
)
from repokeeper.git.results import (
    BranchSummary,
    CommitSummary,
    FileStatus,
    LogEntry,
    MergeSummary,
    PullSummary,
    RebaseSummary,
    RemoteInfo,
    StatusResult,
)

__all__ = [
    # Binding
    "GitBinding",
    "options_to_args",
    # Errors
    "ErrorKind",
    "RepositoryError",
    "GitError",
    "PreconditionError",
    "EmptyCommitMessageError",
    "BranchUndeterminableError",
    "ConflictDetail",
    "ConflictEntry",
    # Results
    "CommitSummary",
    "PullSummary",
    "StatusResult",
    "FileStatus",
    "RemoteInfo",
    "BranchSummary",
    "MergeSummary",
    "RebaseSummary",
    "LogEntry",
]
