# Repokeeper Git Errors
# Tagged error types raised by git operations and local precondition checks

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kind of failure carried by a RepositoryError."""

    COMMAND_FAILED = "command_failed"
    CONFLICT = "conflict"
    GIT_NOT_FOUND = "git_not_found"
    EMPTY_MESSAGE = "empty_message"
    BRANCH_UNDETERMINABLE = "branch_undeterminable"


@dataclass
class ConflictEntry:
    """A single ``CONFLICT (...)`` line reported by git."""

    reason: str
    path: str


@dataclass
class ConflictDetail:
    """Paths git could not merge automatically."""

    entries: list[ConflictEntry] = field(default_factory=list)
    raw: str = ""

    @property
    def files(self) -> list[str]:
        """Conflicting paths in the order git reported them, without duplicates."""
        seen: list[str] = []
        for entry in self.entries:
            if entry.path not in seen:
                seen.append(entry.path)
        return seen


class RepositoryError(Exception):
    """Base exception for repository operations."""

    kind: ErrorKind = ErrorKind.COMMAND_FAILED

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        self.message = message
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class GitError(RepositoryError):
    """Exception raised when git reports a failure."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.COMMAND_FAILED,
        command: Optional[list[str]] = None,
        returncode: int = 1,
        stdout: str = "",
        stderr: str = "",
        conflict: Optional[ConflictDetail] = None,
    ):
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.conflict = conflict
        super().__init__(message, kind)

    @property
    def is_conflict(self) -> bool:
        return self.kind == ErrorKind.CONFLICT


class PreconditionError(RepositoryError, ValueError):
    """Raised before git is invoked when a call's arguments cannot work."""


class EmptyCommitMessageError(PreconditionError):
    """Commit message is empty or whitespace-only."""

    kind = ErrorKind.EMPTY_MESSAGE

    def __init__(self, message: str = "Commit message cannot be empty."):
        super().__init__(message)


class BranchUndeterminableError(PreconditionError):
    """No branch was given and the repository has no current local branch."""

    kind = ErrorKind.BRANCH_UNDETERMINABLE

    def __init__(self, action: str = "push"):
        self.action = action
        target = "to push" if action == "push" else "to pull into"
        super().__init__(f"Could not determine current branch {target}.")
