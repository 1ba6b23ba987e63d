# Repokeeper Git Results
# Structured results returned by git operations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CommitSummary:
    """Result of ``git commit``."""

    branch: str = ""
    commit: str = ""
    root: bool = False
    author: Optional[str] = None
    changes: int = 0
    insertions: int = 0
    deletions: int = 0
    raw: str = ""


@dataclass
class PullSummary:
    """Result of ``git pull``."""

    remote: str = ""
    branch: str = ""
    already_up_to_date: bool = False
    files: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    changes: int = 0
    insertions: int = 0
    deletions: int = 0
    raw: str = ""


@dataclass
class FileStatus:
    """One entry of ``git status --porcelain``.

    ``index`` and ``working_dir`` hold git's X and Y status letters.
    """

    path: str
    index: str
    working_dir: str
    from_path: Optional[str] = None


@dataclass
class StatusResult:
    """Working tree snapshot from ``git status``."""

    current: Optional[str] = None
    tracking: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    detached: bool = False
    files: list[FileStatus] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    renamed: list[tuple[str, str]] = field(default_factory=list)
    not_added: list[str] = field(default_factory=list)
    conflicted: list[str] = field(default_factory=list)

    def is_clean(self) -> bool:
        """Return True when nothing is staged, modified or untracked."""
        return not self.files


@dataclass
class RemoteInfo:
    """A configured remote with its URLs."""

    name: str
    fetch_url: str = ""
    push_url: str = ""


@dataclass
class BranchSummary:
    """Local branches and the one currently checked out."""

    current: Optional[str] = None
    detached: bool = False
    all: list[str] = field(default_factory=list)


@dataclass
class MergeSummary:
    """Result of merging a branch into the current branch."""

    source: str = ""
    target: Optional[str] = None
    fast_forward: bool = False
    already_up_to_date: bool = False
    changes: int = 0
    insertions: int = 0
    deletions: int = 0
    raw: str = ""


@dataclass
class RebaseSummary:
    """Result of rebasing the current branch onto a base."""

    base: str = ""
    branch: Optional[str] = None
    already_up_to_date: bool = False
    raw: str = ""


@dataclass
class LogEntry:
    """A single commit from ``git log``."""

    sha: str
    author_name: str
    author_email: str
    date: str
    subject: str
