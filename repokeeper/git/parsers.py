# Repokeeper Git Parsers
# Turn git's text and porcelain output into result objects

import re
from typing import Optional

from repokeeper.git.errors import ConflictDetail, ConflictEntry
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

# Separator used in the --format string of get_log
LOG_FIELD_SEP = "\x1f"
LOG_FORMAT = LOG_FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%s"])

_CONFLICT_RE = re.compile(r"^CONFLICT \(([^)]+)\): (.*)$")
_COMMIT_HEADER_RE = re.compile(r"^\[(?P<branch>.+?)(?: \((?P<root>root-commit)\))? (?P<commit>[0-9a-f]+)\] ")
_STATS_RE = re.compile(
    r"(\d+) files? changed(?:, (\d+) insertions?\(\+\))?(?:, (\d+) deletions?\(-\))?"
)
_DIFFSTAT_FILE_RE = re.compile(r"^\s(.+?)\s+\|\s+")
_CREATE_MODE_RE = re.compile(r"^\s*create mode \d+ (.+)$")
_DELETE_MODE_RE = re.compile(r"^\s*delete mode \d+ (.+)$")
_BRANCH_HEADER_RE = re.compile(
    r"^(?P<current>.+?)(?:\.\.\.(?P<tracking>\S+))?(?: \[(?P<counts>[^\]]+)\])?$"
)

# XY combinations git uses for unmerged paths
_UNMERGED = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


def parse_conflicts(text: str) -> Optional[ConflictDetail]:
    """
    Extract conflict lines from merge, rebase or pull output.

    Args:
        text: Combined stdout/stderr of the failed command.

    Returns:
        ConflictDetail, or None if git reported no conflicts.
    """
    entries: list[ConflictEntry] = []
    for line in text.splitlines():
        match = _CONFLICT_RE.match(line.strip())
        if not match:
            continue
        reason, rest = match.group(1), match.group(2)
        if "Merge conflict in " in rest:
            path = rest.split("Merge conflict in ", 1)[1].strip()
        else:
            # e.g. "a.txt deleted in HEAD and modified in feature."
            path = rest.split(" ", 1)[0]
        entries.append(ConflictEntry(reason=reason, path=path))

    if not entries:
        return None
    return ConflictDetail(entries=entries, raw=text.strip())


def _apply_stats(text: str, target) -> None:
    """Copy the 'N files changed' counters onto a summary object."""
    match = _STATS_RE.search(text)
    if not match:
        return
    target.changes = int(match.group(1))
    target.insertions = int(match.group(2) or 0)
    target.deletions = int(match.group(3) or 0)


def parse_commit(output: str) -> CommitSummary:
    """Parse the output of ``git commit``."""
    summary = CommitSummary(raw=output.strip())
    for line in output.splitlines():
        header = _COMMIT_HEADER_RE.match(line)
        if header:
            summary.branch = header.group("branch")
            summary.commit = header.group("commit")
            summary.root = header.group("root") is not None
            continue
        stripped = line.strip()
        if stripped.startswith("Author: "):
            summary.author = stripped[len("Author: "):]
    _apply_stats(output, summary)
    return summary


def parse_pull(output: str, remote: str = "", branch: str = "") -> PullSummary:
    """Parse the output of ``git pull``."""
    summary = PullSummary(remote=remote, branch=branch, raw=output.strip())
    summary.already_up_to_date = "Already up to date" in output or "Already up-to-date" in output

    for line in output.splitlines():
        file_match = _DIFFSTAT_FILE_RE.match(line)
        if file_match:
            summary.files.append(file_match.group(1).strip())
            continue
        created = _CREATE_MODE_RE.match(line)
        if created:
            summary.created.append(created.group(1).strip())
            continue
        deleted = _DELETE_MODE_RE.match(line)
        if deleted:
            summary.deleted.append(deleted.group(1).strip())

    _apply_stats(output, summary)
    return summary


def parse_merge(output: str, source: str, target: Optional[str] = None) -> MergeSummary:
    """Parse the output of a successful ``git merge``."""
    summary = MergeSummary(source=source, target=target, raw=output.strip())
    summary.fast_forward = "Fast-forward" in output
    summary.already_up_to_date = "Already up to date" in output or "Already up-to-date" in output
    _apply_stats(output, summary)
    return summary


def parse_rebase(output: str, base: str, branch: Optional[str] = None) -> RebaseSummary:
    """Parse the output of a successful ``git rebase``."""
    return RebaseSummary(
        base=base,
        branch=branch,
        already_up_to_date="is up to date" in output,
        raw=output.strip(),
    )


def _parse_branch_header(header: str, result: StatusResult) -> None:
    """Fill branch fields from the ``## ...`` line of porcelain status."""
    for prefix in ("No commits yet on ", "Initial commit on "):
        if header.startswith(prefix):
            result.current = header[len(prefix):]
            return

    if header.startswith("HEAD (no branch)"):
        result.detached = True
        return

    match = _BRANCH_HEADER_RE.match(header)
    if not match:
        return

    result.current = match.group("current")
    result.tracking = match.group("tracking")

    counts = match.group("counts") or ""
    for part in counts.split(","):
        part = part.strip()
        if part.startswith("ahead "):
            result.ahead = int(part[len("ahead "):])
        elif part.startswith("behind "):
            result.behind = int(part[len("behind "):])


def parse_status(output: str) -> StatusResult:
    """
    Parse ``git status --porcelain=v1 --branch -z`` output.

    Args:
        output: NUL-separated porcelain output.

    Returns:
        StatusResult snapshot.
    """
    result = StatusResult()
    tokens = output.split("\0")
    i = 0

    while i < len(tokens):
        entry = tokens[i]
        i += 1
        if not entry:
            continue

        if entry.startswith("## "):
            _parse_branch_header(entry[3:], result)
            continue

        # Format: XY filename
        # X = index status, Y = worktree status
        status_code = entry[:2]
        path = entry[3:]
        index_status, worktree_status = status_code[0], status_code[1]

        from_path = None
        if index_status in ("R", "C"):
            # -z puts the original path in the following token
            from_path = tokens[i] if i < len(tokens) else None
            i += 1

        if status_code == "!!":
            continue

        result.files.append(FileStatus(path=path, index=index_status, working_dir=worktree_status, from_path=from_path))

        if status_code in _UNMERGED:
            result.conflicted.append(path)
            continue
        if status_code == "??":
            result.not_added.append(path)
            continue

        if index_status not in (" ", "?"):
            result.staged.append(path)
        if index_status == "R" and from_path is not None:
            result.renamed.append((from_path, path))
        if index_status == "A":
            result.created.append(path)
        if "D" in (index_status, worktree_status):
            result.deleted.append(path)
        if "M" in (index_status, worktree_status):
            result.modified.append(path)

    return result


def parse_branches(output: str) -> BranchSummary:
    """Parse ``git branch --no-color`` output."""
    summary = BranchSummary()
    for line in output.splitlines():
        if not line.strip():
            continue
        marker, name = line[:2], line[2:].strip()
        if name.startswith("("):
            # "(HEAD detached at 1a2b3c4)"
            if marker.startswith("*"):
                summary.detached = True
            continue
        summary.all.append(name)
        if marker.startswith("*"):
            summary.current = name
    return summary


def parse_remotes(output: str) -> list[RemoteInfo]:
    """Parse ``git remote -v`` output, keeping git's order."""
    remotes: dict[str, RemoteInfo] = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2:
            continue
        name, url = parts[0], parts[1]
        kind = parts[2] if len(parts) > 2 else ""
        remote = remotes.setdefault(name, RemoteInfo(name=name))
        if kind == "(push)":
            remote.push_url = url
        else:
            remote.fetch_url = url
    return list(remotes.values())


def parse_log(output: str) -> list[LogEntry]:
    """Parse ``git log`` output produced with LOG_FORMAT."""
    entries: list[LogEntry] = []
    for line in output.splitlines():
        fields = line.split(LOG_FIELD_SEP)
        if len(fields) != 5:
            continue
        sha, author_name, author_email, date, subject = fields
        entries.append(
            LogEntry(sha=sha, author_name=author_name, author_email=author_email, date=date, subject=subject)
        )
    return entries
