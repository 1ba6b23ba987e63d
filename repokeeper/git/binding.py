# Repokeeper Git Binding
# Handle to git bound to a single working directory

from pathlib import Path
from typing import Any, Optional, Union

from repokeeper.git.parsers import (
    LOG_FORMAT,
    parse_branches,
    parse_commit,
    parse_log,
    parse_merge,
    parse_pull,
    parse_rebase,
    parse_remotes,
    parse_status,
)
from repokeeper.git.results import (
    BranchSummary,
    CommitSummary,
    LogEntry,
    MergeSummary,
    PullSummary,
    RebaseSummary,
    RemoteInfo,
    StatusResult,
)
from repokeeper.git.runner import _run_git


def options_to_args(options: Optional[dict[str, Any]]) -> list[str]:
    """
    Convert an options map into command line flags.

    ``{"--rebase": "true"}`` becomes ``--rebase=true``; a value of None or
    True yields the bare flag and False drops it.

    Args:
        options: Mapping of flag to value.

    Returns:
        List of git arguments.
    """
    args: list[str] = []
    for flag, value in (options or {}).items():
        if value is None or value is True:
            args.append(flag)
        elif value is False:
            continue
        else:
            args.append(f"{flag}={value}")
    return args


class GitBinding:
    """
    Git bound to one working directory.

    Each coroutine runs exactly one git primitive (plus read-only lookups
    where a result needs them) and returns git's result in structured form.
    """

    def __init__(self, directory: Union[str, Path], *, binary: str = "git"):
        """
        Initialize binding.

        Args:
            directory: Working directory the commands run in.
            binary: Git executable.
        """
        self.directory = Path(directory)
        self.binary = binary

    def __repr__(self) -> str:
        return f"GitBinding({str(self.directory)!r})"

    async def _git(self, *args: str, cwd: Optional[Path] = None):
        return await _run_git(*args, cwd=cwd or self.directory, binary=self.binary)

    async def init(self) -> str:
        result = await self._git("init")
        return result.stdout.strip()

    async def add(self, files: list[str]) -> None:
        await self._git("add", "--", *files)

    async def commit(self, message: str, *, author: Optional[str] = None) -> CommitSummary:
        args = ["commit", "-m", message]
        if author:
            args.append(f"--author={author}")

        result = await self._git(*args)
        summary = parse_commit(result.stdout)
        if summary.author is None and author:
            summary.author = author

        head = await self._git("rev-parse", "HEAD")
        summary.commit = head.stdout.strip()
        return summary

    async def push(self, remote: str, branch: str, options: Optional[list[str]] = None) -> None:
        await self._git("push", *(options or []), remote, branch)

    async def pull(self, remote: str, branch: str, options: Optional[dict[str, Any]] = None) -> PullSummary:
        result = await self._git("pull", *options_to_args(options), remote, branch)
        return parse_pull(result.stdout, remote=remote, branch=branch)

    async def branch_local(self) -> BranchSummary:
        result = await self._git("branch", "--no-color")
        return parse_branches(result.stdout)

    async def status(self) -> StatusResult:
        result = await self._git("status", "--porcelain=v1", "--branch", "-z")
        return parse_status(result.stdout)

    async def get_remotes(self) -> list[RemoteInfo]:
        result = await self._git("remote", "-v")
        return parse_remotes(result.stdout)

    async def add_remote(self, name: str, url: str) -> None:
        await self._git("remote", "add", name, url)

    async def checkout_local_branch(self, name: str, start_point: Optional[str] = None) -> None:
        args = ["checkout", "-b", name]
        if start_point:
            args.append(start_point)
        await self._git(*args)

    async def checkout(self, name: str) -> None:
        await self._git("checkout", name, "--")

    async def merge(self, source: str, options: Optional[list[str]] = None) -> MergeSummary:
        target = (await self.branch_local()).current
        result = await self._git("merge", *(options or []), source)
        return parse_merge(result.stdout, source=source, target=target)

    async def rebase(self, base: str, options: Optional[list[str]] = None) -> RebaseSummary:
        branch = (await self.branch_local()).current
        result = await self._git("rebase", *(options or []), base)
        return parse_rebase(f"{result.stdout}\n{result.stderr}", base=base, branch=branch)

    async def fetch(self, remote: Optional[str] = None, *, prune: bool = False) -> None:
        args = ["fetch"]
        if prune:
            args.append("--prune")
        if remote:
            args.append(remote)
        await self._git(*args)

    async def clone(self, url: str, *, branch: Optional[str] = None, depth: Optional[int] = None) -> Path:
        """Clone *url* into this binding's directory."""
        args = ["clone"]
        if branch:
            args.extend(["-b", branch])
        if depth:
            args.extend(["--depth", str(depth)])
        dest = self.directory.resolve()
        args.extend([url, str(dest)])

        parent = dest.parent
        parent.mkdir(parents=True, exist_ok=True)
        await self._git(*args, cwd=parent)
        return dest

    async def log(self, max_count: Optional[int] = None) -> list[LogEntry]:
        args = ["log", f"--format={LOG_FORMAT}"]
        if max_count:
            args.append(f"--max-count={max_count}")
        result = await self._git(*args)
        return parse_log(result.stdout)
