"""Repository operations service.

Each coroutine forwards one version-control primitive to a GitBinding
created for the target directory, logs the outcome once, and re-raises
failures unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from repokeeper.config.loader import resolve_identity
from repokeeper.config.schema import IdentityConfig, RepokeeperConfig
from repokeeper.git.binding import GitBinding
from repokeeper.git.errors import (
    BranchUndeterminableError,
    EmptyCommitMessageError,
    GitError,
)
from repokeeper.git.results import (
    CommitSummary,
    LogEntry,
    MergeSummary,
    PullSummary,
    RebaseSummary,
    RemoteInfo,
    StatusResult,
)
from repokeeper.logger import ServiceLogAdapter, get_service_logger

PathLike = Union[str, Path]
BindingFactory = Callable[[Path], GitBinding]


class RepositoryOperations:
    """Logged pass-through to git for one working directory per call.

    No state is shared between calls: every operation builds a fresh
    binding, so concurrent calls against one directory rely on git's own
    index and ref locks.
    """

    def __init__(
        self,
        *,
        identity: Optional[IdentityConfig] = None,
        default_directory: PathLike = ".",
        default_remote: str = "origin",
        git_binary: str = "git",
        binding_factory: Optional[BindingFactory] = None,
        logger: Optional[ServiceLogAdapter] = None,
    ):
        """
        Initialize the service.

        Args:
            identity: Fallback commit author. Resolved from GIT_USER_NAME and
                GIT_USER_EMAIL when omitted.
            default_directory: Directory used when a call passes none.
            default_remote: Remote used by push and pull when none is given.
            git_binary: Git executable for the default binding.
            binding_factory: Callable building a binding for a directory.
            logger: Service log adapter.
        """
        self.identity = identity if identity is not None else resolve_identity()
        self.default_directory = Path(default_directory)
        self.default_remote = default_remote
        self._binding_factory = binding_factory or partial(GitBinding, binary=git_binary)
        self._log = logger or get_service_logger()

    @classmethod
    def from_config(cls, config: Optional[RepokeeperConfig] = None, **kwargs: Any) -> "RepositoryOperations":
        """Build the service from a loaded configuration."""
        if config is None:
            from repokeeper.config.loader import load_config

            config = load_config()

        return cls(
            identity=config.identity,
            default_directory=config.repository.directory,
            default_remote=config.repository.remote,
            git_binary=config.git.binary,
            **kwargs,
        )

    # -- Helpers --------------------------------------------------------------

    def _directory(self, directory: Optional[PathLike]) -> Path:
        return Path(directory) if directory is not None else self.default_directory

    def _resolve_author(self, name: Optional[str], email: Optional[str]) -> Optional[str]:
        """Explicit name and email first, then the configured identity."""
        if name and email:
            return f"{name} <{email}>"
        return self.identity.as_author()

    async def _branch_or_current(self, git: GitBinding, branch: Optional[str], action: str) -> str:
        if branch:
            return branch
        current = (await git.branch_local()).current
        if not current:
            raise BranchUndeterminableError(action)
        return current

    def _failed(self, message: str, error: Exception, path: Path, **context: Any) -> None:
        """Emit the single error entry for a failed call."""
        context["path"] = str(path)
        context["message"] = getattr(error, "message", str(error))
        if isinstance(error, GitError):
            context["kind"] = error.kind.value
            if error.conflict is not None:
                context["conflicts"] = error.conflict.files
        self._log.error(message, context=context, exc_info=error)

    # -- Repository -----------------------------------------------------------

    async def init_repo(self, directory: Optional[PathLike] = None) -> str:
        """
        Create the directory if needed and initialize a repository in it.

        Returns:
            Message naming the absolute path of the new ``.git`` directory.
        """
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            path.mkdir(parents=True, exist_ok=True)
            await git.init()
        except Exception as e:
            self._failed(f"Error initializing repository in {path}", e, path)
            raise

        message = f"Initialized empty Git repository in {path.resolve()}/.git/"
        self._log.info(message, context={"path": str(path)})
        return message

    async def clone(
        self,
        url: str,
        directory: Optional[PathLike] = None,
        *,
        branch: Optional[str] = None,
        depth: Optional[int] = None,
    ) -> Path:
        """Clone *url* into *directory*; returns the resolved destination."""
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            dest = await git.clone(url, branch=branch, depth=depth)
        except Exception as e:
            self._failed(f"Error cloning {url}", e, path, url=url, branch=branch)
            raise

        self._log.info("Cloned %s into %s", url, dest, context={"path": str(path), "branch": branch, "depth": depth})
        return dest

    # -- Stage / commit -------------------------------------------------------

    async def add_files(self, files: Union[PathLike, list[PathLike]] = ".", directory: Optional[PathLike] = None) -> None:
        """Stage one path, a list of paths, or everything (``"."``)."""
        path = self._directory(directory)
        paths = [str(f) for f in files] if isinstance(files, (list, tuple)) else [str(files)]
        git = self._binding_factory(path)
        try:
            await git.add(paths)
        except Exception as e:
            self._failed("Error adding files to staging", e, path, files=paths)
            raise

        self._log.info("Files staged: %s", ", ".join(paths), context={"path": str(path)})

    async def commit_changes(
        self,
        message: str,
        directory: Optional[PathLike] = None,
        author_name: Optional[str] = None,
        author_email: Optional[str] = None,
    ) -> CommitSummary:
        """
        Commit staged changes.

        The author is the explicit name and email when both are given,
        else the configured identity, else git's own default.

        Raises:
            EmptyCommitMessageError: Message is empty or whitespace-only.
            GitError: git rejected the commit.
        """
        path = self._directory(directory)
        if not message or not message.strip():
            error = EmptyCommitMessageError()
            self._failed(error.message, error, path)
            raise error

        author = self._resolve_author(author_name, author_email)
        git = self._binding_factory(path)
        try:
            summary = await git.commit(message, author=author)
        except Exception as e:
            self._failed("Error committing changes", e, path, commit_message=message, author=author)
            raise

        self._log.info('Changes committed: "%s"', message, context={"path": str(path), "commit": summary.commit, "author": author})
        return summary

    # -- Remotes --------------------------------------------------------------

    async def push_changes(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        directory: Optional[PathLike] = None,
        set_upstream: bool = False,
    ) -> None:
        """
        Push *branch* (default: the current branch) to *remote*.

        Raises:
            BranchUndeterminableError: No branch given and none checked out.
            GitError: git rejected the push.
        """
        path = self._directory(directory)
        remote = remote or self.default_remote
        git = self._binding_factory(path)
        target = branch
        try:
            target = await self._branch_or_current(git, branch, "push")
            options = ["--set-upstream"] if set_upstream else []
            await git.push(remote, target, options)
        except Exception as e:
            self._failed(f"Error pushing {target} to {remote}", e, path, remote=remote, branch=target)
            raise

        self._log.info("Pushed %s to %s", target, remote, context={"path": str(path), "set_upstream": set_upstream})

    async def pull_changes(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        directory: Optional[PathLike] = None,
        options: Optional[dict[str, Any]] = None,
    ) -> PullSummary:
        """
        Pull *branch* (default: the current branch) from *remote*.

        Args:
            options: Extra flags, e.g. ``{"--rebase": "true"}`` or ``{"--ff-only": None}``.

        Raises:
            BranchUndeterminableError: No branch given and none checked out.
            GitError: git failed, including conflicts while merging.
        """
        path = self._directory(directory)
        remote = remote or self.default_remote
        git = self._binding_factory(path)
        target = branch
        try:
            target = await self._branch_or_current(git, branch, "pull")
            summary = await git.pull(remote, target, options)
        except Exception as e:
            self._failed(f"Error pulling {target} from {remote}", e, path, remote=remote, branch=target)
            raise

        self._log.info(
            "Pulled %s from %s",
            target,
            remote,
            context={"path": str(path), "changes": summary.changes, "up_to_date": summary.already_up_to_date},
        )
        return summary

    async def fetch(self, remote: Optional[str] = None, directory: Optional[PathLike] = None, prune: bool = False) -> None:
        """Fetch from *remote*, or from git's default when omitted."""
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            await git.fetch(remote, prune=prune)
        except Exception as e:
            self._failed(f"Error fetching {remote or 'default remote'}", e, path, remote=remote)
            raise

        self._log.info("Fetched %s", remote or "default remote", context={"path": str(path), "prune": prune})

    async def get_remotes(self, directory: Optional[PathLike] = None) -> list[RemoteInfo]:
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            remotes = await git.get_remotes()
        except Exception as e:
            self._failed("Error getting remotes", e, path)
            raise

        self._log.debug("Fetched remotes.", context={"path": str(path), "remotes": [r.name for r in remotes]})
        return remotes

    async def add_remote(self, name: str, url: str, directory: Optional[PathLike] = None) -> str:
        """Register a remote; returns its name."""
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            await git.add_remote(name, url)
        except Exception as e:
            self._failed(f"Error adding remote {name}", e, path, url=url)
            raise

        self._log.info("Added remote: %s -> %s", name, url, context={"path": str(path)})
        return name

    # -- Queries --------------------------------------------------------------

    async def get_current_branch(self, directory: Optional[PathLike] = None) -> Optional[str]:
        """Return the checked-out local branch, or None (unborn or detached HEAD)."""
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            summary = await git.branch_local()
        except Exception as e:
            self._failed("Error getting current branch", e, path)
            raise

        self._log.debug("Current branch: %s", summary.current, context={"path": str(path)})
        return summary.current

    async def get_status(self, directory: Optional[PathLike] = None) -> StatusResult:
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            status = await git.status()
        except Exception as e:
            self._failed("Error getting Git status", e, path)
            raise

        self._log.debug(
            "Fetched Git status.",
            context={"path": str(path), "branch": status.current, "files": len(status.files)},
        )
        return status

    async def get_log(self, directory: Optional[PathLike] = None, max_count: Optional[int] = None) -> list[LogEntry]:
        """Return commit history of the current branch, newest first."""
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            entries = await git.log(max_count)
        except Exception as e:
            self._failed("Error reading commit history", e, path, max_count=max_count)
            raise

        self._log.debug("Fetched %d log entries.", len(entries), context={"path": str(path)})
        return entries

    # -- Branches -------------------------------------------------------------

    async def create_and_checkout_branch(
        self,
        name: str,
        directory: Optional[PathLike] = None,
        start_point: Optional[str] = None,
    ) -> None:
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            await git.checkout_local_branch(name, start_point)
        except Exception as e:
            self._failed(f"Error creating/checking out branch {name}", e, path, start_point=start_point)
            raise

        self._log.info("Created and checked out new branch: %s", name, context={"path": str(path), "start_point": start_point})

    async def checkout_branch(self, name: str, directory: Optional[PathLike] = None) -> None:
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            await git.checkout(name)
        except Exception as e:
            self._failed(f"Error checking out branch {name}", e, path)
            raise

        self._log.info("Checked out branch: %s", name, context={"path": str(path)})

    async def merge_branch(
        self,
        source: str,
        directory: Optional[PathLike] = None,
        options: Optional[list[str]] = None,
    ) -> MergeSummary:
        """
        Merge *source* into the current branch.

        Raises:
            GitError: With ``kind == ErrorKind.CONFLICT`` and ``conflict`` set
                when git stops on conflicting paths.
        """
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            summary = await git.merge(source, options)
        except Exception as e:
            self._failed(f"Error merging branch {source}", e, path, options=options or [])
            raise

        self._log.info(
            "Merged branch %s into current branch.",
            source,
            context={"path": str(path), "target": summary.target, "fast_forward": summary.fast_forward},
        )
        return summary

    async def rebase_branch(
        self,
        base: str,
        directory: Optional[PathLike] = None,
        options: Optional[list[str]] = None,
    ) -> RebaseSummary:
        """
        Rebase the current branch onto *base*.

        Raises:
            GitError: With ``kind == ErrorKind.CONFLICT`` and ``conflict`` set
                when git stops on conflicting paths.
        """
        path = self._directory(directory)
        git = self._binding_factory(path)
        try:
            summary = await git.rebase(base, options)
        except Exception as e:
            self._failed(f"Error rebasing onto {base}", e, path, options=options or [])
            raise

        self._log.info("Successfully rebased current branch onto %s.", base, context={"path": str(path), "branch": summary.branch})
        return summary
