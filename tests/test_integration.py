# Repokeeper Integration Tests
# RepositoryOperations against a real git executable

import shutil
import subprocess
from pathlib import Path

import pytest

from repokeeper.config.schema import IdentityConfig
from repokeeper.git.errors import BranchUndeterminableError, EmptyCommitMessageError, ErrorKind, GitError
from repokeeper.git.results import MergeSummary
from repokeeper.service import RepositoryOperations

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def write(directory: Path, name: str, content: str) -> None:
    (directory / name).write_text(content, encoding="utf-8")


async def commit_file(ops: RepositoryOperations, repo: Path, name: str, content: str, message: str) -> None:
    write(repo, name, content)
    await ops.add_files([name], repo)
    await ops.commit_changes(message, repo)


@pytest.fixture
def real_ops(git_env: Path) -> RepositoryOperations:
    return RepositoryOperations()


@pytest.fixture
def repo(temp_dir: Path) -> Path:
    return temp_dir / "x"


class TestRepositoryLifecycle:
    """Init, stage, commit and inspect a repository."""

    @pytest.mark.asyncio
    async def test_init_creates_directory(self, real_ops, repo):
        message = await real_ops.init_repo(repo)

        assert (repo / ".git").is_dir()
        assert str(repo.resolve()) in message

    @pytest.mark.asyncio
    async def test_add_then_status_shows_staged(self, real_ops, repo):
        await real_ops.init_repo(repo)
        write(repo, "a.txt", "a\n")
        write(repo, "b.txt", "b\n")

        await real_ops.add_files(["a.txt", "b.txt"], repo)
        status = await real_ops.get_status(repo)

        assert sorted(status.staged) == ["a.txt", "b.txt"]
        assert status.not_added == []
        assert status.current is not None

    @pytest.mark.asyncio
    async def test_empty_commit_message(self, real_ops, repo):
        await real_ops.init_repo(repo)
        with pytest.raises(EmptyCommitMessageError):
            await real_ops.commit_changes("", repo)

    @pytest.mark.asyncio
    async def test_commit_and_log(self, real_ops, repo):
        await real_ops.init_repo(repo)
        write(repo, "a.txt", "a\n")
        await real_ops.add_files(["a.txt"], repo)
        summary = await real_ops.commit_changes("Initial commit", repo)

        assert summary.root is True
        assert len(summary.commit) == 40
        assert (await real_ops.get_status(repo)).is_clean()

        log = await real_ops.get_log(repo)
        assert [entry.subject for entry in log] == ["Initial commit"]
        assert log[0].sha == summary.commit

    @pytest.mark.asyncio
    async def test_nothing_to_commit_reraised(self, real_ops, repo):
        await real_ops.init_repo(repo)
        with pytest.raises(GitError) as exc_info:
            await real_ops.commit_changes("empty", repo)
        assert exc_info.value.returncode != 0


class TestCommitAuthor:
    """Author resolution: explicit > identity > git default."""

    @pytest.mark.asyncio
    async def test_author_tiers(self, git_env, repo):
        ops = RepositoryOperations(identity=IdentityConfig(name="Env User", email="env@example.com"))
        plain = RepositoryOperations()
        await ops.init_repo(repo)

        write(repo, "a.txt", "1\n")
        await ops.add_files(["a.txt"], repo)
        await ops.commit_changes("explicit", repo, author_name="Jane", author_email="jane@example.com")

        write(repo, "a.txt", "2\n")
        await ops.add_files(["a.txt"], repo)
        await ops.commit_changes("identity", repo, author_name="Jane")

        write(repo, "a.txt", "3\n")
        await plain.add_files(["a.txt"], repo)
        await plain.commit_changes("default", repo)

        authors = {e.subject: (e.author_name, e.author_email) for e in await ops.get_log(repo)}
        assert authors["explicit"] == ("Jane", "jane@example.com")
        assert authors["identity"] == ("Env User", "env@example.com")
        assert authors["default"] == ("Default Author", "default@example.com")


class TestBranches:
    """Branch creation, checkout, merge and rebase."""

    @pytest.mark.asyncio
    async def test_create_and_checkout(self, real_ops, repo):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "base\n", "base")
        main = await real_ops.get_current_branch(repo)

        await real_ops.create_and_checkout_branch("feature", repo)
        assert await real_ops.get_current_branch(repo) == "feature"

        await real_ops.checkout_branch(main, repo)
        assert await real_ops.get_current_branch(repo) == main

    @pytest.mark.asyncio
    async def test_clean_merge(self, real_ops, repo):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "base\n", "base")
        main = await real_ops.get_current_branch(repo)

        await real_ops.create_and_checkout_branch("feature", repo)
        await commit_file(real_ops, repo, "b.txt", "feature\n", "feature work")
        await real_ops.checkout_branch(main, repo)

        summary = await real_ops.merge_branch("feature", repo)
        assert isinstance(summary, MergeSummary)
        assert summary.fast_forward is True
        assert summary.target == main
        assert (repo / "b.txt").exists()

    @pytest.mark.asyncio
    async def test_merge_conflict(self, real_ops, repo):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "base\n", "base")
        main = await real_ops.get_current_branch(repo)

        await real_ops.create_and_checkout_branch("feature", repo)
        await commit_file(real_ops, repo, "a.txt", "feature\n", "feature change")
        await real_ops.checkout_branch(main, repo)
        await commit_file(real_ops, repo, "a.txt", "main\n", "main change")

        with pytest.raises(GitError) as exc_info:
            await real_ops.merge_branch("feature", repo)

        err = exc_info.value
        assert err.kind == ErrorKind.CONFLICT
        assert err.conflict.files == ["a.txt"]
        assert (await real_ops.get_status(repo)).conflicted == ["a.txt"]

    @pytest.mark.asyncio
    async def test_rebase(self, real_ops, repo):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "base\n", "base")
        main = await real_ops.get_current_branch(repo)

        await real_ops.create_and_checkout_branch("feature", repo)
        await commit_file(real_ops, repo, "b.txt", "feature\n", "feature work")
        await real_ops.checkout_branch(main, repo)
        await commit_file(real_ops, repo, "c.txt", "main\n", "main work")
        await real_ops.checkout_branch("feature", repo)

        summary = await real_ops.rebase_branch(main, repo)
        assert summary.branch == "feature"
        subjects = [e.subject for e in await real_ops.get_log(repo)]
        assert subjects == ["feature work", "main work", "base"]

    @pytest.mark.asyncio
    async def test_rebase_conflict(self, real_ops, repo):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "base\n", "base")
        main = await real_ops.get_current_branch(repo)

        await real_ops.create_and_checkout_branch("feature", repo)
        await commit_file(real_ops, repo, "a.txt", "feature\n", "feature change")
        await real_ops.checkout_branch(main, repo)
        await commit_file(real_ops, repo, "a.txt", "main\n", "main change")
        await real_ops.checkout_branch("feature", repo)

        with pytest.raises(GitError) as exc_info:
            await real_ops.rebase_branch(main, repo)

        err = exc_info.value
        assert err.kind == ErrorKind.CONFLICT
        assert err.conflict.files == ["a.txt"]


class TestRemotes:
    """Remotes, push and pull against a local bare repository."""

    @pytest.fixture
    def bare(self, temp_dir: Path) -> Path:
        path = temp_dir / "origin.git"
        subprocess.run(["git", "init", "--bare", str(path)], check=True, capture_output=True)
        return path

    @pytest.mark.asyncio
    async def test_add_and_list_remotes(self, real_ops, repo, bare):
        await real_ops.init_repo(repo)
        assert await real_ops.add_remote("origin", str(bare), repo) == "origin"

        remotes = await real_ops.get_remotes(repo)
        assert [r.name for r in remotes] == ["origin"]
        assert remotes[0].fetch_url == str(bare)

    @pytest.mark.asyncio
    async def test_push_without_commits(self, real_ops, repo, bare):
        await real_ops.init_repo(repo)
        await real_ops.add_remote("origin", str(bare), repo)

        with pytest.raises(BranchUndeterminableError):
            await real_ops.push_changes(directory=repo)

    @pytest.mark.asyncio
    async def test_push_clone_pull(self, real_ops, repo, bare, temp_dir):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "a\n", "first")
        await real_ops.add_remote("origin", str(bare), repo)
        await real_ops.push_changes(directory=repo, set_upstream=True)

        other = await real_ops.clone(str(bare), temp_dir / "other")
        assert (other / "a.txt").read_text(encoding="utf-8") == "a\n"

        await commit_file(real_ops, other, "b.txt", "b\n", "second")
        await real_ops.push_changes(directory=other)

        summary = await real_ops.pull_changes(directory=repo, options={"--ff-only": None})
        assert summary.already_up_to_date is False
        assert "b.txt" in summary.files
        assert (repo / "b.txt").exists()

        again = await real_ops.pull_changes(directory=repo)
        assert again.already_up_to_date is True

    @pytest.mark.asyncio
    async def test_fetch(self, real_ops, repo, bare):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "a\n", "first")
        await real_ops.add_remote("origin", str(bare), repo)
        await real_ops.push_changes(directory=repo)

        await real_ops.fetch("origin", repo, prune=True)

    @pytest.mark.asyncio
    async def test_push_to_missing_remote(self, real_ops, repo):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "a\n", "first")

        with pytest.raises(GitError) as exc_info:
            await real_ops.push_changes("nowhere", directory=repo)
        assert exc_info.value.kind == ErrorKind.COMMAND_FAILED

    @pytest.mark.asyncio
    async def test_pull_conflict(self, real_ops, repo, bare, temp_dir):
        await real_ops.init_repo(repo)
        await commit_file(real_ops, repo, "a.txt", "base\n", "base")
        await real_ops.add_remote("origin", str(bare), repo)
        await real_ops.push_changes(directory=repo, set_upstream=True)

        other = await real_ops.clone(str(bare), temp_dir / "other")
        await commit_file(real_ops, other, "a.txt", "theirs\n", "their change")
        await real_ops.push_changes(directory=other)
        await commit_file(real_ops, repo, "a.txt", "ours\n", "our change")

        with pytest.raises(GitError) as exc_info:
            await real_ops.pull_changes(directory=repo, options={"--no-rebase": None})

        err = exc_info.value
        assert err.kind == ErrorKind.CONFLICT
        assert err.conflict.files == ["a.txt"]
        assert "CONFLICT" in err.message or "Automatic merge failed" in err.message
        assert "FETCH_HEAD" not in err.message
