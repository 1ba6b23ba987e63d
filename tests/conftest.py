# Repokeeper Test Fixtures
# Pytest fixtures for repokeeper tests

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, create_autospec

import pytest

from repokeeper.config.schema import IdentityConfig
from repokeeper.git.binding import GitBinding
from repokeeper.git.results import BranchSummary, CommitSummary, MergeSummary, PullSummary, RebaseSummary, StatusResult
from repokeeper.service import RepositoryOperations


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("REPOKEEPER_CONFIG", raising=False)
    monkeypatch.delenv("GIT_USER_NAME", raising=False)
    monkeypatch.delenv("GIT_USER_EMAIL", raising=False)
    return home


@pytest.fixture
def git_env(temp_home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate git from user and system config, with a committer identity."""
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Default Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "default@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Default Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "default@example.com")
    return temp_home


@pytest.fixture
def binding() -> MagicMock:
    """GitBinding double whose coroutines return empty results."""
    fake = create_autospec(GitBinding, instance=True)
    fake.init.return_value = ""
    fake.commit.return_value = CommitSummary(branch="main", commit="abc123")
    fake.pull.return_value = PullSummary(remote="origin", branch="main")
    fake.branch_local.return_value = BranchSummary(current="main", all=["main"])
    fake.status.return_value = StatusResult(current="main")
    fake.get_remotes.return_value = []
    fake.merge.return_value = MergeSummary(source="feature", target="main")
    fake.rebase.return_value = RebaseSummary(base="main", branch="feature")
    fake.log.return_value = []
    return fake


@pytest.fixture
def binding_factory(binding: MagicMock) -> MagicMock:
    """Factory returning the binding double for any directory."""
    return MagicMock(return_value=binding)


@pytest.fixture
def ops(binding_factory: MagicMock, monkeypatch: pytest.MonkeyPatch) -> RepositoryOperations:
    """Service wired to the binding double, without a fallback identity."""
    monkeypatch.delenv("GIT_USER_NAME", raising=False)
    monkeypatch.delenv("GIT_USER_EMAIL", raising=False)
    return RepositoryOperations(binding_factory=binding_factory)


@pytest.fixture
def env_identity() -> IdentityConfig:
    return IdentityConfig(name="Env User", email="env@example.com")
