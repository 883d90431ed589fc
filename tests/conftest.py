"""Pytest configuration and fixtures for gitpublisher tests."""

import io
import subprocess
import tempfile
from pathlib import Path

import pytest

from gitpublisher.build.console import BuildLog
from gitpublisher.core.log import ConsoleSink, setup_logger

PROJECT = "myproj"
BUILD_NUMBER = 42


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only debug logging; nothing is sent anywhere."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "gitpublisher-tests",
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


def git(cwd: Path, *args: str) -> str:
    """Run git in cwd and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def configure_identity(repo: Path) -> None:
    git(repo, "config", "user.name", "Build Bot")
    git(repo, "config", "user.email", "build@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")


@pytest.fixture
def remote_repo(tmp_path) -> Path:
    """Bare repository standing in for the remote."""
    remote = tmp_path / "remote.git"
    remote.mkdir()
    git(remote, "init", "--bare", "--initial-branch=master")
    return remote


@pytest.fixture
def workspace(tmp_path, remote_repo) -> Path:
    """Working copy with one commit, already pushed to remote_repo."""
    work = tmp_path / "workspace"
    work.mkdir()
    git(work, "init", "--initial-branch=master")
    configure_identity(work)
    (work / "README.md").write_text("hello\n")
    git(work, "add", "README.md")
    git(work, "commit", "-m", "Initial commit")
    git(work, "remote", "add", "origin", str(remote_repo))
    git(work, "push", "origin", "master")
    return work


@pytest.fixture
def build_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def build_log(build_output) -> BuildLog:
    return BuildLog(build_output)


@pytest.fixture
def run_git():
    """The git() helper, for tests that inspect repositories."""
    return git
