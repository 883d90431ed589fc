"""Git command-line adapter bound to one working copy."""

from __future__ import annotations

import shlex
from pathlib import Path

from invoke import Result

from gitpublisher.build.console import BuildLog
from gitpublisher.build.model import is_revision_id
from gitpublisher.core.errors import VcsOperationError
from gitpublisher.core.log import logger
from gitpublisher.core.runner import TIMED_OUT, Runner


class GitRepository:
    """Runs git commands in a working copy.

    Every command is echoed to the build log and executed
    synchronously. Failures (non-zero exit, timeout, output that cannot
    be parsed) raise VcsOperationError.
    """

    def __init__(
        self,
        git_exe: str,
        workdir: Path,
        log: BuildLog,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
        runner: Runner | None = None,
    ):
        """Bind the adapter to a working copy.

        Args:
            git_exe: Path or name of the git executable
            workdir: Root of the working copy
            log: Build log that receives command lines
            env: Environment variables for git (merged over os.environ)
            timeout: Per-command timeout in seconds, None for no limit
            runner: Command runner, a new Runner by default

        Raises:
            FileNotFoundError: If workdir is not a directory
        """
        self.workdir = Path(workdir)
        if not self.workdir.is_dir():
            raise FileNotFoundError(
                f"Working directory does not exist: {self.workdir}"
            )
        self.git_exe = git_exe
        self.log = log
        self.env = dict(env or {})
        self.timeout = timeout
        self.runner = runner or Runner()

    def _command(self, args: tuple[str, ...]) -> str:
        return shlex.join([self.git_exe, *args])

    def _run(self, *args: str) -> Result:
        """Run git with args and return the result, whatever the exit."""
        command = self._command(args)
        self.log.println(f"$ {command}")
        result = self.runner.execute(
            command,
            cwd=self.workdir,
            timeout=self.timeout,
            check=False,
            env=self.env,
        )
        if result.exited == TIMED_OUT:
            raise VcsOperationError(
                f"Command '{command}' timed out after {self.timeout}s",
                command=command,
                returncode=TIMED_OUT,
                stderr=result.stderr,
            )
        return result

    def _git(self, *args: str) -> Result:
        """Run git with args, raising on a non-zero exit."""
        result = self._run(*args)
        if result.exited != 0:
            raise VcsOperationError.from_result(self._command(args), result)
        return result

    def tag_exists(self, name: str) -> bool:
        """Return True if a local tag called name exists.

        Raises:
            VcsOperationError: If git fails for any reason other than
                the tag being absent
        """
        args = ("rev-parse", "--quiet", "--verify", f"refs/tags/{name}")
        result = self._run(*args)
        if result.exited == 0:
            return True
        if result.exited == 1:
            return False
        raise VcsOperationError.from_result(self._command(args), result)

    def delete_tag(self, name: str) -> None:
        """Delete a local tag; a missing tag is not an error."""
        if not self.tag_exists(name):
            logger.debug("Tag not present, nothing to delete", tag=name)
            return
        self._git("tag", "-d", name)

    def stage_all(self) -> None:
        """Stage new, modified and deleted paths."""
        self._git("add", "-A")

    def has_pending_changes(self) -> bool:
        """Return True if the index differs from HEAD."""
        args = ("diff", "--cached", "--quiet")
        result = self._run(*args)
        if result.exited == 0:
            return False
        if result.exited == 1:
            return True
        raise VcsOperationError.from_result(self._command(args), result)

    def commit(self, message: str) -> None:
        self._git("commit", "-m", message)

    def create_annotated_tag(self, name: str, message: str) -> None:
        """Create an annotated tag at HEAD; fails if it already exists."""
        self._git("tag", "-a", name, "-m", message)

    def list_recent_revisions(self, limit: int, ref: str) -> list[str]:
        """Return up to limit commit names reachable from ref, newest first.

        Raises:
            VcsOperationError: If git fails or prints anything other
                than full commit names
        """
        args = ("rev-list", f"--max-count={limit}", ref)
        result = self._git(*args)
        revisions = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            if not is_revision_id(line):
                raise VcsOperationError(
                    f"Unexpected rev-list output: {line!r}",
                    command=self._command(args),
                    returncode=result.exited,
                )
            revisions.append(line)
        return revisions

    def push_ref(self, remote_uri: str, refspec: str) -> None:
        """Push one refspec to the remote at remote_uri.

        A rejected non-fast-forward update is raised like any other
        failure; it is never forced or retried.
        """
        self._git("push", remote_uri, refspec)

    def push_tags(self, remote_uri: str) -> None:
        self._git("push", "--tags", remote_uri)
