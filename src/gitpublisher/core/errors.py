"""Exception types raised by gitpublisher."""

from __future__ import annotations


class GitPublisherError(Exception):
    """Base class for all gitpublisher errors."""


class VcsOperationError(GitPublisherError):
    """A git command failed, timed out, or printed unparseable output.

    Attributes:
        command: Command line that was executed
        returncode: Exit code (-1 on timeout, None if not applicable)
        stderr: Captured standard error of the command
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

    @classmethod
    def from_result(cls, command: str, result) -> VcsOperationError:
        """Build an error from a failed invoke.Result."""
        stderr = (result.stderr or "").strip()
        detail = stderr or (result.stdout or "").strip()
        message = f"Command '{command}' returned status code {result.exited}"
        if detail:
            message = f"{message}: {detail}"
        return cls(
            message,
            command=command,
            returncode=result.exited,
            stderr=stderr,
        )


class RecordNotFoundError(GitPublisherError, LookupError):
    """No build record is stored for the requested build."""


__all__ = ["GitPublisherError", "VcsOperationError", "RecordNotFoundError"]
