"""Command execution on top of invoke."""

from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from gitpublisher.core.log import logger

# Exit code reported for a command that was killed on timeout
TIMED_OUT = -1


class Runner(Context):
    """invoke.Context with a single execute() entry point.

    All git invocations go through execute() so that timeouts,
    working directory and environment handling live in one place.
    """

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Run a shell command and capture its output.

        Args:
            command: Command string to execute
            cwd: Working directory for the command
            timeout: Maximum execution time in seconds
            check: If True, raise on non-zero exit code
            env: Extra environment variables (merged over os.environ)

        Returns:
            invoke.Result with stdout, stderr and exited. A command
            killed on timeout is reported with exited == TIMED_OUT.

        Raises:
            invoke.UnexpectedExit: If check=True and command
                returns non-zero
        """
        kwargs = {
            "hide": True,
            "warn": not check,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if env:
            kwargs["env"] = env

        logger.spew("Executing command", command=command, cwd=str(cwd))
        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(command, **kwargs)
            else:
                result = self.run(command, **kwargs)
        except CommandTimedOut as e:
            logger.warn(
                "Command timed out",
                command=command,
                timeout=e.timeout,
            )
            result = e.result
            result.exited = TIMED_OUT

        logger.spew(
            "Command finished",
            command=command,
            exited=result.exited,
        )
        return result
