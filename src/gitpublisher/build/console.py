"""Append-only build console log."""

from __future__ import annotations

import sys
import traceback
from typing import TextIO

from gitpublisher.core.log import logger


class BuildLog:
    """Line-oriented, human-readable output of a build step.

    Lines go to a text stream (the build console) and are mirrored to
    the diagnostic logger at debug level.
    """

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdout

    def println(self, line: str = "") -> None:
        for part in line.splitlines() or [""]:
            self.stream.write(part + "\n")
            logger.debug("{line}", line=part)
        self.stream.flush()

    def error(self, message: str) -> BuildLog:
        """Write an ERROR line; returns self for chaining detail."""
        self.println(f"ERROR: {message}")
        return self

    def exception(self, message: str, exc: BaseException) -> None:
        """Write an ERROR line followed by the exception's traceback."""
        self.error(message)
        self.println("".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ).rstrip("\n"))
