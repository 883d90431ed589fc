#!/usr/bin/env python3
"""gitpublisher CLI - commit, tag and push build results."""

import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from gitpublisher.command.publish import PublishCommand
from gitpublisher.command.record import RecordCommand
from gitpublisher.core.config import State
from gitpublisher.core.log import logger


class CliState(State):
    """Commit a build's workspace, tag it and push to the first remote.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.git.timeout 60)
    2. gitpublisher.yaml in the current directory, then the user
       config directory, then the package defaults
    3. .env file
    4. Environment variables (GITPUBLISHER_CONFIG__GIT__TIMEOUT=60)

    The [JSON] options set several values at once:
      --config.scm '{"remotes": [{"name": "origin",
      "uri": "git@example.com:repo.git"}]}'
    """

    publish: CliSubCommand[PublishCommand]
    record: CliSubCommand[RecordCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Closing the logger flushes file and OTLP sinks
        with logger:
            raise SystemExit(subcommand.run(self))


def main():
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
