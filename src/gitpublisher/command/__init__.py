"""CLI command modules for gitpublisher."""

from gitpublisher.command.publish import PublishCommand
from gitpublisher.command.record import RecordCommand

__all__ = ["PublishCommand", "RecordCommand"]
