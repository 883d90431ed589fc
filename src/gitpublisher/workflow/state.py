"""State and dependencies threaded through the publish workflow."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field

from gitpublisher.build.console import BuildLog
from gitpublisher.build.model import (
    BuildIdentity,
    BuildRecord,
    BuildResult,
    RemoteTarget,
)
from gitpublisher.core.base import BaseState
from gitpublisher.core.config import PublishConfig
from gitpublisher.core.result import CommitOutcome, RevisionOutcome
from gitpublisher.git.repository import GitRepository


class PublishState(BaseState):
    """Inputs of one publish run plus what each step decided."""

    identity: BuildIdentity
    result: BuildResult
    remote: RemoteTarget
    record: BuildRecord = Field(
        description="Reference record; its revision is updated in place"
    )
    settings: PublishConfig = Field(default_factory=PublishConfig)

    build_tag: str | None = None
    refspec: str | None = None
    commit: CommitOutcome | None = None
    revision: RevisionOutcome | None = None

    def message(self) -> str:
        """Commit and tag message for this build."""
        return f"{self.settings.message_prefix}{self.identity.build_tag}"


@dataclass
class PublishDeps:
    """Collaborators the workflow nodes act through."""

    git: GitRepository
    log: BuildLog
