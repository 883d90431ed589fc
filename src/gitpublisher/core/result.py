"""Result types of the publish workflow."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from gitpublisher.build.model import BuildRecord


class Committed(BaseModel):
    """Staged changes were committed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["committed"] = "committed"
    message: str


class NothingToCommit(BaseModel):
    """The index matched HEAD; HEAD was tagged as-is."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["nothing_to_commit"] = "nothing_to_commit"


class RevisionChanged(BaseModel):
    """HEAD differs from the recorded revision; the record was updated."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["revision_changed"] = "revision_changed"
    previous: str | None
    current: str


class RevisionUnchanged(BaseModel):
    """HEAD matches the recorded revision, or could not be listed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["revision_unchanged"] = "revision_unchanged"
    revision: str | None


CommitOutcome = Committed | NothingToCommit
RevisionOutcome = RevisionChanged | RevisionUnchanged


class PublishResult(BaseModel):
    """Base of the values a publish workflow ends with."""


class NoAction(PublishResult):
    """The build result was below the threshold; nothing was pushed."""

    kind: Literal["no_action"] = "no_action"
    reason: str


class Published(PublishResult):
    """The build was tagged and pushed."""

    kind: Literal["published"] = "published"
    build_tag: str
    refspec: str
    commit: CommitOutcome
    revision: RevisionOutcome
    record: BuildRecord


class StepOutcome(str, Enum):
    """How a post-build step invocation ended."""

    PUBLISHED = "published"
    NO_ACTION = "no_action"
    DID_NOT_RUN = "did_not_run"
    FAILED = "failed"

    @property
    def failed(self) -> bool:
        return self is StepOutcome.FAILED
