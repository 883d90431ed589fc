"""Build identity, results, remote targets and build records."""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

# SHA-1 (40) or SHA-256 (64) object name
_REVISION_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")

# Opaque commit identifier, compared by value only
RevisionId = Annotated[str, StringConstraints(pattern=_REVISION_RE.pattern)]


def is_revision_id(text: str) -> bool:
    """Return True if text is a full hexadecimal commit name."""
    return bool(_REVISION_RE.match(text))


class BuildResult(str, Enum):
    """Outcome of a build, ordered from best to worst."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    @property
    def ordinal(self) -> int:
        """Rank of this result; lower is better."""
        return list(BuildResult).index(self)

    def is_better_or_equal(self, other: BuildResult) -> bool:
        return self.ordinal <= other.ordinal

    def is_worse_than(self, other: BuildResult) -> bool:
        return self.ordinal > other.ordinal


class BuildIdentity(BaseModel):
    """Project name and build number supplied by the host."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(min_length=1)
    number: int = Field(ge=0)

    @property
    def build_tag(self) -> str:
        """Tag created for this build, e.g. 'myproj-42'."""
        return f"{self.project_name}-{self.number}"

    def marker_tag(self, prefix: str) -> str:
        """Tag left behind by the checkout step, e.g. 'hudson-myproj-42'."""
        return f"{prefix}-{self.build_tag}"

    def __str__(self) -> str:
        return self.build_tag


class RemoteTarget(BaseModel):
    """Remote repository and branch that results are pushed to."""

    model_config = ConfigDict(frozen=True)

    name: str
    uri: str
    branch: str

    def resolve_branch(self, wildcard: str, default: str) -> str:
        """Return the branch to push to.

        A wildcard branch spec matches any branch, which cannot be
        pushed to; it is replaced with the default branch.
        """
        if self.branch == wildcard:
            return default
        return self.branch


class BuildRecord(BaseModel):
    """Per-build data kept by the host.

    Only last_revision is written here. Fields stored by other
    collaborators are carried through untouched.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    project_name: str
    number: int
    last_revision: RevisionId | None = Field(
        default=None,
        description="Commit the build system associates with this build",
    )

    @property
    def identity(self) -> BuildIdentity:
        return BuildIdentity(
            project_name=self.project_name, number=self.number
        )


__all__ = [
    "BuildIdentity",
    "BuildRecord",
    "BuildResult",
    "RemoteTarget",
    "RevisionId",
    "is_revision_id",
]
