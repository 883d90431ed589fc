"""Interfaces of the build host that the publisher relies on.

The host owns the job lifecycle: it provisions the workspace, decides
the build result and resolves the build environment. The publisher
only reads these through the Build protocol, and writes one thing
back: a FAILURE result when its own step fails.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field

from gitpublisher.build.console import BuildLog
from gitpublisher.build.model import BuildIdentity, BuildResult, RemoteTarget
from gitpublisher.core.base import BaseConfig

GIT_SCM = "git"


class RemoteConfig(BaseModel):
    """A named remote repository."""

    name: str = Field(description="Remote alias, e.g. 'origin'")
    uri: str = Field(description="URL or path of the remote repository")


class BranchSpec(BaseModel):
    """A branch the job builds; '**' means any branch."""

    name: str


class ScmConfig(BaseConfig):
    """Version control settings of a job."""

    kind: str = Field(
        default=GIT_SCM,
        description="Version control system of the job; only git is handled",
    )
    git_exe: str = Field(
        default="git",
        description="Path or name of the git executable",
    )
    remotes: list[RemoteConfig] = Field(
        default_factory=list,
        description="Configured remotes; only the first one is used",
    )
    branches: list[BranchSpec] = Field(
        default_factory=lambda: [BranchSpec(name="**")],
        description="Configured branches; only the first one is used",
    )
    environment: dict[str, str] = Field(
        default_factory=dict,
        description="Extra variables added to the build environment",
    )

    def first_target(self) -> RemoteTarget:
        """Return the first remote paired with the first branch.

        Raises:
            ValueError: If no remote or no branch is configured
        """
        if not self.remotes:
            raise ValueError("No remote repository configured")
        if not self.branches:
            raise ValueError("No branch configured")
        remote = self.remotes[0]
        return RemoteTarget(
            name=remote.name,
            uri=remote.uri,
            branch=self.branches[0].name,
        )


class Build(Protocol):
    """A finalized build as seen by a post-build step."""

    project_name: str
    number: int
    result: BuildResult
    workspace: Path
    scm: ScmConfig

    def get_environment(self, log: BuildLog) -> dict[str, str]:
        """Resolve the build's environment variables.

        May raise InterruptedError or OSError.
        """
        ...


class LocalBuild(BaseModel):
    """Build whose workspace is a local directory, used from the CLI."""

    model_config = {"validate_assignment": True}

    project_name: str
    number: int
    result: BuildResult = BuildResult.SUCCESS
    workspace: Path
    scm: ScmConfig = Field(default_factory=ScmConfig)

    @property
    def identity(self) -> BuildIdentity:
        return BuildIdentity(
            project_name=self.project_name, number=self.number
        )

    def get_environment(self, log: BuildLog) -> dict[str, str]:
        """Process environment plus build variables and configured extras."""
        env = dict(os.environ)
        env.update(
            BUILD_NUMBER=str(self.number),
            JOB_NAME=self.project_name,
            WORKSPACE=str(self.workspace),
        )
        env.update(self.scm.environment)
        return env
