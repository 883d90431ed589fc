"""Publish command - run the post-build step against a local workspace."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from gitpublisher.build.console import BuildLog
from gitpublisher.build.host import LocalBuild
from gitpublisher.build.model import BuildResult
from gitpublisher.build.store import FileBuildRecordStore
from gitpublisher.core.log import logger
from gitpublisher.publisher import GitCommitPublisher

if TYPE_CHECKING:
    from gitpublisher.core.config import State


class PublishCommand(BaseModel):
    """Commit the workspace, tag it '<project>-<number>' and push.

    Remotes, branches and the git executable come from the scm
    section of the configuration. Nothing is pushed when the build
    result is worse than publish.threshold.
    """

    model_config = ConfigDict(populate_by_name=True)

    project: str = Field(description="Job name, used in tag names")
    build_number: int = Field(
        alias="build-number",
        description="Build number, used in tag names",
    )
    result: BuildResult = Field(
        default=BuildResult.SUCCESS,
        description="Result of the build being published",
    )
    workspace: Path = Field(
        default_factory=Path.cwd,
        description="Git working copy of the build",
    )

    def run(self, state: State) -> int:
        """Run the step.

        Returns:
            Exit code: 0 unless the step failed
        """
        config = state.config
        build = LocalBuild(
            project_name=self.project,
            number=self.build_number,
            result=self.result,
            workspace=self.workspace.expanduser().resolve(),
            scm=config.scm,
        )
        publisher = GitCommitPublisher(
            FileBuildRecordStore(config.records_dir),
            publish_config=config.publish,
            git_config=config.git,
        )

        outcome = publisher.run(build, BuildLog())
        logger.info(
            "Publish step finished",
            outcome=outcome.value,
            build_result=build.result.value,
        )
        return 1 if outcome.failed else 0
