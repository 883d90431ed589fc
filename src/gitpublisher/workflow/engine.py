"""Entry point of the publish workflow."""

from __future__ import annotations

from gitpublisher.build.console import BuildLog
from gitpublisher.build.model import (
    BuildIdentity,
    BuildRecord,
    BuildResult,
    RemoteTarget,
)
from gitpublisher.core.config import PublishConfig
from gitpublisher.core.log import logger
from gitpublisher.core.result import PublishResult
from gitpublisher.git.repository import GitRepository
from gitpublisher.workflow.graph import create_workflow
from gitpublisher.workflow.nodes import CleanupStaleTag
from gitpublisher.workflow.state import PublishDeps, PublishState


def publish(
    identity: BuildIdentity,
    result: BuildResult,
    remote: RemoteTarget,
    record: BuildRecord,
    git: GitRepository,
    log: BuildLog,
    settings: PublishConfig | None = None,
) -> PublishResult:
    """Commit, tag and push a build, reconciling its record.

    Runs synchronously in the caller's thread. `record` is updated in
    place when HEAD differs from its revision. Any exception from git
    aborts the remaining steps; refs already pushed are not rolled
    back.

    Args:
        identity: Project name and build number
        result: Result of the build being published
        remote: Remote repository and configured branch
        record: Build record captured before the run
        git: Adapter bound to the build's working copy
        log: Build log for human-readable progress
        settings: Publish settings, defaults if None

    Returns:
        NoAction if the build result was below the threshold,
        Published otherwise

    Raises:
        VcsOperationError: If a git command fails
    """
    state = PublishState(
        identity=identity,
        result=result,
        remote=remote,
        record=record,
        settings=settings or PublishConfig(),
    )
    with logger.span("Publishing build", build=str(identity)):
        run = create_workflow().run_sync(
            CleanupStaleTag(),
            state=state,
            deps=PublishDeps(git=git, log=log),
        )
    return run.output
