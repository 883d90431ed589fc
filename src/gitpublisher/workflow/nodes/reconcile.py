"""Reconcile node - align the build record with HEAD."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitpublisher.core.log import logger
from gitpublisher.core.result import (
    PublishResult,
    RevisionChanged,
    RevisionUnchanged,
)
from gitpublisher.workflow.nodes.push import PushChanges
from gitpublisher.workflow.state import PublishDeps, PublishState


@dataclass
class ReconcileRevision(BaseNode[PublishState, PublishDeps, PublishResult]):
    """Point the build record at the commit that is about to be pushed."""

    async def run(
        self, ctx: GraphRunContext[PublishState, PublishDeps]
    ) -> PushChanges:
        """Compare HEAD with the recorded revision and update on change.

        The comparison is against the revision stored before the run
        started, not one read just before pushing. An empty rev-list
        leaves the record alone.
        """
        state = ctx.state
        log = ctx.deps.log
        previous = state.record.last_revision

        revisions = ctx.deps.git.list_recent_revisions(1, "HEAD")
        if revisions and revisions[0] != previous:
            current = revisions[0]
            log.println(f"Build Revision: {previous}")
            log.println(f"Post-Commit Revision: {current}")
            state.record.last_revision = current
            state.revision = RevisionChanged(
                previous=previous, current=current
            )
            logger.debug(
                "Build record revision updated",
                previous=previous,
                current=current,
            )
        else:
            state.revision = RevisionUnchanged(revision=previous)

        return PushChanges()
