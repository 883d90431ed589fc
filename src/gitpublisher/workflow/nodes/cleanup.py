"""Cleanup node - drop the stale marker tag and gate on the result."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitpublisher.core.log import logger
from gitpublisher.core.result import NoAction, PublishResult
from gitpublisher.workflow.nodes.commit import CommitChanges
from gitpublisher.workflow.state import PublishDeps, PublishState


@dataclass
class CleanupStaleTag(BaseNode[PublishState, PublishDeps, PublishResult]):
    """Delete '<marker>-<project>-<number>' left by the checkout step."""

    async def run(
        self, ctx: GraphRunContext[PublishState, PublishDeps]
    ) -> CommitChanges | End[PublishResult]:
        """Remove the marker tag, then decide whether to publish.

        The marker tag is removed for every build result. Results worse
        than the configured threshold end the run here.

        Returns:
            CommitChanges: If the build result is good enough
            End[PublishResult]: NoAction otherwise
        """
        state = ctx.state
        settings = state.settings

        stale_tag = state.identity.marker_tag(settings.marker_prefix)
        ctx.deps.git.delete_tag(stale_tag)

        if state.result.is_worse_than(settings.threshold):
            logger.info(
                "Build result below threshold, not publishing",
                result=state.result.value,
                threshold=settings.threshold.value,
            )
            return End(NoAction(
                reason=(
                    f"build result {state.result.value} is worse than "
                    f"{settings.threshold.value}"
                )
            ))

        return CommitChanges()
