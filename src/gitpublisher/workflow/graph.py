"""Graph workflow definition."""

from pydantic_graph import Graph

from gitpublisher.core.log import logger
from gitpublisher.core.result import PublishResult
from gitpublisher.workflow.nodes import (
    CleanupStaleTag,
    CommitChanges,
    PushChanges,
    ReconcileRevision,
    TagBuild,
)
from gitpublisher.workflow.state import PublishState


def create_workflow() -> Graph:
    """Create the publish workflow graph.

    CleanupStaleTag → [End(NoAction) or CommitChanges] → TagBuild →
        ReconcileRevision → PushChanges → End(Published)
    """
    logger.debug("Building publish workflow graph")

    return Graph(
        nodes=(
            CleanupStaleTag,
            CommitChanges,
            TagBuild,
            ReconcileRevision,
            PushChanges,
        ),
        name="publish",
        state_type=PublishState,
        run_end_type=PublishResult,
    )
