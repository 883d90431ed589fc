"""Tag node - create the annotated build tag."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitpublisher.core.result import PublishResult
from gitpublisher.workflow.nodes.reconcile import ReconcileRevision
from gitpublisher.workflow.state import PublishDeps, PublishState


@dataclass
class TagBuild(BaseNode[PublishState, PublishDeps, PublishResult]):
    """Tag HEAD with '<project>-<number>'."""

    async def run(
        self, ctx: GraphRunContext[PublishState, PublishDeps]
    ) -> ReconcileRevision:
        ctx.deps.git.create_annotated_tag(
            ctx.state.build_tag, ctx.state.message()
        )
        return ReconcileRevision()
