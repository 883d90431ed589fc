"""Push node - send HEAD and tags to the remote."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitpublisher.core.log import logger
from gitpublisher.core.result import Published, PublishResult
from gitpublisher.workflow.state import PublishDeps, PublishState


@dataclass
class PushChanges(BaseNode[PublishState, PublishDeps, PublishResult]):
    """Push HEAD to the remote branch, then push all tags."""

    async def run(
        self, ctx: GraphRunContext[PublishState, PublishDeps]
    ) -> End[PublishResult]:
        """Push the branch and the tags.

        The two pushes are separate and not transactional: if the tag
        push fails, the branch update has already happened and stays.

        Returns:
            End[PublishResult]: Published with the reconciled record
        """
        state = ctx.state
        git = ctx.deps.git

        git.push_ref(state.remote.uri, state.refspec)
        git.push_tags(state.remote.uri)

        logger.info(
            "Pushed build",
            tag=state.build_tag,
            remote=state.remote.uri,
            refspec=state.refspec,
        )
        return End(Published(
            build_tag=state.build_tag,
            refspec=state.refspec,
            commit=state.commit,
            revision=state.revision,
            record=state.record,
        ))
