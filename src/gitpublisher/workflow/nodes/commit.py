"""Commit node - stage the workspace and commit if anything changed."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitpublisher.core.log import logger
from gitpublisher.core.result import Committed, NothingToCommit, PublishResult
from gitpublisher.workflow.nodes.tag import TagBuild
from gitpublisher.workflow.state import PublishDeps, PublishState


@dataclass
class CommitChanges(BaseNode[PublishState, PublishDeps, PublishResult]):
    """Stage all changes and commit them when the index differs."""

    async def run(
        self, ctx: GraphRunContext[PublishState, PublishDeps]
    ) -> TagBuild:
        """Resolve tag and push target, then stage and commit.

        Returns:
            TagBuild: Next node, whether or not a commit was made
        """
        state = ctx.state
        git = ctx.deps.git
        log = ctx.deps.log
        settings = state.settings

        state.build_tag = state.identity.build_tag
        branch = state.remote.resolve_branch(
            settings.wildcard_branch, settings.default_branch
        )
        state.refspec = f"HEAD:{branch}"

        log.println(
            "Committing changes, tagging and pushing result of build "
            f"number {state.build_tag} to {state.remote.name}:{branch}"
        )

        git.stage_all()

        if git.has_pending_changes():
            message = state.message()
            git.commit(message)
            state.commit = Committed(message=message)
            logger.info("Committed workspace changes", tag=state.build_tag)
        else:
            log.println("Nothing to commit. No modifications to working tree")
            state.commit = NothingToCommit()

        return TagBuild()
