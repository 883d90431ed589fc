"""Workflow nodes, one per phase of a publish run."""

from gitpublisher.workflow.nodes.cleanup import CleanupStaleTag
from gitpublisher.workflow.nodes.commit import CommitChanges
from gitpublisher.workflow.nodes.push import PushChanges
from gitpublisher.workflow.nodes.reconcile import ReconcileRevision
from gitpublisher.workflow.nodes.tag import TagBuild

__all__ = [
    "CleanupStaleTag",
    "CommitChanges",
    "TagBuild",
    "ReconcileRevision",
    "PushChanges",
]
