"""Commit, tag, reconcile and push workflow."""

from gitpublisher.workflow.engine import publish

__all__ = ["publish"]
