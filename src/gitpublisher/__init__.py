"""Commit, tag and push build results to a git remote."""

__version__ = "0.1.0"
