"""Tests for the publish workflow with a mocked git adapter."""

from unittest.mock import Mock, call

import pytest

from gitpublisher.build.model import (
    BuildIdentity,
    BuildRecord,
    BuildResult,
    RemoteTarget,
)
from gitpublisher.core.config import PublishConfig
from gitpublisher.core.errors import VcsOperationError
from gitpublisher.core.result import (
    Committed,
    NoAction,
    NothingToCommit,
    Published,
    RevisionChanged,
    RevisionUnchanged,
)
from gitpublisher.git.repository import GitRepository
from gitpublisher.workflow import publish

URI = "git@example.com:team/myproj.git"
OLD = "1111111111111111111111111111111111111111"
NEW = "2222222222222222222222222222222222222222"


@pytest.fixture
def identity():
    return BuildIdentity(project_name="myproj", number=42)


@pytest.fixture
def remote():
    return RemoteTarget(name="origin", uri=URI, branch="master")


@pytest.fixture
def record():
    return BuildRecord(project_name="myproj", number=42, last_revision=OLD)


@pytest.fixture
def git():
    adapter = Mock(spec=GitRepository)
    adapter.has_pending_changes.return_value = True
    adapter.list_recent_revisions.return_value = [NEW]
    return adapter


def run(identity, result, remote, record, git, build_log, **settings):
    return publish(
        identity, result, remote, record, git, build_log,
        PublishConfig(**settings),
    )


def test_success_with_changes_commits_tags_and_pushes(
    identity, remote, record, git, build_log, build_output
):
    outcome = run(
        identity, BuildResult.SUCCESS, remote, record, git, build_log
    )

    assert git.method_calls == [
        call.delete_tag("hudson-myproj-42"),
        call.stage_all(),
        call.has_pending_changes(),
        call.commit("Build: myproj-42"),
        call.create_annotated_tag("myproj-42", "Build: myproj-42"),
        call.list_recent_revisions(1, "HEAD"),
        call.push_ref(URI, "HEAD:master"),
        call.push_tags(URI),
    ]
    assert isinstance(outcome, Published)
    assert outcome.build_tag == "myproj-42"
    assert outcome.refspec == "HEAD:master"
    assert outcome.commit == Committed(message="Build: myproj-42")
    assert outcome.revision == RevisionChanged(previous=OLD, current=NEW)
    assert outcome.record is record
    assert record.last_revision == NEW

    output = build_output.getvalue()
    assert "Build Revision: " + OLD in output
    assert "Post-Commit Revision: " + NEW in output


@pytest.mark.parametrize("result", [
    BuildResult.FAILURE, BuildResult.NOT_BUILT, BuildResult.ABORTED,
])
def test_bad_result_only_deletes_stale_tag(
    identity, remote, record, git, build_log, result
):
    outcome = run(identity, result, remote, record, git, build_log)

    assert git.method_calls == [call.delete_tag("hudson-myproj-42")]
    assert isinstance(outcome, NoAction)
    assert record.last_revision == OLD


def test_unstable_without_changes_tags_and_pushes_without_commit(
    identity, remote, record, git, build_log, build_output
):
    git.has_pending_changes.return_value = False
    git.list_recent_revisions.return_value = [OLD]

    outcome = run(
        identity, BuildResult.UNSTABLE, remote, record, git, build_log
    )

    git.commit.assert_not_called()
    git.create_annotated_tag.assert_called_once_with(
        "myproj-42", "Build: myproj-42"
    )
    git.push_ref.assert_called_once_with(URI, "HEAD:master")
    git.push_tags.assert_called_once_with(URI)
    assert outcome.commit == NothingToCommit()
    assert "Nothing to commit. No modifications to working tree" in (
        build_output.getvalue()
    )


def test_wildcard_branch_pushes_to_default(
    identity, record, git, build_log
):
    remote = RemoteTarget(name="origin", uri=URI, branch="**")

    outcome = run(
        identity, BuildResult.SUCCESS, remote, record, git, build_log
    )

    git.push_ref.assert_called_once_with(URI, "HEAD:master")
    assert outcome.refspec == "HEAD:master"


def test_wildcard_uses_configured_default_branch(
    identity, record, git, build_log
):
    remote = RemoteTarget(name="origin", uri=URI, branch="**")

    run(
        identity, BuildResult.SUCCESS, remote, record, git, build_log,
        default_branch="main",
    )

    git.push_ref.assert_called_once_with(URI, "HEAD:main")


def test_tag_push_failure_does_not_undo_ref_push(
    identity, remote, record, git, build_log
):
    git.push_tags.side_effect = VcsOperationError("rejected")

    with pytest.raises(VcsOperationError):
        run(identity, BuildResult.SUCCESS, remote, record, git, build_log)

    git.push_ref.assert_called_once_with(URI, "HEAD:master")
    assert [c[0] for c in git.method_calls][-2:] == ["push_ref", "push_tags"]


def test_error_aborts_remaining_steps(
    identity, remote, record, git, build_log
):
    git.create_annotated_tag.side_effect = VcsOperationError("tag exists")

    with pytest.raises(VcsOperationError, match="tag exists"):
        run(identity, BuildResult.SUCCESS, remote, record, git, build_log)

    git.list_recent_revisions.assert_not_called()
    git.push_ref.assert_not_called()
    git.push_tags.assert_not_called()


def test_stale_tag_failure_aborts_before_result_check(
    identity, remote, record, git, build_log
):
    git.delete_tag.side_effect = VcsOperationError("locked ref")

    with pytest.raises(VcsOperationError):
        run(identity, BuildResult.FAILURE, remote, record, git, build_log)

    assert git.method_calls == [call.delete_tag("hudson-myproj-42")]


class TestReconciliation:

    def test_same_revision_leaves_record(
        self, identity, remote, record, git, build_log, build_output
    ):
        git.list_recent_revisions.return_value = [OLD]

        outcome = run(
            identity, BuildResult.SUCCESS, remote, record, git, build_log
        )

        assert record.last_revision == OLD
        assert outcome.revision == RevisionUnchanged(revision=OLD)
        assert "Post-Commit Revision" not in build_output.getvalue()

    def test_empty_history_leaves_record(
        self, identity, remote, record, git, build_log
    ):
        git.list_recent_revisions.return_value = []

        outcome = run(
            identity, BuildResult.SUCCESS, remote, record, git, build_log
        )

        assert record.last_revision == OLD
        assert outcome.revision == RevisionUnchanged(revision=OLD)
        git.push_ref.assert_called_once()

    def test_comparison_is_by_value(
        self, identity, remote, record, git, build_log
    ):
        git.list_recent_revisions.return_value = ["".join(list(OLD))]

        outcome = run(
            identity, BuildResult.SUCCESS, remote, record, git, build_log
        )

        assert isinstance(outcome.revision, RevisionUnchanged)

    def test_record_without_revision_is_filled(
        self, identity, remote, git, build_log
    ):
        record = BuildRecord(project_name="myproj", number=42)

        outcome = run(
            identity, BuildResult.SUCCESS, remote, record, git, build_log
        )

        assert record.last_revision == NEW
        assert outcome.revision == RevisionChanged(previous=None, current=NEW)


def test_custom_marker_prefix_and_threshold(
    identity, remote, record, git, build_log
):
    outcome = run(
        identity, BuildResult.UNSTABLE, remote, record, git, build_log,
        marker_prefix="ci", threshold=BuildResult.SUCCESS,
    )

    assert git.method_calls == [call.delete_tag("ci-myproj-42")]
    assert isinstance(outcome, NoAction)
