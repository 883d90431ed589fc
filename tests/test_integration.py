"""End-to-end publish runs against real git repositories."""

import pytest

from conftest import BUILD_NUMBER, PROJECT, configure_identity, git
from gitpublisher.build.host import LocalBuild, RemoteConfig, ScmConfig
from gitpublisher.build.model import BuildIdentity, BuildResult
from gitpublisher.build.store import FileBuildRecordStore
from gitpublisher.core.result import StepOutcome
from gitpublisher.publisher import GitCommitPublisher

IDENTITY = BuildIdentity(project_name=PROJECT, number=BUILD_NUMBER)
BUILD_TAG = f"{PROJECT}-{BUILD_NUMBER}"
MARKER_TAG = f"hudson-{PROJECT}-{BUILD_NUMBER}"


@pytest.fixture
def store(tmp_path):
    return FileBuildRecordStore(tmp_path / "records")


@pytest.fixture
def make_build(workspace, remote_repo):
    def make(result=BuildResult.SUCCESS):
        return LocalBuild(
            project_name=PROJECT,
            number=BUILD_NUMBER,
            result=result,
            workspace=workspace,
            scm=ScmConfig(
                remotes=[RemoteConfig(name="origin", uri=str(remote_repo))]
            ),
        )
    return make


def remote_tags(remote_repo):
    return git(remote_repo, "tag", "--list").split()


def test_changed_workspace_is_committed_tagged_and_pushed(
    workspace, remote_repo, store, make_build, build_log, build_output
):
    (workspace / "version.txt").write_text("1.0.42\n")
    build = make_build()

    outcome = GitCommitPublisher(store).run(build, build_log)

    assert outcome is StepOutcome.PUBLISHED
    head = git(workspace, "rev-parse", "HEAD")
    assert git(remote_repo, "rev-parse", "master") == head
    assert git(workspace, "log", "-1", "--format=%s") == f"Build: {BUILD_TAG}"
    assert git(workspace, "status", "--porcelain") == ""

    assert BUILD_TAG in remote_tags(remote_repo)
    assert git(remote_repo, "cat-file", "-t", BUILD_TAG) == "tag"
    assert git(
        remote_repo, "tag", "--list", "--format=%(contents:subject)",
        BUILD_TAG,
    ) == f"Build: {BUILD_TAG}"
    assert git(remote_repo, "rev-parse", f"{BUILD_TAG}^{{commit}}") == head

    assert store.get(IDENTITY).last_revision == head
    output = build_output.getvalue()
    assert "to origin:master" in output
    assert f"Post-Commit Revision: {head}" in output


def test_clean_unstable_build_is_tagged_without_commit(
    workspace, remote_repo, store, make_build, build_log, build_output
):
    head = git(workspace, "rev-parse", "HEAD")
    record = store.get_or_create(IDENTITY)
    store.set_last_revision(record, head)

    outcome = GitCommitPublisher(store).run(
        make_build(BuildResult.UNSTABLE), build_log
    )

    assert outcome is StepOutcome.PUBLISHED
    assert git(workspace, "rev-parse", "HEAD") == head
    assert git(workspace, "rev-list", "--count", "HEAD") == "1"
    assert BUILD_TAG in remote_tags(remote_repo)
    assert store.get(IDENTITY).last_revision == head
    output = build_output.getvalue()
    assert "Nothing to commit. No modifications to working tree" in output
    assert "Post-Commit Revision" not in output


def test_stale_marker_tag_removed(
    workspace, remote_repo, store, make_build, build_log
):
    git(workspace, "tag", MARKER_TAG)

    GitCommitPublisher(store).run(make_build(), build_log)

    assert git(workspace, "tag", "--list", MARKER_TAG) == ""
    assert MARKER_TAG not in remote_tags(remote_repo)
    assert BUILD_TAG in remote_tags(remote_repo)


def test_failed_build_only_removes_marker_tag(
    workspace, remote_repo, store, make_build, build_log
):
    git(workspace, "tag", MARKER_TAG)
    (workspace / "version.txt").write_text("broken\n")
    before = git(remote_repo, "rev-parse", "master")
    build = make_build(BuildResult.FAILURE)

    outcome = GitCommitPublisher(store).run(build, build_log)

    assert outcome is StepOutcome.NO_ACTION
    assert build.result is BuildResult.FAILURE
    assert git(workspace, "tag", "--list") == ""
    assert git(remote_repo, "rev-parse", "master") == before
    assert remote_tags(remote_repo) == []
    assert "version.txt" in git(workspace, "status", "--porcelain")


def test_rejected_push_fails_build(
    tmp_path, workspace, remote_repo, store, make_build, build_log,
    build_output,
):
    other = tmp_path / "other"
    git(tmp_path, "clone", str(remote_repo), str(other))
    configure_identity(other)
    (other / "README.md").write_text("changed elsewhere\n")
    git(other, "commit", "-am", "Concurrent change")
    git(other, "push", "origin", "master")
    upstream = git(remote_repo, "rev-parse", "master")

    (workspace / "version.txt").write_text("1.0.42\n")
    build = make_build()

    outcome = GitCommitPublisher(store).run(build, build_log)

    assert outcome is StepOutcome.FAILED
    assert build.result is BuildResult.FAILURE
    assert git(remote_repo, "rev-parse", "master") == upstream
    assert BUILD_TAG not in remote_tags(remote_repo)
    assert "ERROR: Git Exception: Command " in build_output.getvalue()
    # The record is only written back after a successful push
    assert store.get(IDENTITY).last_revision is None


def test_second_run_of_same_build_fails_on_existing_tag(
    workspace, store, make_build, build_log, build_output
):
    publisher = GitCommitPublisher(store)
    assert publisher.run(make_build(), build_log) is StepOutcome.PUBLISHED

    build = make_build()
    outcome = publisher.run(build, build_log)

    assert outcome is StepOutcome.FAILED
    assert build.result is BuildResult.FAILURE
    assert "already exists" in build_output.getvalue()


def test_workspace_outside_repository_fails_build(
    tmp_path, store, build_log, build_output
):
    plain = tmp_path / "plain"
    plain.mkdir()
    build = LocalBuild(
        project_name=PROJECT,
        number=BUILD_NUMBER,
        result=BuildResult.FAILURE,
        workspace=plain,
        scm=ScmConfig(
            remotes=[RemoteConfig(name="origin", uri="/srv/git/repo.git")],
            environment={"GIT_CEILING_DIRECTORIES": str(tmp_path)},
        ),
    )

    outcome = GitCommitPublisher(store).run(build, build_log)

    assert outcome is StepOutcome.FAILED
    assert build.result is BuildResult.FAILURE
    assert "ERROR: Git Exception: " in build_output.getvalue()
