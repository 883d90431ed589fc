"""Post-build step that commits, tags and pushes the workspace."""

from __future__ import annotations

from typing import NamedTuple

from gitpublisher.build.console import BuildLog
from gitpublisher.build.host import GIT_SCM, Build
from gitpublisher.build.model import BuildIdentity, BuildResult
from gitpublisher.build.store import BuildRecordStore
from gitpublisher.core.config import GitConfig, PublishConfig
from gitpublisher.core.errors import VcsOperationError
from gitpublisher.core.log import logger
from gitpublisher.core.result import Published, StepOutcome
from gitpublisher.git.repository import GitRepository
from gitpublisher.workflow import publish


class PublisherDescriptor(NamedTuple):
    """Registration data for the step; carries no behaviour."""

    display_name: str
    run_after_finalized: bool
    applicable_to_all_jobs: bool


DESCRIPTOR = PublisherDescriptor(
    display_name=(
        "Commit project workspace updates and push code and tags "
        "to first remote"
    ),
    run_after_finalized=True,
    applicable_to_all_jobs=True,
)


class GitCommitPublisher:
    """Commit workspace changes, tag the build and push both.

    Runs after the build result is final. Its own failures are logged,
    turn the build result into FAILURE, and are never raised to the
    host.
    """

    descriptor = DESCRIPTOR

    def __init__(
        self,
        records: BuildRecordStore,
        publish_config: PublishConfig | None = None,
        git_config: GitConfig | None = None,
    ):
        self.records = records
        self.publish_config = publish_config or PublishConfig()
        self.git_config = git_config or GitConfig()

    def perform(self, build: Build, log: BuildLog) -> bool:
        """Run the step; True if the build was committed and pushed."""
        return self.run(build, log) is StepOutcome.PUBLISHED

    def run(self, build: Build, log: BuildLog) -> StepOutcome:
        """Run the step and report how it ended."""
        if build.scm.kind != GIT_SCM:
            logger.debug(
                "Not a git job, skipping publish",
                project=build.project_name,
                scm=build.scm.kind,
            )
            return StepOutcome.DID_NOT_RUN

        environment = self._resolve_environment(build, log)

        try:
            identity = BuildIdentity(
                project_name=build.project_name, number=build.number
            )
            record = self.records.get_or_create(identity)
            git = GitRepository(
                build.scm.git_exe,
                build.workspace,
                log,
                env=environment,
                timeout=self.git_config.timeout,
            )
            result = publish(
                identity,
                build.result,
                build.scm.first_target(),
                record,
                git,
                log,
                self.publish_config,
            )

            if not isinstance(result, Published):
                return StepOutcome.NO_ACTION

            # Another collaborator may have rewritten the record while
            # the step ran; only its revision is replaced
            current = self.records.get(identity)
            self.records.set_last_revision(
                current, result.record.last_revision
            )
            return StepOutcome.PUBLISHED

        except VcsOperationError as e:
            return self._fail(build, log, "Git Exception", e)
        except OSError as e:
            return self._fail(build, log, "IO Exception", e)
        except Exception as e:
            return self._fail(build, log, "Exception", e)

    def _resolve_environment(
        self, build: Build, log: BuildLog
    ) -> dict[str, str]:
        """Return the build environment, or an empty one if unavailable."""
        try:
            return build.get_environment(log)
        except InterruptedError:
            log.error(
                "Interrupted exception getting environment .. "
                "trying empty environment"
            )
        except OSError as e:
            log.error(
                f"IO exception getting environment: {e} .. "
                "trying empty environment"
            )
        except Exception as e:
            log.error(
                f"Exception getting environment: {e} .. "
                "trying empty environment"
            )
        logger.warn(
            "Falling back to empty build environment",
            project=build.project_name,
        )
        return {}

    def _fail(
        self,
        build: Build,
        log: BuildLog,
        category: str,
        error: Exception,
    ) -> StepOutcome:
        log.exception(f"{category}: {error}", error)
        logger.exception(
            "Publish step failed",
            project=build.project_name,
            build=build.number,
            category=category,
            error=str(error),
        )
        build.result = BuildResult.FAILURE
        return StepOutcome.FAILED
