"""Record command - show the stored record of a build."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from gitpublisher.build.model import BuildIdentity
from gitpublisher.build.store import FileBuildRecordStore
from gitpublisher.core.errors import RecordNotFoundError
from gitpublisher.core.log import logger

if TYPE_CHECKING:
    from gitpublisher.core.config import State


class RecordCommand(BaseModel):
    """Print the stored record of a build as JSON."""

    model_config = ConfigDict(populate_by_name=True)

    project: str = Field(description="Job name")
    build_number: int = Field(alias="build-number", description="Build number")

    def run(self, state: State) -> int:
        store = FileBuildRecordStore(state.config.records_dir)
        identity = BuildIdentity(
            project_name=self.project, number=self.build_number
        )
        try:
            record = store.get(identity)
        except RecordNotFoundError as e:
            logger.error(str(e), records_dir=str(store.root))
            return 1
        print(record.model_dump_json(indent=2))
        return 0
