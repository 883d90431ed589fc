"""Persistence of per-build records."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from gitpublisher.build.model import BuildIdentity, BuildRecord
from gitpublisher.core.errors import RecordNotFoundError
from gitpublisher.core.log import logger


class BuildRecordStore(Protocol):
    """Host-owned storage of build records."""

    def get(self, identity: BuildIdentity) -> BuildRecord:
        """Return the stored record or raise RecordNotFoundError."""
        ...

    def get_or_create(self, identity: BuildIdentity) -> BuildRecord:
        """Return the stored record, creating an empty one if absent."""
        ...

    def set_last_revision(
        self, record: BuildRecord, revision: str | None
    ) -> None:
        """Overwrite the record's revision and persist it."""
        ...


class FileBuildRecordStore:
    """One JSON document per build under a records directory.

    Layout: <root>/<project>/<number>.json
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, identity: BuildIdentity) -> Path:
        return self.root / identity.project_name / f"{identity.number}.json"

    def _read(self, path: Path) -> dict:
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _write(self, path: Path, data: dict) -> None:
        """Replace path atomically with data."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp)
            raise

    def get(self, identity: BuildIdentity) -> BuildRecord:
        path = self.path_for(identity)
        if not path.is_file():
            raise RecordNotFoundError(f"No build record for {identity}")
        return BuildRecord.model_validate(self._read(path))

    def get_or_create(self, identity: BuildIdentity) -> BuildRecord:
        try:
            return self.get(identity)
        except RecordNotFoundError:
            record = BuildRecord(
                project_name=identity.project_name,
                number=identity.number,
            )
            self._write(self.path_for(identity), record.model_dump())
            logger.debug("Created build record", build=str(identity))
            return record

    def set_last_revision(
        self, record: BuildRecord, revision: str | None
    ) -> None:
        """Update only the revision of the stored document.

        The document is re-read first so that fields written by other
        collaborators since `record` was loaded are preserved.
        """
        record.last_revision = revision
        path = self.path_for(record.identity)
        data = self._read(path) if path.is_file() else record.model_dump()
        data["last_revision"] = revision
        self._write(path, data)
        logger.debug(
            "Stored build revision",
            build=str(record.identity),
            revision=revision,
        )

