"""File-backed project store.

Keeps the whole collection in a single JSON document::

    {data_root}/{prefix}/projects.json

    {"projects": [{"id": 1, "title": "...", ...}, ...]}

Every call reads the whole file; mutations rewrite the whole file.  Uses
``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: data is written to a temporary file in the same directory,
then renamed over the target path.  The rename is the commit point of every
mutation, so a failed write leaves the previous document intact.

A missing file reads as an empty collection and is created on first write.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from functools import partial
from pathlib import Path

from anyio import to_thread
from loguru import logger
from pydantic import ValidationError

from portfolio.backend.errors import InvalidProjectError, ProjectNotFoundError, StorageUnavailableError
from portfolio.backend.models.project import Project, ProjectCreate, ProjectList, ProjectUpdate
from portfolio.backend.store.base import check_title


class FileProjectStore:
    """JSON file implementation of the ProjectStore protocol.

    Records keep their file order.  New ids are ``max(existing ids) + 1``
    (1 for an empty collection).
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # -- Read ------------------------------------------------------------------

    async def list_all(self) -> list[Project]:
        return await self._load()

    # -- Write -----------------------------------------------------------------

    async def replace_all(self, projects: list[ProjectCreate]) -> list[Project]:
        explicit_ids = [p.id for p in projects if p.id is not None]
        duplicates = sorted({i for i in explicit_ids if explicit_ids.count(i) > 1})
        if duplicates:
            msg = f"Duplicate project ids: {', '.join(map(str, duplicates))}"
            raise InvalidProjectError(msg)

        next_id = max(explicit_ids, default=0) + 1
        stored: list[Project] = []
        for project in projects:
            check_title(project.title)
            project_id = project.id
            if project_id is None:
                project_id = next_id
                next_id += 1
            stored.append(_build(project.model_dump(exclude={"id"}), project_id))

        await self._save(stored)
        logger.info("Replaced project collection ({} projects)", len(stored))
        return stored

    async def insert(self, project: ProjectCreate) -> Project:
        check_title(project.title)
        projects = await self._load()

        if project.id is None:
            project_id = max((p.id for p in projects), default=0) + 1
        elif any(p.id == project.id for p in projects):
            msg = f"Project id {project.id} already exists"
            raise InvalidProjectError(msg)
        else:
            project_id = project.id

        created = _build(project.model_dump(exclude={"id"}), project_id)
        projects.append(created)
        await self._save(projects)
        return created

    async def update(self, project_id: int, changes: ProjectUpdate) -> Project:
        data = changes.model_dump(exclude_unset=True)
        if "title" in data:
            check_title(data["title"])

        projects = await self._load()
        index = _index_of(projects, project_id)
        merged = _build({**projects[index].model_dump(exclude={"id"}), **data}, project_id)
        projects[index] = merged
        await self._save(projects)
        return merged

    async def delete(self, project_id: int) -> Project:
        projects = await self._load()
        index = _index_of(projects, project_id)
        removed = projects.pop(index)
        await self._save(projects)
        return removed

    # -- Internals -------------------------------------------------------------

    async def _load(self) -> list[Project]:
        try:
            raw = await to_thread.run_sync(partial(_read_file, self._path))
        except FileNotFoundError:
            logger.debug("Projects file {} does not exist yet -- empty collection", self._path)
            return []
        except OSError as e:
            msg = f"Cannot read projects file {self._path}: {e}"
            raise StorageUnavailableError(msg) from e

        try:
            return ProjectList.model_validate_json(raw).projects
        except (ValidationError, UnicodeDecodeError) as e:
            msg = f"Projects file {self._path} is corrupt"
            raise StorageUnavailableError(msg) from e

    async def _save(self, projects: list[Project]) -> None:
        data = ProjectList(projects=projects).model_dump_json(indent=2, by_alias=True, exclude_none=True)
        try:
            await to_thread.run_sync(partial(_atomic_write, self._path, data + "\n"))
        except OSError as e:
            msg = f"Cannot write projects file {self._path}: {e}"
            raise StorageUnavailableError(msg) from e


def _build(fields: dict, project_id: int) -> Project:
    """Validate merged field values into a stored record."""
    try:
        return Project.model_validate({**fields, "id": project_id})
    except ValidationError as e:
        raise InvalidProjectError(str(e)) from e


def _index_of(projects: list[Project], project_id: int) -> int:
    for index, project in enumerate(projects):
        if project.id == project_id:
            return index
    raise ProjectNotFoundError(project_id)


# -- Sync helpers (run in thread pool) -----------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    Ensures readers never see a partially-written file.  The temp file is
    created in the same directory so the rename is atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up temp file on any failure.
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> bytes:
    """Read raw file contents.  Raises ``FileNotFoundError`` if missing."""
    return path.read_bytes()
