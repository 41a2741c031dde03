"""SQL table project store.

Stores each project as a row of the ``projects`` table (see
``db.tables.ProjectRow``).  Ids are assigned by the database; ids supplied
by callers are ignored.  Listing is ordered by ascending id.

``replace_all`` deletes every row and inserts the new set inside one
transaction, so a failure part-way leaves the previous collection in place.

Any ``SQLAlchemyError`` (connection refused, missing table, ...) surfaces as
``StorageUnavailableError``.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portfolio.backend.db.tables import ProjectRow
from portfolio.backend.errors import InvalidProjectError, ProjectNotFoundError, StorageUnavailableError
from portfolio.backend.models.project import Project, ProjectCreate, ProjectUpdate
from portfolio.backend.store.base import check_title

# Range of the integer primary key; larger ids cannot name a row.
_MAX_ID = 2**63 - 1


class TableProjectStore:
    """SQLAlchemy implementation of the ProjectStore protocol."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -- Read ------------------------------------------------------------------

    async def list_all(self) -> list[Project]:
        with _storage_errors("load"):
            async with self._session_factory() as db:
                result = await db.execute(select(ProjectRow).order_by(ProjectRow.id))
                return [_to_project(row) for row in result.scalars()]

    # -- Write -----------------------------------------------------------------

    async def replace_all(self, projects: list[ProjectCreate]) -> list[Project]:
        for project in projects:
            check_title(project.title)

        rows = [ProjectRow(**project.model_dump(exclude={"id"})) for project in projects]
        with _storage_errors("replace"):
            async with self._session_factory() as db, db.begin():
                await db.execute(delete(ProjectRow))
                db.add_all(rows)

        logger.info("Replaced project table ({} rows)", len(rows))
        return sorted((_to_project(row) for row in rows), key=lambda p: p.id)

    async def insert(self, project: ProjectCreate) -> Project:
        check_title(project.title)
        row = ProjectRow(**project.model_dump(exclude={"id"}))
        with _storage_errors("insert"):
            async with self._session_factory() as db:
                db.add(row)
                await db.commit()
        return _to_project(row)

    async def update(self, project_id: int, changes: ProjectUpdate) -> Project:
        data = changes.model_dump(exclude_unset=True)
        if "title" in data:
            check_title(data["title"])

        with _storage_errors("update"):
            async with self._session_factory() as db:
                row = await _get_row(db, project_id)
                if row is None:
                    raise ProjectNotFoundError(project_id)

                try:
                    merged = Project.model_validate({**_to_project(row).model_dump(), **data})
                except ValidationError as e:
                    raise InvalidProjectError(str(e)) from e

                for key in data:
                    setattr(row, key, getattr(merged, key))
                await db.commit()
        return merged

    async def delete(self, project_id: int) -> Project:
        with _storage_errors("delete"):
            async with self._session_factory() as db:
                row = await _get_row(db, project_id)
                if row is None:
                    raise ProjectNotFoundError(project_id)
                removed = _to_project(row)
                await db.delete(row)
                await db.commit()
        return removed


async def _get_row(db: AsyncSession, project_id: int) -> ProjectRow | None:
    if not -_MAX_ID <= project_id <= _MAX_ID:
        return None
    return await db.get(ProjectRow, project_id)


def _to_project(row: ProjectRow) -> Project:
    return Project.model_validate({name: getattr(row, name) for name in Project.model_fields})


@contextlib.contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        msg = f"Failed to {action} projects: {e}"
        raise StorageUnavailableError(msg) from e
