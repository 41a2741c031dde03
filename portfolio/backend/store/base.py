"""Project store interface.

The store owns the project collection: a flat list of records keyed by an
integer ``id``.  Two backends implement it -- a JSON file
(``FileProjectStore``) and a SQL table (``TableProjectStore``).  The backend
is chosen once at startup and injected into the routers; request code never
knows which one it talks to.

Both backends share one contract:

- ``update`` / ``delete`` raise ``ProjectNotFoundError`` for unknown ids.
- ``insert`` / ``update`` raise ``InvalidProjectError`` for a blank title.
- Read or write failures of the backing store surface as
  ``StorageUnavailableError``.

There is no locking across requests.  Two concurrent writers may interleave
their read-modify-write cycles and lose an update; admin writes are expected
to come from a single session.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from portfolio.backend.errors import InvalidProjectError
from portfolio.backend.models.project import Project, ProjectCreate, ProjectUpdate


@runtime_checkable
class ProjectStore(Protocol):
    """Async protocol for reading and mutating the project collection."""

    async def list_all(self) -> list[Project]:
        """Return every project."""
        ...

    async def replace_all(self, projects: list[ProjectCreate]) -> list[Project]:
        """Discard the collection and store *projects*.  Returns the stored set."""
        ...

    async def insert(self, project: ProjectCreate) -> Project:
        """Store one project, assigning an id if needed."""
        ...

    async def update(self, project_id: int, changes: ProjectUpdate) -> Project:
        """Merge the explicitly set fields of *changes* into a project."""
        ...

    async def delete(self, project_id: int) -> Project:
        """Remove a project and return it."""
        ...


def check_title(title: str | None) -> None:
    """Raise ``InvalidProjectError`` unless *title* has visible content."""
    if title is None or not title.strip():
        msg = "Title is required"
        raise InvalidProjectError(msg)
