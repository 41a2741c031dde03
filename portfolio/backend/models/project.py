"""Project record models.

The persisted JSON document and the HTTP API both use camelCase keys
(``githubUrl``, ``liveUrl``, ``completedDate``); Python code uses the
snake_case attribute names.  Either spelling is accepted on input.

Only ``title`` carries meaning for the backend -- every other attribute is
opaque descriptive data for the frontend.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ProjectCreate(_CamelModel):
    """Input for inserting a project.  ``id`` is assigned by the store if omitted."""

    id: int | None = None
    title: str
    description: str = ""
    category: str | None = None
    technologies: list[str] = Field(default_factory=list)
    image: str | None = None
    github_url: str | None = None
    live_url: str | None = None
    completed_date: str | None = None
    featured: bool = False


class ProjectUpdate(_CamelModel):
    """Partial update -- only fields explicitly set by the caller are applied.

    ``id`` is deliberately absent: a stray ``id`` key in the body is ignored.
    """

    title: str | None = None
    description: str | None = None
    category: str | None = None
    technologies: list[str] | None = None
    image: str | None = None
    github_url: str | None = None
    live_url: str | None = None
    completed_date: str | None = None
    featured: bool | None = None


class Project(ProjectCreate):
    """A stored project record."""

    model_config = ConfigDict(from_attributes=True)

    id: int


class ProjectList(_CamelModel):
    """The ``{"projects": [...]}`` document shape."""

    projects: list[Project] = Field(default_factory=list)
