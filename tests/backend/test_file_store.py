"""Unit tests for FileProjectStore.

No database required -- uses a temporary directory.
"""

from __future__ import annotations

import json

import pytest

from portfolio.backend.errors import InvalidProjectError, ProjectNotFoundError, StorageUnavailableError
from portfolio.backend.models.project import ProjectCreate, ProjectUpdate
from portfolio.backend.store.base import ProjectStore
from portfolio.backend.store.local import FileProjectStore


def _project(title: str, **kwargs: object) -> ProjectCreate:
    return ProjectCreate(title=title, **kwargs)


def test_implements_protocol(file_store: FileProjectStore) -> None:
    assert isinstance(file_store, ProjectStore)


async def test_missing_file_is_empty(file_store: FileProjectStore) -> None:
    assert await file_store.list_all() == []
    assert not file_store.path.exists()


async def test_insert_assigns_sequential_ids(file_store: FileProjectStore) -> None:
    first = await file_store.insert(_project("Alpha"))
    second = await file_store.insert(_project("Beta"))

    assert first.id == 1
    assert second.id == 2
    assert [p.title for p in await file_store.list_all()] == ["Alpha", "Beta"]


async def test_insert_then_list_contains_record(file_store: FileProjectStore) -> None:
    created = await file_store.insert(
        _project(
            "Ray tracer",
            description="Toy renderer",
            technologies=["Rust", "WGSL"],
            github_url="https://github.com/me/rt",
            featured=True,
        )
    )

    matches = [p for p in await file_store.list_all() if p.id == created.id]
    assert len(matches) == 1
    stored = matches[0]
    assert stored.title == "Ray tracer"
    assert stored.description == "Toy renderer"
    assert stored.technologies == ["Rust", "WGSL"]
    assert stored.github_url == "https://github.com/me/rt"
    assert stored.featured is True


async def test_insert_keeps_explicit_id(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("Seven", id=7))
    nxt = await file_store.insert(_project("Next"))
    assert nxt.id == 8


async def test_insert_duplicate_explicit_id(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("One", id=1))
    with pytest.raises(InvalidProjectError):
        await file_store.insert(_project("Again", id=1))
    assert len(await file_store.list_all()) == 1


@pytest.mark.parametrize("title", ["", "   "])
async def test_insert_blank_title(file_store: FileProjectStore, title: str) -> None:
    with pytest.raises(InvalidProjectError, match="Title is required"):
        await file_store.insert(_project(title))
    assert not file_store.path.exists()


async def test_update_changes_only_supplied_fields(file_store: FileProjectStore) -> None:
    created = await file_store.insert(_project("Site", description="old", category="web", technologies=["HTML"]))

    updated = await file_store.update(created.id, ProjectUpdate(description="new"))

    assert updated.description == "new"
    assert updated.model_dump(exclude={"description"}) == created.model_dump(exclude={"description"})
    [stored] = await file_store.list_all()
    assert stored == updated


async def test_update_ignores_id_in_body(file_store: FileProjectStore) -> None:
    created = await file_store.insert(_project("Site"))
    changes = ProjectUpdate.model_validate({"id": 99, "title": "Renamed"})

    updated = await file_store.update(created.id, changes)

    assert updated.id == created.id
    assert updated.title == "Renamed"


async def test_update_not_found(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("Only"))
    with pytest.raises(ProjectNotFoundError):
        await file_store.update(999, ProjectUpdate(description="x"))


async def test_update_blank_title(file_store: FileProjectStore) -> None:
    created = await file_store.insert(_project("Keep"))
    with pytest.raises(InvalidProjectError):
        await file_store.update(created.id, ProjectUpdate(title=" "))
    [stored] = await file_store.list_all()
    assert stored.title == "Keep"


async def test_update_null_for_list_field_is_invalid(file_store: FileProjectStore) -> None:
    created = await file_store.insert(_project("Keep", technologies=["Go"]))
    with pytest.raises(InvalidProjectError):
        await file_store.update(created.id, ProjectUpdate(technologies=None))


async def test_delete_twice(file_store: FileProjectStore) -> None:
    created = await file_store.insert(_project("Doomed"))

    removed = await file_store.delete(created.id)
    assert removed == created
    assert await file_store.list_all() == []

    with pytest.raises(ProjectNotFoundError):
        await file_store.delete(created.id)


async def test_replace_all(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("Old"))

    stored = await file_store.replace_all([_project("A", id=5), _project("B"), _project("C")])

    assert [(p.id, p.title) for p in stored] == [(5, "A"), (6, "B"), (7, "C")]
    assert await file_store.list_all() == stored


async def test_replace_all_empty(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("Old"))
    assert await file_store.replace_all([]) == []
    assert await file_store.list_all() == []


async def test_replace_all_duplicate_ids_leaves_file_untouched(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("Keep"))
    before = file_store.path.read_text(encoding="utf-8")

    with pytest.raises(InvalidProjectError, match="Duplicate"):
        await file_store.replace_all([_project("A", id=2), _project("B", id=2)])

    assert file_store.path.read_text(encoding="utf-8") == before


async def test_document_layout_uses_camel_case(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("Site", github_url="https://g", live_url="https://l", completed_date="2024-05"))

    doc = json.loads(file_store.path.read_text(encoding="utf-8"))
    [entry] = doc["projects"]
    assert entry["githubUrl"] == "https://g"
    assert entry["liveUrl"] == "https://l"
    assert entry["completedDate"] == "2024-05"
    assert "github_url" not in entry


async def test_reads_hand_written_document(file_store: FileProjectStore) -> None:
    file_store.path.write_text(
        json.dumps({"projects": [{"id": 3, "title": "Legacy", "githubUrl": "https://g", "extra": "ignored"}]}),
        encoding="utf-8",
    )

    [project] = await file_store.list_all()
    assert project.id == 3
    assert project.github_url == "https://g"


@pytest.mark.parametrize(
    "content",
    [b"not json", b'{"projects": "nope"}', b'{"projects": [{"title": "no id"}]}', b"\xff\xfe garbage"],
)
async def test_corrupt_file(file_store: FileProjectStore, content: bytes) -> None:
    file_store.path.write_bytes(content)
    with pytest.raises(StorageUnavailableError):
        await file_store.list_all()


async def test_write_leaves_no_temp_files(file_store: FileProjectStore) -> None:
    await file_store.insert(_project("A"))
    await file_store.insert(_project("B"))
    assert sorted(p.name for p in file_store.path.parent.iterdir()) == ["projects.json"]


async def test_creates_parent_directories(tmp_path) -> None:
    store = FileProjectStore(tmp_path / "nested" / "data" / "projects.json")
    await store.insert(_project("A"))
    assert store.path.exists()
