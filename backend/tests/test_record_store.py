"""
Tests for JsonRecordStore.
Covers the empty/missing document, each mutating call, the on-disk format and
the single-writer guard.
"""
import asyncio
import json

import pytest

from htmlshelf.errors import NotFound, StorageError
from tests.helpers import make_record


@pytest.mark.asyncio
async def test_missing_file_reads_as_empty(store):
    assert not store.path.exists()
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_empty_file_reads_as_empty(store):
    store.path.write_text("  \n", encoding="utf-8")
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_append_persists_pretty_camel_case_json(store):
    await store.append(make_record("r1", tags=["b", "a"]))

    text = store.path.read_text(encoding="utf-8")
    assert text.startswith("[\n  {")
    data = json.loads(text)
    assert data == [{
        "id": "r1",
        "title": "Notes",
        "tags": ["b", "a"],
        "filename": "r1.html",
        "originalName": "notes.html",
        "uploadDate": "2026-10-19T09:30:00.000Z",
        "isFolder": False,
    }]
    # No temporary files left next to the document
    assert [p.name for p in store.path.parent.iterdir()] == ["db.json"]


@pytest.mark.asyncio
async def test_append_keeps_insertion_order(store):
    for rid in ("c", "a", "b"):
        await store.append(make_record(rid))
    assert [r.id for r in await store.list_all()] == ["c", "a", "b"]


@pytest.mark.asyncio
async def test_append_rejects_duplicate_id(store):
    await store.append(make_record("r1"))
    with pytest.raises(StorageError):
        await store.append(make_record("r1", title="Other"))
    assert len(await store.list_all()) == 1


@pytest.mark.asyncio
async def test_replace_updates_matching_record(store):
    await store.append(make_record("r1"))
    await store.append(make_record("r2"))

    await store.replace("r2", make_record("r2", title="Renamed"))

    records = await store.list_all()
    assert [r.title for r in records] == ["Notes", "Renamed"]


@pytest.mark.asyncio
async def test_replace_unknown_id_raises_not_found(store):
    await store.append(make_record("r1"))
    with pytest.raises(NotFound):
        await store.replace("missing", make_record("missing"))


@pytest.mark.asyncio
async def test_remove(store):
    await store.append(make_record("r1"))
    await store.append(make_record("r2"))

    await store.remove("r1")

    assert [r.id for r in await store.list_all()] == ["r2"]
    with pytest.raises(NotFound):
        await store.remove("r1")


@pytest.mark.asyncio
async def test_corrupt_document_raises_storage_error(store):
    store.path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        await store.list_all()


@pytest.mark.asyncio
async def test_legacy_record_without_is_folder(store):
    store.path.write_text(json.dumps([{
        "id": "old",
        "title": "Old",
        "tags": [],
        "filename": "old.html",
        "originalName": "old.html",
        "uploadDate": "2025-01-01T00:00:00.000Z",
    }]), encoding="utf-8")

    [record] = await store.list_all()
    assert record.is_folder is False
    assert record.original_name == "old.html"


@pytest.mark.asyncio
async def test_concurrent_appends_are_not_lost(store):
    await asyncio.gather(*(store.append(make_record(f"r{i}")) for i in range(20)))

    ids = {r.id for r in await store.list_all()}
    assert ids == {f"r{i}" for i in range(20)}


@pytest.mark.asyncio
async def test_concurrent_removes_of_same_id(store):
    await store.append(make_record("r1"))

    results = await asyncio.gather(store.remove("r1"), store.remove("r1"), return_exceptions=True)

    assert results.count(None) == 1
    assert sum(isinstance(r, NotFound) for r in results) == 1
    assert await store.list_all() == []


@pytest.mark.asyncio
async def test_update_merges_changes_into_stored_record(store):
    await store.append(make_record("r1", title="T0", tags=["a"]))

    updated = await store.update("r1", {"title": "New"})

    assert updated.title == "New"
    assert updated.tags == ["a"]
    assert await store.list_all() == [updated]
    with pytest.raises(NotFound):
        await store.update("missing", {"title": "x"})


@pytest.mark.asyncio
async def test_concurrent_updates_of_different_fields_are_kept(store):
    await store.append(make_record("r1", title="T0", tags=["a"]))

    await asyncio.gather(store.update("r1", {"title": "New"}), store.update("r1", {"tags": ["z"]}))

    [record] = await store.list_all()
    assert record.title == "New"
    assert record.tags == ["z"]
