"""Tests for chunked reads, clears and writes."""

import pytest

from erp_backup.backup.accessor import CollectionAccessor
from erp_backup.backup.journal import ChunkLog
from erp_backup.backup.models import RestoreMode
from erp_backup.backup.writer import BatchWriter
from erp_backup.exceptions import StoreUnavailable, WriteFailure
from tests.utils import make_docs


def as_documents(docs):
    return [{"_docId": doc_id, **fields} for doc_id, fields in docs.items()]


@pytest.mark.asyncio
async def test_read_all_stamps_doc_ids(store):
    store.seed("products", {"p1": {"name": "Bolt"}, "p2": {"name": "Nut"}})
    accessor = CollectionAccessor(store)

    documents = await accessor.read_all("products")

    assert sorted(documents, key=lambda d: d["_docId"]) == [
        {"_docId": "p1", "name": "Bolt"},
        {"_docId": "p2", "name": "Nut"},
    ]


@pytest.mark.asyncio
async def test_read_all_empty_collection(store):
    assert await CollectionAccessor(store).read_all("products") == []


@pytest.mark.asyncio
async def test_read_all_unavailable(store):
    store.unavailable = True

    with pytest.raises(StoreUnavailable):
        await CollectionAccessor(store).read_all("products")


@pytest.mark.asyncio
async def test_clear_uses_one_commit_per_chunk(store):
    store.seed("products", make_docs(21))
    accessor = CollectionAccessor(store)

    commits = await accessor.clear("products")

    assert commits == 3
    assert store.commit_count("delete", "products") == 3
    assert store.docs("products") == {}
    assert [r.document_count for r in accessor.journal.records] == [10, 10, 1]


@pytest.mark.asyncio
async def test_clear_empty_collection_issues_no_commits(store):
    assert await CollectionAccessor(store).clear("products") == 0
    assert store.commits == []


@pytest.mark.asyncio
async def test_write_uses_one_commit_per_chunk(store):
    writer = BatchWriter(store)

    commits = await writer.write("products", as_documents(make_docs(21)), RestoreMode.MERGE)

    assert commits == 3
    assert store.commit_count("write", "products") == 3
    assert len(store.docs("products")) == 21
    assert writer.journal.last_committed("products") == 2


@pytest.mark.asyncio
async def test_merge_keeps_existing_fields(store):
    store.seed("products", {"p1": {"name": "Bolt", "stock": 5}})

    await BatchWriter(store).write("products", [{"_docId": "p1", "stock": 9}], RestoreMode.MERGE)

    assert store.docs("products")["p1"] == {"name": "Bolt", "stock": 9}


@pytest.mark.asyncio
async def test_replace_overwrites_and_clears_first(store):
    store.seed("products", {"p1": {"name": "Bolt", "stock": 5}, "p2": {"name": "Nut"}})

    await BatchWriter(store).write("products", [{"_docId": "p1", "stock": 9}], RestoreMode.REPLACE)

    assert store.docs("products") == {"p1": {"stock": 9}}
    assert store.commits[0] == ("delete", "products", 2)


@pytest.mark.asyncio
async def test_doc_id_is_not_stored_as_field_and_missing_ids_are_minted(store):
    await BatchWriter(store).write(
        "products", [{"name": "Bolt"}, {"_docId": "", "name": "Nut"}], "merge"
    )

    stored = store.docs("products")
    assert set(stored) == {"gen1", "gen2"}
    assert all("_docId" not in fields for fields in stored.values())


@pytest.mark.asyncio
async def test_failure_mid_collection_keeps_earlier_chunks(store):
    store.fail_writes["products"] = 1
    journal = ChunkLog()
    writer = BatchWriter(store, journal=journal)

    with pytest.raises(WriteFailure) as exc_info:
        await writer.write("products", as_documents(make_docs(25)), RestoreMode.MERGE)

    assert exc_info.value.chunk_index == 1
    # Chunk 0 landed, chunk 1 failed, chunk 2 was never attempted
    assert sorted(store.docs("products")) == sorted(f"d{i}" for i in range(10))
    assert store.commit_count("write", "products") == 1
    assert journal.last_committed("products") == 0
    assert journal.committed_count("products") == 10


@pytest.mark.asyncio
async def test_store_unavailable_is_not_wrapped(store):
    store.unavailable = True

    with pytest.raises(StoreUnavailable):
        await BatchWriter(store).write("products", [{"_docId": "p1"}], RestoreMode.MERGE)


@pytest.mark.asyncio
async def test_accessor_and_writer_share_journal(store):
    store.seed("products", make_docs(3))
    journal = ChunkLog()
    writer = BatchWriter(store, CollectionAccessor(store, journal), journal)

    await writer.write("products", [{"_docId": "x"}], RestoreMode.FULL_RESET)

    assert [(r.operation, r.chunk_index) for r in journal.records] == [("delete", 0), ("write", 0)]
