"""
Chunk Store Unit Tests
Tests for core/storage/memory.py and the SealedChunk storage layout.
"""
from datetime import datetime, timezone

import pytest

from core.schemas.chunks import SealedChunk, TamperedState
from core.schemas.errors import ChunkNotFoundError, DocumentNotFoundError
from core.storage import InMemoryChunkStore, JsonChunkStore
from fixtures.common import make_sealed_records


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryChunkStore()
    return JsonChunkStore(tmp_path / "store.json")


class TestChunkStore:
    """Behavior shared by every store."""

    def test_save_and_get(self, any_store):
        document, chunks = make_sealed_records()
        any_store.save_document(document)
        any_store.save_chunks(chunks)
        assert any_store.get_document(document.document_id) == document
        assert any_store.get_chunk(chunks[2].id) == chunks[2]

    def test_list_chunks_ordered_by_index(self, any_store):
        document, chunks = make_sealed_records()
        any_store.save_document(document)
        any_store.save_chunks(list(reversed(chunks)))
        listed = any_store.list_chunks(document.document_id)
        assert [c.index for c in listed] == list(range(len(chunks)))

    def test_unknown_ids(self, any_store):
        with pytest.raises(DocumentNotFoundError):
            any_store.get_document("nope")
        with pytest.raises(ChunkNotFoundError):
            any_store.get_chunk("nope")
        with pytest.raises(DocumentNotFoundError):
            any_store.list_chunks("nope")

    def test_update_unknown_chunk_raises(self, any_store):
        _, chunks = make_sealed_records()
        with pytest.raises(ChunkNotFoundError):
            any_store.update_chunk(chunks[0])

    def test_update_replaces_record(self, any_store):
        document, chunks = make_sealed_records()
        any_store.save_document(document)
        any_store.save_chunks(chunks)
        edited = chunks[0].model_copy(update={"content": "edited"})
        any_store.update_chunk(edited)
        assert any_store.get_chunk(chunks[0].id).content == "edited"

    def test_replace_chunks_drops_earlier_set(self, any_store):
        document, chunks = make_sealed_records()
        any_store.save_document(document)
        any_store.save_chunks(chunks)
        other_document, other_chunks = make_sealed_records(document_id="doc-other")
        any_store.save_document(other_document)
        any_store.save_chunks(other_chunks)

        any_store.replace_chunks(document.document_id, chunks[:2])

        assert [c.id for c in any_store.list_chunks(document.document_id)] == [c.id for c in chunks[:2]]
        with pytest.raises(ChunkNotFoundError):
            any_store.get_chunk(chunks[2].id)
        assert len(any_store.list_chunks("doc-other")) == len(other_chunks)

    def test_replace_chunks_rejects_foreign_chunks(self, any_store):
        document, _ = make_sealed_records()
        _, other_chunks = make_sealed_records(document_id="doc-other")
        any_store.save_document(document)
        with pytest.raises(ValueError):
            any_store.replace_chunks(document.document_id, other_chunks)

    def test_list_documents(self, any_store):
        first, _ = make_sealed_records(document_id="doc-a")
        second, _ = make_sealed_records(texts=["x"], document_id="doc-b")
        any_store.save_document(first)
        any_store.save_document(second)
        assert {d.document_id for d in any_store.list_documents()} == {"doc-a", "doc-b"}


class TestJsonChunkStore:
    """Persistence-specific tests."""

    def test_reload_preserves_records_and_tamper_state(self, tmp_path):
        path = tmp_path / "store.json"
        document, chunks = make_sealed_records()
        store = JsonChunkStore(path)
        store.save_document(document)
        store.save_chunks(chunks)

        tampered_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        tampered = chunks[1].model_copy(update={
            "content": "changed",
            "state": TamperedState(original_content=chunks[1].content, tampered_at=tampered_at),
        })
        store.update_chunk(tampered)

        reloaded = JsonChunkStore(path)
        assert reloaded.get_document(document.document_id).merkle_root == document.merkle_root
        chunk = reloaded.get_chunk(chunks[1].id)
        assert chunk.is_tampered
        assert chunk.original_content == chunks[1].content
        assert chunk.tampered_at == tampered_at
        assert chunk.inclusion_proof == chunks[1].inclusion_proof


class TestStorageRecord:
    """Tests for the flattened chunk storage layout."""

    def test_original_chunk_layout(self):
        _, chunks = make_sealed_records()
        record = chunks[0].to_storage_record()
        assert record["documentId"] == chunks[0].document_id
        assert record["contentDigestHex"] == chunks[0].content_digest
        assert record["inclusionProof"] == chunks[0].inclusion_proof
        assert record["metadataMarkers"] == {}

    def test_tampered_chunk_markers(self):
        _, chunks = make_sealed_records()
        tampered = chunks[0].model_copy(update={
            "state": TamperedState(
                original_content="orig",
                tampered_at=datetime.fromtimestamp(1_700_000_000, tz=timezone.utc),
            ),
        })
        markers = tampered.to_storage_record()["metadataMarkers"]
        assert markers == {"originalContent": "orig", "tamperedAtTimestamp": 1_700_000_000}

    def test_from_storage_record_inverse(self):
        _, chunks = make_sealed_records()
        assert SealedChunk.from_storage_record(chunks[3].to_storage_record()) == chunks[3]

    def test_malformed_digest_rejected(self):
        _, chunks = make_sealed_records()
        record = chunks[0].to_storage_record()
        record["contentDigestHex"] = "abc"
        with pytest.raises(ValueError):
            SealedChunk.from_storage_record(record)
