"""Command payload and chunked insert tests."""

import threading
from unittest.mock import MagicMock

import pytest

from pydataapi._errors import InsertManyError, InvalidArgumentError
from pydataapi.commands import Command, insert_many
from pydataapi.document import Document
from pydataapi.query.filters import eq
from pydataapi.query.projection import include
from pydataapi.query.sort import Sort
from pydataapi.query.update import Update
from pydataapi.serdes import DataAPISerializer


class TestCommand:
    def test_find_one(self):
        cmd = (
            Command("findOne")
            .with_filter(eq("_id", 1))
            .with_projection(include("name"))
            .with_sort([Sort.ascending("name")])
        )
        assert cmd.to_dict() == {
            "findOne": {
                "filter": {"_id": {"$eq": 1}},
                "projection": {"name": True},
                "sort": {"name": 1},
            }
        }

    def test_update_one(self):
        cmd = Command("updateOne").with_filter({"a": 1}).with_update(Update().set("b", 2))
        assert cmd.to_dict() == {
            "updateOne": {"filter": {"a": 1}, "update": {"$set": {"b": 2}}}
        }

    def test_none_values_skipped(self):
        cmd = (
            Command("find")
            .with_filter(None)
            .with_projection(None)
            .with_sort(None)
            .with_documents(None)
            .append("x", None)
        )
        assert cmd.to_dict() == {"find": {}}

    def test_options_merge(self):
        cmd = Command("find").with_options(limit=10, skip=None).with_options(includeSimilarity=True)
        assert cmd.to_dict() == {"find": {"options": {"limit": 10, "includeSimilarity": True}}}

    def test_documents_and_replacement(self):
        cmd = Command("insertMany").with_documents(({"a": 1},)).with_document({"b": 2})
        cmd.with_replacement({"c": 3})
        assert cmd.to_dict()["insertMany"] == {
            "documents": [{"a": 1}],
            "document": {"b": 2},
            "replacement": {"c": 3},
        }

    def test_empty_name(self):
        with pytest.raises(InvalidArgumentError):
            Command("")

    def test_marshall_document_with_literal_dot_and_ampersand_keys(self):
        doc = Document.parse('{"a.b": 1, "R&D": true}')
        text = DataAPISerializer().marshall(Command("insertOne").with_document(doc).to_dict())
        assert text == '{"insertOne":{"document":{"a.b":1,"R&D":true}}}'


class TestInsertMany:
    def test_chunks_in_order(self):
        insert_chunk = MagicMock(side_effect=lambda chunk: [d["i"] for d in chunk])
        docs = [{"i": i} for i in range(5)]
        results = insert_many(docs, insert_chunk, chunk_size=2)
        assert results == [[0, 1], [2, 3], [4]]
        assert insert_chunk.call_count == 3

    def test_default_chunk_size(self):
        insert_chunk = MagicMock(side_effect=len)
        assert insert_many([{}] * 120, insert_chunk) == [50, 50, 20]

    def test_concurrent_results_keep_chunk_order(self):
        lock = threading.Lock()
        seen = []

        def insert_chunk(chunk):
            with lock:
                seen.append(chunk[0])
            return chunk[0]

        results = insert_many(list(range(40)), insert_chunk, chunk_size=4, concurrency=4)
        assert results == list(range(0, 40, 4))
        assert sorted(seen) == results

    def test_empty(self):
        insert_chunk = MagicMock()
        assert insert_many([], insert_chunk) == []
        insert_chunk.assert_not_called()

    def test_ordered_concurrent_rejected(self):
        with pytest.raises(InvalidArgumentError):
            insert_many([{}], MagicMock(), ordered=True, concurrency=2)

    @pytest.mark.parametrize("chunk_size", [0, 101])
    def test_chunk_size_bounds(self, chunk_size):
        with pytest.raises(InvalidArgumentError):
            insert_many([{}], MagicMock(), chunk_size=chunk_size)

    def test_concurrency_bounds(self):
        with pytest.raises(InvalidArgumentError):
            insert_many([{}], MagicMock(), concurrency=0)

    def test_failure_keeps_partial_results(self):
        cause = RuntimeError("boom")

        def insert_chunk(chunk):
            if chunk[0] == 2:
                raise cause
            return chunk[0]

        with pytest.raises(InsertManyError) as exc_info:
            insert_many([0, 1, 2, 3, 4], insert_chunk, chunk_size=2, ordered=True)
        err = exc_info.value
        assert err.wrapped is cause
        assert err.__cause__ is cause
        assert err.results == [0, None, None]

    def test_failure_concurrent(self):
        def insert_chunk(chunk):
            if chunk[0] == 0:
                raise ValueError("first chunk fails")
            return chunk[0]

        with pytest.raises(InsertManyError) as exc_info:
            insert_many(list(range(4)), insert_chunk, chunk_size=1, concurrency=2)
        assert exc_info.value.results == [None, 1, 2, 3]
