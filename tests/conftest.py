"""Shared test fixtures."""

import pytest

from pydataapi.document import Document
from pydataapi.serdes import DataAPISerializer, SerdesOptions


@pytest.fixture
def serializer():
    return DataAPISerializer()


@pytest.fixture
def list_serializer():
    return DataAPISerializer(SerdesOptions(encode_vectors_as_binary=False))


@pytest.fixture
def nested_root():
    return {"a": {"b": [10, 20, 30]}}


@pytest.fixture
def sample_document():
    return Document(
        {
            "_id": 1,
            "name": "alice",
            "address": {"city": "Paris", "zip": "75001"},
            "tags": ["x", "y"],
            "a.b": "literal dot",
            "scores": [{"v": 1}, {"v": 2}],
        }
    )
