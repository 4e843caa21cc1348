"""Table and collection schema tests."""

import pytest

from pydataapi._errors import InvalidArgumentError, InvalidSchemaError
from pydataapi.query.sort import SortOrder
from pydataapi.schema import (
    AnalyzerType,
    CollectionDefinition,
    ColumnDefinition,
    ColumnType,
    DefaultIdType,
    SimilarityMetric,
    TableDefinition,
)


@pytest.fixture
def game_table():
    return (
        TableDefinition()
        .add_column_text("match_id")
        .add_column_int("round")
        .add_column_set("fighters", ColumnType.UUID)
        .add_column_map("scores", ColumnType.TEXT, ColumnType.INT)
        .add_vector_column("m_vector", 3, metric=SimilarityMetric.DOT_PRODUCT)
        .partition_by("match_id")
        .partition_sort("round", SortOrder.DESCENDING)
    )


class TestColumnDefinition:
    def test_simple(self):
        assert ColumnDefinition(ColumnType.TEXT).to_dict() == {"type": "text"}

    def test_list_requires_value_type(self):
        with pytest.raises(InvalidSchemaError):
            ColumnDefinition(ColumnType.LIST)

    def test_map_requires_key_type(self):
        with pytest.raises(InvalidSchemaError):
            ColumnDefinition(ColumnType.MAP, value_type=ColumnType.INT)

    def test_non_positive_dimension(self):
        with pytest.raises(InvalidSchemaError):
            ColumnDefinition(ColumnType.VECTOR, dimension=0)

    def test_from_dict(self):
        col = ColumnDefinition.from_dict({"type": "list", "valueType": "text"})
        assert col == ColumnDefinition(ColumnType.LIST, value_type=ColumnType.TEXT)

    def test_from_dict_unknown_type(self):
        with pytest.raises(InvalidSchemaError):
            ColumnDefinition.from_dict({"type": "nope"})

    def test_from_dict_short_form(self):
        assert ColumnDefinition.from_dict("text") == ColumnDefinition(ColumnType.TEXT)

    @pytest.mark.parametrize("data", [42, None, "nope"])
    def test_from_dict_malformed(self, data):
        with pytest.raises(InvalidSchemaError):
            ColumnDefinition.from_dict(data)


class TestTableDefinition:
    def test_to_dict(self, game_table):
        assert game_table.to_dict() == {
            "columns": {
                "match_id": {"type": "text"},
                "round": {"type": "int"},
                "fighters": {"type": "set", "valueType": "uuid"},
                "scores": {"type": "map", "keyType": "text", "valueType": "int"},
                "m_vector": {"type": "vector", "dimension": 3, "metric": "dot_product"},
            },
            "primaryKey": {"partitionBy": ["match_id"], "partitionSort": {"round": -1}},
        }

    def test_find_column(self, game_table):
        assert game_table.find_column("round") == ColumnDefinition(ColumnType.INT)
        assert game_table.find_column("missing") is None
        assert len(game_table) == 5

    def test_unknown_partition_column(self):
        with pytest.raises(InvalidSchemaError):
            TableDefinition().add_column_text("a").partition_by("b")

    def test_unknown_sort_column(self):
        with pytest.raises(InvalidSchemaError):
            TableDefinition().add_column_text("a").partition_sort("b")

    def test_missing_primary_key(self):
        with pytest.raises(InvalidSchemaError):
            TableDefinition().add_column_text("a").to_dict()

    def test_empty_column_name(self):
        with pytest.raises(InvalidArgumentError):
            TableDefinition().add_column("", ColumnType.TEXT)

    def test_from_dict_round_trip(self, game_table):
        data = game_table.to_dict()
        assert TableDefinition.from_dict(data).to_dict() == data

    def test_from_dict_short_primary_key(self):
        table = TableDefinition.from_dict(
            {"columns": {"id": {"type": "uuid"}}, "primaryKey": "id"}
        )
        assert table.to_dict()["primaryKey"] == {"partitionBy": ["id"]}

    def test_from_dict_short_column_types(self):
        table = TableDefinition.from_dict(
            {"columns": {"id": "uuid", "name": "text"}, "primaryKey": "id"}
        )
        assert table.to_dict()["columns"] == {"id": {"type": "uuid"}, "name": {"type": "text"}}


class TestCollectionDefinition:
    def test_empty(self):
        assert CollectionDefinition().to_dict() == {}

    def test_vector_and_id(self):
        definition = CollectionDefinition(
            dimension=1536,
            metric=SimilarityMetric.COSINE,
            default_id=DefaultIdType.OBJECT_ID,
        )
        assert definition.to_dict() == {
            "vector": {"dimension": 1536, "metric": "cosine"},
            "defaultId": {"type": "objectId"},
        }

    def test_indexing_allow(self):
        definition = CollectionDefinition.indexing(allow=["a", "b"])
        assert definition.to_dict() == {"indexing": {"allow": ["a", "b"]}}

    def test_indexing_deny(self):
        definition = CollectionDefinition.indexing(deny=["blob"], dimension=2)
        assert definition.to_dict() == {
            "vector": {"dimension": 2},
            "indexing": {"deny": ["blob"]},
        }

    def test_allow_and_deny_rejected(self):
        with pytest.raises(InvalidSchemaError):
            CollectionDefinition.indexing(allow=["a"], deny=["b"])

    def test_lexical_with_analyzer_type(self):
        definition = CollectionDefinition().with_lexical(AnalyzerType.STANDARD)
        assert definition.to_dict() == {"lexical": {"enabled": True, "analyzer": "standard"}}

    def test_lexical_with_custom_analyzer(self):
        analyzer = {"tokenizer": {"name": "standard"}, "filters": [{"name": "lowercase"}]}
        definition = CollectionDefinition(dimension=3).with_lexical(analyzer)
        assert definition.to_dict() == {
            "vector": {"dimension": 3},
            "lexical": {"enabled": True, "analyzer": analyzer},
        }

    def test_lexical_disabled(self):
        definition = CollectionDefinition().with_lexical("keyword").without_lexical()
        assert definition.to_dict() == {"lexical": {"enabled": False}}

    def test_analyzer_without_lexical_rejected(self):
        with pytest.raises(InvalidSchemaError):
            CollectionDefinition(lexical_enabled=False, lexical_analyzer="standard")

    def test_rerank(self):
        definition = CollectionDefinition().with_rerank("nvidia", "nvidia/llama-3.2-nv-rerankqa-1b-v2")
        assert definition.to_dict() == {
            "rerank": {
                "enabled": True,
                "service": {
                    "provider": "nvidia",
                    "modelName": "nvidia/llama-3.2-nv-rerankqa-1b-v2",
                },
            }
        }

    def test_rerank_disabled(self):
        assert CollectionDefinition().without_rerank().to_dict() == {"rerank": {"enabled": False}}

    def test_rerank_needs_provider_and_model(self):
        with pytest.raises(InvalidSchemaError):
            CollectionDefinition(rerank_enabled=True, rerank_provider="nvidia")

    def test_rerank_empty_provider(self):
        with pytest.raises(InvalidArgumentError):
            CollectionDefinition().with_rerank("", "model")
