"""Schema types for Data API tables and collections."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from pydataapi._errors import ERR_MSG_SCHEMA_VALIDATION_FAILED, InvalidSchemaError
from pydataapi._utils import validate_has_length
from pydataapi.query.sort import SortOrder


class ColumnType(enum.StrEnum):
    ASCII = "ascii"
    BIGINT = "bigint"
    BLOB = "blob"
    BOOLEAN = "boolean"
    COUNTER = "counter"
    DATE = "date"
    DECIMAL = "decimal"
    DOUBLE = "double"
    DURATION = "duration"
    FLOAT = "float"
    INET = "inet"
    INT = "int"
    LIST = "list"
    MAP = "map"
    SET = "set"
    SMALLINT = "smallint"
    TEXT = "text"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TIMEUUID = "timeuuid"
    TINYINT = "tinyint"
    UUID = "uuid"
    VARINT = "varint"
    VECTOR = "vector"
    USER_DEFINED = "userDefined"


class SimilarityMetric(enum.StrEnum):
    COSINE = "cosine"
    DOT_PRODUCT = "dot_product"
    EUCLIDEAN = "euclidean"


class DefaultIdType(enum.StrEnum):
    UUID = "uuid"
    UUIDV6 = "uuidv6"
    UUIDV7 = "uuidv7"
    OBJECT_ID = "objectId"


class AnalyzerType(enum.StrEnum):
    """Built-in lexical analyzers."""

    STANDARD = "standard"
    LETTER = "letter"
    LOWERCASE = "lowercase"
    WHITESPACE = "whitespace"
    N_GRAM = "n-gram"
    EDGE_N_GRAM = "edge_n-gram"
    KEYWORD = "keyword"
    SIMPLE = "simple"
    STOP = "stop"
    CLASSIC = "classic"
    PATTERN = "pattern"
    WIKIPEDIA = "wikipedia"


_COLLECTION_TYPES = {ColumnType.LIST, ColumnType.SET, ColumnType.MAP}


@dataclass(frozen=True)
class ColumnDefinition:
    """Schema for a single table column."""

    type: ColumnType
    value_type: ColumnType | None = None
    key_type: ColumnType | None = None
    dimension: int | None = None
    metric: SimilarityMetric | None = None
    service: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.type in _COLLECTION_TYPES and self.value_type is None:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                f"{self.type} column requires a value type",
            )
        if self.type == ColumnType.MAP and self.key_type is None:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                "map column requires a key type",
            )
        if self.dimension is not None and self.dimension <= 0:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                f"vector dimension must be positive, got {self.dimension}",
            )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": str(self.type)}
        if self.key_type is not None:
            result["keyType"] = str(self.key_type)
        if self.value_type is not None:
            result["valueType"] = str(self.value_type)
        if self.dimension is not None:
            result["dimension"] = self.dimension
        if self.metric is not None:
            result["metric"] = str(self.metric)
        if self.service is not None:
            result["service"] = dict(self.service)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | str) -> ColumnDefinition:
        # short form: a bare type name
        if isinstance(data, str):
            data = {"type": data}
        try:
            return cls(
                type=ColumnType(data["type"]),
                value_type=ColumnType(data["valueType"]) if "valueType" in data else None,
                key_type=ColumnType(data["keyType"]) if "keyType" in data else None,
                dimension=data.get("dimension"),
                metric=SimilarityMetric(data["metric"]) if "metric" in data else None,
                service=data.get("service"),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                f"invalid column definition {data!r}",
                wrapped=e,
            ) from e


class TableDefinition:
    """Table columns and primary key with O(1) column lookup."""

    def __init__(self) -> None:
        self._columns: dict[str, ColumnDefinition] = {}
        self._partition_by: list[str] = []
        self._partition_sort: dict[str, SortOrder] = {}

    @property
    def columns(self) -> dict[str, ColumnDefinition]:
        return dict(self._columns)

    def find_column(self, name: str) -> ColumnDefinition | None:
        return self._columns.get(name)

    def __len__(self) -> int:
        return len(self._columns)

    def add_column(self, name: str, column: ColumnDefinition | ColumnType) -> TableDefinition:
        validate_has_length(name, "column name")
        if isinstance(column, ColumnType):
            column = ColumnDefinition(column)
        self._columns[name] = column
        return self

    def add_column_text(self, name: str) -> TableDefinition:
        return self.add_column(name, ColumnType.TEXT)

    def add_column_int(self, name: str) -> TableDefinition:
        return self.add_column(name, ColumnType.INT)

    def add_column_boolean(self, name: str) -> TableDefinition:
        return self.add_column(name, ColumnType.BOOLEAN)

    def add_column_timestamp(self, name: str) -> TableDefinition:
        return self.add_column(name, ColumnType.TIMESTAMP)

    def add_column_list(self, name: str, value_type: ColumnType) -> TableDefinition:
        return self.add_column(name, ColumnDefinition(ColumnType.LIST, value_type=value_type))

    def add_column_set(self, name: str, value_type: ColumnType) -> TableDefinition:
        return self.add_column(name, ColumnDefinition(ColumnType.SET, value_type=value_type))

    def add_column_map(
        self, name: str, key_type: ColumnType, value_type: ColumnType
    ) -> TableDefinition:
        return self.add_column(
            name, ColumnDefinition(ColumnType.MAP, value_type=value_type, key_type=key_type)
        )

    def add_vector_column(
        self,
        name: str,
        dimension: int,
        metric: SimilarityMetric | None = None,
        service: Mapping[str, Any] | None = None,
    ) -> TableDefinition:
        return self.add_column(
            name,
            ColumnDefinition(
                ColumnType.VECTOR, dimension=dimension, metric=metric, service=service
            ),
        )

    def _require_column(self, name: str) -> None:
        if name not in self._columns:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                f"primary key column '{name}' is not a column of the table",
            )

    def partition_by(self, *names: str) -> TableDefinition:
        for name in names:
            self._require_column(name)
        self._partition_by.extend(names)
        return self

    def partition_sort(self, name: str, order: SortOrder = SortOrder.ASCENDING) -> TableDefinition:
        self._require_column(name)
        self._partition_sort[name] = SortOrder(order)
        return self

    def to_dict(self) -> dict[str, Any]:
        if not self._partition_by:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                "table primary key needs at least one partition column",
            )
        primary_key: dict[str, Any] = {"partitionBy": list(self._partition_by)}
        if self._partition_sort:
            primary_key["partitionSort"] = {k: int(v) for k, v in self._partition_sort.items()}
        return {
            "columns": {name: col.to_dict() for name, col in self._columns.items()},
            "primaryKey": primary_key,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TableDefinition:
        table = cls()
        for name, column in data.get("columns", {}).items():
            table.add_column(name, ColumnDefinition.from_dict(column))
        primary_key = data.get("primaryKey", {})
        # the short form is a single partition column name
        if isinstance(primary_key, str):
            primary_key = {"partitionBy": [primary_key]}
        table.partition_by(*primary_key.get("partitionBy", []))
        for name, order in primary_key.get("partitionSort", {}).items():
            try:
                table.partition_sort(name, SortOrder(order))
            except ValueError as e:
                raise InvalidSchemaError(
                    ERR_MSG_SCHEMA_VALIDATION_FAILED,
                    f"invalid partition sort {order!r} for '{name}'",
                    wrapped=e,
                ) from e
        return table


@dataclass(frozen=True)
class CollectionDefinition:
    """Options of a schemaless collection.

    ``lexical_analyzer`` is a built-in analyzer name or a custom analyzer
    object (``tokenizer``, ``filters``, ``charFilters``). Rerank options
    name the reranking service through ``rerank_provider`` and
    ``rerank_model``.
    """

    dimension: int | None = None
    metric: SimilarityMetric | None = None
    service: Mapping[str, Any] | None = None
    default_id: DefaultIdType | None = None
    indexing_allow: tuple[str, ...] | None = None
    indexing_deny: tuple[str, ...] | None = None
    lexical_enabled: bool | None = None
    lexical_analyzer: AnalyzerType | str | Mapping[str, Any] | None = None
    rerank_enabled: bool | None = None
    rerank_provider: str | None = None
    rerank_model: str | None = None

    def __post_init__(self) -> None:
        if self.indexing_allow is not None and self.indexing_deny is not None:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                "indexing accepts either allow or deny, not both",
            )
        if self.dimension is not None and self.dimension <= 0:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                f"vector dimension must be positive, got {self.dimension}",
            )
        if self.lexical_enabled is False and self.lexical_analyzer is not None:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                "a lexical analyzer needs lexical search enabled",
            )
        if (self.rerank_provider is None) != (self.rerank_model is None):
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                "rerank service needs both a provider and a model",
            )
        if self.rerank_enabled is False and self.rerank_provider is not None:
            raise InvalidSchemaError(
                ERR_MSG_SCHEMA_VALIDATION_FAILED,
                "a rerank service needs reranking enabled",
            )

    @classmethod
    def indexing(
        cls,
        allow: Iterable[str] | None = None,
        deny: Iterable[str] | None = None,
        **kwargs: Any,
    ) -> CollectionDefinition:
        return cls(
            indexing_allow=tuple(allow) if allow is not None else None,
            indexing_deny=tuple(deny) if deny is not None else None,
            **kwargs,
        )

    def with_lexical(
        self, analyzer: AnalyzerType | str | Mapping[str, Any] | None = None
    ) -> CollectionDefinition:
        """Enable lexical search, optionally with an analyzer."""
        return replace(self, lexical_enabled=True, lexical_analyzer=analyzer)

    def without_lexical(self) -> CollectionDefinition:
        return replace(self, lexical_enabled=False, lexical_analyzer=None)

    def with_rerank(self, provider: str, model: str) -> CollectionDefinition:
        validate_has_length(provider, "rerank provider")
        validate_has_length(model, "rerank model")
        return replace(self, rerank_enabled=True, rerank_provider=provider, rerank_model=model)

    def without_rerank(self) -> CollectionDefinition:
        return replace(self, rerank_enabled=False, rerank_provider=None, rerank_model=None)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        vector: dict[str, Any] = {}
        if self.dimension is not None:
            vector["dimension"] = self.dimension
        if self.metric is not None:
            vector["metric"] = str(self.metric)
        if self.service is not None:
            vector["service"] = dict(self.service)
        if vector:
            result["vector"] = vector
        if self.default_id is not None:
            result["defaultId"] = {"type": str(self.default_id)}
        if self.indexing_allow is not None:
            result["indexing"] = {"allow": list(self.indexing_allow)}
        elif self.indexing_deny is not None:
            result["indexing"] = {"deny": list(self.indexing_deny)}
        if self.lexical_enabled is not None:
            lexical: dict[str, Any] = {"enabled": self.lexical_enabled}
            if isinstance(self.lexical_analyzer, Mapping):
                lexical["analyzer"] = dict(self.lexical_analyzer)
            elif self.lexical_analyzer is not None:
                lexical["analyzer"] = str(self.lexical_analyzer)
            result["lexical"] = lexical
        if self.rerank_enabled is not None:
            rerank: dict[str, Any] = {"enabled": self.rerank_enabled}
            if self.rerank_provider is not None:
                rerank["service"] = {
                    "provider": self.rerank_provider,
                    "modelName": self.rerank_model,
                }
            result["rerank"] = rerank
        return result
