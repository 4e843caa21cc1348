"""Schemaless documents and table rows addressed by dotted paths."""

from __future__ import annotations

import uuid
from collections.abc import ItemsView, Iterator, KeysView, Mapping, MutableMapping, ValuesView
from datetime import datetime
from typing import Any, TypeVar

from pydataapi import _constants as kw
from pydataapi._errors import InvalidArgumentError
from pydataapi._navigator import (
    PathLike,
    contains_path,
    find_path,
    get_path,
    put_path,
    remove_path,
)
from pydataapi.serdes import DataAPISerializer, millis_to_datetime
from pydataapi.types import DataAPIVector, ObjectId, as_vector

T = TypeVar("T")

_NUMBER_CONVERTERS: dict[type, Any] = {
    int: int,
    float: float,
}


def _coerce(value: Any, item_type: type | None, path: PathLike) -> Any:
    if value is None or item_type is None or isinstance(value, item_type):
        return value
    converter = _NUMBER_CONVERTERS.get(item_type)
    if converter is not None and isinstance(value, (int, float)) and not isinstance(value, bool):
        return converter(value)
    raise TypeError(f"value {value!r} at {path!r} cannot be cast to {item_type.__name__}")


class Document(MutableMapping[str, Any]):
    """An ordered string-keyed record whose keys may be dotted paths.

    ``doc["a.b"]`` reads nested values, ``doc["a.b"] = 1`` creates the
    intermediate ``a`` mapping, ``"a.b" in doc`` tests existence and
    ``del doc["a.b"]`` removes. Literal dots and ampersands in field names
    are written ``&.`` and ``&&``.

    A key stored verbatim at the top level is always reachable under its
    own name, so ``dict(doc)``, ``items()`` and ``values()`` see exactly the
    stored fields even when their names contain ``.`` or ``&``.
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        serializer: DataAPISerializer | None = None,
    ) -> None:
        self._data: dict[str, Any] = dict(data) if data else {}
        self._serializer = serializer

    @classmethod
    def create(cls, id: Any = None, **fields: Any) -> Document:
        doc = cls()
        doc.append_if_not_none(kw.ID, id)
        for k, v in fields.items():
            doc.append(k, v)
        return doc

    @classmethod
    def parse(cls, text: str, serializer: DataAPISerializer | None = None) -> Document:
        serializer = serializer or DataAPISerializer()
        data = serializer.unmarshall(text)
        if not isinstance(data, dict):
            raise InvalidArgumentError(
                "document JSON must be an object",
                f"expected a JSON object, got {type(data).__name__}",
            )
        return cls(data, serializer=serializer)

    # ---- Mapping protocol ----

    def _is_stored(self, key: object) -> bool:
        return isinstance(key, str) and key in self._data

    def __getitem__(self, path: str) -> Any:
        if self._is_stored(path):
            return self._data[path]
        found, value = find_path(self._data, path)
        if not found:
            raise KeyError(path)
        return value

    def __setitem__(self, path: str, value: Any) -> None:
        if self._is_stored(path):
            self._data[path] = value
        else:
            put_path(self._data, path, value)

    def __delitem__(self, path: str) -> None:
        if self._is_stored(path):
            del self._data[path]
            return
        if not contains_path(self._data, path):
            raise KeyError(path)
        remove_path(self._data, path)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str) or not path:
            return False
        return path in self._data or contains_path(self._data, path)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def keys(self) -> KeysView[str]:
        return self._data.keys()

    def items(self) -> ItemsView[str, Any]:
        return self._data.items()

    def values(self) -> ValuesView[Any]:
        return self._data.values()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Document):
            return type(self) is type(other) and self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def __str__(self) -> str:
        return self.to_json()

    # ---- Path operations ----

    def get(self, path: PathLike, default: Any = None) -> Any:
        value = get_path(self._data, path)
        return default if value is None else value

    def append(self, path: PathLike, value: Any) -> Document:
        put_path(self._data, path, value)
        return self

    put = append

    def append_if_not_none(self, path: PathLike, value: Any) -> Document:
        if value is not None:
            self.append(path, value)
        return self

    def remove(self, path: PathLike) -> Document:
        remove_path(self._data, path)
        return self

    def contains_key(self, path: PathLike) -> bool:
        return contains_path(self._data, path)

    def put_all(self, values: Mapping[str, Any]) -> Document:
        for k, v in values.items():
            self.append(k, v)
        return self

    # ---- Typed getters ----

    def get_int(self, path: PathLike) -> int | None:
        return _coerce(self.get(path), int, path)

    def get_float(self, path: PathLike) -> float | None:
        return _coerce(self.get(path), float, path)

    def get_str(self, path: PathLike) -> str | None:
        return _coerce(self.get(path), str, path)

    def get_bool(self, path: PathLike) -> bool | None:
        return _coerce(self.get(path), bool, path)

    def get_list(self, path: PathLike, item_type: type[T] | None = None) -> list[T] | None:
        value = self.get(path)
        if value is None:
            return None
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"value at {path!r} is not a list")
        return [_coerce(v, item_type, path) for v in value]

    def get_uuid(self, path: PathLike) -> uuid.UUID | None:
        value = self.get(path)
        if value is None or isinstance(value, uuid.UUID):
            return value
        if isinstance(value, Mapping) and kw.UUID in value:
            return uuid.UUID(value[kw.UUID])
        if isinstance(value, str):
            return uuid.UUID(value)
        raise TypeError(f"UUID must be a string or a map with a $uuid key but found {value!r}")

    def get_object_id(self, path: PathLike) -> ObjectId | None:
        value = self.get(path)
        if value is None or isinstance(value, ObjectId):
            return value
        if isinstance(value, Mapping) and kw.OBJECT_ID in value:
            return ObjectId(value[kw.OBJECT_ID])
        if isinstance(value, str):
            return ObjectId(value)
        raise TypeError(f"ObjectId must be a string or a map with a $objectId key but found {value!r}")

    def get_datetime(self, path: PathLike) -> datetime | None:
        value = self.get(path)
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, Mapping) and kw.DATE in value:
            return millis_to_datetime(value[kw.DATE])
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        raise TypeError(f"date must be an ISO string or a map with a $date key but found {value!r}")

    # ---- Reserved keywords ----

    def id(self, value: Any) -> Document:
        return self.append_if_not_none(kw.ID, value)

    def get_id(self) -> Any:
        return self._data.get(kw.ID)

    def vector(self, embeddings: DataAPIVector | list[float]) -> Document:
        self._data[kw.VECTOR] = as_vector(embeddings)
        return self

    def get_vector(self) -> DataAPIVector | None:
        value = self._data.get(kw.VECTOR)
        if value is None:
            return None
        if isinstance(value, Mapping) and kw.BINARY in value:
            return DataAPIVector.from_base64(value[kw.BINARY])
        return as_vector(value)

    def vectorize(self, passage: str) -> Document:
        if passage is not None:
            self._data[kw.VECTORIZE] = passage
        return self

    def get_vectorize(self) -> str | None:
        return self._data.get(kw.VECTORIZE)

    def lexical(self, text: str) -> Document:
        if text is not None:
            self._data[kw.LEXICAL] = text
        return self

    def get_lexical(self) -> str | None:
        return self._data.get(kw.LEXICAL)

    def get_similarity(self) -> float | None:
        return self._data.get(kw.SIMILARITY)

    # ---- Conversion ----

    def to_dict(self) -> dict[str, Any]:
        return self._data

    def to_json(self, serializer: DataAPISerializer | None = None) -> str:
        serializer = serializer or self._serializer or DataAPISerializer()
        return serializer.marshall(self._data)


class Row(Document):
    """A table row: column name to value, with dotted paths into map and UDT columns."""

    def add(self, column: str, value: Any) -> Row:
        self.append(column, value)
        return self

    def add_vector(self, column: str, embeddings: DataAPIVector | list[float]) -> Row:
        self.append(column, as_vector(embeddings))
        return self
