"""Data API filter clauses.

A filter is a JSON object mapping field paths to either a literal (implicit
``$eq``) or an operator object, combined with ``$and``/``$or``/``$not``::

    >>> (eq("status", "active") & gt("age", 21)).to_dict()
    {'$and': [{'status': {'$eq': 'active'}}, {'age': {'$gt': 21}}]}

Field names are used as given, so literal dots must already be escaped;
:func:`field_path` builds an escaped path from raw segments.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from typing import Any

from pydataapi import _constants as kw
from pydataapi._utils import escape_field_names, validate_has_length


class FilterOperator(enum.StrEnum):
    EQUALS_TO = "$eq"
    NOT_EQUALS_TO = "$ne"
    GREATER_THAN = "$gt"
    GREATER_THAN_OR_EQUALS_TO = "$gte"
    LESS_THAN = "$lt"
    LESS_THAN_OR_EQUALS_TO = "$lte"
    IN = "$in"
    NOT_IN = "$nin"
    EXISTS = "$exists"
    SIZE = "$size"
    ALL = "$all"
    MATCH = "$match"


AND = "$and"
OR = "$or"
NOT = "$not"


class Filter:
    """A filter document; ``&``, ``|`` and ``~`` compose filters."""

    def __init__(self, conditions: Mapping[str, Any] | None = None) -> None:
        self._conditions: dict[str, Any] = (
            {k: _unwrap(v) for k, v in conditions.items()} if conditions else {}
        )

    def where(self, field: str, operator: FilterOperator | str, value: Any) -> Filter:
        """Add ``{field: {operator: value}}``, merging with existing operators on ``field``."""
        validate_has_length(field)
        existing = self._conditions.get(field)
        if isinstance(existing, dict) and all(k.startswith("$") for k in existing):
            self._conditions[field] = {**existing, str(operator): value}
        else:
            self._conditions[field] = {str(operator): value}
        return self

    def to_dict(self) -> dict[str, Any]:
        return {k: _unwrap(v) for k, v in self._conditions.items()}

    def is_empty(self) -> bool:
        return not self._conditions

    def __and__(self, other: Filter) -> Filter:
        return and_(self, other)

    def __or__(self, other: Filter) -> Filter:
        return or_(self, other)

    def __invert__(self) -> Filter:
        return not_(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Filter):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Filter({self.to_dict()!r})"


def _unwrap(value: Any) -> Any:
    if isinstance(value, Filter):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: _unwrap(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_unwrap(v) for v in value]
    return value


def field_path(*segments: str) -> str:
    """Escape raw field name segments into one filter key."""
    return escape_field_names(*segments)


def eq(field: str, value: Any) -> Filter:
    return Filter().where(field, FilterOperator.EQUALS_TO, value)


def by_id(value: Any) -> Filter:
    return eq(kw.ID, value)


def ne(field: str, value: Any) -> Filter:
    return Filter().where(field, FilterOperator.NOT_EQUALS_TO, value)


def gt(field: str, value: Any) -> Filter:
    return Filter().where(field, FilterOperator.GREATER_THAN, value)


def gte(field: str, value: Any) -> Filter:
    return Filter().where(field, FilterOperator.GREATER_THAN_OR_EQUALS_TO, value)


def lt(field: str, value: Any) -> Filter:
    return Filter().where(field, FilterOperator.LESS_THAN, value)


def lte(field: str, value: Any) -> Filter:
    return Filter().where(field, FilterOperator.LESS_THAN_OR_EQUALS_TO, value)


def in_(field: str, values: Iterable[Any]) -> Filter:
    return Filter().where(field, FilterOperator.IN, list(values))


def nin(field: str, values: Iterable[Any]) -> Filter:
    return Filter().where(field, FilterOperator.NOT_IN, list(values))


def exists(field: str, present: bool = True) -> Filter:
    return Filter().where(field, FilterOperator.EXISTS, present)


def has_size(field: str, size: int) -> Filter:
    return Filter().where(field, FilterOperator.SIZE, size)


def all_(field: str, values: Iterable[Any]) -> Filter:
    """Array field containing every one of ``values``."""
    return Filter().where(field, FilterOperator.ALL, list(values))


def match(text: str, field: str = kw.LEXICAL) -> Filter:
    """Lexical (BM25) match against the ``$lexical`` field."""
    return Filter().where(field, FilterOperator.MATCH, text)


def _flatten(op: str, filters: Iterable[Filter]) -> list[Any]:
    result: list[Any] = []
    for f in filters:
        conditions = f._conditions
        if len(conditions) == 1 and op in conditions:
            result.extend(conditions[op])
        else:
            result.append(f)
    return result


def and_(*filters: Filter) -> Filter:
    """All of ``filters``; nested ``$and`` clauses are flattened."""
    return Filter({AND: _flatten(AND, filters)})


def or_(*filters: Filter) -> Filter:
    """Any of ``filters``; nested ``$or`` clauses are flattened."""
    return Filter({OR: _flatten(OR, filters)})


def not_(f: Filter) -> Filter:
    return Filter({NOT: f})
