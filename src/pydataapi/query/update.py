"""Update documents built from Data API update operators."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydataapi._utils import validate_has_length

SET = "$set"
UNSET = "$unset"
INC = "$inc"
MIN = "$min"
MUL = "$mul"
PUSH = "$push"
POP = "$pop"
ADD_TO_SET = "$addToSet"
RENAME = "$rename"
CURRENT_DATE = "$currentDate"
SET_ON_INSERT = "$setOnInsert"
EACH = "$each"
POSITION = "$position"


class Update:
    """Chainable update builder.

    >>> Update().set("name", "x").inc("count", 1).to_dict()
    {'$set': {'name': 'x'}, '$inc': {'count': 1}}
    """

    def __init__(self) -> None:
        self._operators: dict[str, dict[str, Any]] = {}

    def _update(self, operator: str, field: str, value: Any) -> Update:
        validate_has_length(field)
        self._operators.setdefault(operator, {})[field] = value
        return self

    def set(self, field: str, value: Any) -> Update:
        return self._update(SET, field, value)

    def set_all(self, fields: Mapping[str, Any]) -> Update:
        for k, v in fields.items():
            self.set(k, v)
        return self

    def unset(self, field: str) -> Update:
        return self._update(UNSET, field, "")

    def inc(self, field: str, amount: int | float) -> Update:
        return self._update(INC, field, amount)

    def min(self, field: str, value: Any) -> Update:
        return self._update(MIN, field, value)

    def mul(self, field: str, factor: int | float) -> Update:
        return self._update(MUL, field, factor)

    def push(self, field: str, value: Any) -> Update:
        return self._update(PUSH, field, value)

    def push_each(
        self, field: str, values: Iterable[Any], position: int | None = None
    ) -> Update:
        each: dict[str, Any] = {EACH: list(values)}
        if position is not None:
            each[POSITION] = position
        return self._update(PUSH, field, each)

    def pop(self, field: str, first: bool = False) -> Update:
        """Remove the last array element, or the first when ``first``."""
        return self._update(POP, field, -1 if first else 1)

    def add_to_set(self, field: str, value: Any) -> Update:
        return self._update(ADD_TO_SET, field, value)

    def rename(self, field: str, new_name: str) -> Update:
        validate_has_length(new_name)
        return self._update(RENAME, field, new_name)

    def current_date(self, *fields: str) -> Update:
        for f in fields:
            self._update(CURRENT_DATE, f, True)
        return self

    def set_on_insert(self, fields: Mapping[str, Any]) -> Update:
        for k, v in fields.items():
            self._update(SET_ON_INSERT, k, v)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {op: dict(fields) for op, fields in self._operators.items()}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Update):
            return self._operators == other._operators
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Update({self._operators!r})"
