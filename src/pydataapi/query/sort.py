"""Sort clauses: field order, vector similarity, lexical and hybrid."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydataapi import _constants as kw
from pydataapi._errors import InvalidSortError
from pydataapi._utils import validate_has_length
from pydataapi.types import DataAPIVector, as_vector


class SortOrder(enum.IntEnum):
    ASCENDING = 1
    DESCENDING = -1


@dataclass(frozen=True)
class Sort:
    field: str
    order: SortOrder | None = None
    vector: DataAPIVector | None = None
    vectorize: str | None = None
    text: str | None = None
    hybrid: Any = None

    @classmethod
    def ascending(cls, field: str) -> Sort:
        validate_has_length(field)
        return cls(field, order=SortOrder.ASCENDING)

    @classmethod
    def descending(cls, field: str) -> Sort:
        validate_has_length(field)
        return cls(field, order=SortOrder.DESCENDING)

    @classmethod
    def by_vector(cls, embeddings: DataAPIVector | list[float], field: str = kw.VECTOR) -> Sort:
        return cls(field, vector=as_vector(embeddings))

    @classmethod
    def by_vectorize(cls, passage: str, field: str = kw.VECTORIZE) -> Sort:
        return cls(field, vectorize=passage)

    @classmethod
    def by_lexical(cls, text: str) -> Sort:
        return cls(kw.LEXICAL, text=text)

    @classmethod
    def by_hybrid(cls, value: str | dict[str, Any]) -> Sort:
        """Hybrid (vector plus lexical) sort, from one passage or an explicit map."""
        return cls(kw.HYBRID, hybrid=value)

    def value(self) -> Any:
        """Wire value of this sort entry."""
        if self.order is not None:
            return int(self.order)
        if self.vectorize is not None:
            return self.vectorize
        if self.vector is not None:
            return self.vector
        if self.text is not None:
            return self.text
        if self.hybrid is not None:
            return self.hybrid
        raise InvalidSortError(
            "invalid sort",
            f"sort on '{self.field}' needs an order, a vector, a vectorize passage, "
            "a lexical text or a hybrid value",
        )


def sort_to_dict(sorts: Iterable[Sort]) -> dict[str, Any]:
    return {s.field: s.value() for s in sorts}
