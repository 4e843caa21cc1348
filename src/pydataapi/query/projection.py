"""Projections select which fields a find returns."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydataapi import _constants as kw
from pydataapi._errors import InvalidProjectionError
from pydataapi._utils import validate_has_length


@dataclass(frozen=True)
class Projection:
    """One projected field: either included/excluded or an array slice."""

    field: str
    present: bool | None = None
    slice_start: int | None = None
    slice_end: int | None = None

    def value(self) -> Any:
        has_slice = self.slice_start is not None
        if self.present is not None and has_slice:
            raise InvalidProjectionError(
                "invalid projection",
                f"field '{self.field}' has both a presence flag and a slice",
            )
        if self.present is not None:
            return self.present
        if not has_slice:
            raise InvalidProjectionError(
                "invalid projection",
                f"field '{self.field}' has neither a presence flag nor a slice",
            )
        if self.slice_end is None:
            return {kw.SLICE: self.slice_start}
        return {kw.SLICE: [self.slice_start, self.slice_end]}


def include(*fields: str) -> list[Projection]:
    return [_checked(f, True) for f in fields]


def exclude(*fields: str) -> list[Projection]:
    return [_checked(f, False) for f in fields]


def _checked(field: str, present: bool) -> Projection:
    validate_has_length(field)
    return Projection(field, present=present)


def slice_(field: str, start: int, end: int | None = None) -> Projection:
    """Return ``start`` elements of an array field (negative counts from the
    end); with ``end``, skip ``start`` and return ``end`` elements."""
    validate_has_length(field)
    return Projection(field, slice_start=start, slice_end=end)


def projection_to_dict(projections: Iterable[Projection]) -> dict[str, Any]:
    return {p.field: p.value() for p in projections}
