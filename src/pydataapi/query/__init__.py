"""Filter, projection, sort and update builders."""

from pydataapi.query.filters import (
    Filter,
    FilterOperator,
    all_,
    and_,
    by_id,
    eq,
    exists,
    field_path,
    gt,
    gte,
    has_size,
    in_,
    lt,
    lte,
    match,
    ne,
    nin,
    not_,
    or_,
)
from pydataapi.query.projection import (
    Projection,
    exclude,
    include,
    projection_to_dict,
    slice_,
)
from pydataapi.query.sort import Sort, SortOrder, sort_to_dict
from pydataapi.query.update import Update

__all__ = [
    "Filter",
    "FilterOperator",
    "Projection",
    "Sort",
    "SortOrder",
    "Update",
    "all_",
    "and_",
    "by_id",
    "eq",
    "exclude",
    "exists",
    "field_path",
    "gt",
    "gte",
    "has_size",
    "in_",
    "include",
    "lt",
    "lte",
    "match",
    "ne",
    "nin",
    "not_",
    "or_",
    "projection_to_dict",
    "slice_",
    "sort_to_dict",
]
