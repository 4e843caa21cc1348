"""pydataapi - Documents, queries and wire codecs for the Astra Data API."""

from __future__ import annotations

import logging

from celpy.celparser import CELParseError, CELParser

from pydataapi._constants import DEFAULT_MAX_RECURSION_DEPTH
from pydataapi._converter import Converter
from pydataapi._errors import (
    ERR_MSG_INVALID_FILTER,
    DataAPIError,
    InsertManyError,
    InvalidArgumentError,
    InvalidFieldExpressionError,
    InvalidFilterExpressionError,
    InvalidProjectionError,
    InvalidSchemaError,
    InvalidSortError,
    InvalidVectorError,
    MaxDepthExceededError,
    SerializationError,
    UnsupportedExpressionError,
)
from pydataapi._utils import escape_field_names, unescape_field_path
from pydataapi._version import __version__
from pydataapi.commands import Command, insert_many
from pydataapi.document import Document, Row
from pydataapi.query import Filter, Projection, Sort, SortOrder, Update
from pydataapi.schema import (
    AnalyzerType,
    CollectionDefinition,
    ColumnDefinition,
    ColumnType,
    SimilarityMetric,
    TableDefinition,
)
from pydataapi.serdes import DataAPISerializer, SerdesOptions
from pydataapi.types import DataAPIVector, ObjectId

__all__ = [
    "__version__",
    "filter_from_cel",
    "escape_field_names",
    "unescape_field_path",
    "insert_many",
    "AnalyzerType",
    "Command",
    "CollectionDefinition",
    "ColumnDefinition",
    "ColumnType",
    "DataAPIError",
    "DataAPISerializer",
    "DataAPIVector",
    "Document",
    "Filter",
    "InsertManyError",
    "InvalidArgumentError",
    "InvalidFieldExpressionError",
    "InvalidFilterExpressionError",
    "InvalidProjectionError",
    "InvalidSchemaError",
    "InvalidSortError",
    "InvalidVectorError",
    "MaxDepthExceededError",
    "ObjectId",
    "Projection",
    "Row",
    "SerdesOptions",
    "SerializationError",
    "SimilarityMetric",
    "Sort",
    "SortOrder",
    "TableDefinition",
    "UnsupportedExpressionError",
    "Update",
]

logger = logging.getLogger(__name__)

_parser = CELParser()


def filter_from_cel(cel_expr: str, *, max_depth: int | None = None) -> Filter:
    """Convert a CEL boolean expression to a Data API filter.

    Args:
        cel_expr: The CEL expression to convert, e.g.
            ``'status == "active" && age >= 21'``.
        max_depth: Maximum recursion depth. Defaults to 100.

    Returns:
        The equivalent Filter.

    Raises:
        InvalidFilterExpressionError: If the expression cannot be parsed or
            is not a condition.
        UnsupportedExpressionError: If the expression uses CEL features with
            no filter form.
        MaxDepthExceededError: If the expression nests deeper than max_depth.
    """
    try:
        tree = _parser.parse(cel_expr)
    except CELParseError as e:
        raise InvalidFilterExpressionError(
            ERR_MSG_INVALID_FILTER,
            f"cannot parse CEL expression {cel_expr!r}: {e}",
            wrapped=e,
        ) from e

    converter = Converter(DEFAULT_MAX_RECURSION_DEPTH if max_depth is None else max_depth)
    result = converter.convert(tree)
    logger.debug("converted CEL %r to filter %s", cel_expr, result.to_dict())
    return result
