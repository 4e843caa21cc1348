"""CEL-to-Data API operator mappings."""

from pydataapi.query.filters import FilterOperator

# Lark relation rule name -> filter operator
COMPARISON_OPERATORS: dict[str, FilterOperator] = {
    "relation_eq": FilterOperator.EQUALS_TO,
    "relation_ne": FilterOperator.NOT_EQUALS_TO,
    "relation_lt": FilterOperator.LESS_THAN,
    "relation_le": FilterOperator.LESS_THAN_OR_EQUALS_TO,
    "relation_gt": FilterOperator.GREATER_THAN,
    "relation_ge": FilterOperator.GREATER_THAN_OR_EQUALS_TO,
}

# Operator to use when the field is on the right: 3 < x is x > 3
FLIPPED_OPERATORS: dict[FilterOperator, FilterOperator] = {
    FilterOperator.EQUALS_TO: FilterOperator.EQUALS_TO,
    FilterOperator.NOT_EQUALS_TO: FilterOperator.NOT_EQUALS_TO,
    FilterOperator.LESS_THAN: FilterOperator.GREATER_THAN,
    FilterOperator.LESS_THAN_OR_EQUALS_TO: FilterOperator.GREATER_THAN_OR_EQUALS_TO,
    FilterOperator.GREATER_THAN: FilterOperator.LESS_THAN,
    FilterOperator.GREATER_THAN_OR_EQUALS_TO: FilterOperator.LESS_THAN_OR_EQUALS_TO,
}

# CEL functions that build typed literals
LITERAL_FUNCTIONS = {"timestamp", "uuid", "objectId"}
