"""Core Converter class - Lark Interpreter subclass for CEL-to-filter conversion."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from lark import Token, Tree
from lark.visitors import Interpreter

from pydataapi._constants import DEFAULT_MAX_RECURSION_DEPTH, MAX_ARRAY_INDEX
from pydataapi._errors import (
    ERR_MSG_INVALID_ARGUMENTS,
    ERR_MSG_UNSUPPORTED_EXPRESSION,
    InvalidArgumentError,
    InvalidFilterExpressionError,
    MaxDepthExceededError,
    UnsupportedExpressionError,
)
from pydataapi._operators import COMPARISON_OPERATORS, FLIPPED_OPERATORS, LITERAL_FUNCTIONS
from pydataapi._utils import escape_field_names, validate_has_length
from pydataapi.query import filters as f
from pydataapi.query.filters import Filter, FilterOperator
from pydataapi.types import ObjectId


def _strip_quotes(s: str) -> str:
    """Strip surrounding quotes from a CEL string literal token."""
    if s.startswith(('r"', "r'", 'R"', "R'")):
        s = s[1:]
    if s.startswith('"""') or s.startswith("'''"):
        return s[3:-3]
    if s.startswith('"') or s.startswith("'"):
        return s[1:-1]
    return s


def _is_raw_string(token: Token) -> bool:
    return str(token).startswith(("r'", 'r"', "R'", 'R"'))


@dataclass(frozen=True)
class _Path:
    """A document field reference, as raw (unescaped) segments."""

    segments: tuple[str, ...]

    def child(self, name: str) -> _Path:
        validate_has_length(name)
        return _Path(self.segments + (name,))

    @property
    def key(self) -> str:
        return escape_field_names(*self.segments)


@dataclass(frozen=True)
class _Value:
    value: Any


@dataclass(frozen=True)
class _Size:
    """``size(path)``; only meaningful compared for equality."""

    path: _Path


def _unsupported(what: str, detail: str = "") -> UnsupportedExpressionError:
    return UnsupportedExpressionError(f"{ERR_MSG_UNSUPPORTED_EXPRESSION}: {what}", detail)


class Converter(Interpreter):
    """Converts a CEL Lark parse tree into a Data API :class:`Filter`.

    Every visit returns one of: a ``Filter`` for predicates, a ``_Path`` for
    field references, a ``_Value`` for constants, or a ``_Size``.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_RECURSION_DEPTH) -> None:
        self._max_depth = max_depth
        self._depth = 0

    def convert(self, tree: Tree) -> Filter:
        return self._as_filter(self._visit_child(tree))

    def _check_limits(self) -> None:
        if self._depth > self._max_depth:
            raise MaxDepthExceededError(
                "maximum recursion depth exceeded",
                f"depth {self._depth} exceeds limit {self._max_depth}",
            )

    def _visit_child(self, tree: Tree | Token) -> Any:
        """Visit a child node, incrementing depth."""
        self._depth += 1
        try:
            self._check_limits()
            return self.visit(tree)
        finally:
            self._depth -= 1

    def visit(self, tree: Tree | Token) -> Any:
        if isinstance(tree, Token):
            raise _unsupported("bare token", f"unexpected token {tree.type}")
        return super().visit(tree)

    def __default__(self, tree: Tree) -> Any:
        raise _unsupported(tree.data, f"no filter form for '{tree.data}' nodes")

    def _pass_through(self, tree: Tree, what: str) -> Any:
        if len(tree.children) == 1:
            return self._visit_child(tree.children[0])
        raise _unsupported(what, f"{tree.data} has {len(tree.children)} children")

    # ---- Coercions ----

    def _as_filter(self, node: Any) -> Filter:
        if isinstance(node, Filter):
            return node
        if isinstance(node, _Path):
            # bare boolean field
            return f.eq(node.key, True)
        raise InvalidFilterExpressionError(
            "expression is not a condition",
            f"expected a boolean condition, got {node!r}",
        )

    @staticmethod
    def _as_value(node: Any, context: str) -> Any:
        if isinstance(node, _Value):
            return node.value
        raise _unsupported(context, f"expected a constant, got {node!r}")

    @staticmethod
    def _as_path(node: Any, context: str) -> _Path:
        if isinstance(node, _Path):
            return node
        raise _unsupported(context, f"expected a field reference, got {node!r}")

    # ---- expr: top-level, potentially ternary ----

    def expr(self, tree: Tree) -> Any:
        if len(tree.children) == 3:
            raise _unsupported("conditional operator", "ternary expressions have no filter form")
        return self._pass_through(tree, "expression")

    # ---- Logical operators ----

    def conditionalor(self, tree: Tree) -> Any:
        children = tree.children
        if len(children) == 2:
            return f.or_(
                self._as_filter(self._visit_child(children[0])),
                self._as_filter(self._visit_child(children[1])),
            )
        return self._pass_through(tree, "OR expression")

    def conditionaland(self, tree: Tree) -> Any:
        children = tree.children
        if len(children) == 2:
            return f.and_(
                self._as_filter(self._visit_child(children[0])),
                self._as_filter(self._visit_child(children[1])),
            )
        return self._pass_through(tree, "AND expression")

    # ---- Comparison / relation ----

    def relation(self, tree: Tree) -> Any:
        children = tree.children
        if len(children) == 1:
            return self._visit_child(children[0])
        if len(children) != 2 or not isinstance(children[0], Tree):
            raise _unsupported("relation", f"relation has {len(children)} children")

        # children[0] is the operator prefix node holding the left operand
        op_node, rhs_tree = children
        op_name = op_node.data
        lhs = self._visit_child(op_node.children[0])
        rhs = self._visit_child(rhs_tree)

        if op_name == "relation_in":
            return self._visit_in(lhs, rhs)

        op = COMPARISON_OPERATORS.get(op_name)
        if op is None:
            raise _unsupported("comparison operator", f"unknown relation operator: {op_name}")

        if isinstance(lhs, _Size) or isinstance(rhs, _Size):
            return self._visit_size_comparison(op, lhs, rhs)
        if isinstance(lhs, _Path) and isinstance(rhs, _Value):
            return Filter().where(lhs.key, op, rhs.value)
        if isinstance(lhs, _Value) and isinstance(rhs, _Path):
            return Filter().where(rhs.key, FLIPPED_OPERATORS[op], lhs.value)
        raise _unsupported(
            "comparison",
            "comparisons need one field reference and one constant",
        )

    def _visit_in(self, lhs: Any, rhs: Any) -> Filter:
        """``field in [..]`` is ``$in``; ``value in field`` is ``$all``."""
        if isinstance(lhs, _Path) and isinstance(rhs, _Value):
            if not isinstance(rhs.value, list):
                raise InvalidArgumentError(
                    ERR_MSG_INVALID_ARGUMENTS,
                    "the right side of 'in' must be a list literal",
                )
            return f.in_(lhs.key, rhs.value)
        if isinstance(lhs, _Value) and isinstance(rhs, _Path):
            return f.all_(rhs.key, [lhs.value])
        raise _unsupported("in", "'in' needs one field reference and one constant")

    def _visit_size_comparison(self, op: FilterOperator, lhs: Any, rhs: Any) -> Filter:
        size, other = (lhs, rhs) if isinstance(lhs, _Size) else (rhs, lhs)
        if op is not FilterOperator.EQUALS_TO:
            raise _unsupported("size comparison", "only size(x) == n has a filter form")
        n = self._as_value(other, "size comparison")
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            raise InvalidArgumentError(
                ERR_MSG_INVALID_ARGUMENTS,
                f"size must be compared with a non-negative integer, got {n!r}",
            )
        return f.has_size(size.path.key, n)

    # ---- Arithmetic ----

    def addition(self, tree: Tree) -> Any:
        return self._pass_through(tree, "arithmetic")

    def multiplication(self, tree: Tree) -> Any:
        return self._pass_through(tree, "arithmetic")

    # ---- Unary ----

    def unary(self, tree: Tree) -> Any:
        children = tree.children
        if len(children) == 1:
            return self._visit_child(children[0])

        if len(children) == 2 and isinstance(children[0], Tree):
            op_name = children[0].data
            operand = self._visit_child(children[1])
            if op_name == "unary_not":
                return self._negate(self._as_filter(operand))
            if op_name == "unary_neg":
                value = self._as_value(operand, "negation")
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise _unsupported("negation", f"cannot negate {value!r}")
                return _Value(-value)

        raise _unsupported("unary expression", f"unary has {len(children)} children")

    @staticmethod
    def _negate(inner: Filter) -> Filter:
        # !(x in [..]) becomes $nin instead of a $not wrapper
        conditions = inner.to_dict()
        if len(conditions) == 1:
            ((key, cond),) = conditions.items()
            if isinstance(cond, dict) and list(cond) == [FilterOperator.IN]:
                return f.nin(key, cond[FilterOperator.IN])
        return f.not_(inner)

    # ---- Member access ----

    def member(self, tree: Tree) -> Any:
        return self._pass_through(tree, "member expression")

    def member_dot(self, tree: Tree) -> Any:
        """Field access: a.b"""
        obj = self._as_path(self._visit_child(tree.children[0]), "field access")
        return obj.child(str(tree.children[1]))

    def member_dot_arg(self, tree: Tree) -> Any:
        """Method call; only ``x.size()`` has a filter form."""
        method_name = str(tree.children[1])
        args_node = tree.children[2] if len(tree.children) > 2 else None
        args = args_node.children if args_node is not None else []
        if method_name == "size" and not args:
            return _Size(self._as_path(self._visit_child(tree.children[0]), "size()"))
        raise _unsupported("method call", f"unknown method: {method_name}")

    def member_index(self, tree: Tree) -> Any:
        """Index access: a[0] or a["key"]."""
        obj = self._as_path(self._visit_child(tree.children[0]), "index access")
        index = self._as_value(self._visit_child(tree.children[1]), "index access")

        if isinstance(index, str):
            return obj.child(index)
        if isinstance(index, int) and not isinstance(index, bool):
            if index < 0:
                raise InvalidArgumentError(
                    "negative array index not supported",
                    f"array index {index} is negative",
                )
            if index > MAX_ARRAY_INDEX:
                raise InvalidArgumentError(
                    "array index overflow",
                    f"array index {index} is too large",
                )
            return obj.child(str(index))
        raise _unsupported("index access", f"cannot index with {index!r}")

    # ---- Primary expressions ----

    def primary(self, tree: Tree) -> Any:
        return self._pass_through(tree, "primary expression")

    def ident(self, tree: Tree) -> Any:
        """Bare identifier: a top-level document field."""
        return _Path((str(tree.children[0]),))

    def ident_arg(self, tree: Tree) -> Any:
        """Function call: func(args)."""
        func_name = str(tree.children[0])
        args_node = tree.children[1] if len(tree.children) > 1 else None
        args = args_node.children if args_node is not None else []

        if func_name == "has":
            self._check_arity(func_name, args, 1)
            return f.exists(self._as_path(self._visit_child(args[0]), "has()").key)
        if func_name == "size":
            self._check_arity(func_name, args, 1)
            return _Size(self._as_path(self._visit_child(args[0]), "size()"))
        if func_name == "match":
            self._check_arity(func_name, args, 1)
            text = self._as_value(self._visit_child(args[0]), "match()")
            if not isinstance(text, str):
                raise InvalidArgumentError(ERR_MSG_INVALID_ARGUMENTS, "match() requires a string")
            return f.match(text)
        if func_name in LITERAL_FUNCTIONS:
            self._check_arity(func_name, args, 1)
            raw = self._as_value(self._visit_child(args[0]), f"{func_name}()")
            return _Value(self._typed_literal(func_name, raw))

        raise _unsupported("function call", f"unknown function: {func_name}")

    @staticmethod
    def _check_arity(func_name: str, args: list, n: int) -> None:
        if len(args) != n:
            raise InvalidArgumentError(
                ERR_MSG_INVALID_ARGUMENTS,
                f"{func_name}() requires exactly {n} argument(s), got {len(args)}",
            )

    @staticmethod
    def _typed_literal(func_name: str, raw: Any) -> Any:
        if not isinstance(raw, str):
            raise InvalidArgumentError(
                ERR_MSG_INVALID_ARGUMENTS,
                f"{func_name}() requires a string literal argument",
            )
        try:
            if func_name == "timestamp":
                return datetime.fromisoformat(raw)
            if func_name == "uuid":
                return uuid.UUID(raw)
            return ObjectId(raw)
        except ValueError as e:
            raise InvalidArgumentError(
                ERR_MSG_INVALID_ARGUMENTS,
                f"invalid {func_name}() value {raw!r}",
                wrapped=e,
            ) from e

    def paren_expr(self, tree: Tree) -> Any:
        """Parenthesized expression."""
        return self._visit_child(tree.children[0])

    # ---- Literals ----

    def literal(self, tree: Tree) -> Any:
        token = tree.children[0]
        if not isinstance(token, Token):
            raise _unsupported("literal", "unexpected literal structure")

        if token.type == "NULL_LIT":
            return _Value(None)
        if token.type == "BOOL_LIT":
            return _Value(str(token).lower() == "true")
        if token.type == "INT_LIT":
            return _Value(int(str(token), 0))
        if token.type == "UINT_LIT":
            return _Value(int(str(token).rstrip("uU"), 0))
        if token.type == "FLOAT_LIT":
            return _Value(float(str(token)))
        if token.type in ("STRING_LIT", "MLSTRING_LIT"):
            raw = _strip_quotes(str(token))
            if not _is_raw_string(token):
                raw = self._process_escapes(raw)
            return _Value(raw)
        if token.type == "BYTES_LIT":
            inner = str(token)[1:]
            return _Value(_strip_quotes(inner).encode("utf-8"))
        raise _unsupported("literal", f"unknown token type: {token.type}")

    def list_lit(self, tree: Tree) -> Any:
        """List literal: [1, 2, 3]."""
        values: list[Any] = []
        if tree.children:
            exprlist = tree.children[0]
            if isinstance(exprlist, Tree) and exprlist.data == "exprlist":
                for child in exprlist.children:
                    values.append(self._as_value(self._visit_child(child), "list literal"))
        return _Value(values)

    def map_lit(self, tree: Tree) -> Any:
        """Map literal with constant keys and values."""
        result: dict[str, Any] = {}
        if tree.children:
            mapinits = tree.children[0]
            if isinstance(mapinits, Tree) and mapinits.data == "mapinits":
                # mapinits children alternate: key, value, key, value...
                children = mapinits.children
                for i in range(0, len(children), 2):
                    key = self._as_value(self._visit_child(children[i]), "map literal")
                    result[str(key)] = self._as_value(
                        self._visit_child(children[i + 1]), "map literal"
                    )
        return _Value(result)

    @staticmethod
    def _process_escapes(s: str) -> str:
        """Process CEL string escape sequences."""
        result = []
        i = 0
        while i < len(s):
            if s[i] == "\\" and i + 1 < len(s):
                nxt = s[i + 1]
                simple = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"', "0": "\0"}
                if nxt in simple:
                    result.append(simple[nxt])
                    i += 2
                elif nxt in ("x", "u"):
                    width = 2 if nxt == "x" else 4
                    hex_val = s[i + 2 : i + 2 + width]
                    try:
                        if len(hex_val) != width:
                            raise ValueError(hex_val)
                        result.append(chr(int(hex_val, 16)))
                        i += 2 + width
                    except ValueError:
                        result.append(s[i])
                        i += 1
                else:
                    result.append(s[i])
                    result.append(nxt)
                    i += 2
            else:
                result.append(s[i])
                i += 1
        return "".join(result)
