"""Dotted-path navigation tests."""

import pytest

from pydataapi._errors import InvalidArgumentError, InvalidFieldExpressionError
from pydataapi._navigator import (
    contains_path,
    find_path,
    get_path,
    put_path,
    remove_path,
    split_index,
)


class TestSplitIndex:
    def test_plain(self):
        assert split_index("name") == ("name", None)

    def test_indexed(self):
        assert split_index("items[3]") == ("items", 3)

    def test_bare_index_is_a_name(self):
        assert split_index("[3]") == ("[3]", None)

    def test_negative_index_is_a_name(self):
        assert split_index("a[-1]") == ("a[-1]", None)


class TestGetPath:
    def test_indexed_read(self, nested_root):
        assert get_path(nested_root, "a.b[1]") == 20

    def test_index_out_of_range(self, nested_root):
        assert get_path(nested_root, "a.b[5]") is None

    def test_missing_intermediate(self, nested_root):
        assert get_path(nested_root, "a.c.d") is None

    def test_through_scalar(self):
        assert get_path({"a": 1}, "a.b") is None

    def test_index_on_non_list(self):
        assert get_path({"a": {"b": "text"}}, "a.b[0]") is None

    def test_nested_after_index(self):
        root = {"a": [{"x": 1}, {"x": 2}]}
        assert get_path(root, "a[1].x") == 2

    def test_whole_subtree(self, nested_root):
        assert get_path(nested_root, "a") == {"b": [10, 20, 30]}

    def test_escaped_dot_key(self):
        assert get_path({"a.b": {"c": 1}}, "a&.b.c") == 1

    def test_segment_list(self):
        assert get_path({"a.b": {"c": 1}}, ["a.b", "c"]) == 1

    def test_empty_path(self, nested_root):
        with pytest.raises(InvalidArgumentError):
            get_path(nested_root, "")

    def test_none_path(self, nested_root):
        with pytest.raises(InvalidArgumentError):
            get_path(nested_root, None)

    def test_malformed_path(self, nested_root):
        with pytest.raises(InvalidFieldExpressionError):
            get_path(nested_root, "a&x")

    def test_does_not_mutate(self, nested_root):
        get_path(nested_root, "x.y.z")
        assert nested_root == {"a": {"b": [10, 20, 30]}}


class TestFindPath:
    def test_stored_none_is_found(self):
        assert find_path({"a": None}, "a") == (True, None)

    def test_missing(self):
        assert find_path({"a": None}, "b") == (False, None)


class TestContainsPath:
    def test_present(self, nested_root):
        assert contains_path(nested_root, "a.b") is True

    def test_absent(self, nested_root):
        assert contains_path(nested_root, "x.y") is False

    def test_top_level(self, nested_root):
        assert contains_path(nested_root, "a") is True

    def test_parent_not_a_mapping(self):
        assert contains_path({"a": 5}, "a.b") is False

    def test_key_with_none_value(self):
        assert contains_path({"a": {"b": None}}, "a.b") is True

    def test_does_not_vivify(self, nested_root):
        contains_path(nested_root, "x.y")
        assert "x" not in nested_root


class TestPutPath:
    def test_overwrites_scalar_intermediate(self):
        root = {"a": "scalar"}
        assert put_path(root, "a.z", 99) is root
        assert root == {"a": {"z": 99}}

    def test_creates_intermediates(self):
        root = {}
        put_path(root, "a.b.c", 1)
        assert root == {"a": {"b": {"c": 1}}}

    def test_keeps_siblings(self):
        root = {"a": {"x": 1}}
        put_path(root, "a.y", 2)
        assert root == {"a": {"x": 1, "y": 2}}

    def test_overwrites_leaf(self):
        root = {"a": 1}
        put_path(root, "a", 2)
        assert root == {"a": 2}

    def test_escaped_segments(self):
        root = {}
        put_path(root, "price&.usd.net", 10)
        assert root == {"price.usd": {"net": 10}}

    def test_empty_key(self):
        with pytest.raises(InvalidArgumentError):
            put_path({}, "", 1)


class TestRemovePath:
    def test_removes_leaf(self):
        root = {"a": {"b": 1, "c": 2}}
        assert remove_path(root, "a.b") is root
        assert root == {"a": {"c": 2}}

    def test_missing_intermediate_is_noop(self):
        root = {"a": {"b": 1}}
        assert remove_path(root, "x.y") is None
        assert root == {"a": {"b": 1}}

    def test_scalar_intermediate_is_noop(self):
        root = {"a": 1}
        assert remove_path(root, "a.b") is None
        assert root == {"a": 1}

    def test_missing_leaf_returns_root(self):
        root = {"a": {}}
        assert remove_path(root, "a.b") is root

    def test_top_level(self):
        root = {"a": 1, "b": 2}
        remove_path(root, "a")
        assert root == {"b": 2}

    @pytest.mark.parametrize("path", ["x.y", "a.missing", "a.b.c"])
    def test_repeated_remove_of_missing_path(self, path):
        root = {"a": {"b": 1}}
        remove_path(root, path)
        remove_path(root, path)
        assert root == {"a": {"b": 1}}
