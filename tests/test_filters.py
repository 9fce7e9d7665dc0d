"""Tests for filter/sorter variants: construction, URL contribution and local transforms."""

from __future__ import annotations

import pytest

from arbor.filters import (
    EndAt,
    EqualTo,
    LimitToFirst,
    LimitToLast,
    OrderByChild,
    OrderByKey,
    OrderByValue,
    Shallow,
    StartAt,
    apply_filter,
    apply_sorter,
    as_mapping,
    query_params,
    resolve_child,
    sort_rank,
)


class TestConstruction:
    @pytest.mark.parametrize("cls", [StartAt, EndAt, EqualTo])
    @pytest.mark.parametrize("value", [None, [1], {"a": 1}])
    def test_bounds_must_be_scalars(self, cls, value):
        with pytest.raises(TypeError):
            cls(value)

    @pytest.mark.parametrize("cls", [LimitToFirst, LimitToLast])
    @pytest.mark.parametrize("limit", [0, -1, 1.5, True, "3"])
    def test_limits_must_be_positive_ints(self, cls, limit):
        with pytest.raises(ValueError):
            cls(limit)

    @pytest.mark.parametrize("path", ["", "/"])
    def test_order_by_child_needs_path(self, path):
        with pytest.raises(ValueError):
            OrderByChild(path)

    def test_variants_are_values(self):
        assert StartAt(1) == StartAt(1)
        assert OrderByKey() == OrderByKey()
        assert hash(LimitToFirst(2)) == hash(LimitToFirst(2))


class TestQueryParams:
    def test_sorters(self):
        assert query_params(OrderByKey()) == [("orderBy", '"$key"')]
        assert query_params(OrderByValue()) == [("orderBy", '"$value"')]
        assert query_params(OrderByChild("team/name")) == [("orderBy", '"team/name"')]

    def test_bounds_are_json_literals(self):
        assert query_params(StartAt("x")) == [("startAt", '"x"')]
        assert query_params(EndAt(1.5)) == [("endAt", "1.5")]
        assert query_params(EqualTo(True)) == [("equalTo", "true")]
        assert query_params(EqualTo(3)) == [("equalTo", "3")]

    def test_limits_and_shallow(self):
        assert query_params(LimitToFirst(2)) == [("limitToFirst", "2")]
        assert query_params(LimitToLast(5)) == [("limitToLast", "5")]
        assert query_params(Shallow()) == [("shallow", "true")]


class TestOrdering:
    def test_rank_order(self):
        values = ["b", 2, True, None, {"x": 1}, False, 1.5, "a"]
        assert sorted(values, key=sort_rank) == [None, False, True, 1.5, 2, "a", "b", {"x": 1}]

    def test_arrays_become_index_mappings(self):
        assert as_mapping(["a", None, "c"]) == {"0": "a", "2": "c"}
        assert as_mapping(5) is None

    def test_resolve_child(self):
        value = {"team": {"name": "red"}, "tags": ["x", "y"]}
        assert resolve_child(value, "team/name") == "red"
        assert resolve_child(value, "tags/1") == "y"
        assert resolve_child(value, "team/missing") is None
        assert resolve_child("scalar", "any") is None


class TestSorters:
    def test_order_by_key(self):
        result = apply_sorter(OrderByKey(), {"c": 1, "a": 2, "b": 3})
        assert list(result) == ["a", "b", "c"]

    def test_order_by_value_mixed_kinds(self):
        value = {"s": "x", "n": 5, "t": True, "f": False, "z": None, "o": {"k": 1}}
        assert list(apply_sorter(OrderByValue(), value)) == ["z", "f", "t", "n", "s", "o"]

    def test_order_by_value_ties_break_by_key(self):
        assert list(apply_sorter(OrderByValue(), {"b": 1, "a": 1, "c": 0})) == ["c", "a", "b"]

    def test_order_by_child_missing_is_lowest(self):
        value = {
            "x": {"age": 30},
            "y": {"name": "no age"},
            "z": {"age": 20},
            "w": 5,
        }
        assert list(apply_sorter(OrderByChild("age"), value)) == ["w", "y", "z", "x"]

    def test_order_by_nested_child(self):
        value = {"a": {"t": {"n": "b"}}, "b": {"t": {"n": "a"}}}
        assert list(apply_sorter(OrderByChild("t/n"), value)) == ["b", "a"]

    def test_scalars_pass_through(self):
        assert apply_sorter(OrderByKey(), "value") == "value"
        assert apply_sorter(OrderByValue(), None) is None


class TestFilters:
    def test_shallow_truncates_only_mappings(self):
        value = {"obj": {"deep": 1}, "arr": [1, 2], "n": 1, "s": "x", "b": False}
        assert apply_filter(Shallow(), value) == {
            "obj": True,
            "arr": True,
            "n": 1,
            "s": "x",
            "b": False,
        }

    def test_shallow_on_scalar(self):
        assert apply_filter(Shallow(), 42) == 42

    @pytest.mark.parametrize("n", [1, 2, 3, 10])
    def test_limit_to_first_size(self, n):
        value = {"a": 1, "b": 2, "c": 3}
        result = apply_filter(LimitToFirst(n), value)
        assert len(result) == min(n, 3)
        assert list(result) == ["a", "b", "c"][: min(n, 3)]

    @pytest.mark.parametrize("n", [1, 2, 3, 10])
    def test_limit_to_last_size(self, n):
        value = {"a": 1, "b": 2, "c": 3}
        result = apply_filter(LimitToLast(n), value)
        assert len(result) == min(n, 3)
        assert list(result) == ["a", "b", "c"][-min(n, 3) :]

    def test_limit_keeps_sorted_order(self):
        sorted_value = apply_sorter(OrderByValue(), {"a": 3, "b": 1, "c": 2})
        assert list(apply_filter(LimitToLast(2), sorted_value, OrderByValue()).items()) == [
            ("c", 2),
            ("a", 3),
        ]

    def test_start_at_by_child(self):
        value = {"x": {"age": 30}, "y": {"age": 17}, "z": {}}
        result = apply_filter(StartAt(18), value, OrderByChild("age"))
        assert result == {"x": {"age": 30}}

    def test_end_at_by_key(self):
        result = apply_filter(EndAt("b"), {"a": 1, "b": 2, "c": 3}, OrderByKey())
        assert result == {"a": 1, "b": 2}

    def test_equal_to_by_value(self):
        result = apply_filter(EqualTo(2), {"a": 1, "b": 2, "c": "2"}, OrderByValue())
        assert result == {"b": 2}

    def test_bounds_follow_kind_order(self):
        value = {"f": False, "n": 0, "s": "a"}
        assert apply_filter(StartAt(0), value, OrderByValue()) == {"n": 0, "s": "a"}
        assert apply_filter(EndAt(True), value, OrderByValue()) == {"f": False}

    def test_bounds_without_ordering_are_left_to_backend(self):
        value = {"a": 1, "b": 2}
        assert apply_filter(StartAt(2), value) == value

    def test_array_values_become_mappings(self):
        assert apply_filter(LimitToFirst(2), ["a", "b", "c"]) == {"0": "a", "1": "b"}
