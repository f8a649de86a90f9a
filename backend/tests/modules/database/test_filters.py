from modules.database.filters import (
    Filter,
    OrderSpec,
    like_pattern,
    matches,
    paginate,
    parse_columns,
    project,
    sort_rows,
    values_equal,
)
from modules.database.models import FilterOperator


class TestValuesEqual:
    def test_numbers_compare_across_int_and_float(self):
        assert values_equal(1, 1.0)

    def test_bool_is_not_a_number(self):
        assert not values_equal(True, 1)
        assert not values_equal(0, False)

    def test_string_is_not_a_number(self):
        assert not values_equal("1", 1)


class TestLikePattern:
    def test_wildcards(self):
        assert like_pattern("a%c").search("abbbc")
        assert like_pattern("milk").search("buy milk today")
        assert not like_pattern("a_c").search("abc")
        assert like_pattern("a_c").search("xa_cx")

    def test_ignore_case(self):
        assert like_pattern("HELLO%", ignore_case=True).fullmatch("hello world")


class TestMatches:
    def test_missing_column_reads_as_none(self):
        assert matches({}, Filter("x", FilterOperator.IS, None))
        assert matches({}, Filter("x", FilterOperator.IS, "null"))

    def test_contains_dict(self):
        row = {"meta": {"a": 1, "b": 2}}
        assert matches(row, Filter("meta", FilterOperator.CONTAINS, {"a": 1}))
        assert not matches(row, Filter("meta", FilterOperator.CONTAINS, {"a": 2}))

    def test_contains_substring(self):
        assert matches({"s": "hello"}, Filter("s", FilterOperator.CONTAINS, "ell"))


class TestSortAndPaginate:
    def test_explicit_nulls_first(self):
        rows = [{"n": 1}, {"n": None}, {"n": 2}]
        result = sort_rows(rows, [OrderSpec("n", nulls_first=True)])
        assert [r["n"] for r in result] == [None, 1, 2]

    def test_equal_keys_keep_input_order(self):
        rows = [{"k": 1, "id": "a"}, {"k": 1, "id": "b"}, {"k": 0, "id": "c"}]
        result = sort_rows(rows, [OrderSpec("k")])
        assert [r["id"] for r in result] == ["c", "a", "b"]

    def test_paginate(self):
        rows = [{"i": i} for i in range(5)]
        assert paginate(rows, limit=2) == rows[:2]
        assert paginate(rows, range_=(3, 10)) == rows[3:]
        assert paginate(rows) == rows


class TestProjection:
    def test_parse_columns(self):
        assert parse_columns("*") is None
        assert parse_columns("*, author(name)") is None
        assert parse_columns("id, title") == ["id", "title"]

    def test_project_fills_missing_columns(self):
        assert project({"id": 1}, ["id", "title"]) == {"id": 1, "title": None}
