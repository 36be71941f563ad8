from classes.reports import average, paginate, pagination_info, parse_pagination, sort_rows


def test_total_pages_is_at_least_one():
    assert pagination_info(0, 1, 25)["totalPages"] == 1


def test_total_pages_rounds_up():
    assert pagination_info(51, 1, 25)["totalPages"] == 3


def test_paginate_slices_the_requested_page():
    rows, info = paginate(range(1, 8), page=2, limit=3)

    assert rows == [4, 5, 6]
    assert info == {"page": 2, "limit": 3, "total": 7, "totalPages": 3}


def test_parse_pagination_clamps_bad_values():
    assert parse_pagination({"page": "0", "limit": "abc"}) == (1, 25)
    assert parse_pagination({"page": "3", "limit": "10"}) == (3, 10)


def test_sort_is_case_insensitive_and_stable():
    rows = [{"n": "bob", "i": 1}, {"n": "Alice", "i": 2}, {"n": "Bob", "i": 3}, {"n": None, "i": 4}]

    assert [r["i"] for r in sort_rows(rows, "n")] == [4, 2, 1, 3]


def test_average():
    assert average([]) == 0
    assert average([1, 2, 4]) == 2.33
