import pytest

from salesdesk.query import filter_records, paginate

RECORDS = [
    {"id": "1", "name": "Acme Corp", "email": "ops@acme.test", "status": "active", "priority": "high"},
    {"id": "2", "name": "Globex", "email": None, "status": "inactive", "priority": "low"},
    {"id": "3", "name": "Initech", "company": "ACME holdings", "status": "active", "priority": "low"},
    {"id": "4", "name": "Umbrella", "status": "potential"},
    {"id": "5", "code": 1042, "status": "active"},
]


def _ids(records):
    return [record["id"] for record in records]


def test_sentinel_filter_returns_everything_in_order():
    assert filter_records(RECORDS, "", ["name"], {"status": "all"}) == RECORDS


@pytest.mark.parametrize("value", ["all", "", None])
def test_unconstrained_filter_values(value):
    assert _ids(filter_records(RECORDS, None, ["name"], {"status": value})) == ["1", "2", "3", "4", "5"]


def test_search_is_case_insensitive_across_fields():
    assert _ids(filter_records(RECORDS, "acme", ["name", "company"])) == ["1", "3"]


def test_missing_and_none_fields_never_match():
    assert filter_records(RECORDS, "none", ["email"]) == []


def test_non_string_values_are_searched_as_text():
    assert _ids(filter_records(RECORDS, "104", ["code"])) == ["5"]


def test_search_and_filters_are_combined():
    result = filter_records(RECORDS, "a", ["name", "company"], {"status": "active", "priority": "low"})
    assert _ids(result) == ["3"]


def test_filter_without_search_term():
    assert _ids(filter_records(RECORDS, "", [], {"status": "active"})) == ["1", "3", "5"]


def test_paginate_third_page_of_25():
    records = [{"id": str(i)} for i in range(25)]
    page = paginate(records, page=3, limit=10)
    assert len(page.data) == 5
    assert page.meta.total == 25
    assert page.meta.total_pages == 3
    assert page.data[0]["id"] == "20"


def test_paginate_out_of_range_page_keeps_meta():
    records = [{"id": str(i)} for i in range(7)]
    page = paginate(records, page=9, limit=3)
    assert page.data == []
    assert (page.meta.total, page.meta.page, page.meta.limit, page.meta.total_pages) == (7, 9, 3, 3)


def test_paginate_empty():
    page = paginate([], page=1, limit=10)
    assert page.data == []
    assert page.meta.total == 0
    assert page.meta.total_pages == 0


@pytest.mark.parametrize("page_no,limit", [(0, 10), (-2, 0), (1, -5)])
def test_paginate_clamps_invalid_input(page_no, limit):
    records = [{"id": str(i)} for i in range(4)]
    page = paginate(records, page=page_no, limit=limit)
    assert page.meta.page >= 1
    assert page.meta.limit >= 1
    assert page.meta.total == 4
    assert page.meta.total_pages == -(-4 // page.meta.limit)
    assert page.data == records[(page.meta.page - 1) * page.meta.limit:][: page.meta.limit]


@pytest.mark.parametrize("size,limit", [(0, 3), (1, 1), (10, 3), (12, 4), (31, 7)])
def test_pages_concatenate_to_the_filtered_set(size, limit):
    records = [{"id": str(i), "status": "active" if i % 3 else "inactive"} for i in range(size)]
    filtered = filter_records(records, "", ["id"], {"status": "active"})
    first = paginate(filtered, 1, limit)
    collected = []
    for page_no in range(1, first.meta.total_pages + 1):
        collected.extend(paginate(filtered, page_no, limit).data)
    assert collected == filtered
    assert first.meta.total == len(filtered)


def test_page_dump_uses_camel_case_meta():
    dumped = paginate([{"id": "1"}], 1, 10).model_dump(by_alias=True)
    assert dumped == {"data": [{"id": "1"}], "meta": {"total": 1, "page": 1, "limit": 10, "totalPages": 1}}
