"""Unit tests for the record filter engine."""

from datetime import date

from coursedesk.dates import format_readable_date
from coursedesk.filters import (
    DateRangeFilter,
    ExactFilter,
    TextFilter,
    apply_filters,
    filter_signature,
    sort_records,
    summarize_filters,
    unique_values,
)


def _orders() -> list[dict]:
    return [
        {"id": 1, "name": "Asha Rao", "email": "asha@example.com", "phone": "98450",
         "program_id": "Data Science", "status": "success", "created_at": "2025-01-05T10:00:00"},
        {"id": 2, "name": "Ben Ode", "email": "ben@example.com", "phone": "98111",
         "program_id": "Web Dev", "status": "pending", "created_at": "2025-01-31T23:59:59"},
        {"id": 3, "name": "Chitra", "email": "chitra@mail.com", "phone": None,
         "program_id": "Data Science", "status": "failed", "created_at": "2025-02-01T00:00:01"},
        {"id": 4, "name": "Dev", "email": "dev@example.com", "phone": "70000",
         "program_id": "Web Dev", "status": "success", "created_at": None},
    ]


def _ids(records):
    return [r["id"] for r in records]


# ── Text / exact ──


def test_text_filter_is_case_insensitive_across_fields():
    records = _orders()
    result = apply_filters(records, [TextFilter(("name", "email"), "EXAMPLE")])
    assert _ids(result) == [1, 2, 4]


def test_text_filter_skips_missing_values():
    result = apply_filters(_orders(), [TextFilter(("phone",), "98")])
    assert _ids(result) == [1, 2]


def test_text_filter_treats_input_literally():
    records = [{"id": 1, "name": "a.b"}, {"id": 2, "name": "axb"}]
    assert _ids(apply_filters(records, [TextFilter(("name",), "a.b")])) == [1]


def test_text_filter_matches_formatted_value():
    records = [{"id": 1, "date_time": "2025-01-31T10:00:00"}, {"id": 2, "date_time": "2025-03-01T10:00:00"}]
    flt = TextFilter(("date_time",), "31 january", formatter=format_readable_date)
    assert _ids(apply_filters(records, [flt])) == [1]


def test_exact_filter_is_case_sensitive_by_default():
    assert apply_filters(_orders(), [ExactFilter("status", "SUCCESS")]) == []
    result = apply_filters(_orders(), [ExactFilter("status", "SUCCESS", case_sensitive=False)])
    assert _ids(result) == [1, 4]


def test_exact_filter_with_several_options_means_any_of():
    result = apply_filters(_orders(), [ExactFilter("status", ["success", "failed"])])
    assert _ids(result) == [1, 3, 4]


def test_filters_are_combined_with_and():
    records = _orders()
    filters = [TextFilter(("email",), "example"), ExactFilter("program_id", "Data Science")]
    result = apply_filters(records, filters)

    assert _ids(result) == [1]
    for record in result:
        assert record in records
        assert "example" in record["email"]
        assert record["program_id"] == "Data Science"


def test_search_matching_nothing_gives_empty_list():
    assert apply_filters(_orders(), [TextFilter(("name",), "zzz")]) == []


# ── Identity / idempotence ──


def test_filtered_records_are_the_raw_objects_in_order():
    records = _orders()
    result = apply_filters(records, [ExactFilter("program_id", "Web Dev")])
    assert result[0] is records[1]
    assert result[1] is records[3]


def test_empty_filters_impose_no_constraint():
    records = _orders()
    filters = [TextFilter(("name",), "  "), ExactFilter("status", None), DateRangeFilter("created_at")]
    result = apply_filters(records, filters)
    assert len(result) == len(records)
    assert all(a is b for a, b in zip(result, records))


def test_clearing_filters_restores_raw_list():
    records = _orders()
    apply_filters(records, [ExactFilter("status", "success")])
    result = apply_filters(records, [])
    assert all(a is b for a, b in zip(result, records))
    assert len(result) == len(records)


def test_reapplying_same_filters_is_idempotent():
    records = _orders()
    filters = [TextFilter(("name", "email"), "e"), ExactFilter("status", "success")]
    once = apply_filters(records, filters)
    twice = apply_filters(once, filters)
    assert _ids(once) == _ids(twice)


# ── Date range ──


def test_date_range_includes_whole_last_day():
    flt = DateRangeFilter("created_at", date(2025, 1, 1), date(2025, 1, 31))
    result = apply_filters(_orders(), [flt])
    # 2025-01-31T23:59:59 is in, 2025-02-01T00:00:01 and the undated order are out
    assert _ids(result) == [1, 2]


def test_date_range_accepts_string_bounds_and_open_ends():
    assert _ids(apply_filters(_orders(), [DateRangeFilter("created_at", "2025-01-06")])) == [2, 3]
    assert _ids(apply_filters(_orders(), [DateRangeFilter("created_at", None, "2025-01-05")])) == [1]


def test_unparseable_bound_is_ignored():
    flt = DateRangeFilter("created_at", "not a date")
    assert not flt.active
    assert len(apply_filters(_orders(), [flt])) == 4


def test_timezone_aware_values_compare_by_wall_clock():
    records = [{"id": 1, "created_at": "2025-01-31T23:00:00+05:30"}]
    flt = DateRangeFilter("created_at", date(2025, 1, 31), date(2025, 1, 31))
    assert _ids(apply_filters(records, [flt])) == [1]


# ── Helpers ──


def test_signature_changes_with_values():
    a = filter_signature([ExactFilter("status", "success")])
    b = filter_signature([ExactFilter("status", "pending")])
    assert a != b
    assert filter_signature([ExactFilter("status", "")]) == ""


def test_summarize_filters_uses_active_values_only():
    filters = [TextFilter(("name",), ""), ExactFilter("program_id", "Data Science")]
    assert summarize_filters(filters) == "data-science"


def test_unique_values_sorted_without_blanks():
    records = [{"c": "b"}, {"c": "A"}, {"c": ""}, {"c": None}, {"c": "b"}, {}]
    assert unique_values(records, "c") == ["A", "b"]


def test_sort_records_numeric_text_and_missing_last():
    records = [{"id": 1, "v": "10"}, {"id": 2, "v": None}, {"id": 3, "v": 9}, {"id": 4, "v": "2"}]
    assert _ids(sort_records(records, "v")) == [4, 3, 1, 2]
    assert _ids(sort_records(records, "v", descending=True)) == [1, 3, 4, 2]


def test_sort_records_dates_are_chronological():
    records = [
        {"id": 1, "created_at": "2025-03-01T00:00:00"},
        {"id": 2, "created_at": "2024-12-31T10:00:00"},
        {"id": 3, "created_at": "2025-01-15T08:30:00"},
    ]
    assert _ids(sort_records(records, "created_at", descending=True)) == [1, 3, 2]
