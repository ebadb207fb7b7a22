"""Unit tests for TableView state handling."""

from coursedesk.filters import ExactFilter, TextFilter
from coursedesk.table_view import Column, TableView


def _students() -> list[dict]:
    return [
        {
            "id": i,
            "name": f"Student {i}",
            "group": "a" if i <= 15 else "b",
            "status": "success" if i % 5 == 0 else "pending",
        }
        for i in range(1, 26)
    ]


def _view(**kwargs) -> TableView:
    view = TableView("students", "id", page_size=10, **kwargs)
    view.load(_students())
    return view


def test_filter_change_resets_to_first_page():
    view = _view()
    view.go_to(3)
    assert view.set_filters([ExactFilter("group", "a")])
    assert view.current_page == 1


def test_unchanged_filters_keep_page():
    view = _view()
    view.go_to(2)
    assert not view.set_filters([TextFilter(("name",), "")])
    assert view.current_page == 2


def test_retained_page_survives_filter_change_and_clamps():
    view = _view(retain_page_on_filter=True)
    view.go_to(2)

    view.set_filters([ExactFilter("group", "a")])  # 15 rows, 2 pages
    assert view.current_page == 2
    assert [r["id"] for r in view.page_records()] == [11, 12, 13, 14, 15]

    view.set_filters([ExactFilter("status", "success")])  # 5 rows, 1 page
    assert view.current_page == 1


def test_search_matching_nothing():
    view = _view()
    view.set_filters([TextFilter(("name",), "nobody")])
    assert view.filtered == []
    assert view.total_pages == 1
    assert view.page_records() == []
    assert view.showing() == (0, 0)


def test_edits_survive_refiltering():
    view = _view()
    view.set_filters([ExactFilter("group", "a")])
    view.patch(3, {"status": "converted"})

    view.set_filters([ExactFilter("status", "converted")])
    assert [r["id"] for r in view.filtered] == [3]
    assert view.filtered[0] is view.find(3)

    view.clear_filters()
    assert view.find(3)["status"] == "converted"


def test_patch_unknown_key():
    view = _view()
    assert view.find(999) is None
    assert not view.patch(999, {"status": "x"})


def test_stale_load_is_discarded():
    view = TableView("students", "id")
    first = view.begin_load()
    second = view.begin_load()

    assert not view.finish_load(first, [{"id": "old"}])
    assert view.records == []
    assert view.finish_load(second, [{"id": "new"}])
    assert [r["id"] for r in view.records] == ["new"]


def test_closed_view_cancels_tokens():
    view = _view()
    token = view.lifetime_token()
    assert not token.cancelled
    view.close()
    assert token.cancelled


def test_reload_clamps_page():
    view = _view()
    view.go_to(3)
    view.load(_students()[:12])
    assert view.current_page == 2


def test_sort_applies_after_filter():
    view = _view()
    view.set_filters([ExactFilter("status", "success")])
    view.set_sort("id", descending=True)
    assert [r["id"] for r in view.filtered] == [25, 20, 15, 10, 5]


def test_options_come_from_raw_list():
    view = _view()
    view.set_filters([ExactFilter("group", "a")])
    assert view.options("group") == ["a", "b"]


def test_page_buttons_follow_current_page():
    view = TableView("big", "id", page_size=1)
    view.load([{"id": i} for i in range(20)])
    view.go_to(10)
    assert view.page_buttons(5) == [1, None, 8, 9, 10, 11, 12, None, 20]


def test_column_extract():
    record = {"name": "", "total": 5}
    assert Column("Name", "name").extract(record) == "-"
    assert Column("Total", "total").extract(record) == 5
    assert Column("Double", compute=lambda r: r["total"] * 2).extract(record) == 10
