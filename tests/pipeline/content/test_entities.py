"""Tests for entity normalizers over flat, nested and malformed records."""

import pytest

from schoolsite.pipeline.content.entities import (
    AdmissionsPage,
    normalize_admissions_page,
    normalize_announcement,
    normalize_announcements,
    normalize_clubs,
    normalize_departments,
    normalize_downloads,
    normalize_gallery_album,
    normalize_learning_areas,
    normalize_requirements,
    normalize_school_profile,
    normalize_staff_categories,
    sort_by_order,
)

BASE = "http://cms.test"


def _nested(record_id, **attrs):
    return {"id": record_id, "attributes": attrs}


def test_announcement_flat_and_nested_are_equivalent():
    attrs = {
        "Title": "Open House 2024!",
        "Slug": None,
        "Date": "2024-03-05",
        "Category": "Events",
        "Image": {"data": {"attributes": {"url": "/uploads/o.jpg"}}},
    }
    flat = normalize_announcement({"id": 4, **attrs}, BASE)
    nested = normalize_announcement(_nested(4, **attrs), BASE)
    assert flat == nested
    assert flat.slug == "open-house-2024"
    assert flat.image_url == "http://cms.test/uploads/o.jpg"
    assert flat.published is True


def test_announcement_lowercase_aliases_and_id_fallback():
    ann = normalize_announcement({"id": 42, "slug": "undefined", "published": "false"}, BASE)
    assert ann.slug == "announcement-42"
    assert ann.title is None and ann.published is False


def test_announcement_garbage_is_none():
    assert normalize_announcement("garbage", BASE) is None
    assert normalize_announcements({"data": None}, BASE) == []
    assert normalize_announcements({"data": [None, 3, {"id": 1, "Title": "A"}]}, BASE)[0].slug == "a"


def test_school_profile_aliases_and_contact():
    payload = {"data": _nested(1, School_name="State House", email="info@x", history="Founded")}
    profile = normalize_school_profile(payload, BASE)
    assert profile.name == "State House" and profile.has_contact
    assert profile.history == "Founded"
    assert normalize_school_profile({"data": {"id": 1, "name": "S"}}, BASE).has_contact is False
    assert normalize_school_profile({"data": None}, BASE) is None


def test_gallery_album_items_sorted_with_missing_order_last():
    album = normalize_gallery_album(
        _nested(
            9,
            title="Sports Day",
            gallery_items={
                "data": [
                    _nested(1, title="late"),
                    _nested(2, title="second", order=2),
                    _nested(3, title="first", order=1),
                ]
            },
        ),
        BASE,
    )
    assert [i.title for i in album.items] == ["first", "second", "late"]


def test_gallery_album_overflowing_order_is_treated_as_missing():
    album = normalize_gallery_album({"id": 1, "title": "A", "order": "1e999"}, BASE)
    assert album.order is None


def test_staff_categories_members_sorted():
    payload = {
        "data": [
            {
                "id": 1,
                "name": "Teaching",
                "staff_members": [
                    {"id": 5, "full_name": "B", "order": 2},
                    {"id": 6, "full_name": "A", "order": 1},
                ],
            }
        ]
    }
    (category,) = normalize_staff_categories(payload, BASE)
    assert [m.full_name for m in category.members] == ["A", "B"]


def test_department_hod_relation_both_shapes():
    nested_hod = {"data": _nested(7, full_name="Mrs. W", photo={"url": "/p.jpg"})}
    depts = normalize_departments(
        {
            "data": [
                _nested(2, name="Sciences", order=2, hod=nested_hod),
                {"id": 1, "name": "Languages", "order": 1, "hod": {"id": 8, "full_name": "Mr. O"}},
                {"id": 3, "name": "Arts", "hod": {"data": None}},
            ]
        },
        BASE,
    )
    assert [d.name for d in depts] == ["Languages", "Sciences", "Arts"]
    assert depts[0].hod.full_name == "Mr. O"
    assert depts[1].hod.photo_url == "http://cms.test/p.jpg"
    assert depts[2].hod is None


def test_learning_area_relation_names():
    (area,) = normalize_learning_areas(
        {"data": [{"id": 1, "name": "Physics", "department": {"data": _nested(2, name="Sciences")}}]},
        BASE,
    )
    assert area.department_name == "Sciences" and area.pathway_name is None


def test_admissions_defaults_and_requirements_filtering():
    assert normalize_admissions_page({"data": None}, BASE) == AdmissionsPage()
    page = normalize_admissions_page({"data": {"id": 1, "process": "Apply"}}, BASE)
    assert page.title == "Admissions" and page.process == "Apply"
    reqs = normalize_requirements(
        {"data": [{"id": 1, "title": "B", "order": 2}, {"id": 2}, {"id": 3, "title": "A", "order": 1}]},
        BASE,
    )
    assert [r.title for r in reqs] == ["A", "B"]


def test_clubs_and_downloads():
    (club,) = normalize_clubs(
        {"data": [{"id": 1, "name": "Chess", "logo": {"url": "/c.png"}, "patron": {"id": 3, "name": "Mr. P"}}]},
        BASE,
    )
    assert club.image_url == "http://cms.test/c.png" and club.patron.full_name == "Mr. P"
    downloads = normalize_downloads(
        {"data": [{"id": 1, "title": "Fees", "file": {"url": "/f.pdf"}}, {"id": 2, "title": "Empty"}]},
        BASE,
    )
    assert [d.file_url for d in downloads] == ["http://cms.test/f.pdf"]


def test_download_plain_url_is_resolved_against_cms():
    (download,) = normalize_downloads({"data": [{"id": 1, "title": "T", "url": "/uploads/fees.pdf"}]}, BASE)
    assert download.file_url == "http://cms.test/uploads/fees.pdf"
    (remote,) = normalize_downloads({"data": [{"id": 2, "title": "R", "url": "https://cdn.test/r.pdf"}]}, BASE)
    assert remote.file_url == "https://cdn.test/r.pdf"


@pytest.mark.parametrize("orders", [[None, 1, None, 0], [3, 3, 1]])
def test_sort_by_order_is_stable(orders):
    class Item:
        def __init__(self, idx, order):
            self.idx, self.order = idx, order

    items = [Item(i, o) for i, o in enumerate(orders)]
    result = sort_by_order(items)
    keys = [(999 if it.order is None else it.order, it.idx) for it in result]
    assert keys == sorted(keys)
