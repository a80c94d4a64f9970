"""Tests for page components using an in-memory CMS stub.

The stub mirrors ``CMSClient.get``: it returns a canned payload per API
path, ``{"data": None}`` for anything unknown (what the production policy
substitutes for failures), or raises a queued exception.
"""

import asyncio
from types import SimpleNamespace

import pytest

from schoolsite.exceptions import CMSFetchError, PageNotFoundError
from schoolsite.pipeline.site_builder import pages

BASE = "http://cms.test"


class StubClient:
    def __init__(self, responses=None):
        self.config = SimpleNamespace(base_url=BASE)
        self.responses = responses or {}
        self.calls = []

    async def get(self, path, params=None):
        self.calls.append((path, params))
        value = self.responses.get(path, {"data": None})
        if isinstance(value, BaseException):
            raise value
        return value


def _announcement(record_id, title, date="2024-01-01", **extra):
    return {"id": record_id, "attributes": {"Title": title, "Date": date, **extra}}


ANNOUNCEMENTS = {
    "data": [
        _announcement(1, "Open House 2024!", "2024-03-05", Category="Events"),
        _announcement(2, "Sports Day", "2024-02-01", Slug="sports-day-2024"),
        _announcement(3, "Hidden", Published=False),
        _announcement(4, "Term Dates", "2024-01-10"),
        _announcement(5, "Old News", "2023-01-10"),
    ]
}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "builder,expected",
    [
        (pages.build_announcements_page, "No announcements at this time."),
        (pages.build_staff_page, "Staff information coming soon."),
        (pages.build_admissions_page, "No requirements listed at this time."),
        (pages.build_departments_page, "Department information coming soon."),
        (pages.build_gallery_page, "No gallery albums available yet."),
        (pages.build_clubs_page, "Club information coming soon."),
        (pages.build_about_page, "School information coming soon."),
        (pages.build_search_page, "Enter a search term to find announcements."),
    ],
)
async def test_empty_cms_renders_placeholders(builder, expected):
    page = await builder(StubClient())
    assert f'<p class="placeholder">{expected}</p>' in page.body


@pytest.mark.asyncio
async def test_academics_placeholders_and_concurrent_fetches():
    client = StubClient()
    page = await pages.build_academics_page(client)
    assert "Pathway information coming soon." in page.body
    assert "Learning area information coming soon." in page.body
    assert sorted(path for path, _ in client.calls) == [
        "/cbc-pathways",
        "/learning-areas-subjects",
    ]


@pytest.mark.asyncio
async def test_announcements_page_lists_published_only():
    page = await pages.build_announcements_page(StubClient({"/announcements": ANNOUNCEMENTS}))
    assert "Open House 2024!" in page.body
    assert 'href="/announcements/open-house-2024/"' in page.body
    assert 'href="/announcements/sports-day-2024/"' in page.body
    assert "March 5, 2024" in page.body
    assert "Hidden" not in page.body


@pytest.mark.asyncio
async def test_home_page_latest_three_and_slideshow():
    albums = {
        "data": [
            {"id": 1, "title": "A", "cover_image": {"url": "/a.jpg"}},
            {"id": 2, "title": "B", "cover_image": {"url": "/b.jpg"}},
        ]
    }
    client = StubClient({"/announcements": ANNOUNCEMENTS, "/gallery-albums": albums})
    page = await pages.build_home_page(client)
    assert page.route == "/"
    assert "Term Dates" in page.body and "Old News" not in page.body
    assert "http://cms.test/a.jpg" in page.body and 'class="slideshow"' in page.body
    assert "Welcome to State House Boys High School" in page.body


@pytest.mark.asyncio
async def test_announcement_detail_by_slug_and_by_title():
    client = StubClient({"/announcements": ANNOUNCEMENTS})
    page = await pages.build_announcement_page(client, "sports-day-2024")
    assert page.title == "Sports Day" and page.route == "/announcements/sports-day-2024/"
    page = await pages.build_announcement_page(client, "sports-day")
    assert page.title == "Sports Day"


@pytest.mark.asyncio
async def test_announcement_detail_by_generated_id_slug():
    single = {"data": {"id": 42, "attributes": {"Content": "**Body**"}}}
    client = StubClient({"/announcements/42": single})
    page = await pages.build_announcement_page(client, "announcement-42")
    assert page.route == "/announcements/announcement-42/"
    assert "<strong>Body</strong>" in page.body
    assert client.calls[0][0] == "/announcements/42"


@pytest.mark.asyncio
async def test_announcement_detail_not_found_and_unpublished():
    client = StubClient({"/announcements": ANNOUNCEMENTS})
    with pytest.raises(PageNotFoundError):
        await pages.build_announcement_page(client, "nope")
    with pytest.raises(PageNotFoundError):
        await pages.build_announcement_page(client, "hidden")
    with pytest.raises(PageNotFoundError):
        await pages.build_announcement_page(client, "null")


@pytest.mark.asyncio
async def test_generated_id_slug_prefers_record_whose_slug_matches():
    listing = {
        "data": [
            {"id": 5, "attributes": {"Title": "Announcement 42"}},
            {"id": 42, "attributes": {"Title": "Other"}},
        ]
    }
    single = {"data": {"id": 42, "attributes": {"Title": "Other"}}}
    client = StubClient({"/announcements": listing, "/announcements/42": single})
    page = await pages.build_announcement_page(client, "announcement-42")
    assert page.title == "Announcement 42"
    assert page.route == "/announcements/announcement-42/"
    page = await pages.build_announcement_page(client, "other")
    assert page.title == "Other"


@pytest.mark.asyncio
async def test_duplicate_titles_get_distinct_routes():
    listing = {
        "data": [
            _announcement(8, "Notice", Content="first"),
            _announcement(9, "Notice", Content="second"),
            _announcement(10, "Notice", Slug="notice-9", Content="third"),
        ]
    }
    client = StubClient({"/announcements": listing})
    loaded = await pages.load_announcements(client)
    assert [a.slug for a in loaded] == ["notice", "notice-2", "notice-9"]
    listing_page = await pages.build_announcements_page(client)
    for slug in ("notice", "notice-2", "notice-9"):
        assert f'href="/announcements/{slug}/"' in listing_page.body
    assert "second" in (await pages.build_announcement_page(client, "notice-2")).body
    assert "third" in (await pages.build_announcement_page(client, "notice-9")).body
    assert "first" in (await pages.build_announcement_page(client, "notice")).body


def test_find_announcement_exact_slug_beats_title_match():
    items = [
        pages.ent.Announcement(1, "Sports Day", "sports-day-2023"),
        pages.ent.Announcement(2, "Gala", "sports-day"),
    ]
    assert pages.find_announcement(items, "sports-day").id == 2
    assert pages.find_announcement(items, "sports-day-2023").id == 1


@pytest.mark.asyncio
async def test_album_page_sorted_items_and_errors():
    albums = {
        "data": [
            {
                "id": 7,
                "attributes": {
                    "title": "Prize Giving",
                    "gallery_items": {
                        "data": [
                            {"id": 1, "attributes": {"caption": "Second", "order": 2, "image": {"url": "/2.jpg"}}},
                            {"id": 2, "attributes": {"caption": "First", "order": 1, "image": {"url": "/1.jpg"}}},
                        ]
                    },
                },
            }
        ]
    }
    client = StubClient({"/gallery-albums": albums})
    page = await pages.build_album_page(client, "7")
    assert page.route == "/gallery/7/"
    assert page.body.index("First") < page.body.index("Second")
    with pytest.raises(PageNotFoundError):
        await pages.build_album_page(client, 8)
    with pytest.raises(PageNotFoundError):
        await pages.build_album_page(client, "abc")


@pytest.mark.asyncio
async def test_staff_page_omits_empty_categories():
    payload = {
        "data": [
            {"id": 1, "name": "Teaching Staff", "staff_members": [{"id": 3, "full_name": "Ms. A"}]},
            {"id": 2, "name": "Support Staff", "staff_members": []},
        ]
    }
    page = await pages.build_staff_page(StubClient({"/staff-categories": payload}))
    assert "Teaching Staff" in page.body and "Ms. A" in page.body
    assert "Support Staff" not in page.body


@pytest.mark.asyncio
async def test_departments_page_hod_card():
    payload = {"data": [{"id": 1, "name": "Sciences", "hod": {"data": {"id": 2, "full_name": "Dr. N"}}}]}
    page = await pages.build_departments_page(StubClient({"/academic-departments": payload}))
    assert "Head of Department" in page.body and "Dr. N" in page.body


def test_search_announcements_matches_title_and_category():
    items = [
        pages.ent.Announcement(1, "Open House", "open-house", category="Events"),
        pages.ent.Announcement(2, "Fees", "fees", category="Finance"),
    ]
    assert [a.id for a in pages.search_announcements(items, "EVENT")] == [1]
    assert [a.id for a in pages.search_announcements(items, "fee")] == [2]
    assert pages.search_announcements(items, "  ") == []


@pytest.mark.asyncio
async def test_search_page_results_and_no_results():
    client = StubClient({"/announcements": ANNOUNCEMENTS})
    page = await pages.build_search_page(client, "sports")
    assert "Sports Day" in page.body and "Open House" not in page.body
    page = await pages.build_search_page(client, "zzz")
    assert "No results found for &quot;zzz&quot;." in page.body


@pytest.mark.asyncio
async def test_downloads_fallback_and_cms_list():
    page = await pages.build_downloads_page(StubClient())
    assert "/pdfs/fees-structure.pdf" in page.body and "Tenders" in page.body
    payload = {"data": [{"id": 1, "title": "Calendar", "file": {"url": "/uploads/cal.pdf"}}]}
    page = await pages.build_downloads_page(StubClient({"/downloads": payload}))
    assert "http://cms.test/uploads/cal.pdf" in page.body
    assert "/pdfs/tenders.pdf" not in page.body


@pytest.mark.asyncio
async def test_about_page_markdown_and_contact():
    payload = {
        "data": {
            "id": 1,
            "attributes": {
                "School_name": "State House",
                "history": "Founded in **1961**.",
                "phone": "+254 700",
            },
        }
    }
    page = await pages.build_about_page(StubClient({"/about-the-school": payload}))
    assert "<h1>About State House</h1>" in page.body
    assert "<strong>1961</strong>" in page.body
    assert "Contact Us" in page.body and "+254 700" in page.body


@pytest.mark.asyncio
async def test_development_fetch_error_propagates():
    error = CMSFetchError("http", "HTTP 500", endpoint="/announcements", status=500)
    with pytest.raises(CMSFetchError):
        await pages.build_announcements_page(StubClient({"/announcements": error}))


@pytest.mark.asyncio
async def test_every_static_page_builds_against_empty_cms():
    results = await asyncio.gather(*(builder(StubClient()) for builder in pages.STATIC_PAGES))
    routes = [page.route for page in results]
    assert len(set(routes)) == len(routes) == len(pages.STATIC_PAGES)
