"""Tests for the whole-site build runner."""

import json
from pathlib import Path

import pytest

from schoolsite.exceptions import CMSFetchError
from schoolsite.pipeline.cms_client import CMSConfig
from schoolsite.pipeline.site_builder import runner


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._text = json.dumps(body) if body is not None else ""

    async def read(self):
        return self._text.encode("utf-8") if isinstance(self._text, str) else self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class RoutedSession:
    """Serve canned payloads keyed by API path; unknown paths get a 404."""

    def __init__(self, routes):
        self.routes = routes
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        path, _, query = url.split("/api", 1)[1].partition("?")
        handler = self.routes.get(path)
        if handler is None:
            return FakeResponse(404, {"error": "not found"})
        body = handler(query) if callable(handler) else handler
        return FakeResponse(200, body)


ANNOUNCEMENTS = {
    "data": [
        {"id": 1, "attributes": {"Title": "Open House", "Date": "2024-03-05"}},
        {"id": 2, "attributes": {"Title": "Sports Day", "Slug": "sports-day"}},
    ]
}
ALBUMS = {"data": [{"id": 7, "attributes": {"title": "Prize Giving"}}]}


def test_route_to_path(tmp_path):
    assert runner.route_to_path("/", tmp_path) == tmp_path / "index.html"
    assert runner.route_to_path("/about/", tmp_path) == tmp_path / "about" / "index.html"
    assert runner.route_to_path("/gallery/7/", tmp_path) == tmp_path / "gallery" / "7" / "index.html"
    with pytest.raises(ValueError):
        runner.route_to_path("/../outside/", tmp_path)


@pytest.mark.asyncio
async def test_build_site_writes_every_page(tmp_path):
    session = RoutedSession({"/announcements": ANNOUNCEMENTS, "/gallery-albums": ALBUMS})
    config = CMSConfig("http://cms.test", mode="production")
    stats = await runner.build_site(config, tmp_path, session=session)
    assert stats == {"pages_written": 14, "pages_not_found": 0, "pages_failed": 0}
    for rel in (
        "index.html",
        "about/index.html",
        "staff/index.html",
        "announcements/open-house/index.html",
        "announcements/sports-day/index.html",
        "gallery/7/index.html",
        "404.html",
    ):
        assert (tmp_path / rel).is_file(), rel
    home = (tmp_path / "index.html").read_text(encoding="utf-8")
    assert "<title>Home - State House Boys High School</title>" in home
    staff = (tmp_path / "staff" / "index.html").read_text(encoding="utf-8")
    assert "Staff information coming soon." in staff
    assert all(url.startswith("http://cms.test/api/") for url in session.urls)


@pytest.mark.asyncio
async def test_build_site_renders_announcement_details_from_listing(tmp_path):
    def announcements(query):
        # Only the filtered listing query returns records.
        return ANNOUNCEMENTS if "filters" in query else {"data": []}

    session = RoutedSession(
        {"/announcements": announcements, "/gallery-albums": {"data": []}}
    )
    config = CMSConfig("http://cms.test", mode="production")
    stats = await runner.build_site(config, tmp_path, session=session)
    assert stats["pages_not_found"] == 0 and stats["pages_failed"] == 0
    page = (tmp_path / "announcements" / "open-house" / "index.html").read_text(encoding="utf-8")
    assert "<h1>Open House</h1>" in page
    assert not any("/api/announcements/" in url for url in session.urls)


@pytest.mark.asyncio
async def test_build_site_counts_missing_album_pages(tmp_path):
    def albums(query):
        return ALBUMS if "sort" in query else {"data": []}

    session = RoutedSession({"/announcements": ANNOUNCEMENTS, "/gallery-albums": albums})
    config = CMSConfig("http://cms.test", mode="development")
    stats = await runner.build_site(config, tmp_path, session=session)
    assert stats["pages_not_found"] == 1
    assert stats["pages_failed"] > 0  # other endpoints 404 and propagate
    assert not (tmp_path / "gallery" / "7").exists()
    assert (tmp_path / "announcements" / "sports-day" / "index.html").is_file()


@pytest.mark.asyncio
async def test_build_site_writes_one_page_per_announcement(tmp_path):
    listing = {
        "data": [
            {"id": 5, "attributes": {"Title": "Announcement 42"}},
            {"id": 42, "attributes": {"Title": "Other"}},
            {"id": 8, "attributes": {"Title": "Notice"}},
            {"id": 9, "attributes": {"Title": "Notice"}},
        ]
    }
    session = RoutedSession({"/announcements": listing, "/gallery-albums": {"data": []}})
    config = CMSConfig("http://cms.test", mode="production")
    stats = await runner.build_site(config, tmp_path, session=session)
    assert stats["pages_failed"] == 0
    pages_dir = tmp_path / "announcements"
    details = sorted(p.name for p in pages_dir.iterdir() if p.is_dir())
    assert details == ["announcement-42", "notice", "notice-9", "other"]
    assert "<h1>Announcement 42</h1>" in (pages_dir / "announcement-42" / "index.html").read_text(encoding="utf-8")
    assert "<h1>Notice</h1>" in (pages_dir / "notice-9" / "index.html").read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_build_site_development_listing_failure_raises(tmp_path):
    config = CMSConfig("http://cms.test", mode="development")
    with pytest.raises(CMSFetchError):
        await runner.build_site(config, tmp_path, session=RoutedSession({}))


def test_run_from_config_success_and_failure(tmp_path, monkeypatch):
    async def ok(config, output_dir):
        return {"pages_written": 3, "pages_not_found": 1, "pages_failed": 0}

    async def partial(config, output_dir):
        return {"pages_written": 3, "pages_not_found": 0, "pages_failed": 2}

    async def boom(config, output_dir):
        raise CMSFetchError("network", "refused", endpoint="/school")

    cfg = CMSConfig("http://cms.test")
    monkeypatch.setattr(runner, "build_site", ok)
    assert runner.run_from_config(cfg, tmp_path) is True
    monkeypatch.setattr(runner, "build_site", partial)
    assert runner.run_from_config(cfg, tmp_path) is False
    monkeypatch.setattr(runner, "build_site", boom)
    assert runner.run_from_config(cfg, tmp_path) is False


def test_run_from_config_offline_cms_in_production(tmp_path):
    cfg = CMSConfig("http://127.0.0.1:9", mode="production", request_timeout=2)
    assert runner.run_from_config(cfg, Path(tmp_path)) is True
    index = (tmp_path / "index.html").read_text(encoding="utf-8")
    assert "No announcements at this time." in index
    assert (tmp_path / "downloads" / "index.html").is_file()
