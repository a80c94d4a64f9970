"""Page components for the static school site.

Each ``build_*`` coroutine fetches what one page needs through a
:class:`~schoolsite.pipeline.cms_client.CMSClient`, normalizes it with
:mod:`schoolsite.pipeline.content.entities`, and returns a :class:`Page`
holding the route and the rendered body. Pages that need several
collections fetch them concurrently with ``asyncio.gather``.

Empty content renders an explicit placeholder rather than a blank section.
Detail pages for an unknown slug or id raise
:class:`~schoolsite.exceptions.PageNotFoundError`. Fetch errors are handled
by the client's policy: in production they arrive here as ``{"data": None}``
and render as placeholders; in development they propagate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any, Protocol
from urllib.parse import quote

from schoolsite.config import (
    ANNOUNCEMENT_SLUG_PREFIX,
    DEFAULT_DOWNLOADS,
    HOME_LATEST_ANNOUNCEMENTS,
    NO_ALBUM_ITEMS_TEXT,
    NO_ANNOUNCEMENTS_TEXT,
    NO_CLUBS_TEXT,
    NO_DEPARTMENTS_TEXT,
    NO_GALLERY_TEXT,
    NO_PATHWAYS_TEXT,
    NO_PROFILE_TEXT,
    NO_REQUIREMENTS_TEXT,
    NO_SEARCH_QUERY_TEXT,
    NO_SEARCH_RESULTS_FORMAT,
    NO_STAFF_TEXT,
    NO_SUBJECTS_TEXT,
    SITE_NAME,
    SITE_TAGLINE,
)
from schoolsite.exceptions import PageNotFoundError
from schoolsite.pipeline.content import entities as ent
from schoolsite.pipeline.content.records import unwrap_collection
from schoolsite.pipeline.content.slugs import is_missing_slug, slugify

from .renderer import format_date, image, link, placeholder, rich_text_html, text
from .slideshow import Slideshow

logger = logging.getLogger(__name__)


class ContentSource(Protocol):
    """What page builders need from a CMS client."""

    config: Any

    async def get(self, path: str, params: Any = None) -> dict[str, Any]: ...


@dataclass
class Page:
    route: str
    title: str
    body: str
    description: str = ""


ANNOUNCEMENTS_QUERY = {
    "populate": "*",
    "sort": "Date:desc",
    "filters": {"Published": {"$eq": True}},
}
GALLERY_QUERY = {"populate": "*", "sort": ["order:asc", "event_date:desc"]}
GALLERY_DETAIL_QUERY = {"populate": {"gallery_items": {"populate": "*"}}}
STAFF_QUERY = {"populate": {"staff_members": {"populate": "*"}}}
DEPARTMENTS_QUERY = {"populate": {"hod": {"populate": "*"}}, "sort": "order:asc"}
ORDERED_QUERY = {"populate": "*", "sort": "order:asc"}
CLUBS_QUERY = {
    "populate": {"patron": {"populate": "*"}, "image": True},
    "sort": "order:asc",
}


def _base_url(client: ContentSource) -> str:
    return client.config.base_url


def _section(heading: str, inner: str) -> str:
    return f"<section><h2>{text(heading)}</h2>{inner}</section>"


def _rich_block(value: Any) -> str:
    html = rich_text_html(value)
    return f'<div class="prose">{html}</div>' if html else ""


# Data loaders shared by several pages and by the runner.


def unique_announcement_slugs(
    announcements: list[ent.Announcement],
) -> list[ent.Announcement]:
    """Give every announcement its own route.

    The first announcement keeps a shared slug; later ones get ``-<id>``
    appended, or a counter when that is taken or the id is missing.
    """
    reserved = {a.slug for a in announcements}
    seen: set[str] = set()
    result = []
    for announcement in announcements:
        slug = announcement.slug
        if slug in seen:
            counter = 2
            candidate = f"{slug}-{announcement.id}" if announcement.id is not None else ""
            while not candidate or candidate in reserved or candidate in seen:
                candidate = f"{slug}-{counter}"
                counter += 1
            announcement = replace(announcement, slug=candidate)
        seen.add(announcement.slug)
        result.append(announcement)
    return result


async def load_announcements(client: ContentSource) -> list[ent.Announcement]:
    payload = await client.get("/announcements", ANNOUNCEMENTS_QUERY)
    published = [a for a in ent.normalize_announcements(payload, _base_url(client)) if a.published]
    return unique_announcement_slugs(published)


async def load_gallery_albums(client: ContentSource) -> list[ent.GalleryAlbum]:
    payload = await client.get("/gallery-albums", GALLERY_QUERY)
    return ent.normalize_gallery_albums(payload, _base_url(client))


async def load_school_profile(client: ContentSource) -> ent.SchoolProfile | None:
    payload = await client.get("/about-the-school", {"populate": "*"})
    return ent.normalize_school_profile(payload, _base_url(client))


def announcement_route(announcement: ent.Announcement) -> str:
    return f"/announcements/{quote(announcement.slug, safe='')}/"


def announcement_card(announcement: ent.Announcement) -> str:
    parts = [image(announcement.image_url, announcement.title)]
    if announcement.category:
        parts.append(f'<span class="category">{text(announcement.category)}</span>')
    parts.append(f"<h3>{link(announcement_route(announcement), announcement.title or '')}</h3>")
    if announcement.date:
        parts.append(f"<p class=\"date\">{text(format_date(announcement.date))}</p>")
    return f'<article class="card">{"".join(parts)}</article>'


def _cards(items: Iterable[str]) -> str:
    return f'<div class="grid">{"".join(items)}</div>'


def staff_card(member: ent.StaffMember) -> str:
    parts = [image(member.photo_url, member.full_name)]
    parts.append(f"<h3>{text(member.full_name)}</h3>")
    if member.job_title:
        parts.append(f'<p class="role">{text(member.job_title)}</p>')
    parts.append(_rich_block(member.biography))
    if member.email:
        parts.append(f'<p><a href="mailto:{text(member.email)}">{text(member.email)}</a></p>')
    if member.phone:
        parts.append(f"<p>{text(member.phone)}</p>")
    return f'<article class="staff">{"".join(parts)}</article>'


# Pages


async def build_home_page(client: ContentSource) -> Page:
    profile, announcements, albums = await asyncio.gather(
        load_school_profile(client),
        load_announcements(client),
        load_gallery_albums(client),
    )
    hero_images = [album.cover_image_url for album in albums if album.cover_image_url]
    if profile and profile.profile_image_url:
        hero_images.insert(0, profile.profile_image_url)
    slideshow = Slideshow(hero_images)
    name = (profile.name if profile else None) or SITE_NAME
    latest = announcements[:HOME_LATEST_ANNOUNCEMENTS]
    latest_html = (
        _cards([announcement_card(a) for a in latest])
        if latest
        else placeholder(NO_ANNOUNCEMENTS_TEXT)
    )
    body = (
        f'<section class="hero">{slideshow.render()}'
        f"<h1>Welcome to {text(name)}</h1><p>{text(SITE_TAGLINE)}</p></section>"
        f"{_section('Latest Announcements', latest_html)}"
    )
    return Page("/", "Home", body, SITE_TAGLINE)


async def build_about_page(client: ContentSource) -> Page:
    profile = await load_school_profile(client)
    if profile is None:
        return Page("/about/", "About", f"<h1>About Us</h1>{placeholder(NO_PROFILE_TEXT)}")
    name = profile.name or SITE_NAME
    parts = [f"<h1>About {text(name)}</h1>"]
    if profile.established_year:
        parts.append(f"<p>Established in {text(profile.established_year)}</p>")
    parts.append(image(profile.logo_url, f"{name} logo"))
    parts.append(image(profile.profile_image_url, name))
    for heading, value in (
        ("Our History", profile.history),
        ("Our Mission", profile.mission),
        ("Our Vision", profile.vision),
        ("Core Values", profile.core_values),
    ):
        html = rich_text_html(value)
        if html:
            parts.append(_section(heading, html))
    if profile.has_contact:
        contact = []
        for label, value in (
            ("Location", profile.location),
            ("Address", profile.address),
            ("Phone", profile.phone),
            ("Email", profile.email),
        ):
            if value:
                contact.append(f"<p><strong>{label}:</strong> {text(value)}</p>")
        if profile.google_maps_embed_url:
            contact.append(
                f'<iframe src="{text(profile.google_maps_embed_url)}" '
                f'title="Map" loading="lazy"></iframe>'
            )
        parts.append(_section("Contact Us", "".join(contact)))
    return Page("/about/", "About", "".join(parts), f"About {name}")


async def build_admissions_page(client: ContentSource) -> Page:
    page_payload, requirements_payload = await asyncio.gather(
        client.get("/admissions-page", {"populate": "*"}),
        client.get("/admission-requirements", ORDERED_QUERY),
    )
    base_url = _base_url(client)
    admissions = ent.normalize_admissions_page(page_payload, base_url)
    requirements = ent.normalize_requirements(requirements_payload, base_url)
    parts = [f"<h1>{text(admissions.title)}</h1>", _rich_block(admissions.introduction)]
    if requirements:
        req_html = "".join(
            f'<article><h3>{text(req.title)}</h3>{_rich_block(req.description)}</article>'
            for req in requirements
        )
    else:
        req_html = placeholder(NO_REQUIREMENTS_TEXT)
    parts.append(_section("Admission Requirements", req_html))
    if rich_text_html(admissions.process):
        parts.append(_section("Admission Process", _rich_block(admissions.process)))
    if rich_text_html(admissions.contact_info):
        parts.append(_section("Contact Information", _rich_block(admissions.contact_info)))
    return Page(
        "/admissions/",
        "Admissions",
        "".join(parts),
        f"{admissions.title} - Learn about our admission process and requirements.",
    )


async def build_academics_page(client: ContentSource) -> Page:
    pathways_payload, subjects_payload = await asyncio.gather(
        client.get("/cbc-pathways", ORDERED_QUERY),
        client.get("/learning-areas-subjects", ORDERED_QUERY),
    )
    base_url = _base_url(client)
    pathways = ent.normalize_pathways(pathways_payload, base_url)
    subjects = ent.normalize_learning_areas(subjects_payload, base_url)
    pathway_html = (
        _cards(
            f'<article><h3>{text(p.name)}</h3>{_rich_block(p.description)}</article>'
            for p in pathways
        )
        if pathways
        else placeholder(NO_PATHWAYS_TEXT)
    )
    subject_cards = []
    for subject in subjects:
        meta = ""
        if subject.department_name:
            meta += f'<p class="meta">Department: {text(subject.department_name)}</p>'
        if subject.pathway_name:
            meta += f'<p class="meta">Pathway: {text(subject.pathway_name)}</p>'
        subject_cards.append(
            f"<article><h3>{text(subject.name)}</h3>{meta}{_rich_block(subject.description)}</article>"
        )
    subject_html = _cards(subject_cards) if subject_cards else placeholder(NO_SUBJECTS_TEXT)
    body = (
        "<h1>Academics</h1>"
        f"{_section('CBC Pathways', pathway_html)}"
        f"{_section('Learning Areas and Subjects', subject_html)}"
    )
    return Page(
        "/academics/",
        "Academics",
        body,
        "Explore our academic programs, CBC pathways, and learning areas.",
    )


async def build_departments_page(client: ContentSource) -> Page:
    payload = await client.get("/academic-departments", DEPARTMENTS_QUERY)
    departments = ent.normalize_departments(payload, _base_url(client))
    if not departments:
        return Page(
            "/departments/",
            "Departments",
            f"<h1>Academic Departments</h1>{placeholder(NO_DEPARTMENTS_TEXT)}",
        )
    cards = []
    for dept in departments:
        hod_html = ""
        if dept.hod is not None:
            hod_html = (
                '<div class="hod"><h4>Head of Department</h4>'
                f"{image(dept.hod.photo_url, dept.hod.full_name)}"
                f"<p>{text(dept.hod.full_name)}</p>"
                f"<p>{text(dept.hod.job_title)}</p></div>"
            )
        cards.append(
            f"<article><h2>{text(dept.name)}</h2>{_rich_block(dept.description)}{hod_html}</article>"
        )
    return Page(
        "/departments/",
        "Departments",
        f"<h1>Academic Departments</h1>{''.join(cards)}",
        "Our academic departments and their heads.",
    )


async def build_staff_page(client: ContentSource) -> Page:
    payload = await client.get("/staff-categories", STAFF_QUERY)
    categories = [
        category
        for category in ent.normalize_staff_categories(payload, _base_url(client))
        if category.members
    ]
    if not categories:
        body = f"<h1>Our Staff</h1>{placeholder(NO_STAFF_TEXT)}"
    else:
        sections = []
        for category in categories:
            members = _cards([staff_card(member) for member in category.members])
            sections.append(
                f"<section><h2>{text(category.name)}</h2>"
                f"{_rich_block(category.description)}{members}</section>"
            )
        body = f"<h1>Our Staff</h1>{''.join(sections)}"
    return Page(
        "/staff/",
        "Staff",
        body,
        "Meet our dedicated staff members and educators.",
    )


async def build_clubs_page(client: ContentSource) -> Page:
    payload = await client.get("/clubs", CLUBS_QUERY)
    clubs = ent.normalize_clubs(payload, _base_url(client))
    if not clubs:
        return Page("/clubs/", "Clubs", f"<h1>Clubs &amp; Societies</h1>{placeholder(NO_CLUBS_TEXT)}")
    cards = []
    for club in clubs:
        patron = ""
        if club.patron is not None and club.patron.full_name:
            patron = f'<p class="meta">Patron: {text(club.patron.full_name)}</p>'
        cards.append(
            f"<article>{image(club.image_url, club.name)}<h3>{text(club.name)}</h3>"
            f"{patron}{_rich_block(club.description)}</article>"
        )
    return Page("/clubs/", "Clubs", f"<h1>Clubs &amp; Societies</h1>{_cards(cards)}")


def album_route(album: ent.GalleryAlbum) -> str:
    return f"/gallery/{album.id}/"


async def build_gallery_page(client: ContentSource) -> Page:
    albums = await load_gallery_albums(client)
    if not albums:
        return Page("/gallery/", "Gallery", f"<h1>Gallery</h1>{placeholder(NO_GALLERY_TEXT)}")
    cards = []
    for album in albums:
        count = len(album.items)
        noun = "photo" if count == 1 else "photos"
        parts = [image(album.cover_image_url, album.title)]
        parts.append(f"<h3>{link(album_route(album), album.title or 'Untitled album')}</h3>")
        if album.event_date:
            parts.append(f'<p class="date">{text(format_date(album.event_date))}</p>')
        parts.append(f'<p class="meta">{count} {noun}</p>')
        cards.append(f'<article class="card">{"".join(parts)}</article>')
    return Page("/gallery/", "Gallery", f"<h1>Gallery</h1>{_cards(cards)}")


def parse_album_id(album_id: Any) -> int:
    """Return the numeric album id or raise PageNotFoundError."""
    try:
        return int(str(album_id).strip())
    except ValueError:
        raise PageNotFoundError(
            f"Invalid gallery album id {album_id!r}", context={"album_id": album_id}
        ) from None


async def build_album_page(client: ContentSource, album_id: Any) -> Page:
    wanted = parse_album_id(album_id)
    payload = await client.get("/gallery-albums", GALLERY_DETAIL_QUERY)
    album = next(
        (
            item
            for item in ent.normalize_gallery_albums(payload, _base_url(client))
            if item.id == wanted
        ),
        None,
    )
    if album is None:
        raise PageNotFoundError(
            f"Gallery album {wanted} not found", context={"album_id": wanted}
        )
    title = album.title or "Gallery Album"
    parts = [link("/gallery/", "Back to Gallery"), f"<h1>{text(title)}</h1>"]
    if album.event_date:
        parts.append(f'<p class="date">{text(format_date(album.event_date))}</p>')
    parts.append(_rich_block(album.description))
    figures = [
        f"<figure>{image(item.image_url, item.title or item.caption or title)}"
        f"{f'<figcaption>{text(item.caption or item.title)}</figcaption>' if (item.caption or item.title) else ''}"
        "</figure>"
        for item in album.items
        if item.image_url
    ]
    parts.append(_cards(figures) if figures else placeholder(NO_ALBUM_ITEMS_TEXT))
    return Page(album_route(album), title, "".join(parts), f"View photos from {title}")


async def build_announcements_page(client: ContentSource) -> Page:
    announcements = await load_announcements(client)
    if not announcements:
        inner = placeholder(NO_ANNOUNCEMENTS_TEXT)
    else:
        inner = _cards([announcement_card(a) for a in announcements])
    return Page(
        "/announcements/",
        "Announcements",
        f"<h1>Announcements</h1>{inner}",
        "News, notices and events.",
    )


def find_announcement(
    announcements: list[ent.Announcement], slug: str
) -> ent.Announcement | None:
    """Find a published announcement by slug, then by its slugified title.

    An exact slug match anywhere in the list wins over a title match.
    """
    published = [a for a in announcements if a.published]
    for announcement in published:
        if announcement.slug == slug:
            return announcement
    for announcement in published:
        if announcement.title and slugify(announcement.title) == slug:
            return announcement
    return None


async def fetch_announcement(client: ContentSource, slug: str) -> ent.Announcement | None:
    """Resolve an announcement for a detail route.

    ``announcement-<id>`` slugs are first fetched by id, and the record is
    used only when its own slug is that same generated slug. Everything
    else is matched against the published listing.
    """
    prefix = f"{ANNOUNCEMENT_SLUG_PREFIX}-"
    if slug.startswith(prefix) and slug[len(prefix):].isdigit():
        payload = await client.get(f"/announcements/{slug[len(prefix):]}", {"populate": "*"})
        records = unwrap_collection(payload)
        found = ent.normalize_announcement(records[0], _base_url(client)) if records else None
        if found is not None and found.published and found.slug == slug:
            return found
    return find_announcement(await load_announcements(client), slug)


def render_announcement_page(announcement: ent.Announcement) -> Page:
    title = announcement.title or "Announcement"
    parts = [link("/announcements/", "Back to Announcements")]
    if announcement.category:
        parts.append(f'<span class="category">{text(announcement.category)}</span>')
    parts.append(f"<h1>{text(title)}</h1>")
    if announcement.date:
        parts.append(f'<p class="date">{text(format_date(announcement.date))}</p>')
    parts.append(image(announcement.image_url, title))
    parts.append(_rich_block(announcement.content))
    return Page(announcement_route(announcement), title, "".join(parts), title)


async def build_announcement_page(client: ContentSource, slug: str) -> Page:
    if is_missing_slug(slug):
        raise PageNotFoundError("Announcement slug is empty", context={"slug": slug})
    slug = slug.strip()
    announcement = await fetch_announcement(client, slug)
    if announcement is None:
        raise PageNotFoundError(
            f"Announcement '{slug}' not found", context={"slug": slug}
        )
    return render_announcement_page(announcement)


def search_announcements(
    announcements: list[ent.Announcement], query: str
) -> list[ent.Announcement]:
    """Case-insensitive substring match on title and category."""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [
        a
        for a in announcements
        if needle in (a.title or "").lower() or needle in (a.category or "").lower()
    ]


async def build_search_page(client: ContentSource, query: str = "") -> Page:
    form = (
        '<form action="/search/" method="get">'
        f'<input type="search" name="q" value="{text(query)}" '
        'placeholder="Search announcements"><button type="submit">Search</button></form>'
    )
    if not (query or "").strip():
        return Page("/search/", "Search", f"<h1>Search</h1>{form}{placeholder(NO_SEARCH_QUERY_TEXT)}")
    results = search_announcements(await load_announcements(client), query)
    if results:
        inner = _cards([announcement_card(a) for a in results])
    else:
        inner = placeholder(NO_SEARCH_RESULTS_FORMAT.format(query=query))
    body = (
        f"<h1>Search</h1>{form}"
        f"<h2>Search Results for &quot;{text(query)}&quot;</h2>{inner}"
    )
    return Page("/search/", "Search", body)


async def build_downloads_page(client: ContentSource) -> Page:
    payload = await client.get("/downloads", {"populate": "*"})
    downloads = ent.normalize_downloads(payload, _base_url(client))
    if not downloads:
        downloads = [
            ent.Download(None, item["title"], item["description"], item["url"])
            for item in DEFAULT_DOWNLOADS
        ]
    items = "".join(
        f"<li><h3>{text(doc.title)}</h3>"
        f"{f'<p>{text(doc.description)}</p>' if doc.description else ''}"
        f'<a href="{text(doc.file_url)}" download>Download</a></li>'
        for doc in downloads
    )
    return Page(
        "/downloads/",
        "Downloads",
        f"<h1>Downloads</h1><h2>Downloadable Documents</h2><ul>{items}</ul>",
        "Download important documents such as Fees Structure, Tenders, and other PDFs.",
    )


# Listing pages in build order; detail pages are added by the runner.
STATIC_PAGES = (
    build_home_page,
    build_about_page,
    build_admissions_page,
    build_academics_page,
    build_departments_page,
    build_staff_page,
    build_clubs_page,
    build_gallery_page,
    build_announcements_page,
    build_search_page,
    build_downloads_page,
)
