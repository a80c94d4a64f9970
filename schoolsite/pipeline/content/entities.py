"""Canonical content entities and their normalizers.

Each CMS content type has one dataclass with flat fields and one
``normalize_<entity>`` function that accepts a raw record of any shape
(flat, nested, ``None``, garbage) plus the media base URL. Collection
variants take a whole ``{data: [...]}`` payload. Normalizers never raise:
missing or malformed data degrades to ``None`` fields or empty lists, and
records that are not objects are skipped.

Rich-text fields (``description``, ``biography``, ``content``...) keep the
raw block list, or markdown string, for the renderer to turn into HTML.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from schoolsite.config import ANNOUNCEMENT_SLUG_PREFIX, DEFAULT_ORDER_HINT

from .media import media_url, resolve_media_url
from .records import (
    FlatRecord,
    NestedRecord,
    Record,
    classify_record,
    unwrap_collection,
    unwrap_relation,
    unwrap_relation_list,
    unwrap_single,
)
from .slugs import normalize_slug

logger = logging.getLogger(__name__)

RichText = Any  # block list, markdown string, or None


def _rich(record: Record, *names: str) -> RichText:
    value = record.get(*names)
    if isinstance(value, (list, str)) and value:
        return value
    return None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def sort_by_order(items: list[Any]) -> list[Any]:
    """Stable sort on the ``order`` hint; a missing hint sorts as 999."""
    return sorted(
        items,
        key=lambda item: item.order if item.order is not None else DEFAULT_ORDER_HINT,
    )


@dataclass
class SchoolProfile:
    name: str | None = None
    history: RichText = None
    mission: RichText = None
    vision: RichText = None
    core_values: RichText = None
    established_year: str | None = None
    logo_url: str | None = None
    profile_image_url: str | None = None
    location: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    google_maps_embed_url: str | None = None

    @property
    def has_contact(self) -> bool:
        return any(
            (
                self.location,
                self.address,
                self.phone,
                self.email,
                self.google_maps_embed_url,
            )
        )


@dataclass
class Announcement:
    id: int | None
    title: str | None
    slug: str
    date: str | None = None
    category: str | None = None
    image_url: str | None = None
    published: bool = True
    content: RichText = None


@dataclass
class GalleryItem:
    id: int | None
    title: str | None = None
    caption: str | None = None
    image_url: str | None = None
    order: int | None = None


@dataclass
class GalleryAlbum:
    id: int | None
    title: str | None
    description: RichText = None
    cover_image_url: str | None = None
    event_date: str | None = None
    order: int | None = None
    items: list[GalleryItem] = field(default_factory=list)


@dataclass
class StaffMember:
    id: int | None
    full_name: str | None
    job_title: str | None = None
    photo_url: str | None = None
    biography: RichText = None
    email: str | None = None
    phone: str | None = None
    order: int | None = None


@dataclass
class StaffCategory:
    id: int | None
    name: str | None
    description: RichText = None
    members: list[StaffMember] = field(default_factory=list)


@dataclass
class AcademicDepartment:
    id: int | None
    name: str | None
    description: RichText = None
    hod: StaffMember | None = None
    order: int | None = None


@dataclass
class CbcPathway:
    id: int | None
    name: str | None
    description: RichText = None
    order: int | None = None


@dataclass
class LearningArea:
    id: int | None
    name: str | None
    description: RichText = None
    department_name: str | None = None
    pathway_name: str | None = None
    order: int | None = None


@dataclass
class AdmissionsPage:
    title: str = "Admissions"
    introduction: RichText = None
    process: RichText = None
    contact_info: RichText = None


@dataclass
class AdmissionRequirement:
    id: int | None
    title: str | None
    description: RichText = None
    order: int | None = None


@dataclass
class Club:
    id: int | None
    name: str | None
    description: RichText = None
    image_url: str | None = None
    patron: StaffMember | None = None
    order: int | None = None


@dataclass
class Download:
    id: int | None
    title: str | None
    description: str | None = None
    file_url: str | None = None


def _record(raw: Any) -> Record | None:
    if isinstance(raw, (FlatRecord, NestedRecord)):
        return raw
    return classify_record(raw)


def normalize_school_profile(payload: Any, base_url: str) -> SchoolProfile | None:
    """Normalize the ``/about-the-school`` single type."""
    record = unwrap_single(payload)
    if record is None:
        return None
    return SchoolProfile(
        name=record.text("School_name", "school_name", "name"),
        history=_rich(record, "history"),
        mission=_rich(record, "mission"),
        vision=_rich(record, "vision"),
        core_values=_rich(record, "core_values"),
        established_year=record.text("established_year"),
        logo_url=media_url(record.get("logo"), base_url),
        profile_image_url=media_url(record.get("profile_image"), base_url),
        location=record.text("location"),
        address=record.text("address"),
        phone=record.text("phone"),
        email=record.text("email"),
        google_maps_embed_url=record.text("google_maps_embed_url"),
    )


def normalize_announcement(raw: Any, base_url: str) -> Announcement | None:
    """Normalize one announcement, regenerating a missing slug."""
    record = _record(raw)
    if record is None:
        return None
    title = record.text("Title", "title")
    slug = normalize_slug(
        record.get("Slug", "slug"), title, record.id, ANNOUNCEMENT_SLUG_PREFIX
    )
    return Announcement(
        id=record.id,
        title=title,
        slug=slug,
        date=record.text("Date", "date"),
        category=record.text("Category", "category"),
        image_url=media_url(record.get("Image", "image"), base_url),
        published=_as_bool(record.get("Published", "published"), True),
        content=_rich(record, "Content", "content"),
    )


def normalize_gallery_item(raw: Any, base_url: str) -> GalleryItem | None:
    record = _record(raw)
    if record is None:
        return None
    return GalleryItem(
        id=record.id,
        title=record.text("title"),
        caption=record.text("caption"),
        image_url=media_url(record.get("image"), base_url),
        order=record.number("order"),
    )


def normalize_gallery_album(raw: Any, base_url: str) -> GalleryAlbum | None:
    record = _record(raw)
    if record is None:
        return None
    items = [
        item
        for item in (
            normalize_gallery_item(rel, base_url)
            for rel in unwrap_relation_list(record.get("gallery_items"))
        )
        if item is not None
    ]
    return GalleryAlbum(
        id=record.id,
        title=record.text("title"),
        description=_rich(record, "description"),
        cover_image_url=media_url(record.get("cover_image"), base_url),
        event_date=record.text("event_date"),
        order=record.number("order"),
        items=sort_by_order(items),
    )


def normalize_staff_member(raw: Any, base_url: str) -> StaffMember | None:
    record = _record(raw)
    if record is None:
        return None
    return StaffMember(
        id=record.id,
        full_name=record.text("full_name", "name"),
        job_title=record.text("job_title"),
        photo_url=media_url(record.get("photo"), base_url),
        biography=_rich(record, "biography"),
        email=record.text("email"),
        phone=record.text("phone"),
        order=record.number("order"),
    )


def normalize_staff_category(raw: Any, base_url: str) -> StaffCategory | None:
    record = _record(raw)
    if record is None:
        return None
    members = [
        member
        for member in (
            normalize_staff_member(rel, base_url)
            for rel in unwrap_relation_list(record.get("staff_members"))
        )
        if member is not None
    ]
    return StaffCategory(
        id=record.id,
        name=record.text("name"),
        description=_rich(record, "description"),
        members=sort_by_order(members),
    )


def _relation_member(value: Any, base_url: str) -> StaffMember | None:
    related = unwrap_relation(value)
    return normalize_staff_member(related, base_url) if related else None


def _relation_name(value: Any) -> str | None:
    related = unwrap_relation(value)
    return related.text("name", "title") if related else None


def normalize_department(raw: Any, base_url: str) -> AcademicDepartment | None:
    record = _record(raw)
    if record is None:
        return None
    return AcademicDepartment(
        id=record.id,
        name=record.text("name"),
        description=_rich(record, "description"),
        hod=_relation_member(record.get("hod"), base_url),
        order=record.number("order"),
    )


def normalize_pathway(raw: Any, base_url: str) -> CbcPathway | None:
    record = _record(raw)
    if record is None:
        return None
    return CbcPathway(
        id=record.id,
        name=record.text("name"),
        description=_rich(record, "description"),
        order=record.number("order"),
    )


def normalize_learning_area(raw: Any, base_url: str) -> LearningArea | None:
    record = _record(raw)
    if record is None:
        return None
    return LearningArea(
        id=record.id,
        name=record.text("name"),
        description=_rich(record, "description"),
        department_name=_relation_name(record.get("department")),
        pathway_name=_relation_name(record.get("pathway")),
        order=record.number("order"),
    )


def normalize_admissions_page(payload: Any, base_url: str) -> AdmissionsPage:
    """Normalize the admissions single type; defaults when absent."""
    record = unwrap_single(payload)
    if record is None:
        return AdmissionsPage()
    return AdmissionsPage(
        title=record.text("title") or AdmissionsPage.title,
        introduction=_rich(record, "introduction"),
        process=_rich(record, "process"),
        contact_info=_rich(record, "contact_info"),
    )


def normalize_requirement(raw: Any, base_url: str) -> AdmissionRequirement | None:
    record = _record(raw)
    if record is None:
        return None
    return AdmissionRequirement(
        id=record.id,
        title=record.text("title"),
        description=_rich(record, "description"),
        order=record.number("order"),
    )


def normalize_club(raw: Any, base_url: str) -> Club | None:
    record = _record(raw)
    if record is None:
        return None
    return Club(
        id=record.id,
        name=record.text("name"),
        description=_rich(record, "description"),
        image_url=media_url(record.get("image", "logo"), base_url),
        patron=_relation_member(record.get("patron"), base_url),
        order=record.number("order"),
    )


def normalize_download(raw: Any, base_url: str) -> Download | None:
    record = _record(raw)
    if record is None:
        return None
    return Download(
        id=record.id,
        title=record.text("title", "Title"),
        description=record.text("description"),
        file_url=media_url(record.get("file", "document"), base_url)
        or resolve_media_url(record.text("url"), base_url),
    )


def _collection(payload: Any, normalizer, base_url: str) -> list[Any]:
    results = []
    for record in unwrap_collection(payload):
        item = normalizer(record, base_url)
        if item is None:
            logger.debug("Skipped unreadable %s record", normalizer.__name__)
            continue
        results.append(item)
    return results


def normalize_announcements(payload: Any, base_url: str) -> list[Announcement]:
    return _collection(payload, normalize_announcement, base_url)


def normalize_gallery_albums(payload: Any, base_url: str) -> list[GalleryAlbum]:
    return _collection(payload, normalize_gallery_album, base_url)


def normalize_staff_categories(payload: Any, base_url: str) -> list[StaffCategory]:
    return _collection(payload, normalize_staff_category, base_url)


def normalize_departments(payload: Any, base_url: str) -> list[AcademicDepartment]:
    return sort_by_order(_collection(payload, normalize_department, base_url))


def normalize_pathways(payload: Any, base_url: str) -> list[CbcPathway]:
    return sort_by_order(_collection(payload, normalize_pathway, base_url))


def normalize_learning_areas(payload: Any, base_url: str) -> list[LearningArea]:
    return sort_by_order(_collection(payload, normalize_learning_area, base_url))


def normalize_requirements(payload: Any, base_url: str) -> list[AdmissionRequirement]:
    """Requirements without a title are dropped."""
    requirements = _collection(payload, normalize_requirement, base_url)
    return sort_by_order([req for req in requirements if req.title])


def normalize_clubs(payload: Any, base_url: str) -> list[Club]:
    return sort_by_order(_collection(payload, normalize_club, base_url))


def normalize_downloads(payload: Any, base_url: str) -> list[Download]:
    return [d for d in _collection(payload, normalize_download, base_url) if d.file_url]
