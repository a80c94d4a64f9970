"""Content normalization and rich-text rendering.

Turns raw CMS payloads of any supported shape into canonical entity
dataclasses (``entities``), resolving records (``records``), media
(``media``) and slugs (``slugs``) along the way, and renders Strapi rich
text blocks to HTML (``blocks``). Nothing here performs I/O.
"""

from .blocks import iter_blocks, render_blocks
from .entities import (
    AcademicDepartment,
    AdmissionRequirement,
    AdmissionsPage,
    Announcement,
    CbcPathway,
    Club,
    Download,
    GalleryAlbum,
    GalleryItem,
    LearningArea,
    SchoolProfile,
    StaffCategory,
    StaffMember,
    normalize_admissions_page,
    normalize_announcement,
    normalize_announcements,
    normalize_clubs,
    normalize_departments,
    normalize_downloads,
    normalize_gallery_album,
    normalize_gallery_albums,
    normalize_learning_areas,
    normalize_pathways,
    normalize_requirements,
    normalize_school_profile,
    normalize_staff_categories,
)
from .media import extract_media_path, media_url, resolve_media_url
from .records import FlatRecord, NestedRecord, classify_record, unwrap_collection
from .slugs import normalize_slug, slugify

__all__ = [
    "AcademicDepartment",
    "AdmissionRequirement",
    "AdmissionsPage",
    "Announcement",
    "CbcPathway",
    "Club",
    "Download",
    "FlatRecord",
    "GalleryAlbum",
    "GalleryItem",
    "LearningArea",
    "NestedRecord",
    "SchoolProfile",
    "StaffCategory",
    "StaffMember",
    "classify_record",
    "extract_media_path",
    "iter_blocks",
    "media_url",
    "normalize_admissions_page",
    "normalize_announcement",
    "normalize_announcements",
    "normalize_clubs",
    "normalize_departments",
    "normalize_downloads",
    "normalize_gallery_album",
    "normalize_gallery_albums",
    "normalize_learning_areas",
    "normalize_pathways",
    "normalize_requirements",
    "normalize_school_profile",
    "normalize_slug",
    "normalize_staff_categories",
    "render_blocks",
    "resolve_media_url",
    "slugify",
    "unwrap_collection",
]
