"""Global configuration constants for the project.

Defines CMS defaults, paths, filenames and placeholder strings used across
the site build pipeline.
"""

from __future__ import annotations

from pathlib import Path

# Project directories
PACKAGE_DIR: Path = Path(__file__).resolve().parent
PROJECT_ROOT: Path = PACKAGE_DIR.parent
LOG_DIR: Path = PROJECT_ROOT / "logs"
TEMPLATES_DIR: Path = PACKAGE_DIR / "templates"

# CMS connection defaults
DEFAULT_CMS_URL: str = "http://localhost:1337"
CMS_API_PREFIX: str = "/api"
DEFAULT_REQUEST_TIMEOUT: float = 15.0
DEFAULT_REVALIDATE_SECONDS: float = 60.0
DEFAULT_MAX_CONCURRENT_REQUESTS: int = 8
DEFAULT_TARGET_RPM: int = 600
SITE_MODE_PRODUCTION: str = "production"
SITE_MODE_DEVELOPMENT: str = "development"
SITE_MODES: tuple[str, ...] = (SITE_MODE_PRODUCTION, SITE_MODE_DEVELOPMENT)

# Normalization defaults
DEFAULT_ORDER_HINT: int = 999
MISSING_SLUG_VALUES: frozenset[str] = frozenset({"null", "undefined"})
ANNOUNCEMENT_SLUG_PREFIX: str = "announcement"

# Site content
SITE_NAME: str = "State House Boys High School"
SITE_TAGLINE: str = (
    "A national boys' school committed to academic excellence, discipline, "
    "innovation, and holistic development under the CBC curriculum."
)
HOME_LATEST_ANNOUNCEMENTS: int = 3
SLIDESHOW_INTERVAL_SECONDS: float = 5.0
DEFAULT_DOWNLOADS: list[dict[str, str]] = [
    {
        "title": "Fees Structure",
        "url": "/pdfs/fees-structure.pdf",
        "description": "Current school fees structure.",
    },
    {
        "title": "Tenders",
        "url": "/pdfs/tenders.pdf",
        "description": "Open tenders and procurement documents.",
    },
]

# Placeholder messages shown when the CMS returns nothing
NO_ANNOUNCEMENTS_TEXT: str = "No announcements at this time."
NO_STAFF_TEXT: str = "Staff information coming soon."
NO_DEPARTMENTS_TEXT: str = "Department information coming soon."
NO_GALLERY_TEXT: str = "No gallery albums available yet."
NO_ALBUM_ITEMS_TEXT: str = "No photos in this album yet."
NO_PATHWAYS_TEXT: str = "Pathway information coming soon."
NO_SUBJECTS_TEXT: str = "Learning area information coming soon."
NO_REQUIREMENTS_TEXT: str = "No requirements listed at this time."
NO_CLUBS_TEXT: str = "Club information coming soon."
NO_PROFILE_TEXT: str = "School information coming soon."
NO_SEARCH_QUERY_TEXT: str = "Enter a search term to find announcements."
NO_SEARCH_RESULTS_FORMAT: str = 'No results found for "{query}".'

# Website generation
PAGE_TEMPLATE_PATH: Path = TEMPLATES_DIR / "page.html"
DEFAULT_OUTPUT_DIR: Path = PROJECT_ROOT / "output" / "site"
NOT_FOUND_HTML: str = "<h1>Page not found</h1><p>The page you requested does not exist.</p>"

# CLI defaults and logging
LOG_FILENAME_SITE_BUILDER: str = "site_builder.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
