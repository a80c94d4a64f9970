"""School website build package.

This package turns structured content from a Strapi headless CMS into a
static website for a secondary school (About, Admissions, Academics, Staff,
Departments, Clubs, Gallery, Announcements, Downloads, Search).

Package Structure
-----------------
- `pipeline/cms_client/`:
    Explicit CMS configuration, the asynchronous read-only REST client, the
    Strapi query encoder and the fetch result/error policy types.
- `pipeline/content/`:
    Normalization of flat and nested CMS records into canonical entities,
    media URL and slug resolution, and the rich-text block renderer.
- `pipeline/site_builder/`:
    Page components, HTML helpers, hero slideshow state, the concurrent
    build runner and the CLI.
- `config.py`: All configuration constants as UPPER_SNAKE_CASE.
- `exceptions.py`: The project-specific exception hierarchy.

Examples
--------
>>> from schoolsite.pipeline.site_builder import run_from_config
>>> # run_from_config() builds ./output/site from the configured CMS.
"""
