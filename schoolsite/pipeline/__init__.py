"""Headless build pipeline: fetch (``cms_client``), normalize (``content``), render (``site_builder``)."""
