"""
Browser Module

Provides the shared Playwright browser, per-request pages and the
portal site adapter used by the automation workflows.
"""

from .pages import is_visible_within, open_page
from .provider import BrowserSessionProvider, create_provider
from .site import ExportControls, LegacyPortalSite, SiteAdapter, create_site

__all__ = [
    "BrowserSessionProvider",
    "create_provider",
    "open_page",
    "is_visible_within",
    "SiteAdapter",
    "LegacyPortalSite",
    "ExportControls",
    "create_site",
]
