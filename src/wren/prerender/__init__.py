"""Prerender lookup: which paths have static HTML, and what it contains."""

from wren.prerender.cache import CacheEntry, PrerenderCache
from wren.prerender.lookup import PrerenderLookup, read_html

__all__ = ["CacheEntry", "PrerenderCache", "PrerenderLookup", "read_html"]
