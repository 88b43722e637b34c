"""
URL and outlet-name normalization utilities
"""

from __future__ import annotations
import re
import urllib.parse as _up

# scheme://host.tld with no whitespace anywhere
_HOST_WITH_TLD = re.compile(r"^[^\s.:/@]+(\.[^\s.:/@]+)+$")


def is_well_formed_url(url: str) -> bool:
    """Basic ``scheme://host.tld`` shape check. No network."""
    u = (url or "").strip()
    if not u or any(ch.isspace() for ch in u):
        return False
    try:
        p = _up.urlparse(u)
        host = p.hostname or ""
    except ValueError:
        return False
    if p.scheme.lower() not in ("http", "https"):
        return False
    return bool(_HOST_WITH_TLD.match(host))


def url_key(url: str) -> str:
    """Identity key for a source URL ('' when absent)."""
    return (url or "").strip().lower()


def name_key(outlet_name: str) -> str:
    """Identity key for an outlet name ('' when absent)."""
    return (outlet_name or "").strip().lower()


def url_quality(url: str) -> int:
    """Rank URLs for merge decisions: well formed > non-empty > empty."""
    if is_well_formed_url(url):
        return 2
    return 1 if (url or "").strip() else 0


def is_url_query(text: str) -> bool:
    """True when a user query is itself a link to analyze."""
    return bool(re.match(r"^https?://", (text or "").strip(), re.I))
