"""URL helpers shared by the DOM and network extraction paths."""
from typing import Optional
from urllib.parse import urljoin, urlparse

TRACKING_PREFIXES = ["utm_", "fbclid", "gclid", "msclkid", "icid", "cm_", "_ga"]


def strip_tracking_params(url: str) -> str:
    """Strip tracking parameters and fragments from URL."""
    # Remove fragment
    if "#" in url:
        url = url.split("#")[0]

    # Remove common tracking parameters
    if "?" in url:
        base, query = url.split("?", 1)
        params = [p for p in query.split("&") if p]
        clean_params = []
        for param in params:
            key = param.split("=")[0].lower()
            if not any(key.startswith(p) for p in TRACKING_PREFIXES):
                clean_params.append(param)
        if clean_params:
            url = base + "?" + "&".join(clean_params)
        else:
            url = base

    return url


def resolve_url(raw: Optional[str], base_url: str) -> str:
    """
    Resolve ``raw`` to an absolute http(s) URL against ``base_url``.

    Returns an empty string for missing values and for schemes that do not
    identify a product page (javascript:, mailto:, ...).
    """
    if raw is None:
        return ""
    raw = str(raw).strip()
    if not raw:
        return ""

    absolute = urljoin(base_url, raw)
    if urlparse(absolute).scheme not in ("http", "https"):
        return ""
    return strip_tracking_params(absolute)
