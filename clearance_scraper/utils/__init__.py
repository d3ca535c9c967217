"""Utils package initialization."""
from clearance_scraper.utils.logger import get_logger, LayerLogger, set_trace_id, get_trace_id, store_context
from clearance_scraper.utils.pricing import (
    parse_price,
    extract_prices_from_text,
    compute_discount_pct,
    meets_discount_threshold,
)
from clearance_scraper.utils.urls import resolve_url, strip_tracking_params

__all__ = [
    "get_logger",
    "LayerLogger",
    "set_trace_id",
    "get_trace_id",
    "store_context",
    "parse_price",
    "extract_prices_from_text",
    "compute_discount_pct",
    "meets_discount_threshold",
    "resolve_url",
    "strip_tracking_params",
]
