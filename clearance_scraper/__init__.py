"""Clearance Extraction Engine: normalized 50%+ clearance listings from DOM tiles and captured JSON."""
from clearance_scraper.adapters import CaptureBuffer, DOMTileExtractor, NetworkCaptureReconciler, PageSnapshot
from clearance_scraper.exceptions import EngineError, SnapshotUnavailableError
from clearance_scraper.layers import ExtractionEngine, StoreSummary
from clearance_scraper.models import CapturedResponse, ExtractionResult, Product

__all__ = [
    "CaptureBuffer",
    "DOMTileExtractor",
    "NetworkCaptureReconciler",
    "PageSnapshot",
    "EngineError",
    "SnapshotUnavailableError",
    "ExtractionEngine",
    "StoreSummary",
    "CapturedResponse",
    "ExtractionResult",
    "Product",
]
