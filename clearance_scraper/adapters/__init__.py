"""Adapters package initialization."""
from clearance_scraper.adapters.dom_tiles import DOMTileExtractor, PageSnapshot
from clearance_scraper.adapters.capture_buffer import CaptureBuffer
from clearance_scraper.adapters.network_capture import NetworkCaptureReconciler

__all__ = ["DOMTileExtractor", "PageSnapshot", "CaptureBuffer", "NetworkCaptureReconciler"]
