"""Layers package initialization."""
from clearance_scraper.layers.arbitration import ExtractionEngine
from clearance_scraper.layers.telemetry import StoreSummary

__all__ = [
    "ExtractionEngine",
    "StoreSummary",
]
