"""Models package initialization."""
from clearance_scraper.models.capture import CapturedResponse, CandidateArray, CaptureSelection
from clearance_scraper.models.product import RawTileData, Product, ExtractionResult, SourceType

__all__ = [
    "CapturedResponse",
    "CandidateArray",
    "CaptureSelection",
    "RawTileData",
    "Product",
    "ExtractionResult",
    "SourceType",
]
