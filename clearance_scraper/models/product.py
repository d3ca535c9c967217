"""
Product models for the Clearance Extraction Engine.
Every extraction path (DOM tiles or captured network JSON) converges on these
shapes so downstream consumers never need to know which source produced a
record.
"""
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

from clearance_scraper.models.capture import CaptureSelection


class SourceType(str, Enum):
    """Source that produced an extraction result."""
    DOM_TILES = "dom_tiles"
    NETWORK_CAPTURE = "network_capture"
    NONE = "none"


class RawTileData(BaseModel):
    """Text and attributes read from one DOM tile, before normalization."""
    name: str = ""
    url: str = ""
    image: str = ""
    sku: str = ""
    regular_price_text: str = ""
    sale_price_text: str = ""


class Product(BaseModel):
    """
    Canonical clearance product record.

    Constructed once per unique source record and never mutated; the absolute
    ``url`` is the deduplication key.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    image: str = ""
    sku: str = ""
    regular_price: Optional[float] = Field(default=None, alias="regularPrice")
    sale_price: Optional[float] = Field(default=None, alias="salePrice")
    discount_pct: Optional[int] = Field(default=None, ge=0, le=100, alias="discountPct")


class ExtractionResult(BaseModel):
    """
    Outcome of one extraction pass over a store page.

    This is the contract handed to the caller: it carries the counters needed
    for the telemetry line without exposing extractor internals.
    """
    model_config = ConfigDict(populate_by_name=True)

    source: SourceType = SourceType.NONE
    tiles_count: int = Field(default=0, ge=0, alias="tiles")
    parsed_count: int = Field(default=0, ge=0, alias="parsedCount")
    kept_count: int = Field(default=0, ge=0, alias="keptCount")
    products: List[Product] = Field(default_factory=list)
    selected_capture: Optional[CaptureSelection] = Field(default=None, alias="selectedCapture")
    elapsed_ms: Optional[int] = Field(default=None, alias="ms")

    @classmethod
    def empty(cls) -> "ExtractionResult":
        """A legitimate "no data" result."""
        return cls(source=SourceType.NONE)

    @property
    def is_empty(self) -> bool:
        return not self.products
