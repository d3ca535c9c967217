"""
Models for intercepted network responses and the product arrays found in them.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class CapturedResponse(BaseModel):
    """One network response retained during page load."""
    model_config = ConfigDict(frozen=True)

    url: str
    content_type: str = ""
    status: Optional[int] = None
    resource_type: str = ""
    body: str = ""
    json_body: Optional[Any] = None
    body_bytes: int = Field(default=0, ge=0)

    @property
    def has_json(self) -> bool:
        return self.json_body is not None


class CandidateArray(BaseModel):
    """
    A JSON array of object-shaped entries found while walking a payload.

    ``path`` is the dotted key path from the payload root ("$" for a bare
    top-level array); ``key`` is its last key segment.
    """
    source_url: str
    path: str
    key: str
    length: int = Field(ge=1)
    depth: int = Field(default=0, ge=0)
    well_known: bool = False
    capture_index: int = 0
    entries: list = Field(default_factory=list, repr=False)

    def to_selection(self) -> "CaptureSelection":
        return CaptureSelection(
            url=self.source_url,
            path=self.path,
            length=self.length,
            well_known=self.well_known,
        )


class CaptureSelection(BaseModel):
    """Diagnostic describing which capture the reconciler trusted."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    path: str
    length: int
    well_known: bool = Field(default=False, alias="wellKnown")
