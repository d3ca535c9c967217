"""
Errors raised by the Clearance Extraction Engine.

Malformed fields never raise; only a broken collaborator contract (an input
that cannot be read at all) propagates out of the engine.
"""


class EngineError(Exception):
    """Base class for engine failures."""


class SnapshotUnavailableError(EngineError):
    """The rendered page snapshot could not be read (closed page, no HTML)."""

    def __init__(self, message: str, page_url: str = ""):
        super().__init__(message)
        self.page_url = page_url
