"""
Bounded buffer of intercepted network responses.

The browser layer owns one buffer per page load and feeds it from its response
handler; the engine only reads the retained captures. Only catalog-like
responses of a plausible size are kept, up to a fixed count.
"""
import json
import re
import threading
from typing import Any, Optional, Pattern, Tuple, Union

from clearance_scraper.config import config
from clearance_scraper.models.capture import CapturedResponse
from clearance_scraper.utils.logger import LayerLogger

CAPTURED_RESOURCE_TYPES = ("xhr", "fetch", "document")


class CaptureBuffer:
    """
    Append-only, size-capped collection of CapturedResponse records.

    ``offer`` may be called from event callbacks on any thread; appends are
    serialized by a lock.
    """

    def __init__(
        self,
        max_captures: Optional[int] = None,
        min_body_bytes: Optional[int] = None,
        max_body_bytes: Optional[int] = None,
        url_pattern: Union[str, Pattern, None] = None,
    ):
        self.max_captures = config.MAX_CAPTURES if max_captures is None else max_captures
        self.min_body_bytes = config.MIN_BODY_BYTES if min_body_bytes is None else min_body_bytes
        self.max_body_bytes = config.MAX_BODY_BYTES if max_body_bytes is None else max_body_bytes

        pattern = config.CAPTURE_URL_PATTERN if url_pattern is None else url_pattern
        self.url_pattern = re.compile(pattern, re.I) if isinstance(pattern, str) else pattern

        self._captures: list = []
        self._lock = threading.Lock()
        self.rejected_count = 0
        self.logger = LayerLogger("capture_buffer")

    def __len__(self) -> int:
        return len(self._captures)

    def __iter__(self):
        return iter(self.captures())

    @property
    def is_full(self) -> bool:
        return len(self._captures) >= self.max_captures

    def _count_rejection(self):
        with self._lock:
            self.rejected_count += 1

    def captures(self) -> Tuple[CapturedResponse, ...]:
        """Snapshot of the retained captures in arrival order."""
        with self._lock:
            return tuple(self._captures)

    def _rejection_reason(self, url: str, resource_type: str, body_bytes: int) -> Optional[str]:
        if not self.url_pattern.search(url or ""):
            return "url_not_relevant"
        if resource_type and resource_type.lower() not in CAPTURED_RESOURCE_TYPES:
            return "resource_type_ignored"
        if body_bytes < self.min_body_bytes:
            return "body_too_small"
        if body_bytes > self.max_body_bytes:
            return "body_too_large"
        return None

    def offer(
        self,
        url: str,
        body: Union[str, bytes, None],
        content_type: str = "",
        status: Optional[int] = None,
        resource_type: str = "",
    ) -> Optional[CapturedResponse]:
        """
        Retain a response if it passes the relevance and size filters.

        Returns the stored record, or None when the response was rejected.
        """
        if isinstance(body, bytes):
            raw_bytes = body
            text = body.decode("utf-8", errors="replace")
        else:
            text = body or ""
            raw_bytes = text.encode("utf-8")

        reason = self._rejection_reason(url, resource_type, len(raw_bytes))
        if reason:
            self._count_rejection()
            self.logger.log_capture(url, status, "rejected", reason=reason, body_bytes=len(raw_bytes))
            return None

        capture = CapturedResponse(
            url=url,
            content_type=content_type or "",
            status=status,
            resource_type=(resource_type or "").lower(),
            body=text,
            json_body=self._parse_json(text, content_type),
            body_bytes=len(raw_bytes),
        )

        with self._lock:
            if len(self._captures) >= self.max_captures:
                self.rejected_count += 1
                self.logger.log_capture(url, status, "rejected", reason="buffer_full")
                return None
            self._captures.append(capture)

        self.logger.log_capture(
            url, status, "retained",
            body_bytes=capture.body_bytes,
            has_json=capture.has_json,
        )
        return capture

    async def capture(self, response: Any) -> Optional[CapturedResponse]:
        """
        Offer a Playwright-style response object.

        Reads ``url``, ``status``, ``headers``, ``request.resource_type`` and
        ``await text()``. Cheap filters run before the body is read; a body
        that cannot be read (redirects, evicted buffers) is skipped.
        """
        url = response.url
        headers = response.headers or {}
        content_type = headers.get("content-type", "")
        request = getattr(response, "request", None)
        resource_type = getattr(request, "resource_type", "") or ""

        if self.is_full or not self.url_pattern.search(url or ""):
            self._count_rejection()
            return None

        try:
            body = await response.text()
        except Exception as e:
            self._count_rejection()
            self.logger.log_capture(url, response.status, "unreadable", error=str(e))
            return None

        return self.offer(
            url=url,
            body=body,
            content_type=content_type,
            status=response.status,
            resource_type=resource_type,
        )

    @staticmethod
    def _parse_json(text: str, content_type: str) -> Optional[Any]:
        if "json" not in (content_type or "").lower():
            return None
        try:
            return json.loads(text)
        except (ValueError, RecursionError):
            return None
