import asyncio
import json
import threading
from types import SimpleNamespace

import pytest

from clearance_scraper.adapters.capture_buffer import CaptureBuffer

SEARCH_URL = "https://www.rona.ca/api/search/clearance?page=1"


def listing_body(count=5, padding=3000):
    products = [{"name": f"P{i}", "url": f"/p/{i}", "salePrice": 5} for i in range(count)]
    return json.dumps({"products": products, "padding": "x" * padding})


class FakeResponse:
    """Minimal stand-in for a browser response object."""

    def __init__(self, url, body, content_type="application/json", status=200, resource_type="fetch"):
        self.url = url
        self.status = status
        self.headers = {"content-type": content_type}
        self.request = SimpleNamespace(resource_type=resource_type)
        self._body = body

    async def text(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


@pytest.fixture
def buffer():
    return CaptureBuffer(max_captures=20, min_body_bytes=2000, max_body_bytes=5 * 1024 * 1024)


def test_relevant_json_response_is_retained_and_parsed(buffer):
    capture = buffer.offer(
        SEARCH_URL,
        listing_body(),
        content_type="application/json; charset=utf-8",
        status=200,
        resource_type="XHR",
    )

    assert capture is not None
    assert capture.resource_type == "xhr"
    assert capture.json_body["products"][0]["name"] == "P0"
    assert capture.body_bytes == len(listing_body().encode("utf-8"))
    assert buffer.captures() == (capture,)


def test_irrelevant_url_is_rejected(buffer):
    assert buffer.offer("https://cdn.example.com/fonts/roboto.woff2", listing_body()) is None
    assert len(buffer) == 0
    assert buffer.rejected_count == 1


def test_body_size_bounds(buffer):
    small = CaptureBuffer(min_body_bytes=2000, max_body_bytes=4000)

    assert small.offer(SEARCH_URL, "{}", content_type="application/json") is None
    assert small.offer(SEARCH_URL, listing_body(padding=10000), content_type="application/json") is None
    assert small.offer(SEARCH_URL, listing_body(), content_type="application/json") is not None
    assert small.rejected_count == 2


def test_non_api_resource_types_are_ignored(buffer):
    assert buffer.offer(SEARCH_URL, listing_body(), resource_type="image") is None


def test_buffer_stops_at_capacity():
    capped = CaptureBuffer(max_captures=2, min_body_bytes=0)
    for _ in range(3):
        capped.offer(SEARCH_URL, listing_body(), content_type="application/json")

    assert len(capped) == 2
    assert capped.is_full
    assert capped.rejected_count == 1


def test_non_json_or_invalid_json_keeps_raw_body_only(buffer):
    html_body = "<html>" + "x" * 3000 + "</html>"
    broken = "{" + "x" * 3000

    as_html = buffer.offer(SEARCH_URL, html_body, content_type="text/html", resource_type="document")
    as_broken = buffer.offer(SEARCH_URL, broken, content_type="application/json")

    assert as_html.json_body is None
    assert as_html.body == html_body
    assert as_broken.json_body is None
    assert as_broken.has_json is False


def test_deeply_nested_json_keeps_raw_body_only(buffer):
    nested = "[" * 200000 + "]" * 200000

    capture = buffer.offer(SEARCH_URL, nested, content_type="application/json", resource_type="xhr")

    assert capture is not None
    assert capture.json_body is None
    assert capture.body_bytes == 400000


def test_rejections_are_counted_across_threads(buffer):
    def offer_irrelevant():
        for _ in range(50):
            buffer.offer("https://cdn.example.com/fonts/roboto.woff2", listing_body())

    workers = [threading.Thread(target=offer_irrelevant) for _ in range(8)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert buffer.rejected_count == 400
    assert len(buffer) == 0


def test_bytes_body_is_decoded(buffer):
    capture = buffer.offer(SEARCH_URL, listing_body().encode("utf-8"), content_type="application/json")

    assert capture.json_body["products"][4]["url"] == "/p/4"


def test_capture_reads_browser_response(buffer):
    capture = asyncio.run(buffer.capture(FakeResponse(SEARCH_URL, listing_body())))

    assert capture is not None
    assert capture.status == 200
    assert capture.resource_type == "fetch"
    assert len(buffer) == 1


def test_capture_skips_unreadable_body(buffer):
    response = FakeResponse(SEARCH_URL, RuntimeError("Response body is unavailable for redirect responses"))

    assert asyncio.run(buffer.capture(response)) is None
    assert len(buffer) == 0
    assert buffer.rejected_count == 1


def test_capture_skips_irrelevant_urls_without_reading_body(buffer):
    response = FakeResponse("https://www.rona.ca/static/app.js", RuntimeError("should not be read"))

    assert asyncio.run(buffer.capture(response)) is None
