# conftest.py
# Ensure the repository root is on sys.path so the clearance_scraper package
# imports without an editable install, and share page/capture builders.

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)

if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from clearance_scraper.models.capture import CapturedResponse  # noqa: E402

BASE_ORIGIN = "https://www.rona.ca"
PAGE_URL = "https://www.rona.ca/webapp/wcs/stores/servlet/RonaPromoClearanceView?storeId=10151"


def tile(name, href, regular=None, sale=None, price=None, sku="", img=""):
    """Render one product tile the way the clearance listing marks it up."""
    parts = [f'<article class="product-tile" data-sku="{sku}">' if sku else '<article class="product-tile">']
    if img:
        parts.append(img)
    parts.append(f'<a href="{href}"><span class="product-title">{name}</span></a>')
    if regular is not None:
        parts.append(f'<span class="price--regular">{regular}</span>')
    if sale is not None:
        parts.append(f'<span class="price--sale">{sale}</span>')
    if price is not None:
        parts.append(f'<div class="price">{price}</div>')
    parts.append("</article>")
    return "".join(parts)


def page(*tiles, head=""):
    body = "".join(tiles)
    return f"<html><head>{head}</head><body><main><div class='grid'>{body}</div></main></body></html>"


def product_entry(index, regular=100, sale=40, url=True):
    entry = {
        "name": f"Product {index}",
        "partNumber": f"SKU-{index}",
        "regularPrice": regular,
        "salePrice": sale,
        "images": [{"url": f"/images/{index}.jpg"}],
    }
    if url:
        entry["pdpUrl"] = f"/en/product/item-{index}"
    return entry


def captured(url, payload):
    body = json.dumps(payload)
    return CapturedResponse(
        url=url,
        content_type="application/json",
        status=200,
        resource_type="xhr",
        body=body,
        json_body=payload,
        body_bytes=len(body.encode("utf-8")),
    )


@pytest.fixture
def empty_page_html():
    return page(head="<title>Clearance</title>")


@pytest.fixture
def mixed_discount_page_html():
    return page(
        tile("Cordless Drill", "/en/product/drill-1", regular="$40.00", sale="$20.00"),
        tile("Work Light", "/en/product/light-2", regular="$40.00", sale="$30.00"),
        tile("Tape Measure", "/en/product/tape-3", price="$10 $25"),
    )


@pytest.fixture
def listing_captures():
    """A well-known 5-entry products array and a generic 3-entry array."""
    generic = captured(
        "https://www.rona.ca/api/recommendations",
        {"payload": {"widgets": [{"name": f"W{i}", "url": f"/w/{i}"} for i in range(3)]}},
    )
    listing = captured(
        "https://www.rona.ca/api/search/clearance?page=1",
        {"data": {"products": [product_entry(i) for i in range(5)]}},
    )
    return [generic, listing]
