"""
Shared record assembly for every extraction path: build a Product from
resolved fields, deduplicate by URL, apply the discount filter.
"""
from typing import Iterable, List, Optional

from clearance_scraper.models.product import Product
from clearance_scraper.utils.pricing import compute_discount_pct, meets_discount_threshold


def build_product(
    name: str,
    url: str,
    image: str = "",
    sku: str = "",
    regular_price: Optional[float] = None,
    sale_price: Optional[float] = None,
) -> Optional[Product]:
    """Return a Product, or None when the record has no name or no URL."""
    name = (name or "").strip()
    url = (url or "").strip()
    if not name or not url:
        return None

    return Product(
        name=name,
        url=url,
        image=image or "",
        sku=sku or "",
        regular_price=regular_price,
        sale_price=sale_price,
        discount_pct=compute_discount_pct(regular_price, sale_price),
    )


def dedupe_by_url(products: Iterable[Product]) -> List[Product]:
    """Keep the first product seen for each URL."""
    seen = set()
    unique = []
    for product in products:
        if product.url in seen:
            continue
        seen.add(product.url)
        unique.append(product)
    return unique


def filter_by_discount(products: Iterable[Product], threshold: int = 50) -> List[Product]:
    """Keep products whose discount meets ``threshold`` (inclusive)."""
    return [p for p in products if meets_discount_threshold(p.discount_pct, threshold)]
