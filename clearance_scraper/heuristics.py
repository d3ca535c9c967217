"""
Heuristic selector chains and JSON alias paths.

Markup and API shapes vary between page variants and drift over time, so every
field is read through an ordered chain of alternatives: the first accessor that
returns a non-empty value wins. The chains are plain data so they can be edited
and tested without touching extraction logic.
"""
from typing import Callable, Dict, List, Tuple

from bs4 import Tag

Accessor = Callable[[Tag], str]

# Union of tile selectors seen across page variants.
TILE_SELECTOR = ", ".join([
    "article[data-product]",
    "article.product-tile",
    ".product-tile",
    ".product-item",
    '[data-automation="product-tile"]',
    '[data-testid*="product"]',
    'li:has(a[href*="/product/"])',
])


def text_of(selector: str) -> Accessor:
    """Text of the first descendant matching ``selector``."""
    def accessor(tile: Tag) -> str:
        element = tile.select_one(selector)
        return element.get_text(" ", strip=True) if element else ""
    return accessor


def attr_of(selector: str, attribute: str) -> Accessor:
    """Attribute of the first descendant matching ``selector``."""
    def accessor(tile: Tag) -> str:
        element = tile.select_one(selector)
        if element is None:
            return ""
        value = element.get(attribute)
        return value.strip() if isinstance(value, str) else ""
    return accessor


def own_attr(attribute: str) -> Accessor:
    """Attribute of the tile element itself."""
    def accessor(tile: Tag) -> str:
        value = tile.get(attribute)
        return value.strip() if isinstance(value, str) else ""
    return accessor


def image_attr(attribute: str) -> Accessor:
    """Image attribute, ignoring inline ``data:`` placeholders used by lazy loaders."""
    read = attr_of("img", attribute)

    def accessor(tile: Tag) -> str:
        value = read(tile)
        return "" if value.startswith("data:") else value
    return accessor


def joined_text(selector: str, separator: str = " | ") -> Accessor:
    """Non-empty texts of every descendant matching ``selector``, joined."""
    def accessor(tile: Tag) -> str:
        texts = [el.get_text(" ", strip=True) for el in tile.select(selector)]
        return separator.join(text for text in texts if text)
    return accessor


def first_match(tile: Tag, accessors: List[Accessor]) -> str:
    """Return the first non-empty value produced by ``accessors``."""
    for accessor in accessors:
        value = accessor(tile)
        if value:
            return value
    return ""


TILE_ACCESSORS: Dict[str, List[Accessor]] = {
    "name": [
        text_of('[data-automation="product-title"], .product-title, .product-name'),
        text_of("a[href]"),
    ],
    "url": [
        attr_of("a[href]", "href"),
        own_attr("href"),
    ],
    "image": [
        image_attr("src"),
        image_attr("data-src"),
        image_attr("data-lazy"),
    ],
    "sku": [
        own_attr("data-sku"),
        own_attr("data-product-id"),
        own_attr("data-product"),
        attr_of("[data-sku]", "data-sku"),
    ],
    "regular_price_text": [
        text_of(".price--regular, .price--original, .price--was, .was-price, .regular-price"),
        text_of('[data-automation="regular-price"]'),
        # Last resort: every price-like element, for "was/now" pairs in one block
        joined_text('[data-automation*="price"], .price'),
    ],
    "sale_price_text": [
        text_of(".price--sale, .price--now, .price--special, .sale-price"),
        text_of('[data-automation="sale-price"]'),
    ],
}

# Container keys that almost always hold the product listing.
# Order doubles as tie-break priority.
WELL_KNOWN_ARRAY_KEYS: Tuple[str, ...] = (
    "catalogEntryView",
    "products",
    "items",
    "results",
    "searchResults",
    "entries",
)

# Alias paths per product field for captured JSON entries.
# Dotted segments walk into objects; integer segments index into lists.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "name": ("name", "productName", "title", "shortDescription", "description", "label"),
    "url": ("url", "pdpUrl", "productUrl", "seoUrl", "link", "href", "seo.href", "attributes.url"),
    "image": ("image", "imageUrl", "thumbnail", "fullImage", "images.0.url", "images.0", "media.0.url"),
    "sku": ("sku", "partNumber", "productId", "itemNumber", "uniqueID", "id"),
    "regular_price": (
        "regularPrice",
        "listPrice",
        "wasPrice",
        "originalPrice",
        "price.regular",
        "prices.regular",
        "price.0.value",
    ),
    "sale_price": (
        "salePrice",
        "offerPrice",
        "currentPrice",
        "specialPrice",
        "finalPrice",
        "price.sale",
        "prices.sale",
        "price.1.value",
        "price",
    ),
}
