"""
DOM Tile Extractor for the Clearance Extraction Engine.
Turns a snapshot of the rendered clearance listing into normalized products.
"""
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from clearance_scraper.config import config
from clearance_scraper.exceptions import SnapshotUnavailableError
from clearance_scraper.heuristics import TILE_ACCESSORS, TILE_SELECTOR, Accessor, first_match
from clearance_scraper.models.product import ExtractionResult, RawTileData, SourceType
from clearance_scraper.utils.logger import LayerLogger
from clearance_scraper.utils.normalize import build_product, dedupe_by_url, filter_by_discount
from clearance_scraper.utils.pricing import extract_prices_from_text
from clearance_scraper.utils.urls import resolve_url


def _has_link(tag: Tag) -> bool:
    if tag.name == "a" and tag.has_attr("href"):
        return True
    return tag.select_one("a[href]") is not None


class PageSnapshot:
    """
    Queryable snapshot of a rendered page.

    The browser layer hands over the rendered HTML once loading is done; all
    tile lookups run against this parsed copy, never against the live page.
    """

    def __init__(self, html: Optional[str], page_url: str = "", base_origin: Optional[str] = None):
        if html is None:
            raise SnapshotUnavailableError("Page snapshot has no HTML content", page_url=page_url)

        self.page_url = page_url
        self.soup = BeautifulSoup(html, "lxml")
        self.base_url = self._resolve_base_url(base_origin or config.BASE_ORIGIN)

    def _resolve_base_url(self, base_origin: str) -> str:
        """Page URL, overridden by a <base href> element when present."""
        page_base = urljoin(base_origin, self.page_url) if self.page_url else base_origin
        base_tag = self.soup.find("base", href=True)
        if base_tag:
            return urljoin(page_base, base_tag["href"].strip())
        return page_base

    def tiles(self, selector: str = TILE_SELECTOR) -> List[Tag]:
        """
        Return tile elements in document order.

        Broad selectors also hit listing wrappers (a grid carrying a product
        test id). A match holding two or more linked matches is treated as
        such a container and skipped in favor of its tiles. A match nested
        inside a kept tile (a title carrying a product test id, for
        instance) is part of that tile and skipped too.
        """
        matched = self.soup.select(selector)
        linked_ids = {id(tag) for tag in matched if _has_link(tag)}

        kept = []
        for tag in matched:
            linked_descendants = sum(1 for node in tag.descendants if id(node) in linked_ids)
            if linked_descendants < 2:
                kept.append(tag)

        kept_ids = {id(tag) for tag in kept}
        return [
            tag for tag in kept
            if not any(id(parent) in kept_ids for parent in tag.parents)
        ]


class DOMTileExtractor:
    """
    Extracts clearance products from DOM tiles.

    Each field is read through an ordered accessor chain (see
    ``clearance_scraper.heuristics``); price text is then resolved into a
    regular/sale pair and the shared dedup and discount filter applied.
    """

    def __init__(
        self,
        threshold: Optional[int] = None,
        tile_selector: str = TILE_SELECTOR,
        accessors: Optional[Dict[str, List[Accessor]]] = None,
    ):
        self.threshold = config.DISCOUNT_THRESHOLD if threshold is None else threshold
        self.tile_selector = tile_selector
        self.accessors = accessors or TILE_ACCESSORS
        self.logger = LayerLogger("dom_tiles")

    def read_tile(self, tile: Tag, base_url: str) -> RawTileData:
        """Read the raw fields of one tile; missing fields come back empty."""
        fields = {field: first_match(tile, chain) for field, chain in self.accessors.items()}

        image = fields.get("image", "")
        return RawTileData(
            name=fields.get("name", ""),
            url=resolve_url(fields.get("url"), base_url),
            image=urljoin(base_url, image) if image else "",
            sku=fields.get("sku", ""),
            regular_price_text=fields.get("regular_price_text", ""),
            sale_price_text=fields.get("sale_price_text", ""),
        )

    @staticmethod
    def resolve_prices(raw: RawTileData) -> Tuple[Optional[float], Optional[float]]:
        """
        Resolve (regular, sale) from a tile's price texts.

        1. First number of each text.
        2. No sale price but two or more numbers in the regular text:
           larger is regular, smaller is sale ("was/now" in one block).
        3. Sale price without a regular price: regular = sale, so no
           discount is inferred.
        """
        regular_candidates = extract_prices_from_text(raw.regular_price_text)
        sale_candidates = extract_prices_from_text(raw.sale_price_text)

        regular = regular_candidates[0] if regular_candidates else None
        sale = sale_candidates[0] if sale_candidates else None

        if not sale and len(regular_candidates) >= 2:
            regular = max(regular_candidates)
            sale = min(regular_candidates)

        if not regular and sale_candidates:
            regular = sale_candidates[0]

        return regular, sale

    def extract(self, snapshot: PageSnapshot) -> ExtractionResult:
        """
        Extract products from every tile of ``snapshot``.

        ``tiles_count`` is the number of raw tiles, ``parsed_count`` the tiles
        with a name and a sale price, ``kept_count`` the deduplicated products
        that pass the discount filter.
        """
        tiles = snapshot.tiles(self.tile_selector)
        self.logger.log_action("dom_extraction", "started", url=snapshot.page_url, tiles=len(tiles))

        parsed_count = 0
        candidates = []
        for tile in tiles:
            raw = self.read_tile(tile, snapshot.base_url)
            regular, sale = self.resolve_prices(raw)

            if raw.name and sale is not None:
                parsed_count += 1

            product = build_product(
                name=raw.name,
                url=raw.url,
                image=raw.image,
                sku=raw.sku,
                regular_price=regular,
                sale_price=sale,
            )
            if product is not None:
                candidates.append(product)

        unique = dedupe_by_url(candidates)
        kept = filter_by_discount(unique, self.threshold)

        self.logger.log_extraction(
            source=SourceType.DOM_TILES.value,
            tiles=len(tiles),
            parsed=parsed_count,
            kept=len(kept),
            duplicates=len(candidates) - len(unique),
        )

        return ExtractionResult(
            source=SourceType.DOM_TILES if tiles else SourceType.NONE,
            tiles_count=len(tiles),
            parsed_count=parsed_count,
            kept_count=len(kept),
            products=kept,
        )
