import pytest

from clearance_scraper.adapters.dom_tiles import DOMTileExtractor, PageSnapshot
from clearance_scraper.exceptions import SnapshotUnavailableError
from clearance_scraper.models.product import RawTileData, SourceType

from conftest import BASE_ORIGIN, PAGE_URL, page, tile


def snapshot_of(html, page_url=PAGE_URL):
    return PageSnapshot(html, page_url=page_url, base_origin=BASE_ORIGIN)


def test_mixed_discounts_keep_only_deep_clearance(mixed_discount_page_html):
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(mixed_discount_page_html))

    assert result.source == SourceType.DOM_TILES
    assert result.tiles_count == 3
    assert result.parsed_count == 3
    assert result.kept_count == 2
    assert [p.name for p in result.products] == ["Cordless Drill", "Tape Measure"]

    drill, tape = result.products
    assert drill.url == "https://www.rona.ca/en/product/drill-1"
    assert (drill.regular_price, drill.sale_price, drill.discount_pct) == (40.0, 20.0, 50)
    assert (tape.regular_price, tape.sale_price, tape.discount_pct) == (25.0, 10.0, 60)


def test_discount_boundary_keeps_fifty_and_drops_forty_nine():
    html = page(
        tile("Exactly Half", "/en/product/half", regular="$100.00", sale="$50.00"),
        tile("Almost Half", "/en/product/almost", regular="$100.00", sale="$51.00"),
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert [p.name for p in result.products] == ["Exactly Half"]
    assert result.kept_count == 1


def test_duplicate_urls_yield_first_seen_product():
    html = page(
        tile("First Listing", "/en/product/saw-9?utm_source=flyer#reviews", regular="$80", sale="$20"),
        tile("Second Listing", "https://www.rona.ca/en/product/saw-9", regular="$80", sale="$10"),
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert result.tiles_count == 2
    assert len(result.products) == 1
    assert result.products[0].name == "First Listing"
    assert result.products[0].url == "https://www.rona.ca/en/product/saw-9"


def test_tiles_without_name_or_url_are_dropped_but_counted():
    html = page(
        '<article class="product-tile"><span class="price--regular">$40</span>'
        '<span class="price--sale">$10</span></article>',
        tile("Good", "/en/product/good", regular="$40", sale="$10"),
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert result.tiles_count == 2
    assert [p.name for p in result.products] == ["Good"]


def test_name_falls_back_to_link_text():
    html = page(
        '<article class="product-tile"><a href="/en/product/hammer">Claw Hammer</a>'
        '<span class="price--regular">$30</span><span class="price--sale">$12</span></article>'
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert result.products[0].name == "Claw Hammer"


def test_sale_price_without_regular_price_is_not_a_discount():
    extractor = DOMTileExtractor(threshold=50)
    raw = RawTileData(name="Bolt", url="https://www.rona.ca/p/bolt", sale_price_text="$3.99")

    assert extractor.resolve_prices(raw) == (3.99, 3.99)


def test_was_now_pair_in_regular_text_is_split():
    raw = RawTileData(regular_price_text="Now $12.49 | Was $49.99")

    assert DOMTileExtractor.resolve_prices(raw) == (49.99, 12.49)


def test_first_number_of_each_text_is_used():
    raw = RawTileData(regular_price_text="$49.99 each", sale_price_text="$19.99 / 2 units")

    assert DOMTileExtractor.resolve_prices(raw) == (49.99, 19.99)


def test_read_tile_collects_image_and_sku():
    html = page(
        tile(
            "Paint Roller",
            "/en/product/roller",
            regular="$20",
            sale="$5",
            sku="55512",
            img='<img src="data:image/gif;base64,R0lGOD" data-src="/images/roller.jpg">',
        )
    )
    snapshot = snapshot_of(html)
    raw = DOMTileExtractor().read_tile(snapshot.tiles()[0], snapshot.base_url)

    assert raw.image == "https://www.rona.ca/images/roller.jpg"
    assert raw.sku == "55512"
    assert raw.regular_price_text == "$20"
    assert raw.sale_price_text == "$5"


def test_sku_falls_back_to_nested_data_attribute():
    html = page(
        '<article class="product-tile"><a href="/en/product/pliers">Pliers</a>'
        '<div data-sku="7788"></div><span class="price">$9 $30</span></article>'
    )
    snapshot = snapshot_of(html)
    raw = DOMTileExtractor().read_tile(snapshot.tiles()[0], snapshot.base_url)

    assert raw.sku == "7788"


def test_base_href_overrides_page_url():
    html = page(
        tile("Level", "product/level-4", regular="$40", sale="$10"),
        head='<base href="https://www.rona.ca/fr/">',
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert result.products[0].url == "https://www.rona.ca/fr/product/level-4"


def test_nested_matches_are_not_counted_as_separate_tiles():
    html = page(
        '<article class="product-tile"><a href="/en/product/rake">'
        '<span class="product-title" data-testid="product-title">Rake</span></a>'
        '<span class="price--regular">$20</span><span class="price--sale">$8</span></article>'
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert result.tiles_count == 1


def test_product_grid_wrapper_does_not_swallow_its_tiles():
    grid = (
        '<div data-testid="product-grid">'
        + tile("Drill", "/en/product/drill", regular="$40", sale="$20")
        + tile("Saw", "/en/product/saw", regular="$100", sale="$30")
        + tile("Level", "/en/product/level", regular="$20", sale="$10")
        + "</div>"
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(page(grid)))

    assert result.tiles_count == 3
    assert result.parsed_count == 3
    assert result.kept_count == 3
    assert [p.name for p in result.products] == ["Drill", "Saw", "Level"]


def test_list_items_linking_to_products_are_tiles():
    html = page(
        '<ul><li><a href="/en/product/shovel"><span class="product-name">Shovel</span></a>'
        '<span class="price--was">$50</span><span class="price--now">$20</span></li></ul>'
    )
    result = DOMTileExtractor(threshold=50).extract(snapshot_of(html))

    assert result.tiles_count == 1
    assert result.products[0].discount_pct == 60


def test_page_without_tiles_is_empty(empty_page_html):
    result = DOMTileExtractor().extract(snapshot_of(empty_page_html))

    assert result.tiles_count == 0
    assert result.source == SourceType.NONE
    assert result.products == []


def test_missing_html_is_a_structural_failure():
    with pytest.raises(SnapshotUnavailableError):
        PageSnapshot(None, page_url=PAGE_URL)
