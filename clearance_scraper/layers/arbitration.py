"""
Source Arbitration Layer for the Clearance Extraction Engine.
This is the engine entry point: DOM tiles first, captured network JSON only
when the page shows no tiles at all.
"""
import time
from typing import Iterable, Optional

from clearance_scraper.adapters.dom_tiles import DOMTileExtractor, PageSnapshot
from clearance_scraper.adapters.network_capture import NetworkCaptureReconciler
from clearance_scraper.config import config
from clearance_scraper.exceptions import EngineError
from clearance_scraper.layers.telemetry import StoreSummary
from clearance_scraper.models.capture import CapturedResponse
from clearance_scraper.models.product import ExtractionResult
from clearance_scraper.utils.logger import LayerLogger, store_context


class ExtractionEngine:
    """
    Source Arbitration - decides which raw source to trust for a store page.

    This layer:
    - Runs DOM extraction first and keeps it whenever any tile was seen,
      even if every tile was filtered out (no deep discounts today)
    - Falls back to the network reconciler only on zero tiles, which means
      a structurally different page
    - Treats an empty outcome on both paths as a valid empty result
    - Emits one telemetry summary per run

    The engine performs no I/O and never retries.
    """

    def __init__(
        self,
        base_origin: Optional[str] = None,
        threshold: Optional[int] = None,
        dom_extractor: Optional[DOMTileExtractor] = None,
        reconciler: Optional[NetworkCaptureReconciler] = None,
    ):
        self.base_origin = base_origin or config.BASE_ORIGIN
        self.threshold = config.DISCOUNT_THRESHOLD if threshold is None else threshold
        self.dom_extractor = dom_extractor or DOMTileExtractor(threshold=self.threshold)
        self.reconciler = reconciler or NetworkCaptureReconciler(
            base_origin=self.base_origin,
            threshold=self.threshold,
        )
        self.logger = LayerLogger("source_arbitration")
        self.last_summary: Optional[StoreSummary] = None

    def extract(
        self,
        snapshot: PageSnapshot,
        captures: Iterable[CapturedResponse] = (),
        store: Optional[str] = None,
        store_name: Optional[str] = None,
    ) -> ExtractionResult:
        """
        Extract clearance products for one store page.

        Args:
            snapshot: Rendered page snapshot
            captures: Responses captured during page load (a CaptureBuffer
                or any iterable of CapturedResponse)
            store: Store slug, for telemetry
            store_name: Human-readable store name, for telemetry

        Returns:
            ExtractionResult with elapsed time filled in

        Raises:
            EngineError: when an input cannot be read at all
        """
        started = time.perf_counter()
        try:
            with store_context(store, store_name):
                result = self._arbitrate(snapshot, captures)
        except EngineError as e:
            self.logger.log_error(str(e), error_type=type(e).__name__, store=store)
            self.last_summary = StoreSummary(
                store=store,
                store_name=store_name,
                ms=self._elapsed_ms(started),
                note=str(e),
                threshold=self.threshold,
            )
            self.last_summary.emit()
            raise

        result = result.model_copy(update={"elapsed_ms": self._elapsed_ms(started)})
        self.last_summary = StoreSummary.from_result(
            result,
            store=store,
            store_name=store_name,
            threshold=self.threshold,
        )
        self.last_summary.emit()
        return result

    def extract_html(
        self,
        html: Optional[str],
        page_url: str = "",
        captures: Iterable[CapturedResponse] = (),
        store: Optional[str] = None,
        store_name: Optional[str] = None,
    ) -> ExtractionResult:
        """Build a PageSnapshot from ``html`` and extract; a missing page is reported like any run."""
        started = time.perf_counter()
        try:
            snapshot = PageSnapshot(html, page_url=page_url, base_origin=self.base_origin)
        except EngineError as e:
            self.logger.log_error(str(e), error_type=type(e).__name__, url=page_url, store=store)
            self.last_summary = StoreSummary(
                store=store,
                store_name=store_name,
                ms=self._elapsed_ms(started),
                note=str(e),
                threshold=self.threshold,
            )
            self.last_summary.emit()
            raise
        return self.extract(snapshot, captures, store=store, store_name=store_name)

    def _arbitrate(self, snapshot: PageSnapshot, captures: Iterable[CapturedResponse]) -> ExtractionResult:
        dom_result = self.dom_extractor.extract(snapshot)

        if dom_result.tiles_count > 0:
            self.logger.log_decision(
                decision="use_dom_tiles",
                reason=f"{dom_result.tiles_count} tiles found",
                url=snapshot.page_url,
                kept=dom_result.kept_count,
            )
            return dom_result

        self.logger.log_fallback(
            from_source="dom_tiles",
            to_source="network_capture",
            reason="No product tiles matched on the rendered page",
            url=snapshot.page_url,
        )

        network_result = self.reconciler.reconcile(captures)

        if network_result.selected_capture is not None:
            self.logger.log_decision(
                decision="use_network_capture",
                reason="dom pass found zero tiles",
                url=network_result.selected_capture.url,
                path=network_result.selected_capture.path,
                length=network_result.selected_capture.length,
            )

        if network_result.is_empty:
            self.logger.log_decision(
                decision="empty_result",
                reason="Neither DOM tiles nor captured JSON yielded products",
                url=snapshot.page_url,
            )

        return network_result

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int(round((time.perf_counter() - started) * 1000))
