"""
Network-Capture Reconciler for the Clearance Extraction Engine.
Used as fallback when the rendered page exposes no product tiles: the listing
is then usually present in one of the JSON responses captured during load.
"""
import math
from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from clearance_scraper.config import config
from clearance_scraper.heuristics import FIELD_ALIASES, WELL_KNOWN_ARRAY_KEYS
from clearance_scraper.models.capture import CandidateArray, CapturedResponse
from clearance_scraper.models.product import ExtractionResult, Product, SourceType
from clearance_scraper.utils.logger import LayerLogger
from clearance_scraper.utils.normalize import build_product, dedupe_by_url, filter_by_discount
from clearance_scraper.utils.pricing import parse_price
from clearance_scraper.utils.urls import resolve_url

ROOT_PATH = "$"


def _is_object_array(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(item, dict) for item in value)


def lookup_path(data: Any, path: str) -> Any:
    """
    Follow a dotted alias path through dicts and lists.

    Integer segments index into lists ("images.0.url"). Returns None as soon
    as a segment is missing or the shape does not match.
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


class NetworkCaptureReconciler:
    """
    Derives products from captured JSON responses.

    1. Walk every captured payload and register each non-empty array of
       objects as a candidate, tagged with its dotted path.
    2. Pick the longest candidate under a well-known listing key across all
       captures, else the longest candidate of any key.
    3. Map each entry through ordered alias paths per field.
    """

    def __init__(
        self,
        base_origin: Optional[str] = None,
        threshold: Optional[int] = None,
        max_depth: Optional[int] = None,
        well_known_keys: Sequence[str] = WELL_KNOWN_ARRAY_KEYS,
        field_aliases: Optional[Dict[str, Tuple[str, ...]]] = None,
    ):
        self.base_origin = base_origin or config.BASE_ORIGIN
        self.threshold = config.DISCOUNT_THRESHOLD if threshold is None else threshold
        self.max_depth = config.MAX_WALK_DEPTH if max_depth is None else max_depth
        self.well_known_keys = tuple(well_known_keys)
        self.field_aliases = field_aliases or FIELD_ALIASES
        self.logger = LayerLogger("network_capture")

    def find_candidate_arrays(
        self,
        payload: Any,
        source_url: str = "",
        capture_index: int = 0,
    ) -> List[CandidateArray]:
        """
        Return every non-empty array of objects in ``payload``, breadth first.

        Walks an explicit worklist rather than recursing; containers deeper
        than ``max_depth`` or already visited are not expanded.
        """
        if not isinstance(payload, (dict, list)):
            return []

        candidates = []
        visited = set()
        worklist = deque([(payload, "", 0)])
        truncated = False

        if _is_object_array(payload):
            candidates.append(self._candidate(payload, ROOT_PATH, ROOT_PATH, 0, source_url, capture_index))

        while worklist:
            value, path, depth = worklist.popleft()
            if id(value) in visited:
                continue
            visited.add(id(value))

            if depth >= self.max_depth:
                truncated = True
                continue

            if isinstance(value, dict):
                children = ((str(key), child) for key, child in value.items())
            else:
                children = ((str(index), child) for index, child in enumerate(value))

            for key, child in children:
                if not isinstance(child, (dict, list)):
                    continue
                child_path = f"{path}.{key}" if path else key
                if isinstance(value, dict) and _is_object_array(child):
                    candidates.append(
                        self._candidate(child, child_path, key, depth + 1, source_url, capture_index)
                    )
                worklist.append((child, child_path, depth + 1))

        if truncated:
            self.logger.log_decision(
                decision="walk_truncated",
                reason=f"payload deeper than {self.max_depth} levels",
                url=source_url,
            )

        return candidates

    def _candidate(
        self,
        entries: list,
        path: str,
        key: str,
        depth: int,
        source_url: str,
        capture_index: int,
    ) -> CandidateArray:
        return CandidateArray(
            source_url=source_url,
            path=path,
            key=key,
            length=len(entries),
            depth=depth,
            well_known=key in self.well_known_keys,
            capture_index=capture_index,
            entries=entries,
        )

    def _priority(self, candidate: CandidateArray) -> int:
        if candidate.well_known:
            return self.well_known_keys.index(candidate.key)
        return len(self.well_known_keys)

    def select_best(self, captures: Iterable[CapturedResponse]) -> Optional[CandidateArray]:
        """
        Pick the globally best candidate array across ``captures``.

        Well-known keys beat generic ones regardless of size; within a tier
        the longest array wins, ties broken by key priority, shallower path,
        then capture order.
        """
        candidates = []
        for index, capture in enumerate(captures):
            if not capture.has_json:
                continue
            candidates.extend(self.find_candidate_arrays(capture.json_body, capture.url, index))

        if not candidates:
            return None

        well_known = [c for c in candidates if c.well_known]
        pool = well_known or candidates

        ranked = sorted(
            enumerate(pool),
            key=lambda item: (
                -item[1].length,
                self._priority(item[1]),
                item[1].depth,
                item[1].capture_index,
                item[0],
            ),
        )
        return ranked[0][1]

    def _first_text(self, entry: Dict, field: str, allow_numbers: bool = False) -> str:
        for path in self.field_aliases.get(field, ()):
            value = lookup_path(entry, path)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if allow_numbers and isinstance(value, (int, float)) and not isinstance(value, bool):
                return str(value)
        return ""

    def _first_number(self, entry: Dict, field: str) -> Optional[float]:
        for path in self.field_aliases.get(field, ()):
            value = lookup_path(entry, path)
            if isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                if math.isfinite(value):
                    return float(value)
                continue
            if isinstance(value, str):
                parsed = parse_price(value)
                if parsed is not None:
                    return parsed
        return None

    def read_entry(self, entry: Any) -> Dict[str, Any]:
        """Resolve every product field of one JSON entry; absent fields are empty."""
        if not isinstance(entry, dict):
            return {"name": "", "url": "", "image": "", "sku": "", "regular_price": None, "sale_price": None}

        image = self._first_text(entry, "image")
        regular = self._first_number(entry, "regular_price")
        sale = self._first_number(entry, "sale_price")
        if not regular and sale:
            regular = sale

        return {
            "name": self._first_text(entry, "name"),
            "url": resolve_url(self._first_text(entry, "url"), self.base_origin),
            "image": resolve_url(image, self.base_origin) if image else "",
            "sku": self._first_text(entry, "sku", allow_numbers=True),
            "regular_price": regular,
            "sale_price": sale,
        }

    def map_entry(self, entry: Any) -> Optional[Product]:
        """Map one JSON entry to a Product; None when it has no name or URL."""
        return build_product(**self.read_entry(entry))

    def _is_parsed(self, entry: Any) -> bool:
        fields = self.read_entry(entry)
        return bool(fields["name"]) and fields["sale_price"] is not None

    def map_entries(self, entries: Iterable[Any]) -> List[Product]:
        """Map every entry, dropping those without a name or URL."""
        products = []
        for entry in entries:
            product = self.map_entry(entry)
            if product is not None:
                products.append(product)
        return products

    def reconcile(self, captures: Iterable[CapturedResponse]) -> ExtractionResult:
        """
        Derive an ExtractionResult from captured responses.

        An empty result (no candidate array, or no mappable entry) is a
        legitimate outcome, not an error.
        """
        captures = list(captures)
        self.logger.log_action("network_reconciliation", "started", captures=len(captures))

        best = self.select_best(captures)
        if best is None:
            self.logger.log_decision(
                decision="no_candidate_array",
                reason="no array of objects found in captured JSON",
                captures=len(captures),
            )
            return ExtractionResult.empty()

        self.logger.log_decision(
            decision="capture_selected",
            reason="well_known_key" if best.well_known else "longest_generic_array",
            url=best.source_url,
            path=best.path,
            length=best.length,
        )

        parsed_count = sum(1 for entry in best.entries if self._is_parsed(entry))
        mapped = self.map_entries(best.entries)

        unique = dedupe_by_url(mapped)
        kept = filter_by_discount(unique, self.threshold)

        self.logger.log_extraction(
            source=SourceType.NETWORK_CAPTURE.value,
            tiles=best.length,
            parsed=parsed_count,
            kept=len(kept),
            mapped=len(mapped),
            duplicates=len(mapped) - len(unique),
        )

        return ExtractionResult(
            source=SourceType.NETWORK_CAPTURE,
            tiles_count=best.length,
            parsed_count=parsed_count,
            kept_count=len(kept),
            products=kept,
            selected_capture=best.to_selection(),
        )
