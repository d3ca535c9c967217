"""
Telemetry record assembly.
One summary per store run, rendered both as structured log fields and as the
compact key=value line operators grep for.
"""
from dataclasses import asdict, dataclass
from typing import Optional

from clearance_scraper.config import config
from clearance_scraper.models.product import ExtractionResult
from clearance_scraper.utils.logger import get_logger

TELEMETRY_PREFIX = "[clearance]"

# Fixed field name; a non-default threshold is reported as its own part.
KEPT_FIELD = "kept50"
KEPT_FIELD_THRESHOLD = 50

logger = get_logger("telemetry")


@dataclass
class StoreSummary:
    """Counters of one store run."""
    store: Optional[str] = None
    store_name: Optional[str] = None
    tiles: int = 0
    parsed: int = 0
    kept: int = 0
    ms: Optional[int] = None
    source: Optional[str] = None
    note: Optional[str] = None
    threshold: int = config.DISCOUNT_THRESHOLD

    @classmethod
    def from_result(
        cls,
        result: ExtractionResult,
        store: Optional[str] = None,
        store_name: Optional[str] = None,
        threshold: Optional[int] = None,
        note: Optional[str] = None,
    ) -> "StoreSummary":
        return cls(
            store=store,
            store_name=store_name,
            tiles=result.tiles_count,
            parsed=result.parsed_count,
            kept=result.kept_count,
            ms=result.elapsed_ms,
            source=result.source.value,
            note=note,
            threshold=config.DISCOUNT_THRESHOLD if threshold is None else threshold,
        )

    def format_line(self) -> str:
        """
        Render ``[clearance] store=<slug> name="<name>" tiles=<n> parsed=<n>
        kept50=<n> threshold=<n> ms=<n> source=<source> note="<reason>"``,
        omitting parts that are not set. ``threshold`` only appears when it
        differs from 50.
        """
        parts = [
            TELEMETRY_PREFIX,
            f"store={self.store}" if self.store else None,
            f'name="{self.store_name}"' if self.store_name else None,
            f"tiles={self.tiles}",
            f"parsed={self.parsed}",
            f"{KEPT_FIELD}={self.kept}",
            f"threshold={self.threshold}" if self.threshold != KEPT_FIELD_THRESHOLD else None,
            f"ms={self.ms}" if self.ms is not None else None,
            f"source={self.source}" if self.source else None,
            f'note="{self.note}"' if self.note else None,
        ]
        return " ".join(part for part in parts if part)

    def emit(self) -> str:
        """Log the summary and return its line."""
        line = self.format_line()
        if self.note:
            logger.warning("store_summary", line=line, **asdict(self))
        else:
            logger.info("store_summary", line=line, **asdict(self))
        return line
