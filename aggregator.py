"""One refresh cycle: search → fetch → extract → normalize → dedupe → commit."""

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional
from urllib.parse import urlparse

from cache import PriceCache
from config import CURRENCY, MAX_HITS_PER_QUERY, QUERIES
from dedupe import dedupe
from extraction.extractor import extract_prices
from extraction.models import CandidateRecord
from extraction.page_fetcher import fetch_page_text
from extraction.rules import (
    infer_category,
    infer_unit,
    normalize_category,
    normalize_currency,
    parse_numeric,
)
from models import MissingCredentialsError, PriceRecord, SearchHit, Snapshot, now_iso
from search import CachedSearchClient, GoogleSearchClient, SearchCache, SearchError

logger = logging.getLogger(__name__)

IDLE = "idle"
FANNING_OUT = "fanning_out"
COMMITTING = "committing"


@dataclass
class CycleReport:
    queries: int = 0
    failed_searches: int = 0
    hits: int = 0
    candidates: int = 0
    accepted: int = 0
    rejected: int = 0
    committed: int = 0
    aborted: bool = False
    started_at: str = field(default_factory=now_iso)
    duration_s: float = 0.0


def _text(value) -> Optional[str]:
    """Non-empty stripped string, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _usable_price(value) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        number = parse_numeric(value)
    if number is None or not math.isfinite(number) or number <= 0:
        return None
    return number


def _hostname(url: str) -> str:
    try:
        return urlparse(url).hostname or url
    except ValueError:
        return url


def build_record(candidate: CandidateRecord, hit: SearchHit) -> Optional[PriceRecord]:
    """Validate one candidate against the hit it came from.

    Returns None when the candidate has no usable price or is priced in a
    different currency.
    """
    currency = normalize_currency(candidate.currency)
    if currency is not None and currency != CURRENCY:
        return None

    price = _usable_price(candidate.price_numeric)
    if price is None:
        price = _usable_price(_text(candidate.price_text))
    if price is None:
        return None

    material = _text(candidate.material) or "Unknown"
    category = normalize_category(candidate.material_category) or infer_category(material)

    return PriceRecord(
        material=material,
        material_category=category,
        price=price,
        unit=_text(candidate.unit) or infer_unit(category),
        currency=CURRENCY,
        source=_text(candidate.source) or _hostname(hit.link),
        url=hit.link,
        price_text=_text(candidate.price_text),
        timestamp=now_iso(),
    )


def _default_search_client() -> CachedSearchClient:
    return CachedSearchClient(GoogleSearchClient(), SearchCache())


class AggregationRunner:
    """Runs refresh cycles over the query catalog. One cycle at a time."""

    def __init__(
        self,
        cache: PriceCache,
        search_client=None,
        fetch_text: Callable[[str], str] = fetch_page_text,
        extract: Callable[[str, str], list[CandidateRecord]] = extract_prices,
        queries: Optional[list[str]] = None,
        max_hits: int = MAX_HITS_PER_QUERY,
    ):
        self.cache = cache
        self.search_client = search_client or _default_search_client()
        self.fetch_text = fetch_text
        self.extract = extract
        self.queries = list(queries if queries is not None else QUERIES)
        self.max_hits = max_hits
        self.state = IDLE
        self.last_report: Optional[CycleReport] = None
        self._lock = threading.Lock()

    def run(self) -> Optional[Snapshot]:
        """Run one cycle and commit. Returns None if a cycle is already running."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Refresh cycle already running, skipping trigger")
            return None
        try:
            return self._run_cycle()
        finally:
            self.state = IDLE
            self._lock.release()

    def _run_cycle(self) -> Snapshot:
        report = CycleReport(queries=len(self.queries))
        started = time.monotonic()
        logger.info(f"=== Refresh cycle starting ({len(self.queries)} queries) ===")

        self.state = FANNING_OUT
        records: list[PriceRecord] = []
        begin = getattr(self.search_client, "begin_cycle", None)
        if begin:
            begin()
        try:
            for query in self.queries:
                records.extend(self._process_query(query, report))
        except MissingCredentialsError as e:
            report.aborted = True
            logger.error(f"Refresh cycle aborted, missing configuration: {e}")
        finally:
            end = getattr(self.search_client, "end_cycle", None)
            if end:
                end()

        self.state = COMMITTING
        unique = dedupe(records)
        snapshot = self.cache.commit(unique)

        report.committed = len(unique)
        report.duration_s = round(time.monotonic() - started, 2)
        self.last_report = report
        logger.info(
            f"=== Refresh cycle done. {report.accepted} accepted, {report.rejected} rejected, "
            f"{len(records) - len(unique)} duplicates, {report.failed_searches} failed searches "
            f"({report.duration_s}s) ==="
        )
        return snapshot

    def _process_query(self, query: str, report: CycleReport) -> list[PriceRecord]:
        try:
            hits = self.search_client.search(query, self.max_hits)
        except SearchError as e:
            report.failed_searches += 1
            logger.warning(f"Search failed for '{query}' [{e.kind}]: {e.message}")
            return []
        except MissingCredentialsError:
            raise
        except Exception as e:
            report.failed_searches += 1
            logger.error(f"Unexpected search failure for '{query}': {e}")
            return []

        records = []
        for hit in hits[: self.max_hits]:
            report.hits += 1
            records.extend(self._process_hit(hit, report))
        logger.info(f"  '{query}': {len(hits)} hits, {len(records)} prices")
        return records

    def _process_hit(self, hit: SearchHit, report: CycleReport) -> list[PriceRecord]:
        try:
            text = self.fetch_text(hit.link)
        except Exception as e:
            logger.warning(f"Failed to fetch {hit.link}: {e}")
            text = ""

        try:
            candidates = self.extract(text, hit.link)
        except MissingCredentialsError:
            raise
        except Exception as e:
            logger.warning(f"Extraction failed for {hit.link}: {e}")
            return []
        report.candidates += len(candidates)

        records = []
        for candidate in candidates:
            try:
                record = build_record(candidate, hit)
            except Exception as e:
                logger.warning(f"Unusable candidate from {hit.link}: {e}")
                record = None
            if record is None:
                report.rejected += 1
                logger.debug(f"Rejected candidate from {hit.link}: {candidate.model_dump()}")
                continue
            report.accepted += 1
            records.append(record)
        return records
