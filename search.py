"""Google Programmable Search client with a JSON result cache."""

import json
import logging
import os
import time
from typing import Callable, Optional

import requests

from config import (
    ACCEPT_LANGUAGE,
    GOOGLE_API_KEY,
    GOOGLE_CSE_ID,
    GOOGLE_SEARCH_URL,
    REQUEST_TIMEOUT,
    SEARCH_CACHE_PATH,
    SEARCH_CACHE_TTL_HOURS,
    SEARCH_MIN_INTERVAL,
    USER_AGENT,
)
from models import MissingCredentialsError, SearchHit

logger = logging.getLogger(__name__)

# Google error reasons that mean "stop asking for a while"
_QUOTA_REASONS = {"dailyLimitExceeded", "rateLimitExceeded", "userRateLimitExceeded", "quotaExceeded"}


class SearchError(RuntimeError):
    """Raised when a search call fails.

    kind is 'quota', 'auth' or 'transient'.
    """

    def __init__(self, query: str, kind: str, message: str):
        super().__init__(message)
        self.query = query
        self.kind = kind
        self.message = message


class MinIntervalThrottle:
    """Enforce a minimum interval between successive calls."""

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def wait(self):
        if self._last_call is not None:
            remaining = self.min_interval - (self._clock() - self._last_call)
            if remaining > 0:
                self._sleep(remaining)
        self._last_call = self._clock()


def _error_reasons(resp: requests.Response) -> set[str]:
    try:
        error = resp.json().get("error", {})
    except ValueError:
        return set()
    if not isinstance(error, dict):
        return set()
    reasons = {e.get("reason") for e in error.get("errors", []) if isinstance(e, dict)}
    if error.get("status"):
        reasons.add(error["status"])
    return {r for r in reasons if r}


def _classify(resp: requests.Response) -> str:
    """Map a failed search response to an error kind."""
    reasons = _error_reasons(resp)
    if resp.status_code == 429 or reasons & _QUOTA_REASONS or "RESOURCE_EXHAUSTED" in reasons:
        return "quota"
    if resp.status_code in (400, 401, 403):
        return "auth"
    return "transient"


class GoogleSearchClient:
    """Thin client for the Custom Search JSON API."""

    def __init__(
        self,
        api_key: Optional[str] = GOOGLE_API_KEY,
        cse_id: Optional[str] = GOOGLE_CSE_ID,
        throttle: Optional[MinIntervalThrottle] = None,
    ):
        self.api_key = api_key
        self.cse_id = cse_id
        self.throttle = throttle or MinIntervalThrottle(SEARCH_MIN_INTERVAL)
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept-Language": ACCEPT_LANGUAGE,
        })

    def search(self, query: str, limit: int = 3) -> list[SearchHit]:
        """Return up to `limit` ranked hits for a query."""
        if not self.api_key or not self.cse_id:
            raise MissingCredentialsError("GOOGLE_API_KEY/GOOGLE_CSE_ID are not set")

        self.throttle.wait()
        params = {"key": self.api_key, "cx": self.cse_id, "q": query, "num": limit}
        try:
            resp = self.session.get(GOOGLE_SEARCH_URL, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise SearchError(query, "transient", f"Search request failed: {e}") from e

        if resp.status_code != 200:
            kind = _classify(resp)
            raise SearchError(query, kind, f"Search returned HTTP {resp.status_code} ({kind})")

        try:
            data = resp.json()
        except ValueError as e:
            raise SearchError(query, "transient", "Search returned invalid JSON") from e

        hits = []
        for item in data.get("items") or []:
            link = item.get("link")
            if not link:
                continue
            hits.append(SearchHit(
                title=item.get("title", ""),
                link=link,
                snippet=item.get("snippet", ""),
            ))
        return hits[:limit]


class SearchCache:
    """JSON file of recent search results keyed by query.

    Each entry is {"timestamp": epoch_ms, "links": [hit, ...]}. Entries older
    than the TTL are treated as absent.
    """

    def __init__(
        self,
        path: str = SEARCH_CACHE_PATH,
        ttl_hours: float = SEARCH_CACHE_TTL_HOURS,
        clock: Callable[[], float] = time.time,
    ):
        self.path = path
        self.ttl_ms = ttl_hours * 3600 * 1000
        self._clock = clock
        self._data: dict[str, dict] = {}

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def load(self):
        self._data = {}
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading search cache {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._data = data

    def save(self):
        if not self.path:
            return
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error writing search cache {self.path}: {e}")

    def get(self, query: str) -> Optional[list[SearchHit]]:
        entry = self._data.get(query)
        if not isinstance(entry, dict):
            return None
        timestamp = entry.get("timestamp")
        if not isinstance(timestamp, (int, float)) or self._now_ms() - timestamp > self.ttl_ms:
            return None
        hits = []
        for link in entry.get("links") or []:
            if isinstance(link, dict) and link.get("link"):
                hits.append(SearchHit(
                    title=link.get("title", ""),
                    link=link["link"],
                    snippet=link.get("snippet", ""),
                ))
        return hits

    def put(self, query: str, hits: list[SearchHit]):
        self._data[query] = {
            "timestamp": self._now_ms(),
            "links": [h.to_dict() for h in hits],
        }


class CachedSearchClient:
    """Serve fresh cached results before asking the upstream client."""

    def __init__(self, client, cache: SearchCache):
        self.client = client
        self.cache = cache

    def search(self, query: str, limit: int = 3) -> list[SearchHit]:
        cached = self.cache.get(query)
        if cached is not None:
            logger.info(f"Using cached results for: {query}")
            return cached[:limit]
        logger.info(f"Searching for: {query}")
        hits = self.client.search(query, limit)
        self.cache.put(query, hits)
        return hits

    def begin_cycle(self):
        self.cache.load()

    def end_cycle(self):
        self.cache.save()
