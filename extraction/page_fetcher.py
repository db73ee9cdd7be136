"""Fetch source pages and reduce them to plain text for the LLM."""

import logging
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup

from config import (
    ACCEPT_LANGUAGE,
    MAX_REDIRECTS,
    PAGE_TEXT_MAX_CHARS,
    REQUEST_TIMEOUT,
    USER_AGENT,
)

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

_session: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _session
    if _session is None:
        _session = requests.Session()
        _session.max_redirects = MAX_REDIRECTS
        _session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept-Language": ACCEPT_LANGUAGE,
        })
    return _session


def sanitize_html(html: str, max_chars: int = PAGE_TEXT_MAX_CHARS) -> str:
    """Strip markup, scripts and styles; collapse whitespace; truncate."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    text = _WHITESPACE_RE.sub(" ", soup.get_text(" ")).strip()
    return text[:max_chars]


def fetch_page_text(url: str) -> str:
    """Fetch a page and return its sanitized text, or "" on any failure."""
    if not url:
        return ""

    session = _get_session()
    try:
        resp = session.get(url, timeout=REQUEST_TIMEOUT, allow_redirects=True)
        # Only 2xx/3xx bodies are worth reading
        if not 200 <= resp.status_code < 400:
            logger.warning(f"Fetch fail: {url} returned HTTP {resp.status_code}")
            return ""
        resp.encoding = resp.apparent_encoding or "utf-8"
    except requests.RequestException as e:
        logger.warning(f"Fetch fail: {url}: {e}")
        return ""

    content_type = resp.headers.get("Content-Type", "")
    if content_type and "html" not in content_type and "text" not in content_type:
        logger.debug(f"Skipping non-text page {url} ({content_type})")
        return ""

    return sanitize_html(resp.text)
