"""Turn LLM output into candidate price records.

The LLM response is untrusted text. Everything that leaves this module is a
list of CandidateRecord, possibly empty; parse errors never escape.
"""

import json
import logging
import re
from typing import Callable

import anthropic
import requests

from extraction.llm import build_extraction_prompt, request_completion
from extraction.models import CandidateRecord

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
# Some responses wrap the array in an object
_WRAPPER_KEYS = ("items", "prices")


def _strip_code_fence(text: str) -> str:
    if text.startswith("```"):
        parts = text.split("\n", 1)
        body = parts[1] if len(parts) > 1 else ""
        return body.rsplit("```", 1)[0].strip()
    return text


def _load_payload(text: str):
    try:
        return json.loads(text)
    except ValueError:
        pass

    # Recovery: first '[' through last ']'
    match = _ARRAY_RE.search(text)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except ValueError:
        return None


def parse_candidates(raw: str | None) -> list[CandidateRecord]:
    """Parse a raw LLM response into candidate records.

    Accepts a bare JSON array, a fenced one, or an array buried in prose.
    Returns [] for anything that isn't a list of objects.
    """
    if not raw or not isinstance(raw, str):
        return []

    payload = _load_payload(_strip_code_fence(raw.strip()))

    if isinstance(payload, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break

    if not isinstance(payload, list):
        return []

    candidates = []
    for item in payload:
        if isinstance(item, dict):
            candidates.append(CandidateRecord(**item))
    return candidates


def extract_prices(
    text: str,
    url: str,
    complete: Callable[[str], str] = request_completion,
) -> list[CandidateRecord]:
    """Extract candidate price records from one page's text.

    Empty text short-circuits without calling the LLM. Service and transport
    failures are logged and yield no candidates; MissingCredentialsError is
    left to propagate.
    """
    if not text:
        return []

    prompt = build_extraction_prompt(text, url)
    try:
        raw = complete(prompt)
    except (anthropic.APIError, requests.RequestException, TimeoutError) as e:
        logger.warning(f"LLM extraction failed for {url}: {e}")
        return []

    candidates = parse_candidates(raw)
    logger.debug(f"{len(candidates)} candidates from {url}")
    return candidates
