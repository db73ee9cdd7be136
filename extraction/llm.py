"""Claude LLM call for pulling price records out of page text."""

import logging

from anthropic import Anthropic

from config import (
    ANTHROPIC_API_KEY,
    CURRENCY,
    EXTRACTION_MAX_TOKENS,
    EXTRACTION_MODEL,
    EXTRACTION_TEMPERATURE,
    LLM_TIMEOUT,
)
from models import MissingCredentialsError

logger = logging.getLogger(__name__)

_PROMPT_TEMPLATE = """You are extracting **current Egypt construction material prices** from the TEXT below.
Return ONLY a JSON array, no prose and no markdown. Each item has these fields:
- material: e.g. "Steel Rebar 10mm", "Ordinary Portland Cement", "Ready Mix Concrete 350"
- material_category: one of "steel", "cement", "concrete", "other"
- price_text: the price string exactly as shown on the page
- price_numeric: the price as a plain number in {currency}, no separators
- unit: "{currency}/ton", "{currency}/m3" or "{currency}/bag" when appropriate
- currency: must be "{currency}"
- source: short site or brand name

Only include items where a {currency} price is clearly stated. Omit anything else.
If nothing qualifies, return [].

TEXT (from {url}):
{text}"""

_client = None


def _get_client() -> Anthropic:
    global _client
    if not ANTHROPIC_API_KEY:
        raise MissingCredentialsError("ANTHROPIC_API_KEY is not set")
    if _client is None:
        _client = Anthropic(api_key=ANTHROPIC_API_KEY, timeout=LLM_TIMEOUT, max_retries=1)
    return _client


def build_extraction_prompt(text: str, url: str) -> str:
    """Build the extraction directive for one page."""
    return _PROMPT_TEMPLATE.format(currency=CURRENCY, url=url, text=text)


def request_completion(prompt: str) -> str:
    """Send a prompt to Claude and return the raw response text.

    Raises MissingCredentialsError without a key; API errors propagate.
    """
    client = _get_client()
    response = client.messages.create(
        model=EXTRACTION_MODEL,
        max_tokens=EXTRACTION_MAX_TOKENS,
        temperature=EXTRACTION_TEMPERATURE,
        messages=[{"role": "user", "content": prompt}],
    )
    if not response.content:
        return "[]"
    return response.content[0].text.strip()
