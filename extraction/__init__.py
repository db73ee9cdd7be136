"""Page fetching, LLM extraction and normalization rules."""

from extraction.extractor import extract_prices, parse_candidates

__all__ = ["extract_prices", "parse_candidates"]
