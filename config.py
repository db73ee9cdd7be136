"""Settings for the construction price aggregator."""

import os

REQUEST_TIMEOUT = 15  # seconds
LLM_TIMEOUT = 20  # seconds
MAX_REDIRECTS = 5
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)
ACCEPT_LANGUAGE = "en-US,en;q=0.9,ar;q=0.8"

# Fan-out
MAX_HITS_PER_QUERY = 3
SEARCH_MIN_INTERVAL = 2.0  # seconds between upstream search calls
PAGE_TEXT_MAX_CHARS = 12000
REFRESH_INTERVAL_MINUTES = 60

# Search result cache (second tier, keyed by query)
SEARCH_CACHE_PATH = os.environ.get("SEARCH_CACHE_PATH", "price_cache.json")
SEARCH_CACHE_TTL_HOURS = 24

# Pricing
CURRENCY = "EGP"

# Google Programmable Search
GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY") or os.environ.get("GOOGLE_SEARCH_API_KEY")
GOOGLE_CSE_ID = os.environ.get("GOOGLE_CSE_ID") or os.environ.get("GOOGLE_SEARCH_CX")

# LLM extraction
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY")
EXTRACTION_MODEL = os.environ.get("EXTRACTION_MODEL", "claude-haiku-4-5")
EXTRACTION_MAX_TOKENS = 2000
EXTRACTION_TEMPERATURE = 0.2

# API
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))

QUERIES = [
    "steel rebar price Egypt today EGP",
    "اسعار الحديد اليوم في مصر",
    "cement price Egypt today EGP",
    "اسعار الاسمنت اليوم في مصر",
    "ready mix concrete price Egypt EGP",
    "اسعار الخرسانة الجاهزة اليوم في مصر",
]
