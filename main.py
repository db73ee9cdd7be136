#!/usr/bin/env python3
"""Main entry point for the construction price aggregator."""

import argparse
import json
import logging

from dotenv import load_dotenv
load_dotenv()

from aggregator import AggregationRunner
from cache import PriceCache
from config import ANTHROPIC_API_KEY, GOOGLE_API_KEY, GOOGLE_CSE_ID, HOST, PORT

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def check_credentials() -> bool:
    """Warn about missing keys. Cache reads and demo data still work without them."""
    missing = [
        name for name, value in (
            ("GOOGLE_API_KEY", GOOGLE_API_KEY),
            ("GOOGLE_CSE_ID", GOOGLE_CSE_ID),
            ("ANTHROPIC_API_KEY", ANTHROPIC_API_KEY),
        ) if not value
    ]
    if missing:
        logger.warning(f"Missing API keys: {', '.join(missing)}. Only demo or cached data will be served.")
    return not missing


def main():
    parser = argparse.ArgumentParser(description="Egypt construction material price aggregator")
    parser.add_argument(
        "--once", action="store_true", help="Run a single refresh cycle, print the prices and exit"
    )
    parser.add_argument(
        "--no-api", action="store_true", help="Run the refresh scheduler without the HTTP API"
    )
    parser.add_argument("--host", default=HOST, help="API host")
    parser.add_argument("--port", type=int, default=PORT, help="API port")
    args = parser.parse_args()

    check_credentials()

    cache = PriceCache()
    runner = AggregationRunner(cache)

    if args.once:
        snapshot = runner.run()
        print(json.dumps(
            {"updatedAt": snapshot.updated_at, "items": cache.to_dicts()},
            ensure_ascii=False,
            indent=2,
        ))
        return

    if args.no_api:
        from scheduler import run_scheduler
        run_scheduler(runner)
        return

    import uvicorn
    from api import create_app

    app = create_app(cache, runner, start_scheduler=True)
    logger.info(f"Price API running on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
