# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: embed_all.py
# -----------------------------------------------------------------------------
"""
Embed all existing transcriptions and enrichments.

Usage: voice-embed-all   (or: python -m cli.embed_all)
"""
import json
import signal
import sys
import threading
import time
from typing import Optional

from config.Config import Config
from services.EmbedAllService import EmbedAllService
from services.EmbeddingStatsService import EmbeddingStatsService
from utility.logging_utils import get_logger

logger = get_logger(__name__)

RULE = "-" * 50


def _print_kind(title: str, counts: dict) -> None:
    print(f"{title}:")
    print(f"  Total: {counts['total']}")
    print(f"  Embedded: {counts['embedded']}")
    print(f"  Skipped (already embedded): {counts['skipped']}")
    print(f"  Errors: {counts['errors']}")


def run(embed_all_service: EmbedAllService, stats_service: EmbeddingStatsService) -> int:
    """Run one batch with already-wired services; returns the process exit code."""
    try:
        print("Checking current embedding statistics...")
        stats_before = stats_service.get_stats()
        print(f"Current embeddings: {json.dumps(stats_before)}\n")

        print("Starting embedding process...")
        print("   This may take a while depending on the amount of content...\n")

        start = time.perf_counter()
        results = embed_all_service.embed_all()
        duration = time.perf_counter() - start

        print("\nEmbedding process completed!\n" if not results.interrupted else "\nEmbedding process interrupted!\n")
        print("Results:")
        print(RULE)
        counts = results.to_dict()
        _print_kind("Transcriptions", counts["transcriptions"])
        print("")
        _print_kind("Enrichments", counts["enrichments"])
        print("")
        print(f"Duration: {duration:.2f}s")
        print(RULE)

        print("\nFinal embedding statistics:")
        print(json.dumps(stats_service.get_stats(), indent=2))
        print("\nDone!")
        return 0

    except Exception as e:
        logger.exception("Error during embedding process: %s", e)
        return 1


def _install_stop_handlers(stop_event: threading.Event) -> None:
    def _handler(signum, _frame):
        logger.warning("Received %s; finishing the current item, then stopping", signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(cfg: Optional[Config] = None) -> int:
    print("Starting embedding process for all existing content...\n")

    cfg = cfg or Config.from_env()
    logger.info("Config: %s", cfg.summary())

    if not cfg.is_openai_configured():
        logger.error("OpenAI API key is not configured. Please set OPENAI_API_KEY in your .env file.")
        return 1

    # Imported here so a missing key exits before Chroma / the DB are touched
    from api.AppContainer import AppContainer

    try:
        container = AppContainer(cfg)
    except Exception as e:
        logger.exception("Failed to initialise services: %s", e)
        return 1

    _install_stop_handlers(container.embed_all_service.stop_event)
    return run(container.embed_all_service, container.stats_service)


if __name__ == "__main__":
    sys.exit(main())
