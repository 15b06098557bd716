"""Protean Engine runner for the ordering context.

In production ordering handles its events asynchronously (order status
e-mails), so those need an Engine worker. Tracking is configured for
synchronous event processing in every environment (its broadcast feeds
in-process subscribers), so it never has work for an Engine.

Usage:
    python src/server.py
    python src/server.py --test-mode    # drain pending messages, then exit
"""

import argparse

import structlog
from protean.server.engine import Engine

from shared.logging import configure_logging

logger = structlog.get_logger(__name__)


def build_engine(test_mode: bool = False) -> Engine:
    from ordering.domain import ordering

    ordering.init()
    return Engine(ordering, test_mode=test_mode)


def main():
    parser = argparse.ArgumentParser(description="iTechGlass ordering event processor")
    parser.add_argument("--test-mode", action="store_true", help="Process pending messages and exit")
    args = parser.parse_args()

    configure_logging()
    engine = build_engine(test_mode=args.test_mode)
    logger.info("engine_starting", domain="ordering", test_mode=args.test_mode)
    engine.run()


if __name__ == "__main__":
    main()
