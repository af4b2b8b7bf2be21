"""Protean Engine runner for the marketplace domain.

Used when PROTEAN_ENV selects asynchronous event processing. The Engine
reads the event streams and invokes projectors and event handlers, including
the change-feed publishers.

Usage:
    python src/server.py
    python src/server.py --json-logs
"""

import argparse
import asyncio
import logging

from protean.server.engine import Engine

from marketplace.utils.logging import configure_logging


async def run():
    from marketplace.domain import marketplace

    marketplace.init()
    await Engine(marketplace).run()


def main():
    parser = argparse.ArgumentParser(description="Marketplace Engine runner")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--debug", action="store_true", help="Log at debug level")
    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.debug else logging.INFO, json=args.json_logs)
    asyncio.run(run())


if __name__ == "__main__":
    main()
