"""Protean Engine runner for the FleetOps domain.

Processes domain events asynchronously (driver notifications) when the
domain runs with ``event_processing = "async"``, as in production.

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool = False):
    from fleetops.domain import fleetops

    fleetops.init()
    await Engine(fleetops, test_mode=test_mode).run()


def main():
    parser = argparse.ArgumentParser(description="FleetOps Engine runner")
    parser.add_argument("--test-mode", action="store_true", help="Process pending messages and exit")
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
