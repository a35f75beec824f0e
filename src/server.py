"""Protean Engine runner for the laundry domains.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: polls the outbox table and publishes events to the broker
- StreamSubscriptions: reads event streams and invokes event handlers
  (order repricing on delivery fee changes, staff push notifications)

Usage:
    python src/server.py                        # Run both domain engines
    python src/server.py --domain laundry       # Run only the laundry engine
    python src/server.py --domain notifications # Run only the notifications engine
"""

import argparse
import asyncio

from protean.server.engine import Engine

DOMAIN_NAMES = ["laundry", "notifications"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "laundry":
        from laundry.domain import laundry

        laundry.init()
        return laundry
    elif name == "notifications":
        from notifications.domain import notifications

        notifications.init()
        return notifications
    else:
        raise ValueError(f"Unknown domain: {name}")


async def run(domain_names):
    engines = [Engine(_get_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="Laundry Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    domain_names = [args.domain] if args.domain else DOMAIN_NAMES

    asyncio.run(run(domain_names))


if __name__ == "__main__":
    main()
