"""Run the simulator: ``python -m pyfla.simulator``.

Settings come from ``FLA_SIM_*`` environment variables; command-line
flags override them.
"""

from __future__ import annotations

import argparse
import logging

from aiohttp import web

from pyfla.config import SimulatorConfig
from pyfla.simulator.server import create_app


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Owner API simulator")
    parser.add_argument("--host", help="Listen address")
    parser.add_argument("--port", type=int, help="Listen port")
    parser.add_argument("--tick-interval", type=float, help="Seconds between simulation ticks")
    parser.add_argument("--require-token", action="store_true", default=None, help="Reject requests without a token")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    overrides = {
        key: value
        for key, value in (
            ("host", args.host),
            ("port", args.port),
            ("tick_interval", args.tick_interval),
            ("require_token", args.require_token),
        )
        if value is not None
    }
    config = SimulatorConfig.from_env(**overrides)
    web.run_app(create_app(config=config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
