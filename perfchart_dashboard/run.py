# perfchart_dashboard/run.py

import argparse
import logging
from typing import List, Optional

from . import config
from .acquisition import LiveFeed
from .dashboard.app import create_app
from .simulation import VitalSignsSimulator

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chart performance counters from Excel exports.")
    parser.add_argument("--host", default=config.HOST, help=f"Interface to bind (default {config.HOST}).")
    parser.add_argument("--port", type=int, default=config.PORT, help=f"Port to listen on (default {config.PORT}).")
    parser.add_argument("--debug", action="store_true", default=config.DEBUG, help="Dash debug mode and verbose logs.")
    parser.add_argument("--no-live", action="store_true", help="Do not start the simulated live monitor page.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    live_feed = None
    if not args.no_live:
        live_feed = LiveFeed(
            source=VitalSignsSimulator(),
            sample_period_s=config.SAMPLE_PERIOD_S,
            history_points=config.HISTORY_MAX_POINTS,
        )
        live_feed.start()

    app = create_app(live_feed)
    logger.info("Serving PerfChart on http://%s:%d", args.host, args.port)
    try:
        app.run(host=args.host, port=args.port, debug=args.debug)
    finally:
        if live_feed is not None:
            live_feed.stop()


if __name__ == "__main__":
    main()
