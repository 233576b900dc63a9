#!/usr/bin/env python
# ============================================================================
# TSOOQ-GEN - COMMAND LINE ENTRY POINT
# ============================================================================
# STATUS: Core - CLI entry point
# PURPOSE: Load config, run the pipeline, map the outcome to an exit code
# CREATED: 18 OCT 2026
# USAGE:
#   tsooq-gen                          # Uses ./.tsooq.json (or $CONFIG)
#   tsooq-gen --config other.json      # Explicit config file
#   tsooq-gen --keep-container -v      # Leave the database up for debugging
# ============================================================================

import argparse
import os
import signal
import sys
import threading
from typing import List, Optional

from __version__ import __version__
from core.config import DEFAULT_CONFIG_FILE, Defaults, load_config
from core.errors import PipelineCancelledError, PipelineError
from core.logging import ComponentType, configure_logging, get_logger
from services.pipeline import PipelineCoordinator

logger = get_logger("tsooq_gen", component=ComponentType.CLI)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsooq-gen",
        description="Generate tsooq table models from a disposable PostgreSQL database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  tsooq-gen                          # Read {DEFAULT_CONFIG_FILE}
  tsooq-gen --config app.json        # Read app.json
  tsooq-gen --keep-container         # Do not stop/delete the container

Environment Variables:
  CONFIG                        Config file path (default: {DEFAULT_CONFIG_FILE})
  DOCKER_HOST                   Docker Engine endpoint (unix:// or tcp://)
  TSOOQ_DB_IMAGE                Image name (default: postgres)
  TSOOQ_DB_IMAGE_TAG            Image tag (default: 12.4-alpine)
  TSOOQ_CONTAINER_NAME          Container name (default: db-setup)
  TSOOQ_DB_PORT                 Host port (default: 45432)
  TSOOQ_DB_USER                 Database user (default: setup)
  TSOOQ_DB_PASSWORD             Database password
  TSOOQ_DB_NAME                 Database name (default: setup)
  TSOOQ_READY_TIMEOUT_SECONDS   Readiness deadline (default: 60)
  LOG_LEVEL / LOG_FORMAT        Logging level / "json"
        """
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to the JSON config file (overrides CONFIG)"
    )
    parser.add_argument(
        "--keep-container",
        action="store_true",
        help="Leave the database container running after the run"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser


def _install_signal_handlers(cancel_event: threading.Event) -> None:
    """SIGINT/SIGTERM request cancellation; the pipeline still tears down."""
    def handler(signum, frame):
        if cancel_event.is_set():
            return
        logger.warning(f"Received {signal.Signals(signum).name}, cancelling run...")
        cancel_event.set()

    signal.signal(signal.SIGINT, handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, handler)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        level="DEBUG" if args.verbose else os.environ.get("LOG_LEVEL", "INFO"),
        json_output=args.json_logs or os.environ.get("LOG_FORMAT", "").lower() == "json",
    )

    cancel_event = threading.Event()
    _install_signal_handlers(cancel_event)

    try:
        config = load_config(args.config)
        defaults = Defaults.from_env()
        logger.debug(f"Defaults: {defaults.summary()}")

        coordinator = PipelineCoordinator(
            config,
            defaults=defaults,
            cancel_event=cancel_event,
            keep_container=args.keep_container,
        )
        result = coordinator.run()
    except PipelineCancelledError as e:
        logger.error(f"Cancelled: {e}")
        return EXIT_CANCELLED
    except PipelineError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        return EXIT_FAILED

    logger.info(f"Generated {result.output_path} ({len(result.tables)} tables)")
    return EXIT_OK


def main_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
