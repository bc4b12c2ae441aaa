"""Main entry point for the lost & found match engine service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from app.config.environment import EnvironmentConfig
from app.config.exceptions import ConfigurationError
from app.config.loader import load_config
from app.config.models import AppConfig
from app.logging import get_logger
from app.logging.config import configure_logging
from app.persistence.database import close_database, get_session, init_database
from app.persistence.repositories import ItemRepository
from app.pipeline import MatchOrchestrator
from app.scheduler import SchedulerService
from app.triggers import ItemEventHandler, ItemPostingService, PendingItemSweeper

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI flag > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


@dataclass
class Services:
    """Shared service singletons wired for one process."""

    orchestrator: MatchOrchestrator
    event_handler: ItemEventHandler
    posting_service: ItemPostingService
    sweeper: PendingItemSweeper

    def shutdown(self) -> None:
        self.event_handler.shutdown(wait=True)


def build_services(app_config: AppConfig, env_config: EnvironmentConfig) -> Services:
    """Wire the orchestrator and every trigger call site from configuration."""
    orchestrator = MatchOrchestrator.from_config(app_config.matching)
    event_handler = ItemEventHandler(orchestrator, max_workers=env_config.trigger_workers)
    return Services(
        orchestrator=orchestrator,
        event_handler=event_handler,
        posting_service=ItemPostingService(
            orchestrator,
            event_handler=event_handler,
            ttl_seconds=app_config.items.ttl_seconds,
        ),
        sweeper=PendingItemSweeper(orchestrator),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lost-found-matcher",
        description="Lost & found match engine - pairs lost and found reports and notifies owners",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--process-item",
        metavar="ITEM_ID",
        default=None,
        help="Run one matching pass for a stored item, print the notification count and exit",
    )
    mode.add_argument(
        "--manual-run",
        action="store_true",
        help="Run the pending-item sweep once and exit",
    )
    return parser


def run_process_item(orchestrator: MatchOrchestrator, item_id: str) -> int:
    with get_session() as session:
        item = ItemRepository(session).get_by_id(item_id)

    if item is None:
        print(f"Item not found: {item_id}", file=sys.stderr)
        logger.error(
            f"Item not found: {item_id}",
            extra={"event": "cli.process_item.not_found", "item_id": item_id},
        )
        return 1

    result = orchestrator.process_new_item(item, trigger="cli")
    print(result.notifications_created)
    logger.info(
        f"Processed item {item_id}: {result.summary()}",
        extra={"event": "cli.process_item.completed", "item_id": item_id},
    )
    return 1 if result.had_errors else 0


def run_daemon(sweeper: PendingItemSweeper, interval_seconds: int) -> int:
    shutdown_event = threading.Event()
    scheduler_service = SchedulerService(
        sweep_callable=sweeper.run_once,
        interval_seconds=interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler_service.shutdown(wait=False)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the match engine.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        mode = "process-item" if args.process_item else "manual" if args.manual_run else "daemon"
        logger.info(
            "Lost & found match engine starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "mode": mode,
            },
        )

        init_database(env_config.database_url)

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "threshold": app_config.matching.threshold,
                "max_matches": app_config.matching.max_matches,
                "item_ttl_seconds": app_config.items.ttl_seconds,
                "sweep_interval_seconds": app_config.sweep_interval_seconds,
            },
        )

        services = build_services(app_config, env_config)
        orchestrator = services.orchestrator
        sweeper = services.sweeper

        try:
            if args.process_item:
                exit_code = run_process_item(orchestrator, args.process_item)
            elif args.manual_run:
                logger.info("Executing manual sweep", extra={"event": "service.manual_sweep.starting"})
                result = sweeper.run_once()
                logger.info(
                    f"Manual sweep completed: {result.items_processed} items processed, "
                    f"{result.notifications_created} notifications created",
                    extra={
                        "event": "service.manual_sweep.completed",
                        "duration_seconds": result.duration_seconds,
                        "had_errors": result.had_errors,
                    },
                )
                exit_code = 1 if result.had_errors else 0
            else:
                exit_code = run_daemon(sweeper, app_config.sweep_interval_seconds)
        finally:
            services.shutdown()
            close_database()

        logger.info(
            "Lost & found match engine stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
