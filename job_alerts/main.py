"""Main entry point for the job alert worker."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from job_alerts.api import create_app
from job_alerts.config.environment import EnvironmentConfig
from job_alerts.config.exceptions import ConfigurationError
from job_alerts.config.loader import load_config
from job_alerts.config.models import AppConfig
from job_alerts.logging import get_logger
from job_alerts.logging.config import configure_logging
from job_alerts.notifications.service import NotificationService, create_email_sender
from job_alerts.persistence.database import close_database, init_database
from job_alerts.pipeline import AlertRunner
from job_alerts.scheduler import SchedulerService

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_runner(app_config: AppConfig, env_config: EnvironmentConfig) -> AlertRunner:
    """Wire the email provider, notification service and runner together.

    Raises:
        ConfigurationError: If the email provider cannot be configured
    """
    sender = create_email_sender(app_config, env_config)
    notification_service = NotificationService(
        sender=sender,
        links=app_config.links,
        email_config=app_config.email,
    )
    return AlertRunner(app_config=app_config, notification_service=notification_service)


def main() -> int:
    """
    Main entry point for the job alert worker.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Job alert worker - sends digest emails for saved job searches"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--manual-run",
        action="store_true",
        help="Process due alerts once and exit",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP trigger endpoint instead of the hourly scheduler",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    args = parser.parse_args()

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Job alert worker starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "manual_run": args.manual_run,
                "serve": args.serve,
            },
        )

        init_database(env_config.database_url)

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "email_provider": app_config.email.provider,
                "schedule_timezone": app_config.schedule.timezone,
                "base_url": app_config.links.base_url,
                "log_format": app_config.logging.format,
            },
        )

        runner = build_runner(app_config, env_config)

        if args.manual_run:
            logger.info("Executing manual alert run", extra={"event": "service.manual_run.starting"})
            result = runner.run_once()

            logger.info(
                f"Manual run completed: {result.processed} processed, "
                f"{result.matched_alerts} matched, {result.emails_sent} sent, "
                f"{result.schedules_updated} rescheduled",
                extra={
                    "event": "service.manual_run.completed",
                    "duration_seconds": result.total_duration_seconds,
                    "had_errors": result.had_errors,
                    "due_buckets": result.due_buckets,
                    "failure_count": len(result.failures),
                },
            )

            close_database()
            logger.info(
                "Job alert worker stopped",
                extra={
                    "event": "service.stopping",
                    "uptime_seconds": round(time.time() - start_time, 2),
                },
            )
            return 1 if result.had_errors else 0

        if args.serve:
            app = create_app(lambda: runner)
            logger.info(
                f"Serving HTTP trigger on {app_config.server.host}:{app_config.server.port}",
                extra={"event": "service.http.started"},
            )
            uvicorn.run(
                app,
                host=app_config.server.host,
                port=app_config.server.port,
                log_config=None,
            )
            close_database()
            return 0

        shutdown_event = threading.Event()
        scheduler_service = SchedulerService(
            run_callable=runner.run_once,
            timezone_name=app_config.schedule.timezone,
            shutdown_event=shutdown_event,
        )

        def signal_handler(signum, frame):
            logger.info(
                f"Received signal {signum}, shutting down",
                extra={"event": "service.signal_received", "signal": signum},
            )
            scheduler_service.shutdown(wait=False)
            close_database()

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
            close_database()

        logger.info(
            "Job alert worker stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return 0

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
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
