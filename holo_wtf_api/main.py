"""Main module entrypoint for container and local runtime execution.

This module validates startup configuration, starts the HTTP service, and
translates termination signals into a bounded graceful shutdown.
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import threading
from typing import Sequence

from holo_wtf_api.bootstrap import bootstrap_start_service
from holo_wtf_api.config import ConfigError, config_configure_logging, config_load_settings
from holo_wtf_api.routing import RouteRegistrationError
from holo_wtf_api.service import ServiceStartupError

MAIN_EXIT_OK = 0
MAIN_EXIT_STARTUP_FAILURE = 1
MAIN_EXIT_CONFIG_ERROR = 2

_MAIN_SIGNAL_POLL_SECONDS = 0.5

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Run selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to the process arguments.

    Returns:
        int: Process exit status; 0 on clean shutdown.

    Raises:
        RuntimeError: Fatal startup failures are reported through the exit status instead.
    """

    argument_parser = argparse.ArgumentParser(description="holo-wtf-api runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "check-config"),
        help="Runtime command: `api` starts the server, `check-config` validates and prints resolved settings",
        type=str,
    )
    argument_parser.add_argument(
        "--config-file",
        dest="config_file",
        type=str,
        help="Optional packaged configuration file path (defaults to HOLO_WTF_CONFIG_FILE or ./holo_wtf.toml)",
    )
    parsed_arguments = argument_parser.parse_args(argv)

    config_configure_logging("info")
    try:
        settings = config_load_settings(config_file_path=parsed_arguments.config_file)
    except ConfigError as error:
        logger.error("%s", error)
        return MAIN_EXIT_CONFIG_ERROR
    config_configure_logging(settings.log_level)

    if parsed_arguments.command == "check-config":
        resolved_settings = settings.model_dump(mode="json")
        print(json.dumps(resolved_settings, indent=2, sort_keys=True))
        return MAIN_EXIT_OK

    stop_requested = threading.Event()

    def _main_request_stop(signal_number: int, _frame: object) -> None:
        logger.info("Received %s, stopping", signal.Signals(signal_number).name)
        stop_requested.set()

    previous_handlers = {
        signal_number: signal.signal(signal_number, _main_request_stop)
        for signal_number in (signal.SIGTERM, signal.SIGINT)
    }
    try:
        try:
            running_service = bootstrap_start_service(settings)
        except (RouteRegistrationError, ServiceStartupError) as error:
            logger.error("Service failed to start: %s", error)
            return MAIN_EXIT_STARTUP_FAILURE

        while not stop_requested.wait(_MAIN_SIGNAL_POLL_SECONDS):
            if not running_service.service_is_running():
                logger.error("Server stopped unexpectedly")
                running_service.service_shutdown(deadline_seconds=0)
                return MAIN_EXIT_STARTUP_FAILURE

        running_service.service_shutdown()
        return MAIN_EXIT_OK
    finally:
        for signal_number, previous_handler in previous_handlers.items():
            signal.signal(signal_number, previous_handler if previous_handler is not None else signal.SIG_DFL)


if __name__ == "__main__":
    raise SystemExit(main())
