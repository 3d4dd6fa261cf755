"""Process Entry Point.

Parses the command line, loads configuration and runs the poller and the
notifier as two threads until the process is interrupted.
"""

import argparse
import logging
import os
import signal
import sys
import threading
import time

from src.core.config import Config
from src.handoff import Handoff
from src.notifier import Notifier
from src.poller import Poller
from src.shell.config_loader import ConfigError, build_config
from src.shell.feed_client import FeedClient
from src.shell.push_client import PushClient


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Poll the earthquake early-warning feed and push new events",
    )
    parser.add_argument(
        "--key",
        help="Push provider key (or set QUAKE_PUSH_KEY)",
    )
    parser.add_argument(
        "--duration",
        help="Interval between polls, e.g. 3s, 500ms, 1m (default: 3s)",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file (default: $CONFIG_PATH or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def install_signal_handlers(stop: threading.Event) -> None:
    """Set the stop event on SIGINT/SIGTERM."""
    def _handle(signum, frame):
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        stop.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def start_workers(
    config: Config,
    stop: threading.Event,
    feed_client: FeedClient | None = None,
    push_client: PushClient | None = None,
    handoff: Handoff | None = None,
) -> list[threading.Thread]:
    """Build the pipeline and start the poller and notifier threads.

    Args:
        config: Validated configuration
        stop: Shared cancellation signal
        feed_client: Feed client (created if not provided)
        push_client: Push client (created if not provided)
        handoff: Channel between the two (created if not provided)

    Returns:
        The started threads (notifier first, then poller)
    """
    handoff = handoff or Handoff()
    poller = Poller(config, feed_client or FeedClient(config.feed), handoff)
    notifier = Notifier(config, push_client or PushClient(config.push), handoff)

    threads = [
        threading.Thread(target=notifier.run, args=(stop,), name="notifier", daemon=True),
        threading.Thread(target=poller.run, args=(stop,), name="poller", daemon=True),
    ]
    for thread in threads:
        thread.start()
    return threads


def shutdown(threads: list[threading.Thread], grace_seconds: float) -> bool:
    """Wait up to grace_seconds in total for the workers to finish.

    Returns:
        True if every thread stopped within the grace period
    """
    deadline = time.monotonic() + grace_seconds
    for thread in threads:
        thread.join(timeout=max(0.0, deadline - time.monotonic()))

    still_running = [t.name for t in threads if t.is_alive()]
    if still_running:
        logger.warning("Workers still running after %.1fs: %s", grace_seconds, still_running)
        return False
    return True


def run(config: Config, stop: threading.Event | None = None) -> None:
    """Run the pipeline until stop is set (by a signal handler by default)."""
    if stop is None:
        stop = threading.Event()
        install_signal_handlers(stop)

    threads = start_workers(config, stop)

    while not stop.wait(timeout=1.0):
        pass

    shutdown(threads, config.shutdown_grace_seconds)
    logger.info("Exiting")


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = build_config(args.config, key=args.key, interval=args.duration)
    except ConfigError as e:
        logger.error("Cannot start: %s", e)
        return 2

    run(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
