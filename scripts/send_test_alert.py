#!/usr/bin/env python3
"""Send a test push notification.

⚠️  WARNING: Without --dry-run this sends a REAL notification to the
    device registered for the push key!

This script creates a synthetic event and sends it through the same
formatter and push client as the live service.

Usage:
    # Dry run (preview only, no sends)
    python scripts/send_test_alert.py --dry-run

    # Send using the key from config / QUAKE_PUSH_KEY
    python scripts/send_test_alert.py

    # Send with an explicit key and magnitude
    python scripts/send_test_alert.py --key XXXX --magnitude 6.1

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    QUAKE_PUSH_KEY: Push provider key
"""

import argparse
import logging
import os
import sys
import time

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.event import SeismicEvent
from src.core.formatter import TimezoneError, format_alert
from src.shell.config_loader import ConfigError, build_config, load_config, load_config_from_env
from src.shell.push_client import PushClient

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_test_event(
    magnitude: float = 5.2,
    epicenter: str = "四川雅安市芦山县 [TEST]",
    latitude: float = 30.28,
    longitude: float = 102.95,
) -> SeismicEvent:
    """Create a synthetic event that starts now.

    Args:
        magnitude: Event magnitude
        epicenter: Epicenter name
        latitude: Epicenter latitude
        longitude: Epicenter longitude

    Returns:
        Synthetic SeismicEvent
    """
    now_ms = int(time.time() * 1000)
    return SeismicEvent(
        event_id=0,
        updates=1,
        latitude=latitude,
        longitude=longitude,
        depth=10.0,
        epicenter=epicenter,
        start_at=now_ms,
        update_at=now_ms,
        magnitude=magnitude,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a test push notification")
    parser.add_argument("--key", help="Push provider key (overrides config)")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--magnitude", type=float, default=5.2, help="Magnitude of the test event")
    parser.add_argument("--dry-run", action="store_true", help="Preview the message without sending")
    args = parser.parse_args()

    event = create_test_event(magnitude=args.magnitude)

    if args.dry_run:
        config = load_config_from_env(load_config(args.config))
    else:
        try:
            config = build_config(args.config, key=args.key)
        except ConfigError as e:
            logger.error("Invalid configuration: %s", e)
            return 1

    try:
        message = format_alert(event, config.timezone)
    except TimezoneError as e:
        logger.error("Cannot format message: %s", e)
        return 1

    logger.info("Title: %s", message.title)
    logger.info("Body:  %s", message.body)

    if args.dry_run:
        logger.info("Dry run - nothing sent")
        return 0

    response = PushClient(config.push).send(config.push_key, message.title, message.body)

    if response.success:
        logger.info("  ✓ Test notification sent: %s", response.body)
        return 0

    logger.error("  ✗ Failed to send test notification: %s", response.error)
    return 1


if __name__ == "__main__":
    sys.exit(main())
