"""
App Store Status Tracker — entry point.
Run with: python -m status_tracker   (or the `status-tracker` command)

Meant to be started by a scheduler every few minutes. Each run is one pass
over apps.json; status.json carries memory between runs.
"""

import sys
from functools import partial

from status_tracker import config
from status_tracker.auth import generate_token
from status_tracker.client import fetch_app_status
from status_tracker.errors import ConfigError
from status_tracker.logging_utils import get_logger, setup_logging
from status_tracker.notifier import deliver_notification
from status_tracker.store import StatusStore
from status_tracker.tracker import StatusTracker

logger = get_logger(__name__)


def build_tracker() -> StatusTracker:
    """Wire the tracker from configuration. Raises ConfigError on bad setup."""
    key_id, issuer_id, private_key = config.require_credentials()
    apps = config.load_apps(config.APPS_CONFIG_PATH)
    logger.info("%d apps loaded from %s", len(apps), config.APPS_CONFIG_PATH)

    return StatusTracker(
        apps=apps,
        store=StatusStore(config.STATUS_FILE_PATH),
        fetch_status=partial(fetch_app_status, timeout=config.REQUEST_TIMEOUT),
        token_provider=partial(generate_token, key_id, issuer_id, private_key),
        deliver=partial(deliver_notification, timeout=config.REQUEST_TIMEOUT),
    )


def main() -> int:
    setup_logging(config.LOG_LEVEL)
    try:
        tracker = build_tracker()
    except ConfigError as e:
        logger.error("Error initializing tracker: %s", e)
        return 1

    tracker.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
