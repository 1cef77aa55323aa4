"""
Status store — remembers the last status we saw for each app.

One JSON file (status.json by default), keyed by app id:

    {
      "1234567890": {
        "state": "IN_REVIEW",
        "createdDate": "2024-05-01T10:00:00-07:00",
        "versionString": "2.3.1",
        "releaseType": "MANUAL"
      }
    }

The whole file is read on every access and rewritten on every save.
There is no locking: only one tracker run may touch the file at a time.
"""

import json
import os
from typing import Optional

from status_tracker.logging_utils import get_logger
from status_tracker.models import AppStatus

logger = get_logger(__name__)


class StatusStore:
    def __init__(self, path: str):
        self.path = path

    def load(self) -> dict[str, AppStatus]:
        """
        Read every stored status.

        A missing file is created empty. An unreadable or corrupted file
        (bad JSON or bytes that are not UTF-8) is logged and treated as empty,
        so the next save overwrites it and every app gets notified once more.
        Never raises.
        """
        if not os.path.exists(self.path):
            try:
                self._write({})
            except OSError as e:
                logger.warning("Could not create status file %s: %s", self.path, e)
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            logger.warning("Could not read status file %s: %s", self.path, e)
            return {}

        if not isinstance(raw, dict):
            logger.warning("Status file %s does not hold a JSON object, ignoring it", self.path)
            return {}

        statuses = {}
        for app_id, entry in raw.items():
            try:
                statuses[app_id] = AppStatus.from_dict(entry)
            except (KeyError, TypeError) as e:
                logger.warning("Skipping malformed status entry for %s: %s", app_id, e)
        return statuses

    def get(self, app_id: str) -> Optional[AppStatus]:
        return self.load().get(app_id)

    def save(self, app_id: str, status: AppStatus) -> None:
        """Overwrite one app's entry. Read-modify-write of the whole file, not atomic."""
        statuses = self.load()
        statuses[app_id] = status
        self._write({key: value.to_dict() for key, value in statuses.items()})

    def has_changed(self, app_id: str, candidate: AppStatus) -> bool:
        """
        True if this status is worth a notification.

        Only state and version count. Release type, created date and build
        number ride along in the message but never trigger one on their own.
        """
        previous = self.get(app_id)
        if previous is None:
            return True
        return (
            previous.state != candidate.state
            or previous.version_string != candidate.version_string
        )

    def _write(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
