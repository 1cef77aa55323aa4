"""
Notification composer — turns a status change into a webhook message.

The message is a Discord-style embed:
    - title saying what changed (version, status, or both)
    - colour picked from the new status
    - fields: current status, current version, release type,
      previous version (only when the version changed), submitted at

Every lookup table below has a default, so a status Apple adds tomorrow
still produces a message instead of an exception.
"""

from datetime import datetime, timezone
from typing import Optional

import requests
from dateutil import parser as date_parser
from dateutil import tz

from status_tracker.config import DISPLAY_TIMEZONE, REQUEST_TIMEOUT
from status_tracker.errors import DeliveryError
from status_tracker.logging_utils import get_logger
from status_tracker.models import AppConfig, AppStatus, StatusChange

logger = get_logger(__name__)

# ============================================================
# PART 1: Lookup tables
# ============================================================

STATE_EMOJIS = {
    "ACCEPTED": "✅",
    "DEVELOPER_REJECTED": "🚫",
    "IN_REVIEW": "🔍",
    "INVALID_BINARY": "⚠️",
    "METADATA_REJECTED": "📝❌",
    "PENDING_APPLE_RELEASE": "⏳",
    "PENDING_DEVELOPER_RELEASE": "👨‍💻",
    "PREPARE_FOR_SUBMISSION": "📦",
    "PROCESSING_FOR_DISTRIBUTION": "⚙️",
    "READY_FOR_DISTRIBUTION": "🎉",
    "READY_FOR_REVIEW": "📤",
    "REJECTED": "❌",
    "REPLACED_WITH_NEW_VERSION": "🔄",
    "WAITING_FOR_EXPORT_COMPLIANCE": "📋",
    "WAITING_FOR_REVIEW": "⏳",
}
DEFAULT_STATE_EMOJI = "❓"

STATE_LABELS = {
    "ACCEPTED": "Approved",
    "DEVELOPER_REJECTED": "Removed from review by developer",
    "IN_REVIEW": "In review",
    "INVALID_BINARY": "Invalid binary",
    "METADATA_REJECTED": "Metadata rejected",
    "PENDING_APPLE_RELEASE": "Pending Apple release",
    "PENDING_DEVELOPER_RELEASE": "Approved, pending developer release",
    "PREPARE_FOR_SUBMISSION": "Preparing for submission",
    "PROCESSING_FOR_DISTRIBUTION": "Processing for distribution",
    "READY_FOR_DISTRIBUTION": "Ready for distribution",
    "READY_FOR_REVIEW": "Ready for review",
    "REJECTED": "Rejected",
    "REPLACED_WITH_NEW_VERSION": "Replaced with new version",
    "WAITING_FOR_EXPORT_COMPLIANCE": "Waiting for export compliance",
    "WAITING_FOR_REVIEW": "Waiting for review",
}
DEFAULT_STATE_LABEL = "Unknown status"

# Colour buckets
COLOR_SUCCESS = 0x36A64F        # green
COLOR_FAILURE = 0xDC3545        # red
COLOR_WAITING = 0xFFC107        # yellow
COLOR_RELEASE_QUEUED = 0x0088CC  # blue
COLOR_PREPARING = 0x6F42C1      # purple
COLOR_DEFAULT = 0x95A5A6        # grey

STATE_COLORS = {
    "ACCEPTED": COLOR_SUCCESS,
    "READY_FOR_DISTRIBUTION": COLOR_SUCCESS,
    "DEVELOPER_REJECTED": COLOR_FAILURE,
    "REJECTED": COLOR_FAILURE,
    "INVALID_BINARY": COLOR_FAILURE,
    "METADATA_REJECTED": COLOR_FAILURE,
    "IN_REVIEW": COLOR_WAITING,
    "WAITING_FOR_REVIEW": COLOR_WAITING,
    "WAITING_FOR_EXPORT_COMPLIANCE": COLOR_WAITING,
    "PENDING_APPLE_RELEASE": COLOR_RELEASE_QUEUED,
    "PENDING_DEVELOPER_RELEASE": COLOR_RELEASE_QUEUED,
    "PROCESSING_FOR_DISTRIBUTION": COLOR_RELEASE_QUEUED,
    "PREPARE_FOR_SUBMISSION": COLOR_PREPARING,
    "READY_FOR_REVIEW": COLOR_PREPARING,
    "REPLACED_WITH_NEW_VERSION": COLOR_PREPARING,
}

RELEASE_TYPE_LABELS = {
    "MANUAL": "📤 Manual release",
    "AFTER_APPROVAL": "🚀 Automatic release after approval",
    "SCHEDULED": "⏰ Scheduled release",
}

# States where a build is attached to the version, so we show its number
BUILD_RELEVANT_STATES = frozenset({
    "READY_FOR_DISTRIBUTION",
    "PENDING_DEVELOPER_RELEASE",
    "WAITING_FOR_REVIEW",
    "IN_REVIEW",
})

FOOTER_TEXT = "App Store Connect"
FOOTER_ICON_URL = (
    "https://developer.apple.com/assets/elements/icons/app-store-connect/"
    "app-store-connect-64x64.png"
)
CONSOLE_URL_TEMPLATE = "https://appstoreconnect.apple.com/apps/{app_id}/appstore"

MISSING_VALUE = "N/A"


def get_state_emoji(state: str) -> str:
    return STATE_EMOJIS.get(state, DEFAULT_STATE_EMOJI)


def get_state_label(state: str) -> str:
    return STATE_LABELS.get(state, DEFAULT_STATE_LABEL)


def get_state_color(state: str) -> int:
    return STATE_COLORS.get(state, COLOR_DEFAULT)


def get_release_type_label(release_type: str) -> str:
    return RELEASE_TYPE_LABELS.get(release_type, f"{release_type} release")


def is_build_relevant(state: str) -> bool:
    return state in BUILD_RELEVANT_STATES


# ============================================================
# PART 2: Building the message
# ============================================================

def build_title(app_name: str, change: StatusChange) -> str:
    if change.version_changed and change.state_changed:
        return f"{app_name} version and status changed!"
    if change.version_changed:
        return f"{app_name} version changed!"
    # State-only, which also covers the first status we ever see
    return f"{app_name} status changed!"


def format_version(status: AppStatus) -> str:
    """
    Version shown in the message.

    For states where a build is attached, "2.3.1 (45)". The build may be
    missing if the response had no build linkage, shown as "2.3.1 (-)".
    """
    if is_build_relevant(status.state):
        return f"{status.version_string} ({status.build_number or '-'})"
    return status.version_string


def format_submitted_at(created_date: Optional[str], display_timezone: str = DISPLAY_TIMEZONE) -> str:
    """Render an ISO-8601 createdDate as "YYYY-MM-DD HH:MM" in the display timezone."""
    if not created_date:
        return MISSING_VALUE
    try:
        parsed = date_parser.isoparse(created_date)
    except (ValueError, OverflowError):
        logger.warning("Unparseable createdDate %r", created_date)
        return MISSING_VALUE

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    target = tz.gettz(display_timezone) or timezone.utc
    return parsed.astimezone(target).strftime("%Y-%m-%d %H:%M")


def build_fields(change: StatusChange, display_timezone: str = DISPLAY_TIMEZONE) -> list[dict]:
    current = change.current
    submitted_at = format_submitted_at(current.created_date, display_timezone)

    fields = [
        ("Current Status", f"{get_state_emoji(current.state)} {get_state_label(current.state)}"),
        ("Current Version", format_version(current)),
        ("Release Type", get_release_type_label(current.release_type)),
    ]
    if change.previous is not None and change.version_changed:
        fields.append(("Previous Version", change.previous.version_string))
    fields.append(("Submitted At", submitted_at))

    return [{"name": name, "value": value, "inline": True} for name, value in fields]


def compose_notification(
    app: AppConfig,
    change: StatusChange,
    now: Optional[datetime] = None,
    display_timezone: str = DISPLAY_TIMEZONE,
) -> dict:
    """
    Build the webhook body for one status change.

    Args:
        app:              The app the change belongs to (name, icon, id).
        change:           Output of classify_change().
        now:              Composition time. Defaults to the current UTC time.
        display_timezone: Timezone name for the "Submitted At" field.

    Returns:
        {"embeds": [embed]} ready to be POSTed as JSON.
    """
    now = now or datetime.now(timezone.utc)

    embed = {
        "title": build_title(app.name, change),
        "color": get_state_color(change.current.state),
        "author": {
            "name": app.name,
            "icon_url": app.icon,
        },
        "footer": {
            "text": FOOTER_TEXT,
            "icon_url": FOOTER_ICON_URL,
        },
        "timestamp": now.isoformat(),
        "url": CONSOLE_URL_TEMPLATE.format(app_id=app.app_id),
        "fields": build_fields(change, display_timezone),
    }
    return {"embeds": [embed]}


# ============================================================
# PART 3: Delivery
# ============================================================

def deliver_notification(webhook_url: str, payload: dict, timeout: float = REQUEST_TIMEOUT) -> None:
    """POST the payload once. No retry: a failure is raised as DeliveryError."""
    try:
        response = requests.post(webhook_url, json=payload, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DeliveryError(f"Webhook POST failed: {e}") from e
