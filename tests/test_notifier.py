"""Tests for notification composition and delivery."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from status_tracker.detector import classify_change
from status_tracker.errors import DeliveryError
from status_tracker.models import AppStatus
from status_tracker.notifier import (
    BUILD_RELEVANT_STATES,
    COLOR_DEFAULT,
    COLOR_FAILURE,
    COLOR_SUCCESS,
    DEFAULT_STATE_EMOJI,
    DEFAULT_STATE_LABEL,
    STATE_LABELS,
    compose_notification,
    deliver_notification,
    format_submitted_at,
    format_version,
    get_release_type_label,
    get_state_color,
    get_state_emoji,
    get_state_label,
)

NOW = datetime(2024, 5, 2, 12, 30, tzinfo=timezone.utc)


def _status(state, version="1.0", **kwargs):
    kwargs.setdefault("release_type", "MANUAL")
    return AppStatus(state=state, version_string=version, **kwargs)


def _fields(payload):
    return [(f["name"], f["value"]) for f in payload["embeds"][0]["fields"]]


class TestLookups:
    @pytest.mark.parametrize("state", sorted(STATE_LABELS) + ["BRAND_NEW_STATE", ""])
    def test_every_state_has_emoji_label_and_color(self, state):
        assert get_state_emoji(state)
        assert get_state_label(state)
        assert isinstance(get_state_color(state), int)

    def test_unknown_state_uses_defaults(self):
        assert get_state_emoji("BRAND_NEW_STATE") == DEFAULT_STATE_EMOJI
        assert get_state_label("BRAND_NEW_STATE") == DEFAULT_STATE_LABEL
        assert get_state_color("BRAND_NEW_STATE") == COLOR_DEFAULT

    def test_color_buckets(self):
        assert get_state_color("ACCEPTED") == COLOR_SUCCESS
        assert get_state_color("READY_FOR_DISTRIBUTION") == COLOR_SUCCESS
        assert get_state_color("METADATA_REJECTED") == COLOR_FAILURE
        assert get_state_color("IN_REVIEW") == 0xFFC107
        assert get_state_color("PENDING_DEVELOPER_RELEASE") == 0x0088CC
        assert get_state_color("PREPARE_FOR_SUBMISSION") == 0x6F42C1

    def test_release_type_labels(self):
        assert get_release_type_label("MANUAL") == "📤 Manual release"
        assert get_release_type_label("AFTER_APPROVAL") == "🚀 Automatic release after approval"
        assert get_release_type_label("SCHEDULED") == "⏰ Scheduled release"

    def test_unknown_release_type_echoes_raw_value(self):
        assert get_release_type_label("PHASED") == "PHASED release"


class TestFormatVersion:
    def test_build_relevant_state_shows_build(self):
        assert format_version(_status("IN_REVIEW", "1.2.0", build_number="45")) == "1.2.0 (45)"

    def test_other_state_hides_build(self):
        assert format_version(_status("REJECTED", "1.2.0", build_number="45")) == "1.2.0"

    def test_missing_build_placeholder(self):
        assert format_version(_status("WAITING_FOR_REVIEW", "1.2.0")) == "1.2.0 (-)"

    def test_build_relevant_subset(self):
        assert BUILD_RELEVANT_STATES == {
            "READY_FOR_DISTRIBUTION",
            "PENDING_DEVELOPER_RELEASE",
            "WAITING_FOR_REVIEW",
            "IN_REVIEW",
        }


class TestFormatSubmittedAt:
    def test_converts_to_display_timezone(self):
        assert format_submitted_at("2024-05-01T10:00:00-07:00", "UTC") == "2024-05-01 17:00"
        assert format_submitted_at("2024-05-01T10:00:00-07:00", "Asia/Seoul") == "2024-05-02 02:00"

    def test_naive_timestamp_treated_as_utc(self):
        assert format_submitted_at("2024-05-01T10:00:00", "UTC") == "2024-05-01 10:00"

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_missing_or_bad_value(self, value):
        assert format_submitted_at(value, "UTC") == "N/A"


class TestCompose:
    def test_first_seen(self, app, in_review):
        payload = compose_notification(app, classify_change(None, in_review), now=NOW, display_timezone="UTC")
        embed = payload["embeds"][0]

        assert embed["title"] == "Pirate Radio status changed!"
        assert embed["color"] == 0xFFC107
        assert embed["author"] == {"name": "Pirate Radio", "icon_url": "https://example.com/icon.png"}
        assert embed["footer"]["text"] == "App Store Connect"
        assert embed["url"] == "https://appstoreconnect.apple.com/apps/1234567890/appstore"
        assert embed["timestamp"] == NOW.isoformat()
        assert _fields(payload) == [
            ("Current Status", "🔍 In review"),
            ("Current Version", "1.2.0 (45)"),
            ("Release Type", "📤 Manual release"),
            ("Submitted At", "2024-05-01 17:00"),
        ]
        assert all(f["inline"] is True for f in embed["fields"])

    def test_version_changed_title_and_previous_field(self, app):
        change = classify_change(_status("IN_REVIEW", "1.0"), _status("IN_REVIEW", "1.1", build_number="7"))
        payload = compose_notification(app, change, now=NOW, display_timezone="UTC")

        assert payload["embeds"][0]["title"] == "Pirate Radio version changed!"
        assert _fields(payload) == [
            ("Current Status", "🔍 In review"),
            ("Current Version", "1.1 (7)"),
            ("Release Type", "📤 Manual release"),
            ("Previous Version", "1.0"),
            ("Submitted At", "N/A"),
        ]

    def test_state_changed_title(self, app):
        change = classify_change(_status("IN_REVIEW", "1.0"), _status("ACCEPTED", "1.0"))
        payload = compose_notification(app, change, now=NOW)

        assert payload["embeds"][0]["title"] == "Pirate Radio status changed!"
        assert payload["embeds"][0]["color"] == COLOR_SUCCESS
        assert "Previous Version" not in [name for name, _ in _fields(payload)]

    def test_both_changed_title(self, app):
        change = classify_change(_status("READY_FOR_DISTRIBUTION", "1.0"), _status("PREPARE_FOR_SUBMISSION", "1.1"))
        payload = compose_notification(app, change, now=NOW)

        assert payload["embeds"][0]["title"] == "Pirate Radio version and status changed!"

    def test_unknown_state_does_not_crash(self, app):
        change = classify_change(None, _status("BRAND_NEW_STATE", "2.0", release_type="PHASED"))
        payload = compose_notification(app, change, now=NOW)

        assert _fields(payload)[0] == ("Current Status", "❓ Unknown status")
        assert _fields(payload)[1] == ("Current Version", "2.0")
        assert _fields(payload)[2] == ("Release Type", "PHASED release")
        assert payload["embeds"][0]["color"] == COLOR_DEFAULT

    def test_timestamp_defaults_to_now(self, app, in_review):
        before = datetime.now(timezone.utc)
        payload = compose_notification(app, classify_change(None, in_review))
        stamp = datetime.fromisoformat(payload["embeds"][0]["timestamp"])
        assert stamp >= before


class TestDeliver:
    @patch("status_tracker.notifier.requests.post")
    def test_posts_json(self, mock_post):
        mock_post.return_value = MagicMock(raise_for_status=MagicMock())
        deliver_notification("https://hook", {"embeds": []}, timeout=5)

        mock_post.assert_called_once_with("https://hook", json={"embeds": []}, timeout=5)

    @patch("status_tracker.notifier.requests.post")
    def test_http_error_raises_delivery_error(self, mock_post):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("400 Bad Request")
        mock_post.return_value = response

        with pytest.raises(DeliveryError):
            deliver_notification("https://hook", {"embeds": []})

    @patch("status_tracker.notifier.requests.post", side_effect=requests.ConnectionError("down"))
    def test_connection_error_raises_delivery_error(self, mock_post):
        with pytest.raises(DeliveryError):
            deliver_notification("https://hook", {"embeds": []})
