"""Shared fixtures."""

import pytest

from status_tracker.models import AppConfig, AppStatus
from status_tracker.store import StatusStore


@pytest.fixture
def status_path(tmp_path):
    return str(tmp_path / "status.json")


@pytest.fixture
def store(status_path):
    return StatusStore(status_path)


@pytest.fixture
def app():
    return AppConfig(
        app_id="1234567890",
        name="Pirate Radio",
        webhook_url="https://discord.example/webhooks/1",
        icon="https://example.com/icon.png",
    )


@pytest.fixture
def in_review():
    return AppStatus(
        state="IN_REVIEW",
        version_string="1.2.0",
        release_type="MANUAL",
        created_date="2024-05-01T10:00:00-07:00",
        build_number="45",
    )
