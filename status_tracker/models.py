"""
Data models — the structure of our data.
Every App Store Connect response and every status.json entry gets converted into these shapes.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AppConfig:
    """One monitored app, as listed in apps.json."""
    app_id: str                 # App Store Connect numeric id, e.g. "1234567890"
    name: str
    webhook_url: str
    icon: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        return cls(
            app_id=str(data["appId"]),
            name=data["name"],
            webhook_url=data["webhookUrl"],
            icon=data.get("icon", ""),
        )


@dataclass(frozen=True)
class AppStatus:
    """
    The review/release status of an app's latest iOS version.

    build_number is attached at fetch time for display only. It is never
    written to status.json and never compared.
    """
    state: str                  # e.g. "IN_REVIEW", "READY_FOR_DISTRIBUTION"
    version_string: str         # e.g. "2.3.1"
    release_type: str           # "MANUAL", "AFTER_APPROVAL" or "SCHEDULED"
    created_date: Optional[str] = None
    build_number: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"state": self.state}
        if self.created_date is not None:
            data["createdDate"] = self.created_date
        data["versionString"] = self.version_string
        data["releaseType"] = self.release_type
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AppStatus":
        return cls(
            state=data["state"],
            version_string=data["versionString"],
            release_type=data.get("releaseType", ""),
            created_date=data.get("createdDate"),
        )


@dataclass(frozen=True)
class StatusChange:
    """How a freshly fetched status differs from the stored one."""
    current: AppStatus
    previous: Optional[AppStatus]
    version_changed: bool
    state_changed: bool

    @property
    def first_seen(self) -> bool:
        return self.previous is None


# Outcomes of a single app check
UNCHANGED = "unchanged"
NOTIFIED = "notified"
DELIVERY_FAILED = "delivery_failed"
FAILED = "failed"


@dataclass(frozen=True)
class CheckResult:
    """What happened to one app during a polling pass."""
    app_id: str
    outcome: str                # one of the outcome constants above
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome != FAILED
