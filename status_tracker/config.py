"""
Configuration loader.
Reads settings from .env file and makes them available to the rest of the app.
"""

import json
import os
from dotenv import load_dotenv

from status_tracker.errors import ConfigError
from status_tracker.models import AppConfig

load_dotenv()

# App Store Connect API key (Users and Access > Integrations)
APP_STORE_CONNECT_KEY_ID = os.getenv("APP_STORE_CONNECT_KEY_ID")
APP_STORE_CONNECT_ISSUER_ID = os.getenv("APP_STORE_CONNECT_ISSUER_ID")
# .env files usually carry the .p8 key on one line with literal "\n"
APP_STORE_CONNECT_PRIVATE_KEY = (os.getenv("APP_STORE_CONNECT_PRIVATE_KEY") or "").replace("\\n", "\n") or None

APP_STORE_CONNECT_API_URL = "https://api.appstoreconnect.apple.com/v1"

# Files, both live in the working directory unless overridden
APPS_CONFIG_PATH = os.getenv("APPS_CONFIG_PATH", os.path.join(os.getcwd(), "apps.json"))
STATUS_FILE_PATH = os.getenv("STATUS_FILE_PATH", os.path.join(os.getcwd(), "status.json"))

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def require_credentials() -> tuple[str, str, str]:
    """Return (key_id, issuer_id, private_key) or raise ConfigError if any is missing."""
    missing = [
        name for name, value in (
            ("APP_STORE_CONNECT_KEY_ID", APP_STORE_CONNECT_KEY_ID),
            ("APP_STORE_CONNECT_ISSUER_ID", APP_STORE_CONNECT_ISSUER_ID),
            ("APP_STORE_CONNECT_PRIVATE_KEY", APP_STORE_CONNECT_PRIVATE_KEY),
        )
        if not value
    ]
    if missing:
        raise ConfigError(f"App Store Connect credentials missing: {', '.join(missing)}")
    return APP_STORE_CONNECT_KEY_ID, APP_STORE_CONNECT_ISSUER_ID, APP_STORE_CONNECT_PRIVATE_KEY


def load_apps(path: str = APPS_CONFIG_PATH) -> list[AppConfig]:
    """
    Read the list of monitored apps from apps.json.

    The file must be a non-empty JSON array of
    {"appId": ..., "name": ..., "webhookUrl": ..., "icon": ...} objects.
    Order is preserved, apps are checked in the order they appear.
    """
    if not os.path.exists(path):
        raise ConfigError(f"apps.json does not exist: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"{path} is empty or invalid")

    apps = []
    for index, entry in enumerate(raw):
        try:
            apps.append(AppConfig.from_dict(entry))
        except (KeyError, TypeError) as e:
            raise ConfigError(f"{path}: entry {index} is missing a field ({e})") from e
    return apps
