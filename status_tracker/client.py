"""
App Store Connect client.
Fetches the latest iOS version of an app and turns it into an AppStatus.
"""

from typing import Optional

import requests

from status_tracker.config import APP_STORE_CONNECT_API_URL, REQUEST_TIMEOUT
from status_tracker.errors import AppNotFoundError, FetchError, NoVersionFoundError, UnauthorizedError
from status_tracker.logging_utils import get_logger
from status_tracker.models import AppStatus

logger = get_logger(__name__)

PLATFORM = "IOS"


def fetch_app_status(app_id: str, token: str, timeout: float = REQUEST_TIMEOUT) -> AppStatus:
    """
    Get the current review/release status of an app's latest iOS version.

    Args:
        app_id:  App Store Connect app id.
        token:   Bearer token from auth.generate_token().
        timeout: Seconds to wait for the API.

    Raises:
        UnauthorizedError:   401, the token expired or the key is wrong.
        AppNotFoundError:    404, unknown app id.
        NoVersionFoundError: no iOS version in the response.
        FetchError:          any other HTTP or network failure.
    """
    url = f"{APP_STORE_CONNECT_API_URL}/apps/{app_id}/appStoreVersions"

    try:
        response = requests.get(
            url,
            params={"include": "build"},
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
    except requests.HTTPError as e:
        status_code = e.response.status_code if e.response is not None else None
        if status_code == 401:
            raise UnauthorizedError(f"Token expired or invalid for app {app_id}") from e
        if status_code == 404:
            raise AppNotFoundError(f"App {app_id} not found") from e
        raise FetchError(f"App Store Connect returned HTTP {status_code} for app {app_id}") from e
    except (requests.RequestException, ValueError) as e:
        # ValueError covers a body that is not JSON
        raise FetchError(f"Could not fetch versions for app {app_id}: {e}") from e

    return parse_versions_response(app_id, data)


def parse_versions_response(app_id: str, data: dict) -> AppStatus:
    """Pick the first iOS version from an appStoreVersions response and attach its build number."""
    versions = data.get("data") or []
    if not versions:
        raise NoVersionFoundError(f"No version information found for app {app_id}")

    ios_versions = [v for v in versions if v.get("attributes", {}).get("platform") == PLATFORM]
    if not ios_versions:
        raise NoVersionFoundError(f"No iOS version information found for app {app_id}")

    # Apple returns the newest version first
    latest = ios_versions[0]
    attributes = latest["attributes"]

    try:
        return AppStatus(
            state=attributes["appVersionState"],
            version_string=attributes["versionString"],
            release_type=attributes.get("releaseType", ""),
            created_date=attributes.get("createdDate"),
            build_number=_find_build_number(latest, data.get("included") or []),
        )
    except KeyError as e:
        raise FetchError(f"Version record for app {app_id} is missing {e}") from e


def _find_build_number(version: dict, included: list[dict]) -> Optional[str]:
    build_ref = (version.get("relationships") or {}).get("build") or {}
    build_id = (build_ref.get("data") or {}).get("id")
    if not build_id:
        return None

    for item in included:
        if item.get("type") == "builds" and item.get("id") == build_id:
            return (item.get("attributes") or {}).get("version")

    logger.debug("Build %s not present in included resources", build_id)
    return None
