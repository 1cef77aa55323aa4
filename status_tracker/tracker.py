"""
Status tracker — the polling loop.

For every configured app, in order:
    1. Fetch the current status from App Store Connect.
    2. Ask the store whether it differs from the last one we saw.
    3. If it does: build the message, send it, then save the new status.
       The status is saved even when sending fails, so a broken webhook
       does not cause the same message to be retried on every run.
    4. If it does not: save the same status again (no-op rewrite).

One app failing never stops the others. Each check returns a CheckResult
instead of raising.
"""

from typing import Callable

from status_tracker.detector import classify_change
from status_tracker.errors import DeliveryError
from status_tracker.logging_utils import get_logger
from status_tracker.models import (
    AppConfig, AppStatus, CheckResult,
    DELIVERY_FAILED, FAILED, NOTIFIED, UNCHANGED,
)
from status_tracker.notifier import compose_notification
from status_tracker.store import StatusStore

logger = get_logger(__name__)

# (app_id, token) -> AppStatus
FetchStatus = Callable[[str, str], AppStatus]
# () -> bearer token
TokenProvider = Callable[[], str]
# (webhook_url, payload) -> None, raises DeliveryError
Deliver = Callable[[str, dict], None]


class StatusTracker:
    def __init__(
        self,
        apps: list[AppConfig],
        store: StatusStore,
        fetch_status: FetchStatus,
        token_provider: TokenProvider,
        deliver: Deliver,
    ):
        self.apps = apps
        self.store = store
        self.fetch_status = fetch_status
        self.token_provider = token_provider
        self.deliver = deliver

    def run(self) -> list[CheckResult]:
        """One pass over every app. Never raises for a single app's failure."""
        logger.info("Checking status of %d app(s)...", len(self.apps))
        results = [self.check_app(app) for app in self.apps]

        counts = {}
        for result in results:
            counts[result.outcome] = counts.get(result.outcome, 0) + 1
        summary = ", ".join(f"{outcome}={count}" for outcome, count in sorted(counts.items()))
        logger.info("Done. %s", summary or "no apps")

        failed = [result.app_id for result in results if not result.ok]
        if failed:
            logger.warning("%d app(s) could not be checked: %s", len(failed), ", ".join(failed))
        return results

    def check_app(self, app: AppConfig) -> CheckResult:
        try:
            current = self.fetch_status(app.app_id, self.token_provider())
            return self._process(app, current)
        except Exception as e:
            logger.exception("Error checking %s (%s) status", app.name, app.app_id)
            return CheckResult(app_id=app.app_id, outcome=FAILED, error=str(e))

    def _process(self, app: AppConfig, current: AppStatus) -> CheckResult:
        if not self.store.has_changed(app.app_id, current):
            logger.info("%s: no change (%s %s)", app.name, current.state, current.version_string)
            self.store.save(app.app_id, current)
            return CheckResult(app_id=app.app_id, outcome=UNCHANGED)

        change = classify_change(self.store.get(app.app_id), current)
        payload = compose_notification(app, change)
        logger.info(
            "%s: %s %s (first_seen=%s, version_changed=%s, state_changed=%s)",
            app.name, current.state, current.version_string,
            change.first_seen, change.version_changed, change.state_changed,
        )

        outcome = NOTIFIED
        error = None
        try:
            self.deliver(app.webhook_url, payload)
        except DeliveryError as e:
            logger.error("%s: notification not delivered: %s", app.name, e)
            outcome = DELIVERY_FAILED
            error = str(e)

        self.store.save(app.app_id, current)
        return CheckResult(app_id=app.app_id, outcome=outcome, error=error)
