"""
Change detector — decides what kind of change a new status represents.
"""

from typing import Optional

from status_tracker.models import AppStatus, StatusChange


def classify_change(previous: Optional[AppStatus], current: AppStatus) -> StatusChange:
    """
    Compare the stored status with the freshly fetched one.

    A version change needs a previous record to compare against.
    A state change does not: the first status we ever see for an app
    counts as a state change, so every app gets one notification on its
    first poll.
    """
    version_changed = previous is not None and previous.version_string != current.version_string
    state_changed = previous is None or previous.state != current.state

    return StatusChange(
        current=current,
        previous=previous,
        version_changed=version_changed,
        state_changed=state_changed,
    )
