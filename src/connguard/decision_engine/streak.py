from __future__ import annotations

from collections.abc import Sequence

from connguard.schemas import JobStatus


def consecutive_failures(window: Sequence[JobStatus]) -> int:
    """Count failed runs from the most recent job back to the last non-failure.

    Cancelled runs neither count nor break the streak.
    """
    count = 0
    for status in window:
        if status == JobStatus.CANCELLED:
            continue
        if status != JobStatus.FAILED:
            break
        count += 1
    return count
