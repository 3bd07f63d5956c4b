from __future__ import annotations

MAX_STARS = 3


def star_rating(failed_steps: int) -> int:
    """Stars for a finished session: 0-1 failed steps give 3, 2-3 give 2, 4-5 give 1, more give 0."""
    if failed_steps < 0:
        raise ValueError(f"failed step count cannot be negative: {failed_steps}")
    if failed_steps >= 6:
        return 0
    if failed_steps >= 4:
        return 1
    if failed_steps >= 2:
        return 2
    return MAX_STARS
