"""Player status normalization."""

from typing import Any

from ..core.models import PlayerStatus

INJURED_KEYWORDS = ("injured", "ir", "out")
BYE_KEYWORDS = ("bye",)
SUSPENDED_KEYWORDS = ("suspended",)


def normalize_player_status(status: Any) -> PlayerStatus:
    """
    Map a provider status string onto one of the four canonical statuses.

    Matching is by case-insensitive substring, checked in the order
    injured, bye, suspended. Total: never raises, and anything unrecognised
    (including None, empty strings, bare codes such as "O" or "SUS", and
    non-string values) is ``"active"``.
    """
    if not isinstance(status, str):
        return "active"
    s = status.strip().lower()
    if not s:
        return "active"

    if any(keyword in s for keyword in INJURED_KEYWORDS):
        return "injured"
    if any(keyword in s for keyword in BYE_KEYWORDS):
        return "bye"
    if any(keyword in s for keyword in SUSPENDED_KEYWORDS):
        return "suspended"
    return "active"
