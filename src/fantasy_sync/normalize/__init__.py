"""
Normalization layer: provider payloads -> shared domain models.

One module per provider, each exposing pure functions:

    normalize_league(raw, *, default_season) -> League
    normalize_team(raw) -> Team
    normalize_player(raw, *, week=None) -> Player

Missing fields fall back to explicit defaults; payloads whose shape is
wrong raise PayloadValidationError.
"""

from . import cbs, espn, sleeper, yahoo
from .status import normalize_player_status

__all__ = [
    "cbs",
    "espn",
    "sleeper",
    "yahoo",
    "normalize_player_status",
]
