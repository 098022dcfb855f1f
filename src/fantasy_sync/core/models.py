"""
Pydantic models for the shared fantasy domain.

Every provider's payloads are normalized into these models. They are used for:
- The output contract of the normalization layer
- Store upserts
- Sync results returned to callers
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

PlayerStatus = Literal["active", "injured", "bye", "suspended"]
ScoringType = Literal["standard", "ppr", "half_ppr"]
AcquisitionType = Literal["draft", "waiver", "trade", "free_agent"]

DEFAULT_PLAYOFF_WEEKS = [14, 15, 16, 17]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# League
# =============================================================================


class LeagueSettings(BaseModel):
    """League configuration relevant to syncing and display."""

    team_count: int = 12
    roster_size: int = 16
    playoff_weeks: list[int] = Field(default_factory=lambda: list(DEFAULT_PLAYOFF_WEEKS))
    scoring_type: ScoringType = "standard"


class League(BaseModel):
    """League identified by (provider, id)."""

    id: str
    provider: str
    name: str = "Unknown League"
    sport: str = "nfl"
    season: str
    settings: LeagueSettings = Field(default_factory=LeagueSettings)
    is_active: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)

    @computed_field
    @property
    def is_fallback(self) -> bool:
        """Whether this is a placeholder produced when listing failed."""
        return bool(self.metadata.get("fallback"))


# =============================================================================
# Players
# =============================================================================


class PlayerStats(BaseModel):
    """Opaque stat maps (stat key -> numeric value)."""

    season: dict[str, float] = Field(default_factory=dict)
    last_game: dict[str, float] = Field(default_factory=dict)
    projections: dict[str, float] = Field(default_factory=dict)


class RosterSlot(BaseModel):
    """Where a player sits on a fantasy roster."""

    slot: str
    is_starter: bool = True
    acquisition_type: Optional[AcquisitionType] = None


class Player(BaseModel):
    """
    Player as seen by one provider.

    ``id`` is the provider's external id; it is only unique within
    (provider, league), so the same athlete has different ids per provider.
    """

    id: str
    provider: str
    name: str = ""
    position: str = ""
    team: str = ""
    status: PlayerStatus = "active"
    injury_status: Optional[str] = None
    stats: PlayerStats = Field(default_factory=PlayerStats)
    roster: Optional[RosterSlot] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or f"player {self.id}"


# =============================================================================
# Teams
# =============================================================================


class TeamRecord(BaseModel):
    wins: int = 0
    losses: int = 0
    ties: int = 0


class TeamPoints(BaseModel):
    total: float = 0.0
    average: float = 0.0


class Team(BaseModel):
    """Fantasy team; re-derived from the provider on every sync."""

    id: str
    name: str = "Unknown Team"
    abbrev: str = ""
    owner_id: str = ""
    owner_name: str = "Unknown Owner"
    logo_url: Optional[str] = None
    record: TeamRecord = Field(default_factory=TeamRecord)
    points: TeamPoints = Field(default_factory=TeamPoints)
    roster: list[Player] = Field(default_factory=list)


# =============================================================================
# Sync Results
# =============================================================================


class SyncedCounts(BaseModel):
    teams: int = 0
    players: int = 0
    rosters: int = 0


class SyncResult(BaseModel):
    """Outcome of one league-sync attempt. Not persisted."""

    success: bool = False
    provider: str
    league_id: str
    synced_data: SyncedCounts = Field(default_factory=SyncedCounts)
    errors: list[str] = Field(default_factory=list)
    last_sync: datetime = Field(default_factory=_utcnow)


class SyncSummary(BaseModel):
    """Outcome of syncing every league of a user across providers."""

    success: bool
    results: dict[str, list[SyncResult]]
    total_leagues: int = 0
    errors: list[str] = Field(default_factory=list)
    reauth_required: list[str] = Field(default_factory=list)


# =============================================================================
# Auth
# =============================================================================


class TokenResponse(BaseModel):
    """OAuth token endpoint response."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None


class AuthValidation(BaseModel):
    valid: bool
    error: Optional[str] = None


class SetupInstructions(BaseModel):
    title: str
    steps: list[str]
    auth_type: Literal["oauth", "cookies", "none"]
    difficulty: Literal["easy", "medium", "hard"]


# =============================================================================
# Diagnostics
# =============================================================================


class ClientStats(BaseModel):
    provider: str
    request_count: int = 0
    cache_size: int = 0
    last_request_at: Optional[datetime] = None


class ProviderHealth(BaseModel):
    initialized: bool = False
    has_auth: bool = False
    last_request_at: Optional[datetime] = None
    errors: list[str] = Field(default_factory=list)
