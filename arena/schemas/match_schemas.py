from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime

from arena.models.match import Bracket, MatchStatus
from ._datetime import to_naive_utc

class MatchBase(BaseModel):
    tournament_id: int
    team_a_id: int
    team_b_id: int
    scheduled_at: datetime
    round: int = 1
    bracket: Bracket = Bracket.WINNERS
    best_of: int = 1
    referee_id: Optional[int] = None
    stream_url: str = ""

class MatchCreate(MatchBase):
    # Same-team, round and best-of checks live in the match engine so they
    # surface as ValidationError like every other scheduling failure.

    @field_validator("scheduled_at")
    @classmethod
    def normalize_timezone(cls, v):
        return to_naive_utc(v)

class GameRead(BaseModel):
    id: int
    game_number: int
    team_a_score: int
    team_b_score: int
    winner_id: Optional[int] = None
    duration: Optional[int] = 0
    notes: Optional[str] = ""

    class Config:
        from_attributes = True

class MatchRead(MatchBase):
    id: int
    status: MatchStatus
    result: Optional[str] = ""
    score_a: int
    score_b: int
    winner_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = 0
    notes: Optional[str] = None
    version: int
    games: List[GameRead] = []

    class Config:
        from_attributes = True

class Pagination(BaseModel):
    current: int
    pages: int
    total: int

class MatchPage(BaseModel):
    matches: List[MatchRead]
    pagination: Pagination

# --- Mutation payloads ---
# `version` is optional everywhere: when sent, the change only applies if the
# match is still at that version.

class MatchUpdate(BaseModel):
    """The only match fields a plain update may touch."""
    model_config = ConfigDict(extra="forbid")

    round: Optional[int] = Field(default=None, ge=1)
    bracket: Optional[Bracket] = None
    best_of: Optional[int] = Field(default=None, ge=1)
    referee_id: Optional[int] = None
    stream_url: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)
    version: Optional[int] = None

class MatchResultUpdate(BaseModel):
    result: Optional[str] = Field(default="", max_length=200)
    score_a: int
    score_b: int
    tie_break_winner_id: Optional[int] = None
    version: Optional[int] = None

class GameCreate(BaseModel):
    game_number: Optional[int] = None
    team_a_score: int = 0
    team_b_score: int = 0
    winner_id: Optional[int] = None
    duration: int = 0
    notes: str = ""
    version: Optional[int] = None

class RescheduleRequest(BaseModel):
    new_date: datetime
    version: Optional[int] = None

    @field_validator("new_date")
    @classmethod
    def normalize_timezone(cls, v):
        return to_naive_utc(v)

class StatusReason(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)
    version: Optional[int] = None
