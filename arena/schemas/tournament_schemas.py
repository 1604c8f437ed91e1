from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from arena.models.tournament import TournamentFormat, TournamentStatus
from ._datetime import to_naive_utc

class TournamentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    format: TournamentFormat
    description: str = Field(default="", max_length=1000)
    game_name: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    max_players: int = Field(ge=2, le=1000)
    prize_pool: float = Field(default=0, ge=0)
    entry_fee: float = Field(default=0, ge=0)
    rules: Optional[str] = Field(default=None, max_length=2000)
    is_public: bool = True

class TournamentCreate(TournamentBase):

    @field_validator("start_date", "end_date", "registration_deadline")
    @classmethod
    def normalize_timezone(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        if self.registration_deadline >= self.start_date:
            raise ValueError("Registration deadline must be before start date")
        return self

class TournamentRead(TournamentBase):
    id: int
    status: TournamentStatus
    organizer_id: Optional[int] = None
    current_players: int

    class Config:
        from_attributes = True
