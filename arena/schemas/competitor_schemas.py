from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class CompetitorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    logo: str = ""
    user_id: Optional[int] = None
    seed: int = 0

class CompetitorRead(CompetitorCreate):
    id: int
    tournament_id: int
    registration_date: Optional[datetime] = None
    is_active: bool
    wins: int
    losses: int
    points: int

    class Config:
        from_attributes = True
