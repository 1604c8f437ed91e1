import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, Integer, String
from sqlalchemy.orm import relationship
from arena.core.database import Base

class TournamentFormat(str, enum.Enum):
    SINGLE_ELIMINATION = "single-elimination"
    DOUBLE_ELIMINATION = "double-elimination"
    ROUND_ROBIN = "round-robin"
    SWISS = "swiss"
    LEAGUE = "league"

class TournamentStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

def _values(enum_cls):
    return [member.value for member in enum_cls]

class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    format = Column(Enum(TournamentFormat, native_enum=False, values_callable=_values), nullable=False)
    status = Column(Enum(TournamentStatus, native_enum=False, values_callable=_values), default=TournamentStatus.UPCOMING)
    description = Column(String, default="")
    game_name = Column(String, nullable=False)
    organizer_id = Column(Integer, nullable=True) # id claim of the organizer's token
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    registration_deadline = Column(DateTime, nullable=False)
    max_players = Column(Integer, nullable=False)
    current_players = Column(Integer, default=0)
    prize_pool = Column(Float, default=0)
    entry_fee = Column(Float, default=0)
    rules = Column(String, nullable=True)
    is_public = Column(Boolean, default=True)

    competitors = relationship("Competitor", back_populates="tournament", cascade="all, delete-orphan")
    matches = relationship("Match", back_populates="tournament", cascade="all, delete-orphan", order_by="Match.scheduled_at")
