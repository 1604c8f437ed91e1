import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from arena.core.database import Base

class MatchStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"

class Bracket(str, enum.Enum):
    WINNERS = "winners"
    LOSERS = "losers"
    FINALS = "finals"
    GROUP = "group"

def _values(enum_cls):
    return [member.value for member in enum_cls]

class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    team_a_id = Column(Integer, ForeignKey("competitors.id"), nullable=False, index=True)
    team_b_id = Column(Integer, ForeignKey("competitors.id"), nullable=False, index=True)
    referee_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    winner_id = Column(Integer, ForeignKey("competitors.id"), nullable=True)

    scheduled_at = Column(DateTime, nullable=False, index=True)
    round = Column(Integer, default=1, nullable=False)
    bracket = Column(Enum(Bracket, native_enum=False, values_callable=_values), default=Bracket.WINNERS, nullable=False)
    best_of = Column(Integer, default=1, nullable=False)

    status = Column(Enum(MatchStatus, native_enum=False, values_callable=_values), default=MatchStatus.SCHEDULED, nullable=False, index=True)
    result = Column(String(200), default="")
    score_a = Column(Integer, default=0, nullable=False)
    score_b = Column(Integer, default=0, nullable=False)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, default=0) # minutes
    stream_url = Column(String, default="")
    notes = Column(String(1000), nullable=True)
    updated_at = Column(DateTime, nullable=True)

    # Bumped by SQLAlchemy on every UPDATE; a stale writer fails its flush.
    version = Column(Integer, nullable=False)

    tournament = relationship("Tournament", back_populates="matches")
    team_a = relationship("Competitor", foreign_keys=[team_a_id])
    team_b = relationship("Competitor", foreign_keys=[team_b_id])
    winner = relationship("Competitor", foreign_keys=[winner_id])
    referee = relationship("User", foreign_keys=[referee_id])
    games = relationship("MatchGame", back_populates="match", cascade="all, delete-orphan", order_by="MatchGame.id")

    __mapper_args__ = {"version_id_col": version}


class MatchGame(Base):
    __tablename__ = "match_games"

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    game_number = Column(Integer, nullable=False)
    team_a_score = Column(Integer, default=0, nullable=False)
    team_b_score = Column(Integer, default=0, nullable=False)
    winner_id = Column(Integer, ForeignKey("competitors.id"), nullable=True)
    duration = Column(Integer, default=0) # minutes
    notes = Column(String, default="")

    match = relationship("Match", back_populates="games")
