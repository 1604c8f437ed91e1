import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from arena.core.database import Base

class Competitor(Base):
    __tablename__ = "competitors"
    __table_args__ = (UniqueConstraint("tournament_id", "name", name="uq_competitor_tournament_name"),)

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(Integer, ForeignKey("tournaments.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    logo = Column(String, default="")
    user_id = Column(Integer, nullable=True) # owning account, if any
    registration_date = Column(DateTime, default=lambda: datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None))
    is_active = Column(Boolean, default=True)
    seed = Column(Integer, default=0)

    # Ledger, only ever changed through competitor_service
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)
    points = Column(Integer, default=0, nullable=False)

    tournament = relationship("Tournament", back_populates="competitors")
