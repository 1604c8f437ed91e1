import logging
from typing import Optional

from sqlalchemy.orm import Session

from arena.core.config import settings
from arena.core.exceptions import NotFoundError
from arena.models import competitor as competitor_model

logger = logging.getLogger(__name__)

def get_competitor(db: Session, competitor_id: int) -> Optional[competitor_model.Competitor]:
    return db.query(competitor_model.Competitor).filter(competitor_model.Competitor.id == competitor_id).first()

def _apply(db: Session, competitor_id: int, won: bool, sign: int) -> None:
    # Column arithmetic runs inside the UPDATE, so concurrent outcomes never overwrite each other.
    Competitor = competitor_model.Competitor
    if won:
        values = {Competitor.wins: Competitor.wins + sign, Competitor.points: Competitor.points + sign * settings.WIN_POINTS}
    else:
        values = {Competitor.losses: Competitor.losses + sign}
    updated = db.query(Competitor).filter(Competitor.id == competitor_id).update(values, synchronize_session="fetch")
    if not updated:
        raise NotFoundError(f"Competitor {competitor_id} not found")

def record_outcome(db: Session, competitor_id: int, won: bool) -> None:
    """Adds one win (and the win points) or one loss to a competitor. Does not commit."""
    _apply(db, competitor_id, won, 1)
    logger.info("Competitor %s recorded a %s", competitor_id, "win" if won else "loss")

def revert_outcome(db: Session, competitor_id: int, won: bool) -> None:
    _apply(db, competitor_id, won, -1)
    logger.info("Competitor %s reverted a %s", competitor_id, "win" if won else "loss")

def record_match_outcome(db: Session, winner_id: int, loser_id: int) -> None:
    record_outcome(db, winner_id, True)
    record_outcome(db, loser_id, False)

def revert_match_outcome(db: Session, winner_id: int, loser_id: int) -> None:
    revert_outcome(db, winner_id, True)
    revert_outcome(db, loser_id, False)
