import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from arena.core.exceptions import NotFoundError, ValidationError
from arena.models import tournament as tournament_model
from arena.models import competitor as competitor_model
from arena.schemas import tournament_schemas, competitor_schemas
from arena.services.match_engine import utcnow

logger = logging.getLogger(__name__)

def create_tournament(db: Session, tournament: tournament_schemas.TournamentCreate, organizer_id: Optional[int]) -> tournament_model.Tournament:
    db_tournament = tournament_model.Tournament(
        **tournament.model_dump(),
        organizer_id=organizer_id,
        status=tournament_model.TournamentStatus.UPCOMING,
        current_players=0,
    )
    db.add(db_tournament)
    db.commit()
    db.refresh(db_tournament)
    logger.info("Tournament %s created by organizer %s", db_tournament.id, organizer_id)
    return db_tournament

def get_tournament(db: Session, tournament_id: int) -> Optional[tournament_model.Tournament]:
    return db.query(tournament_model.Tournament).filter(tournament_model.Tournament.id == tournament_id).first()

def list_tournaments(db: Session, status: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[tournament_model.Tournament]:
    query = db.query(tournament_model.Tournament)
    if status:
        query = query.filter(tournament_model.Tournament.status == status)
    return query.order_by(tournament_model.Tournament.start_date).offset(skip).limit(limit).all()

def tournament_exists(db: Session, tournament_id: int) -> bool:
    return db.query(tournament_model.Tournament.id).filter(tournament_model.Tournament.id == tournament_id).first() is not None

def competitor_belongs_to_tournament(db: Session, competitor_id: int, tournament_id: int) -> bool:
    return db.query(competitor_model.Competitor.id).filter(
        competitor_model.Competitor.id == competitor_id,
        competitor_model.Competitor.tournament_id == tournament_id,
        competitor_model.Competitor.is_active == True,
    ).first() is not None

def is_registration_open(tournament: tournament_model.Tournament) -> bool:
    return (
        tournament.status == tournament_model.TournamentStatus.UPCOMING
        and utcnow() < tournament.registration_deadline
        and tournament.current_players < tournament.max_players
    )

def register_competitor(db: Session, tournament_id: int, competitor_in: competitor_schemas.CompetitorCreate) -> competitor_model.Competitor:
    tournament = get_tournament(db, tournament_id)
    if not tournament:
        raise NotFoundError("Tournament not found")
    if tournament.current_players >= tournament.max_players:
        raise ValidationError("Tournament is full")
    if not is_registration_open(tournament):
        raise ValidationError("Registration is closed for this tournament")

    duplicate = db.query(competitor_model.Competitor).filter(
        competitor_model.Competitor.tournament_id == tournament_id,
        competitor_model.Competitor.name == competitor_in.name,
    ).first()
    if duplicate:
        raise ValidationError(f"Competitor '{competitor_in.name}' is already registered in this tournament")

    db_competitor = competitor_model.Competitor(**competitor_in.model_dump(), tournament_id=tournament_id)
    db.add(db_competitor)
    tournament.current_players += 1
    db.commit()
    db.refresh(db_competitor)
    logger.info("Competitor %s registered in tournament %s", db_competitor.id, tournament_id)
    return db_competitor

def list_competitors(db: Session, tournament_id: int) -> List[competitor_model.Competitor]:
    if not tournament_exists(db, tournament_id):
        raise NotFoundError("Tournament not found")
    return db.query(competitor_model.Competitor).filter(
        competitor_model.Competitor.tournament_id == tournament_id,
        competitor_model.Competitor.is_active == True,
    ).order_by(competitor_model.Competitor.seed, competitor_model.Competitor.id).all()
