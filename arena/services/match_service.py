import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from arena.core.config import settings
from arena.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from arena.models import match as match_model
from arena.models import user as user_model
from arena.schemas import match_schemas
from arena.services import competitor_service, match_engine, tournament_service

logger = logging.getLogger(__name__)

Match = match_model.Match
MatchStatus = match_model.MatchStatus

SORTABLE_FIELDS = {
    "scheduled_at": Match.scheduled_at,
    "round": Match.round,
    "status": Match.status,
    "id": Match.id,
}


def _commit(db: Session, match: Match) -> Match:
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        raise ConflictError(f"Match {match.id} was modified concurrently, reload and retry")
    db.refresh(match)
    return match


def _load_for_update(db: Session, match_id: int, expected_version: Optional[int]) -> Match:
    db_match = get_match(db, match_id)
    if not db_match:
        raise NotFoundError("Match not found")
    if expected_version is not None and db_match.version != expected_version:
        raise ConflictError(
            f"Match {match_id} is at version {db_match.version}, not {expected_version}"
        )
    return db_match


def _loser_of(match: Match, winner_id: int) -> int:
    return match.team_b_id if winner_id == match.team_a_id else match.team_a_id


def _counted_winner(match: Match) -> Optional[int]:
    """The winner the competitor ledger currently counts for this match, if any."""
    if match.status == MatchStatus.COMPLETED:
        return match.winner_id
    return None


def _apply_outcome(db: Session, match: Match, previous_winner_id: Optional[int]) -> None:
    """
    Keeps the competitor ledger equal to the sum of completed, decided matches.

    ``previous_winner_id`` is what ``_counted_winner`` returned before the
    transition; it is reverted and the match's new outcome (if any) recorded.
    """
    new_winner_id = _counted_winner(match)
    if previous_winner_id == new_winner_id:
        return
    if previous_winner_id is not None:
        competitor_service.revert_match_outcome(db, previous_winner_id, _loser_of(match, previous_winner_id))
    if new_winner_id is not None:
        competitor_service.record_match_outcome(db, new_winner_id, _loser_of(match, new_winner_id))


# --- Queries ---

def get_match(db: Session, match_id: int) -> Optional[Match]:
    return db.query(Match).filter(Match.id == match_id).first()

def list_matches(
    db: Session,
    tournament_id: Optional[int] = None,
    status: Optional[MatchStatus] = None,
    round: Optional[int] = None,
    bracket: Optional[match_model.Bracket] = None,
    sort_by: str = "scheduled_at",
    sort_order: str = "asc",
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Match], Dict[str, int]]:
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by '{sort_by}'")
    if page < 1 or limit < 1:
        raise ValidationError("Page and limit must be positive")

    query = db.query(Match)
    if tournament_id is not None:
        query = query.filter(Match.tournament_id == tournament_id)
    if status is not None:
        query = query.filter(Match.status == status)
    if round is not None:
        query = query.filter(Match.round == round)
    if bracket is not None:
        query = query.filter(Match.bracket == bracket)

    total = query.count()
    column = SORTABLE_FIELDS[sort_by]
    query = query.order_by(column.desc() if sort_order == "desc" else column.asc(), Match.id)
    matches = query.offset((page - 1) * limit).limit(limit).all()
    return matches, _pagination(page, limit, total)

def _pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {"current": page, "pages": math.ceil(total / limit), "total": total}

def get_tournament_matches(db: Session, tournament_id: int, page: int = 1, limit: int = 20) -> Tuple[List[Match], Dict[str, int]]:
    if not tournament_service.tournament_exists(db, tournament_id):
        raise NotFoundError("Tournament not found")
    return list_matches(db, tournament_id=tournament_id, page=page, limit=limit)

def get_competitor_matches(db: Session, competitor_id: int) -> List[Match]:
    return db.query(Match).filter(
        or_(Match.team_a_id == competitor_id, Match.team_b_id == competitor_id)
    ).order_by(Match.scheduled_at).all()

def get_upcoming_matches(db: Session, limit: Optional[int] = None) -> List[Match]:
    return db.query(Match).filter(
        Match.status == MatchStatus.SCHEDULED,
        Match.scheduled_at >= match_engine.utcnow(),
    ).order_by(Match.scheduled_at).limit(limit or settings.UPCOMING_LIMIT).all()

def get_ongoing_matches(db: Session) -> List[Match]:
    return db.query(Match).filter(Match.status == MatchStatus.ONGOING).order_by(Match.start_time).all()


# --- Scheduling and plain updates ---

def schedule_match(db: Session, match_in: match_schemas.MatchCreate) -> Match:
    db_match = match_engine.new_match(
        tournament_id=match_in.tournament_id,
        team_a_id=match_in.team_a_id,
        team_b_id=match_in.team_b_id,
        scheduled_at=match_in.scheduled_at,
        round=match_in.round,
        bracket=match_in.bracket,
        best_of=match_in.best_of,
        referee_id=match_in.referee_id,
        stream_url=match_in.stream_url,
    )

    if not tournament_service.tournament_exists(db, match_in.tournament_id):
        raise NotFoundError("Tournament not found")
    for competitor_id in (match_in.team_a_id, match_in.team_b_id):
        if not competitor_service.get_competitor(db, competitor_id):
            raise NotFoundError(f"Competitor {competitor_id} not found")
        if not tournament_service.competitor_belongs_to_tournament(db, competitor_id, match_in.tournament_id):
            raise ValidationError(f"Competitor {competitor_id} is not registered in this tournament")
    if match_in.referee_id is not None:
        _ensure_referee(db, match_in.referee_id)

    db.add(db_match)
    db.commit()
    db.refresh(db_match)
    logger.info("Match %s scheduled in tournament %s", db_match.id, db_match.tournament_id)
    return db_match

def _ensure_referee(db: Session, referee_id: int) -> None:
    if not db.query(user_model.User.id).filter(user_model.User.id == referee_id).first():
        raise NotFoundError(f"Referee {referee_id} not found")

def update_match(db: Session, match_id: int, match_update: match_schemas.MatchUpdate) -> Match:
    update_data: Dict[str, Any] = match_update.model_dump(exclude_unset=True)
    db_match = _load_for_update(db, match_id, update_data.pop("version", None))

    for key in ("round", "bracket", "best_of"):
        if key in update_data and update_data[key] is None:
            raise ValidationError(f"{key} cannot be cleared")
    if "best_of" in update_data and update_data["best_of"] != db_match.best_of and db_match.status != MatchStatus.SCHEDULED:
        raise InvalidStateError("Best of can only change before the match starts")
    if update_data.get("referee_id") is not None:
        _ensure_referee(db, update_data["referee_id"])

    for key, value in update_data.items():
        setattr(db_match, key, value)
    db_match.updated_at = match_engine.utcnow()
    return _commit(db, db_match)

def delete_match(db: Session, match_id: int) -> bool:
    """Administrative removal; also drops the match from its tournament and undoes its ledger entry."""
    db_match = get_match(db, match_id)
    if not db_match:
        raise NotFoundError("Match not found")
    previous_winner_id = _counted_winner(db_match)
    if previous_winner_id is not None:
        competitor_service.revert_match_outcome(db, previous_winner_id, _loser_of(db_match, previous_winner_id))
    tournament = db_match.tournament
    if tournament is not None and db_match in tournament.matches:
        tournament.matches.remove(db_match)
    db.delete(db_match)
    db.commit()
    logger.info("Match %s deleted", match_id)
    return True


# --- Lifecycle ---

def start_match(db: Session, match_id: int, expected_version: Optional[int] = None) -> Match:
    db_match = _load_for_update(db, match_id, expected_version)
    match_engine.start(db_match)
    return _commit(db, db_match)

def record_result(db: Session, match_id: int, result_in: match_schemas.MatchResultUpdate) -> Match:
    """Completes the match from aggregate scores and settles both competitors' records."""
    db_match = _load_for_update(db, match_id, result_in.version)
    previous_winner_id = _counted_winner(db_match)
    match_engine.record_result(
        db_match,
        result_in.result,
        result_in.score_a,
        result_in.score_b,
        tie_break_winner_id=result_in.tie_break_winner_id,
        allow_ties=settings.ALLOW_TIED_RESULTS,
    )
    _apply_outcome(db, db_match, previous_winner_id)
    return _commit(db, db_match)

def add_game(db: Session, match_id: int, game_in: match_schemas.GameCreate) -> Match:
    db_match = _load_for_update(db, match_id, game_in.version)
    previous_winner_id = _counted_winner(db_match)
    game = match_model.MatchGame(**game_in.model_dump(exclude={"version"}))
    match_engine.add_game(db_match, game)
    _apply_outcome(db, db_match, previous_winner_id)
    return _commit(db, db_match)

def reschedule_match(db: Session, match_id: int, reschedule_in: match_schemas.RescheduleRequest) -> Match:
    db_match = _load_for_update(db, match_id, reschedule_in.version)
    previous_winner_id = _counted_winner(db_match)
    match_engine.reschedule(
        db_match,
        reschedule_in.new_date,
        allow_from_completed=settings.ALLOW_RESCHEDULE_COMPLETED,
    )
    _apply_outcome(db, db_match, previous_winner_id)
    return _commit(db, db_match)

def cancel_match(db: Session, match_id: int, reason_in: match_schemas.StatusReason) -> Match:
    db_match = _load_for_update(db, match_id, reason_in.version)
    previous_winner_id = _counted_winner(db_match)
    match_engine.cancel(db_match, reason_in.reason)
    _apply_outcome(db, db_match, previous_winner_id)
    return _commit(db, db_match)

def postpone_match(db: Session, match_id: int, reason_in: match_schemas.StatusReason) -> Match:
    db_match = _load_for_update(db, match_id, reason_in.version)
    previous_winner_id = _counted_winner(db_match)
    match_engine.postpone(db_match, reason_in.reason)
    _apply_outcome(db, db_match, previous_winner_id)
    return _commit(db, db_match)
