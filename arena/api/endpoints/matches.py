from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from arena.core.security import require_organizer
from arena.models.match import Bracket, MatchStatus
from arena.schemas import auth_schemas, match_schemas
from arena.services import match_service
from arena.api.dependencies import get_db

router = APIRouter()

# --- Public reads ---

@router.get("", response_model=match_schemas.MatchPage)
async def list_matches_endpoint(
    tournament_id: Optional[int] = None,
    status: Optional[MatchStatus] = None,
    round: Optional[int] = None,
    bracket: Optional[Bracket] = None,
    sort_by: str = "scheduled_at",
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    matches, pagination = match_service.list_matches(
        db=db, tournament_id=tournament_id, status=status, round=round, bracket=bracket,
        sort_by=sort_by, sort_order=sort_order, page=page, limit=limit,
    )
    return {"matches": matches, "pagination": pagination}

@router.get("/upcoming", response_model=List[match_schemas.MatchRead])
async def get_upcoming_matches_endpoint(
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return match_service.get_upcoming_matches(db=db, limit=limit)

@router.get("/ongoing", response_model=List[match_schemas.MatchRead])
async def get_ongoing_matches_endpoint(db: Session = Depends(get_db)):
    return match_service.get_ongoing_matches(db=db)

@router.get("/tournament/{tournament_id}", response_model=match_schemas.MatchPage)
async def get_tournament_matches_endpoint(
    tournament_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    matches, pagination = match_service.get_tournament_matches(db=db, tournament_id=tournament_id, page=page, limit=limit)
    return {"matches": matches, "pagination": pagination}

@router.get("/competitor/{competitor_id}", response_model=List[match_schemas.MatchRead])
async def get_competitor_matches_endpoint(competitor_id: int, db: Session = Depends(get_db)):
    return match_service.get_competitor_matches(db=db, competitor_id=competitor_id)

@router.get("/{match_id}", response_model=match_schemas.MatchRead)
async def get_match_details_endpoint(match_id: int, db: Session = Depends(get_db)):
    match = match_service.get_match(db=db, match_id=match_id)
    if not match:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return match

# --- Organizer/admin management ---

@router.post("", response_model=match_schemas.MatchRead, status_code=status.HTTP_201_CREATED)
async def create_match_endpoint(
    match_in: match_schemas.MatchCreate,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.schedule_match(db=db, match_in=match_in)

@router.put("/{match_id}", response_model=match_schemas.MatchRead)
async def update_match_endpoint(
    match_id: int,
    match_in: match_schemas.MatchUpdate,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.update_match(db=db, match_id=match_id, match_update=match_in)

@router.delete("/{match_id}", response_model=Dict[str, str])
async def delete_match_endpoint(
    match_id: int,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    match_service.delete_match(db=db, match_id=match_id)
    return {"message": "Match deleted successfully"}

@router.put("/{match_id}/start", response_model=match_schemas.MatchRead)
async def start_match_endpoint(
    match_id: int,
    version: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.start_match(db=db, match_id=match_id, expected_version=version)

@router.put("/{match_id}/result", response_model=match_schemas.MatchRead)
async def set_match_result_endpoint(
    match_id: int,
    result_in: match_schemas.MatchResultUpdate,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.record_result(db=db, match_id=match_id, result_in=result_in)

@router.put("/{match_id}/reschedule", response_model=match_schemas.MatchRead)
async def reschedule_match_endpoint(
    match_id: int,
    reschedule_in: match_schemas.RescheduleRequest,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.reschedule_match(db=db, match_id=match_id, reschedule_in=reschedule_in)

@router.put("/{match_id}/cancel", response_model=match_schemas.MatchRead)
async def cancel_match_endpoint(
    match_id: int,
    reason_in: Optional[match_schemas.StatusReason] = None,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.cancel_match(db=db, match_id=match_id, reason_in=reason_in or match_schemas.StatusReason())

@router.put("/{match_id}/postpone", response_model=match_schemas.MatchRead)
async def postpone_match_endpoint(
    match_id: int,
    reason_in: Optional[match_schemas.StatusReason] = None,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.postpone_match(db=db, match_id=match_id, reason_in=reason_in or match_schemas.StatusReason())

@router.post("/{match_id}/games", response_model=match_schemas.MatchRead)
async def add_game_endpoint(
    match_id: int,
    game_in: match_schemas.GameCreate,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return match_service.add_game(db=db, match_id=match_id, game_in=game_in)
