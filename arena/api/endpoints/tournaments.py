from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from arena.core.security import require_organizer
from arena.models.tournament import TournamentStatus
from arena.schemas import auth_schemas, competitor_schemas, tournament_schemas
from arena.services import tournament_service
from arena.api.dependencies import get_db

router = APIRouter()

@router.post("", response_model=tournament_schemas.TournamentRead, status_code=status.HTTP_201_CREATED)
async def create_tournament_endpoint(
    tournament_in: tournament_schemas.TournamentCreate,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return tournament_service.create_tournament(db=db, tournament=tournament_in, organizer_id=current_user.user_id)

@router.get("", response_model=List[tournament_schemas.TournamentRead])
async def list_tournaments_endpoint(
    status: Optional[TournamentStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return tournament_service.list_tournaments(db=db, status=status, skip=skip, limit=limit)

@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentRead)
async def get_tournament_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    tournament = tournament_service.get_tournament(db=db, tournament_id=tournament_id)
    if not tournament:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tournament not found")
    return tournament

@router.post("/{tournament_id}/competitors", response_model=competitor_schemas.CompetitorRead, status_code=status.HTTP_201_CREATED)
async def register_competitor_endpoint(
    tournament_id: int,
    competitor_in: competitor_schemas.CompetitorCreate,
    db: Session = Depends(get_db),
    current_user: auth_schemas.TokenData = Depends(require_organizer),
):
    return tournament_service.register_competitor(db=db, tournament_id=tournament_id, competitor_in=competitor_in)

@router.get("/{tournament_id}/competitors", response_model=List[competitor_schemas.CompetitorRead])
async def list_competitors_endpoint(tournament_id: int, db: Session = Depends(get_db)):
    return tournament_service.list_competitors(db=db, tournament_id=tournament_id)
