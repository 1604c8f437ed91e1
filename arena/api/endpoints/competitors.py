from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from arena.schemas import competitor_schemas
from arena.services import competitor_service
from arena.api.dependencies import get_db

router = APIRouter()

@router.get("/{competitor_id}", response_model=competitor_schemas.CompetitorRead)
async def get_competitor_endpoint(competitor_id: int, db: Session = Depends(get_db)):
    competitor = competitor_service.get_competitor(db=db, competitor_id=competitor_id)
    if not competitor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Competitor not found")
    return competitor
