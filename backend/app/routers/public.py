"""
Router public (sans authentification) : date du dernier import de présences.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.attendance import LastUpdateResponse
from app.services import attendance_service

router = APIRouter(prefix="/api/v1/public", tags=["Public"])


@router.get("/last-update", response_model=LastUpdateResponse, summary="Date du dernier import")
def get_last_update(db: Session = Depends(get_db)):
    last_updated_at = attendance_service.get_last_update(db)
    if last_updated_at is None:
        raise HTTPException(status_code=404, detail="Aucun import pour le moment.")
    return LastUpdateResponse(last_updated_at=last_updated_at)
