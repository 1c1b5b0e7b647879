"""
Router pour le calendrier des jours fériés.
"""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.holiday import HolidayCreate, HolidayResponse
from app.services import holiday_service

router = APIRouter(prefix="/api/v1/holidays", tags=["Jours fériés"])


@router.post("", response_model=HolidayResponse, status_code=201, summary="Ajouter un jour férié")
def create_holiday(data: HolidayCreate, db: Session = Depends(get_db)):
    try:
        return holiday_service.create_holiday(db, data)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("", response_model=List[HolidayResponse], summary="Lister les jours fériés")
def list_holidays(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    db: Session = Depends(get_db),
):
    """Retourne les jours fériés triés par date, éventuellement bornés."""
    return holiday_service.list_holidays(db, start_date, end_date)
