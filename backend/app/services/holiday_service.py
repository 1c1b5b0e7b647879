"""
Service métier pour le calendrier des jours fériés.
"""

import logging
import datetime as dt
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.holiday import Holiday
from app.schemas.holiday import HolidayCreate

logger = logging.getLogger(__name__)


def create_holiday(db: Session, data: HolidayCreate) -> Holiday:
    """Ajoute un jour férié. Lève ValueError si un jour férié existe déjà à cette date."""
    existing = db.execute(
        select(Holiday).where(Holiday.date == data.date)
    ).scalar_one_or_none()
    if existing:
        raise ValueError("Un jour férié existe déjà pour cette date.")

    holiday = Holiday(date=data.date, description=data.description)
    db.add(holiday)
    db.commit()
    db.refresh(holiday)

    logger.info("Jour férié ajouté : %s (%s)", holiday.date, holiday.description)
    return holiday


def list_holidays(
    db: Session,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> List[Holiday]:
    query = select(Holiday)
    if start_date:
        query = query.where(Holiday.date >= start_date)
    if end_date:
        query = query.where(Holiday.date <= end_date)
    return db.execute(query.order_by(Holiday.date)).scalars().all()
