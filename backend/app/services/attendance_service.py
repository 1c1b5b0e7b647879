"""
Service d'administration des présences biométriques.
Historique des imports, revue des conflits, annulation d'un import, statistiques étudiant.
"""

import uuid
import logging
import datetime as dt
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.models.attendance import AttendanceConflict, AttendanceUpload, DayAttendance
from app.models.holiday import Holiday
from app.models.user import User
from app.schemas.attendance import (
    AttendanceDay,
    AttendanceStats,
    RevertReport,
    StudentAttendanceReport,
)
from app.schemas.holiday import HolidayResponse

logger = logging.getLogger(__name__)


def list_uploads(db: Session, limit: int = 50) -> List[AttendanceUpload]:
    """Retourne les derniers imports, du plus récent au plus ancien."""
    return db.execute(
        select(AttendanceUpload)
        .order_by(AttendanceUpload.created_at.desc())
        .limit(limit)
    ).scalars().all()


def list_conflicts(
    db: Session,
    resolved: Optional[bool] = None,
    reg_no: Optional[str] = None,
) -> List[AttendanceConflict]:
    """Liste les conflits, filtrables par statut de résolution et par regNo."""
    query = select(AttendanceConflict)
    if resolved is not None:
        query = query.where(AttendanceConflict.resolved.is_(resolved))
    if reg_no:
        query = query.where(AttendanceConflict.reg_no == reg_no)

    return db.execute(
        query.order_by(AttendanceConflict.date.desc(), AttendanceConflict.reg_no)
    ).scalars().all()


def resolve_conflict(
    db: Session, conflict_id: uuid.UUID, note: Optional[str] = None
) -> Optional[AttendanceConflict]:
    """Marque un conflit comme traité. Retourne None si le conflit est introuvable."""
    conflict = db.get(AttendanceConflict, conflict_id)
    if conflict is None:
        return None

    conflict.resolved = True
    if note:
        conflict.note = note

    db.commit()
    db.refresh(conflict)
    return conflict


def revert_upload(db: Session, upload_id: uuid.UUID) -> Optional[RevertReport]:
    """
    Annule un import :
    - supprime les présences dont il est le dernier auteur (celles écrasées depuis restent)
    - supprime les conflits qu'il a générés
    - supprime l'import lui-même
    Retourne None si l'import est introuvable.
    """
    upload = db.get(AttendanceUpload, upload_id)
    if upload is None:
        return None

    removed_attendances = db.execute(
        delete(DayAttendance).where(DayAttendance.last_upload_id == upload_id)
    ).rowcount
    removed_conflicts = db.execute(
        delete(AttendanceConflict).where(AttendanceConflict.new_upload_id == upload_id)
    ).rowcount

    db.delete(upload)
    db.commit()

    logger.info(
        "Import %s annulé : %d présences et %d conflits supprimés",
        upload_id, removed_attendances, removed_conflicts,
    )

    return RevertReport(
        upload_id=upload_id,
        removed_attendances=removed_attendances,
        removed_conflicts=removed_conflicts,
    )


def get_last_update(db: Session) -> Optional[dt.datetime]:
    """Date du dernier import, ou None si aucun import n'a encore eu lieu."""
    return db.execute(select(func.max(AttendanceUpload.created_at))).scalar()


def get_student_attendance(
    db: Session,
    reg_no: str,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
) -> Optional[StudentAttendanceReport]:
    """
    Présences d'un étudiant actif sur une période + taux de présence.

    Période par défaut : début de cours → fin de cours (ou aujourd'hui si non définie).
    Jours ouvrés = jours de la période − jours fériés de la période.

    Retourne None si l'étudiant est introuvable ou inactif.
    Lève ValueError si la période ne peut pas être déterminée ou est inversée.
    """
    user = db.execute(
        select(User).where(
            User.registration_number == reg_no,
            User.is_active.is_(True),
        )
    ).scalar_one_or_none()
    if user is None:
        return None

    start = start_date or user.course_start_date
    if start is None:
        raise ValueError("Date de début de cours non définie. Contactez un administrateur.")
    end = end_date or user.course_end_date or dt.date.today()
    if start > end:
        raise ValueError("La date de début doit précéder la date de fin.")

    records = db.execute(
        select(DayAttendance)
        .where(
            DayAttendance.reg_no == reg_no,
            DayAttendance.present.is_(True),
            DayAttendance.date.between(start, end),
        )
        .order_by(DayAttendance.date)
    ).scalars().all()

    holidays = db.execute(
        select(Holiday)
        .where(Holiday.date.between(start, end))
        .order_by(Holiday.date)
    ).scalars().all()

    total_days = (end - start).days + 1
    working_days = total_days - len(holidays)
    percentage = round(len(records) / working_days * 100, 2) if working_days > 0 else 0.0

    return StudentAttendanceReport(
        reg_no=reg_no,
        name=user.name,
        start_date=start,
        end_date=end,
        records=[AttendanceDay.model_validate(r) for r in records],
        holidays=[HolidayResponse.model_validate(h) for h in holidays],
        stats=AttendanceStats(
            present_days=len(records),
            total_working_days=working_days,
            percentage=percentage,
        ),
    )
