"""
Router pour les étudiants : recherche, mise à jour administrative, consultation des présences.
"""

import uuid
import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.attendance import StudentAttendanceReport
from app.schemas.student import StudentResponse, StudentUpdate
from app.services import attendance_service, student_service

router = APIRouter(prefix="/api/v1/students", tags=["Étudiants"])


@router.get("", response_model=List[StudentResponse], summary="Rechercher des étudiants")
def filter_students(
    semester: Optional[int] = None,
    reg_no_prefix: Optional[str] = None,
    branch_code: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Filtre par semestre, début de regNo et/ou filière (au moins un critère)."""
    try:
        return student_service.filter_students(db, semester, reg_no_prefix, branch_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/{user_id}", response_model=StudentResponse, summary="Mettre à jour un étudiant")
def update_student(user_id: uuid.UUID, data: StudentUpdate, db: Session = Depends(get_db)):
    """
    Modifie le semestre et les dates de cours.
    Une date de début de cours déjà définie est conservée.
    """
    try:
        student = student_service.update_student(db, user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if student is None:
        raise HTTPException(status_code=404, detail="Étudiant introuvable.")
    return student


@router.get(
    "/{reg_no}/attendance",
    response_model=StudentAttendanceReport,
    summary="Présences et taux de présence d'un étudiant",
)
def get_student_attendance(
    reg_no: str,
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    db: Session = Depends(get_db),
):
    """
    Retourne les jours de présence, les jours fériés et le taux de présence
    sur la période demandée (par défaut : toute la durée du cours).
    """
    try:
        report = attendance_service.get_student_attendance(db, reg_no, start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if report is None:
        raise HTTPException(status_code=404, detail="Étudiant introuvable.")
    return report
