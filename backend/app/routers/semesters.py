"""
Router pour la gestion des semestres : nettoyage des présences et passage au semestre suivant.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.student import SemesterReport
from app.services import student_service

router = APIRouter(prefix="/api/v1/semesters", tags=["Semestres"])


@router.post("/{semester}/promote", response_model=SemesterReport, summary="Clôturer un semestre")
def promote_semester(semester: int, db: Session = Depends(get_db)):
    """
    Supprime les présences des étudiants du semestre puis les fait passer au suivant.
    Au semestre 8, les étudiants sont désactivés (fin de cursus).
    """
    try:
        report = student_service.promote_semester(db, semester)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if report is None:
        raise HTTPException(status_code=404, detail=f"Aucun étudiant actif en semestre {semester}.")
    return report


@router.delete(
    "/{semester}/attendance",
    response_model=SemesterReport,
    summary="Supprimer les présences d'un semestre",
)
def clear_semester_attendance(semester: int, db: Session = Depends(get_db)):
    try:
        report = student_service.clear_semester_attendance(db, semester)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if report is None:
        raise HTTPException(status_code=404, detail=f"Aucun étudiant actif en semestre {semester}.")
    return report
