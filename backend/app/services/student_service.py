"""
Service de gestion administrative des étudiants.
Recherche, mise à jour des dates de cours, nettoyage et passage de semestre.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.models.attendance import DayAttendance
from app.models.user import User
from app.schemas.student import SemesterReport, StudentUpdate

logger = logging.getLogger(__name__)

LAST_SEMESTER = 8


def _check_semester(semester: int) -> None:
    if not 1 <= semester <= LAST_SEMESTER:
        raise ValueError(f"Semestre invalide : valeur attendue entre 1 et {LAST_SEMESTER}.")


def _students_in_semester(db: Session, semester: int) -> List[User]:
    return db.execute(
        select(User).where(
            User.role == "STUDENT",
            User.semester == semester,
            User.is_active.is_(True),
        )
    ).scalars().all()


def _delete_attendances(db: Session, students: List[User]) -> int:
    reg_nos = sorted(s.registration_number for s in students)
    return db.execute(
        delete(DayAttendance).where(DayAttendance.reg_no.in_(reg_nos))
    ).rowcount


def filter_students(
    db: Session,
    semester: Optional[int] = None,
    reg_no_prefix: Optional[str] = None,
    branch_code: Optional[str] = None,
) -> List[User]:
    """
    Recherche les étudiants par semestre, début de regNo et/ou filière.
    Lève ValueError si aucun critère n'est fourni.
    """
    if semester is None and not reg_no_prefix and not branch_code:
        raise ValueError("Indiquez au moins un critère : semestre, début de regNo ou filière.")

    query = select(User).where(User.role == "STUDENT")
    if semester is not None:
        query = query.where(User.semester == semester)
    if reg_no_prefix:
        query = query.where(User.registration_number.startswith(reg_no_prefix, autoescape=True))
    if branch_code:
        query = query.where(User.branch_code == branch_code)

    return db.execute(query.order_by(User.registration_number)).scalars().all()


def update_student(db: Session, user_id: uuid.UUID, data: StudentUpdate) -> Optional[User]:
    """
    Met à jour le semestre et les dates de cours d'un étudiant.
    Une date de début de cours déjà définie n'est jamais écrasée.
    Retourne None si l'utilisateur est introuvable.
    """
    user = db.get(User, user_id)
    if user is None:
        return None

    start = user.course_start_date or data.course_start_date
    end = data.course_end_date or user.course_end_date
    if start and end and start > end:
        raise ValueError("La date de début de cours doit précéder la date de fin.")

    if data.semester is not None:
        user.semester = data.semester
    user.course_start_date = start
    user.course_end_date = end

    db.commit()
    db.refresh(user)
    return user


def clear_semester_attendance(db: Session, semester: int) -> Optional[SemesterReport]:
    """
    Supprime les présences des étudiants actifs d'un semestre, sans les faire passer.
    Retourne None si aucun étudiant actif n'est inscrit dans ce semestre.
    """
    _check_semester(semester)
    students = _students_in_semester(db, semester)
    if not students:
        return None

    removed = _delete_attendances(db, students)
    db.commit()

    logger.info("Semestre %d nettoyé : %d présences supprimées", semester, removed)
    return SemesterReport(semester=semester, students=len(students), removed_attendances=removed)


def promote_semester(db: Session, semester: int) -> Optional[SemesterReport]:
    """
    Clôture un semestre pour tous ses étudiants actifs :
    1. Supprime leurs présences
    2. Semestres 1 à 7 : passage au semestre suivant
       Semestre 8 : fin de cursus, les étudiants sont désactivés

    Les comptes ne sont jamais supprimés : ils restent référencés par les imports.
    Retourne None si aucun étudiant actif n'est inscrit dans ce semestre.
    """
    _check_semester(semester)
    students = _students_in_semester(db, semester)
    if not students:
        return None

    removed = _delete_attendances(db, students)
    ids = [s.id for s in students]

    if semester == LAST_SEMESTER:
        db.execute(update(User).where(User.id.in_(ids)).values(is_active=False))
        report = SemesterReport(
            semester=semester, students=len(ids), removed_attendances=removed, graduated=len(ids)
        )
    else:
        db.execute(update(User).where(User.id.in_(ids)).values(semester=User.semester + 1))
        report = SemesterReport(
            semester=semester, students=len(ids), removed_attendances=removed, promoted=len(ids)
        )

    db.commit()

    logger.info(
        "Semestre %d clôturé : %d étudiants (%d passés, %d diplômés), %d présences supprimées",
        semester, report.students, report.promoted, report.graduated, removed,
    )
    return report
