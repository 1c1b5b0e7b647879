"""
Schémas Pydantic pour la gestion administrative des étudiants
(recherche, dates de cours, passage de semestre).
"""

import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator


class StudentResponse(BaseModel):
    id: uuid.UUID
    name: str
    registration_number: str
    role: str
    branch_code: Optional[str]
    semester: int
    course_start_date: Optional[dt.date]
    course_end_date: Optional[dt.date]
    is_active: bool

    model_config = {"from_attributes": True}


class StudentUpdate(BaseModel):
    """Corps de PATCH /students/{id} — seuls les champs fournis sont modifiés."""
    semester: Optional[int] = None
    course_start_date: Optional[dt.date] = None
    course_end_date: Optional[dt.date] = None

    @field_validator("semester")
    @classmethod
    def semester_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= 8:
            raise ValueError("Le semestre doit être compris entre 1 et 8.")
        return v


class SemesterReport(BaseModel):
    """Résultat d'une opération sur un semestre (nettoyage ou passage)."""
    semester: int
    students: int
    removed_attendances: int
    promoted: int = 0
    graduated: int = 0
