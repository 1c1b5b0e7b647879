"""
Schémas Pydantic pour l'administration des présences biométriques
(historique des imports, conflits, annulation, statistiques étudiant).
"""

import uuid
import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.holiday import HolidayResponse


class UploadResponse(BaseModel):
    id: uuid.UUID
    upload_type: str
    file_name: str
    from_date: dt.date
    to_date: dt.date
    total_lines: int
    parsed_lines: int
    invalid_lines: int
    created_by: Optional[uuid.UUID]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ConflictResponse(BaseModel):
    id: uuid.UUID
    reg_no: str
    date: dt.date
    previous_upload_id: uuid.UUID
    new_upload_id: uuid.UUID
    new_upload_type: str
    resolved: bool
    note: Optional[str]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ConflictResolve(BaseModel):
    """Corps de PATCH /conflicts/{id}/resolve — note optionnelle pour l'admin."""
    note: Optional[str] = None

    @field_validator("note")
    @classmethod
    def note_max_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 500:
            raise ValueError("La note ne peut pas dépasser 500 caractères.")
        return v.strip() if v else v


class RevertReport(BaseModel):
    """Résultat de l'annulation d'un import."""
    upload_id: uuid.UUID
    removed_attendances: int
    removed_conflicts: int


class LastUpdateResponse(BaseModel):
    last_updated_at: datetime


class AttendanceDay(BaseModel):
    date: dt.date
    last_upload_type: str

    model_config = {"from_attributes": True}


class AttendanceStats(BaseModel):
    present_days: int
    total_working_days: int
    percentage: float


class StudentAttendanceReport(BaseModel):
    """Présences d'un étudiant sur une période, avec jours fériés et taux de présence."""
    reg_no: str
    name: str
    start_date: dt.date
    end_date: dt.date
    records: List[AttendanceDay]
    holidays: List[HolidayResponse]
    stats: AttendanceStats
