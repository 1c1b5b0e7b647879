"""
Schémas Pydantic pour les jours fériés.
"""

import uuid
import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator


class HolidayCreate(BaseModel):
    date: dt.date
    description: str

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("La description ne peut pas être vide.")
        return v.strip()


class HolidayResponse(BaseModel):
    id: uuid.UUID
    date: dt.date
    description: str
    created_at: Optional[dt.datetime] = None

    model_config = {"from_attributes": True}
