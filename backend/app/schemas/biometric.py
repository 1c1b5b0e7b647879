"""
Schémas Pydantic pour l'import des logs biométriques.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre le champ `date` et le type `datetime.date` dans Pydantic v2.
"""

import uuid
import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

UploadType = Literal["WEEKLY", "MONTHLY", "YEARLY", "MANUAL"]


class ParserConfig(BaseModel):
    """Paramètres du parseur, construits à la frontière et passés explicitement."""
    max_lines: int = Field(default=50000, ge=1)
    reg_no_digits: int = Field(default=11, ge=1)
    allow_future_dates: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings) -> "ParserConfig":
        return cls(
            max_lines=settings.BIOMETRIC_MAX_LINES,
            reg_no_digits=settings.BIOMETRIC_REGNO_LENGTH,
            allow_future_dates=settings.BIOMETRIC_ALLOW_FUTURE_DATES,
        )


class AttendanceFact(BaseModel):
    """Un couple (regNo, date) accepté par le parseur. Immuable."""
    reg_no: str
    date: dt.date
    line_number: int      # 1-based, index dans le fichier avant troncature
    raw_line: str = ""

    model_config = {"frozen": True}


class ParseSummary(BaseModel):
    """Compteurs d'un appel au parseur. Les lignes d'en-tête ne comptent pas dans total_lines."""
    total_lines: int = 0
    parsed_lines: int = 0
    invalid_lines: int = 0
    duplicate_lines: int = 0
    header_lines: int = 0
    unique_pairs: int = 0
    max_lines_applied: bool = False
    from_date: Optional[dt.date] = None
    to_date: Optional[dt.date] = None


class BiometricParseResult(BaseModel):
    records: List[AttendanceFact]
    summary: ParseSummary


class ReconcileResult(BaseModel):
    """Rapport du rapprochement faits ↔ utilisateurs ↔ présences existantes."""
    matched_user_count: int
    unknown_reg_nos: List[str]
    conflict_count: int
    created_count: int = 0
    updated_count: int = 0
    failed_rows: int = 0


class IngestReport(BaseModel):
    """Rapport retourné après l'import d'un fichier biométrique."""
    upload_id: uuid.UUID
    upload_type: UploadType
    summary: ParseSummary
    matched_user_count: int
    unknown_reg_nos: List[str]
    unknown_reg_nos_count: int
    conflict_count: int
    failed_rows: int = 0
