"""
Modèles SQLAlchemy pour les présences issues des pointeuses biométriques.

- attendance_uploads    : un enregistrement par fichier importé (jamais modifié)
- day_attendances       : une ligne par (regNo, date), écrasée par le dernier import
- attendance_conflicts  : journal append-only des désaccords entre imports
"""

import uuid
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Uuid,
    UniqueConstraint,
    func,
)

from app.database import Base

UPLOAD_TYPES = ("WEEKLY", "MONTHLY", "YEARLY", "MANUAL")


class AttendanceUpload(Base):
    """Métadonnées d'un import de fichier biométrique."""
    __tablename__ = "attendance_uploads"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    upload_type = Column(String(10), nullable=False, default="WEEKLY")  # WEEKLY, MONTHLY, YEARLY, MANUAL
    file_name = Column(String(255), nullable=False)

    # Plage de dates couverte par le fichier (min/max des lignes acceptées)
    from_date = Column(Date, nullable=False, index=True)
    to_date = Column(Date, nullable=False, index=True)

    total_lines = Column(Integer, default=0)
    parsed_lines = Column(Integer, default=0)
    invalid_lines = Column(Integer, default=0)

    created_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class DayAttendance(Base):
    """Présence d'un étudiant sur une journée — une seule ligne par (reg_no, date)."""
    __tablename__ = "day_attendances"
    __table_args__ = (UniqueConstraint("reg_no", "date", name="uq_day_attendance_reg_no_date"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reg_no = Column(String(20), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    present = Column(Boolean, nullable=False, default=True)  # Vu au moins une fois par la pointeuse

    last_upload_id = Column(Uuid, ForeignKey("attendance_uploads.id", ondelete="SET NULL"), nullable=True)
    last_upload_type = Column(String(10), nullable=False, default="WEEKLY")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class AttendanceConflict(Base):
    """Un import a réaffirmé un (reg_no, date) déjà écrit par un autre import."""
    __tablename__ = "attendance_conflicts"
    __table_args__ = (
        UniqueConstraint(
            "reg_no", "date", "previous_upload_id", "new_upload_id",
            name="uq_attendance_conflict",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reg_no = Column(String(20), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    previous_upload_id = Column(Uuid, nullable=False)  # Import écrasé
    new_upload_id = Column(Uuid, nullable=False)       # Import qui a gagné (latest wins)
    new_upload_type = Column(String(10), nullable=False)

    resolved = Column(Boolean, nullable=False, default=False)
    note = Column(String(500), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
