"""
Modèle SQLAlchemy pour les utilisateurs (étudiants et personnel).
Version minimale — seuls les champs utiles à l'annuaire des présences sont mappés.
"""

import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Uuid, func

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    registration_number = Column(String(20), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default="STUDENT")  # STUDENT, ADMIN, TEACHER, HOD, DEVELOPER
    branch_code = Column(String(10), nullable=True)
    semester = Column(Integer, nullable=False, default=1)       # 1..8
    course_start_date = Column(Date, nullable=True)
    course_end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)   # False = diplômé / bloqué
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
