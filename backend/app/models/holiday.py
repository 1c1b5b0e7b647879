"""
Modèle SQLAlchemy pour les jours fériés (exclus du calcul des jours ouvrés).
"""

import uuid
from sqlalchemy import Column, Date, DateTime, String, Uuid, func

from app.database import Base


class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    date = Column(Date, unique=True, nullable=False)
    description = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
