"""
Annuaire des utilisateurs actifs, indexé par numéro d'inscription (regNo).
"""

import uuid
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.user import User


def find_active_users_by_reg_no(db: Session, reg_nos: Iterable[str]) -> dict[str, uuid.UUID]:
    """
    Retourne {regNo: user_id} pour les utilisateurs actifs parmi `reg_nos`.
    Une seule requête, quel que soit le nombre de regNos.
    """
    reg_nos = sorted(set(reg_nos))
    if not reg_nos:
        return {}

    rows = db.execute(
        select(User.id, User.registration_number).where(
            User.registration_number.in_(reg_nos),
            User.is_active.is_(True),
        )
    ).all()

    return {row[1]: row[0] for row in rows}
