"""
Rapprochement des faits biométriques avec les présences existantes.

Stratégie : latest upload wins
- Un (regNo, date) jamais vu → création d'une présence marquée par l'import courant
- Déjà écrit par un AUTRE import → écrasement, puis conflit journalisé (append-only)
- Déjà écrit par CE même import (re-traitement) → simple confirmation, pas de conflit
- regNo sans utilisateur actif → ignoré et remonté dans unknown_reg_nos

Les conflits sont informatifs : ils ne bloquent jamais l'écrasement.
Un conflit n'est journalisé que si l'écrasement correspondant a bien été écrit.
"""

import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from app.models.attendance import AttendanceConflict, AttendanceUpload, DayAttendance
from app.schemas.biometric import AttendanceFact, ReconcileResult
from app.services.user_directory import find_active_users_by_reg_no

logger = logging.getLogger(__name__)


def _key(row: dict) -> tuple:
    return row["reg_no"], row["date"]


def _load_existing(db: Session, keys: set) -> dict:
    """Retourne {(reg_no, date): (record_id, last_upload_id)} pour les couples déjà en base."""
    if not keys:
        return {}

    rows = db.execute(
        select(
            DayAttendance.id,
            DayAttendance.reg_no,
            DayAttendance.date,
            DayAttendance.last_upload_id,
        ).where(
            DayAttendance.reg_no.in_(sorted({reg_no for reg_no, _ in keys})),
            DayAttendance.date.in_(sorted({day for _, day in keys})),
        )
    ).all()

    # Le IN x IN ramène le produit cartésien : ne garder que les couples demandés
    return {
        (row[1], row[2]): (row[0], row[3])
        for row in rows
        if (row[1], row[2]) in keys
    }


def _reload_row(db: Session, reg_no: str, day) -> Optional[tuple]:
    """Relit un couple (reg_no, date) écrit entre-temps par un import concurrent."""
    return db.execute(
        select(DayAttendance.id, DayAttendance.last_upload_id).where(
            DayAttendance.reg_no == reg_no,
            DayAttendance.date == day,
        )
    ).first()


def _write(db: Session, write, model, rows: List[dict]) -> bool:
    """Écrit `rows` dans un savepoint. Retourne False si la BDD les refuse."""
    try:
        with db.begin_nested():
            write(model, rows)
        return True
    except (IntegrityError, DataError) as exc:
        logger.debug("Écriture %s refusée : %s", model.__tablename__, exc)
        return False


def _write_all(db: Session, write, model, rows: List[dict]) -> List[dict]:
    """
    Écrit `rows` en bulk. Si le bulk est refusé (ligne malformée, doublon concurrent),
    rejoue ligne par ligne pour que les autres passent.
    Retourne les lignes effectivement écrites.
    OperationalError (BDD injoignable) n'est pas interceptée.
    """
    if not rows:
        return []
    if _write(db, write, model, rows):
        return list(rows)

    logger.warning(
        "Écriture bulk %s refusée, reprise ligne par ligne (%d lignes)",
        model.__tablename__, len(rows),
    )
    return [row for row in rows if _write(db, write, model, [row])]


def _day_row(fact: AttendanceFact, upload: AttendanceUpload, record_id=None) -> dict:
    return {
        "id": record_id or uuid.uuid4(),
        "reg_no": fact.reg_no,
        "date": fact.date,
        "present": True,
        "last_upload_id": upload.id,
        "last_upload_type": upload.upload_type,
    }


def _conflict_row(row: dict, upload: AttendanceUpload, previous_upload_id) -> Optional[dict]:
    """Conflit à journaliser si la présence était marquée par un autre import, sinon None."""
    if previous_upload_id is None or previous_upload_id == upload.id:
        return None
    return {
        "id": uuid.uuid4(),
        "reg_no": row["reg_no"],
        "date": row["date"],
        "previous_upload_id": previous_upload_id,
        "new_upload_id": upload.id,
        "new_upload_type": upload.upload_type,
        "resolved": False,
    }


def reconcile_facts(
    db: Session,
    facts: Sequence[AttendanceFact],
    upload: AttendanceUpload,
) -> ReconcileResult:
    """
    Met à jour day_attendances à partir des faits d'un import et journalise les conflits.

    Étapes :
    1. Résoudre les regNos distincts contre l'annuaire des utilisateurs actifs
    2. Charger les présences existantes pour les couples (regNo, date) résolus
    3. Construire créations / écrasements
    4. Appliquer les écritures en bulk (tolérant aux lignes en échec)
    5. Créations refusées car le couple existe déjà : basculer en écrasement
    6. Insérer les conflits des seuls écrasements réussis

    Ne commit pas : la transaction appartient à l'appelant.
    """
    user_ids = find_active_users_by_reg_no(db, (f.reg_no for f in facts))
    unknown_reg_nos = sorted({f.reg_no for f in facts} - user_ids.keys())

    # Dédoublonnage défensif : le parseur dédoublonne déjà, mais reconcile_facts est public
    known_facts: List[AttendanceFact] = []
    seen_in_batch: set = set()
    for fact in facts:
        key = (fact.reg_no, fact.date)
        if fact.reg_no not in user_ids or key in seen_in_batch:
            continue
        seen_in_batch.add(key)
        known_facts.append(fact)

    existing = _load_existing(db, seen_in_batch)

    to_insert: List[dict] = []
    to_update: List[dict] = []
    pending_conflicts: dict = {}

    for fact in known_facts:
        current = existing.get((fact.reg_no, fact.date))
        if current is None:
            to_insert.append(_day_row(fact, upload))
            continue

        record_id, previous_upload_id = current
        row = _day_row(fact, upload, record_id)
        to_update.append(row)
        conflict = _conflict_row(row, upload, previous_upload_id)
        if conflict:
            pending_conflicts[_key(row)] = conflict

    inserted = _write_all(db, db.bulk_insert_mappings, DayAttendance, to_insert)
    updated = _write_all(db, db.bulk_update_mappings, DayAttendance, to_update)

    inserted_keys = {_key(row) for row in inserted}
    updated_keys = {_key(row) for row in updated}
    failed = [row for row in to_update if _key(row) not in updated_keys]

    # Création refusée : le couple a pu être écrit par un import concurrent depuis la lecture
    for row in to_insert:
        if _key(row) in inserted_keys:
            continue
        current = _reload_row(db, row["reg_no"], row["date"])
        if current is None:
            failed.append(row)
            continue

        overwrite = {**row, "id": current[0]}
        if not _write(db, db.bulk_update_mappings, DayAttendance, [overwrite]):
            failed.append(row)
            continue
        updated.append(overwrite)
        conflict = _conflict_row(overwrite, upload, current[1])
        if conflict:
            pending_conflicts[_key(overwrite)] = conflict

    for row in failed:
        logger.warning("Présence non écrite (%s, %s)", row["reg_no"], row["date"])

    conflicts = [pending_conflicts[_key(row)] for row in updated if _key(row) in pending_conflicts]
    logged = _write_all(db, db.bulk_insert_mappings, AttendanceConflict, conflicts)
    if len(logged) < len(conflicts):
        logger.warning(
            "Import %s : %d conflits déjà journalisés ou refusés",
            upload.id, len(conflicts) - len(logged),
        )

    result = ReconcileResult(
        matched_user_count=len(user_ids),
        unknown_reg_nos=unknown_reg_nos,
        conflict_count=len(logged),
        created_count=len(inserted),
        updated_count=len(updated),
        failed_rows=len(failed),
    )

    logger.info(
        "Rapprochement import %s : %d utilisateurs, %d regNos inconnus, "
        "%d créés, %d écrasés, %d conflits, %d en échec",
        upload.id, result.matched_user_count, len(unknown_reg_nos),
        result.created_count, result.updated_count, result.conflict_count, result.failed_rows,
    )

    return result
