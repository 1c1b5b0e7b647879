"""
Service d'import d'un fichier de pointeuse biométrique.
Compose le parseur (pur, sans BDD) et le rapprochement (BDD) dans une seule transaction.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from app.models.attendance import AttendanceUpload
from app.models.user import User
from app.schemas.biometric import IngestReport, ParseSummary, ParserConfig
from app.services.attendance_reconciler import reconcile_facts
from app.services.biometric_parser import parse_biometric_log

logger = logging.getLogger(__name__)


class NoValidRecordsError(ValueError):
    """Aucune ligne exploitable dans le fichier : rien n'est persisté."""

    def __init__(self, summary: ParseSummary):
        super().__init__("Aucun enregistrement de présence valide dans le fichier.")
        self.summary = summary


class UnknownSubmitterError(ValueError):
    """L'auteur déclaré de l'import n'existe pas dans la table users."""

    def __init__(self, submitted_by: uuid.UUID):
        super().__init__(f"Auteur de l'import introuvable : {submitted_by}")
        self.submitted_by = submitted_by


def ingest(
    db: Session,
    content: bytes,
    upload_type: str,
    submitted_by: Optional[uuid.UUID],
    file_name: str = "biometric.dat",
    config: Optional[ParserConfig] = None,
) -> IngestReport:
    """
    Importe un export biométrique.

    Étapes :
    1. Parser le contenu (aucun accès BDD)
    2. Si aucun fait valide → NoValidRecordsError (pas d'import créé)
       Si l'auteur est inconnu → UnknownSubmitterError (pas d'import créé)
    3. Créer l'enregistrement attendance_uploads (plage de dates + compteurs)
    4. Rapprocher les faits avec les utilisateurs et présences existantes
    5. Commit unique

    Une BDD injoignable (OperationalError) remonte telle quelle à l'appelant.
    """
    parsed = parse_biometric_log(content, config)
    summary = parsed.summary

    if not parsed.records:
        logger.info(
            "Import %s rejeté : %d lignes, %d invalides, aucune valide",
            file_name, summary.total_lines, summary.invalid_lines,
        )
        raise NoValidRecordsError(summary)

    if submitted_by is not None and db.get(User, submitted_by) is None:
        raise UnknownSubmitterError(submitted_by)

    upload = AttendanceUpload(
        id=uuid.uuid4(),
        upload_type=upload_type,
        file_name=file_name,
        from_date=summary.from_date,
        to_date=summary.to_date,
        total_lines=summary.total_lines,
        parsed_lines=summary.parsed_lines,
        invalid_lines=summary.invalid_lines,
        created_by=submitted_by,
    )
    db.add(upload)
    db.flush()  # l'import doit exister avant les présences qui le référencent

    result = reconcile_facts(db, parsed.records, upload)

    db.commit()

    logger.info(
        "Import %s (%s, %s) : %d lignes, %d valides, %d invalides, du %s au %s%s",
        upload.id, upload_type, file_name,
        summary.total_lines, summary.parsed_lines, summary.invalid_lines,
        summary.from_date, summary.to_date,
        " (tronqué)" if summary.max_lines_applied else "",
    )

    return IngestReport(
        upload_id=upload.id,
        upload_type=upload_type,
        summary=summary,
        matched_user_count=result.matched_user_count,
        unknown_reg_nos=result.unknown_reg_nos,
        unknown_reg_nos_count=len(result.unknown_reg_nos),
        conflict_count=result.conflict_count,
        failed_rows=result.failed_rows,
    )
