"""
Router pour les présences biométriques.
Import des fichiers de pointeuse, historique des imports, annulation, revue des conflits.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.attendance import UPLOAD_TYPES
from app.schemas.attendance import ConflictResolve, ConflictResponse, RevertReport, UploadResponse
from app.schemas.biometric import IngestReport, ParserConfig
from app.services import attendance_service, ingest_service
from app.services.biometric_parser import is_plain_text_log

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences biométriques"])

ALLOWED_EXTENSIONS = (".dat", ".txt")
ALLOWED_CONTENT_TYPES = {"text/plain", "application/octet-stream"}  # beaucoup de pointeuses exportent en octet-stream


@router.post(
    "/upload/biometric",
    response_model=IngestReport,
    status_code=201,
    summary="Importer un fichier de pointeuse biométrique",
)
# Synchrone : parsing et écritures BDD tournent dans le threadpool de FastAPI
def upload_biometric(
    file: UploadFile = File(...),
    upload_type: str = Form("WEEKLY"),
    submitted_by: Optional[uuid.UUID] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Importe un export texte de pointeuse (.dat ou .txt).

    Format attendu : une ligne par pointage, `regNo  AAAA-MM-JJ[ HH:MM:SS]  ...`.
    - Les lignes d'en-tête (ne commençant pas par un chiffre) sont ignorées
    - Les regNos inconnus sont remontés dans le rapport sans bloquer l'import
    - Un (regNo, date) déjà importé par un autre fichier est écrasé et journalisé en conflit

    Retourne le rapport : résumé du parsing, utilisateurs trouvés, regNos inconnus, conflits.
    """
    if upload_type not in UPLOAD_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Type d'import invalide. Valeurs acceptées : {', '.join(UPLOAD_TYPES)}",
        )

    file_name = file.filename or ""
    if not file_name.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail="Seuls les fichiers texte .dat ou .txt sont acceptés.",
        )

    if file.content_type and file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Type de fichier invalide. Seuls les logs texte sont acceptés.",
        )

    content = file.file.read()

    if not content:
        raise HTTPException(status_code=400, detail="Le fichier est vide.")

    if len(content) > settings.BIOMETRIC_MAX_FILE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Fichier trop volumineux. Taille maximale : {settings.BIOMETRIC_MAX_FILE_SIZE_MB} Mo.",
        )

    if not is_plain_text_log(content):
        raise HTTPException(
            status_code=400,
            detail="Contenu invalide. Seuls les logs de présence en texte brut sont acceptés.",
        )

    try:
        return ingest_service.ingest(
            db,
            content,
            upload_type=upload_type,
            submitted_by=submitted_by,
            file_name=file_name,
            config=ParserConfig.from_settings(settings),
        )
    except ingest_service.NoValidRecordsError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": str(e), "summary": e.summary.model_dump(mode="json")},
        )
    except ingest_service.UnknownSubmitterError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/uploads", response_model=List[UploadResponse], summary="Historique des imports")
def list_uploads(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Retourne les derniers imports, du plus récent au plus ancien."""
    return attendance_service.list_uploads(db, limit)


@router.delete("/uploads/{upload_id}", response_model=RevertReport, summary="Annuler un import")
def revert_upload(upload_id: uuid.UUID, db: Session = Depends(get_db)):
    """
    Annule un import : supprime les présences dont il est le dernier auteur,
    les conflits qu'il a générés, puis l'import lui-même.
    """
    report = attendance_service.revert_upload(db, upload_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Import introuvable.")
    return report


@router.get("/conflicts", response_model=List[ConflictResponse], summary="Lister les conflits d'import")
def list_conflicts(
    resolved: Optional[bool] = None,
    reg_no: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Liste les conflits entre imports, filtrables par statut et par regNo."""
    return attendance_service.list_conflicts(db, resolved=resolved, reg_no=reg_no)


@router.patch(
    "/conflicts/{conflict_id}/resolve",
    response_model=ConflictResponse,
    summary="Marquer un conflit comme traité",
)
def resolve_conflict(conflict_id: uuid.UUID, data: ConflictResolve, db: Session = Depends(get_db)):
    conflict = attendance_service.resolve_conflict(db, conflict_id, data.note)
    if conflict is None:
        raise HTTPException(status_code=404, detail="Conflit introuvable.")
    return conflict
