"""
Point d'entrée principal de l'API de gestion des présences.
Démarrage : uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

import app.models  # noqa: F401 — enregistre tous les modèles dans Base.metadata avant les routers
from app.routers import attendance, holidays, public, semesters, students

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Attendance API",
    description="API de gestion des présences (import des pointeuses biométriques)",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


app.include_router(attendance.router)
app.include_router(students.router)
app.include_router(semesters.router)
app.include_router(holidays.router)
app.include_router(public.router)


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """BDD injoignable : échec de la requête, sans nouvelle tentative côté serveur."""
    logger.error("Base de données indisponible : %s", exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Base de données indisponible. Réessayez plus tard."},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Intercepte toutes les exceptions non gérées et renvoie une réponse 500 JSON."""
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Attendance API", "version": "0.1.0"}
