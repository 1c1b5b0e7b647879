"""
Tests d'intégration API pour les présences d'un étudiant, les jours fériés et l'endpoint public.
"""

import uuid
from datetime import date, datetime
from unittest.mock import patch

from app.models.holiday import Holiday
from app.schemas.attendance import AttendanceDay, AttendanceStats, StudentAttendanceReport


def make_student_report() -> StudentAttendanceReport:
    return StudentAttendanceReport(
        reg_no="24102134037",
        name="Asha Kumari",
        start_date=date(2025, 7, 1),
        end_date=date(2025, 7, 31),
        records=[AttendanceDay(date=date(2025, 7, 1), last_upload_type="WEEKLY")],
        holidays=[],
        stats=AttendanceStats(present_days=1, total_working_days=31, percentage=3.23),
    )


# ============================================================
# GET /api/v1/students/{reg_no}/attendance
# ============================================================

def test_presences_etudiant(client):
    with patch(
        "app.routers.students.attendance_service.get_student_attendance",
        return_value=make_student_report(),
    ) as mock:
        response = client.get(
            "/api/v1/students/24102134037/attendance?start_date=2025-07-01&end_date=2025-07-31"
        )

    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["present_days"] == 1
    assert data["records"][0]["date"] == "2025-07-01"
    assert mock.call_args[0][1:] == ("24102134037", date(2025, 7, 1), date(2025, 7, 31))


def test_presences_etudiant_introuvable(client):
    with patch("app.routers.students.attendance_service.get_student_attendance", return_value=None):
        response = client.get("/api/v1/students/24102134037/attendance")

    assert response.status_code == 404


def test_presences_periode_invalide(client):
    with patch(
        "app.routers.students.attendance_service.get_student_attendance",
        side_effect=ValueError("La date de début doit précéder la date de fin."),
    ):
        response = client.get("/api/v1/students/24102134037/attendance")

    assert response.status_code == 400
    assert "précéder" in response.json()["detail"]


def test_presences_date_mal_formee(client):
    response = client.get("/api/v1/students/24102134037/attendance?start_date=31-07-2025")
    assert response.status_code == 422


# ============================================================
# /api/v1/holidays
# ============================================================

def make_holiday() -> Holiday:
    return Holiday(
        id=uuid.uuid4(),
        date=date(2025, 8, 15),
        description="Independence Day",
        created_at=datetime(2025, 7, 1, 9, 0, 0),
    )


def test_creer_jour_ferie(client):
    with patch("app.routers.holidays.holiday_service.create_holiday", return_value=make_holiday()):
        response = client.post(
            "/api/v1/holidays", json={"date": "2025-08-15", "description": "Independence Day"}
        )

    assert response.status_code == 201
    assert response.json()["date"] == "2025-08-15"


def test_creer_jour_ferie_doublon(client):
    with patch(
        "app.routers.holidays.holiday_service.create_holiday",
        side_effect=ValueError("Un jour férié existe déjà pour cette date."),
    ):
        response = client.post(
            "/api/v1/holidays", json={"date": "2025-08-15", "description": "Independence Day"}
        )

    assert response.status_code == 409


def test_creer_jour_ferie_description_vide(client):
    response = client.post("/api/v1/holidays", json={"date": "2025-08-15", "description": " "})
    assert response.status_code == 422


def test_lister_jours_feries(client):
    with patch("app.routers.holidays.holiday_service.list_holidays", return_value=[make_holiday()]):
        response = client.get("/api/v1/holidays")

    assert response.status_code == 200
    assert response.json()[0]["description"] == "Independence Day"


# ============================================================
# Public / santé
# ============================================================

def test_derniere_mise_a_jour(client):
    with patch(
        "app.routers.public.attendance_service.get_last_update",
        return_value=datetime(2025, 8, 1, 10, 30, 0),
    ):
        response = client.get("/api/v1/public/last-update")

    assert response.status_code == 200
    assert response.json()["last_updated_at"].startswith("2025-08-01T10:30:00")


def test_derniere_mise_a_jour_aucun_import(client):
    with patch("app.routers.public.attendance_service.get_last_update", return_value=None):
        response = client.get("/api/v1/public/last-update")

    assert response.status_code == 404


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
