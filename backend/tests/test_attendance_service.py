"""
Tests du service d'administration des présences :
historique, conflits, annulation d'un import, statistiques étudiant.
"""

import uuid
from datetime import date

import pytest
from sqlalchemy import select

from app.models.attendance import AttendanceConflict, AttendanceUpload, DayAttendance
from app.models.holiday import Holiday
from app.models.user import User
from app.services import attendance_service
from app.services.ingest_service import ingest


def add_student(db, reg_no="24102134037", **kwargs):
    user = User(name="Asha Kumari", registration_number=reg_no, **kwargs)
    db.add(user)
    db.commit()
    return user


# ============================================================
# Historique et date de dernière mise à jour
# ============================================================

def test_aucun_import_pas_de_derniere_mise_a_jour(db_session):
    assert attendance_service.get_last_update(db_session) is None
    assert attendance_service.list_uploads(db_session) == []


def test_derniere_mise_a_jour_apres_import(db_session):
    add_student(db_session)
    ingest(db_session, b"24102134037 2025-07-31\n", "WEEKLY", None)

    assert attendance_service.get_last_update(db_session) is not None
    assert len(attendance_service.list_uploads(db_session)) == 1


# ============================================================
# Conflits
# ============================================================

def make_conflicts(db):
    add_student(db)
    content = b"24102134037 2025-07-31\n"
    ingest(db, content, "WEEKLY", None)
    return ingest(db, content, "MONTHLY", None)


def test_lister_conflits_filtres(db_session):
    make_conflicts(db_session)

    assert len(attendance_service.list_conflicts(db_session)) == 1
    assert len(attendance_service.list_conflicts(db_session, resolved=False)) == 1
    assert attendance_service.list_conflicts(db_session, resolved=True) == []
    assert attendance_service.list_conflicts(db_session, reg_no="00000000000") == []


def test_resoudre_conflit(db_session):
    make_conflicts(db_session)
    conflict = attendance_service.list_conflicts(db_session)[0]

    resolved = attendance_service.resolve_conflict(db_session, conflict.id, "Vérifié avec le registre papier")

    assert resolved.resolved is True
    assert resolved.note == "Vérifié avec le registre papier"
    assert attendance_service.list_conflicts(db_session, resolved=False) == []


def test_resoudre_conflit_introuvable(db_session):
    assert attendance_service.resolve_conflict(db_session, uuid.uuid4()) is None


# ============================================================
# Annulation d'un import
# ============================================================

def test_annuler_import(db_session):
    add_student(db_session)
    first = ingest(db_session, b"24102134037 2025-07-30\n", "WEEKLY", None)
    second = ingest(db_session, b"24102134037 2025-07-30\n24102134037 2025-07-31\n", "MONTHLY", None)

    report = attendance_service.revert_upload(db_session, second.upload_id)

    assert report.removed_attendances == 2
    assert report.removed_conflicts == 1
    assert db_session.get(AttendanceUpload, second.upload_id) is None
    assert db_session.get(AttendanceUpload, first.upload_id) is not None
    assert db_session.execute(select(DayAttendance)).scalars().all() == []
    assert db_session.execute(select(AttendanceConflict)).scalars().all() == []


def test_annuler_ancien_import_garde_les_presences_ecrasees(db_session):
    """Les présences réécrites par un import plus récent ne sont pas touchées."""
    add_student(db_session)
    first = ingest(db_session, b"24102134037 2025-07-30\n24102134037 2025-07-29\n", "WEEKLY", None)
    second = ingest(db_session, b"24102134037 2025-07-30\n", "MONTHLY", None)

    report = attendance_service.revert_upload(db_session, first.upload_id)

    assert report.removed_attendances == 1
    assert report.removed_conflicts == 0
    remaining = db_session.execute(select(DayAttendance)).scalar_one()
    assert remaining.date == date(2025, 7, 30)
    assert remaining.last_upload_id == second.upload_id


def test_annuler_import_introuvable(db_session):
    assert attendance_service.revert_upload(db_session, uuid.uuid4()) is None


# ============================================================
# Statistiques étudiant
# ============================================================

def test_statistiques_sur_la_periode(db_session):
    add_student(db_session, course_start_date=date(2025, 7, 1), course_end_date=date(2025, 7, 10))
    db_session.add(Holiday(date=date(2025, 7, 5), description="Rath Yatra"))
    db_session.commit()
    ingest(db_session, b"24102134037 2025-07-01\n24102134037 2025-07-02\n24102134037 2025-07-20\n", "WEEKLY", None)

    report = attendance_service.get_student_attendance(db_session, "24102134037")

    assert report.start_date == date(2025, 7, 1)
    assert report.end_date == date(2025, 7, 10)
    assert [r.date for r in report.records] == [date(2025, 7, 1), date(2025, 7, 2)]
    assert [h.description for h in report.holidays] == ["Rath Yatra"]
    assert report.stats.present_days == 2
    assert report.stats.total_working_days == 9
    assert report.stats.percentage == 22.22


def test_statistiques_periode_explicite(db_session):
    add_student(db_session, course_start_date=date(2025, 1, 1))
    ingest(db_session, b"24102134037 2025-07-20\n", "WEEKLY", None)

    report = attendance_service.get_student_attendance(
        db_session, "24102134037", date(2025, 7, 20), date(2025, 7, 20)
    )

    assert report.stats.present_days == 1
    assert report.stats.total_working_days == 1
    assert report.stats.percentage == 100.0


def test_statistiques_etudiant_introuvable(db_session):
    assert attendance_service.get_student_attendance(db_session, "24102134037") is None


def test_statistiques_etudiant_inactif(db_session):
    add_student(db_session, is_active=False, course_start_date=date(2025, 1, 1))

    assert attendance_service.get_student_attendance(db_session, "24102134037") is None


def test_statistiques_sans_date_de_debut(db_session):
    add_student(db_session)

    with pytest.raises(ValueError, match="début de cours"):
        attendance_service.get_student_attendance(db_session, "24102134037")


def test_statistiques_periode_inversee(db_session):
    add_student(db_session)

    with pytest.raises(ValueError, match="précéder"):
        attendance_service.get_student_attendance(
            db_session, "24102134037", date(2025, 7, 31), date(2025, 7, 1)
        )
