# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# users doit être chargé avant attendance_uploads (FK created_by → users.id).

from app.models.user import User  # noqa: F401  — doit précéder attendance
from app.models.attendance import AttendanceConflict, AttendanceUpload, DayAttendance  # noqa: F401
from app.models.holiday import Holiday  # noqa: F401
