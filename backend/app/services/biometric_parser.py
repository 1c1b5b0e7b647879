"""
Parseur des exports texte des pointeuses biométriques.

Format attendu (une ligne par pointage, colonnes séparées par espaces ou tabulations) :

    24102134037    2025-07-31 18:39:10    1   1   15  0
    regNo          date[ heure]           ...ignoré...

Seules les deux premières colonnes comptent. Aucune I/O ici : le parseur reçoit
des octets et une configuration, et retourne les faits acceptés + un résumé.
"""

import datetime as dt
import re
from typing import Optional

from app.schemas.biometric import AttendanceFact, BiometricParseResult, ParseSummary, ParserConfig

DATE_REGEX = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
DIGITS = frozenset("0123456789")

# Tabulation, LF, CR et ASCII imprimable uniquement
UNSAFE_CHARS_REGEX = re.compile(r"[^\x09\x0A\x0D\x20-\x7E]")


def is_plain_text_log(content: bytes) -> bool:
    """
    Contrôle de contenu avant parsing : rejette les fichiers binaires ou exotiques.
    - octet nul → binaire
    - caractère hors ASCII imprimable / tab / CR / LF → rejeté
    - aucune date AAAA-MM-JJ dans tout le fichier → ce n'est pas un log de pointeuse
    """
    text = content.decode("utf-8-sig", errors="replace")
    if "\x00" in text:
        return False
    if UNSAFE_CHARS_REGEX.search(text):
        return False
    return DATE_REGEX.search(text) is not None


def _extract_date(raw: str) -> Optional[dt.date]:
    """Coupe la colonne date/heure au premier 'T' ou espace et valide AAAA-MM-JJ."""
    date_part = raw.split("T", 1)[0].split(" ", 1)[0]
    if not DATE_REGEX.fullmatch(date_part):
        return None
    try:
        return dt.date.fromisoformat(date_part)
    except ValueError:
        # 2025-02-30 a la bonne forme mais n'existe pas
        return None


def parse_biometric_log(
    content: bytes,
    config: Optional[ParserConfig] = None,
    today: Optional[dt.date] = None,
) -> BiometricParseResult:
    """
    Transforme un export biométrique en faits (regNo, date) dédupliqués.

    Règles :
    - CRLF et LF traités de la même façon
    - Seules les `max_lines` premières lignes sont examinées (troncature, pas une erreur)
    - Ligne ne commençant pas par un chiffre → en-tête, ignorée et non comptée
    - Moins de 2 colonnes, regNo de mauvaise longueur, date mal formée → invalide
    - Date postérieure à aujourd'hui → invalide sauf si allow_future_dates
    - Doublon (regNo, date) dans le même fichier → la première occurrence gagne
    """
    config = config or ParserConfig()
    today = today or dt.date.today()

    text = content.decode("utf-8-sig", errors="replace").replace("\r", "")
    lines = text.split("\n")

    kept = lines[:config.max_lines]
    max_lines_applied = any(line.strip() for line in lines[config.max_lines:])

    reg_no_regex = re.compile(rf"[0-9]{{{config.reg_no_digits}}}")

    records: list[AttendanceFact] = []
    seen_pairs: set[tuple[str, dt.date]] = set()
    summary = ParseSummary(max_lines_applied=max_lines_applied)

    for line_number, raw in enumerate(kept, start=1):
        line = raw.strip()
        if not line:
            continue

        if line[0] not in DIGITS:
            summary.header_lines += 1
            continue

        summary.total_lines += 1

        fields = line.split()
        if len(fields) < 2:
            summary.invalid_lines += 1
            continue

        reg_no = fields[0]
        if not reg_no_regex.fullmatch(reg_no):
            summary.invalid_lines += 1
            continue

        fact_date = _extract_date(fields[1])
        if fact_date is None:
            summary.invalid_lines += 1
            continue

        # Protection contre une horloge de pointeuse déréglée
        if not config.allow_future_dates and fact_date > today:
            summary.invalid_lines += 1
            continue

        key = (reg_no, fact_date)
        if key in seen_pairs:
            summary.duplicate_lines += 1
            continue
        seen_pairs.add(key)

        summary.parsed_lines += 1
        if summary.from_date is None or fact_date < summary.from_date:
            summary.from_date = fact_date
        if summary.to_date is None or fact_date > summary.to_date:
            summary.to_date = fact_date

        records.append(AttendanceFact(
            reg_no=reg_no,
            date=fact_date,
            line_number=line_number,
            raw_line=line,
        ))

    summary.unique_pairs = len(seen_pairs)

    return BiometricParseResult(records=records, summary=summary)
