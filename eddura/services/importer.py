import csv
import logging

from ..errors import ServiceError
from ..models import db, Scholarship
from ..utils import parse_datetime

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['title', 'provider', 'deadline']
OPTIONAL_COLUMNS = ['description', 'value', 'currency', 'frequency', 'opening_date', 'application_link',
                    'tags', 'coverage']
FREQUENCIES = ('one-time', 'annual', 'full-duration')


def validate_csv_columns(columns):
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    return not missing, missing


def _split(value):
    return [v.strip() for v in (value or '').split(';') if v.strip()]


def _row_to_fields(row):
    errors = []
    title = (row.get('title') or '').strip()
    if not title:
        errors.append("title is required")
    provider = (row.get('provider') or '').strip()
    if not provider:
        errors.append("provider is required")
    deadline = opening = None
    try:
        deadline = parse_datetime((row.get('deadline') or '').strip())
        if deadline is None:
            errors.append("deadline is required")
    except ServiceError:
        errors.append(f"invalid deadline: {row.get('deadline')}")
    try:
        opening = parse_datetime((row.get('opening_date') or '').strip())
    except ServiceError:
        errors.append(f"invalid opening_date: {row.get('opening_date')}")
    value = None
    if (row.get('value') or '').strip():
        try:
            value = float(row['value'])
            if value < 0:
                errors.append("value must be non-negative")
        except ValueError:
            errors.append(f"invalid value: {row['value']}")
    frequency = (row.get('frequency') or '').strip() or None
    if frequency and frequency not in FREQUENCIES:
        errors.append(f"frequency must be one of {', '.join(FREQUENCIES)}")
    if deadline and opening and opening > deadline:
        errors.append("opening_date must be before deadline")
    if errors:
        return None, errors
    return {
        "title": title,
        "provider": provider,
        "description": (row.get('description') or '').strip() or None,
        "value": value,
        "currency": (row.get('currency') or 'USD').strip() or 'USD',
        "frequency": frequency,
        "deadline": deadline,
        "opening_date": opening,
        "application_link": (row.get('application_link') or '').strip() or None,
        "tags": _split(row.get('tags')),
        "coverage": _split(row.get('coverage')),
    }, []


def import_scholarships(csv_text):
    reader = csv.DictReader((csv_text or '').splitlines())
    valid, missing = validate_csv_columns(reader.fieldnames or [])
    if not valid:
        raise ServiceError("Missing required columns", missing=missing)
    imported = 0
    errors = []
    for line, row in enumerate(reader, start=2):
        fields, row_errors = _row_to_fields(row)
        if row_errors:
            errors.append({"row": line, "errors": row_errors})
            continue
        db.session.add(Scholarship(**fields))
        imported += 1
    db.session.commit()
    logger.info("Imported %d scholarships (%d rows rejected)", imported, len(errors))
    return {"imported": imported, "errors": errors}
