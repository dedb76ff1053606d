import math
from datetime import datetime

from flask import request

from .errors import ValidationFailed


def round_half_up(value):
    """Round .5 away from zero on the positive side, like Math.round."""
    return int(math.floor(value + 0.5))


def parse_datetime(value):
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationFailed([{"field": "date", "message": f"Invalid date: {value}"}])
    return parsed.replace(tzinfo=None)


def page_args(default_limit=10, max_limit=100):
    try:
        page = max(1, int(request.args.get('page', '1')))
    except ValueError:
        page = 1
    try:
        limit = min(max_limit, max(1, int(request.args.get('limit', str(default_limit)))))
    except ValueError:
        limit = default_limit
    return page, limit


def paginate(query, page, limit):
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pages = (total + limit - 1) // limit if limit else 0
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }


def count_words(text):
    return len((text or '').split())


def json_body():
    return request.get_json(silent=True) or {}


def parse_body(model):
    """Validate the JSON body against a pydantic model; errors surface as 400s."""
    return model.model_validate(json_body())


def body_fields(model):
    """Validated body as a dict holding only the fields the client sent."""
    return parse_body(model).model_dump(exclude_unset=True)
