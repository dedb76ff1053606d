from flask import Blueprint, jsonify

from ..auth import current_user
from ..schemas import EventIn, PageViewIn, SessionIn
from ..services import analytics
from ..utils import parse_body

analytics_bp = Blueprint('analytics', __name__)


@analytics_bp.post('/api/analytics/pageview')
def pageview():
    data = parse_body(PageViewIn)
    view = analytics.record_pageview(current_user(), data.model_dump())
    return jsonify({"success": True, "id": view.id}), 201


@analytics_bp.post('/api/analytics/event')
def event():
    data = parse_body(EventIn)
    record = analytics.record_event(current_user(), data.model_dump())
    return jsonify({"success": True, "id": record.id}), 201


@analytics_bp.post('/api/analytics/session')
def session():
    data = parse_body(SessionIn)
    if data.action == 'start':
        record = analytics.start_session(current_user(), data.model_dump())
    else:
        record = analytics.end_session(data.session_id)
    return {"success": True, "session_id": record.session_id, "duration": record.duration}
