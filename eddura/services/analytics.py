import logging
from datetime import datetime, timedelta

import numpy as np
from sqlalchemy import func

from ..errors import NotFound
from ..models import (
    db, Application, Document, PageView, Program, School, Scholarship, User, UserEvent, UserSession,
)

logger = logging.getLogger(__name__)

RANGES = {'7d': 7, '30d': 30, '90d': 90, '1y': 365}


def range_start(range_key, now=None):
    now = now or datetime.utcnow()
    return now - timedelta(days=RANGES.get(range_key, 30))


def record_pageview(user, data):
    view = PageView(
        user_id=user.id if user else None,
        session_id=data.get('session_id'),
        page=data['page'],
        title=data.get('title'),
        referrer=data.get('referrer'),
        time_on_page=data.get('time_on_page'),
    )
    db.session.add(view)
    if data.get('session_id'):
        session = UserSession.query.filter_by(session_id=data['session_id']).first()
        if session:
            session.page_views = (session.page_views or 0) + 1
            session.is_bounce = session.page_views <= 1
    db.session.commit()
    return view


def record_event(user, data):
    event = UserEvent(
        user_id=user.id if user else None,
        session_id=data.get('session_id'),
        event_type=data['event_type'],
        event_name=data['event_name'],
        properties=data.get('properties') or {},
    )
    db.session.add(event)
    db.session.commit()
    return event


def start_session(user, data):
    session = UserSession.query.filter_by(session_id=data['session_id']).first()
    if session is None:
        session = UserSession(
            session_id=data['session_id'],
            user_id=user.id if user else None,
            device=data.get('device'),
            country=data.get('country'),
            page_views=0,
            is_bounce=True,
        )
        db.session.add(session)
        db.session.commit()
    return session


def end_session(session_id, now=None):
    session = UserSession.query.filter_by(session_id=session_id).first()
    if session is None:
        raise NotFound("Session not found")
    session.ended_at = now or datetime.utcnow()
    session.duration = int((session.ended_at - session.started_at).total_seconds())
    session.is_bounce = (session.page_views or 0) <= 1
    db.session.commit()
    return session


def growth_rate(current, previous):
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def _month_starts(now, months=6):
    starts = []
    year, month = now.year, now.month
    for _ in range(months):
        starts.append(datetime(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


def _next_month(start):
    return datetime(start.year + (start.month == 12), start.month % 12 + 1, 1)


def trends(now=None):
    now = now or datetime.utcnow()
    points = []
    for start in _month_starts(now):
        cutoff = _next_month(start)
        points.append({
            "date": start.strftime('%Y-%m'),
            "users": User.query.filter(User.created_at < cutoff).count(),
            "schools": School.query.filter(School.created_at < cutoff).count(),
            "programs": Program.query.filter(Program.created_at < cutoff).count(),
            "scholarships": Scholarship.query.filter(Scholarship.created_at < cutoff).count(),
        })
    return points


def geographic(limit=6):
    rows = (db.session.query(School.country, func.count(School.id).label('schools'))
            .group_by(School.country)
            .order_by(func.count(School.id).desc())
            .limit(limit).all())
    result = []
    for country, schools in rows:
        programs = (Program.query.join(School, Program.school_id == School.id)
                    .filter(School.country == country).count())
        result.append({"country": country, "schools": schools, "programs": programs})
    return result


def top_content(start, end, limit=10):
    rows = (db.session.query(PageView.page, func.max(PageView.title), func.count(PageView.id).label('views'))
            .filter(PageView.created_at >= start, PageView.created_at <= end)
            .group_by(PageView.page)
            .order_by(func.count(PageView.id).desc())
            .limit(limit).all())
    previous_start = start - (end - start)
    previous = dict(db.session.query(PageView.page, func.count(PageView.id))
                    .filter(PageView.created_at >= previous_start, PageView.created_at < start)
                    .group_by(PageView.page).all())
    content = []
    for page, title, views in rows:
        before = previous.get(page, 0)
        content.append({
            "page": page,
            "name": title or page,
            "views": views,
            "growth": round((views - before) / before * 100, 1) if before else 0,
        })
    return content


def user_analytics(start, end):
    sessions = UserSession.query.filter(UserSession.started_at >= start, UserSession.started_at <= end).all()
    durations = [s.duration for s in sessions if s.duration is not None]
    page_views = PageView.query.filter(PageView.created_at >= start, PageView.created_at <= end).count()
    active = {s.user_id for s in sessions if s.user_id}
    active |= {uid for (uid,) in db.session.query(PageView.user_id)
               .filter(PageView.created_at >= start, PageView.created_at <= end,
                       PageView.user_id.isnot(None)).distinct()}
    return {
        "active_users": len(active),
        "total_sessions": len(sessions),
        "total_page_views": page_views,
        "average_session_duration": round(float(np.mean(durations)), 1) if durations else 0,
        "bounce_rate": round(float(np.mean([s.is_bounce for s in sessions])) * 100, 1) if sessions else 0,
    }


def overview(range_key='30d', now=None):
    now = now or datetime.utcnow()
    start = range_start(range_key, now)
    previous_start = start - (now - start)
    new_users = User.query.filter(User.created_at >= start, User.created_at <= now).count()
    previous_users = User.query.filter(User.created_at >= previous_start, User.created_at < start).count()
    users = user_analytics(start, now)
    return {
        "range": range_key if range_key in RANGES else '30d',
        "overview": {
            "total_users": User.query.count(),
            "total_schools": School.query.count(),
            "total_programs": Program.query.count(),
            "total_scholarships": Scholarship.query.count(),
            "total_applications": Application.query.count(),
            "total_documents": Document.query.count(),
            "total_scholarship_value": float(db.session.query(func.coalesce(func.sum(Scholarship.value), 0)).scalar()),
            "new_users": new_users,
            "growth_rate": growth_rate(new_users, previous_users),
            **users,
        },
        "trends": trends(now),
        "geographic": geographic(),
        "top_content": top_content(start, now),
    }


def recent_activity(limit=10):
    items = []
    for school in School.query.order_by(School.created_at.desc()).limit(limit).all():
        items.append({"type": "school", "title": school.name, "at": school.created_at})
    for program in Program.query.order_by(Program.created_at.desc()).limit(limit).all():
        items.append({"type": "program", "title": program.name, "at": program.created_at})
    for scholarship in Scholarship.query.order_by(Scholarship.created_at.desc()).limit(limit).all():
        items.append({"type": "scholarship", "title": scholarship.title, "at": scholarship.created_at})
    for user in User.query.order_by(User.created_at.desc()).limit(limit).all():
        items.append({"type": "user", "title": user.email, "at": user.created_at})
    items.sort(key=lambda i: i["at"] or datetime.min, reverse=True)
    return [{**i, "at": i["at"].isoformat() if i["at"] else None} for i in items[:limit]]


def dashboard_stats():
    top_schools = (db.session.query(School, func.count(Program.id).label('program_count'))
                   .outerjoin(Program, Program.school_id == School.id)
                   .group_by(School.id)
                   .order_by(func.count(Program.id).desc(), School.name.asc())
                   .limit(5).all())
    top_programs = (Program.query.filter(Program.tuition_international.isnot(None))
                    .order_by(Program.tuition_international.desc()).limit(5).all())
    top_scholarships = (Scholarship.query.filter(Scholarship.value.isnot(None))
                        .order_by(Scholarship.value.desc()).limit(5).all())
    return {
        "counts": {
            "users": User.query.count(),
            "schools": School.query.count(),
            "programs": Program.query.count(),
            "scholarships": Scholarship.query.count(),
            "applications": Application.query.count(),
        },
        "recent_activity": recent_activity(),
        "top_schools": [{**s.to_dict(), "program_count": n} for s, n in top_schools],
        "top_programs": [p.to_dict() for p in top_programs],
        "top_scholarships": [s.to_dict() for s in top_scholarships],
    }
