import time
import uuid
from datetime import datetime

from flask import Blueprint, jsonify, request
from sqlalchemy import or_

from ..auth import current_user, login_required
from ..ml import quiz
from ..ml.engine import Engine
from ..models import db, Program, School
from ..schemas import QuizAnalysisIn, QuizSubmitIn
from ..services import quiz_analysis
from ..services.ai import get_client
from ..utils import parse_body, round_half_up

quiz_bp = Blueprint('quiz', __name__)

engine = Engine()


def _section_done(section, responses):
    for q in quiz.get_filtered_questions(section, responses):
        if q.required and responses.get(q.id) in (None, '', []):
            return False
    return True


@quiz_bp.get('/api/quiz/sections')
def sections():
    user = current_user()
    responses = (user.quiz_responses or {}) if user else {}
    completed = (user.quiz_completed_sections or []) if user else []
    filtered = quiz.get_filtered_sections(responses)
    current = request.args.get('current')
    payload = {
        "sections": [s.to_dict(quiz.get_filtered_questions(s, responses)) for s in filtered],
        "total_sections": len(filtered),
        "total_questions": quiz.get_adaptive_total_questions(responses),
        "question_bank_size": quiz.get_total_questions(),
        "total_time": sum(s.estimated_time for s in filtered),
        "completed_sections": completed,
        "progress": round_half_up(quiz.get_adaptive_progress_percentage(completed, responses)),
        "overall_progress": round_half_up(quiz.get_progress_percentage(completed)),
    }
    if current:
        nxt = quiz.get_next_section(current, responses)
        prev = quiz.get_previous_section(current, responses)
        payload["next_section"] = nxt.id if nxt else None
        payload["previous_section"] = prev.id if prev else None
    return payload


@quiz_bp.post('/api/quiz/submit')
def submit():
    data = parse_body(QuizSubmitIn)
    section = quiz.get_section_by_id(data.section_id)
    if section is None or quiz.get_question_by_id(data.section_id, data.question_id) is None:
        return jsonify({"error": "Validation failed",
                        "details": [{"field": "question_id", "message": "Unknown section or question"}]}), 400

    user = current_user()
    if not user:
        temp_id = f"temp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"
        return {
            "success": True,
            "message": "Quiz response saved temporarily",
            "temp_id": temp_id,
            "note": "Please register to save your responses permanently",
        }

    responses = dict(user.quiz_responses or {})
    if data.responses is not None:
        responses[data.question_id] = data.responses
    elif data.text_response is not None:
        responses[data.question_id] = data.text_response
    user.quiz_responses = responses
    if not user.quiz_started_at:
        user.quiz_started_at = datetime.utcnow()
    if data.time_spent:
        user.quiz_time_spent = (user.quiz_time_spent or 0) + data.time_spent

    completed = list(user.quiz_completed_sections or [])
    if section.id not in completed and _section_done(section, responses):
        completed.append(section.id)
    user.quiz_completed_sections = completed

    if data.is_completed:
        user.quiz_completed = True
        user.quiz_completed_at = datetime.utcnow()
        user.quiz_progress = 100
        user.career_preferences = {**(user.career_preferences or {}), **engine.career_preferences(responses)}
        user.recommendations = engine.recommend(responses)
    else:
        user.quiz_progress = round_half_up(quiz.get_adaptive_progress_percentage(completed, responses))
    db.session.commit()
    return {
        "success": True,
        "message": "Quiz response saved successfully",
        "user_id": user.id,
        "quiz_completed": user.quiz_completed,
        "progress": user.quiz_progress,
    }


@quiz_bp.get('/api/quiz/submit')
@login_required
def get_responses():
    user = current_user()
    return {
        "quiz_responses": user.quiz_responses or {},
        "quiz_completed": user.quiz_completed,
        "completed_sections": user.quiz_completed_sections or [],
        "time_spent": user.quiz_time_spent or 0,
        "progress": user.quiz_progress or 0,
    }


@quiz_bp.get('/api/quiz/results')
@login_required
def results():
    user = current_user()
    if not user.quiz_completed:
        return jsonify({"error": "Quiz not completed", "quiz_completed": False}), 400
    prefs = user.career_preferences or {}
    fields = prefs.get('recommended_fields') or []

    programs = []
    if fields:
        clauses = []
        for f in fields:
            clauses += [Program.field_of_study.ilike(f"%{f}%"), Program.name.ilike(f"%{f}%")]
        programs = Program.query.filter(or_(*clauses)).limit(10).all()

    schools = []
    location = user.location_preference or prefs.get('location_preference')
    if location:
        schools = (School.query
                   .filter(or_(School.country.ilike(f"%{location}%"), School.name.ilike(f"%{location}%")))
                   .limit(5).all())

    return {
        "quiz_completed": True,
        "quiz_completed_at": user.quiz_completed_at.isoformat() if user.quiz_completed_at else None,
        "match_score": min(95, 70 + 5 * len(fields)),
        "insights": {
            "personality_traits": prefs.get('personality_traits', []),
            "work_style": prefs.get('work_style', []),
            "academic_strengths": prefs.get('academic_strengths', []),
            "skill_gaps": prefs.get('skill_gaps', []),
            "primary_interests": prefs.get('primary_interests', []),
            "career_goals": prefs.get('career_goals', []),
        },
        "career_preferences": prefs,
        "recommended_programs": [quiz_analysis.program_with_school(p) for p in programs],
        "recommended_schools": [{**s.to_dict(), "program_count": len(s.programs)} for s in schools],
        "recommended_scholarships": quiz_analysis.scholarships_for_terms(fields, limit=8),
        "quiz_responses": user.quiz_responses or {},
    }


@quiz_bp.get('/api/quiz/recommendations')
@login_required
def recommendations():
    user = current_user()
    result = engine.recommend(user.quiz_responses or {})
    user.recommendations = result
    db.session.commit()
    return result


@quiz_bp.post('/api/quiz/analysis')
@login_required
def analysis():
    user = current_user()
    data = parse_body(QuizAnalysisIn)
    if not user.quiz_completed:
        return jsonify({"error": "Quiz not completed"}), 400
    return quiz_analysis.analyze(user, get_client(), analysis_type=data.analysis_type,
                                 custom_instructions=data.custom_instructions,
                                 force_regenerate=data.force_regenerate)
