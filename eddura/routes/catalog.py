from flask import Blueprint, jsonify, request
from sqlalchemy import or_

from ..auth import current_user, login_required
from ..errors import NotFound
from ..models import db, Program, SavedScholarship, Scholarship, School
from ..schemas import SavedScholarshipIn, SavedScholarshipUpdate
from ..services.scholarship_status import get_status
from ..utils import page_args, paginate, parse_body, parse_datetime

catalog_bp = Blueprint('catalog', __name__)


def scholarship_payload(scholarship):
    data = scholarship.to_dict()
    data["status"] = get_status(scholarship.deadline, scholarship.opening_date) if scholarship.deadline else None
    return data


@catalog_bp.get('/api/schools')
def list_schools():
    page, limit = page_args()
    query = School.query
    search = request.args.get('search')
    if search:
        query = query.filter(or_(School.name.ilike(f"%{search}%"), School.city.ilike(f"%{search}%")))
    if request.args.get('country'):
        query = query.filter(School.country == request.args['country'])
    items, pagination = paginate(query.order_by(School.name.asc()), page, limit)
    return {"schools": [s.to_dict() for s in items], "pagination": pagination}


@catalog_bp.get('/api/schools/<int:school_id>')
def get_school(school_id):
    school = School.query.get(school_id)
    if not school:
        raise NotFound("School not found")
    data = school.to_dict()
    data["programs"] = [p.to_dict() for p in school.programs]
    return data


@catalog_bp.get('/api/programs')
def list_programs():
    page, limit = page_args()
    query = Program.query
    search = request.args.get('search')
    if search:
        query = query.filter(or_(Program.name.ilike(f"%{search}%"), Program.field_of_study.ilike(f"%{search}%")))
    for key in ('degree_type', 'mode', 'school_id'):
        if request.args.get(key):
            query = query.filter(getattr(Program, key) == request.args[key])
    if request.args.get('field_of_study'):
        query = query.filter(Program.field_of_study.ilike(f"%{request.args['field_of_study']}%"))
    max_tuition = request.args.get('max_tuition', type=float)
    if max_tuition is not None:
        query = query.filter(Program.tuition_international <= max_tuition)
    items, pagination = paginate(query.order_by(Program.name.asc()), page, limit)
    return {"programs": [p.to_dict() for p in items], "pagination": pagination}


@catalog_bp.get('/api/programs/<int:program_id>')
def get_program(program_id):
    program = Program.query.get(program_id)
    if not program:
        raise NotFound("Program not found")
    data = program.to_dict()
    data["school"] = program.school.to_dict() if program.school else None
    return data


@catalog_bp.get('/api/scholarships')
def list_scholarships():
    page, limit = page_args()
    query = Scholarship.query
    search = request.args.get('search')
    if search:
        query = query.filter(or_(Scholarship.title.ilike(f"%{search}%"),
                                 Scholarship.description.ilike(f"%{search}%"),
                                 Scholarship.provider.ilike(f"%{search}%")))
    if request.args.get('provider'):
        query = query.filter(Scholarship.provider.ilike(f"%{request.args['provider']}%"))
    if request.args.get('frequency'):
        query = query.filter(Scholarship.frequency == request.args['frequency'])
    min_value = request.args.get('min_value', type=float)
    if min_value is not None:
        query = query.filter(Scholarship.value >= min_value)
    items, pagination = paginate(query.order_by(Scholarship.deadline.asc()), page, limit)
    return {"scholarships": [scholarship_payload(s) for s in items], "pagination": pagination}


@catalog_bp.get('/api/scholarships/<int:scholarship_id>')
def get_scholarship(scholarship_id):
    scholarship = Scholarship.query.get(scholarship_id)
    if not scholarship:
        raise NotFound("Scholarship not found")
    return scholarship_payload(scholarship)


# --- Saved scholarships -------------------------------------------------------

@catalog_bp.get('/api/saved-scholarships')
@login_required
def list_saved():
    user = current_user()
    page, limit = page_args()
    query = SavedScholarship.query.filter_by(user_id=user.id)
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    items, pagination = paginate(query.order_by(SavedScholarship.created_at.desc()), page, limit)
    return {"saved_scholarships": [s.to_dict() for s in items], "pagination": pagination}


@catalog_bp.post('/api/saved-scholarships')
@login_required
def save_scholarship():
    user = current_user()
    data = parse_body(SavedScholarshipIn)
    if not Scholarship.query.get(data.scholarship_id):
        raise NotFound("Scholarship not found")
    saved = SavedScholarship.query.filter_by(user_id=user.id, scholarship_id=data.scholarship_id).first()
    created = saved is None
    if created:
        saved = SavedScholarship(user_id=user.id, scholarship_id=data.scholarship_id)
        db.session.add(saved)
    saved.notes = data.notes
    saved.status = data.status
    saved.reminder_date = parse_datetime(data.reminder_date)
    db.session.commit()
    return jsonify(saved.to_dict()), 201 if created else 200


def _owned_saved(user, saved_id):
    saved = SavedScholarship.query.get(saved_id)
    if not saved or saved.user_id != user.id:
        raise NotFound("Saved scholarship not found")
    return saved


@catalog_bp.put('/api/saved-scholarships/<int:saved_id>')
@login_required
def update_saved(saved_id):
    saved = _owned_saved(current_user(), saved_id)
    data = parse_body(SavedScholarshipUpdate).model_dump(exclude_unset=True)
    if 'reminder_date' in data:
        data['reminder_date'] = parse_datetime(data['reminder_date'])
    for key, value in data.items():
        setattr(saved, key, value)
    db.session.commit()
    return saved.to_dict()


@catalog_bp.delete('/api/saved-scholarships/<int:saved_id>')
@login_required
def delete_saved(saved_id):
    saved = _owned_saved(current_user(), saved_id)
    db.session.delete(saved)
    db.session.commit()
    return {"message": "Scholarship removed from saved list"}
