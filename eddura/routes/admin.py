from datetime import datetime

from flask import Blueprint, jsonify, request

from ..auth import admin_required, current_user
from ..errors import NotFound, ServiceError, ValidationFailed
from ..models import db, LibraryDocument, Program, Scholarship, School, User
from ..schemas import (LibraryDocumentIn, LibraryDocumentUpdate, LibraryReviewIn, ProgramIn, RoleUpdate, ScholarshipIn,
                       SchoolIn)
from ..services import analytics
from ..services.importer import import_scholarships
from ..utils import body_fields, count_words, json_body, page_args, paginate, parse_body, parse_datetime

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')

DATE_FIELDS = ('deadline', 'opening_date')


def _assign(record, data):
    for key, value in data.items():
        if key in DATE_FIELDS:
            value = parse_datetime(value)
        setattr(record, key, value)


def _require(data, *fields):
    missing = [f for f in fields if not data.get(f)]
    if missing:
        raise ValidationFailed([{"field": f, "message": f"{f} is required"} for f in missing])


@admin_bp.get('/analytics')
@admin_required
def overview():
    return analytics.overview(request.args.get('range', '30d'))


@admin_bp.get('/dashboard-stats')
@admin_required
def dashboard_stats():
    return analytics.dashboard_stats()


# --- Catalog CRUD -------------------------------------------------------------

CATALOG = {
    'schools': (School, SchoolIn, ('name',)),
    'programs': (Program, ProgramIn, ('school_id', 'name')),
    'scholarships': (Scholarship, ScholarshipIn, ('title', 'deadline')),
}


def _catalog(kind):
    if kind not in CATALOG:
        raise NotFound("Unknown resource")
    return CATALOG[kind]


def _record(kind, record_id):
    model = _catalog(kind)[0]
    record = model.query.get(record_id)
    if not record:
        raise NotFound(f"{model.__name__} not found")
    return record


@admin_bp.post('/<kind>')
@admin_required
def create_record(kind):
    model, schema, required = _catalog(kind)
    data = body_fields(schema)
    _require(data, *required)
    if model is Program and not School.query.get(data['school_id']):
        raise NotFound("School not found")
    record = model()
    _assign(record, data)
    db.session.add(record)
    db.session.commit()
    return jsonify(record.to_dict()), 201


@admin_bp.put('/<kind>/<int:record_id>')
@admin_required
def update_record(kind, record_id):
    record = _record(kind, record_id)
    _assign(record, body_fields(_catalog(kind)[1]))
    db.session.commit()
    return record.to_dict()


@admin_bp.delete('/<kind>/<int:record_id>')
@admin_required
def delete_record(kind, record_id):
    record = _record(kind, record_id)
    db.session.delete(record)
    db.session.commit()
    return {"message": "Deleted"}


@admin_bp.post('/scholarships/import')
@admin_required
def import_csv():
    if 'file' in request.files:
        try:
            text = request.files['file'].read().decode('utf-8-sig')
        except UnicodeDecodeError:
            raise ServiceError("CSV must be UTF-8")
    elif request.is_json:
        text = json_body().get('csv', '')
    else:
        text = request.get_data(as_text=True)
    return import_scholarships(text)


# --- Library curation ---------------------------------------------------------

@admin_bp.get('/library/documents')
@admin_required
def list_library():
    page, limit = page_args()
    query = LibraryDocument.query
    for key in ('status', 'review_status', 'category', 'type'):
        if request.args.get(key):
            query = query.filter(getattr(LibraryDocument, key) == request.args[key])
    items, pagination = paginate(query.order_by(LibraryDocument.created_at.desc()), page, limit)
    return {"documents": [d.to_dict(include_review=True) for d in items], "pagination": pagination}


@admin_bp.post('/library/documents')
@admin_required
def create_library_document():
    data = parse_body(LibraryDocumentIn)
    document = LibraryDocument(**data.model_dump(), created_by=current_user().id,
                               status='draft', review_status='pending')
    document.word_count = count_words(document.content)
    document.character_count = len(document.content)
    db.session.add(document)
    db.session.commit()
    return jsonify(document.to_dict(include_review=True)), 201


@admin_bp.put('/library/documents/<int:document_id>')
@admin_required
def update_library_document(document_id):
    document = LibraryDocument.query.get(document_id)
    if not document:
        raise NotFound("Document not found")
    data = body_fields(LibraryDocumentUpdate)
    for key, value in data.items():
        setattr(document, key, value)
    if 'status' in data:
        if data['status'] == 'published' and not document.published_at:
            document.published_at = datetime.utcnow()
    if 'content' in data:
        document.version = (document.version or 1) + 1
        document.word_count = count_words(document.content)
        document.character_count = len(document.content or '')
    db.session.commit()
    return document.to_dict(include_review=True)


@admin_bp.post('/library/documents/<int:document_id>/review')
@admin_required
def review_library_document(document_id):
    document = LibraryDocument.query.get(document_id)
    if not document:
        raise NotFound("Document not found")
    data = parse_body(LibraryReviewIn)
    document.reviewed_by = current_user().id
    document.reviewed_at = datetime.utcnow()
    document.review_notes = data.notes
    if data.quality_score is not None:
        document.quality_score = data.quality_score
    if data.action == 'approve':
        document.review_status = 'approved'
        document.status = 'published'
        document.published_at = document.published_at or datetime.utcnow()
    else:
        document.review_status = 'rejected'
        document.status = 'draft'
    db.session.commit()
    return document.to_dict(include_review=True)


# --- Users --------------------------------------------------------------------

@admin_bp.get('/users')
@admin_required
def list_users():
    page, limit = page_args(default_limit=20)
    query = User.query
    if request.args.get('role'):
        query = query.filter_by(role=request.args['role'])
    if request.args.get('search'):
        query = query.filter(User.email.ilike(f"%{request.args['search']}%"))
    items, pagination = paginate(query.order_by(User.created_at.desc()), page, limit)
    return {"users": [u.to_dict() for u in items], "pagination": pagination}


@admin_bp.put('/users/<int:user_id>/role')
@admin_required
def update_role(user_id):
    user = User.query.get(user_id)
    if not user:
        raise NotFound("User not found")
    user.role = parse_body(RoleUpdate).role
    db.session.commit()
    return user.to_dict()
