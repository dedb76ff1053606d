from flask import Blueprint, jsonify, request

from ..auth import current_user, login_required
from ..errors import NotFound
from ..models import db, Document
from ..schemas import CloneUpdate, DocumentIn, DocumentUpdate, RatingIn
from ..services import library
from ..services.paywall import requires_access
from ..utils import page_args, paginate, parse_body

library_bp = Blueprint('library', __name__)


@library_bp.get('/api/library/documents')
def browse():
    page, limit = page_args(default_limit=12)
    query = library.browse_query(request.args)
    if request.args.get('tags'):
        matched = library.filter_tags(query.all(), request.args['tags'])
        total = len(matched)
        pages = (total + limit - 1) // limit
        items = matched[(page - 1) * limit:page * limit]
        pagination = {"page": page, "limit": limit, "total": total, "pages": pages,
                      "has_next": page < pages, "has_prev": page > 1}
    else:
        items, pagination = paginate(query, page, limit)
    library.record_views(items)
    return {"documents": [d.to_dict() for d in items], "pagination": pagination}


@library_bp.get('/api/library/documents/<int:document_id>')
def get_document(document_id):
    document = library.get_published(document_id)
    library.record_views([document])
    return document.to_dict()


@library_bp.post('/api/library/documents/<int:document_id>/clone')
@login_required
@requires_access(feature='document_cloning')
def clone(document_id):
    document = library.get_published(document_id)
    user_document, _ = library.clone_document(current_user(), document)
    return jsonify({"message": "Document cloned successfully", "user_document": user_document.to_dict()}), 201


@library_bp.post('/api/library/documents/<int:document_id>/rate')
@login_required
def rate(document_id):
    document = library.get_published(document_id)
    data = parse_body(RatingIn)
    document = library.rate_document(current_user(), document, data.rating, data.review)
    return {"message": "Rating saved", "average_rating": document.average_rating,
            "rating_count": document.rating_count}


# --- Cloned documents ---------------------------------------------------------

@library_bp.get('/api/library/cloned')
@login_required
def list_cloned():
    page, limit = page_args()
    items, pagination = paginate(library.cloned_query(current_user(), request.args), page, limit)
    return {"documents": [c.to_dict() for c in items], "pagination": pagination}


@library_bp.get('/api/library/cloned/<int:clone_id>')
@login_required
def get_cloned(clone_id):
    return library.get_clone(current_user(), clone_id).to_dict()


@library_bp.put('/api/library/cloned/<int:clone_id>')
@login_required
def update_cloned(clone_id):
    clone_record = library.get_clone(current_user(), clone_id, track=False)
    data = parse_body(CloneUpdate)
    clone_record.customizations = {**(clone_record.customizations or {}), **data.customizations}
    db.session.commit()
    return clone_record.to_dict()


@library_bp.delete('/api/library/cloned/<int:clone_id>')
@login_required
def delete_cloned(clone_id):
    clone_record = library.get_clone(current_user(), clone_id, track=False)
    db.session.delete(clone_record)
    db.session.commit()
    return {"message": "Cloned document deleted successfully"}


# --- User documents -----------------------------------------------------------

def _own_document(document_id):
    document = Document.query.get(document_id)
    if not document or document.user_id != current_user().id or not document.is_active:
        raise NotFound("Document not found")
    return document


@library_bp.get('/api/documents')
@login_required
def list_documents():
    query = Document.query.filter_by(user_id=current_user().id, is_active=True)
    if request.args.get('type'):
        query = query.filter_by(type=request.args['type'])
    return {"documents": [d.to_dict() for d in query.order_by(Document.updated_at.desc()).all()]}


@library_bp.post('/api/documents')
@login_required
@requires_access(usage_type='documents')
def create_document():
    data = parse_body(DocumentIn)
    document = library.save_user_document(Document(user_id=current_user().id), data.model_dump())
    return jsonify(document.to_dict()), 201


@library_bp.get('/api/documents/<int:document_id>')
@login_required
def get_user_document(document_id):
    return _own_document(document_id).to_dict()


@library_bp.put('/api/documents/<int:document_id>')
@login_required
def update_document(document_id):
    data = parse_body(DocumentUpdate).model_dump(exclude_unset=True)
    return library.save_user_document(_own_document(document_id), data).to_dict()


@library_bp.delete('/api/documents/<int:document_id>')
@login_required
def delete_document(document_id):
    document = _own_document(document_id)
    document.is_active = False
    db.session.commit()
    return {"message": "Document deleted successfully"}
