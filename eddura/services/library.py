import logging
from datetime import datetime

from sqlalchemy import func, or_

from ..errors import Forbidden, NotFound, ServiceError
from ..models import db, Document, DocumentClone, DocumentRating, LibraryDocument
from ..utils import count_words

logger = logging.getLogger(__name__)

# Library document type -> user document type
CLONE_TYPE_MAP = {
    'Personal Statement': 'personal_statement',
    'Statement of Purpose': 'statement_of_purpose',
    'Research Proposal': 'research_proposal',
    'Motivation Letter': 'motivation_letter',
    'CV': 'cv',
    'Resume': 'resume',
    'Cover Letter': 'cover_letter',
    'Portfolio': 'portfolio',
    'Academic Essay': 'academic_essay',
    'Research Paper': 'research_paper',
    'Thesis Proposal': 'thesis_proposal',
    'Dissertation Proposal': 'dissertation_proposal',
    'Work Experience': 'work_experience',
    'Volunteering Experience': 'volunteering_experience',
    'Internship Experience': 'internship_experience',
    'Research Experience': 'research_experience',
    'Reference Letter': 'reference_letter',
    'Recommendation Letter': 'recommendation_letter',
    'Scholarship Essay': 'personal_statement',
    'Academic CV': 'cv',
}

SORTS = {
    'rating': (LibraryDocument.average_rating.desc(), LibraryDocument.view_count.desc()),
    'views': (LibraryDocument.view_count.desc(),),
    'clones': (LibraryDocument.clone_count.desc(),),
    'date': (LibraryDocument.created_at.desc(),),
}

CLONE_SORTS = {
    'recent': DocumentClone.cloned_at.desc(),
    'oldest': DocumentClone.cloned_at.asc(),
    'accessed': DocumentClone.last_accessed_at.desc(),
}


def published():
    return LibraryDocument.query.filter_by(status='published', review_status='approved')


def browse_query(args):
    query = published()
    for key in ('category', 'subcategory', 'type', 'target_audience'):
        if args.get(key):
            query = query.filter(getattr(LibraryDocument, key) == args[key])
    if args.get('field_of_study'):
        query = query.filter(LibraryDocument.field_of_study.ilike(f"%{args['field_of_study']}%"))
    min_rating = args.get('min_rating', type=float)
    if min_rating is not None:
        query = query.filter(LibraryDocument.average_rating >= min_rating)
    if args.get('search'):
        like = f"%{args['search']}%"
        query = query.filter(or_(LibraryDocument.title.ilike(like), LibraryDocument.description.ilike(like),
                                 LibraryDocument.content.ilike(like)))
    return query.order_by(*SORTS.get(args.get('sort_by'), SORTS['rating']))


def filter_tags(documents, tags):
    wanted = {t.strip() for t in (tags or '').split(',') if t.strip()}
    if not wanted:
        return documents
    return [d for d in documents if wanted & set(d.tags or [])]


def record_views(documents):
    for document in documents:
        document.view_count = (document.view_count or 0) + 1
    db.session.commit()


def get_published(document_id):
    document = published().filter_by(id=document_id).first()
    if not document:
        raise NotFound("Document not found")
    return document


def clone_document(user, library_document):
    if not library_document.allow_cloning:
        raise Forbidden("This document cannot be cloned")
    doc_type = CLONE_TYPE_MAP.get(library_document.type)
    if doc_type is None:
        raise ServiceError("Document type not supported for cloning",
                           supported_types=sorted(CLONE_TYPE_MAP))
    user_document = Document(
        user_id=user.id,
        title=f"{library_document.title} (Copy)",
        type=doc_type,
        content=library_document.content,
        description=f"Cloned from library: {library_document.title}",
        tags=list(library_document.tags or []) + ['cloned'],
        word_count=count_words(library_document.content),
        character_count=len(library_document.content or ''),
    )
    db.session.add(user_document)
    db.session.flush()
    clone = DocumentClone(
        original_document_id=library_document.id,
        user_id=user.id,
        user_document_id=user_document.id,
        cloned_content=library_document.content,
        customizations={},
    )
    db.session.add(clone)
    library_document.clone_count = (library_document.clone_count or 0) + 1
    db.session.commit()
    logger.info("User %s cloned library document %s", user.id, library_document.id)
    return user_document, clone


def rate_document(user, library_document, rating, review=None):
    existing = DocumentRating.query.filter_by(document_id=library_document.id, user_id=user.id).first()
    if existing:
        existing.rating = rating
        existing.review = review
    else:
        db.session.add(DocumentRating(document_id=library_document.id, user_id=user.id, rating=rating, review=review))
    db.session.flush()
    average, count = (db.session.query(func.avg(DocumentRating.rating), func.count(DocumentRating.id))
                      .filter(DocumentRating.document_id == library_document.id).one())
    library_document.average_rating = round(float(average or 0), 2)
    library_document.rating_count = count
    db.session.commit()
    return library_document


def cloned_query(user, args):
    query = DocumentClone.query.filter(DocumentClone.user_id == user.id).join(
        LibraryDocument, DocumentClone.original_document_id == LibraryDocument.id)
    if args.get('search'):
        like = f"%{args['search']}%"
        query = query.filter(or_(LibraryDocument.title.ilike(like), DocumentClone.cloned_content.ilike(like)))
    if args.get('category'):
        query = query.filter(LibraryDocument.category == args['category'])
    if args.get('type'):
        query = query.filter(LibraryDocument.type == args['type'])
    sort = args.get('sort_by', 'recent')
    if sort == 'title':
        return query.order_by(LibraryDocument.title.asc())
    if sort == 'type':
        return query.order_by(LibraryDocument.type.asc())
    return query.order_by(CLONE_SORTS.get(sort, CLONE_SORTS['recent']))


def get_clone(user, clone_id, track=True):
    clone = DocumentClone.query.get(clone_id)
    if not clone or clone.user_id != user.id:
        raise NotFound("Cloned document not found")
    if track:
        clone.access_count = (clone.access_count or 0) + 1
        clone.last_accessed_at = datetime.utcnow()
        db.session.commit()
    return clone


def save_user_document(document, data):
    for key in ('title', 'type', 'description', 'tags'):
        if key in data and data[key] is not None:
            setattr(document, key, data[key])
    if 'content' in data and data['content'] is not None:
        if document.id and data['content'] != document.content:
            document.version = (document.version or 1) + 1
        document.content = data['content']
    document.word_count = count_words(document.content)
    document.character_count = len(document.content or '')
    if document.id is None:
        db.session.add(document)
    db.session.commit()
    return document
