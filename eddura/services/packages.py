import logging
from datetime import datetime

from ..errors import Conflict, NotFound, ValidationFailed
from ..models import db, ApplicationPackage, UserInterest
from ..utils import parse_datetime, round_half_up

logger = logging.getLogger(__name__)

PACKAGE_TYPES = ('program', 'scholarship', 'combined')
DOCUMENT_STATUSES = ('pending', 'uploaded', 'reviewed', 'approved')
DONE_STATUSES = ('uploaded', 'reviewed', 'approved')
APPLICATION_STATUSES = ('not_started', 'in_progress', 'submitted', 'under_review', 'interview_scheduled',
                        'decision_made')
DECISIONS = ('accepted', 'rejected', 'waitlisted')
INTEREST_STATUSES = ('interested', 'preparing', 'applied', 'interviewed', 'accepted', 'rejected', 'waitlisted')
PRIORITIES = ('high', 'medium', 'low')


def compute_package_progress(documents):
    """Share of required documents that have at least been uploaded, 0..100."""
    if not documents:
        return 0
    required = [d for d in documents if d.get('required', True)]
    if not required:
        return 0
    done = [d for d in required if d.get('status') in DONE_STATUSES]
    return round_half_up(len(done) / len(required) * 100)


def _normalize_documents(documents):
    normalized = []
    for i, doc in enumerate(documents or []):
        if not doc.get('type') or not doc.get('name'):
            raise ValidationFailed([{"field": f"documents[{i}]", "message": "Document type and name are required"}])
        status = doc.get('status', 'pending')
        if status not in DOCUMENT_STATUSES:
            raise ValidationFailed([{"field": f"documents[{i}].status", "message": "Unknown document status"}])
        normalized.append({**doc, "required": doc.get('required', True), "status": status})
    return normalized


def _refresh(package):
    package.progress = compute_package_progress(package.documents)
    package.is_ready = package.progress == 100


def list_packages(user, status=None, type=None, is_ready=None):
    query = ApplicationPackage.query.filter_by(user_id=user.id)
    if status:
        query = query.filter_by(application_status=status)
    if type:
        query = query.filter_by(type=type)
    if is_ready is not None:
        query = query.filter_by(is_ready=is_ready)
    return query.order_by(ApplicationPackage.updated_at.desc()).all()


def get_package(user, package_id):
    package = ApplicationPackage.query.get(package_id)
    if not package or package.user_id != user.id:
        raise NotFound("Application package not found")
    return package


def create_package(user, data):
    missing = [f for f in ('interest_id', 'name', 'type') if not data.get(f)]
    if missing:
        raise ValidationFailed([{"field": f, "message": f"{f} is required"} for f in missing],
                               message="Missing required fields")
    if data['type'] not in PACKAGE_TYPES:
        raise ValidationFailed([{"field": "type", "message": f"Type must be one of {', '.join(PACKAGE_TYPES)}"}])
    interest = UserInterest.query.get(data['interest_id'])
    if not interest or interest.user_id != user.id:
        raise NotFound("Interest not found")
    existing = ApplicationPackage.query.filter_by(interest_id=interest.id).first()
    if existing:
        raise Conflict("Application package already exists for this interest", package_id=existing.id)
    package = ApplicationPackage(
        user_id=user.id,
        interest_id=interest.id,
        name=data['name'],
        type=data['type'],
        documents=_normalize_documents(data.get('documents')),
        linked_scholarships=data.get('linked_scholarships') or [],
        notes=data.get('notes'),
        application_status='not_started',
    )
    _refresh(package)
    db.session.add(package)
    db.session.commit()
    logger.info("Created package %s for user %s", package.id, user.id)
    return package


def update_package(package, data):
    if 'name' in data:
        package.name = data['name']
    if 'type' in data:
        if data['type'] not in PACKAGE_TYPES:
            raise ValidationFailed([{"field": "type", "message": f"Type must be one of {', '.join(PACKAGE_TYPES)}"}])
        package.type = data['type']
    if 'documents' in data:
        package.documents = _normalize_documents(data['documents'])
    if 'application_status' in data:
        if data['application_status'] not in APPLICATION_STATUSES:
            raise ValidationFailed([{"field": "application_status", "message": "Unknown application status"}])
        package.application_status = data['application_status']
        if data['application_status'] == 'submitted' and not package.applied_at:
            package.applied_at = datetime.utcnow()
    if 'decision' in data:
        if data['decision'] is not None and data['decision'] not in DECISIONS:
            raise ValidationFailed([{"field": "decision", "message": "Unknown decision"}])
        package.decision = data['decision']
        package.decision_date = parse_datetime(data.get('decision_date')) or datetime.utcnow()
    for key in ('linked_scholarships', 'notes'):
        if key in data:
            setattr(package, key, data[key])
    _refresh(package)
    db.session.commit()
    return package


def delete_package(package):
    db.session.delete(package)
    db.session.commit()


# --- Interests ----------------------------------------------------------------

def _check_interest_fields(data):
    errors = []
    if 'status' in data and data['status'] not in INTEREST_STATUSES:
        errors.append({"field": "status", "message": f"Status must be one of {', '.join(INTEREST_STATUSES)}"})
    if 'priority' in data and data['priority'] not in PRIORITIES:
        errors.append({"field": "priority", "message": f"Priority must be one of {', '.join(PRIORITIES)}"})
    if errors:
        raise ValidationFailed(errors)


def create_interest(user, data):
    if not data.get('program_id') and not data.get('program_name'):
        raise ValidationFailed([{"field": "program_id", "message": "Either program_id or program_name is required"}])
    _check_interest_fields(data)
    interest = UserInterest(user_id=user.id)
    _assign_interest(interest, data)
    db.session.add(interest)
    db.session.commit()
    return interest


def update_interest(interest, data):
    _check_interest_fields(data)
    _assign_interest(interest, data)
    db.session.commit()
    return interest


def _assign_interest(interest, data):
    for key in ('program_id', 'school_id', 'school_name', 'program_name', 'application_url',
                'status', 'priority', 'notes', 'interview_notes'):
        if key in data:
            setattr(interest, key, data[key])
    if 'interview_date' in data:
        interest.interview_date = parse_datetime(data['interview_date'])
    if data.get('status') == 'applied' and not interest.applied_at:
        interest.applied_at = datetime.utcnow()


def get_interest(user, interest_id):
    interest = UserInterest.query.get(interest_id)
    if not interest or interest.user_id != user.id:
        raise NotFound("Interest not found")
    return interest


def delete_interest(interest):
    ApplicationPackage.query.filter_by(interest_id=interest.id).delete()
    db.session.delete(interest)
    db.session.commit()
