"""Application requirement checklists: validation, progress tracking and templates."""
import logging
from datetime import datetime

from sqlalchemy import or_

from ..errors import Forbidden, NotFound, ServiceError, ValidationFailed
from ..models import db, Application, ApplicationRequirement, RequirementsTemplate
from ..utils import round_half_up

logger = logging.getLogger(__name__)

REQUIREMENT_TYPES = ('document', 'test_score', 'fee', 'interview', 'other')
CATEGORIES = ('academic', 'financial', 'personal', 'professional', 'administrative')
STATUSES = ('pending', 'in_progress', 'completed', 'waived', 'not_applicable')
COMPLETE_STATUSES = ('completed', 'waived', 'not_applicable')
DOCUMENT_TYPES = ('personal_statement', 'cv', 'transcript', 'recommendation_letter', 'test_scores',
                  'portfolio', 'financial_documents', 'other')
TEST_TYPES = ('toefl', 'ielts', 'gre', 'gmat', 'sat', 'act', 'other')
INTERVIEW_TYPES = ('in-person', 'virtual', 'phone', 'multiple')
TEMPLATE_CATEGORIES = ('graduate', 'undergraduate', 'scholarship', 'custom')

EDITABLE_FIELDS = (
    'requirement_type', 'category', 'name', 'description', 'is_required', 'is_optional', 'status',
    'document_type', 'max_file_size', 'allowed_file_types', 'word_limit', 'character_limit',
    'test_type', 'min_score', 'max_score', 'score_format', 'submitted_score',
    'application_fee_amount', 'application_fee_currency', 'application_fee_description', 'application_fee_paid',
    'interview_type', 'interview_duration', 'interview_notes', 'notes', 'order',
)

NON_NEGATIVE = {
    'max_file_size': 'Max file size must be non-negative',
    'word_limit': 'Word limit must be non-negative',
    'character_limit': 'Character limit must be non-negative',
    'min_score': 'Minimum score must be non-negative',
    'max_score': 'Maximum score must be non-negative',
    'application_fee_amount': 'Application fee amount must be non-negative',
    'interview_duration': 'Interview duration must be non-negative',
}


def is_complete(status):
    return status in COMPLETE_STATUSES


def validate_requirement(data):
    errors = []
    if not (data.get('name') or '').strip():
        errors.append({"field": "name", "message": "Requirement name is required"})
    rtype = data.get('requirement_type')
    if not rtype:
        errors.append({"field": "requirement_type", "message": "Requirement type is required"})
    elif rtype not in REQUIREMENT_TYPES:
        errors.append({"field": "requirement_type", "message": f"Requirement type must be one of {', '.join(REQUIREMENT_TYPES)}"})
    category = data.get('category')
    if not category:
        errors.append({"field": "category", "message": "Category is required"})
    elif category not in CATEGORIES:
        errors.append({"field": "category", "message": f"Category must be one of {', '.join(CATEGORIES)}"})

    if rtype == 'document' and not data.get('document_type'):
        errors.append({"field": "document_type", "message": "Document type is required for document requirements"})
    if rtype == 'test_score' and not data.get('test_type'):
        errors.append({"field": "test_type", "message": "Test type is required for test score requirements"})
    if rtype == 'fee' and not data.get('application_fee_amount'):
        errors.append({"field": "application_fee_amount", "message": "Fee amount is required for fee requirements"})
    if rtype == 'interview' and not data.get('interview_type'):
        errors.append({"field": "interview_type", "message": "Interview type is required for interview requirements"})
    if data.get('interview_type') and data['interview_type'] not in INTERVIEW_TYPES:
        errors.append({"field": "interview_type", "message": "Unknown interview type"})
    if data.get('test_type') and data['test_type'] not in TEST_TYPES:
        errors.append({"field": "test_type", "message": "Unknown test type"})

    for field, message in NON_NEGATIVE.items():
        value = data.get(field)
        if value is not None and value < 0:
            errors.append({"field": field, "message": message})
    return errors


def calculate_progress(requirements):
    total = len(requirements)
    completed = len([r for r in requirements if is_complete(r.status)])
    required = [r for r in requirements if r.is_required and not r.is_optional]
    optional = [r for r in requirements if r.is_optional]
    return {
        "total": total,
        "completed": completed,
        "required": len(required),
        "required_completed": len([r for r in required if is_complete(r.status)]),
        "optional": len(optional),
        "optional_completed": len([r for r in optional if is_complete(r.status)]),
        "percentage": round_half_up(completed / total * 100) if total else 0,
    }


def is_ready_to_submit(progress):
    return progress["required_completed"] == progress["required"] and progress["required"] > 0


def needing_attention(requirements):
    items = [r for r in requirements if r.is_required and r.status in ('pending', 'in_progress')]
    return sorted(items, key=lambda r: r.order or 0)


def summarize(application, requirements):
    progress = calculate_progress(requirements)
    by_category = {c: {"total": 0, "completed": 0, "requirements": []} for c in CATEGORIES}
    by_type = {t: {"total": 0, "completed": 0, "requirements": []} for t in REQUIREMENT_TYPES}
    for r in requirements:
        for bucket in (by_category.get(r.category), by_type.get(r.requirement_type)):
            if bucket is None:
                continue
            bucket["total"] += 1
            bucket["requirements"].append(r.to_dict())
            if is_complete(r.status):
                bucket["completed"] += 1
    return {
        "application_id": application.id,
        "application_name": application.name,
        "progress": progress,
        "by_category": by_category,
        "by_type": by_type,
    }


def refresh_application_progress(application):
    progress = calculate_progress(list(application.requirements))
    application.progress = progress["percentage"]
    if application.status == 'draft' and progress["completed"] > 0:
        application.status = 'in_progress'
    return progress


def _stamp_completion(requirement):
    now = datetime.utcnow()
    if not requirement.submitted_at:
        requirement.submitted_at = now
    if not requirement.verified_at:
        requirement.verified_at = now


def create_requirement(application, data):
    errors = validate_requirement(data)
    if errors:
        raise ValidationFailed(errors)
    requirement = ApplicationRequirement(application_id=application.id, status='pending')
    for key in EDITABLE_FIELDS:
        if key in data and key != 'status':
            setattr(requirement, key, data[key])
    application.requirements.append(requirement)
    refresh_application_progress(application)
    db.session.commit()
    return requirement


def update_requirement(requirement, data):
    if 'status' in data and data['status'] not in STATUSES:
        raise ValidationFailed([{"field": "status", "message": "Unknown status"}])
    merged = requirement.to_dict()
    merged.update({k: v for k, v in data.items() if k in EDITABLE_FIELDS})
    errors = validate_requirement(merged)
    if errors:
        raise ValidationFailed(errors)
    for key in EDITABLE_FIELDS:
        if key in data:
            setattr(requirement, key, data[key])
    if data.get('status') == 'completed':
        _stamp_completion(requirement)
    refresh_application_progress(requirement.application)
    db.session.commit()
    return requirement


def delete_requirement(requirement):
    application = requirement.application
    application.requirements.remove(requirement)
    db.session.delete(requirement)
    refresh_application_progress(application)
    db.session.commit()


def link_document(requirement, document_id, notes=None):
    requirement.document_id = document_id
    requirement.status = 'completed'
    requirement.submitted_at = datetime.utcnow()
    if notes:
        requirement.notes = notes
    refresh_application_progress(requirement.application)
    db.session.commit()
    return requirement


def bulk_update(application, requirement_ids, updates):
    updates = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
    if 'status' in updates and updates['status'] not in STATUSES:
        raise ValidationFailed([{"field": "status", "message": "Unknown status"}])
    targets = [r for r in application.requirements if r.id in requirement_ids]
    for requirement in targets:
        merged = requirement.to_dict()
        merged.update(updates)
        errors = validate_requirement(merged)
        if errors:
            raise ValidationFailed([dict(err, requirement_id=requirement.id) for err in errors])
    modified = 0
    for requirement in targets:
        changed = False
        for key, value in updates.items():
            if getattr(requirement, key) != value:
                setattr(requirement, key, value)
                changed = True
        if changed:
            if updates.get('status') == 'completed':
                _stamp_completion(requirement)
            modified += 1
    if modified == 0:
        raise NotFound("No requirements were updated")
    refresh_application_progress(application)
    db.session.commit()
    return modified


# --- Templates ----------------------------------------------------------------

def list_templates(category=None, is_system=None, is_active=None):
    query = RequirementsTemplate.query
    if category:
        query = query.filter_by(category=category)
    if is_system is not None:
        query = query.filter_by(is_system_template=is_system)
    if is_active is not None:
        query = query.filter_by(is_active=is_active)
    return query.order_by(RequirementsTemplate.usage_count.desc(), RequirementsTemplate.name.asc()).all()


def popular_templates(limit=10):
    return (RequirementsTemplate.query.filter_by(is_active=True)
            .order_by(RequirementsTemplate.usage_count.desc()).limit(limit).all())


def search_templates(term, limit=20):
    like = f"%{term}%"
    return (RequirementsTemplate.query
            .filter(RequirementsTemplate.is_active.is_(True))
            .filter(or_(RequirementsTemplate.name.ilike(like), RequirementsTemplate.description.ilike(like)))
            .order_by(RequirementsTemplate.usage_count.desc(), RequirementsTemplate.name.asc())
            .limit(limit).all())


def _validate_template(data):
    errors = []
    if not (data.get('name') or '').strip():
        errors.append({"field": "name", "message": "Template name is required"})
    if data.get('category') not in TEMPLATE_CATEGORIES:
        errors.append({"field": "category", "message": f"Category must be one of {', '.join(TEMPLATE_CATEGORIES)}"})
    for i, item in enumerate(data.get('requirements') or []):
        for err in validate_requirement(item):
            errors.append({"field": f"requirements[{i}].{err['field']}", "message": err["message"]})
    return errors


def create_template(data, created_by=None):
    errors = _validate_template(data)
    if errors:
        raise ValidationFailed(errors)
    template = RequirementsTemplate(
        name=data['name'],
        description=data.get('description'),
        category=data['category'],
        requirements=data.get('requirements') or [],
        tags=data.get('tags') or [],
        is_active=data.get('is_active', True),
        is_system_template=False,
        usage_count=0,
        created_by=created_by,
    )
    db.session.add(template)
    db.session.commit()
    return template


def update_template(template, data):
    if template.is_system_template:
        raise Forbidden("Cannot modify system templates")
    merged = template.to_dict()
    merged.update(data)
    errors = _validate_template(merged)
    if errors:
        raise ValidationFailed(errors)
    for key in ('name', 'description', 'category', 'requirements', 'tags', 'is_active'):
        if key in data:
            setattr(template, key, data[key])
    db.session.commit()
    return template


def delete_template(template):
    if template.is_system_template:
        raise Forbidden("Cannot delete system templates")
    db.session.delete(template)
    db.session.commit()


def apply_template(template, application):
    if not template.is_active:
        raise ServiceError("Template is not active")
    created = []
    for item in template.requirements or []:
        errors = validate_requirement(item)
        if errors:
            raise ValidationFailed(errors)
        requirement = ApplicationRequirement(application_id=application.id, status='pending')
        for key in EDITABLE_FIELDS:
            if key in item and key != 'status':
                setattr(requirement, key, item[key])
        application.requirements.append(requirement)
        created.append(requirement)
    template.usage_count = (template.usage_count or 0) + 1
    refresh_application_progress(application)
    db.session.commit()
    return created


def template_statistics():
    templates = RequirementsTemplate.query.all()
    by_category = {c: 0 for c in TEMPLATE_CATEGORIES}
    for t in templates:
        by_category[t.category] = by_category.get(t.category, 0) + 1
    return {
        "total": len(templates),
        "system": len([t for t in templates if t.is_system_template]),
        "custom": len([t for t in templates if not t.is_system_template]),
        "active": len([t for t in templates if t.is_active]),
        "total_usage": sum(t.usage_count or 0 for t in templates),
        "by_category": by_category,
    }


def _doc(name, category, description, document_type, order, max_file_size=5, file_types=('pdf', 'doc', 'docx'),
         required=True, word_limit=None):
    item = {
        "requirement_type": "document", "category": category, "name": name, "description": description,
        "is_required": required, "is_optional": not required, "document_type": document_type,
        "max_file_size": max_file_size, "allowed_file_types": list(file_types), "order": order,
    }
    if word_limit:
        item["word_limit"] = word_limit
    return item


def _fee(amount, order):
    return {
        "requirement_type": "fee", "category": "administrative", "name": "Application Fee",
        "description": "Non-refundable application processing fee", "is_required": True, "is_optional": False,
        "application_fee_amount": amount, "application_fee_currency": "USD",
        "application_fee_description": "Standard application fee", "order": order,
    }


def _interview(name, description, notes, order):
    return {
        "requirement_type": "interview", "category": "professional", "name": name, "description": description,
        "is_required": False, "is_optional": True, "interview_type": "virtual", "interview_duration": 30,
        "interview_notes": notes, "order": order,
    }


def _test(name, description, test_type, min_score, max_score, score_format, order, required=True):
    return {
        "requirement_type": "test_score", "category": "academic", "name": name, "description": description,
        "is_required": required, "is_optional": not required, "test_type": test_type,
        "min_score": min_score, "max_score": max_score, "score_format": score_format, "order": order,
    }


SYSTEM_TEMPLATES = [
    {
        "name": "Graduate School Application",
        "description": "Standard requirements for graduate school applications including documents, test scores, and fees.",
        "category": "graduate",
        "requirements": [
            _doc("Academic Transcripts", "academic", "Official transcripts from all previous institutions",
                 "transcript", 1, max_file_size=10, file_types=('pdf',)),
            _doc("Personal Statement", "personal", "Statement of purpose explaining your academic and career goals",
                 "personal_statement", 2, word_limit=1000),
            _doc("Curriculum Vitae/Resume", "professional", "Detailed CV highlighting academic and professional experience",
                 "cv", 3),
            _doc("Letters of Recommendation", "professional", "Academic or professional letters of recommendation",
                 "recommendation_letter", 4),
            _test("GRE Scores", "Graduate Record Examination scores", "gre", 260, 340, "260-340 total score", 5),
            _test("TOEFL/IELTS Scores", "English proficiency test scores (for international students)", "toefl",
                  80, 120, "80+ total score", 6, required=False),
            _fee(75, 7),
            _interview("Admissions Interview", "Interview with admissions committee or faculty",
                       "May be required for competitive programs", 8),
        ],
    },
    {
        "name": "Undergraduate Application",
        "description": "Standard requirements for undergraduate college applications.",
        "category": "undergraduate",
        "requirements": [
            _doc("High School Transcripts", "academic", "Official high school transcripts", "transcript", 1,
                 max_file_size=10, file_types=('pdf',)),
            _doc("Personal Essay", "personal", "Personal statement or college essay", "personal_statement", 2,
                 word_limit=650),
            _test("SAT/ACT Scores", "Standardized test scores", "sat", 1000, 1600, "1000+ total score", 3),
            _doc("Letters of Recommendation", "professional", "Teacher or counselor recommendations",
                 "recommendation_letter", 4),
            _fee(50, 5),
        ],
    },
    {
        "name": "Scholarship Application",
        "description": "Standard requirements for scholarship applications.",
        "category": "scholarship",
        "requirements": [
            _doc("Scholarship Essay", "personal", "Essay addressing scholarship criteria and personal goals",
                 "personal_statement", 1, word_limit=500),
            _doc("Academic Transcripts", "academic", "Current academic transcripts", "transcript", 2,
                 max_file_size=10, file_types=('pdf',)),
            _doc("Letters of Recommendation", "professional", "Academic or professional recommendations",
                 "recommendation_letter", 3),
            _doc("Financial Documents", "financial", "Proof of financial need or income statements",
                 "financial_documents", 4, max_file_size=10, file_types=('pdf',), required=False),
            _interview("Scholarship Interview", "Interview with scholarship committee",
                       "May be required for competitive scholarships", 5),
        ],
    },
]


def seed_system_templates():
    if RequirementsTemplate.query.filter_by(is_system_template=True).count() > 0:
        return 0
    for template in SYSTEM_TEMPLATES:
        db.session.add(RequirementsTemplate(is_system_template=True, is_active=True, usage_count=0, **template))
    db.session.commit()
    logger.info("Seeded %d system requirement templates", len(SYSTEM_TEMPLATES))
    return len(SYSTEM_TEMPLATES)


def get_application(user, application_id):
    application = Application.query.get(application_id)
    if not application or application.user_id != user.id:
        raise NotFound("Application not found")
    return application


def get_requirement(application, requirement_id):
    requirement = ApplicationRequirement.query.get(requirement_id)
    if not requirement or requirement.application_id != application.id:
        raise NotFound("Requirement not found")
    return requirement
