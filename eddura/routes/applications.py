from datetime import datetime

from flask import Blueprint, jsonify, request

from ..auth import current_user, login_required
from ..errors import Forbidden, NotFound
from ..models import db, Application, Document, Program, RequirementsTemplate, Scholarship
from ..schemas import (ApplicationIn, ApplicationUpdate, ApplyTemplateIn, BulkUpdateIn, LinkDocumentIn, RequirementIn,
                       TemplateIn)
from ..services import requirements as reqs
from ..services.paywall import requires_access
from ..utils import body_fields, parse_body

applications_bp = Blueprint('applications', __name__)


def _flag(name):
    value = request.args.get(name)
    if value is None:
        return None
    return value.lower() == 'true'


@applications_bp.get('/api/applications')
@login_required
def list_applications():
    query = Application.query.filter_by(user_id=current_user().id)
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    items = query.order_by(Application.updated_at.desc()).all()
    return {"applications": [a.to_dict() for a in items]}


@applications_bp.post('/api/applications')
@login_required
@requires_access(usage_type='applications')
def create_application():
    user = current_user()
    data = parse_body(ApplicationIn)
    if data.scholarship_id and not Scholarship.query.get(data.scholarship_id):
        raise NotFound("Scholarship not found")
    if data.program_id and not Program.query.get(data.program_id):
        raise NotFound("Program not found")
    application = Application(user_id=user.id, status='draft', progress=0, **data.model_dump())
    db.session.add(application)
    db.session.commit()
    return jsonify(application.to_dict()), 201


@applications_bp.get('/api/applications/<int:application_id>')
@login_required
def get_application(application_id):
    application = reqs.get_application(current_user(), application_id)
    data = application.to_dict()
    data["requirements"] = [r.to_dict() for r in application.requirements]
    return data


@applications_bp.put('/api/applications/<int:application_id>')
@login_required
def update_application(application_id):
    application = reqs.get_application(current_user(), application_id)
    data = parse_body(ApplicationUpdate).model_dump(exclude_unset=True)
    for key, value in data.items():
        setattr(application, key, value)
    if data.get('status') == 'submitted' and not application.submitted_at:
        application.submitted_at = datetime.utcnow()
    db.session.commit()
    return application.to_dict()


@applications_bp.delete('/api/applications/<int:application_id>')
@login_required
def delete_application(application_id):
    application = reqs.get_application(current_user(), application_id)
    db.session.delete(application)
    db.session.commit()
    return {"message": "Application deleted successfully"}


# --- Requirements -------------------------------------------------------------

@applications_bp.get('/api/applications/<int:application_id>/requirements')
@login_required
def list_requirements(application_id):
    application = reqs.get_application(current_user(), application_id)
    items = list(application.requirements)
    if request.args.get('status'):
        items = [r for r in items if r.status == request.args['status']]
    if request.args.get('category'):
        items = [r for r in items if r.category == request.args['category']]
    if request.args.get('type'):
        items = [r for r in items if r.requirement_type == request.args['type']]
    return {"requirements": [r.to_dict() for r in items], "progress": reqs.calculate_progress(application.requirements)}


@applications_bp.post('/api/applications/<int:application_id>/requirements')
@login_required
def create_requirement(application_id):
    application = reqs.get_application(current_user(), application_id)
    requirement = reqs.create_requirement(application, body_fields(RequirementIn))
    return jsonify(requirement.to_dict()), 201


@applications_bp.put('/api/applications/<int:application_id>/requirements/<int:requirement_id>')
@login_required
def update_requirement(application_id, requirement_id):
    application = reqs.get_application(current_user(), application_id)
    requirement = reqs.get_requirement(application, requirement_id)
    return reqs.update_requirement(requirement, body_fields(RequirementIn)).to_dict()


@applications_bp.delete('/api/applications/<int:application_id>/requirements/<int:requirement_id>')
@login_required
def delete_requirement(application_id, requirement_id):
    application = reqs.get_application(current_user(), application_id)
    reqs.delete_requirement(reqs.get_requirement(application, requirement_id))
    return {"message": "Requirement deleted successfully"}


@applications_bp.get('/api/applications/<int:application_id>/requirements/progress')
@login_required
def requirements_progress(application_id):
    application = reqs.get_application(current_user(), application_id)
    return reqs.calculate_progress(list(application.requirements))


@applications_bp.get('/api/applications/<int:application_id>/requirements/summary')
@login_required
def requirements_summary(application_id):
    application = reqs.get_application(current_user(), application_id)
    return reqs.summarize(application, list(application.requirements))


@applications_bp.get('/api/applications/<int:application_id>/requirements/attention')
@login_required
def requirements_attention(application_id):
    application = reqs.get_application(current_user(), application_id)
    return {"requirements": [r.to_dict() for r in reqs.needing_attention(list(application.requirements))]}


@applications_bp.get('/api/applications/<int:application_id>/requirements/ready')
@login_required
def requirements_ready(application_id):
    application = reqs.get_application(current_user(), application_id)
    progress = reqs.calculate_progress(list(application.requirements))
    return {"ready": reqs.is_ready_to_submit(progress), "progress": progress}


@applications_bp.post('/api/applications/<int:application_id>/requirements/bulk')
@login_required
def bulk_update(application_id):
    application = reqs.get_application(current_user(), application_id)
    data = parse_body(BulkUpdateIn)
    updates = data.updates.model_dump(exclude_unset=True)
    modified = reqs.bulk_update(application, set(data.requirement_ids), updates)
    return {"modified": modified, "progress": application.progress}


@applications_bp.post('/api/applications/<int:application_id>/requirements/<int:requirement_id>/link')
@login_required
def link_document(application_id, requirement_id):
    user = current_user()
    application = reqs.get_application(user, application_id)
    requirement = reqs.get_requirement(application, requirement_id)
    data = parse_body(LinkDocumentIn)
    document = Document.query.get(data.document_id)
    if not document or document.user_id != user.id:
        raise NotFound("Document not found")
    return reqs.link_document(requirement, document.id, data.notes).to_dict()


@applications_bp.post('/api/applications/<int:application_id>/apply-template')
@login_required
def apply_template(application_id):
    application = reqs.get_application(current_user(), application_id)
    data = parse_body(ApplyTemplateIn)
    template = RequirementsTemplate.query.get(data.template_id)
    if not template:
        raise NotFound("Template not found")
    created = reqs.apply_template(template, application)
    return jsonify({
        "message": "Template applied successfully",
        "requirements": [r.to_dict() for r in created],
        "progress": application.progress,
    }), 201


# --- Templates ----------------------------------------------------------------

def _template(template_id):
    template = RequirementsTemplate.query.get(template_id)
    if not template:
        raise NotFound("Template not found")
    return template


def _editable_template(template_id):
    template = _template(template_id)
    user = current_user()
    if not template.is_system_template and template.created_by != user.id and user.role != 'admin':
        raise Forbidden("You can only modify your own templates")
    return template


@applications_bp.get('/api/requirements-templates')
def list_templates():
    items = reqs.list_templates(category=request.args.get('category'), is_system=_flag('is_system'),
                                is_active=_flag('is_active'))
    return {"templates": [t.to_dict() for t in items]}


@applications_bp.get('/api/requirements-templates/popular')
def popular_templates():
    return {"templates": [t.to_dict() for t in reqs.popular_templates()]}


@applications_bp.get('/api/requirements-templates/search')
def search_templates():
    term = (request.args.get('q') or '').strip()
    if not term:
        return jsonify({"error": "Search term is required"}), 400
    return {"templates": [t.to_dict() for t in reqs.search_templates(term)]}


@applications_bp.get('/api/requirements-templates/statistics')
def template_statistics():
    return reqs.template_statistics()


@applications_bp.get('/api/requirements-templates/<int:template_id>')
def get_template(template_id):
    return _template(template_id).to_dict()


@applications_bp.post('/api/requirements-templates')
@login_required
def create_template():
    template = reqs.create_template(body_fields(TemplateIn), created_by=current_user().id)
    return jsonify(template.to_dict()), 201


@applications_bp.put('/api/requirements-templates/<int:template_id>')
@login_required
def update_template(template_id):
    return reqs.update_template(_editable_template(template_id), body_fields(TemplateIn)).to_dict()


@applications_bp.delete('/api/requirements-templates/<int:template_id>')
@login_required
def delete_template(template_id):
    reqs.delete_template(_editable_template(template_id))
    return {"message": "Template deleted successfully"}
