from flask import Blueprint, jsonify, request

from ..auth import current_user, login_required
from ..schemas import ReviewIn
from ..services import requirements as reqs
from ..services import review as reviews
from ..services.ai import get_client
from ..services.paywall import requires_access
from ..utils import parse_body

reviews_bp = Blueprint('reviews', __name__)


@reviews_bp.post('/api/applications/<int:application_id>/reviews')
@login_required
@requires_access(feature='ai_review')
def create_review(application_id):
    user = current_user()
    application = reqs.get_application(user, application_id)
    data = parse_body(ReviewIn)
    requirement = reqs.get_requirement(application, data.requirement_id)
    review, error = reviews.request_review(user, application, requirement, data.review_type, get_client(),
                                           document_id=data.document_id,
                                           custom_instructions=data.custom_instructions)
    if error:
        return jsonify({"success": False, "review": review.to_dict(), "error": error}), 500
    return {"success": True, "review": review.to_dict(), "message": "AI review completed successfully"}


@reviews_bp.get('/api/applications/<int:application_id>/reviews')
@login_required
def list_reviews(application_id):
    application = reqs.get_application(current_user(), application_id)
    items = reviews.list_reviews(application, requirement_id=request.args.get('requirement_id', type=int),
                                 review_type=request.args.get('review_type'))
    return {"success": True, "reviews": [r.to_dict() for r in items], "count": len(items)}
