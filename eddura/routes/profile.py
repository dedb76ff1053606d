from flask import Blueprint

from ..auth import current_user, login_required
from ..models import db
from ..schemas import ProfileIn
from ..utils import parse_body

profile_bp = Blueprint('profile', __name__)


@profile_bp.get('/api/profile')
@login_required
def get_profile():
    return current_user().to_dict()


@profile_bp.put('/api/profile')
@login_required
def update_profile():
    user = current_user()
    data = parse_body(ProfileIn).model_dump(exclude_unset=True)
    for key, value in data.items():
        if key == 'career_preferences':
            value = {**(user.career_preferences or {}), **(value or {})}
        setattr(user, key, value)
    db.session.commit()
    return user.to_dict()
