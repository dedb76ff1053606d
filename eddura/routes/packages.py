from flask import Blueprint, jsonify, request

from ..auth import current_user, login_required
from ..models import UserInterest
from ..schemas import InterestIn, PackageIn, PackageUpdate
from ..services import packages
from ..utils import body_fields

packages_bp = Blueprint('packages', __name__)


def _flag(name):
    value = request.args.get(name)
    if value is None:
        return None
    return value.lower() == 'true'


@packages_bp.get('/api/application-packages')
@login_required
def list_packages():
    items = packages.list_packages(current_user(), status=request.args.get('status'),
                                   type=request.args.get('type'), is_ready=_flag('is_ready'))
    return {"packages": [p.to_dict() for p in items], "total": len(items)}


@packages_bp.post('/api/application-packages')
@login_required
def create_package():
    package = packages.create_package(current_user(), body_fields(PackageIn))
    return jsonify(package.to_dict()), 201


@packages_bp.get('/api/application-packages/<int:package_id>')
@login_required
def get_package(package_id):
    return packages.get_package(current_user(), package_id).to_dict()


@packages_bp.put('/api/application-packages/<int:package_id>')
@login_required
def update_package(package_id):
    package = packages.get_package(current_user(), package_id)
    return packages.update_package(package, body_fields(PackageUpdate)).to_dict()


@packages_bp.delete('/api/application-packages/<int:package_id>')
@login_required
def delete_package(package_id):
    packages.delete_package(packages.get_package(current_user(), package_id))
    return {"message": "Application package deleted successfully"}


# --- Interests ----------------------------------------------------------------

@packages_bp.get('/api/user-interests')
@login_required
def list_interests():
    query = UserInterest.query.filter_by(user_id=current_user().id)
    for key in ('status', 'priority'):
        if request.args.get(key):
            query = query.filter_by(**{key: request.args[key]})
    return {"interests": [i.to_dict() for i in query.order_by(UserInterest.created_at.desc()).all()]}


@packages_bp.post('/api/user-interests')
@login_required
def create_interest():
    interest = packages.create_interest(current_user(), body_fields(InterestIn))
    return jsonify(interest.to_dict()), 201


@packages_bp.put('/api/user-interests/<int:interest_id>')
@login_required
def update_interest(interest_id):
    interest = packages.get_interest(current_user(), interest_id)
    return packages.update_interest(interest, body_fields(InterestIn)).to_dict()


@packages_bp.delete('/api/user-interests/<int:interest_id>')
@login_required
def delete_interest(interest_id):
    packages.delete_interest(packages.get_interest(current_user(), interest_id))
    return {"message": "Interest removed"}
