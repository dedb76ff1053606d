from .admin import admin_bp
from .analytics import analytics_bp
from .applications import applications_bp
from .billing import billing_bp
from .catalog import catalog_bp
from .library import library_bp
from .packages import packages_bp
from .profile import profile_bp
from .quiz import quiz_bp
from .reviews import reviews_bp

blueprints = [
    profile_bp,
    quiz_bp,
    catalog_bp,
    packages_bp,
    applications_bp,
    reviews_bp,
    library_bp,
    billing_bp,
    analytics_bp,
    admin_bp,
]
