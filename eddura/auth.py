import logging
import os
from functools import wraps

from firebase_admin import auth as fb_auth, credentials, initialize_app
from flask import current_app, g, jsonify, request

from .models import db, User

logger = logging.getLogger(__name__)

firebase_initialized = False


def init_firebase(app):
    global firebase_initialized
    if firebase_initialized:
        return
    cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
    if cred_path and os.path.exists(cred_path):
        cred = credentials.Certificate(cred_path)
        initialize_app(cred)
        firebase_initialized = True
        logger.info("Firebase initialized from %s", cred_path)


def current_user():
    """Resolve the caller from a Firebase token or, outside production, demo headers."""
    if 'user' in g:
        return g.user
    g.user = _resolve_user()
    return g.user


def _resolve_user():
    # Development fallback: anything but production trusts the demo headers
    if current_app.config.get('APP_ENV', 'development') != 'production':
        demo_uid = request.headers.get('X-Demo-UID', 'demo-user')
        demo_email = request.headers.get('X-Demo-Email', f'{demo_uid}@example.com')
        role = 'admin' if request.headers.get('X-Admin') == 'true' else 'student'
        user = User.query.filter_by(uid=demo_uid).first()
        if not user:
            user = User(uid=demo_uid, email=demo_email, role=role)
            db.session.add(user)
            db.session.commit()
        elif user.role != role:
            user.role = role
            db.session.commit()
        return user
    token = request.headers.get('Authorization', '').replace('Bearer ', '')
    if not token or not firebase_initialized:
        return None
    try:
        decoded = fb_auth.verify_id_token(token)
    except (ValueError, fb_auth.InvalidIdTokenError, fb_auth.ExpiredIdTokenError) as e:
        logger.warning("Rejected Firebase token: %s", e)
        return None
    uid = decoded['uid']
    email = decoded.get('email', '') or f'{uid}@users.noreply'
    user = User.query.filter_by(uid=uid).first()
    if not user:
        user = User(uid=uid, email=email, role='student')
        db.session.add(user)
        db.session.commit()
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_user():
            return jsonify({"error": "unauthorized"}), 401
        return view(*args, **kwargs)
    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if not user or user.role != 'admin':
            return jsonify({"error": "forbidden"}), 403
        return view(*args, **kwargs)
    return wrapper
