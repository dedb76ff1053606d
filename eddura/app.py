import logging
from time import time

from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError

from .auth import init_firebase
from .config import Config
from .errors import ServiceError
from .models import db
from .routes import blueprints
from .services.paywall import seed_default_plans
from .services.requirements import seed_system_templates

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS'].split(',')}})

    db.init_app(app)

    # Simple per-IP rate limiter in production
    rate_store = {}

    @app.before_request
    def _rate_limit():
        if app.config.get('APP_ENV') != 'production':
            return None
        ip = request.remote_addr or 'unknown'
        now = int(time())
        window = 60
        limit = app.config['RATE_LIMIT_PER_MINUTE']
        bucket = [t for t in rate_store.get(ip, []) if now - t < window]
        if len(bucket) >= limit:
            logger.warning("Rate limit hit for %s", ip)
            return jsonify({"error": "rate_limited", "retry_after": window}), 429
        bucket.append(now)
        rate_store[ip] = bucket

    init_firebase(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    for bp in blueprints:
        app.register_blueprint(bp)

    @app.errorhandler(ServiceError)
    def _service_error(e):
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(ValidationError)
    def _validation_error(e):
        details = [{"field": ".".join(str(p) for p in err['loc']), "message": err['msg']} for err in e.errors()]
        return jsonify({"error": "validation_failed", "details": details}), 400

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({"error": "not_found", "path": request.path}), 404

    @app.errorhandler(405)
    def _method_not_allowed(e):
        return jsonify({"error": "method_not_allowed"}), 405

    @app.errorhandler(500)
    def _server_error(e):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"error": "internal_error"}), 500

    with app.app_context():
        db.create_all()
        seed_default_plans()
        seed_system_templates()

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=5000, debug=True)
