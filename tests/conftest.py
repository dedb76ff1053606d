import pytest

from eddura.app import create_app
from eddura.models import db


def make_app(tmp_path, **overrides):
    config = {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path}/test.db",
        "APP_ENV": "development",
        "TESTING": True,
        "FIREBASE_CREDENTIALS_PATH": "",
        "GOOGLE_AI_API_KEY": "",
        "PAYMENTS_ENABLED": False,
    }
    config.update(overrides)
    return create_app(config)


@pytest.fixture
def app(tmp_path):
    app = make_app(tmp_path)
    yield app
    with app.app_context():
        db.session.remove()


@pytest.fixture
def paid_app(tmp_path):
    app = make_app(tmp_path, PAYMENTS_ENABLED=True, ENABLE_TRIALS=False)
    yield app
    with app.app_context():
        db.session.remove()


@pytest.fixture
def prod_app(tmp_path):
    app = make_app(tmp_path, APP_ENV="production", RATE_LIMIT_PER_MINUTE=3)
    yield app
    with app.app_context():
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.test_request_context():
        yield app


@pytest.fixture
def admin_headers():
    return {"X-Demo-UID": "admin", "X-Admin": "true"}


@pytest.fixture
def student_headers():
    return {"X-Demo-UID": "student-1"}
