import importlib
import os
import sys
import uuid

import pytest
from fastapi.testclient import TestClient

PASSWORD = "Password123!"


@pytest.fixture(scope="session")
def test_db_url(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("db") / "test_chapterflux.db"
    return f"sqlite:///{db_path}"


@pytest.fixture(scope="session")
def app(test_db_url):
    os.environ["DATABASE_URL"] = test_db_url
    os.environ["SECRET_KEY"] = "test-secret-key-for-chapterflux"
    os.environ["RATE_LIMIT_ENABLED"] = "false"
    os.environ["LOG_TO_FILE"] = "false"

    import app.core.config as config
    importlib.reload(config)

    for module_name in list(sys.modules):
        if module_name.startswith("app.models"):
            del sys.modules[module_name]

    import app.db.database as database
    importlib.reload(database)

    import app.models
    importlib.reload(app.models)

    import main as main_module
    importlib.reload(main_module)

    app_instance = main_module.app
    app_instance.router.on_startup.clear()
    app_instance.router.on_shutdown.clear()

    database.Base.metadata.create_all(bind=database.engine)
    return app_instance


@pytest.fixture()
def db_session(app):
    from app.db.database import SessionLocal
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session):
    """Create a user with a unique email and the shared test password."""
    from app.core.security import get_password_hash
    from app.models.user import User

    def _make(full_name="Test Reader"):
        user = User(
            email=f"reader_{uuid.uuid4().hex[:12]}@test.com",
            full_name=full_name,
            hashed_password=get_password_hash(PASSWORD),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def auth_headers(client):
    def _headers(user):
        resp = client.post("/api/auth/login", data={"username": user.email, "password": PASSWORD})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _headers


@pytest.fixture()
def make_document(db_session):
    """Insert a document owned by ``user``; keyword overrides any column."""
    from app.models.document import Document

    def _make(user, **overrides):
        values = {
            "user_id": user.id,
            "title": "The Cell",
            "content": "Cells are the basic unit of life.",
            "type": "text",
            "file_name": "cell.txt",
            "file_size": 2048,
            "word_count": 1200,
            "estimated_read_time": 5,
            "progress": 0,
        }
        values.update(overrides)
        document = Document(**values)
        db_session.add(document)
        db_session.commit()
        db_session.refresh(document)
        return document

    return _make
