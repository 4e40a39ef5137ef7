import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledgerbooks.auth import CurrentUser, get_current_user
from ledgerbooks.db import Base, get_db
from ledgerbooks.main import app

TEST_USER_ID = "user-1"


@pytest.fixture(autouse=True)
def override_auth(request):
    if request.node.get_closest_marker("real_auth"):
        yield
        return

    app.dependency_overrides[get_current_user] = lambda: CurrentUser(id=TEST_USER_ID)
    yield
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def session_local():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)
    yield TestingSessionLocal
    Base.metadata.drop_all(engine)


@pytest.fixture()
def db(session_local):
    with session_local() as session:
        yield session


@pytest.fixture()
def client(session_local):
    def override_get_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)
