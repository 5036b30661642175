import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from siminventory.main import app
from siminventory.database import Base, get_db
from siminventory.models.user import User, Role
from siminventory.routers import auth
from siminventory.services.user_service import hash_password, create_access_token

TEST_DB_URL = "sqlite:///:memory:"
PASSWORD = "secret123"


@pytest.fixture(scope="function")
def session_factory():
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Ensure all connections share same in-memory DB
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    Base.metadata.drop_all(engine)


def _bearer_for(session_factory, name: str, email: str, role: Role) -> dict:
    db = session_factory()
    user = User(name=name, email=email, hashed_password=hash_password(PASSWORD), role=role.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    token = create_access_token(user)
    db.close()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    auth._login_attempts.clear()

    admin_headers = _bearer_for(session_factory, "Admin", "admin@test.com", Role.admin)

    with TestClient(app) as c:
        c.headers.update(admin_headers)
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def manager_headers(session_factory):
    return _bearer_for(session_factory, "Manager", "manager@test.com", Role.inventory_manager)


@pytest.fixture
def staff_headers(session_factory):
    return _bearer_for(session_factory, "Staff", "staff@test.com", Role.staff)


@pytest.fixture
def room_id(client):
    return client.post("/api/locations", json={"name": "Skills Lab", "type": "Room"}).json()["id"]


@pytest.fixture
def create_item(client, room_id):
    def _create(**overrides):
        payload = {"name": "CPR Manikin", "category": "Manikin", "location": {"room": room_id}, "quantity": 10}
        payload.update(overrides)
        res = client.post("/api/items", json=payload)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


@pytest.fixture
def transact(client):
    def _post(item_id, **body):
        return client.post(f"/api/items/{item_id}/enhanced-transaction", json=body)

    return _post
