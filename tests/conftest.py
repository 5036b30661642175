import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from siminventory.database import Base
import siminventory.models  # noqa: F401  register all models
from siminventory.models.user import User, Role
from siminventory.models.location import Location, LocationType
from siminventory.models.item import Item


TEST_DB_URL = "sqlite:///:memory:"


def enable_foreign_keys(engine):
    """Same PRAGMA as siminventory.database, so FK violations show up in tests."""

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture(scope="function")
def db():
    engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
    enable_foreign_keys(engine)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def user(db):
    u = User(name="Tester", email="tester@example.com", hashed_password="x", role=Role.admin.value)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def room(db):
    loc = Location(name="Skills Lab", type=LocationType.room)
    db.add(loc)
    db.commit()
    db.refresh(loc)
    return loc


@pytest.fixture
def make_item(db, room):
    """Factory for items with a balanced set of counters."""
    counter = {"n": 0}

    def _make(quantity=10, category="Manikin", **kwargs):
        counter["n"] += 1
        item = Item(
            name=kwargs.pop("name", f"Item {counter['n']}"),
            category=category,
            barcode=kwargs.pop("barcode", f"BC-{counter['n']:04d}"),
            room_id=room.id,
            quantity=quantity,
            available_quantity=quantity,
            in_maintenance=0,
            in_session=0,
            rented=0,
            **kwargs,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make
