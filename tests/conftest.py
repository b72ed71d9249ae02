"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("HMS_ENV", "test")
os.environ.setdefault("HMS_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.orm import sessionmaker

from database import init_db, make_engine
from models import Hotel, Room, Staff, RoleEnum


@pytest.fixture
def engine():
    """In-memory database shared by every session of one test."""
    engine = make_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_staff(db_session):
    """Create a staff member; housekeeping by default."""
    counter = {"n": 0}

    def _make(name, hotel=None, role=RoleEnum.housekeeping, is_active=True):
        counter["n"] += 1
        s = Staff(
            name=name,
            email=f"{name.lower().replace(' ', '.')}.{counter['n']}@example.com",
            role=role,
            hotel_id=hotel.id if hotel is not None else None,
            is_active=is_active,
        )
        db_session.add(s)
        db_session.commit()
        return s

    return _make


@pytest.fixture
def make_hotel(db_session):
    def _make(code, room_numbers=(), inactive_rooms=()):
        h = Hotel(code=code, name=f"Hotel {code}")
        db_session.add(h)
        db_session.flush()
        for number in room_numbers:
            db_session.add(Room(hotel_id=h.id, room_number=number, room_type="Double"))
        for number in inactive_rooms:
            db_session.add(Room(hotel_id=h.id, room_number=number, room_type="Double", is_active=False))
        db_session.commit()
        return h

    return _make


@pytest.fixture
def hotel(make_hotel):
    """Hotel H with active rooms 101 and 102."""
    return make_hotel("HMS-001", ["101", "102"])


@pytest.fixture
def other_hotel(make_hotel):
    return make_hotel("HMS-002", ["201"])


@pytest.fixture
def housekeepers(hotel, make_staff):
    """Active housekeeping staff [S1, S2] of hotel H."""
    return [make_staff("S1", hotel), make_staff("S2", hotel)]


@pytest.fixture
def admin(make_staff):
    return make_staff("Admin", role=RoleEnum.admin)


@pytest.fixture
def receptionist(hotel, make_staff):
    return make_staff("Front Desk", hotel, role=RoleEnum.receptionist)

