"""Helpers shared by the test modules."""

from auth import Requester
from models import Room, Task


def as_requester(staff) -> Requester:
    return Requester.from_staff(staff)


def room_by_number(db, hotel, number) -> Room:
    return db.query(Room).filter(Room.hotel_id == hotel.id, Room.room_number == number).one()


def tasks_in_creation_order(db):
    return db.query(Task).order_by(Task.id).all()
