# models.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, ForeignKey, Text, Boolean, Index, text
from sqlalchemy.orm import relationship
from database import Base
import enum


def _now():
    return datetime.now()


class RoleEnum(str, enum.Enum):
    guest = "guest"
    receptionist = "receptionist"
    housekeeping = "housekeeping"
    admin = "admin"

class ShiftEnum(str, enum.Enum):
    morning = "morning"
    afternoon = "afternoon"
    night = "night"

class TaskStatusEnum(str, enum.Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    skipped = "skipped"

class PriorityEnum(str, enum.Enum):
    normal = "normal"
    high = "high"

class TaskTypeEnum(str, enum.Enum):
    routine = "routine"
    checkout_cleaning = "checkout_cleaning"


# Largest id a 64-bit INTEGER primary key can hold
MAX_ID = 2**63 - 1

# Generation order; also the "ascending" order for listings
SHIFTS = (ShiftEnum.morning, ShiftEnum.afternoon, ShiftEnum.night)


class Hotel(Base):
    __tablename__ = "hotels"
    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    rooms = relationship("Room", back_populates="hotel", order_by="Room.id")
    staff = relationship("Staff", back_populates="hotel", order_by="Staff.id")

class Room(Base):
    __tablename__ = "rooms"
    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False, index=True)
    room_number = Column(String(20), nullable=False)
    room_type = Column(String(50), nullable=False, default="Single")
    is_active = Column(Boolean, nullable=False, default=True)

    hotel = relationship("Hotel", back_populates="rooms")
    tasks = relationship("Task", back_populates="room", foreign_keys="Task.room_id")

class Staff(Base):
    """A user of the system; only active housekeeping staff take tasks."""
    __tablename__ = "staff"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.guest)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    hotel = relationship("Hotel", back_populates="staff")
    tasks = relationship("Task", back_populates="assigned_to", foreign_keys="Task.assigned_to_id")

class Task(Base):
    """One cleaning obligation for a room on a given day and shift."""
    __tablename__ = "housekeeping_tasks"
    __table_args__ = (
        # One routine task per room per shift per day; checkout tasks are exempt
        Index(
            "uq_routine_task",
            "hotel_id", "room_id", "date", "shift",
            unique=True,
            sqlite_where=text("task_type = 'routine'"),
            postgresql_where=text("task_type = 'routine'"),
        ),
        Index("ix_task_hotel_date_shift", "hotel_id", "date", "shift"),
        Index("ix_task_assignee_status", "hotel_id", "assigned_to_id", "date", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    date = Column(Date, nullable=False)
    shift = Column(Enum(ShiftEnum), nullable=False)
    status = Column(Enum(TaskStatusEnum), nullable=False, default=TaskStatusEnum.pending)
    priority = Column(Enum(PriorityEnum), nullable=False, default=PriorityEnum.normal)
    task_type = Column(Enum(TaskTypeEnum), nullable=False, default=TaskTypeEnum.routine)
    assigned_to_id = Column(Integer, ForeignKey("staff.id"), nullable=True)
    notes = Column(Text, nullable=False, default="")
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_now)
    updated_at = Column(DateTime, nullable=False, default=_now, onupdate=_now)

    room = relationship("Room", back_populates="tasks", foreign_keys=[room_id])
    assigned_to = relationship("Staff", back_populates="tasks", foreign_keys=[assigned_to_id])
