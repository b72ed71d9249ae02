# crud.py
from datetime import date
from typing import Optional, List
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from models import Hotel, Room, Staff, Task, RoleEnum, TaskStatusEnum, TaskTypeEnum
from errors import ConflictError

# ----- Helpers: serializers -----
def s_room(r: Room) -> dict:
    return {"id": r.id, "roomNumber": r.room_number, "roomType": r.room_type}

def s_staff(s: Staff) -> dict:
    return {"id": s.id, "name": s.name, "email": s.email, "role": s.role.value}

def s_task(t: Task) -> dict:
    return {
        "id": t.id,
        "hotelId": t.hotel_id,
        "room": s_room(t.room) if t.room else t.room_id,
        "date": t.date.isoformat(),
        "shift": t.shift.value,
        "status": t.status.value,
        "priority": t.priority.value,
        "taskType": t.task_type.value,
        "assignedTo": s_staff(t.assigned_to) if t.assigned_to else None,
        "notes": t.notes,
        "completedAt": t.completed_at.isoformat() if t.completed_at else None,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
        "updatedAt": t.updated_at.isoformat() if t.updated_at else None,
    }

# ----- Directories (read-only from the engine's point of view) -----
def get_hotel(db: Session, hotel_id: int) -> Optional[Hotel]:
    return db.get(Hotel, hotel_id)

def active_hotels(db: Session) -> List[Hotel]:
    return db.execute(select(Hotel).where(Hotel.is_active.is_(True)).order_by(Hotel.id)).scalars().all()

def get_room(db: Session, room_id: int) -> Optional[Room]:
    return db.get(Room, room_id)

def active_rooms(db: Session, hotel_id: int) -> List[Room]:
    stmt = (
        select(Room)
        .where(Room.hotel_id == hotel_id, Room.is_active.is_(True))
        .order_by(Room.id)
    )
    return db.execute(stmt).scalars().all()

def get_staff(db: Session, staff_id: int) -> Optional[Staff]:
    return db.get(Staff, staff_id)

def active_housekeepers(db: Session, hotel_id: int) -> List[Staff]:
    stmt = (
        select(Staff)
        .where(
            Staff.hotel_id == hotel_id,
            Staff.role == RoleEnum.housekeeping,
            Staff.is_active.is_(True),
        )
        .order_by(Staff.id)
    )
    return db.execute(stmt).scalars().all()

# ----- Task store -----
def _task_query():
    return select(Task).options(selectinload(Task.room), selectinload(Task.assigned_to))

def get_task(db: Session, task_id: int) -> Optional[Task]:
    return db.execute(_task_query().where(Task.id == task_id)).scalar_one_or_none()

def find_routine_task(db: Session, hotel_id: int, room_id: int, day: date, shift) -> Optional[Task]:
    stmt = select(Task).where(
        Task.hotel_id == hotel_id,
        Task.room_id == room_id,
        Task.date == day,
        Task.shift == shift,
        Task.task_type == TaskTypeEnum.routine,
    )
    return db.execute(stmt).scalars().first()

def list_tasks(db: Session, **filters) -> List[Task]:
    """Tasks matching every non-None filter, in creation order.

    Accepted filters: hotel_id, assigned_to_id, date, shift, status.
    """
    stmt = _task_query()
    for name in ("hotel_id", "assigned_to_id", "date", "shift", "status"):
        value = filters.get(name)
        if value is not None:
            stmt = stmt.where(getattr(Task, name) == value)
    return db.execute(stmt.order_by(Task.id)).scalars().all()

def count_pending(db: Session, hotel_id: int, staff_id: int) -> int:
    stmt = select(func.count(Task.id)).where(
        Task.hotel_id == hotel_id,
        Task.assigned_to_id == staff_id,
        Task.status == TaskStatusEnum.pending,
    )
    return db.execute(stmt).scalar_one()

def insert_task(db: Session, **fields) -> Task:
    """Persist one task and commit it on its own.

    A routine task colliding with the unique index raises ConflictError;
    every other failure propagates untouched.
    """
    t = Task(**fields)
    db.add(t)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if fields.get("task_type", TaskTypeEnum.routine) == TaskTypeEnum.routine and find_routine_task(
            db, fields["hotel_id"], fields["room_id"], fields["date"], fields["shift"]
        ):
            raise ConflictError("Routine task already exists for this room, date and shift")
        raise
    db.refresh(t)
    return t

def save_task(db: Session, t: Task) -> Task:
    db.add(t)
    db.commit()
    return get_task(db, t.id)
