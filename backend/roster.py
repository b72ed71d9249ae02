"""
Housekeeping roster engine.

Bulk generation of the daily cleaning roster, reactive checkout-cleaning
tasks, status updates, manual reassignment and the role-scoped task queries.
Every operation is a plain synchronous read-modify-write against the session
it is handed; the routine-task unique index is the only concurrency guard.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Dict, List

from sqlalchemy.orm import Session

import crud
from auth import Requester
from errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from models import (
    MAX_ID,
    SHIFTS,
    PriorityEnum,
    RoleEnum,
    ShiftEnum,
    TaskStatusEnum,
    TaskTypeEnum,
)

logger = logging.getLogger(__name__)

CHECKOUT_NOTE = "Automatic checkout cleaning request"

_SHIFT_RANK = {shift: i for i, shift in enumerate(SHIFTS)}
_PRIORITY_RANK = {PriorityEnum.high: 0, PriorityEnum.normal: 1}


# ------------------------------------------------------------
# Input helpers
# ------------------------------------------------------------
def parse_id(value, label: str) -> int:
    """Return ``value`` as a positive integer id or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label} ID")
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value)
    if isinstance(value, int) and 0 < value <= MAX_ID:
        return value
    raise ValidationError(f"Invalid {label} ID")


def parse_day(value) -> date:
    """Normalize ``value`` to a calendar day (time of day dropped)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValidationError("Invalid date format")


def _parse_choice(value, enum_cls, label: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label}. Must be one of: {allowed}")


def current_shift(now: Optional[datetime] = None) -> ShiftEnum:
    """Shift covering the wall-clock hour of ``now``."""
    hour = (now or datetime.now()).hour
    if 6 <= hour < 14:
        return ShiftEnum.morning
    if 14 <= hour < 22:
        return ShiftEnum.afternoon
    return ShiftEnum.night


def _sorted(tasks) -> List[dict]:
    # shift ascending, then high priority first; creation order breaks ties
    ordered = sorted(tasks, key=lambda t: (_SHIFT_RANK[t.shift], _PRIORITY_RANK[t.priority]))
    return [crud.s_task(t) for t in ordered]


def _home_hotel(requester: Requester) -> int:
    if requester.hotel_id is None:
        raise AuthorizationError(f"{requester.role.value} must be assigned to a hotel")
    return requester.hotel_id


# ------------------------------------------------------------
# Roster generation
# ------------------------------------------------------------
def generate_daily_tasks(db: Session, hotel_id, day, requester: Requester) -> Dict:
    """Create one routine task per active room and shift for ``day``.

    Already existing tasks are skipped, so repeated or concurrent calls for
    the same hotel and day converge on a single roster. Assignment is
    round-robin over the active housekeeping staff by creation index.
    Each task commits on its own: a non-duplicate failure aborts the rest of
    the batch and leaves earlier tasks in place.
    """
    if requester.role != RoleEnum.admin:
        raise AuthorizationError("Only admin can generate daily housekeeping tasks")

    hotel_id = parse_id(hotel_id, "hotel")
    task_date = parse_day(day)

    if crud.get_hotel(db, hotel_id) is None:
        raise NotFoundError("Hotel not found")

    rooms = [(r.id, r.room_number) for r in crud.active_rooms(db, hotel_id)]
    if not rooms:
        raise NotFoundError("No active rooms found for this hotel")

    staff_ids = [s.id for s in crud.active_housekeepers(db, hotel_id)]
    if not staff_ids:
        logger.warning("Hotel %s has no active housekeeping staff; tasks stay unassigned", hotel_id)

    created: List[dict] = []
    skipped: List[dict] = []

    for room_id, room_number in rooms:
        for shift in SHIFTS:
            if crud.find_routine_task(db, hotel_id, room_id, task_date, shift):
                skipped.append({"room": room_number, "shift": shift.value, "reason": "Task already exists"})
                continue

            assignee = staff_ids[len(created) % len(staff_ids)] if staff_ids else None
            try:
                crud.insert_task(
                    db,
                    hotel_id=hotel_id,
                    room_id=room_id,
                    date=task_date,
                    shift=shift,
                    assigned_to_id=assignee,
                    status=TaskStatusEnum.pending,
                    priority=PriorityEnum.normal,
                    task_type=TaskTypeEnum.routine,
                )
            except ConflictError:
                logger.warning(
                    "Routine task for room %s (%s, %s) was created concurrently; skipping",
                    room_number, task_date, shift.value,
                )
                skipped.append({"room": room_number, "shift": shift.value, "reason": "Duplicate task"})
                continue

            created.append({"room": room_number, "shift": shift.value, "assignedTo": assignee})

    logger.info(
        "Generated roster for hotel %s on %s: %d created, %d skipped",
        hotel_id, task_date, len(created), len(skipped),
    )
    return {
        "message": "Daily housekeeping tasks generated successfully",
        "date": task_date.isoformat(),
        "tasksCreated": len(created),
        "tasksSkipped": len(skipped),
        "details": {"created": created, "skipped": skipped},
    }


SYSTEM_REQUESTER = Requester(id=0, role=RoleEnum.admin, hotel_id=None)


def generate_for_all_hotels(db: Session, day=None) -> List[Dict]:
    """Generate the roster of every active hotel for ``day`` (default: tomorrow).

    A hotel that fails is logged and reported; the others still run.
    """
    task_date = parse_day(day) if day is not None else date.today() + timedelta(days=1)
    hotels = [(h.id, h.code) for h in crud.active_hotels(db)]
    results = []
    for hotel_id, code in hotels:
        try:
            summary = generate_daily_tasks(db, hotel_id, task_date, SYSTEM_REQUESTER)
            results.append({"hotelId": hotel_id, "code": code, "success": True, **summary})
        except (NotFoundError, ValidationError) as e:
            logger.error("Roster generation failed for hotel %s (%s): %s", code, hotel_id, e)
            results.append({"hotelId": hotel_id, "code": code, "success": False, "error": str(e)})
    return results


# ------------------------------------------------------------
# Reactive assignment
# ------------------------------------------------------------
def _least_loaded(db: Session, hotel_id: int) -> Optional[int]:
    best_id, best_count = None, None
    for staff in crud.active_housekeepers(db, hotel_id):
        pending = crud.count_pending(db, hotel_id, staff.id)
        # strict "<" keeps the first minimum in enumeration order
        if best_count is None or pending < best_count:
            best_id, best_count = staff.id, pending
    return best_id


def create_checkout_cleaning_task(db: Session, hotel_id, room_id, now: Optional[datetime] = None) -> Dict:
    """High-priority cleaning task for a room just checked out of.

    Goes to the housekeeper with the fewest pending tasks right now.
    """
    hotel_id = parse_id(hotel_id, "hotel")
    room_id = parse_id(room_id, "room")

    room = crud.get_room(db, room_id)
    if room is None:
        raise NotFoundError("Room not found")
    if room.hotel_id != hotel_id:
        raise ValidationError("Room does not belong to this hotel")

    now = now or datetime.now()
    assignee = _least_loaded(db, hotel_id)

    task = crud.insert_task(
        db,
        hotel_id=hotel_id,
        room_id=room_id,
        date=now.date(),
        shift=current_shift(now),
        assigned_to_id=assignee,
        status=TaskStatusEnum.pending,
        priority=PriorityEnum.high,
        task_type=TaskTypeEnum.checkout_cleaning,
        notes=CHECKOUT_NOTE,
    )
    logger.info("Checkout cleaning task %s for room %s assigned to %s", task.id, room.room_number, assignee)
    return crud.s_task(crud.get_task(db, task.id))


# ------------------------------------------------------------
# Task mutation
# ------------------------------------------------------------
def update_task_status(db: Session, task_id, new_status, notes: Optional[str], requester: Requester) -> Dict:
    """Set a task's status; any valid status may follow any other."""
    task_id = parse_id(task_id, "task")
    status = _parse_choice(new_status, TaskStatusEnum, "status")
    if status is None:
        raise ValidationError("Status is required")

    task = crud.get_task(db, task_id)
    if task is None:
        raise NotFoundError("Task not found")

    if requester.role == RoleEnum.housekeeping:
        if task.assigned_to_id is None or task.assigned_to_id != requester.id:
            raise AuthorizationError("Access denied. You can only update tasks assigned to you")
    elif requester.role not in (RoleEnum.admin, RoleEnum.receptionist):
        raise AuthorizationError("Unauthorized to update housekeeping tasks")

    previous = task.status
    task.status = status
    if notes:
        task.notes = notes
    if status == TaskStatusEnum.completed and task.completed_at is None:
        task.completed_at = datetime.now()

    task = crud.save_task(db, task)
    logger.info("Task %s status %s -> %s by user %s", task_id, previous.value, status.value, requester.id)
    return crud.s_task(task)


def assign_task(db: Session, task_id, staff_id, requester: Requester) -> Dict:
    """Hand a task to a housekeeper of the same hotel, replacing any assignee."""
    if requester.role != RoleEnum.admin:
        raise AuthorizationError("Only admin can assign housekeeping tasks")

    task_id = parse_id(task_id, "task")
    staff_id = parse_id(staff_id, "staff")

    task = crud.get_task(db, task_id)
    if task is None:
        raise NotFoundError("Task not found")

    staff = crud.get_staff(db, staff_id)
    if staff is None:
        raise NotFoundError("Staff member not found")
    if staff.role != RoleEnum.housekeeping:
        raise ValidationError("Staff member must have housekeeping role")
    if staff.hotel_id != task.hotel_id:
        raise ValidationError("Cannot assign staff from a different hotel")

    task.assigned_to_id = staff.id
    task = crud.save_task(db, task)
    logger.info("Task %s assigned to staff %s", task_id, staff_id)
    return crud.s_task(task)


# ------------------------------------------------------------
# Scoped queries
# ------------------------------------------------------------
def get_tasks_by_date(db: Session, hotel_id, day, filters: Optional[Dict], requester: Requester) -> List[Dict]:
    filters = filters or {}
    task_date = parse_day(day) if day else date.today()
    query = {"date": task_date}

    if requester.role == RoleEnum.housekeeping:
        query["hotel_id"] = _home_hotel(requester)
        query["assigned_to_id"] = requester.id
    elif requester.role in (RoleEnum.admin, RoleEnum.receptionist):
        if hotel_id is not None and hotel_id != "":
            query["hotel_id"] = parse_id(hotel_id, "hotel")
        if filters.get("assignedTo") not in (None, ""):
            query["assigned_to_id"] = parse_id(filters["assignedTo"], "staff")
    else:
        raise AuthorizationError("Unauthorized to view housekeeping tasks")

    query["shift"] = _parse_choice(filters.get("shift"), ShiftEnum, "shift")
    query["status"] = _parse_choice(filters.get("status"), TaskStatusEnum, "status")

    return _sorted(crud.list_tasks(db, **query))


def get_my_tasks(db: Session, requester: Requester, filters: Optional[Dict] = None) -> List[Dict]:
    if requester.role != RoleEnum.housekeeping:
        raise AuthorizationError("This endpoint is only for housekeeping staff")

    filters = filters or {}
    query = {"hotel_id": _home_hotel(requester), "assigned_to_id": requester.id}

    if filters.get("date"):
        # an unparsable date drops the date constraint instead of failing
        try:
            query["date"] = parse_day(filters["date"])
        except ValidationError:
            logger.debug("Ignoring unparsable date filter %r", filters["date"])
    else:
        query["date"] = date.today()

    query["shift"] = _parse_choice(filters.get("shift"), ShiftEnum, "shift")
    query["status"] = _parse_choice(filters.get("status"), TaskStatusEnum, "status")

    return _sorted(crud.list_tasks(db, **query))
