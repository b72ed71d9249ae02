"""Tests for daily roster generation."""

from datetime import date, datetime

import pytest

import crud
import roster
from errors import AuthorizationError, NotFoundError, ValidationError
from models import PriorityEnum, RoleEnum, ShiftEnum, Task, TaskStatusEnum, TaskTypeEnum

from helpers import as_requester, room_by_number, tasks_in_creation_order


def test_round_robin_over_rooms_and_shifts(db_session, hotel, housekeepers, admin):
    """Rooms [101, 102] and staff [S1, S2] alternate across the whole batch."""
    s1, s2 = (s.id for s in housekeepers)

    result = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", as_requester(admin))

    assert result["tasksCreated"] == 6
    assert result["tasksSkipped"] == 0
    assert result["date"] == "2024-01-01"
    assert result["details"]["created"] == [
        {"room": "101", "shift": "morning", "assignedTo": s1},
        {"room": "101", "shift": "afternoon", "assignedTo": s2},
        {"room": "101", "shift": "night", "assignedTo": s1},
        {"room": "102", "shift": "morning", "assignedTo": s2},
        {"room": "102", "shift": "afternoon", "assignedTo": s1},
        {"room": "102", "shift": "night", "assignedTo": s2},
    ]

    tasks = tasks_in_creation_order(db_session)
    assert [t.assigned_to_id for t in tasks] == [s1, s2, s1, s2, s1, s2]
    for t in tasks:
        assert t.date == date(2024, 1, 1)
        assert t.status == TaskStatusEnum.pending
        assert t.priority == PriorityEnum.normal
        assert t.task_type == TaskTypeEnum.routine


def test_counter_spans_rooms_with_three_staff(db_session, make_hotel, make_staff, admin):
    h = make_hotel("HMS-010", ["1", "2", "3", "4"])
    staff = [make_staff(f"K{i}", h).id for i in range(3)]

    roster.generate_daily_tasks(db_session, h.id, "2024-03-05", as_requester(admin))

    tasks = tasks_in_creation_order(db_session)
    assert len(tasks) == 12
    assert [t.assigned_to_id for t in tasks] == [staff[k % 3] for k in range(12)]


def test_second_call_skips_everything(db_session, hotel, housekeepers, admin):
    requester = as_requester(admin)
    roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", requester)

    again = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", requester)

    assert again["tasksCreated"] == 0
    assert again["tasksSkipped"] == 6
    assert {s["reason"] for s in again["details"]["skipped"]} == {"Task already exists"}
    assert db_session.query(Task).count() == 6


def test_partial_existing_roster_counts_only_created(db_session, hotel, housekeepers, admin):
    """Pre-existing tasks are skipped and do not advance the assignment index."""
    s1, s2 = (s.id for s in housekeepers)
    room = room_by_number(db_session, hotel, "101")
    db_session.add(Task(hotel_id=hotel.id, room_id=room.id, date=date(2024, 1, 1), shift=ShiftEnum.morning))
    db_session.commit()

    result = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", as_requester(admin))

    assert result["tasksCreated"] == 5
    assert result["tasksSkipped"] == 1
    assert result["details"]["skipped"] == [{"room": "101", "shift": "morning", "reason": "Task already exists"}]
    assert [c["assignedTo"] for c in result["details"]["created"]] == [s1, s2, s1, s2, s1]


def test_checkout_task_does_not_block_routine_task(db_session, hotel, housekeepers, admin):
    room = room_by_number(db_session, hotel, "101")
    db_session.add(Task(
        hotel_id=hotel.id, room_id=room.id, date=date(2024, 1, 1), shift=ShiftEnum.morning,
        priority=PriorityEnum.high, task_type=TaskTypeEnum.checkout_cleaning,
    ))
    db_session.commit()

    result = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", as_requester(admin))

    assert result["tasksCreated"] == 6
    assert db_session.query(Task).count() == 7


def test_without_staff_tasks_are_unassigned(db_session, hotel, admin):
    result = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", as_requester(admin))

    assert result["tasksCreated"] == 6
    assert all(c["assignedTo"] is None for c in result["details"]["created"])
    assert all(t.assigned_to_id is None for t in tasks_in_creation_order(db_session))


def test_only_active_rooms_and_housekeepers_take_part(db_session, make_hotel, make_staff, admin):
    h = make_hotel("HMS-011", ["1"], inactive_rooms=["2"])
    active = make_staff("Active", h)
    make_staff("Retired", h, is_active=False)
    make_staff("Desk", h, role=RoleEnum.receptionist)

    result = roster.generate_daily_tasks(db_session, h.id, "2024-01-01", as_requester(admin))

    assert result["tasksCreated"] == 3
    assert {c["room"] for c in result["details"]["created"]} == {"1"}
    assert {c["assignedTo"] for c in result["details"]["created"]} == {active.id}


def test_datetime_input_is_normalized_to_its_day(db_session, hotel, housekeepers, admin):
    requester = as_requester(admin)
    first = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01T17:45:00", requester)
    second = roster.generate_daily_tasks(db_session, hotel.id, datetime(2024, 1, 1, 8, 30), requester)

    assert first["date"] == "2024-01-01"
    assert second["tasksCreated"] == 0
    assert second["tasksSkipped"] == 6


def test_concurrent_duplicate_is_recorded_as_skip(db_session, hotel, housekeepers, admin, monkeypatch):
    """A rival insert landing between the existence check and the insert is benign."""
    s1, s2 = (s.id for s in housekeepers)
    real_find = crud.find_routine_task
    raced = []

    def racing_find(db, hotel_id, room_id, day, shift):
        if not raced:
            raced.append((room_id, shift))
            db.add(Task(hotel_id=hotel_id, room_id=room_id, date=day, shift=shift))
            db.commit()
            return None
        return real_find(db, hotel_id, room_id, day, shift)

    monkeypatch.setattr(crud, "find_routine_task", racing_find)

    result = roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", as_requester(admin))

    assert result["tasksCreated"] == 5
    assert result["tasksSkipped"] == 1
    assert result["details"]["skipped"] == [{"room": "101", "shift": "morning", "reason": "Duplicate task"}]
    assert [c["assignedTo"] for c in result["details"]["created"]] == [s1, s2, s1, s2, s1]
    assert db_session.query(Task).count() == 6


def test_other_insert_failure_aborts_batch_and_keeps_earlier_tasks(db_session, hotel, housekeepers, admin, monkeypatch):
    real_insert = crud.insert_task
    calls = []

    def failing_insert(db, **fields):
        calls.append(fields["shift"])
        if len(calls) == 3:
            raise RuntimeError("storage unavailable")
        return real_insert(db, **fields)

    monkeypatch.setattr(crud, "insert_task", failing_insert)

    with pytest.raises(RuntimeError, match="storage unavailable"):
        roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", as_requester(admin))

    assert len(calls) == 3
    assert db_session.query(Task).count() == 2


@pytest.mark.parametrize("role", [RoleEnum.receptionist, RoleEnum.housekeeping, RoleEnum.guest])
def test_only_admin_can_generate(db_session, hotel, make_staff, role):
    requester = as_requester(make_staff("Someone", hotel, role=role))

    with pytest.raises(AuthorizationError):
        roster.generate_daily_tasks(db_session, hotel.id, "2024-01-01", requester)
    assert db_session.query(Task).count() == 0


@pytest.mark.parametrize("hotel_id", ["abc", "-1", 0, None, "", True, "9" * 25, 2**63])
def test_malformed_hotel_id(db_session, admin, hotel_id):
    with pytest.raises(ValidationError, match="Invalid hotel ID"):
        roster.generate_daily_tasks(db_session, hotel_id, "2024-01-01", as_requester(admin))


@pytest.mark.parametrize("day", ["not-a-date", "2024-02-30", "", None])
def test_unparsable_date(db_session, hotel, admin, day):
    with pytest.raises(ValidationError, match="Invalid date format"):
        roster.generate_daily_tasks(db_session, hotel.id, day, as_requester(admin))


def test_hotel_without_active_rooms(db_session, make_hotel, admin):
    h = make_hotel("HMS-012", [], inactive_rooms=["9"])

    with pytest.raises(NotFoundError, match="No active rooms"):
        roster.generate_daily_tasks(db_session, h.id, "2024-01-01", as_requester(admin))


def test_unknown_hotel(db_session, admin):
    with pytest.raises(NotFoundError, match="Hotel not found"):
        roster.generate_daily_tasks(db_session, 999, "2024-01-01", as_requester(admin))


def test_generate_for_all_hotels(db_session, make_hotel, make_staff):
    busy = make_hotel("HMS-020", ["1", "2"])
    make_hotel("HMS-021", [])
    make_staff("Solo", busy)

    results = roster.generate_for_all_hotels(db_session, "2024-06-01")

    by_code = {r["code"]: r for r in results}
    assert by_code["HMS-020"]["success"] is True
    assert by_code["HMS-020"]["tasksCreated"] == 6
    assert by_code["HMS-021"]["success"] is False
    assert "No active rooms" in by_code["HMS-021"]["error"]
    assert {t.date for t in db_session.query(Task)} == {date(2024, 6, 1)}
