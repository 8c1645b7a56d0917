from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest

from app.core.exceptions import NotFoundError
from app.models.task import Task, TaskStatus, TaskPriority
from app.schemas.task import TaskUpdate
from app.schemas.user import UserCreate
from app.services.tasks import TaskService


@pytest.fixture
def task_service(db):
    return TaskService(db)


def make_task(task_service, owner, title="Task", **fields):
    return task_service.create(Task(title=title, user=owner, **fields))


def days_from_now(days):
    return datetime.now() + timedelta(days=days)


def test_create_task_defaults(task_service, owner):
    task = make_task(task_service, owner, title="Write docs")

    assert task.id is not None
    assert task.user_id == owner.id
    assert task.status == TaskStatus.PENDING
    assert task.priority == TaskPriority.MEDIUM
    assert task.created_at is not None
    assert task.created_at == task.updated_at
    assert task.completed_at is None


def test_get_by_id_miss(task_service):
    assert task_service.get_by_id(999) is None


def test_list_filters(task_service, owner, user_service):
    other = user_service.create(UserCreate(username="other", email="other@example.com", password="x"))
    make_task(task_service, owner, title="a", status=TaskStatus.IN_PROGRESS, priority=TaskPriority.LOW)
    make_task(task_service, owner, title="b", priority=TaskPriority.HIGH)
    make_task(task_service, other, title="c", status=TaskStatus.IN_PROGRESS)

    assert [t.title for t in task_service.list_by_user(owner)] == ["a", "b"]
    assert [t.title for t in task_service.list_by_user_and_status(owner, TaskStatus.IN_PROGRESS)] == ["a"]
    assert [t.title for t in task_service.list_by_user_and_priority(owner, TaskPriority.HIGH)] == ["b"]


def test_update_copies_fields(task_service, owner):
    task = make_task(task_service, owner)
    due = days_from_now(3).replace(microsecond=0)

    updated = task_service.update(task.id, TaskUpdate(
        title="Renamed",
        description="More detail",
        priority=TaskPriority.URGENT,
        due_date=due,
        status=TaskStatus.IN_PROGRESS,
    ))

    assert updated.title == "Renamed"
    assert updated.description == "More detail"
    assert updated.priority == TaskPriority.URGENT
    assert updated.due_date == due
    assert updated.status == TaskStatus.IN_PROGRESS
    assert updated.completed_at is None


def test_update_without_status_keeps_stored_status(task_service, owner):
    task = make_task(task_service, owner, status=TaskStatus.IN_PROGRESS)

    updated = task_service.update(task.id, TaskUpdate(title="Still going"))

    assert updated.status == TaskStatus.IN_PROGRESS


def test_update_missing_task(task_service):
    with pytest.raises(NotFoundError, match="Task not found with ID: 999"):
        task_service.update(999, TaskUpdate(title="nope"))


def test_completed_at_full_update_vs_status_update(task_service, owner, db):
    task = make_task(task_service, owner)

    task_service.update(task.id, TaskUpdate(title="Task", status=TaskStatus.COMPLETED))
    assert task.completed_at is not None

    # Already COMPLETED: the full update path leaves completed_at alone
    sentinel = datetime(2020, 1, 1, 12, 0)
    task.completed_at = sentinel
    db.commit()
    task_service.update(task.id, TaskUpdate(title="Task", status=TaskStatus.COMPLETED))
    assert task.completed_at == sentinel

    # ...while the status path always re-stamps it
    task_service.update_status(task.id, TaskStatus.COMPLETED)
    assert task.completed_at > sentinel


def test_moving_away_from_completed_keeps_completed_at(task_service, owner):
    task = make_task(task_service, owner)
    task_service.update_status(task.id, TaskStatus.COMPLETED)
    stamped = task.completed_at

    task_service.update_status(task.id, TaskStatus.IN_PROGRESS)
    assert task.completed_at == stamped

    task_service.update(task.id, TaskUpdate(title="Task", status=TaskStatus.PENDING))
    assert task.completed_at == stamped


def test_update_status_stamps_updated_at(task_service, owner, db):
    task = make_task(task_service, owner)
    long_ago = datetime(2000, 1, 1)
    task.updated_at = long_ago
    db.commit()

    task_service.update_status(task.id, TaskStatus.CANCELLED)

    assert task.status == TaskStatus.CANCELLED
    assert task.updated_at > long_ago
    assert task.completed_at is None


def test_update_status_missing_task(task_service):
    with pytest.raises(NotFoundError, match="Task not found with ID: 5"):
        task_service.update_status(5, TaskStatus.COMPLETED)


def test_delete_task(task_service, owner):
    task = make_task(task_service, owner)
    task_id = task.id

    task_service.delete(task_id)

    assert task_service.get_by_id(task_id) is None


def test_delete_missing_task_never_touches_store(task_service, db):
    with patch.object(db, "delete") as delete:
        with pytest.raises(NotFoundError, match="Task not found with ID: 999"):
            task_service.delete(999)

    delete.assert_not_called()


def test_statistics(task_service, owner):
    counts = {
        TaskStatus.PENDING: 2,
        TaskStatus.IN_PROGRESS: 1,
        TaskStatus.COMPLETED: 3,
        TaskStatus.CANCELLED: 1,
    }
    for status, n in counts.items():
        for i in range(n):
            make_task(task_service, owner, title=f"{status.value}-{i}", status=status)

    stats = task_service.statistics(owner)

    assert stats.total == 7
    assert stats.pending == 2
    assert stats.in_progress == 1
    assert stats.completed == 3
    assert stats.cancelled == 1


def test_overdue_includes_cancelled_but_not_completed(task_service, owner):
    make_task(task_service, owner, title="late", due_date=days_from_now(-2))
    make_task(task_service, owner, title="late-cancelled", due_date=days_from_now(-1),
              status=TaskStatus.CANCELLED)
    make_task(task_service, owner, title="late-done", due_date=days_from_now(-3),
              status=TaskStatus.COMPLETED)
    make_task(task_service, owner, title="future", due_date=days_from_now(5))
    make_task(task_service, owner, title="undated")

    titles = [t.title for t in task_service.list_overdue(owner)]

    assert titles == ["late", "late-cancelled"]


def test_due_soon_window(task_service, owner):
    make_task(task_service, owner, title="tomorrow", due_date=days_from_now(1))
    make_task(task_service, owner, title="in-two-days", due_date=days_from_now(2),
              status=TaskStatus.CANCELLED)
    make_task(task_service, owner, title="done-tomorrow", due_date=days_from_now(1),
              status=TaskStatus.COMPLETED)
    make_task(task_service, owner, title="next-week", due_date=days_from_now(8))
    make_task(task_service, owner, title="yesterday", due_date=days_from_now(-1))

    titles = [t.title for t in task_service.list_due_soon(owner, 3)]

    assert titles == ["tomorrow", "in-two-days"]


def test_due_soon_window_past_calendar_end(task_service, owner):
    make_task(task_service, owner, title="far", due_date=days_from_now(365 * 50))

    assert [t.title for t in task_service.list_due_soon(owner, 3_000_000)] == ["far"]


def test_high_priority_pending_ordering(task_service, owner):
    make_task(task_service, owner, title="high-soon", priority=TaskPriority.HIGH, due_date=days_from_now(1))
    make_task(task_service, owner, title="urgent-later", priority=TaskPriority.URGENT, due_date=days_from_now(5))
    make_task(task_service, owner, title="urgent-sooner", priority=TaskPriority.URGENT, due_date=days_from_now(2))
    make_task(task_service, owner, title="low", priority=TaskPriority.LOW, due_date=days_from_now(1))
    make_task(task_service, owner, title="high-started", priority=TaskPriority.HIGH,
              status=TaskStatus.IN_PROGRESS)

    titles = [t.title for t in task_service.list_high_priority_pending(owner)]

    assert titles == ["urgent-sooner", "urgent-later", "high-soon"]


def test_completed_in_range(task_service, owner, db):
    inside = make_task(task_service, owner, title="inside")
    outside = make_task(task_service, owner, title="outside")
    reopened = make_task(task_service, owner, title="reopened")
    for task in (inside, outside, reopened):
        task_service.update_status(task.id, TaskStatus.COMPLETED)

    inside.completed_at = datetime(2024, 3, 10, 9, 0)
    outside.completed_at = datetime(2024, 4, 2, 9, 0)
    reopened.completed_at = datetime(2024, 3, 12, 9, 0)
    db.commit()
    task_service.update_status(reopened.id, TaskStatus.IN_PROGRESS)

    found = task_service.list_completed_in_range(owner, datetime(2024, 3, 1), datetime(2024, 3, 31))

    assert [t.title for t in found] == ["inside"]


def test_user_summaries(task_service, owner, user_service):
    idle = user_service.create(UserCreate(username="idle", email="idle@example.com", password="x"))
    gone = user_service.create(UserCreate(username="gone", email="gone@example.com", password="x"))
    user_service.deactivate(gone.id)

    make_task(task_service, owner, title="late", due_date=days_from_now(-1))
    make_task(task_service, owner, title="late-cancelled", due_date=days_from_now(-1),
              status=TaskStatus.CANCELLED)
    make_task(task_service, owner, title="busy", status=TaskStatus.IN_PROGRESS)
    make_task(task_service, owner, title="done", status=TaskStatus.COMPLETED)

    summaries = {s.username: s for s in task_service.user_summaries()}

    assert set(summaries) == {"owner", "idle"}
    mine = summaries["owner"]
    assert mine.total_tasks == 4
    assert mine.pending_tasks == 1
    assert mine.in_progress_tasks == 1
    assert mine.completed_tasks == 1
    assert mine.cancelled_tasks == 1
    assert mine.overdue_tasks == 1
    assert summaries["idle"].total_tasks == 0
    assert summaries["idle"].id == idle.id


def test_deleting_owner_cascades_to_tasks(task_service, owner, db):
    make_task(task_service, owner, title="a")
    make_task(task_service, owner, title="b")

    db.delete(owner)
    db.commit()

    assert db.query(Task).count() == 0


def test_daily_statistics(task_service, owner, db):
    make_task(task_service, owner, title="new")
    make_task(task_service, owner, title="done", status=TaskStatus.COMPLETED)
    earlier = make_task(task_service, owner, title="earlier", status=TaskStatus.CANCELLED)
    earlier.created_at = datetime.now() - timedelta(days=2)
    old = make_task(task_service, owner, title="old")
    old.created_at = datetime.now() - timedelta(days=40)
    db.commit()

    rows = task_service.daily_statistics()

    today = date.today()
    assert [
        (r.day, r.total_created, r.pending, r.in_progress, r.completed, r.cancelled) for r in rows
    ] == [
        (today, 2, 1, 0, 1, 0),
        (today - timedelta(days=2), 1, 0, 0, 0, 1),
    ]


def test_daily_statistics_window(task_service, owner, db):
    task = make_task(task_service, owner)
    task.created_at = datetime.now() - timedelta(days=10)
    db.commit()

    assert task_service.daily_statistics(days=5) == []
    assert [r.total_created for r in task_service.daily_statistics(days=15)] == [1]
