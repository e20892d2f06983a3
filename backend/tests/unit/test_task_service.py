import pytest
from unittest.mock import Mock
from datetime import date
from app.errors import ValidationAppError
from app.services import task_service
from app.services.drag_drop import TaskUpdate


class FakeTaskRepository:
    def __init__(self):
        self.tasks = {}
        self.saved = 0

    def list(self, db):
        return list(self.tasks.values())

    def get(self, db, task_id):
        return self.tasks.get(task_id)

    def add(self, db, task):
        task.id = task.id or f"task-{len(self.tasks) + 1}"
        self.tasks[task.id] = task
        return task

    def save(self, db, task):
        self.saved += 1
        return task

    def delete(self, db, task):
        self.tasks.pop(task.id, None)

    def find_in_range(self, db, start, end):
        return [t for t in self.tasks.values() if t.start_date <= end and (t.end_date or t.start_date) >= start]


@pytest.fixture
def repo():
    return FakeTaskRepository()


def create(repo, **overrides):
    fields = dict(title="Standup", assignee="Jeremie", start_date=date(2024, 3, 4),
                  start_time="09:00", end_time="09:30")
    fields.update(overrides)
    return task_service.create_task(Mock(), repo=repo, **fields)


def test_create_task(repo):
    task = create(repo, color="bg-pink-500")
    assert task.id in repo.tasks
    assert task.color == "bg-pink-500"
    assert task_service.list_tasks(Mock(), repo=repo) == [task]


@pytest.mark.parametrize("overrides,code", [
    ({"title": "  "}, "TASK_TITLE_REQUIRED"),
    ({"assignee": ""}, "TASK_ASSIGNEE_REQUIRED"),
    ({"start_date": None}, "TASK_DATE_REQUIRED"),
    ({"end_date": date(2024, 3, 1)}, "TASK_INVALID_DATE_RANGE"),
    ({"start_time": "25:00"}, "TASK_INVALID_TIME"),
    ({"start_time": "10:00", "end_time": "09:00"}, "TASK_INVALID_TIME"),
    ({"start_time": None, "end_time": "09:00"}, "TASK_INVALID_TIME"),
])
def test_create_task_validation(repo, overrides, code):
    with pytest.raises(ValidationAppError) as exc:
        create(repo, **overrides)
    assert exc.value.code == code
    assert repo.tasks == {}


def test_multi_day_task_may_end_earlier_in_the_day(repo):
    task = create(repo, end_date=date(2024, 3, 6), start_time="22:00", end_time="06:00")
    assert task.end_date == date(2024, 3, 6)


def test_update_merges_changes(repo):
    task = create(repo)
    updated = task_service.update_task(Mock(), task.id, {"title": "Retro", "color": None}, repo=repo)
    assert updated.title == "Retro"
    assert updated.assignee == "Jeremie"
    assert updated.color == task.color
    assert repo.saved == 1


def test_update_rejects_invalid_merge(repo):
    task = create(repo)
    with pytest.raises(ValidationAppError):
        task_service.update_task(Mock(), task.id, {"end_time": "08:00"}, repo=repo)


def test_update_missing_task(repo):
    with pytest.raises(task_service.TaskNotFound):
        task_service.update_task(Mock(), "missing", {"title": "x"}, repo=repo)


def test_apply_task_update(repo):
    task = create(repo)
    update = TaskUpdate(task_id=task.id, assignee="Lizzie", start_time="10:00", end_time="10:30")
    applied = task_service.apply_task_update(Mock(), update, repo=repo)
    assert (applied.assignee, applied.start_time, applied.end_time) == ("Lizzie", "10:00", "10:30")
    assert repo.saved == 1


def test_apply_unchanged_update_is_noop(repo):
    task = create(repo)
    same = task_service.apply_task_update(Mock(), TaskUpdate(task_id=task.id, changed=False), repo=repo)
    assert same is task
    assert repo.saved == 0


def test_delete_task(repo):
    task = create(repo)
    assert task_service.delete_task(Mock(), task.id, repo=repo) is task
    assert repo.tasks == {}
    with pytest.raises(task_service.TaskNotFound):
        task_service.delete_task(Mock(), task.id, repo=repo)


def test_list_in_range_delegates_to_repository(repo):
    create(repo, start_date=date(2024, 3, 1), end_date=date(2024, 3, 10))
    create(repo, start_date=date(2024, 4, 1))
    found = task_service.list_tasks_in_range(Mock(), date(2024, 3, 5), date(2024, 3, 6), repo=repo)
    assert len(found) == 1


@pytest.mark.parametrize("raw", ["9:00", " 09:00 "])
def test_times_are_stored_canonical(repo, raw):
    task = create(repo, start_time=raw, end_time="9:30")
    assert (task.start_time, task.end_time) == ("09:00", "09:30")


def test_update_stores_canonical_times(repo):
    task = create(repo)
    updated = task_service.update_task(Mock(), task.id, {"start_time": "8:05"}, repo=repo)
    assert updated.start_time == "08:05"
