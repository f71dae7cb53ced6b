import copy

import pytest

from tasktracker.errors import (
    EmptyStoreError,
    ErrorKind,
    InvalidInputError,
    InvalidStatusError,
    TaskNotFoundError,
)
from tasktracker.models import TaskStatus
from tasktracker.store import TaskStore


class FakeClock:
    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock=clock)


def test_add_assigns_sequential_ids(store):
    ids = [store.add_task(f"task {n}") for n in range(1, 6)]
    assert ids == [1, 2, 3, 4, 5]
    assert store.next_id == 6


def test_add_creates_todo_task_with_equal_timestamps(store, clock):
    tid = store.add_task("  buy milk  ")
    task = store.tasks[tid]
    assert task.description == "buy milk"
    assert task.status == TaskStatus.TODO
    assert task.created_at == task.updated_at == clock.now


@pytest.mark.parametrize("description", ["", "   ", "\t\n"])
def test_add_rejects_empty_description(store, description):
    store.add_task("keep me")
    before = copy.deepcopy(store)

    with pytest.raises(InvalidInputError) as excinfo:
        store.add_task(description)

    assert excinfo.value.kind == ErrorKind.INVALID_INPUT
    assert store == before
    assert store.next_id == 2


def test_deleted_ids_are_never_reused(store):
    store.add_task("one")
    store.add_task("two")
    store.delete_task(2)
    store.delete_task(1)
    assert store.next_id == 3
    assert store.add_task("three") == 3


def test_delete_returns_removed_task(store):
    store.add_task("task 1")
    removed = store.delete_task(1)
    assert removed.description == "task 1"
    assert 1 not in store
    assert len(store) == 0


def test_delete_missing_id(store):
    store.add_task("task 1")
    with pytest.raises(TaskNotFoundError) as excinfo:
        store.delete_task(4)
    assert excinfo.value.kind == ErrorKind.NOT_FOUND
    assert len(store) == 1


def test_update_replaces_description_and_refreshes_updated_at(store, clock):
    store.add_task("Task 1")
    clock.advance(30)
    task = store.update_task(1, "  something else ")
    assert task.description == "something else"
    assert task.updated_at == task.created_at + 30


def test_update_missing_id(store):
    store.add_task("Task 1")
    with pytest.raises(TaskNotFoundError) as excinfo:
        store.update_task(2, "x")
    assert not isinstance(excinfo.value, EmptyStoreError)


def test_update_on_empty_store(store):
    with pytest.raises(EmptyStoreError) as excinfo:
        store.update_task(1, "x")
    assert excinfo.value.kind == ErrorKind.EMPTY_STORE
    # an empty store is also a miss for callers that only handle not-found
    assert isinstance(excinfo.value, TaskNotFoundError)


def test_add_rejects_unencodable_description(store):
    with pytest.raises(InvalidInputError) as excinfo:
        store.add_task("caf\udce9")
    assert "UTF-8" in str(excinfo.value)
    assert len(store) == 0
    assert store.next_id == 1


def test_update_rejects_unencodable_description(store):
    store.add_task("cafe")
    with pytest.raises(InvalidInputError):
        store.update_task(1, "caf\udce9")
    assert store.tasks[1].description == "cafe"


def test_update_rejects_empty_description(store, clock):
    store.add_task("Task 1")
    clock.advance()
    with pytest.raises(InvalidInputError):
        store.update_task(1, "   ")
    task = store.tasks[1]
    assert task.description == "Task 1"
    assert task.updated_at == task.created_at


def test_mark_any_status_to_any_other(store, clock):
    store.add_task("Task 1")
    for status in ["done", "todo", "in-progress", "todo", "done", "in-progress"]:
        clock.advance()
        task = store.mark_task(1, status)
        assert task.status == TaskStatus(status)
        assert task.updated_at == clock.now


def test_mark_accepts_enum_and_padded_strings(store):
    store.add_task("Task 1")
    assert store.mark_task(1, TaskStatus.DONE).status is TaskStatus.DONE
    assert store.mark_task(1, " in-progress ").status is TaskStatus.IN_PROGRESS


def test_mark_invalid_status_leaves_task_unchanged(store, clock):
    store.add_task("Task 1")
    clock.advance()
    with pytest.raises(InvalidStatusError):
        store.mark_task(1, "bogus")
    task = store.tasks[1]
    assert task.status == TaskStatus.TODO
    assert task.updated_at == task.created_at


def test_mark_missing_id(store):
    store.add_task("Task 1")
    with pytest.raises(TaskNotFoundError):
        store.mark_task(9, "done")


def test_list_empty_store(store):
    with pytest.raises(EmptyStoreError):
        store.list_tasks()
    with pytest.raises(EmptyStoreError):
        store.list_tasks("done")


def test_list_without_filter_returns_all_in_id_order(store):
    for n in range(1, 4):
        store.add_task(f"task {n}")
    store.delete_task(2)
    store.add_task("task 4")

    assert [t.id for t in store.list_tasks()] == [1, 3, 4]
    assert [t.id for t in store.list_tasks("")] == [1, 3, 4]
    assert [t.id for t in store.list_tasks("   ")] == [1, 3, 4]


def test_list_filters_by_status(store):
    for n in range(1, 6):
        store.add_task(f"task {n}")
    store.mark_task(2, "done")
    store.mark_task(4, "done")
    store.mark_task(5, "in-progress")

    done = store.list_tasks("done")
    assert [t.id for t in done] == [2, 4]
    assert all(t.status == TaskStatus.DONE for t in done)
    assert [t.id for t in store.list_tasks("todo")] == [1, 3]
    assert [t.id for t in store.list_tasks(TaskStatus.IN_PROGRESS)] == [5]


def test_list_rejects_invalid_filter(store):
    store.add_task("task 1")
    with pytest.raises(InvalidStatusError):
        store.list_tasks("finished")


def test_list_returns_a_snapshot(store):
    store.add_task("task 1")
    listed = store.list_tasks()
    store.add_task("task 2")
    assert [t.id for t in listed] == [1]
    assert listed == store.list_tasks()[:1]


def test_get_task(store):
    with pytest.raises(EmptyStoreError):
        store.get_task(1)
    store.add_task("task 1")
    assert store.get_task(1).description == "task 1"
    with pytest.raises(TaskNotFoundError):
        store.get_task(2)


def test_full_lifecycle(store, clock):
    assert store.add_task("buy milk") == 1
    task = store.tasks[1]
    assert task.status == TaskStatus.TODO

    clock.advance()
    store.mark_task(1, "in-progress")
    assert task.status == TaskStatus.IN_PROGRESS
    first_update = task.updated_at
    assert first_update > task.created_at

    clock.advance()
    store.update_task(1, "buy oat milk")
    assert task.description == "buy oat milk"
    assert task.updated_at > first_update

    store.delete_task(1)
    assert len(store) == 0
    for status_filter in [None, "todo", "done"]:
        with pytest.raises(EmptyStoreError):
            store.list_tasks(status_filter)

    assert store.add_task("second") == 2


def test_equality_ignores_clock():
    a = TaskStore(clock=lambda: 1)
    b = TaskStore(clock=lambda: 2)
    assert a == b
