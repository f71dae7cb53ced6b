"""The task store: in-memory tasks plus the next-id counter."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from tasktracker.errors import EmptyStoreError, InvalidInputError, TaskNotFoundError
from tasktracker.models import Task, TaskStatus, parse_status

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())


@dataclass
class TaskStore:
    """All tasks of one tracker file.

    Ids come from ``next_id`` and are never reused: deleting a task leaves the
    counter where it is.
    """

    tasks: dict[int, Task] = field(default_factory=dict)
    next_id: int = 1
    clock: Clock = field(default=system_clock, compare=False, repr=False)

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.tasks

    def _require(self, task_id: int) -> Task:
        if not self.tasks:
            raise EmptyStoreError(task_id)
        try:
            return self.tasks[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id) from None

    def get_task(self, task_id: int) -> Task:
        return self._require(task_id)

    def add_task(self, description: str) -> int:
        """Create a new ``todo`` task and return its id."""
        text = _clean_description(description)

        now = self.clock()
        task = Task(id=self.next_id, description=text, created_at=now, updated_at=now)
        self.tasks[task.id] = task
        self.next_id += 1
        logger.debug("added task %d", task.id)
        return task.id

    def update_task(self, task_id: int, description: str) -> Task:
        task = self._require(task_id)
        text = _clean_description(description)

        task.description = text
        task.touch(self.clock())
        logger.debug("updated task %d", task_id)
        return task

    def mark_task(self, task_id: int, status: str | TaskStatus) -> Task:
        """Set a task's status. Any status may follow any other."""
        task = self._require(task_id)
        new_status = parse_status(status)

        task.status = new_status
        task.touch(self.clock())
        logger.debug("marked task %d as %s", task_id, new_status)
        return task

    def delete_task(self, task_id: int) -> Task:
        """Remove a task and return it. ``next_id`` is left untouched."""
        task = self._require(task_id)
        del self.tasks[task_id]
        logger.debug("deleted task %d", task_id)
        return task

    def list_tasks(self, status_filter: str | TaskStatus | None = None) -> list[Task]:
        """Return tasks ordered by id, optionally only those with one status.

        A blank filter means no filter. Raises EmptyStoreError when there is
        nothing to list.
        """
        if not self.tasks:
            raise EmptyStoreError()

        ordered = [self.tasks[tid] for tid in sorted(self.tasks)]
        if status_filter is None or not str(status_filter).strip():
            return ordered

        wanted = parse_status(status_filter)
        return [t for t in ordered if t.status == wanted]

    def to_dict(self) -> dict:
        return {
            "tasks": {str(tid): t.to_dict() for tid, t in self.tasks.items()},
            "nextID": self.next_id,
        }

    @classmethod
    def from_dict(cls, d: dict, clock: Clock = system_clock) -> TaskStore:
        """Rebuild a store from its snapshot, checking every invariant.

        Raises ValueError (or KeyError/TypeError for a malformed shape) when
        the document could not have been written by ``to_dict``.
        """
        if not isinstance(d, dict):
            raise TypeError("top level must be an object")
        next_id = d["nextID"]
        if not _is_int(next_id) or next_id < 1:
            raise ValueError(f"nextID must be a positive integer, got {next_id!r}")
        raw_tasks = d["tasks"]
        if not isinstance(raw_tasks, dict):
            raise TypeError("'tasks' must be an object")

        tasks: dict[int, Task] = {}
        for key, tdata in raw_tasks.items():
            if not isinstance(tdata, dict):
                raise TypeError(f"task {key} must be an object")
            task = Task.from_dict(tdata)
            if not _is_int(task.id) or task.id < 1:
                raise ValueError(f"task {key} has invalid id {task.id!r}")
            if key != str(task.id):
                raise ValueError(f"task key {key} does not match id {task.id}")
            if task.id >= next_id:
                raise ValueError(f"task {task.id} is not below nextID {next_id}")
            if not isinstance(task.description, str) or not task.description.strip():
                raise ValueError(f"task {task.id} has an empty description")
            if not (_is_int(task.created_at) and _is_int(task.updated_at)):
                raise ValueError(f"task {task.id} has non-integer timestamps")
            if task.updated_at < task.created_at:
                raise ValueError(f"task {task.id} was updated before it was created")
            tasks[task.id] = task

        return cls(tasks=tasks, next_id=next_id, clock=clock)


def _clean_description(description: str) -> str:
    text = description.strip()
    if not text:
        raise InvalidInputError()
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidInputError("Task description must be valid UTF-8 text") from None
    return text


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
