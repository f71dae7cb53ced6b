"""JSON file persistence for the task store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from tasktracker.errors import CorruptStoreError, InvalidStatusError, PersistenceError
from tasktracker.store import Clock, TaskStore, system_clock

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Reads and writes the whole task store as one JSON document."""

    def __init__(self, path: str | Path, clock: Clock = system_clock):
        self.path = Path(path)
        self.clock = clock

    def load(self) -> TaskStore:
        """Return the stored tasks, creating an empty file on first use.

        A file that exists but cannot be decoded raises CorruptStoreError and
        is left exactly as it was.
        """
        try:
            with self.path.open("rb") as f:
                data = f.read()
        except FileNotFoundError:
            store = TaskStore(clock=self.clock)
            self.save(store)
            logger.info("created %s", self.path)
            return store
        except OSError as exc:
            raise PersistenceError(self.path, exc.strerror or str(exc)) from exc

        try:
            raw = json.loads(data.decode("utf-8"))
            store = TaskStore.from_dict(raw, clock=self.clock)
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
            logger.error("cannot parse %s: %s", self.path, exc)
            raise CorruptStoreError(self.path, str(exc)) from exc
        except KeyError as exc:
            logger.error("missing field in %s: %s", self.path, exc)
            raise CorruptStoreError(self.path, f"missing field {exc}") from exc
        except (TypeError, ValueError, InvalidStatusError) as exc:
            logger.error("inconsistent data in %s: %s", self.path, exc)
            raise CorruptStoreError(self.path, str(exc)) from exc

        logger.debug("loaded %d tasks from %s", len(store), self.path)
        return store

    def save(self, store: TaskStore) -> None:
        """Replace the file with a snapshot of ``store``.

        The snapshot goes to a temporary file next to the target and is then
        renamed over it, so readers see either the old or the new document.
        """
        try:
            payload = json.dumps(store.to_dict(), indent=4, ensure_ascii=False).encode("utf-8")
        except UnicodeEncodeError as exc:
            raise PersistenceError(self.path, f"task text is not valid UTF-8: {exc.reason}") from exc

        tmp_name: str | None = None
        replaced = False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            replaced = True
        except OSError as exc:
            raise PersistenceError(self.path, exc.strerror or str(exc)) from exc
        finally:
            if tmp_name is not None and not replaced:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug("saved %d tasks to %s", len(store), self.path)
