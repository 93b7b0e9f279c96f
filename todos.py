import json
import logging
import threading
import time
from typing import Dict, List, Optional

from nanoid import generate
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)


class Todo(BaseModel):
    title: str = ""
    id: str = ""
    isDone: bool = False
    date: str = ""


class TodoPatch(BaseModel):
    """
    Request payload for create and update, decoded against the full item shape.
    Missing or null fields decode to their zero values, so an omitted isDone means False.
    Client supplied id and date are type checked but never stored.
    """
    model_config = ConfigDict(strict=True)

    title: str = ""
    id: str = ""
    isDone: bool = False
    date: str = ""

    @field_validator("title", "id", "date", mode="before")
    @classmethod
    def _null_str(cls, value):
        return "" if value is None else value

    @field_validator("isDone", mode="before")
    @classmethod
    def _null_bool(cls, value):
        return False if value is None else value


_TODO_MAP = TypeAdapter(Dict[str, Todo])
# A top-level JSON null body decodes to None and means an empty patch
_PAYLOAD = TypeAdapter(Optional[TodoPatch])


def decode_payload(body: bytes) -> TodoPatch:
    """Raises pydantic.ValidationError on malformed JSON or wrongly typed fields."""
    patch = _PAYLOAD.validate_json(body)
    return TodoPatch() if patch is None else patch


class StoreError(Exception):
    pass


class StoreLoadError(StoreError):
    pass


class PersistError(StoreError):
    pass


class TodoNotFound(StoreError):
    def __init__(self, todo_id: str):
        super().__init__(f"todo '{todo_id}' not found")
        self.todo_id = todo_id


def _now_ns() -> str:
    return str(time.time_ns())


def _new_id() -> str:
    try:
        return generate()
    except Exception as e:
        logger.warning("id generation failed, falling back to timestamp: %s", e)
        return _now_ns()


class TodoStore:
    """
    In-memory todo items backed by a single JSON file.

    One lock covers the whole read-modify-persist sequence of every operation.
    Each mutation truncates and rewrites the full file.
    """

    def __init__(self, path: str, items: Dict[str, Todo] | None = None):
        self.path = path
        self._items: Dict[str, Todo] = dict(items or {})
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: str) -> "TodoStore":
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise StoreLoadError(f"cannot read {path}: {e}") from e
        try:
            items = _TODO_MAP.validate_json(raw)
        except ValidationError as e:
            raise StoreLoadError(f"cannot decode {path}: {e}") from e
        logger.info("Loaded %d todos from %s", len(items), path)
        return cls(path, items)

    def list(self) -> List[Todo]:
        with self._lock:
            return [todo.model_copy() for todo in self._items.values()]

    def create(self, title: str) -> Todo:
        todo = Todo(title=title, id=_new_id(), isDone=False, date=_now_ns())
        with self._lock:
            self._items[todo.id] = todo
            self._persist()
            return todo.model_copy()

    def update(self, todo_id: str, patch: TodoPatch) -> Todo:
        with self._lock:
            todo = self._items.get(todo_id)
            if todo is None:
                raise TodoNotFound(todo_id)
            todo.isDone = patch.isDone
            if patch.title:
                todo.title = patch.title
            self._persist()
            return todo.model_copy()

    def delete(self, todo_id: str) -> Todo:
        with self._lock:
            todo = self._items.pop(todo_id, None)
            if todo is None:
                raise TodoNotFound(todo_id)
            self._persist()
            return todo

    def persist(self) -> None:
        with self._lock:
            self._persist()

    def _persist(self) -> None:
        # Caller holds the lock. No temp file: a crash mid-write can truncate the file.
        try:
            data = {todo_id: todo.model_dump() for todo_id, todo in self._items.items()}
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f)
                f.write("\n")
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to persist todos to %s: %s", self.path, e)
            raise PersistError(str(e)) from e
