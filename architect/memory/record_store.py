from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from architect.core.exceptions import ValidationError
from architect.utils.logging import get_logger
from architect.utils.schemas import OperationResult, ProjectRecord

LOGGER = get_logger(__name__)

DEFAULT_QUERY_LIMIT = 10
MAX_QUERY_LIMIT = 100

INSERT_PROJECT_SQL = "INSERT INTO projects (name, idea, code, stack, timestamp) VALUES (?, ?, ?, ?, ?)"
SELECT_PROJECTS_SQL = "SELECT * FROM projects ORDER BY timestamp DESC LIMIT ?"

RecordInput = Union[ProjectRecord, Mapping[str, Any]]


class RecordStore(ABC):
    """Remote structured store holding one row per completed project."""

    @abstractmethod
    async def insert_project(self, record: RecordInput) -> OperationResult:
        ...

    @abstractmethod
    async def list_projects(self, limit: Any = DEFAULT_QUERY_LIMIT) -> List[ProjectRecord]:
        ...

    async def aclose(self) -> None:
        return None


def clamp_limit(limit: Any) -> int:
    """Coerce ``limit`` to an int in [1, MAX_QUERY_LIMIT]; unusable input means the default."""
    if limit is None or isinstance(limit, bool):
        return DEFAULT_QUERY_LIMIT
    try:
        value = int(limit)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_QUERY_LIMIT
    return min(max(1, value), MAX_QUERY_LIMIT)


def coerce_record(record: RecordInput) -> ProjectRecord:
    """Validate the caller's record; the name is mandatory, other text defaults to ''."""
    if isinstance(record, ProjectRecord):
        data = record.model_dump(by_alias=True)
    elif isinstance(record, Mapping):
        data = dict(record)
    else:
        raise ValidationError("Invalid project: must be a ProjectRecord or a mapping")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Invalid project name: must be a non-empty string")

    cleaned = {key: ("" if value is None else value) for key, value in data.items() if key != "timestamp"}
    cleaned["name"] = name.strip()
    try:
        return ProjectRecord.model_validate(cleaned)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid project: {exc}") from exc


def insert_params(record: ProjectRecord, timestamp_ms: int) -> list:
    """Positional parameters for INSERT_PROJECT_SQL, in column order."""
    return [record.name, record.idea, record.code, record.stack, timestamp_ms]


def now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryRecordStore(RecordStore):
    """Process-local store with the same contract, for dry runs and tests."""

    def __init__(self) -> None:
        self.rows: List[ProjectRecord] = []
        self._lock = asyncio.Lock()

    async def insert_project(self, record: RecordInput) -> OperationResult:
        project = coerce_record(record)
        async with self._lock:
            stored = project.model_copy(update={"timestamp": now_ms()})
            self.rows.append(stored)
            LOGGER.info("Stored project %r in memory (%d rows)", stored.name, len(self.rows))
            return OperationResult(success=True, meta={"changes": 1, "last_row_id": len(self.rows)})

    async def list_projects(self, limit: Any = DEFAULT_QUERY_LIMIT) -> List[ProjectRecord]:
        valid_limit = clamp_limit(limit)
        async with self._lock:
            # Newest first; ties keep reverse insertion order
            ordered = list(reversed(self.rows))
        ordered.sort(key=lambda row: row.timestamp or 0, reverse=True)
        return ordered[:valid_limit]
