from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from architect.core.exceptions import StoreError, ValidationError
from architect.utils.logging import get_logger
from architect.utils.schemas import OperationResult, ProjectRecord

from .record_store import (
    DEFAULT_QUERY_LIMIT,
    INSERT_PROJECT_SQL,
    SELECT_PROJECTS_SQL,
    RecordInput,
    RecordStore,
    clamp_limit,
    coerce_record,
    insert_params,
    now_ms,
)

LOGGER = get_logger(__name__)

REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_API_BASE = "https://api.cloudflare.com/client/v4"


class D1RecordStore(RecordStore):
    """
    Cloudflare D1 over its HTTP query API.

    Every statement is sent as ``{"sql": ..., "params": [...]}`` with ``?``
    placeholders; caller values only ever travel in ``params``.
    """

    def __init__(
        self,
        account_id: str,
        api_token: str,
        database_id: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_id = _require("accountId", account_id)
        self.api_token = _require("apiToken", api_token)
        self.database_id = _require("databaseId", database_id)
        self.timeout = timeout
        self.base_url = (
            f"{api_base.rstrip('/')}/accounts/{self.account_id}/d1/database/{self.database_id}"
        )
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def query(self, sql: str, params: Sequence[Any] = ()) -> OperationResult:
        if not isinstance(sql, str) or not sql.strip():
            raise ValidationError("Invalid SQL query: must be a non-empty string")
        if isinstance(params, (str, bytes)) or not isinstance(params, (list, tuple)):
            raise ValidationError("Invalid params: must be a list")

        try:
            response = await self._client.post(
                f"{self.base_url}/query",
                json={"sql": sql.strip(), "params": list(params)},
            )
        except httpx.TimeoutException as exc:
            LOGGER.error("D1 request timed out after %.1fs", self.timeout)
            raise StoreError(f"Database operation failed: timeout after {self.timeout:g}s") from exc
        except httpx.HTTPError as exc:
            LOGGER.error("D1 request failed: %s", exc)
            raise StoreError(f"Database operation failed: {exc}") from exc

        body = _json_body(response)
        if response.is_error:
            message = _first_error(body) or f"HTTP {response.status_code}"
            LOGGER.error("D1 returned %s: %s", response.status_code, message)
            raise StoreError(f"Database operation failed: {message}")

        result = body.get("result") if isinstance(body, dict) else None
        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            raise StoreError("Database operation failed: Invalid response from Cloudflare D1 API")
        if body.get("success") is False or result[0].get("success") is False:
            message = _first_error(body) or "query was not successful"
            raise StoreError(f"Database operation failed: {message}")

        try:
            return OperationResult.model_validate(result[0])
        except PydanticValidationError as exc:
            raise StoreError("Database operation failed: Invalid response from Cloudflare D1 API") from exc

    async def insert_project(self, record: RecordInput) -> OperationResult:
        project = coerce_record(record)
        LOGGER.info("Inserting project %r into D1", project.name)
        return await self.query(INSERT_PROJECT_SQL, insert_params(project, now_ms()))

    async def list_projects(self, limit: Any = DEFAULT_QUERY_LIMIT) -> List[ProjectRecord]:
        result = await self.query(SELECT_PROJECTS_SQL, [clamp_limit(limit)])
        projects: List[ProjectRecord] = []
        for row in result.results:
            try:
                projects.append(
                    ProjectRecord.model_validate({k: v for k, v in row.items() if v is not None})
                )
            except PydanticValidationError as exc:
                LOGGER.warning("Skipping malformed project row: %s", exc)
        return projects


def _require(field: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid {field}: must be a non-empty string")
    return value.strip()


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _first_error(body: Dict[str, Any]) -> Optional[str]:
    errors = body.get("errors") or []
    if errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return str(errors[0]["message"])
    return None
