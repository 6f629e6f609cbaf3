import asyncio
import json

import httpx
import pytest

from architect.core.exceptions import StoreError, ValidationError
from architect.memory.d1 import D1RecordStore
from architect.memory.record_store import (
    INSERT_PROJECT_SQL,
    InMemoryRecordStore,
    clamp_limit,
)
from architect.utils.schemas import ProjectRecord


def _ok(results=None):
    return httpx.Response(
        200,
        json={"success": True, "errors": [], "result": [{"success": True, "results": results or [], "meta": {"changes": 1}}]},
    )


def _store(handler):
    transport = httpx.MockTransport(handler)
    return D1RecordStore("acct", "token", "db", transport=transport)


def test_constructor_rejects_blank_arguments():
    with pytest.raises(ValidationError):
        D1RecordStore("", "token", "db")
    with pytest.raises(ValidationError):
        D1RecordStore("acct", "   ", "db")
    with pytest.raises(ValidationError):
        D1RecordStore("acct", "token", None)


def test_insert_binds_injection_input_as_parameter():
    async def inner():
        seen = []

        def handler(request):
            seen.append(request)
            return _ok()

        store = _store(handler)
        evil = "x'); DROP TABLE projects;--"
        await store.insert_project(ProjectRecord(name=evil, idea="{}", code="c", stack="Web"))
        await store.aclose()

        assert len(seen) == 1
        request = seen[0]
        body = json.loads(request.content)
        assert request.url.path == "/client/v4/accounts/acct/d1/database/db/query"
        assert request.headers["Authorization"] == "Bearer token"
        assert body["sql"] == INSERT_PROJECT_SQL
        assert evil not in body["sql"]
        assert body["params"][0] == evil
        assert body["params"][1:4] == ["{}", "c", "Web"]
        assert isinstance(body["params"][4], int)

    asyncio.run(inner())


def test_insert_defaults_missing_fields_to_empty_strings():
    async def inner():
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return _ok()

        store = _store(handler)
        await store.insert_project({"name": "  Foo  "})
        await store.aclose()
        assert bodies[0]["params"][:4] == ["Foo", "", "", ""]

    asyncio.run(inner())


def test_insert_requires_name_before_any_request():
    async def inner():
        calls = []

        def handler(request):
            calls.append(request)
            return _ok()

        store = _store(handler)
        with pytest.raises(ValidationError):
            await store.insert_project({"name": "   ", "code": "x"})
        with pytest.raises(ValidationError):
            await store.insert_project({"code": "x"})
        await store.aclose()
        assert calls == []

    asyncio.run(inner())


@pytest.mark.parametrize(
    "limit, expected",
    [
        (0, 1), (500, 100), ("abc", 10), (None, 10), (25, 25), ("7", 7), (-3, 1),
        (float("inf"), 10), (float("nan"), 10),
    ],
)
def test_list_projects_clamps_limit(limit, expected):
    async def inner():
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return _ok()

        store = _store(handler)
        await store.list_projects(limit)
        await store.aclose()
        assert bodies[0]["params"] == [expected]

    asyncio.run(inner())
    assert clamp_limit(limit) == expected


def test_list_projects_maps_rows():
    async def inner():
        rows = [
            {"id": 2, "name": "Bar", "idea": "{}", "code": "b", "stack": "Web", "timestamp": 20},
            {"id": 1, "name": "Foo", "idea": None, "code": "a", "stack": "Web", "timestamp": 10},
        ]
        store = _store(lambda request: _ok(rows))
        projects = await store.list_projects()
        await store.aclose()
        assert [p.name for p in projects] == ["Bar", "Foo"]
        assert projects[1].idea == ""
        assert projects[0].timestamp == 20

    asyncio.run(inner())


def test_error_status_raises_store_error_with_backend_message():
    async def inner():
        def handler(request):
            return httpx.Response(400, json={"success": False, "errors": [{"code": 7500, "message": "no such table: projects"}]})

        store = _store(handler)
        with pytest.raises(StoreError, match="no such table: projects"):
            await store.insert_project({"name": "Foo"})
        await store.aclose()

    asyncio.run(inner())


def test_invalid_envelope_raises_store_error():
    async def inner():
        store = _store(lambda request: httpx.Response(200, json={"success": True}))
        with pytest.raises(StoreError, match="Invalid response"):
            await store.list_projects()
        await store.aclose()

    asyncio.run(inner())


def test_timeout_raises_store_error():
    async def inner():
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        store = _store(handler)
        with pytest.raises(StoreError, match="timeout"):
            await store.insert_project({"name": "Foo"})
        await store.aclose()

    asyncio.run(inner())


def test_query_validates_arguments():
    async def inner():
        store = _store(lambda request: _ok())
        with pytest.raises(ValidationError):
            await store.query("   ")
        with pytest.raises(ValidationError):
            await store.query("SELECT 1", "not-a-list")
        await store.aclose()

    asyncio.run(inner())


def test_in_memory_store_round_trip():
    async def inner():
        store = InMemoryRecordStore()
        await store.insert_project({"name": "Foo"})
        await store.insert_project(ProjectRecord(name="Bar", growth_plan="g"))
        projects = await store.list_projects(0)
        assert len(projects) == 1
        assert projects[0].name == "Bar"
        assert projects[0].growth_plan == "g"
        assert len(await store.list_projects("abc")) == 2

    asyncio.run(inner())
