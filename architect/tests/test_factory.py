import asyncio
import json

import pytest

from architect import main as main_module
from architect.core.event_bus import EventCollector, EventEmitter
from architect.core.exceptions import ValidationError
from architect.core.factory import build_driver, build_record_store, validate_credentials
from architect.memory.d1 import D1RecordStore
from architect.memory.fallback import FileKeyValueStore, save_fallback_record
from architect.memory.record_store import InMemoryRecordStore
from architect.settings import Settings, get_settings
from architect.utils.schemas import ProjectRecord


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CYCLE_DELAY_SECONDS", "2.5")
    monkeypatch.setenv("SCOUT_MAX_ATTEMPTS", "4")
    get_settings.cache_clear()
    settings = get_settings()
    assert settings.cycle_delay_seconds == 2.5
    assert settings.scout_max_attempts == 4
    assert settings.request_timeout_seconds == 10.0
    assert settings.data_root.exists()
    assert settings.fallback_dir == settings.data_root / "fallback"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"llm_mode": "openai", "store_mode": "memory"}, "OpenAI API key is required"),
        (
            {"llm_mode": "mock", "store_mode": "d1", "cf_api_token": "t", "cf_database_id": "d"},
            "Cloudflare Account ID is required",
        ),
        (
            {"llm_mode": "mock", "store_mode": "d1", "cf_account_id": "a", "cf_database_id": "d"},
            "Cloudflare API Token is required",
        ),
        (
            {"llm_mode": "mock", "store_mode": "d1", "cf_account_id": "a", "cf_api_token": "t"},
            "Cloudflare Database ID is required",
        ),
    ],
)
def test_missing_credentials_fail_fast(overrides, message):
    settings = Settings(_env_file=None, **overrides)
    with pytest.raises(ValidationError, match=message):
        validate_credentials(settings)


def test_record_store_follows_store_mode():
    async def inner():
        memory = build_record_store(Settings(_env_file=None, store_mode="memory"))
        assert isinstance(memory, InMemoryRecordStore)

        d1 = build_record_store(
            Settings(_env_file=None, store_mode="d1", cf_account_id=" a ", cf_api_token="t", cf_database_id="d")
        )
        assert isinstance(d1, D1RecordStore)
        assert d1.account_id == "a"
        await d1.aclose()

    asyncio.run(inner())


def test_mock_factory_runs_one_cycle():
    async def inner():
        collector = EventCollector()
        store = InMemoryRecordStore()
        driver = build_driver(get_settings(), sink=collector, store=store)
        report = await driver.run(max_cycles=1)

        assert report.reason == "max_cycles"
        assert report.cycles_completed == 1
        projects = await store.list_projects()
        assert [p.name for p in projects] == ["Mock Habit Duel"]
        assert collector.messages()[0] == "🏭 FACTORY STARTED"

    asyncio.run(inner())


def test_fallback_keys_are_unique(tmp_path):
    async def inner():
        store = FileKeyValueStore(tmp_path)
        record = ProjectRecord(name="Foo", growth_plan="g")
        keys = [await save_fallback_record(store, record) for _ in range(3)]
        assert len(set(keys)) == 3
        assert all(k.startswith("project_") for k in keys)
        assert json.loads(await store.get_item(keys[0]))["growthPlan"] == "g"

    asyncio.run(inner())


def test_sink_failure_does_not_break_emit():
    async def inner():
        def broken(event):
            raise RuntimeError("renderer crashed")

        event = await EventEmitter(broken).emit("hello", "info")
        assert event.message == "hello"

        received = []

        async def async_sink(event):
            received.append(event.kind)

        await EventEmitter(async_sink).emit("done", "success")
        assert received == ["success"]

    asyncio.run(inner())


def test_cli_mock_run_exits_cleanly(capsys):
    code = main_module.main(["--mock", "--cycles", "1", "--delay", "0"])
    assert code == 0
    out = capsys.readouterr().out
    assert "FACTORY STARTED" in out
    assert "BUILD COMPLETE" in out


def test_cli_reports_missing_credentials(monkeypatch, capsys):
    monkeypatch.setenv("LLM_MODE", "openai")
    get_settings.cache_clear()
    code = main_module.main(["--cycles", "1"])
    assert code == 2
    assert "OpenAI API key is required" in capsys.readouterr().err
