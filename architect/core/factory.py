from __future__ import annotations

from typing import Optional

from architect.core.cycle_driver import CycleDriver
from architect.core.event_bus import EventEmitter, LogSink
from architect.core.exceptions import ValidationError
from architect.core.orchestrator import Orchestrator
from architect.llm.adapter import get_llm_adapter
from architect.memory.d1 import D1RecordStore
from architect.memory.fallback import FileKeyValueStore
from architect.memory.record_store import InMemoryRecordStore, RecordStore
from architect.settings import Settings, get_settings
from architect.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _require(value: Optional[str], label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def validate_credentials(settings: Settings) -> None:
    """Fail before any network call if a selected backend lacks credentials."""
    if settings.llm_mode == "openai":
        _require(settings.openai_api_key, "OpenAI API key")
    if settings.store_mode == "d1":
        _require(settings.cf_account_id, "Cloudflare Account ID")
        _require(settings.cf_api_token, "Cloudflare API Token")
        _require(settings.cf_database_id, "Cloudflare Database ID")


def build_record_store(settings: Optional[Settings] = None) -> RecordStore:
    settings = settings or get_settings()
    if settings.store_mode == "memory":
        return InMemoryRecordStore()
    return D1RecordStore(
        _require(settings.cf_account_id, "Cloudflare Account ID"),
        _require(settings.cf_api_token, "Cloudflare API Token"),
        _require(settings.cf_database_id, "Cloudflare Database ID"),
        api_base=settings.cf_api_base,
        timeout=settings.request_timeout_seconds,
    )


def build_driver(
    settings: Optional[Settings] = None,
    sink: Optional[LogSink] = None,
    store: Optional[RecordStore] = None,
) -> CycleDriver:
    settings = settings or get_settings()
    validate_credentials(settings)

    emitter = EventEmitter(sink)
    orchestrator = Orchestrator(
        get_llm_adapter(settings),
        store or build_record_store(settings),
        FileKeyValueStore(settings.fallback_dir),
        emitter,
        scout_max_attempts=settings.scout_max_attempts,
        qa_review_chars=settings.qa_review_chars,
        cycle_timeout=settings.cycle_timeout_seconds,
    )
    LOGGER.info(
        "Factory wired (llm_mode=%s, store_mode=%s, delay=%.1fs)",
        settings.llm_mode,
        settings.store_mode,
        settings.cycle_delay_seconds,
    )
    return CycleDriver(orchestrator, emitter, delay=settings.cycle_delay_seconds)
