import pytest

from architect import settings as settings_module
from architect.llm import adapter as adapter_module


@pytest.fixture(autouse=True)
def test_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_ROOT", str(tmp_path / "data"))
    monkeypatch.setenv("LLM_MODE", "mock")
    monkeypatch.setenv("STORE_MODE", "memory")
    monkeypatch.setenv("CYCLE_DELAY_SECONDS", "0")
    for name in ("OPENAI_API_KEY", "CF_ACCOUNT_ID", "CF_API_TOKEN", "CF_DATABASE_ID"):
        monkeypatch.delenv(name, raising=False)
    settings_module.get_settings.cache_clear()
    adapter_module.reset_llm_adapter()
    yield
    settings_module.get_settings.cache_clear()
    adapter_module.reset_llm_adapter()
