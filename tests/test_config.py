from importlib import util
from pathlib import Path

from phone_lookup.config import Settings

CONFIG_PATH = Path(__file__).resolve().parents[1] / "phone_lookup" / "config.py"


def load_config():
    spec = util.spec_from_file_location("config", CONFIG_PATH)
    module = util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore
    return module


def test_settings_env(monkeypatch):
    monkeypatch.setenv("VERIPHONE_API_KEY", "abc")
    monkeypatch.setenv("DEFAULT_REGION", "gb")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "120")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
    config = load_config()
    assert config.settings.veriphone_api_key == "abc"
    assert config.settings.default_region == "GB"
    assert config.settings.cache_ttl_seconds == 120
    assert config.settings.cors_origins == ["https://a.example", "https://b.example"]


def test_defaults(monkeypatch):
    monkeypatch.delenv("VERIPHONE_API_KEY", raising=False)
    monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
    settings = load_config().settings
    assert settings.veriphone_api_key is None
    assert settings.cache_ttl_seconds == 3600
    assert settings.veriphone_timeout_seconds == 10.0


def test_unparsable_ttl_falls_back_to_default():
    assert Settings(cache_ttl_seconds="soon").cache_ttl_seconds == 3600
    assert Settings(cache_ttl_seconds="").cache_ttl_seconds == 3600


def test_blank_api_key_counts_as_missing():
    assert Settings(veriphone_api_key="   ").veriphone_api_key is None


def test_store_url_prefers_postgres():
    assert Settings(database_url="sqlite:///x.sqlite").store_url == "sqlite:///x.sqlite"
    settings = Settings(pg_host="db", pg_user="u", pg_password="p", pg_db="lookups")
    assert settings.store_url == "postgresql+psycopg2://u:p@db:5432/lookups"
