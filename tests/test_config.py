"""
Tests for environment-driven configuration.
"""

from chronocost.config import Config, get_config


def test_defaults(monkeypatch):
    for name in (
        "CC_DATABASE_ID",
        "CC_PROJECTS_COLLECTION",
        "CC_STORE_BACKEND",
        "CC_LOCAL_STORE_DIR",
        "CC_AZURE_BLOB_CONNECTION_STRING",
        "CC_AZURE_BLOB_CONTAINER_NAME",
        "CC_LOG_LEVEL",
        "CC_LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = Config.from_env()

    assert cfg.database_id == "chronocost"
    assert cfg.projects_collection_id == "projects"
    assert cfg.store_backend == "local"
    assert cfg.azure_blob_connection_string is None
    assert cfg.log_level == "INFO"
    assert cfg.log_json is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CC_DATABASE_ID", "prod")
    monkeypatch.setenv("CC_PROJECTS_COLLECTION", "submissions")
    monkeypatch.setenv("CC_STORE_BACKEND", "AZURE_BLOB")
    monkeypatch.setenv("CC_AZURE_BLOB_CONTAINER_NAME", "records")
    monkeypatch.setenv("CC_LOG_LEVEL", "debug")
    monkeypatch.setenv("CC_LOG_JSON", "yes")

    cfg = Config.from_env()

    assert cfg.database_id == "prod"
    assert cfg.projects_collection_id == "submissions"
    assert cfg.store_backend == "azure_blob"
    assert cfg.azure_blob_container_name == "records"
    assert cfg.log_level == "DEBUG"
    assert cfg.log_json is True


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("CC_DATABASE_ID", "   ")
    assert Config.from_env().database_id == "chronocost"


def test_get_config_caches_until_reload(monkeypatch):
    monkeypatch.setenv("CC_DATABASE_ID", "first")
    first = get_config(force_reload=True)
    monkeypatch.setenv("CC_DATABASE_ID", "second")

    assert get_config() is first
    assert get_config(force_reload=True).database_id == "second"
    monkeypatch.delenv("CC_DATABASE_ID")
    get_config(force_reload=True)
