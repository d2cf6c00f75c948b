"""
Configuration module for ChronoCost.

Single source of truth for:
- Where project records are stored (database / collection ids, backend)
- Azure Blob Storage connection settings
- Logging settings

All values can be overridden via environment variables in Azure / local.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional


STORE_BACKEND_LOCAL = "local"
STORE_BACKEND_AZURE_BLOB = "azure_blob"


def _get_env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass
class Config:
    """
    Runtime configuration for ChronoCost.

    All fields default from environment variables but can be overridden
    programmatically by constructing Config(...) manually if needed.
    """

    # Document store addressing
    database_id: str = "chronocost"
    projects_collection_id: str = "projects"

    # "local" writes JSON files under local_store_dir, "azure_blob" uses blobs
    store_backend: str = STORE_BACKEND_LOCAL
    local_store_dir: str = "data/store"

    # Azure Blob Storage
    azure_blob_connection_string: Optional[str] = None
    azure_blob_container_name: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """
        Construct a Config object by reading environment variables.

        Environment variables (all optional):
        - CC_DATABASE_ID
        - CC_PROJECTS_COLLECTION
        - CC_STORE_BACKEND  (local / azure_blob)
        - CC_LOCAL_STORE_DIR
        - CC_AZURE_BLOB_CONNECTION_STRING
        - CC_AZURE_BLOB_CONTAINER_NAME
        - CC_LOG_LEVEL  (DEBUG, INFO, ...)
        - CC_LOG_JSON  (true/false)
        """
        return cls(
            database_id=_get_env_str("CC_DATABASE_ID", "chronocost"),
            projects_collection_id=_get_env_str("CC_PROJECTS_COLLECTION", "projects"),
            store_backend=_get_env_str("CC_STORE_BACKEND", STORE_BACKEND_LOCAL).lower(),
            local_store_dir=_get_env_str("CC_LOCAL_STORE_DIR", "data/store"),
            azure_blob_connection_string=os.getenv(
                "CC_AZURE_BLOB_CONNECTION_STRING"
            ),
            azure_blob_container_name=os.getenv(
                "CC_AZURE_BLOB_CONTAINER_NAME"
            ),
            log_level=_get_env_str("CC_LOG_LEVEL", "INFO").upper(),
            log_json=_get_env_bool("CC_LOG_JSON", default=False),
        )


# Convenience singleton-style accessor if you want a shared config
_DEFAULT_CONFIG: Optional[Config] = None


def get_config(force_reload: bool = False) -> Config:
    """
    Return a process-wide Config instance.

    Use `force_reload=True` if environment variables changed at runtime
    and you want to refresh.
    """
    global _DEFAULT_CONFIG
    if _DEFAULT_CONFIG is None or force_reload:
        _DEFAULT_CONFIG = Config.from_env()
    return _DEFAULT_CONFIG
