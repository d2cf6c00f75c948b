"""
Document store backends for project records.

Provides:
- LocalDocumentStore: JSON files on disk (local dev, tests)
- AzureBlobDocumentStore: JSON blobs in Azure Blob Storage
- get_document_store: pick one from Config

Both lay documents out as <database>/<collection>/<document_id>.json and
return them as dicts with an "id" key added to the stored fields.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol
import uuid

import structlog
from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from .config import STORE_BACKEND_AZURE_BLOB, STORE_BACKEND_LOCAL, Config, get_config
from .errors import DocumentNotFound

logger = structlog.get_logger(__name__)

Document = Dict[str, Any]


def new_document_id() -> str:
    return uuid.uuid4().hex


def _document_path(database_id: str, collection_id: str, document_id: str) -> str:
    return f"{database_id}/{collection_id}/{document_id}.json"


def _with_id(document_id: str, fields: Dict[str, Any]) -> Document:
    doc: Document = {"id": document_id}
    doc.update(fields)
    return doc


class DocumentStore(Protocol):
    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        fields: Dict[str, Any],
    ) -> Document: ...

    def get_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
    ) -> Document: ...

    def list_documents(self, database_id: str, collection_id: str) -> List[Document]: ...


# --- Local JSON files ------------------------------------------------------


class LocalDocumentStore:
    """Stores each document as a pretty-printed JSON file under root_dir."""

    def __init__(self, root_dir: str | Path) -> None:
        self.root_dir = Path(root_dir)

    def _path(self, database_id: str, collection_id: str, document_id: str) -> Path:
        return self.root_dir / _document_path(database_id, collection_id, document_id)

    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        fields: Dict[str, Any],
    ) -> Document:
        path = self._path(database_id, collection_id, document_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = _with_id(document_id, fields)
        # "x" mode: never overwrite an existing document
        with open(path, mode="x", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
        logger.info("Created document", collection=collection_id, document_id=document_id)
        return doc

    def get_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
    ) -> Document:
        path = self._path(database_id, collection_id, document_id)
        if not path.exists():
            raise DocumentNotFound(collection_id, document_id)
        return json.loads(path.read_text(encoding="utf-8"))

    def list_documents(self, database_id: str, collection_id: str) -> List[Document]:
        folder = self.root_dir / database_id / collection_id
        if not folder.exists():
            return []
        return [
            json.loads(p.read_text(encoding="utf-8"))
            for p in sorted(folder.glob("*.json"))
        ]


# --- Azure Blob ------------------------------------------------------------


class AzureBlobDocumentStore:
    """
    Stores documents as JSON blobs in one container.

    The container comes from Config.azure_blob_container_name unless passed
    explicitly.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        *,
        container_name: Optional[str] = None,
        service_client: Optional[BlobServiceClient] = None,
    ) -> None:
        cfg = config or get_config()
        self.container_name = container_name or cfg.azure_blob_container_name
        if not self.container_name:
            raise ValueError(
                "Azure blob container name is not configured. "
                "Set CC_AZURE_BLOB_CONTAINER_NAME or pass container_name."
            )
        if service_client is None:
            if not cfg.azure_blob_connection_string:
                raise ValueError(
                    "Azure blob connection string is not configured. "
                    "Set CC_AZURE_BLOB_CONNECTION_STRING or pass Config explicitly."
                )
            service_client = BlobServiceClient.from_connection_string(
                cfg.azure_blob_connection_string
            )
        self.service_client = service_client

    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        fields: Dict[str, Any],
    ) -> Document:
        doc = _with_id(document_id, fields)
        blob_name = _document_path(database_id, collection_id, document_id)
        blob_client = self.service_client.get_blob_client(
            container=self.container_name, blob=blob_name
        )
        blob_client.upload_blob(
            json.dumps(doc).encode("utf-8"),
            overwrite=False,
            content_settings=ContentSettings(content_type="application/json"),
        )
        logger.info("Created document blob", container=self.container_name, blob=blob_name)
        return doc

    def get_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
    ) -> Document:
        blob_name = _document_path(database_id, collection_id, document_id)
        blob_client = self.service_client.get_blob_client(
            container=self.container_name, blob=blob_name
        )
        try:
            data = blob_client.download_blob().readall()
        except ResourceNotFoundError as e:
            raise DocumentNotFound(collection_id, document_id) from e
        return json.loads(data.decode("utf-8"))

    def list_documents(self, database_id: str, collection_id: str) -> List[Document]:
        container_client = self.service_client.get_container_client(self.container_name)
        prefix = f"{database_id}/{collection_id}/"
        docs: List[Document] = []
        for blob in container_client.list_blobs(name_starts_with=prefix):
            data = container_client.download_blob(blob.name).readall()
            docs.append(json.loads(data.decode("utf-8")))
        return docs


def get_document_store(config: Optional[Config] = None) -> DocumentStore:
    """Build the backend named by config.store_backend."""
    cfg = config or get_config()
    if cfg.store_backend == STORE_BACKEND_LOCAL:
        return LocalDocumentStore(cfg.local_store_dir)
    if cfg.store_backend == STORE_BACKEND_AZURE_BLOB:
        return AzureBlobDocumentStore(cfg)
    raise ValueError(
        f"Unknown store backend {cfg.store_backend!r}. "
        f"Use {STORE_BACKEND_LOCAL!r} or {STORE_BACKEND_AZURE_BLOB!r}."
    )
