# PATH: config/store.py
"""
config/store.py - Config Store adapters.

The store holds two documents, read whole (never patched):
- whitelist: list of {key, ccy, amount, enabled}
- settings:  {threshold, priorityFee, slippagePct, token, amount}

Implementations:
- MongoConfigStore: documents in db `arb`, collection `settings`,
  payload under the `data` field (production)
- YamlConfigStore: one YAML file keyed by document id (local runs, tests)
"""

import asyncio
from pathlib import Path
from typing import Any, Protocol

import yaml
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from core.constants import (
    CONFIG_COLLECTION,
    CONFIG_DATABASE,
    SETTINGS_DOCUMENT_ID,
    WHITELIST_DOCUMENT_ID,
)
from core.exceptions import ConfigStoreError, ErrorCode, ValidationError
from core.logging import get_logger

logger = get_logger("looparb.config.store")


class ConfigStore(Protocol):
    """Read-only access to the two strategy documents."""

    async def fetch_whitelist(self) -> list[dict[str, Any]]:
        ...

    async def fetch_settings(self) -> dict[str, Any]:
        ...

    async def close(self) -> None:
        ...


def _require_list(doc_id: str, value: Any) -> list[dict[str, Any]]:
    if value is None:
        raise ValidationError(
            f"Document {doc_id} not found",
            code=ErrorCode.CONFIG_MISSING,
            details={"document": doc_id},
        )
    if not isinstance(value, list):
        raise ValidationError(
            f"Document {doc_id} must hold a list, got {type(value).__name__}",
            details={"document": doc_id},
        )
    return value


def _require_mapping(doc_id: str, value: Any) -> dict[str, Any]:
    if value is None:
        raise ValidationError(
            f"Document {doc_id} not found",
            code=ErrorCode.CONFIG_MISSING,
            details={"document": doc_id},
        )
    if not isinstance(value, dict):
        raise ValidationError(
            f"Document {doc_id} must hold a mapping, got {type(value).__name__}",
            details={"document": doc_id},
        )
    return value


class MongoConfigStore:
    """
    MongoDB-backed Config Store.

    pymongo is synchronous; each read runs in a worker thread so a slow
    store never blocks the scan loop.
    """

    def __init__(
        self,
        url: str,
        database: str = CONFIG_DATABASE,
        collection: str = CONFIG_COLLECTION,
        whitelist_document: str = WHITELIST_DOCUMENT_ID,
        settings_document: str = SETTINGS_DOCUMENT_ID,
        timeout_ms: int = 10_000,
        client: MongoClient | None = None,
    ):
        self.database = database
        self.collection = collection
        self.whitelist_document = whitelist_document
        self.settings_document = settings_document
        self._client = client or MongoClient(
            url,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
        )

    def _find_data(self, doc_id: str) -> Any:
        try:
            doc = self._client[self.database][self.collection].find_one({"_id": doc_id})
        except PyMongoError as e:
            raise ConfigStoreError(
                f"Config Store read failed: {e}",
                details={"document": doc_id},
            ) from e

        if doc is None:
            return None
        return doc.get("data")

    async def fetch_whitelist(self) -> list[dict[str, Any]]:
        data = await asyncio.to_thread(self._find_data, self.whitelist_document)
        return _require_list(self.whitelist_document, data)

    async def fetch_settings(self) -> dict[str, Any]:
        data = await asyncio.to_thread(self._find_data, self.settings_document)
        return _require_mapping(self.settings_document, data)

    async def close(self) -> None:
        self._client.close()


class YamlConfigStore:
    """
    File-backed Config Store.

    The file is re-read on every fetch so edits are picked up on the next
    refresh, like documents in the production store.
    """

    def __init__(
        self,
        path: Path,
        whitelist_document: str = WHITELIST_DOCUMENT_ID,
        settings_document: str = SETTINGS_DOCUMENT_ID,
    ):
        self.path = Path(path)
        self.whitelist_document = whitelist_document
        self.settings_document = settings_document

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigStoreError(
                f"Config file unreadable: {e}",
                details={"path": str(self.path)},
            ) from e
        except yaml.YAMLError as e:
            raise ValidationError(
                f"Config file is not valid YAML: {e}",
                details={"path": str(self.path)},
            ) from e

        if not isinstance(data, dict):
            raise ValidationError(
                "Config file must hold a mapping of documents",
                details={"path": str(self.path)},
            )
        return data

    async def fetch_whitelist(self) -> list[dict[str, Any]]:
        data = self._load()
        return _require_list(self.whitelist_document, data.get(self.whitelist_document))

    async def fetch_settings(self) -> dict[str, Any]:
        data = self._load()
        return _require_mapping(self.settings_document, data.get(self.settings_document))

    async def close(self) -> None:
        return None
