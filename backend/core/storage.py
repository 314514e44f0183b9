"""
File-backed document store.

Persists two logical keys as JSON files under one directory: the document
collection and the "current document" pointer. Every read-modify-write runs
under a single FileLock so concurrent requests (or worker processes) cannot
interleave updates.
"""

import json
import time
import uuid
from pathlib import Path
from typing import Any

from filelock import FileLock

from core.exceptions import StorageError
from core.models import StoredDocument
from logger import get_logger

logger = get_logger(__name__)

DOCUMENTS_KEY = "mdview_documents"
CURRENT_KEY = "mdview_current"


def _now_ms() -> int:
    return int(time.time() * 1000)


class DocumentStore:
    """CRUD over documents kept in a small JSON key-value area."""

    def __init__(self, data_dir: str | Path, lock_timeout: float = 5):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(self.data_dir / ".store.lock", timeout=lock_timeout)

    def _key_path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read_key(self, key: str) -> Any | None:
        path = self._key_path(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _write_key(self, key: str, value: Any) -> None:
        path = self._key_path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def _remove_key(self, key: str) -> None:
        try:
            self._key_path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def _load_documents(self) -> list[StoredDocument]:
        """
        Read the document collection.

        Raises:
            StorageError: If the stored data cannot be read or validated
        """
        try:
            data = self._read_key(DOCUMENTS_KEY) or []
            return [StoredDocument(**d) for d in data]
        except (OSError, ValueError, TypeError) as e:
            raise StorageError(f"Failed to read {DOCUMENTS_KEY}: {e}") from e

    def _load_documents_or_empty(self) -> list[StoredDocument]:
        # Read-only callers degrade to an empty collection; writers must not
        try:
            return self._load_documents()
        except StorageError as e:
            logger.error(f"Error reading document store: {e}")
            return []

    def _save_documents(self, documents: list[StoredDocument]) -> None:
        self._write_key(DOCUMENTS_KEY, [d.model_dump() for d in documents])

    def _current_id(self) -> str | None:
        try:
            value = self._read_key(CURRENT_KEY)
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading current document pointer: {e}")
            return None
        return value if isinstance(value, str) else None

    # --- Documents ---

    def save_document(self, name: str, content: str) -> StoredDocument:
        """Create a document and make it the current one."""
        with self._lock:
            documents = self._load_documents()
            doc = StoredDocument(
                id=uuid.uuid4().hex,
                name=name,
                content=content,
                timestamp=_now_ms(),
            )
            documents.append(doc)
            self._save_documents(documents)
            self._write_key(CURRENT_KEY, doc.id)

        logger.info(f"Saved document {doc.id} ({len(content)} chars)")
        return doc

    def update_document(self, doc_id: str, name: str, content: str) -> StoredDocument | None:
        with self._lock:
            documents = self._load_documents()
            for index, existing in enumerate(documents):
                if existing.id == doc_id:
                    break
            else:
                return None

            documents[index] = StoredDocument(
                id=doc_id,
                name=name,
                content=content,
                # Strictly increasing per document; export cache keys include it
                timestamp=max(_now_ms(), existing.timestamp + 1),
            )
            self._save_documents(documents)

        logger.debug(f"Updated document {doc_id}")
        return documents[index]

    def get_documents(self) -> list[StoredDocument]:
        """All documents in insertion order; unreadable data is logged and reads as empty."""
        with self._lock:
            return self._load_documents_or_empty()

    def get_document(self, doc_id: str) -> StoredDocument | None:
        for doc in self.get_documents():
            if doc.id == doc_id:
                return doc
        return None

    def delete_document(self, doc_id: str) -> bool:
        """
        Delete a document.

        If it was the current document, the most recently added remaining
        document becomes current; with none left the pointer is cleared.

        Returns:
            False if no document has this id
        """
        with self._lock:
            documents = self._load_documents()
            remaining = [d for d in documents if d.id != doc_id]
            if len(remaining) == len(documents):
                return False

            self._save_documents(remaining)

            if self._current_id() == doc_id:
                if remaining:
                    self._write_key(CURRENT_KEY, remaining[-1].id)
                else:
                    self._remove_key(CURRENT_KEY)

        logger.info(f"Deleted document {doc_id}")
        return True

    # --- Current document pointer ---

    def set_current_document(self, doc_id: str) -> None:
        with self._lock:
            self._write_key(CURRENT_KEY, doc_id)

    def get_current_document(self) -> str | None:
        """
        Resolve the current document id.

        Falls back to the latest document when the stored pointer is missing
        or names a deleted document.
        """
        with self._lock:
            documents = self._load_documents_or_empty()
            current_id = self._current_id()

        if current_id and any(d.id == current_id for d in documents):
            return current_id
        if documents:
            return documents[-1].id
        return None

    def clear_current_document(self) -> None:
        with self._lock:
            self._remove_key(CURRENT_KEY)
