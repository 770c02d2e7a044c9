"""Directory-backed JSON document store.

Each :class:`DocumentStore` is one collection persisted as the directory
``<directory>/<name>/``, holding one ``<_id>.json`` file per document and a
``_meta.json`` file with the auto-increment counter.  Documents are plain
dicts keyed by an integer ``_id`` which is either auto-incremented on
:meth:`DocumentStore.insert` or supplied explicitly to
:meth:`DocumentStore.update_or_insert`.

A write touches only the files of the documents it changes, so its cost does
not grow with the size of the collection.  Every file is written through a
temp file and :func:`os.replace`, so a crash never leaves a half-written
document on disk.  Reads are served from the copy loaded when the collection
is opened.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Iterable

from core.logger import WrapperLogger

logger = WrapperLogger.get_logger()

# Collections opened by :class:`Storage`.
COLLECTIONS: tuple[str, ...] = ("common", "users", "messages", "chats")

META_FILE = "_meta.json"
_DOC_SUFFIX = ".json"


def _read_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        logger.critical("Invalid JSON in store file", extra={"path": path, "error": str(exc)})
        raise ValueError(f"Invalid JSON in store file '{path}': {exc}")


def _write_json(path: str, data: Any) -> None:
    """Write *data* to *path* atomically."""
    directory = os.path.dirname(path)
    try:
        with tempfile.NamedTemporaryFile(
            "w", dir=directory, delete=False, suffix=".tmp", encoding="utf-8"
        ) as tmp:
            json.dump(data, tmp, ensure_ascii=False)
            tmp_path = tmp.name
        os.replace(tmp_path, path)
    except OSError as exc:
        logger.error("Failed to persist store file", extra={"path": path, "error": str(exc)})
        raise


class DocumentStore:
    """A single named collection of JSON documents."""

    def __init__(self, name: str, directory: str) -> None:
        self.name = name
        self.directory = directory
        self.path = os.path.join(directory, name)
        self._last_id = 0
        self._documents: dict[int, dict[str, Any]] = {}
        self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not os.path.isdir(self.path):
            logger.debug("Creating empty collection", extra={"store": self.name, "path": self.path})
            os.makedirs(self.path, exist_ok=True)
            self._save_meta()
            return

        meta_path = os.path.join(self.path, META_FILE)
        if os.path.exists(meta_path):
            self._last_id = _read_json(meta_path).get("last_id", 0)

        for filename in os.listdir(self.path):
            stem, suffix = os.path.splitext(filename)
            if suffix != _DOC_SUFFIX or filename == META_FILE:
                continue
            try:
                doc_id = int(stem)
            except ValueError:
                logger.warning("Ignoring unexpected file in collection", extra={"store": self.name, "file": filename})
                continue
            self._documents[doc_id] = _read_json(os.path.join(self.path, filename))

        # A crash between a document write and the counter write leaves the counter behind.
        positive_ids = [doc_id for doc_id in self._documents if doc_id > 0]
        self._last_id = max([self._last_id, *positive_ids])
        logger.debug("Loaded collection", extra={"store": self.name, "document_count": len(self._documents)})

    def _doc_path(self, doc_id: int) -> str:
        return os.path.join(self.path, f"{doc_id}{_DOC_SUFFIX}")

    def _save_doc(self, document: dict[str, Any]) -> None:
        _write_json(self._doc_path(document["_id"]), document)

    def _save_meta(self) -> None:
        _write_json(os.path.join(self.path, META_FILE), {"last_id": self._last_id})

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        """Append *document* under the next auto-increment ``_id``."""
        self._last_id += 1
        stored = {**document, "_id": self._last_id}
        self._documents[self._last_id] = stored
        self._save_doc(stored)
        self._save_meta()
        return dict(stored)

    def update_by_id(self, doc_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Merge *fields* into the document with ``_id`` *doc_id*.

        Returns the updated document, or ``None`` if no such document exists.
        """
        document = self._documents.get(doc_id)
        if document is None:
            return None
        document.update({k: v for k, v in fields.items() if k != "_id"})
        self._save_doc(document)
        return dict(document)

    def update_or_insert(self, document: dict[str, Any]) -> dict[str, Any]:
        """Replace (or create) the document whose ``_id`` is given in *document*."""
        doc_id = int(document["_id"])
        stored = {**document, "_id": doc_id}
        self._documents[doc_id] = stored
        self._save_doc(stored)
        if doc_id > self._last_id:
            self._last_id = doc_id
            self._save_meta()
        return dict(stored)

    def update(self, criteria: dict[str, Any], fields: dict[str, Any]) -> int:
        """Merge *fields* into every document matching *criteria*; return the count."""
        matched = [doc for doc in self._documents.values() if _matches(doc, criteria)]
        for document in matched:
            document.update({k: v for k, v in fields.items() if k != "_id"})
            self._save_doc(document)
        return len(matched)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, doc_id: int) -> dict[str, Any] | None:
        document = self._documents.get(doc_id)
        return dict(document) if document is not None else None

    def find_by(
        self,
        criteria: dict[str, Any],
        order_by: tuple[str, str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return documents whose fields equal every value in *criteria*.

        *order_by* is a ``(field, "asc" | "desc")`` pair; ties are broken by
        ``_id`` in the same direction.  Without *order_by* documents come back
        in ``_id`` order.
        """
        results = [dict(doc) for _, doc in sorted(self._documents.items()) if _matches(doc, criteria)]
        if order_by is not None:
            field, direction = order_by
            results.sort(
                key=lambda doc: (_sort_key(doc.get(field)), doc["_id"]),
                reverse=direction.lower() == "desc",
            )
        if limit is not None:
            results = results[:limit]
        return results

    def find_one_by(self, criteria: dict[str, Any]) -> dict[str, Any] | None:
        found = self.find_by(criteria, limit=1)
        return found[0] if found else None

    def find_all(self) -> list[dict[str, Any]]:
        return self.find_by({})

    def count(self) -> int:
        return len(self._documents)


def _matches(document: dict[str, Any], criteria: dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in criteria.items())


def _sort_key(value: Any) -> tuple[int, Any]:
    # None sorts before any real value.
    return (0, 0) if value is None else (1, value)


class Storage:
    """The set of collections a bot needs, opened under one directory."""

    def __init__(self, directory: str, names: Iterable[str] = COLLECTIONS) -> None:
        os.makedirs(directory, exist_ok=True)
        self.directory = directory
        self._stores = {name: DocumentStore(name, directory) for name in names}
        logger.info("Opened document stores", extra={"directory": directory, "stores": list(self._stores)})

    def __getitem__(self, name: str) -> DocumentStore:
        return self._stores[name]

    def __contains__(self, name: str) -> bool:
        return name in self._stores

    @property
    def common(self) -> DocumentStore:
        return self._stores["common"]

    @property
    def users(self) -> DocumentStore:
        return self._stores["users"]

    @property
    def messages(self) -> DocumentStore:
        return self._stores["messages"]

    @property
    def chats(self) -> DocumentStore:
        return self._stores["chats"]
