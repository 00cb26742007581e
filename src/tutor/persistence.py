"""
Document stores for learner state.

The tracker persists one JSON-compatible document ({profile, attempts})
through a small port with two operations:

    load() -> dict | None     # None when nothing has been saved yet
    save(document) -> None

Adapters:
- InMemoryDocumentStore: process-local, for tests and embedding
- JsonFileDocumentStore: a single JSON file (default ~/.quadratic_tutor/state.json)
- SqlDocumentStore: a key/value row in a SQL database via SQLAlchemy

Stores raise CorruptDocumentError when stored content cannot be read or
decoded; the tracker recovers by reinitializing.
"""

from __future__ import annotations

import copy
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import DateTime, String, Text, create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from src.tutor.exceptions import CorruptDocumentError

Document = dict[str, Any]


class DocumentStore(Protocol):
    """Persistence port for the learner document."""

    def load(self) -> Document | None:
        """Return the stored document, or None if absent."""
        ...

    def save(self, document: Document) -> None:
        """Replace the stored document."""
        ...


# =============================================================================
# In-memory
# =============================================================================


class InMemoryDocumentStore:
    """Keeps a deep copy of the last saved document."""

    def __init__(self, document: Document | None = None):
        self._document = copy.deepcopy(document)
        self.save_count = 0

    def load(self) -> Document | None:
        return copy.deepcopy(self._document)

    def save(self, document: Document) -> None:
        self._document = copy.deepcopy(document)
        self.save_count += 1


# =============================================================================
# JSON file
# =============================================================================


class JsonFileDocumentStore:
    """
    Single-file JSON persistence.

    The file is written to a temporary sibling and renamed into place so a
    crash mid-write never leaves a truncated document behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> Document | None:
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptDocumentError(f"Invalid JSON in {self.path}: {e}", source=str(self.path)) from e
        except OSError as e:
            raise CorruptDocumentError(f"Cannot read {self.path}: {e}", source=str(self.path)) from e

        if not isinstance(data, dict):
            raise CorruptDocumentError(
                f"Expected a JSON object in {self.path}, got {type(data).__name__}",
                source=str(self.path),
            )
        return data

    def save(self, document: Document) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)
        logger.debug(f"Saved tutor state to {self.path}")


# =============================================================================
# SQL
# =============================================================================


class Base(DeclarativeBase):
    pass


class TutorDocumentRow(Base):
    """One persisted document per key."""

    __tablename__ = "tutor_documents"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )


class SqlDocumentStore:
    """Key/value document persistence on any SQLAlchemy-supported database."""

    def __init__(self, database_url: str, key: str = "student"):
        self.key = key
        self.engine = create_engine(database_url)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"SqlDocumentStore initialized at {self.engine.url.render_as_string(hide_password=True)}")

    def load(self) -> Document | None:
        try:
            with Session(self.engine) as session:
                body = session.scalar(select(TutorDocumentRow.body).where(TutorDocumentRow.key == self.key))
        except SQLAlchemyError as e:
            raise CorruptDocumentError(f"Cannot read document {self.key!r}: {e}", source=self.key) from e

        if body is None:
            return None

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Invalid JSON for key {self.key!r}: {e}", source=self.key) from e

        if not isinstance(data, dict):
            raise CorruptDocumentError(f"Expected a JSON object for key {self.key!r}", source=self.key)
        return data

    def save(self, document: Document) -> None:
        body = json.dumps(document, ensure_ascii=False)
        with Session(self.engine) as session:
            try:
                row = session.get(TutorDocumentRow, self.key)
                if row is None:
                    session.add(TutorDocumentRow(key=self.key, body=body))
                else:
                    row.body = body
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise


def build_store(settings: Any) -> DocumentStore:
    """
    Create the document store selected by configuration.

    Args:
        settings: Settings instance (see config.Settings)

    Returns:
        JsonFileDocumentStore or SqlDocumentStore
    """
    backend = settings.storage_backend
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if backend == "sql":
        return SqlDocumentStore(settings.get_database_url(), key=settings.document_key)
    if backend == "json":
        return JsonFileDocumentStore(settings.get_state_path())
    raise ValueError(f"Unknown storage backend: {backend}")
