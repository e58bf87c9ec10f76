"""Record store - the single source of truth for appointments and clients"""

import logging
from typing import Optional, Protocol

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from ...models import Appointment, Client
from .statuses import STATUS_COMPLETED, STATUS_PENDING
from .triage import matches_query, normalize_for_search

logger = logging.getLogger(__name__)

KIND_APPOINTMENTS = "appointments"
KIND_CLIENTS = "clients"

MODELS = {
    KIND_APPOINTMENTS: Appointment,
    KIND_CLIENTS: Client,
}


class RecordStore(Protocol):
    def get_all(self, kind: str) -> list: ...

    def get_by_id(self, kind: str, record_id: str): ...

    def add(self, kind: str, fields: dict): ...

    def update(self, kind: str, record_id: str, partial: dict): ...

    def delete(self, kind: str, record_id: str) -> bool: ...

    def search(self, kind: str, query: Optional[str]) -> list: ...


def record_fields(record) -> dict:
    """Column values of an ORM record as a plain dict, keyed by attribute name"""
    mapper = sa_inspect(type(record))
    return {attr.key: getattr(record, attr.key) for attr in mapper.column_attrs}


def normalize_legacy_fields(fields: dict) -> dict:
    """
    Fold the legacy ``completed`` boolean into the status enum.

    Older records stored completion as a flag next to (or instead of) the
    status. Only this boundary accepts the flag; everything past the store
    sees the enum alone.
    """
    if "completed" not in fields:
        return fields
    fields = dict(fields)
    completed = bool(fields.pop("completed"))
    if completed:
        fields["status"] = STATUS_COMPLETED
    elif fields.get("status") in (None, STATUS_COMPLETED):
        fields["status"] = STATUS_PENDING
    return fields


class SqlRecordStore:
    """Record store backed by a SQLAlchemy session; each write commits on its own"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _model(kind: str):
        try:
            return MODELS[kind]
        except KeyError:
            raise ValueError(f"Unknown record kind: {kind}") from None

    def _columns(self, kind: str) -> set:
        return {attr.key for attr in sa_inspect(self._model(kind)).column_attrs}

    def get_all(self, kind: str) -> list:
        return self.db.query(self._model(kind)).all()

    def get_by_id(self, kind: str, record_id: str):
        if not record_id:
            return None
        return self.db.get(self._model(kind), record_id)

    def add(self, kind: str, fields: dict):
        model = self._model(kind)
        columns = self._columns(kind)
        fields = normalize_legacy_fields(fields)
        record = model(**{k: v for k, v in fields.items() if k in columns})
        try:
            self.db.add(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def update(self, kind: str, record_id: str, partial: dict):
        """Apply the given fields; returns the record, or None if it does not exist"""
        record = self.get_by_id(kind, record_id)
        if record is None:
            return None

        columns = self._columns(kind)
        for key, value in normalize_legacy_fields(partial).items():
            if key in columns and key != "id":
                setattr(record, key, value)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def delete(self, kind: str, record_id: str) -> bool:
        record = self.get_by_id(kind, record_id)
        if record is None:
            return False
        try:
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return True

    def search(self, kind: str, query: Optional[str]) -> list:
        """Case- and accent-insensitive substring search over text fields"""
        records = self.get_all(kind)
        if not query or not query.strip():
            return records
        if kind == KIND_CLIENTS:
            needle = normalize_for_search(query.strip())
            return [
                c
                for c in records
                if any(
                    needle in normalize_for_search(value)
                    for value in (c.name, c.phone, c.email, c.address)
                    if value
                )
            ]
        return [r for r in records if matches_query(r, query)]
