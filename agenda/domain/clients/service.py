"""Client service - Business logic for client operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client
from ..scheduling.repository import KIND_CLIENTS, SqlRecordStore
from .schemas import ClientCreate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client records (appointment subjects)"""

    def __init__(self, db: Session):
        self.db = db
        self.store = SqlRecordStore(db)

    def get_clients(self, search: Optional[str] = None) -> list[Client]:
        """Get all clients, optionally narrowed by a search string"""
        clients = self.store.search(KIND_CLIENTS, search)
        return sorted(clients, key=lambda c: (c.name or "").lower())

    def get_client(self, client_id: str) -> Client:
        """Get a specific client"""
        client = self.store.get_by_id(KIND_CLIENTS, client_id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_client(self, data: ClientCreate) -> Client:
        """Create a new client"""
        client = self.store.add(KIND_CLIENTS, data.model_dump())
        logger.info(f"✅ Client {client.id} created")
        return client
