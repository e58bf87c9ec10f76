"""Client router - FastAPI endpoints for client operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import ClientCreate, ClientResponse
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    q: Optional[str] = Query(None),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients"""
    return [ClientResponse.model_validate(c) for c in service.get_clients(q)]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    service: ClientService = Depends(get_client_service),
):
    """Get a specific client"""
    return ClientResponse.model_validate(service.get_client(client_id))


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    service: ClientService = Depends(get_client_service),
):
    """Create a new client"""
    return ClientResponse.model_validate(service.create_client(data))
