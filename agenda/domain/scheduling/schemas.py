"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_canonical_timestamp, validate_minute_offsets
from .lifecycle import remaining_amount
from .statuses import normalized_status
from .triage import StatusFilter

Priority = Literal["high", "medium", "low"]
Status = Literal["pending", "cancelled", "completed"]
Payment = Literal["unpaid", "partial", "paid"]


class AppointmentCreate(BaseModel):
    """Schema for creating an appointment"""

    clientId: Optional[str] = None
    clientName: Optional[str] = None
    isStandalone: bool = False
    start: Optional[str] = None
    # Alternative to start: separate date and time inputs
    date: Optional[str] = None
    time: Optional[str] = None
    end: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    priority: Priority = "medium"
    status: Status = "pending"
    payment: Payment = "unpaid"
    amount: Optional[float] = None
    amountPaid: Optional[float] = None
    profit: Optional[float] = None
    notifications: list[int] = []

    @field_validator("notifications")
    @classmethod
    def validate_notifications(cls, v):
        return validate_minute_offsets(v)


class AppointmentUpdate(BaseModel):
    """Schema for editing an appointment; only the fields sent are changed"""

    clientId: Optional[str] = None
    clientName: Optional[str] = None
    isStandalone: Optional[bool] = None
    start: Optional[str] = None
    end: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    payment: Optional[Payment] = None
    amount: Optional[float] = None
    amountPaid: Optional[float] = None
    profit: Optional[float] = None
    notifications: Optional[list[int]] = None

    @field_validator("notifications")
    @classmethod
    def validate_notifications(cls, v):
        if v is None:
            return v
        return validate_minute_offsets(v)


class PaymentUpdate(BaseModel):
    """Schema for setting the payment state"""

    payment: Payment
    amountPaid: Optional[float] = None
    amount: Optional[float] = None


class ConflictCheckRequest(BaseModel):
    start: str
    end: Optional[str] = None
    excludeId: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def validate_timestamp(cls, v):
        return validate_canonical_timestamp(v)


class ConflictCheckResponse(BaseModel):
    conflict: bool
    conflictingId: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: str
    clientId: Optional[str] = None
    clientName: Optional[str] = None
    isStandalone: bool
    start: Optional[str] = None
    end: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    priority: str
    status: str
    payment: str
    amount: Optional[float] = None
    amountPaid: float = 0.0
    remaining: Optional[float] = None
    profit: Optional[float] = None
    notifications: list[int] = []
    overdue: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record, overdue: bool = False) -> "AppointmentResponse":
        return cls(
            id=record.id,
            clientId=record.client_id,
            clientName=record.client_name,
            isStandalone=bool(record.is_standalone),
            start=record.start,
            end=record.end,
            description=record.description,
            location=record.location,
            priority=record.priority,
            status=normalized_status(record),
            payment=record.payment,
            amount=record.amount,
            amountPaid=record.amount_paid or 0.0,
            remaining=remaining_amount(record),
            profit=record.profit,
            notifications=list(record.notifications or []),
            overdue=overdue,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]
    total: int
    shown: int
    remaining: int
    hasMore: bool
    statusFilter: StatusFilter
    priorityFilter: str


# camelCase API field -> model attribute
FIELD_MAP = {
    "clientId": "client_id",
    "clientName": "client_name",
    "isStandalone": "is_standalone",
    "start": "start",
    "end": "end",
    "description": "description",
    "location": "location",
    "priority": "priority",
    "status": "status",
    "payment": "payment",
    "amount": "amount",
    "amountPaid": "amount_paid",
    "profit": "profit",
    "notifications": "notifications",
}


def to_record_fields(data: BaseModel, partial: bool = False) -> dict:
    """Translate an API payload to record fields; partial keeps only fields actually sent"""
    values = data.model_dump(exclude_unset=partial)
    return {FIELD_MAP[k]: v for k, v in values.items() if k in FIELD_MAP}
