import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_record_id():
    """Generate an opaque, stable record identifier"""
    return uuid.uuid4().hex


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(32), primary_key=True, default=generate_record_id)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="client")


class Appointment(Base):
    """A time-bound appointment, linked to a client or standing alone with a free-text subject"""

    __tablename__ = "appointments"

    id = Column(String(32), primary_key=True, default=generate_record_id)

    # Subject: exactly one of client_id / standalone subject text
    client_id = Column(String(32), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    is_standalone = Column(Boolean, default=False, nullable=False)
    client_name = Column(String(255), nullable=True)  # Standalone subject or copied client name

    # Canonical local timestamps: "YYYY-MM-DDTHH:MM:SS.mmm", never timezone shifted
    start = Column("start_at", String(32), nullable=False, index=True)
    end = Column("end_at", String(32), nullable=True)

    description = Column(Text, nullable=True)
    location = Column(String(500), nullable=True)

    # high | medium | low
    priority = Column(String(20), default="medium", nullable=False)
    # pending | cancelled | completed
    status = Column(String(20), default="pending", nullable=False, index=True)
    # unpaid | partial | paid
    payment = Column(String(20), default="unpaid", nullable=False)

    amount = Column(Float, nullable=True)
    amount_paid = Column(Float, default=0.0, nullable=False)
    profit = Column(Float, nullable=True)

    # Reminder offsets in minutes before start, ordered and unique
    notifications = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="appointments")


class ScheduledReminder(Base):
    """One pending reminder for one appointment offset"""

    __tablename__ = "scheduled_reminders"
    __table_args__ = (
        UniqueConstraint("appointment_id", "offset_minutes", name="uq_reminder_offset"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # No foreign key: reminders must be cancellable after their appointment is deleted
    appointment_id = Column(String(32), nullable=False, index=True)
    offset_minutes = Column(Integer, nullable=False)
    fire_at = Column(DateTime, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
