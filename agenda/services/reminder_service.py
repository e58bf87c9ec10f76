"""
Reminder Scheduling Service
Keeps the scheduled_reminders table in step with the intents emitted by
appointment lifecycle transitions.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..domain.scheduling.clock import Clock, SystemClock
from ..domain.scheduling.lifecycle import CancelReminder, ScheduleReminder
from ..domain.scheduling.statuses import field, is_active
from ..domain.scheduling.timecodec import parse_local
from ..models import ScheduledReminder

logger = logging.getLogger(__name__)


def format_offset(minutes: int) -> str:
    """Human-readable offset, e.g. "10 min before", "2 hours before" """
    if minutes == 0:
        return "At time of event"
    if minutes < 60:
        return f"{minutes} min before"
    if minutes < 1440:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours > 1 else ''} before"
    days = minutes // 1440
    return f"{days} day{'s' if days > 1 else ''} before"


class ReminderScheduler:
    """
    Persists reminders for appointments.

    Both operations are idempotent: scheduling the same offset twice leaves
    one row, cancelling an appointment without reminders is a no-op.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or SystemClock()

    def schedule_reminder(self, record, offset_minutes: int) -> Optional[ScheduledReminder]:
        """
        Schedule one reminder offset_minutes before the appointment starts.

        Returns:
            The reminder row, or None when nothing needs scheduling (inactive
            appointment, unreadable start, or fire time already passed)
        """
        appointment_id = field(record, "id")

        if not is_active(record):
            logger.debug(f"Appointment {appointment_id} is completed or cancelled, no reminder")
            return None

        start = parse_local(field(record, "start"))
        if start is None:
            logger.warning(f"⚠️ Invalid start for appointment {appointment_id}, no reminder")
            return None

        fire_at = start - timedelta(minutes=offset_minutes)
        if fire_at <= self.clock.now():
            logger.debug(
                f"Reminder time has passed for {appointment_id} ({offset_minutes} min): {fire_at}"
            )
            return None

        title = "📅 Appointment Reminder"
        body = f"⏰ {format_offset(offset_minutes)}\n{field(record, 'client_name') or 'Appointment'}"
        description = field(record, "description")
        if description:
            body += f"\n💬 {description[:60]}"

        reminder = (
            self.db.query(ScheduledReminder)
            .filter(
                ScheduledReminder.appointment_id == appointment_id,
                ScheduledReminder.offset_minutes == offset_minutes,
            )
            .first()
        )
        if reminder is None:
            reminder = ScheduledReminder(
                appointment_id=appointment_id, offset_minutes=offset_minutes
            )
            self.db.add(reminder)

        reminder.fire_at = fire_at
        reminder.title = title
        reminder.body = body

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(reminder)
        logger.info(f"⏰ Reminder for {appointment_id} scheduled at {fire_at}")
        return reminder

    def cancel_reminder(self, id_or_record) -> int:
        """Drop every reminder of an appointment; returns how many were removed"""
        appointment_id = (
            id_or_record if isinstance(id_or_record, str) else field(id_or_record, "id")
        )
        try:
            removed = (
                self.db.query(ScheduledReminder)
                .filter(ScheduledReminder.appointment_id == appointment_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        if removed:
            logger.info(f"🔕 Cancelled {removed} reminder(s) for {appointment_id}")
        return removed

    def dispatch(self, intents: Iterable) -> None:
        """Carry out lifecycle intents in the order they were emitted"""
        for intent in intents:
            if isinstance(intent, CancelReminder):
                self.cancel_reminder(intent.appointment_id)
            elif isinstance(intent, ScheduleReminder):
                self.schedule_reminder(intent.record, intent.offset_minutes)
            else:
                raise TypeError(f"Unknown reminder intent: {intent!r}")

    def reminders_for(self, appointment_id: str) -> list[ScheduledReminder]:
        return (
            self.db.query(ScheduledReminder)
            .filter(ScheduledReminder.appointment_id == appointment_id)
            .order_by(ScheduledReminder.fire_at)
            .all()
        )

    def due_reminders(self, now: Optional[datetime] = None) -> list[ScheduledReminder]:
        """Reminders whose fire time has arrived"""
        now = now or self.clock.now()
        return (
            self.db.query(ScheduledReminder)
            .filter(ScheduledReminder.fire_at <= now)
            .order_by(ScheduledReminder.fire_at)
            .all()
        )
