"""Appointment service - wires the record store, lifecycle, reminders and triage"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...services.reminder_service import ReminderScheduler
from .clock import Clock, SystemClock
from .errors import StoreFailure, ValidationError
from .lifecycle import LifecycleController, TransitionResult
from .overlap import DEFAULT_POLICY, DurationPolicy
from .repository import KIND_APPOINTMENTS, SqlRecordStore
from .reveal import RevealWindow
from .timecodec import compose, encode, parse_local
from .triage import ALL_PRIORITIES, StatusFilter, is_overdue, triage

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment operations"""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        reveal: Optional[RevealWindow] = None,
        policy: DurationPolicy = DEFAULT_POLICY,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.store = SqlRecordStore(db)
        self.controller = LifecycleController(self.store, policy)
        self.reminders = ReminderScheduler(db, self.clock)
        self.reveal = reveal or RevealWindow()

    def _apply(self, result: TransitionResult):
        """Hand the transition's reminder intents to the scheduler"""
        try:
            self.reminders.dispatch(result.intents)
        except Exception as e:
            # The appointment change is already committed; reminders can be resynced later
            logger.error(f"❌ Failed to sync reminders: {e}")
            logger.exception(e)
        return result.record

    def get_appointment(self, appointment_id: str):
        record = self.store.get_by_id(KIND_APPOINTMENTS, appointment_id)
        if record is None:
            raise StoreFailure(f"Appointment {appointment_id} not found")
        return record

    def create_appointment(
        self, fields: dict, date: Optional[str] = None, time: Optional[str] = None
    ):
        """Create an appointment; a separate date/time pair is composed into the start"""
        if not fields.get("start") and date:
            composed = compose(date, time)
            fields = {**fields, "start": encode(composed) if composed else date}

        logger.info(f"📥 Creating appointment for {fields.get('start')}")
        return self._apply(self.controller.create(fields))

    def update_appointment(self, appointment_id: str, partial: dict):
        return self._apply(self.controller.edit(appointment_id, partial))

    def complete_appointment(self, appointment_id: str):
        return self._apply(self.controller.complete(appointment_id))

    def uncomplete_appointment(self, appointment_id: str):
        return self._apply(self.controller.uncomplete(appointment_id))

    def cancel_appointment(self, appointment_id: str):
        return self._apply(self.controller.cancel(appointment_id))

    def delete_appointment(self, appointment_id: str) -> dict:
        try:
            result = self.controller.delete(appointment_id)
        except StoreFailure as e:
            self._apply(TransitionResult(None, e.intents))
            raise
        self._apply(result)
        return {"message": "Appointment deleted"}

    def set_payment(
        self,
        appointment_id: str,
        payment: str,
        amount_paid: Optional[float] = None,
        amount: Optional[float] = None,
    ):
        return self._apply(
            self.controller.set_payment(appointment_id, payment, amount_paid, amount)
        )

    def check_conflict(
        self, start: str, end: Optional[str] = None, exclude_id: Optional[str] = None
    ):
        """Return the appointment occupying the slot, or None if it is free

        Raises:
            ValidationError: If no usable start was given
        """
        start_dt = parse_local(start)
        if start_dt is None:
            raise ValidationError("Please select a date")
        return self.controller.find_conflict(start_dt, parse_local(end), exclude_id)

    def is_overdue(self, record) -> bool:
        return is_overdue(record, self.clock.now())

    def list_appointments(
        self,
        status_filter: StatusFilter = StatusFilter.ALL,
        priority_filter: str = ALL_PRIORITIES,
        query: Optional[str] = None,
    ) -> dict:
        """Filtered, sorted appointments, cut to the current reveal window"""
        if self.reveal.sync(status_filter, priority_filter, query):
            logger.debug(f"Reveal window reset to {self.reveal.count}")

        records = self.store.search(KIND_APPOINTMENTS, query)
        results = triage(records, status_filter, priority_filter, self.clock.now())
        visible = self.reveal.visible(results)

        return {
            "appointments": visible,
            "total": len(results),
            "shown": len(visible),
            "remaining": self.reveal.remaining(results),
            "has_more": self.reveal.has_more(results),
        }

    def show_more(self) -> int:
        return self.reveal.show_more()
