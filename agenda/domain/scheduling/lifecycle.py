"""
Appointment Lifecycle Controller

Drives appointment status (pending / cancelled / completed) and payment
(unpaid / partial / paid) through validate -> conflict check -> persist.

Transitions never talk to the reminder scheduler directly. Each one returns
the reminder intents it implies (ScheduleReminder / CancelReminder) and the
caller dispatches them.

Transitions:
- create:      pending, unpaid unless given; schedule each reminder offset
- edit:        cancel reminders, then schedule the (new) offsets, always
- complete:    pending -> completed, payment becomes paid; cancel reminders
- uncomplete:  completed -> pending, payment becomes unpaid; schedule again
- cancel:      pending -> cancelled, payment untouched; cancel reminders
- delete:      remove the record; cancel reminders
"""

import logging
from dataclasses import dataclass, field as dc_field
from datetime import datetime
from numbers import Real
from typing import Any, Optional, Union

from ...config import DEFAULT_REMINDER_MINUTES
from .conflicts import find_conflict
from .errors import ConflictError, InvariantViolation, StoreFailure, ValidationError
from .overlap import DEFAULT_POLICY, DurationPolicy
from .repository import (
    KIND_APPOINTMENTS,
    KIND_CLIENTS,
    RecordStore,
    normalize_legacy_fields,
    record_fields,
)
from .statuses import (
    PAYMENT_PAID,
    PAYMENT_PARTIAL,
    PAYMENT_UNPAID,
    PAYMENTS,
    PRIORITY_MEDIUM,
    PRIORITY_ORDER,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_PENDING,
    STATUSES,
    field,
    normalized_status,
)
from .timecodec import decode, encode, parse_local, to_datetime

logger = logging.getLogger(__name__)

# Manual status changes; same status is always a no-op
VALID_TRANSITIONS = {
    STATUS_PENDING: [STATUS_COMPLETED, STATUS_CANCELLED],
    STATUS_COMPLETED: [STATUS_PENDING],
    STATUS_CANCELLED: [STATUS_PENDING],
}


@dataclass(frozen=True)
class ScheduleReminder:
    """Ask the reminder scheduler to fire offset_minutes before the record's start"""

    record: Any
    offset_minutes: int

    @property
    def appointment_id(self) -> str:
        return field(self.record, "id")


@dataclass(frozen=True)
class CancelReminder:
    """Ask the reminder scheduler to drop every reminder of an appointment"""

    appointment_id: str


Intent = Union[ScheduleReminder, CancelReminder]


@dataclass
class TransitionResult:
    record: Any
    intents: list = dc_field(default_factory=list)


def validate_status_transition(current_status: str, new_status: str) -> bool:
    if current_status == new_status:
        return True
    return new_status in VALID_TRANSITIONS.get(current_status, [])


def remaining_amount(record) -> Optional[float]:
    """Outstanding balance, derived from amount, amount paid and payment state"""
    amount = field(record, "amount")
    if amount is None:
        return None
    payment = field(record, "payment") or PAYMENT_UNPAID
    if payment == PAYMENT_PAID:
        return 0.0
    if payment == PAYMENT_PARTIAL:
        return float(amount) - float(field(record, "amount_paid") or 0)
    return float(amount)


def _number(name: str, value, allow_negative: bool = False) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a number")
    if not allow_negative and value < 0:
        raise ValidationError(f"{name} cannot be negative")
    return float(value)


def _offsets(value) -> list:
    """Reminder offsets as unique non-negative minutes, first occurrence wins"""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError("Notifications must be a list of minute offsets")

    offsets = []
    for entry in value:
        minutes = entry.get("minutes") if isinstance(entry, dict) else entry
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 0:
            raise ValidationError(f"Invalid notification offset: {entry!r}")
        if minutes not in offsets:
            offsets.append(minutes)
    return offsets


class LifecycleController:
    """State machine for appointment status and payment, over an injected record store"""

    def __init__(
        self,
        store: RecordStore,
        policy: DurationPolicy = DEFAULT_POLICY,
        default_reminder_minutes: Optional[int] = DEFAULT_REMINDER_MINUTES,
    ):
        self.store = store
        self.policy = policy
        self.default_reminder_minutes = default_reminder_minutes

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, fields: dict) -> dict:
        """
        Check and canonicalise a full set of appointment fields.

        Raises:
            ValidationError: missing subject or date, unknown enum value, bad number
            InvariantViolation: profit or amount paid above amount
        """
        cleaned = dict(normalize_legacy_fields(fields))

        self._validate_subject(cleaned)

        start = decode(cleaned.get("start"))
        if not start:
            if not cleaned.get("start"):
                raise ValidationError("Please select a date")
            raise ValidationError(f"Invalid date: {cleaned.get('start')}")
        cleaned["start"] = encode(start)

        raw_end = cleaned.get("end")
        end = decode(raw_end) if raw_end else None
        if raw_end and (not end or to_datetime(end) <= to_datetime(start)):
            logger.warning(f"⚠️ Ignoring end {raw_end!r}: not a valid time after {cleaned['start']}")
            end = None
        cleaned["end"] = encode(end) if end else None

        cleaned["priority"] = cleaned.get("priority") or PRIORITY_MEDIUM
        if cleaned["priority"] not in PRIORITY_ORDER:
            raise ValidationError(f"Unknown priority: {cleaned['priority']}")

        cleaned["status"] = cleaned.get("status") or STATUS_PENDING
        if cleaned["status"] not in STATUSES:
            raise ValidationError(f"Unknown status: {cleaned['status']}")

        cleaned["payment"] = cleaned.get("payment") or PAYMENT_UNPAID
        if cleaned["payment"] not in PAYMENTS:
            raise ValidationError(f"Unknown payment status: {cleaned['payment']}")

        amount = _number("Amount", cleaned.get("amount"))
        amount_paid = _number("Amount paid", cleaned.get("amount_paid")) or 0.0
        profit = _number("Profit", cleaned.get("profit"), allow_negative=True)
        cleaned["amount"], cleaned["amount_paid"], cleaned["profit"] = amount, amount_paid, profit

        if profit is not None and amount is not None and profit > amount:
            raise InvariantViolation("Profit cannot exceed the amount")

        if cleaned["payment"] == PAYMENT_PARTIAL and amount is None:
            raise InvariantViolation("A partial payment needs an amount")
        if amount is not None and amount_paid > amount:
            raise InvariantViolation("Amount paid cannot exceed the amount")

        cleaned["notifications"] = _offsets(cleaned.get("notifications"))
        return cleaned

    def _validate_subject(self, fields: dict) -> None:
        fields["is_standalone"] = bool(fields.get("is_standalone"))

        if fields["is_standalone"]:
            if fields.get("client_id"):
                raise ValidationError(
                    "An appointment has either a client or a standalone subject, not both"
                )
            subject = (fields.get("client_name") or "").strip()
            if not subject:
                raise ValidationError("Standalone appointments need a subject")
            fields["client_id"] = None
            fields["client_name"] = subject
            return

        client_id = fields.get("client_id")
        if not client_id:
            raise ValidationError("Please select a client")
        client = self.store.get_by_id(KIND_CLIENTS, client_id)
        if client is None:
            raise ValidationError(f"Client {client_id} not found")
        fields["client_name"] = field(client, "name")

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------

    def find_conflict(
        self, start: datetime, end: Optional[datetime] = None, exclude_id: Optional[str] = None
    ):
        return find_conflict(
            self.store.get_all(KIND_APPOINTMENTS), start, end, exclude_id, self.policy
        )

    def _ensure_free(self, fields: dict, exclude_id: Optional[str] = None) -> None:
        if fields.get("status", STATUS_PENDING) != STATUS_PENDING:
            return
        start = parse_local(fields.get("start"))
        if start is None:
            return
        conflict = self.find_conflict(start, parse_local(fields.get("end")), exclude_id)
        if conflict is not None:
            conflict_id = field(conflict, "id")
            logger.warning(f"⚠️ Slot {fields['start']} conflicts with appointment {conflict_id}")
            raise ConflictError(
                f"This time overlaps with another appointment ({field(conflict, 'client_name')})",
                conflicting_id=conflict_id,
            )

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def schedule_intents(self, record) -> list:
        offsets = list(field(record, "notifications") or [])
        if not offsets and self.default_reminder_minutes is not None:
            offsets = [self.default_reminder_minutes]
        return [ScheduleReminder(record, minutes) for minutes in offsets]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _get(self, appointment_id: str):
        record = self.store.get_by_id(KIND_APPOINTMENTS, appointment_id)
        if record is None:
            raise StoreFailure(f"Appointment {appointment_id} not found")
        return record

    def _update(self, appointment_id: str, changes: dict):
        record = self.store.update(KIND_APPOINTMENTS, appointment_id, changes)
        if record is None:
            raise StoreFailure(f"Appointment {appointment_id} not found")
        return record

    def create(self, fields: dict) -> TransitionResult:
        cleaned = self.validate(fields)
        self._ensure_free(cleaned)

        record = self.store.add(KIND_APPOINTMENTS, cleaned)
        logger.info(f"✅ Appointment {record.id} created for {cleaned['start']}")
        return TransitionResult(record, self.schedule_intents(record))

    def edit(self, appointment_id: str, partial: dict) -> TransitionResult:
        current = self._get(appointment_id)
        current_fields = record_fields(current)
        old_status = normalized_status(current)

        merged = {**current_fields, **partial}
        new_status = merged.get("status") or STATUS_PENDING
        if "status" in partial and not validate_status_transition(old_status, new_status):
            raise ValidationError(f"Cannot change status from {old_status} to {new_status}")

        # Status changes made through the edit form get the same payment effects
        if new_status != old_status and "payment" not in partial:
            if new_status == STATUS_COMPLETED:
                merged["payment"] = PAYMENT_PAID
            elif old_status == STATUS_COMPLETED:
                merged["payment"] = PAYMENT_UNPAID

        cleaned = self.validate(merged)
        self._ensure_free(cleaned, exclude_id=appointment_id)

        for key in ("id", "created_at", "updated_at"):
            cleaned.pop(key, None)
        record = self._update(appointment_id, cleaned)
        logger.info(f"✅ Appointment {appointment_id} updated")

        # Always cancel-then-schedule, even when the offsets did not change
        intents = [CancelReminder(appointment_id)] + self.schedule_intents(record)
        return TransitionResult(record, intents)

    def complete(self, appointment_id: str) -> TransitionResult:
        current = self._get(appointment_id)
        status = normalized_status(current)
        if status == STATUS_COMPLETED:
            raise ValidationError("Appointment is already completed")
        if not validate_status_transition(status, STATUS_COMPLETED):
            raise ValidationError(f"Cannot complete a {status} appointment")

        record = self._update(
            appointment_id, {"status": STATUS_COMPLETED, "payment": PAYMENT_PAID}
        )
        logger.info(f"✅ Appointment {appointment_id} completed and marked paid")
        return TransitionResult(record, [CancelReminder(appointment_id)])

    def uncomplete(self, appointment_id: str) -> TransitionResult:
        current = self._get(appointment_id)
        if normalized_status(current) != STATUS_COMPLETED:
            raise ValidationError("Only completed appointments can be marked incomplete")

        # Back to pending: the slot has to be free again
        slot = {"status": STATUS_PENDING, "start": current.start, "end": current.end}
        self._ensure_free(slot, exclude_id=appointment_id)

        record = self._update(
            appointment_id, {"status": STATUS_PENDING, "payment": PAYMENT_UNPAID}
        )
        logger.info(f"↩️ Appointment {appointment_id} marked incomplete")
        return TransitionResult(record, self.schedule_intents(record))

    def cancel(self, appointment_id: str) -> TransitionResult:
        current = self._get(appointment_id)
        status = normalized_status(current)
        if status == STATUS_CANCELLED:
            raise ValidationError("Appointment is already cancelled")
        if not validate_status_transition(status, STATUS_CANCELLED):
            raise ValidationError(f"Cannot cancel a {status} appointment")

        record = self._update(appointment_id, {"status": STATUS_CANCELLED})
        logger.info(f"🚫 Appointment {appointment_id} cancelled")
        return TransitionResult(record, [CancelReminder(appointment_id)])

    def delete(self, appointment_id: str) -> TransitionResult:
        if not self.store.delete(KIND_APPOINTMENTS, appointment_id):
            # Stray reminders of a stale id are still dropped
            raise StoreFailure(
                f"Appointment {appointment_id} not found",
                intents=[CancelReminder(appointment_id)],
            )
        logger.info(f"🗑️ Appointment {appointment_id} deleted")
        return TransitionResult(None, [CancelReminder(appointment_id)])

    def set_payment(
        self,
        appointment_id: str,
        payment: str,
        amount_paid: Optional[float] = None,
        amount: Optional[float] = None,
    ) -> TransitionResult:
        """Explicit payment toggle; partial payments carry the amount paid so far"""
        current = self._get(appointment_id)
        merged = {**record_fields(current), "payment": payment}
        if amount is not None:
            merged["amount"] = amount
        if amount_paid is not None:
            merged["amount_paid"] = amount_paid
        elif payment == PAYMENT_PARTIAL and not current.amount_paid:
            raise InvariantViolation("A partial payment needs the amount paid")

        cleaned = self.validate(merged)
        record = self._update(
            appointment_id,
            {k: cleaned[k] for k in ("payment", "amount", "amount_paid")},
        )
        logger.info(f"💰 Appointment {appointment_id} payment set to {payment}")
        return TransitionResult(record, [])
