"""Status, priority and payment vocabularies shared by the scheduling engine"""

STATUS_PENDING = "pending"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
STATUSES = (STATUS_PENDING, STATUS_CANCELLED, STATUS_COMPLETED)

# Historical records: exempt from conflicts, sorted after active ones
INACTIVE_STATUSES = frozenset({STATUS_CANCELLED, STATUS_COMPLETED})

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
PRIORITY_ORDER = {PRIORITY_HIGH: 0, PRIORITY_MEDIUM: 1, PRIORITY_LOW: 2}
UNKNOWN_PRIORITY_RANK = 999

PAYMENT_UNPAID = "unpaid"
PAYMENT_PARTIAL = "partial"
PAYMENT_PAID = "paid"
PAYMENTS = (PAYMENT_UNPAID, PAYMENT_PARTIAL, PAYMENT_PAID)


def field(record, name, default=None):
    """Read a field from an ORM object or a plain dict"""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def normalized_status(record) -> str:
    """
    Status enum for a record, folding in the legacy boolean ``completed`` flag.

    Records written before the status enum existed carry ``completed=True``
    and no status; both shapes read as "completed".
    """
    if field(record, "completed") is True:
        return STATUS_COMPLETED
    return field(record, "status") or STATUS_PENDING


def is_active(record) -> bool:
    return normalized_status(record) not in INACTIVE_STATUSES


def priority_rank(priority) -> int:
    return PRIORITY_ORDER.get(priority, UNKNOWN_PRIORITY_RANK)
