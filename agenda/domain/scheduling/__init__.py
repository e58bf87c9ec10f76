"""
Scheduling Domain

This domain handles appointment validation, conflict detection, status and
payment transitions, reminder intents and list triage.

LAYOUT:
- timecodec.py: canonical local timestamps ("YYYY-MM-DDTHH:MM:SS.mmm")
- overlap.py: half-open interval overlap and the default duration policy
- conflicts.py: first active appointment occupying a slot
- statuses.py: status, priority and payment vocabularies
- triage.py: filtering, search and the "active, urgent, soonest" ordering
- reveal.py: the incremental "show more" window
- lifecycle.py: create/edit/complete/uncomplete/cancel/delete/payment
- repository.py: the record store (SQLAlchemy)
- service.py / router.py: API wiring

Reminder delivery lives in services/reminder_service.py; lifecycle
transitions only describe which reminders to schedule or cancel.
"""
