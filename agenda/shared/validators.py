"""Shared validation utilities"""

import re
from typing import Optional

from ..domain.scheduling.timecodec import decode, encode


def validate_canonical_timestamp(value: Optional[str]) -> Optional[str]:
    """
    Validate a local timestamp and return it in canonical form.

    Args:
        value: "YYYY-MM-DD" with an optional "HH:MM[:SS[.mmm]]" time part

    Returns:
        "YYYY-MM-DDTHH:MM:SS.mmm", or None when no value was given

    Raises:
        ValueError: If the date or time cannot be read
    """
    if value is None:
        return value

    fields = decode(value)
    if not fields:
        raise ValueError("Invalid date/time, expected YYYY-MM-DD[THH:MM[:SS]]")
    return encode(fields)


def validate_minute_offsets(offsets: list[int]) -> list[int]:
    """
    Validate reminder offsets (minutes before start).

    Returns:
        The offsets without duplicates, in their original order

    Raises:
        ValueError: If an offset is negative
    """
    unique = []
    for minutes in offsets:
        if minutes < 0:
            raise ValueError("Reminder offsets cannot be negative")
        if minutes not in unique:
            unique.append(minutes)
    return unique


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to digits with an optional leading "+".

    Raises:
        ValueError: If fewer than 7 digits remain
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if len(digits) < 7:
        raise ValueError("Phone number is too short")

    return f"+{digits}" if phone.strip().startswith("+") else digits
