"""
Common validation utilities for the clinic services.

Each helper either returns the cleaned value or raises
``ValidationError`` naming the offending field, so services can turn the
failure into a user-facing message before touching the store.
"""

import logging
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from clinica.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")
TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def require_text(value: Any, field_name: str) -> str:
    """Validate that a required text field is present and not blank."""
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise ValidationError(f"{field_name} is required", field_name)
    return str(value).strip()


def validate_email(value: Any, field_name: str = "email") -> str:
    email = require_text(value, field_name)
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("Invalid email format", field_name)
    return email.lower()


def parse_date(value: Any, field_name: str = "date") -> date:
    """Accept a ``date`` or a ``dd/mm/yyyy`` / ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = require_text(value, field_name)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError("Selected date is not valid.", field_name)


def parse_time(value: Any, field_name: str = "time") -> time:
    """Accept a ``time`` or an ``HH:MM`` string."""
    if isinstance(value, datetime):
        return value.time().replace(second=0, microsecond=0)
    if isinstance(value, time):
        return value
    text = require_text(value, field_name)
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValidationError("Selected time is not valid.", field_name)


def parse_amount(
    value: Any, field_name: str = "amount", min_value: Optional[Decimal] = Decimal("0")
) -> Decimal:
    """Convert a money amount to ``Decimal`` (accepts ``1234,56`` style input)."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            if isinstance(value, str):
                value = value.strip().replace(" ", "")
                if "," in value and "." in value:
                    value = value.replace(",", "")
                elif "," in value:
                    value = value.replace(",", ".")
            amount = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Amount must be a number", field_name)

    if not amount.is_finite():
        raise ValidationError("Amount must be a number", field_name)
    if min_value is not None and amount < min_value:
        raise ValidationError(f"{field_name} cannot be negative", field_name)
    return amount


def parse_non_negative_int(value: Any, field_name: str) -> int:
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number", field_name)
    if int_value < 0:
        raise ValidationError(f"{field_name} cannot be negative", field_name)
    return int_value
