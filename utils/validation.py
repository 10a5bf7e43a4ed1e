"""Validation and coercion utilities for ledger input."""
import math
from datetime import date, datetime
from typing import Any, Optional

from exceptions import InvalidInputError
from constants import DATE_FORMAT_ISO, MAX_BUSINESS_CODE_LENGTH


def coerce_amount(value: Any, field_name: str = "Amount") -> float:
    """
    Coerce a loosely typed numeric field to float.

    Absent values (None, empty string) default to 0. Strings are parsed.

    Args:
        value: Raw value from the client
        field_name: Name of field for error message

    Returns:
        Float value

    Raises:
        InvalidInputError: If the value is present but not numeric
    """
    if value is None:
        return 0.0

    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}")

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0

    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}") from e

    if math.isnan(result) or math.isinf(result):
        raise InvalidInputError(f"{field_name} must be a finite number, got {value!r}")

    return result


def coerce_int(value: Any, field_name: str = "Number") -> int:
    """
    Coerce a loosely typed integer field, defaulting absent values to 0.

    Raises:
        InvalidInputError: If the value is present but not an integer
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0

    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be an integer, got {value!r}")

    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidInputError(f"{field_name} must be an integer, got {value!r}")
        return int(value)

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass

    # "3.0" is accepted the same way 3.0 is
    try:
        number = float(text)
    except ValueError as e:
        raise InvalidInputError(f"{field_name} must be an integer, got {value!r}") from e
    if not number.is_integer():
        raise InvalidInputError(f"{field_name} must be an integer, got {value!r}")
    return int(number)


def validate_positive_amount(
    amount: Any,
    field_name: str = "Amount",
    allow_zero: bool = False
) -> float:
    """
    Validate that amount is positive (and optionally non-zero).

    Args:
        amount: Amount to validate
        field_name: Name of field for error message
        allow_zero: Whether to allow zero values

    Returns:
        Validated amount

    Raises:
        InvalidInputError: If amount is invalid
    """
    if amount is None:
        raise InvalidInputError(f"{field_name} is required")

    value = coerce_amount(amount, field_name)

    if allow_zero:
        if value < 0:
            raise InvalidInputError(f"{field_name} must be non-negative, got {value}")
    else:
        if value <= 0:
            raise InvalidInputError(f"{field_name} must be positive, got {value}")

    return value


def validate_required_string(
    value: Optional[str],
    field_name: str,
    max_length: Optional[int] = None
) -> str:
    """
    Validate required string field.

    Args:
        value: String value to validate
        field_name: Name of field for error message
        max_length: Maximum allowed length

    Returns:
        Validated string (stripped)

    Raises:
        InvalidInputError: If string is invalid
    """
    if value is None:
        raise InvalidInputError(f"{field_name} is required")

    if not isinstance(value, str):
        raise InvalidInputError(f"{field_name} must be a string, got {type(value).__name__}")

    stripped = value.strip()

    if not stripped:
        raise InvalidInputError(f"{field_name} cannot be empty or whitespace")

    if max_length and len(stripped) > max_length:
        raise InvalidInputError(
            f"{field_name} must be at most {max_length} characters, "
            f"got {len(stripped)}"
        )

    return stripped


def validate_business_code(container_code: Optional[str]) -> str:
    """Validate a user-chosen container code (trimmed, non-empty, bounded)."""
    return validate_required_string(container_code, "Container code", MAX_BUSINESS_CODE_LENGTH)


def optional_string(value: Any, max_length: Optional[int] = None) -> str:
    """Normalize an optional free-text field to a stripped string."""
    if value is None:
        return ""
    text = str(value).strip()
    if max_length:
        text = text[:max_length]
    return text


def parse_date(value: Any, field_name: str = "Date", default: Optional[date] = None) -> date:
    """
    Parse a date from a date, datetime or ISO string.

    Args:
        value: Raw value
        field_name: Name of field for error message
        default: Returned when value is absent; absent with no default is an error

    Returns:
        Parsed date

    Raises:
        InvalidInputError: If the value cannot be parsed
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is not None:
            return default
        raise InvalidInputError(f"{field_name} is required")

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return datetime.strptime(text[:10], DATE_FORMAT_ISO).date()
    except ValueError as e:
        raise InvalidInputError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}") from e
