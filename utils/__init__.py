"""Utility modules."""
from utils.validation import (
    coerce_amount,
    coerce_int,
    validate_positive_amount,
    validate_required_string,
    validate_business_code,
    optional_string,
    parse_date,
)
from utils.date_helpers import (
    get_current_utc,
    utcnow_naive,
    range_start,
    start_of_month,
    month_key,
    month_label,
)

__all__ = [
    "coerce_amount",
    "coerce_int",
    "validate_positive_amount",
    "validate_required_string",
    "validate_business_code",
    "optional_string",
    "parse_date",
    "get_current_utc",
    "utcnow_naive",
    "range_start",
    "start_of_month",
    "month_key",
    "month_label",
]
