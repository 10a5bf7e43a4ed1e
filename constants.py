"""Application-wide constants.

The USD -> AED conversion rate is configured in config.Settings; the value
below is only the default used when no override is supplied.
"""

# Currency
DEFAULT_USD_TO_AED_RATE = 3.67
ORIGIN_CURRENCY = "USD"
DESTINATION_CURRENCY = "AED"

# Container statuses
CONTAINER_STATUS_PENDING = "pending"
CONTAINER_STATUS_SHIPPED = "shipped"
CONTAINER_STATUS_COMPLETED = "completed"

CONTAINER_STATUSES = [
    CONTAINER_STATUS_PENDING,
    CONTAINER_STATUS_SHIPPED,
    CONTAINER_STATUS_COMPLETED,
]

# User roles
ROLE_MANAGER = "manager"
ROLE_USER = "user"

# Transfer types
TRANSFER_BANK = "bank"
TRANSFER_CASH = "cash"
TRANSFER_HAND = "hand"

# Expense categories
EXPENSE_PORT = "port"
EXPENSE_AREA_RENT = "area_rent"
EXPENSE_LABOR_TIPS = "labor_tips"
EXPENSE_OVER_EXPEND = "over_expend"

# Document types
DOCUMENT_PURCHASE = "purchase"
DOCUMENT_TRANSFER = "transfer"
DOCUMENT_SALE = "sale"

# Report ranges
RANGE_WEEK = "week"
RANGE_MONTH = "month"
RANGE_QUARTER = "quarter"
RANGE_YEAR = "year"

REPORT_RANGES = [RANGE_WEEK, RANGE_MONTH, RANGE_QUARTER, RANGE_YEAR]

# Date formats
DATE_FORMAT_ISO = "%Y-%m-%d"
DATETIME_FORMAT_ISO = "%Y-%m-%dT%H:%M:%S"
MONTH_KEY_FORMAT = "%Y-%m"
MONTH_LABEL_FORMAT = "%b %y"

# Validation limits
MAX_BUSINESS_CODE_LENGTH = 50
MAX_CITY_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_COMPANY_NAME_LENGTH = 255
MAX_SENDER_NAME_LENGTH = 255
DEFAULT_VENDOR_COUNTRY = "USA"

# Pagination defaults
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
