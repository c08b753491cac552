"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DAILY_CAP_HOURS = Decimal("4.0")
MIN_PAYABLE_HOURS = Decimal("1.0")

DEFAULT_PAY_RATE = Decimal("10714")
DEFAULT_POSITION = "Không có"
DEFAULT_RESET_PASSWORD = "123456"
MIN_PASSWORD_LENGTH = 6

AUDIT_LOG_LIMIT = 50
DEFAULT_SESSION_DAYS = 1
DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"
DEFAULT_SWEEP_INTERVAL_SECONDS = 300

DATE_KEY_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%d/%m/%Y"
DISPLAY_TIME_FORMAT = "%H:%M:%S"
