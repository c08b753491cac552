class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is the stable identifier sent to clients next to the
    human readable (Vietnamese) message.
    """

    code = "domain_error"
    http_status = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    default_message = "Yêu cầu không hợp lệ"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "invalid_credentials"
    http_status = 401
    default_message = "Sai tài khoản hoặc mật khẩu"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"
    http_status = 403
    default_message = "Bạn không có quyền"


class DailyCapReached(ValidationError):
    """Clock-in refused: the worker already has the daily cap of paid hours."""

    code = "max_hours"
    http_status = 409
    default_message = "Bạn đã đủ 4 giờ làm việc hôm nay!"


class NoActiveShift(ValidationError):
    """Clock-out attempted while no shift is open."""

    code = "no_active_session"
    http_status = 409
    default_message = "Bạn chưa vào ca"


class WorkerNotFound(DomainError):
    code = "user_not_found"
    http_status = 404
    default_message = "Không tìm thấy nhân sự"


class RecordNotFound(DomainError):
    code = "record_not_found"
    http_status = 404
    default_message = "Không tìm thấy bản ghi"


class MalformedTimestamp(DomainError):
    """A stored time value cannot be parsed."""

    code = "malformed_timestamp"
    default_message = "Dữ liệu thời gian không hợp lệ"


class StorageError(Exception):
    """Base exception for persistence failures (not a business rule)."""


class PersistenceWriteFailure(StorageError):
    """The roster document could not be written; nothing was committed."""
