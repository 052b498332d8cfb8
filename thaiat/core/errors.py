"""Error Hierarchy — typed, categorized exceptions for every Thai At failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are caller mistakes; oracle/storage errors are 5xx
    - to_response() produces the REST envelope used by the global handler
    - user_message (Vietnamese) is what the form shows; message is for logs

Design Decisions:
    - Single hierarchy with ThaiAtError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability data without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class ThaiAtError(Exception):
    """Base exception for all Thai At errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidDateError(ThaiAtError):
    """Date text is not a real YYYY-MM-DD calendar date."""
    def __init__(self, text: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or (
            f"Ngày sinh không hợp lệ: '{text}' (định dạng YYYY-MM-DD)."
        )
        super().__init__(
            f"Invalid date '{text}': {reason}",
            "INVALID_DATE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.text = text
        self.reason = reason


class InvalidBirthHourError(ThaiAtError):
    """Birth hour label does not name one of the twelve branch slots."""
    def __init__(self, label: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or f"Giờ sinh không hợp lệ: '{label}'."
        super().__init__(
            f"Unknown birth hour slot '{label}'",
            "INVALID_BIRTH_HOUR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.label = label


class AdminAuthError(ThaiAtError):
    """Admin token missing or wrong."""
    def __init__(self, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Mật khẩu quản trị không đúng."
        super().__init__(
            "Admin token rejected",
            "ADMIN_AUTH_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, ctx, 401,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class MissingAPIKeyError(ThaiAtError):
    """No oracle API key configured."""
    def __init__(self, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or (
            "API Key is missing. Hãy cấu hình ANTHROPIC_API_KEY trong file .env."
        )
        super().__init__(
            "API Key is missing.",
            "API_KEY_MISSING", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, ctx, 503,
        )


class OracleAPIError(ThaiAtError):
    """Generative-text oracle call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        ctx.user_message = ctx.user_message or _ORACLE_USER_MESSAGES.get(
            api_error_type, _ORACLE_DEFAULT_MESSAGE,
        )
        super().__init__(
            f"Oracle API error ({api_error_type}): {message}",
            "ORACLE_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type


_ORACLE_DEFAULT_MESSAGE = "Có lỗi xảy ra khi kết nối với thiên cơ."
_ORACLE_USER_MESSAGES = {
    "bad_request": (
        "Lỗi Dữ Liệu (400): Yêu cầu không hợp lệ. "
        "Vui lòng kiểm tra lại thông tin."
    ),
    "permission": (
        "Lỗi Quyền Truy Cập (403): API Key không hợp lệ hoặc bị từ chối."
    ),
    "rate_limit": (
        "Lỗi Quá Tải (429): Hệ thống đang bận, vui lòng chờ vài giây rồi thử lại."
    ),
    "connection_error": "Mất kết nối với thiên cơ.",
    "timeout": "Mất kết nối với thiên cơ.",
}


class EmptyOracleResponseError(ThaiAtError):
    """Oracle answered without the structured reading."""
    def __init__(self, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Không nhận được phản hồi từ thiên cơ."
        super().__init__(
            "Oracle response contained no reading",
            "ORACLE_EMPTY_RESPONSE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )


class OracleResponseInvalidError(ThaiAtError):
    """Oracle returned a reading that does not match the schema."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or "Thiên cơ trả lời không trọn vẹn, hãy thử lại."
        super().__init__(
            f"Oracle reading failed validation: {message}",
            "ORACLE_INVALID_RESPONSE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )


class DatabaseError(ThaiAtError):
    """Local database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
