"""Error Hierarchy — one exception family for every chainlab failure mode.

Invariants:
    - Each concrete error declares code, category, severity and http_status as class attributes
    - 4xx errors are caller mistakes (ERROR severity); 5xx errors are CRITICAL
    - to_response() is the REST envelope, to_tool_result() what the agent model sees
    - ErrorContext.debug_info is for logs only and never appears in either envelope

Design Decisions:
    - Class-level metadata instead of constructor arguments: a subclass is fully described
      by its declaration, and the base __init__ stays (message, context)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    QUOTA = "quota"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Request-scoped details attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    tool_name: str | None = None
    store_name: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None

    def public_fields(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "tool_name": self.tool_name,
            "store_name": self.store_name,
            "retry_after_ms": self.retry_after_ms,
        }


class ChainlabError(Exception):
    """Base exception. Subclasses override the class attributes below."""

    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.CRITICAL
    http_status = 500

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": self.context.public_fields(),
            }
        }

    def to_tool_result(self) -> dict:
        return {
            "status": "error",
            "error_code": self.code,
            "message": self.context.user_message or self.message,
        }


class _ClientError(ChainlabError):
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.ERROR
    http_status = 400


# ─── 4xx ─────────────────────────────────────────────────────────

class InvalidInputError(_ClientError):
    """Request or tool input failed validation."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.field = field


class QueryError(_ClientError):
    """Mini-SQL statement could not be parsed or executed."""
    code = "INVALID_QUERY"

    def __init__(self, message: str, sql: str | None = None, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.sql = sql


class DimensionMismatchError(_ClientError):
    code = "DIMENSION_MISMATCH"

    def __init__(self, expected: int, actual: int, context: ErrorContext | None = None):
        super().__init__(
            f"Embedding dimension mismatch: index has {expected}, got {actual}", context,
        )
        self.expected = expected
        self.actual = actual


class DocumentExtractionError(_ClientError):
    """Uploaded document could not be turned into text."""
    code = "DOCUMENT_EXTRACTION_FAILED"

    def __init__(
        self, message: str, filename: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(message, context)
        self.filename = filename


class ResourceNotFoundError(_ClientError):
    code = "RESOURCE_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(f"{resource_type} '{resource_id}' not found", context)


class QuotaExceededError(_ClientError):
    """LLM provider rejected the call for billing or quota reasons."""
    code = "QUOTA_EXCEEDED"
    category = ErrorCategory.QUOTA
    http_status = 402

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(f"LLM quota exhausted: {message}", context)


# ─── 5xx ─────────────────────────────────────────────────────────

class DatabaseError(ChainlabError):
    code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    http_status = 503

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(f"Database {operation} failed: {message}", context)
        self.operation = operation


class AnthropicAPIError(ChainlabError):
    code = "ANTHROPIC_API_ERROR"
    category = ErrorCategory.EXTERNAL_API
    http_status = 503

    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(f"Anthropic API error ({api_error_type}): {message}", ctx)
        self.api_error_type = api_error_type


class WeatherAPIError(ChainlabError):
    """QWeather returned a non-200 code or could not be reached."""
    code = "WEATHER_API_ERROR"
    category = ErrorCategory.EXTERNAL_API
    severity = ErrorSeverity.ERROR
    http_status = 502

    def __init__(
        self, message: str, provider_code: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(f"Weather API error: {message}", context)
        self.provider_code = provider_code


class AgentLoopExceededError(ChainlabError):
    code = "AGENT_LOOP_EXCEEDED"

    def __init__(self, max_iterations: int, context: ErrorContext | None = None):
        super().__init__(
            f"Agent exceeded maximum iteration limit ({max_iterations})", context,
        )
        self.max_iterations = max_iterations


class WebSearchError(ChainlabError):
    """Serper search failed, was rejected, or is not configured."""
    code = "WEB_SEARCH_ERROR"
    category = ErrorCategory.EXTERNAL_API
    severity = ErrorSeverity.ERROR
    http_status = 502

    def __init__(
        self, message: str, status_code: int | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(f"Web search error: {message}", context)
        self.status_code = status_code
