# =============================================================================
# Error Handling Types (Result + ErrorReport)
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar('T')


class ErrorType(Enum):
    USAGE_ERROR = "usage_error"
    VALIDATION_ERROR = "validation_error"
    STORAGE_ERROR = "storage_error"
    EXTERNAL_TOOL_ERROR = "external_tool_error"
    READ_ERROR = "read_error"
    PARSE_ERROR = "parse_error"


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception = None
    # One-line corrective usage shown under the message
    example: str | None = None

    @property
    def exit_code(self) -> int:
        """Process exit status for this error (tool failures mirror the tool)."""
        if self.error_type is ErrorType.EXTERNAL_TOOL_ERROR:
            returncode = self.context.get("returncode")
            if isinstance(returncode, int) and returncode > 0:
                return returncode
            if isinstance(returncode, int) and returncode < 0:
                # Killed by a signal: shell convention 128 + signum
                return 128 - returncode
        return 1


@dataclass
class Result(Generic[T]):
    success: bool
    value: T = None
    error: Error = None

    @staticmethod
    def ok(value: T = None) -> 'Result[T]':
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error) -> 'Result[T]':
        return Result(success=False, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success


def usage_error(message: str, example: str | None = None, **context) -> Result:
    return Result.err(Error(
        error_type=ErrorType.USAGE_ERROR,
        message=message,
        context=context,
        example=example,
    ))


def tool_error(message: str, returncode: int, **context) -> Result:
    return Result.err(Error(
        error_type=ErrorType.EXTERNAL_TOOL_ERROR,
        message=message,
        context={"returncode": returncode, **context},
    ))


@dataclass
class ErrorReport:
    errors: list[Error] = field(default_factory=list)

    def add_error(self, error: Error):
        self.errors.append(error)
        # bind() instead of kwargs: messages carry user paths that may contain braces
        logger.bind(
            operation="error_report",
            status="error",
            error_type=error.error_type.value,
            **error.context
        ).error(error.message)

    def log_summary(self, op_trace_id: str):
        logger.info(
            "Operation complete",
            operation="error_report",
            status="complete",
            trace_id=op_trace_id,
            metrics={
                "total_errors": len(self.errors)
            }
        )
