"""
Centralized error handling utilities.

1. **Custom Exceptions** - Typed, user-friendly error classes (see base, config, transport modules)
2. **Error Context** - Preserve technical details for logging, show friendly messages to users
3. **Error Isolation** - One failing panel shouldn't cascade to the others

### Handling Patterns

| Pattern | Code |
|---------|------|
| Try multiple ops, collect errors | `collector = collect_errors("turn off panels"); with collector.try_operation(...): ...` |
| Log a failure with context, then re-raise | `with ErrorContext(f"open transport for panel {panel.id}", log): ...` |
| Pydantic -> config error | `raise wrap_pydantic_error(e, str(path)) from e` |
"""

import logging
from typing import Optional

from .base import LedGridError
from .config import ConfigFileInvalidError, ConfigValidationError


logger = logging.getLogger(__name__)


class ErrorContext:
    """
    Log a failure of the wrapped block as "Failed to <operation>", then let it propagate.

    ledgrid errors are logged with their technical message; anything else
    is logged with its traceback.
    """

    def __init__(self, operation: str, logger_instance: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger_instance or logger

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            return False
        if isinstance(exc_val, LedGridError):
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)
        return False


def wrap_pydantic_error(error: Exception, file_path: str) -> LedGridError:
    """
    Turn a pydantic failure on a config or layout file into a ledgrid error.

    Malformed JSON becomes ConfigFileInvalidError; schema problems become
    ConfigValidationError naming the offending field (or listing all of them).
    """
    from pydantic import ValidationError

    text = str(error)
    if "Invalid JSON" in text or "json_invalid" in text:
        # pydantic renders "Invalid JSON: <parser message> [type=json_invalid, ..."
        detail = text.split("Invalid JSON:", 1)[-1].split("[type=")[0].strip()
        return ConfigFileInvalidError(file_path, detail)

    problems = error.errors() if isinstance(error, ValidationError) else []
    if len(problems) == 1:
        problem = problems[0]
        return ConfigValidationError(
            field=_field_name(problem),
            value=problem.get("input"),
            error_msg=problem.get("msg", "validation failed"),
            file_path=file_path,
        )
    if problems:
        listing = "\n".join(
            f"  - {_field_name(p)}: {p.get('msg', 'validation failed')}" for p in problems
        )
        return ConfigValidationError(
            field="multiple fields",
            value=None,
            error_msg=f"{len(problems)} validation errors:\n{listing}",
            file_path=file_path,
        )
    return ConfigValidationError(field="unknown", value=None, error_msg=text, file_path=file_path)


def _field_name(problem: dict) -> str:
    return ".".join(str(part) for part in problem.get("loc", ("unknown",)))


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, LedGridError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None


def collect_errors(operation: str) -> "ErrorCollector":
    """
    Start a batch where each step may fail without stopping the rest.

    Example:
        ```python
        collector = collect_errors("turn off panels")
        for panel, transport in zip(panels, transports):
            with collector.try_operation(f"turn off {panel.id}"):
                transport.turn_off()
        if collector.has_errors:
            log.error(collector.get_summary())
        ```
    """
    return ErrorCollector(operation)


class ErrorCollector:
    """Records the outcome of each step of a batch operation."""

    def __init__(self, operation: str):
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def try_operation(self, step: str) -> "_Step":
        """Context manager for one step; an exception is recorded and swallowed."""
        return _Step(self, step)

    def get_summary(self) -> str:
        """One line per failed step, headed by the failure count."""
        total = self.error_count + self.success_count
        if not self.errors:
            return f"All operations completed successfully ({total} total)"

        lines = [f"Failed {self.error_count} of {total} operations:"]
        for step, error in self.errors:
            message = error.user_message if isinstance(error, LedGridError) else str(error)
            lines.append(f"  - {step}: {message}")
        return "\n".join(lines)


class _Step:
    def __init__(self, collector: ErrorCollector, name: str):
        self.collector = collector
        self.name = name

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            self.collector.success_count += 1
            return False
        if not isinstance(exc_val, Exception):
            return False
        self.collector.errors.append((self.name, exc_val))
        return True
