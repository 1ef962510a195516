"""
Standard exit codes and error types for filang.

Following Unix/POSIX conventions for command-line tools. Each error a
statement can raise carries the exit code the CLI reports for it.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
SYNTAX_ERROR = 64        # Line matches no statement shape
PATH_NOT_FOUND = 65      # Referenced file or directory is absent
PERMISSION_ERROR = 67    # Insufficient permissions
DATA_ERROR = 70          # Data format or validation error
PARTIAL_SUCCESS = 71     # Some operations succeeded, some failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': PATH_NOT_FOUND,
    'NotADirectoryError': PATH_NOT_FOUND,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}

def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exit_code = getattr(exc, 'exit_code', None)
    if isinstance(exit_code, int):
        return exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)

class CommandError(Exception):
    """
    Exception that statements can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

class DslSyntaxError(CommandError):
    """Raised when a line matches no statement shape."""
    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, SYNTAX_ERROR)
        self.suggestion = suggestion

class PathNotFoundError(CommandError):
    """Raised when a referenced directory or file does not exist."""
    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Path does not exist: {path}", PATH_NOT_FOUND)
        self.path = path

class ConditionError(CommandError):
    """Raised when a single WHERE condition cannot be evaluated.

    Never escapes the evaluator: it is logged and the condition counts
    as not satisfied.
    """
    def __init__(self, condition: str, reason: str):
        super().__init__(f"Condition '{condition}' failed: {reason}", DATA_ERROR)
        self.condition = condition
        self.reason = reason

class UnknownSortFieldError(CommandError):
    """Raised when ORDER BY names an attribute records do not have."""
    def __init__(self, field_name: str, suggestion: Optional[str] = None):
        message = f"Unknown ORDER BY field: {field_name}"
        if suggestion:
            message += f" (did you mean '{suggestion}'?)"
        super().__init__(message, DATA_ERROR)
        self.field_name = field_name
        self.suggestion = suggestion

class PartialSuccessError(CommandError):
    """Raised when some statements succeed and some fail."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
