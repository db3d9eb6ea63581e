"""Centralized error handling for CLI operations"""

import json
import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


class CLIError(Exception):
    """Base exception for CLI operations."""

    exit_code = 1

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(message)


class StateFileError(CLIError):
    """The persisted address state could not be read or written."""

    exit_code = 2


class ConfigError(CLIError):
    """Invalid configuration value."""

    exit_code = 3


class RefreshFailedError(CLIError):
    """A forced refresh did not produce a new address."""


def format_error_message(error: Exception, context: Optional[str] = None) -> str:
    """
    Format error message for user display.

    Args:
        error: Exception that occurred
        context: Additional context about operation

    Returns:
        Formatted error message string
    """
    error_types = {
        FileNotFoundError: "File not found",
        json.JSONDecodeError: "Invalid JSON",
        ValueError: "Invalid value",
        PermissionError: "Permission denied",
        TimeoutError: "Operation timeout",
        ConnectionError: "Connection failed",
    }

    if isinstance(error, CLIError):
        error_name = ""
    else:
        error_name = error_types.get(type(error), type(error).__name__)

    parts = [p for p in (context, error_name) if p]
    message = "❌ " + ": ".join(parts) if parts else "❌"

    if str(error):
        message += f" - {error}" if parts else f" {error}"

    return message


def handle_cli_errors(context: str = "") -> Callable[[F], F]:
    """
    Decorator to turn exceptions from a command into a message and exit code.

    Args:
        context: Context string for error messages
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                print("\n⚠️  Operation cancelled by user", file=sys.stderr)
                sys.exit(130)
            except CLIError as e:
                message = format_error_message(e, e.context or context)
                print(message, file=sys.stderr)
                sys.exit(e.exit_code)
            except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
                message = format_error_message(e, context or "State file")
                print(message, file=sys.stderr)
                sys.exit(StateFileError.exit_code)
            except ValueError as e:
                message = format_error_message(e, context or "Validation")
                print(message, file=sys.stderr)
                sys.exit(ConfigError.exit_code)
            except OSError as e:
                message = format_error_message(e, context or "State file")
                print(message, file=sys.stderr)
                sys.exit(StateFileError.exit_code)

        return wrapper  # type: ignore

    return decorator
