"""
Exception types for the state tree engine.

Fatal errors are raised. Non-fatal ones are constructed and handed to
report(), which logs them and lets the operation continue as a no-op.
"""

import logging
from typing import Optional, Union


class StateTreeError(Exception):
    """Base class for all engine errors."""
    pass


class InvariantError(StateTreeError):
    """Raised when a mandatory engine assertion fails."""
    pass


class ValidationError(StateTreeError):
    """Raised when a raw module definition has a malformed handler value."""
    pass


class UnknownTypeError(StateTreeError):
    """Reported when a commit or dispatch names a type with no handler."""
    pass


class UnknownModuleError(StateTreeError, KeyError):
    """Raised when a module path does not resolve to a registered module."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class DuplicateNamespaceError(StateTreeError):
    """Reported when two modules derive the same namespace."""
    pass


class DuplicateGetterError(StateTreeError):
    """Reported when a qualified getter type is registered twice."""
    pass


class SubscriberError(StateTreeError):
    """Reported when a mutation or action subscriber raises."""
    pass


class StrictModeViolation(InvariantError):
    """Raised when state changes outside a commit while strict mode is on."""
    pass


class HotUpdateMismatch(StateTreeError):
    """Reported when a hot update names a module absent from the live tree."""
    pass


def report(
    logger: Union[logging.Logger, logging.LoggerAdapter],
    err: StateTreeError,
    level: int = logging.ERROR,
    cause: Optional[BaseException] = None,
) -> None:
    """
    Log a non-fatal engine error.

    Args:
        logger: Logger or adapter to write to
        err: The error being reported (not raised)
        level: Log level (ERROR by default, WARNING for soft conflicts)
        cause: Original exception whose traceback should be attached
    """
    exc_info = (type(cause), cause, cause.__traceback__) if cause is not None else None
    logger.log(
        level,
        "[statetree] %s",
        err,
        exc_info=exc_info,
        extra={"error_type": type(err).__name__},
    )


def assert_that(condition: bool, msg: str) -> None:
    """Raise InvariantError with the engine prefix unless condition holds."""
    if not condition:
        raise InvariantError(f"[statetree] {msg}")
