"""Custom exception hierarchy for cmdclient.

Provides precise error classification for the command registry and its
configuration, so integrators can catch the whole family or a single
failure. Prefix resolution and lookup misses are normal control flow
and never raise.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for caller decisions."""
    PERMANENT = "permanent"          # Caller error, retrying the same call fails again
    INFRASTRUCTURE = "infrastructure"  # Environment or configuration issues


class CommandClientError(Exception):
    """Base exception for all cmdclient errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification.
        module: Originating module name (e.g. "registry").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


# ---------------------------------------------------------------------------
# Registry exceptions
# ---------------------------------------------------------------------------

class RegistryError(CommandClientError):
    """Error raised by a command registry mutation.

    The registry is left unchanged whenever one of these is raised.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message, category=category, module=module or "registry", **context
        )


class InvalidIndexError(RegistryError, IndexError):
    """Insert position outside ``[0, size]``.

    Attributes:
        index: The rejected position.
        size: Registry size at the time of the call.
    """

    def __init__(self, index: int, size: int, **context: Any) -> None:
        self.index = index
        self.size = size
        super().__init__(
            f"Index specified is invalid: [{index}/{size}]", **context
        )


class DuplicateKeyError(RegistryError, ValueError):
    """A command name or alias is already indexed.

    Attributes:
        key: The colliding lowercased name or alias.
    """

    def __init__(self, key: str, **context: Any) -> None:
        self.key = key
        super().__init__(
            f'Command added has a name or alias that has already been indexed: "{key}"',
            **context,
        )


class CommandNotFoundError(RegistryError, LookupError):
    """Remove was called with a name or alias that is not indexed."""

    def __init__(self, key: str, **context: Any) -> None:
        self.key = key
        super().__init__(f'Name provided is not indexed: "{key}"', **context)


# ---------------------------------------------------------------------------
# Configuration exceptions
# ---------------------------------------------------------------------------

class ConfigurationError(CommandClientError):
    """Invalid or missing configuration.

    Defaults to INFRASTRUCTURE because config issues are environmental
    and won't resolve by retrying.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )
