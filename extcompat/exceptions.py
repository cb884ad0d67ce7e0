"""extcompat — Exception hierarchy.

The compatibility pipeline itself never raises for expected conditions
(inactive module, missing symbol, signature drift); those collapse to an
absent result.  The exceptions below cover programming errors, strict
helper APIs and tooling.

Hierarchy:
    ExtCompatError
    ├── SymbolTokenError
    ├── TypeLookupError
    ├── ProviderError
    └── ConfigError
"""

from __future__ import annotations

from typing import Any


class ExtCompatError(Exception):
    """Base exception for all extcompat errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


class SymbolTokenError(ExtCompatError):
    """A ``"Owner:method"`` token could not be split into owner and method."""

    def __init__(self, token: str | None, reason: str) -> None:
        super().__init__(
            f"Invalid symbol token {token!r}: {reason}",
            context={"token": token, "reason": reason},
        )
        self.token = token


class TypeLookupError(ExtCompatError):
    """A type name did not resolve to a class in the running process."""

    def __init__(self, type_name: str) -> None:
        super().__init__(
            f"Type '{type_name}' is not loaded",
            context={"type_name": type_name},
        )
        self.type_name = type_name


class ProviderError(ExtCompatError):
    """A module provider failed to produce a snapshot."""

    def __init__(self, provider: str, cause: Exception) -> None:
        super().__init__(
            f"Module provider '{provider}' failed: {cause}",
            context={"provider": provider, "cause": str(cause)},
        )
        self.cause = cause


class ConfigError(ExtCompatError):
    """A configuration file could not be read or validated."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Invalid configuration in '{path}': {reason}",
            context={"path": path, "reason": reason},
        )
        self.path = path
