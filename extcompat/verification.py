"""Signature verification.

A resolved handle is only trusted once its parameter shape matches what the
caller's invocation code assumes.  Matching is exact and positional: same
count, and at every position the same type (``==``, no subclass leniency),
after ``Ref[T]`` / ``Annotated[T, ...]`` wrappers are reduced to ``T``.

Diagnostics are advisory.  They are composed only when the caller asks for
them and go to a *sink*, any ``Callable[[str], None]``; the default sink
logs through structlog.  Nothing a sink does can change a result.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from extcompat.logging import get_logger
from extcompat.registry import ModuleRegistry
from extcompat.resolution.descriptors import ResolvedHandle
from extcompat.resolution.types import normalize_parameter_type, type_name

log = get_logger(__name__)

DiagnosticSink = Callable[[str], None]

DEFAULT_PREFIX = "Failed to support an extension"


def log_sink(message: str) -> None:
    """Default diagnostic sink."""
    log.error("compatibility_check_failed", detail=message)


def as_type_sequence(expected_types: Any) -> tuple[Any, ...] | None:
    """Return *expected_types* as a tuple, or None if it is not a sequence of types."""
    if expected_types is None or isinstance(expected_types, (str, bytes)):
        return None
    try:
        return tuple(expected_types)
    except TypeError:
        return None


class FailureKind(str, Enum):
    """Why a module/symbol pair could not be used."""

    MODULE_NOT_ACTIVE = "module_not_active"
    SYMBOL_NOT_FOUND = "symbol_not_found"
    SIGNATURE_LENGTH_MISMATCH = "signature_length_mismatch"
    SIGNATURE_POSITION_MISMATCH = "signature_position_mismatch"
    INVALID_EXPECTED_SIGNATURE = "invalid_expected_signature"


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of comparing a handle's parameters with an expected signature.

    ``reason is None`` means consistent.  ``mismatch_index`` is 1-based and
    only set for positional mismatches.
    """

    reason: FailureKind | None = None
    expected_count: int = 0
    actual_count: int = 0
    mismatch_index: int | None = None
    actual_type: Any = None
    expected_type: Any = None

    @property
    def is_consistent(self) -> bool:
        return self.reason is None

    def describe(self, method_label: str) -> str:
        """Diagnostic body (without the module prefix)."""
        if self.reason is FailureKind.SIGNATURE_LENGTH_MISMATCH:
            return (
                f"Inconsistent number of parameters for method '{method_label}' "
                f"(expected {self.expected_count}, found {self.actual_count})"
            )
        if self.reason is FailureKind.SIGNATURE_POSITION_MISMATCH:
            return (
                f"Inconsistent parameter {self.mismatch_index} for method '{method_label}'"
                f"\n    {type_name(self.actual_type)} != {type_name(self.expected_type)}"
            )
        if self.reason is FailureKind.SYMBOL_NOT_FOUND:
            return f"Couldn't get method {method_label}!"
        if self.reason is FailureKind.INVALID_EXPECTED_SIGNATURE:
            return f"Expected signature for method '{method_label}' is not a sequence of types"
        if self.reason is FailureKind.MODULE_NOT_ACTIVE:
            return "module is not active"
        return f"Method '{method_label}' is consistent"


class SignatureVerifier:
    """Exact positional comparison of a handle against expected types.

    Args:
        registry:       Used only to turn a module ID into a display name
                        for the diagnostic prefix.
        sink:           Receives diagnostic messages. Defaults to
                        :func:`log_sink`.
        generic_prefix: Prefix used when no module ID is given.
    """

    def __init__(
        self,
        registry: ModuleRegistry | None = None,
        sink: DiagnosticSink | None = None,
        generic_prefix: str = DEFAULT_PREFIX,
    ) -> None:
        self._registry = registry
        self._sink = sink or log_sink
        self._generic_prefix = generic_prefix

    def check(
        self,
        handle: ResolvedHandle | None,
        expected_types: Sequence[Any],
    ) -> VerificationOutcome:
        expected = as_type_sequence(expected_types)
        if expected is None:
            return VerificationOutcome(FailureKind.INVALID_EXPECTED_SIGNATURE)
        if handle is None:
            return VerificationOutcome(FailureKind.SYMBOL_NOT_FOUND, expected_count=len(expected))

        actual = tuple(normalize_parameter_type(t) for t in handle.parameter_types)
        if len(actual) != len(expected):
            return VerificationOutcome(
                FailureKind.SIGNATURE_LENGTH_MISMATCH,
                expected_count=len(expected),
                actual_count=len(actual),
            )
        for index, (actual_type, expected_type) in enumerate(zip(actual, expected), start=1):
            if actual_type != expected_type:
                return VerificationOutcome(
                    FailureKind.SIGNATURE_POSITION_MISMATCH,
                    expected_count=len(expected),
                    actual_count=len(actual),
                    mismatch_index=index,
                    actual_type=actual_type,
                    expected_type=expected_type,
                )
        return VerificationOutcome(expected_count=len(expected), actual_count=len(actual))

    def verify(
        self,
        handle: ResolvedHandle | None,
        expected_types: Sequence[Any],
        log_diagnostics: bool = False,
        context_module_id: str | None = None,
    ) -> bool:
        """Return True iff *handle* declares exactly *expected_types*.

        An absent handle is a resolution failure, not a signature failure,
        and never produces a diagnostic.
        """
        outcome = self.check(handle, expected_types)
        if outcome.is_consistent:
            return True
        if log_diagnostics and handle is not None:
            self.emit(f"{self.prefix_for(context_module_id)}: {outcome.describe(handle.qualified_name)}")
        return False

    def prefix_for(self, module_id: str | None) -> str:
        """``"Failed to support <display name>"`` or the generic prefix."""
        if not module_id:
            return self._generic_prefix
        name = self._registry.display_name_of(module_id) if self._registry else None
        return f"Failed to support {name or module_id}"

    def emit(self, message: str) -> None:
        try:
            self._sink(message)
        except Exception as exc:
            log.warning("diagnostic_sink_failed", error=str(exc))
