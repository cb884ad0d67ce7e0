"""Compatibility guard — the single entry point most hosts need.

    guard = CompatibilityGuard(registry)
    spin = guard.get_verified_method("acme.widgets", "acme.api.Widget", "spin", [int, Ref[str]])
    if spin is None:
        ...  # fall back to default behaviour
    else:
        spin(widget, 3, out)

Pipeline, with early exit at each step:

  1. Module active?  No → ``None``, silently.  An absent extension is the
     normal case, not an error.
  2. Resolve the symbol with a parameter filter, then by name only.  The
     by-name fallback tolerates overload drift across extension versions;
     verification still rejects a fallback whose shape differs.
  3. Not found → optional diagnostic, ``None``.
  4. Verify the signature → the handle, or ``None`` (the verifier has
     already reported why).

Callers only ever see a verified handle or ``None``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from extcompat.config import Settings, get_settings
from extcompat.exceptions import SymbolTokenError
from extcompat.logging import bind_check_context, get_logger
from extcompat.providers import build_provider
from extcompat.registry import ModuleDescriptor, ModuleProvider, ModuleRegistry
from extcompat.resolution.descriptors import ResolvedHandle, SymbolDescriptor
from extcompat.resolution.resolver import SymbolResolver
from extcompat.verification import (
    DiagnosticSink,
    FailureKind,
    SignatureVerifier,
    VerificationOutcome,
    as_type_sequence,
)

log = get_logger(__name__)


class CompatibilityGuard:
    """Registry check → resolution → verification."""

    def __init__(
        self,
        registry: ModuleRegistry,
        resolver: SymbolResolver | None = None,
        verifier: SignatureVerifier | None = None,
        sink: DiagnosticSink | None = None,
        log_by_default: bool = False,
    ) -> None:
        self.registry = registry
        self.resolver = resolver or SymbolResolver()
        self.verifier = verifier or SignatureVerifier(registry, sink=sink)
        self._log_by_default = log_by_default

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        provider: ModuleProvider | None = None,
        descriptors: Iterable[ModuleDescriptor] = (),
        sink: DiagnosticSink | None = None,
    ) -> "CompatibilityGuard":
        """Build a guard from configuration.

        *provider* overrides the configured registry source; *descriptors*
        feeds ``source="static"``.
        """
        settings = settings or get_settings()
        registry = ModuleRegistry(provider or build_provider(settings.registry, descriptors))
        return cls(
            registry,
            resolver=SymbolResolver.from_config(settings.resolver),
            verifier=SignatureVerifier(
                registry,
                sink=sink,
                generic_prefix=settings.diagnostics.generic_prefix,
            ),
            log_by_default=settings.diagnostics.log_by_default,
        )

    def is_module_active(self, module_id: str | None) -> bool:
        return self.registry.is_active(module_id)

    def get_verified_handle(
        self,
        module_id: str | None,
        symbol: SymbolDescriptor | str,
        expected_types: Sequence[Any],
        log_diagnostics: bool | None = None,
    ) -> ResolvedHandle | None:
        """Return a verified handle for *symbol* in *module_id*, or None.

        *symbol* is a :class:`SymbolDescriptor` or an ``"Owner:method"``
        token.  ``log_diagnostics=None`` uses the configured default.
        """
        should_log = self._log_by_default if log_diagnostics is None else log_diagnostics
        label = str(symbol)

        with bind_check_context(module_id=module_id, symbol=label):
            if not self.registry.is_active(module_id):
                log.debug(FailureKind.MODULE_NOT_ACTIVE.value)
                return None

            expected = as_type_sequence(expected_types)
            if expected is None:
                log.debug(FailureKind.INVALID_EXPECTED_SIGNATURE.value, expected=repr(expected_types))
                return None

            handle = self._resolve(symbol, expected)
            if handle is None:
                if should_log:
                    outcome = VerificationOutcome(FailureKind.SYMBOL_NOT_FOUND)
                    self.verifier.emit(f"{self.verifier.prefix_for(module_id)}: {outcome.describe(label)}")
                return None

            if not self.verifier.verify(handle, expected, should_log, module_id):
                return None

            log.debug("symbol_verified", handle=handle.qualified_name)
            return handle

    def get_verified_method(
        self,
        module_id: str | None,
        owner_type_name: str,
        method_name: str,
        expected_types: Sequence[Any],
        log_diagnostics: bool | None = None,
    ) -> ResolvedHandle | None:
        return self.get_verified_handle(
            module_id,
            SymbolDescriptor(owner_type_name, method_name),
            expected_types,
            log_diagnostics,
        )

    def _resolve(
        self,
        symbol: SymbolDescriptor | str,
        expected: tuple[Any, ...],
    ) -> ResolvedHandle | None:
        if isinstance(symbol, SymbolDescriptor):
            descriptor = symbol
        else:
            try:
                descriptor = SymbolDescriptor.parse(symbol)
            except SymbolTokenError as exc:
                log.debug("symbol_token_invalid", reason=exc.context["reason"])
                return None

        parameter_filter = (
            descriptor.parameter_filter if descriptor.parameter_filter is not None else expected
        )
        handle = self.resolver.resolve(
            descriptor.owner_type_name,
            descriptor.method_name,
            parameter_filter,
            descriptor.generic_filter,
        )
        if handle is not None:
            return handle

        # Known ambiguity: with several same-named overloads this may pick a
        # different one than intended. Verification still rejects a
        # differently shaped fallback.
        handle = self.resolver.resolve(
            descriptor.owner_type_name,
            descriptor.method_name,
            None,
            descriptor.generic_filter,
        )
        if handle is not None:
            log.debug("symbol_resolved_by_name_only", handle=handle.qualified_name)
        return handle
