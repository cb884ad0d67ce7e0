"""One-call helpers over a process-wide default guard.

For hosts that do not want to build and pass a guard around::

    from extcompat import compat

    if compat.is_module_active("acme-widgets"):
        spin = compat.get_consistent_method(
            "acme-widgets", "acme.api:Widget.spin", [int], log_errors=True
        )

The default guard is built from :func:`extcompat.config.get_settings` on
first use.  Replace it with :func:`set_default_guard` (tests, or hosts that
supply their own module provider).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from extcompat.guard import CompatibilityGuard
from extcompat.resolution.descriptors import ResolvedHandle, SymbolDescriptor

_default_guard: CompatibilityGuard | None = None


def get_default_guard() -> CompatibilityGuard:
    global _default_guard
    if _default_guard is None:
        _default_guard = CompatibilityGuard.from_settings()
    return _default_guard


def set_default_guard(guard: CompatibilityGuard | None) -> None:
    """Replace the default guard. ``None`` rebuilds it from settings on next use."""
    global _default_guard
    _default_guard = guard


def is_module_active(module_id: str | None) -> bool:
    return get_default_guard().registry.is_active(module_id)


def get_module_name(module_id: str | None) -> str | None:
    """Display name of the active module *module_id*, or None."""
    return get_default_guard().registry.display_name_of(module_id)


def get_method(
    owner: str,
    method_name: str | None = None,
    parameters: Sequence[Any] | None = None,
    generics: Sequence[Any] | None = None,
) -> ResolvedHandle | None:
    """Resolve ``owner.method_name``, or an ``"Owner:method"`` token when
    *method_name* is omitted.  No module check, no verification."""
    resolver = get_default_guard().resolver
    if method_name is None:
        return resolver.resolve_token(owner, parameters, generics)
    return resolver.resolve(owner, method_name, parameters, generics)


def is_method_consistent(
    handle: ResolvedHandle | None,
    expected_types: Sequence[Any],
    log_errors: bool = False,
    module_id_for_log: str | None = None,
) -> bool:
    return get_default_guard().verifier.verify(handle, expected_types, log_errors, module_id_for_log)


def get_consistent_method(
    module_id: str | None,
    symbol: SymbolDescriptor | str,
    expected_types: Sequence[Any],
    log_errors: bool = False,
) -> ResolvedHandle | None:
    return get_default_guard().get_verified_handle(module_id, symbol, expected_types, log_errors)
