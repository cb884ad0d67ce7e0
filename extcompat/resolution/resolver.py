"""Resolution — Locating callables by name at runtime.

The "type universe" is ``sys.modules``: an owner name resolves to a loaded
module or to a class reachable from one.  Nothing is imported unless the
resolver was built with ``import_missing=True``, so a check for an absent
extension never triggers its import.

Overloads:
  Python has one name per attribute, so the overload set of a method is the
  attribute itself plus, for ``functools.singledispatch`` /
  ``singledispatchmethod`` dispatchers, every registered implementation in
  registration order (base implementation first).  Without a parameter
  filter the first candidate wins.

Every lookup failure, including an extension whose import raises or a
builtin without an introspectable signature, ends in ``None`` and a debug
log record.  The resolver never raises into its caller.
"""

from __future__ import annotations

import builtins
import functools
import importlib
import inspect
import sys
import typing
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from extcompat.config import ResolverConfig
from extcompat.exceptions import SymbolTokenError, TypeLookupError
from extcompat.logging import get_logger
from extcompat.resolution.descriptors import ResolvedHandle, SymbolDescriptor
from extcompat.resolution.types import (
    normalize_parameter_type,
    substitute,
    type_name,
    type_parameters,
)

log = get_logger(__name__)

_RECEIVER_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(frozen=True)
class _Candidate:
    """One overload of a method, before its signature is read."""

    function: Any  # what inspect.signature / get_type_hints read
    target: Any  # what the handle calls
    has_receiver: bool


class SymbolResolver:
    """Find owners, types and methods by name.

    Usage::

        resolver = SymbolResolver()
        handle = resolver.resolve("acme.api.Widget", "spin", [int])
        handle = resolver.resolve_token("acme.api:Widget.spin")
    """

    def __init__(self, import_missing: bool = False, search_short_names: bool = True) -> None:
        self.import_missing = import_missing
        self.search_short_names = search_short_names

    @classmethod
    def from_config(cls, config: ResolverConfig) -> "SymbolResolver":
        return cls(
            import_missing=config.import_missing,
            search_short_names=config.search_short_names,
        )

    # ------------------------------------------------------------------
    # Owners and types
    # ------------------------------------------------------------------

    def find_owner(self, name: str | None) -> Any | None:
        """Return the module or object named by dotted *name*, or None."""
        if not isinstance(name, str) or not name.strip():
            return None
        parts = name.strip().split(".")
        if not all(parts):
            return None

        for i in range(len(parts), 0, -1):
            module = self._module(".".join(parts[:i]))
            if module is not None:
                return _walk(module, parts[i:])

        found = _walk(builtins, parts)
        if found is not None:
            return found
        if self.search_short_names:
            return _scan_loaded_modules(parts)
        return None

    def find_type(self, name: str | None) -> type | None:
        owner = self.find_owner(name)
        return owner if inspect.isclass(owner) else None

    def require_type(self, name: str) -> type:
        """Like :meth:`find_type` but raise :class:`TypeLookupError`."""
        found = self.find_type(name)
        if found is None:
            raise TypeLookupError(name)
        return found

    def _module(self, module_name: str) -> ModuleType | None:
        module = sys.modules.get(module_name)
        if module is not None or not self.import_missing:
            return module
        try:
            return importlib.import_module(module_name)
        except Exception as exc:
            log.debug("owner_import_failed", module=module_name, error=str(exc))
            return None

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def resolve(
        self,
        owner_type_name: str,
        method_name: str,
        parameter_filter: Sequence[Any] | None = None,
        generic_filter: Sequence[Any] | None = None,
    ) -> ResolvedHandle | None:
        owner = self.find_owner(owner_type_name)
        if not (inspect.isclass(owner) or inspect.ismodule(owner)):
            log.debug("symbol_owner_not_found", owner=owner_type_name)
            return None
        if not method_name:
            return None

        candidates = list(_candidates(owner, method_name))
        if not candidates:
            log.debug("symbol_method_not_found", owner=owner_type_name, method=method_name)
            return None

        wanted = (
            None
            if parameter_filter is None
            else tuple(normalize_parameter_type(t) for t in parameter_filter)
        )
        generics = tuple(generic_filter) if generic_filter else ()
        owner_name = _owner_name(owner)

        for candidate in candidates:
            handle = _build_handle(owner, owner_name, method_name, candidate, generics)
            if handle is None:
                continue
            if wanted is not None and handle.parameter_types != wanted:
                continue
            log.debug(
                "symbol_resolved",
                owner=owner_name,
                method=method_name,
                parameters=[type_name(t) for t in handle.parameter_types],
            )
            return handle

        log.debug(
            "symbol_overload_not_found",
            owner=owner_name,
            method=method_name,
            candidates=len(candidates),
        )
        return None

    def resolve_token(
        self,
        token: str,
        parameter_filter: Sequence[Any] | None = None,
        generic_filter: Sequence[Any] | None = None,
    ) -> ResolvedHandle | None:
        """Resolve ``"Owner:method"``; malformed tokens resolve to None."""
        try:
            descriptor = SymbolDescriptor.parse(token)
        except SymbolTokenError as exc:
            log.debug("symbol_token_invalid", token=token, reason=exc.context["reason"])
            return None
        return self.resolve(
            descriptor.owner_type_name,
            descriptor.method_name,
            parameter_filter,
            generic_filter,
        )

    def resolve_symbol(self, descriptor: SymbolDescriptor) -> ResolvedHandle | None:
        return self.resolve(
            descriptor.owner_type_name,
            descriptor.method_name,
            descriptor.parameter_filter,
            descriptor.generic_filter,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _walk(obj: Any, parts: Sequence[str]) -> Any | None:
    for part in parts:
        try:
            obj = getattr(obj, part)
        except Exception:
            return None
    return obj


def _scan_loaded_modules(parts: Sequence[str]) -> type | None:
    """First class in load order whose ``__qualname__`` is ``".".join(parts)``."""
    qualname = ".".join(parts)
    for module in list(sys.modules.values()):
        namespace = getattr(module, "__dict__", None)
        if not isinstance(namespace, dict) or parts[0] not in namespace:
            continue
        found = _walk(namespace[parts[0]], parts[1:])
        if inspect.isclass(found) and found.__qualname__ == qualname:
            return found
    return None


def _owner_name(owner: Any) -> str:
    if inspect.ismodule(owner):
        return owner.__name__
    return type_name(owner)


def _is_singledispatch(obj: Any) -> bool:
    return callable(obj) and hasattr(obj, "registry") and hasattr(obj, "dispatch")


def _candidates(owner: Any, method_name: str) -> Iterator[_Candidate]:
    on_class = inspect.isclass(owner)
    if on_class:
        try:
            attr = inspect.getattr_static(owner, method_name)
        except AttributeError:
            return
    else:
        attr = _walk(owner, [method_name])
        if attr is None:
            return

    if isinstance(attr, staticmethod):
        yield _Candidate(attr.__func__, attr.__func__, has_receiver=False)
    elif isinstance(attr, classmethod):
        yield _Candidate(attr.__func__, attr.__get__(None, owner), has_receiver=True)
    elif isinstance(attr, functools.singledispatchmethod):
        for impl in attr.dispatcher.registry.values():
            yield _Candidate(impl, impl, has_receiver=on_class)
    elif _is_singledispatch(attr):
        for impl in attr.registry.values():
            yield _Candidate(impl, impl, has_receiver=on_class)
    elif inspect.isroutine(attr):
        yield _Candidate(attr, attr, has_receiver=on_class)


def _type_hints(function: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(function, include_extras=True)
    except Exception:
        # Unresolvable forward references: fall back to the raw annotations.
        try:
            return dict(inspect.get_annotations(function))
        except Exception:
            return {}


def _build_handle(
    owner: Any,
    owner_name: str,
    method_name: str,
    candidate: _Candidate,
    generics: tuple[Any, ...],
) -> ResolvedHandle | None:
    try:
        signature = inspect.signature(candidate.function)
    except (TypeError, ValueError) as exc:
        log.debug("symbol_signature_unavailable", owner=owner_name, method=method_name, error=str(exc))
        return None

    params = list(signature.parameters.values())
    if candidate.has_receiver and params and params[0].kind in _RECEIVER_KINDS:
        params = params[1:]

    hints = _type_hints(candidate.function)
    annotations = [hints.get(p.name, p.annotation) for p in params]
    annotations = [Any if a is inspect.Parameter.empty else a for a in annotations]

    if generics:
        type_vars = type_parameters(candidate.function, annotations)
        if len(type_vars) != len(generics):
            return None
        mapping = dict(zip(type_vars, generics))
        annotations = [substitute(a, mapping) for a in annotations]

    return ResolvedHandle(
        target=candidate.target,
        owner=owner,
        owner_name=owner_name,
        method_name=method_name,
        parameter_types=tuple(normalize_parameter_type(a) for a in annotations),
        generic_arguments=generics,
    )
