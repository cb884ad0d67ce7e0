"""Resolution — Symbol descriptors and resolved handles."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from extcompat.exceptions import SymbolTokenError


def _as_tuple(types: Sequence[Any] | None) -> tuple[Any, ...] | None:
    return None if types is None else tuple(types)


@dataclass(frozen=True)
class SymbolDescriptor:
    """What to look up: an owner (class or module) and a method on it.

    ``parameter_filter`` and ``generic_filter`` disambiguate overloads.
    ``None`` means "no filter"; an empty ``parameter_filter`` asks for a
    zero-parameter overload.
    """

    owner_type_name: str
    method_name: str
    parameter_filter: tuple[Any, ...] | None = None
    generic_filter: tuple[Any, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameter_filter", _as_tuple(self.parameter_filter))
        object.__setattr__(self, "generic_filter", _as_tuple(self.generic_filter))

    @classmethod
    def parse(
        cls,
        token: str,
        parameter_filter: Sequence[Any] | None = None,
        generic_filter: Sequence[Any] | None = None,
    ) -> "SymbolDescriptor":
        """Build a descriptor from ``"Owner:method"``.

        The method part may be dotted, entry-point style: in
        ``"acme.api:Widget.spin"`` the owner is ``acme.api.Widget``.

        Raises:
            SymbolTokenError: The token has no single ``:`` separator or an
                empty side.
        """
        if not isinstance(token, str) or not token.strip():
            raise SymbolTokenError(token, "token is empty")
        owner, sep, method = token.strip().partition(":")
        if not sep:
            raise SymbolTokenError(token, "expected 'Owner:method'")
        if ":" in method:
            raise SymbolTokenError(token, "more than one ':' separator")
        owner, method = owner.strip(), method.strip()
        if "." in method:
            nested, _, method = method.rpartition(".")
            owner = f"{owner}.{nested}" if owner else nested
        if not owner or not method:
            raise SymbolTokenError(token, "owner and method must both be named")
        return cls(owner, method, _as_tuple(parameter_filter), _as_tuple(generic_filter))

    def __str__(self) -> str:
        return f"{self.owner_type_name}.{self.method_name}"


@dataclass(frozen=True)
class ResolvedHandle:
    """A located callable and the parameter shape it declares.

    ``parameter_types`` excludes the implicit receiver (``self``/``cls``)
    and has ``Ref``/``Annotated`` wrappers removed.  Instance methods are
    handed out unbound: pass the instance as the first argument.
    """

    target: Callable[..., Any]
    owner: Any
    owner_name: str
    method_name: str
    parameter_types: tuple[Any, ...]
    generic_arguments: tuple[Any, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.owner_name}.{self.method_name}"

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.target(*args, **kwargs)
