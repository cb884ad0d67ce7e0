"""Module registry — read-only view over the host's installed extensions.

The registry never owns module state.  It is built over a *provider*, a
zero-argument callable returning the host's current list of
:class:`ModuleDescriptor`, and takes one fresh snapshot per query.  Nothing
is cached, so a host that enables or disables an extension at runtime is
seen on the next call.

Module IDs compare case-insensitively (``str.casefold``).  Several
descriptors may share an ID; any active one satisfies the check.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from extcompat.exceptions import ProviderError
from extcompat.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ModuleDescriptor:
    """One installed extension as reported by the host."""

    id: str
    display_name: str
    active: bool = True

    def matches(self, module_id: str) -> bool:
        """Case-insensitive ID comparison; a descriptor without an ID matches nothing."""
        if not isinstance(self.id, str) or not isinstance(module_id, str):
            return False
        return bool(self.id) and self.id.casefold() == module_id.casefold()


ModuleProvider = Callable[[], Iterable[ModuleDescriptor]]


class ModuleRegistry:
    """Answers "is module X active" and "what is module X called".

    Usage::

        registry = ModuleRegistry(lambda: host.installed_modules())
        if registry.is_active("acme.widgets"):
            ...
    """

    def __init__(self, provider: ModuleProvider) -> None:
        self._provider = provider

    def snapshot(self) -> tuple[ModuleDescriptor, ...]:
        """Return the provider's current list.

        A failing provider is logged and reported as an empty snapshot so
        that a broken host integration degrades to "nothing is active".
        """
        try:
            return tuple(self._provider())
        except Exception as exc:
            error = ProviderError(_provider_name(self._provider), exc)
            log.warning(
                "module_provider_failed",
                provider=error.context["provider"],
                error=error.context["cause"],
            )
            return ()

    def _first_active(self, module_id: str | None) -> ModuleDescriptor | None:
        if not module_id:
            return None
        for descriptor in self.snapshot():
            if descriptor.active and descriptor.matches(module_id):
                return descriptor
        return None

    def is_active(self, module_id: str | None) -> bool:
        return self._first_active(module_id) is not None

    def display_name_of(self, module_id: str | None) -> str | None:
        descriptor = self._first_active(module_id)
        return descriptor.display_name if descriptor is not None else None

    def list_active(self) -> list[str]:
        """Return the IDs of active modules, in provider order."""
        return [d.id for d in self.snapshot() if d.active]


def _provider_name(provider: object) -> str:
    return getattr(provider, "__qualname__", None) or type(provider).__name__
