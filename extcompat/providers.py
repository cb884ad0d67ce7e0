"""Module providers — ready-made snapshot sources for :class:`ModuleRegistry`.

Hosts with their own extension manager pass a callable of their own.  The
providers below cover the common Python cases:

  - ``StaticModuleProvider``       — a fixed list supplied by the host
  - ``DistributionModuleProvider`` — every installed distribution
  - ``EntryPointModuleProvider``   — every plugin advertised under an
                                     entry-point group

Entry points are listed, never loaded: presence is decided from metadata
alone so that checking for an extension cannot import it.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import Iterable, Iterator

from packaging.utils import canonicalize_name

from extcompat.config import RegistryConfig
from extcompat.logging import get_logger
from extcompat.registry import ModuleDescriptor, ModuleProvider

log = get_logger(__name__)


class _EnablementRule:
    """``disabled`` always wins; a non-empty ``enabled`` list is an allow-list."""

    def __init__(self, enabled: Iterable[str] = (), disabled: Iterable[str] = ()) -> None:
        self._enabled = {m.casefold() for m in enabled}
        self._disabled = {m.casefold() for m in disabled}

    def is_active(self, module_id: str) -> bool:
        key = module_id.casefold()
        if key in self._disabled:
            return False
        return not self._enabled or key in self._enabled


class StaticModuleProvider:
    """Serve a fixed list of descriptors."""

    def __init__(self, descriptors: Iterable[ModuleDescriptor] = ()) -> None:
        self._descriptors = tuple(descriptors)

    def __call__(self) -> tuple[ModuleDescriptor, ...]:
        return self._descriptors


class DistributionModuleProvider:
    """One descriptor per installed distribution.

    The ID is the canonical (PEP 503) distribution name, so ``Acme_Widgets``
    and ``acme-widgets`` are the same module.
    """

    def __init__(self, enabled: Iterable[str] = (), disabled: Iterable[str] = ()) -> None:
        self._rule = _EnablementRule(
            (canonicalize_name(m) for m in enabled),
            (canonicalize_name(m) for m in disabled),
        )

    def __call__(self) -> Iterator[ModuleDescriptor]:
        for dist in importlib.metadata.distributions():
            name = dist.metadata["Name"]
            if not name:
                continue
            module_id = canonicalize_name(name)
            yield ModuleDescriptor(
                id=module_id,
                display_name=name,
                active=self._rule.is_active(module_id),
            )


class EntryPointModuleProvider:
    """One descriptor per entry point in *group*.

    Extensions advertise themselves in their packaging metadata::

        [project.entry-points."extcompat.extensions"]
        acme-widgets = "acme_widgets.api"
    """

    def __init__(
        self,
        group: str,
        enabled: Iterable[str] = (),
        disabled: Iterable[str] = (),
    ) -> None:
        self.group = group
        self._rule = _EnablementRule(enabled, disabled)

    def __call__(self) -> Iterator[ModuleDescriptor]:
        for ep in importlib.metadata.entry_points(group=self.group):
            dist = ep.dist
            display_name = dist.metadata["Name"] if dist is not None else None
            yield ModuleDescriptor(
                id=ep.name,
                display_name=display_name or ep.name,
                active=self._rule.is_active(ep.name),
            )


def build_provider(
    config: RegistryConfig,
    descriptors: Iterable[ModuleDescriptor] = (),
) -> ModuleProvider:
    """Return the provider selected by *config*.

    *descriptors* only matters for ``source="static"``.
    """
    if config.source == "entry_points":
        provider: ModuleProvider = EntryPointModuleProvider(
            config.entry_point_group, config.enabled, config.disabled
        )
    elif config.source == "static":
        provider = StaticModuleProvider(descriptors)
    else:
        provider = DistributionModuleProvider(config.enabled, config.disabled)
    log.debug("module_provider_selected", source=config.source)
    return provider
