"""Shared pytest fixtures for the extcompat test suite.

The classes and functions below play the part of an optional third-party
extension.  ``sample_extension`` publishes them in ``sys.modules`` as
``acme_widgets.api`` for the duration of a test, which is exactly how a
loaded extension looks to the resolver.
"""

from __future__ import annotations

import functools
import sys
from types import ModuleType
from typing import Annotated, TypeVar

import pytest

from extcompat.guard import CompatibilityGuard
from extcompat.providers import StaticModuleProvider
from extcompat.registry import ModuleDescriptor, ModuleRegistry
from extcompat.resolution.types import Ref

T = TypeVar("T")

EXTENSION_MODULE = "acme_widgets.api"


# ---------------------------------------------------------------------------
# Sample extension
# ---------------------------------------------------------------------------


class AcmeGadget:
    pass


class AcmeSprocket:
    pass


class AcmeWidget:
    def __init__(self, size: int = 1) -> None:
        self._size = size

    def spin(self, times: int) -> int:
        return times * 2

    def rename(self, name: str, previous: Ref[str]) -> bool:
        previous.value = "old"
        return True

    def tag(self, label: Annotated[str, "label"]) -> None:
        pass

    def attach(self, gadget: AcmeGadget, sprocket: AcmeSprocket) -> None:
        pass

    def untyped(self, a, b):
        return a, b

    def convert(self, value: T) -> T:
        return value

    def swap(self, left: Ref[T], right: Ref[T]) -> None:
        left.value, right.value = right.value, left.value

    @staticmethod
    def create(size: int, color: str) -> AcmeWidget:
        return AcmeWidget(size)

    @classmethod
    def from_gadget(cls, gadget: AcmeGadget) -> AcmeWidget:
        return cls()

    @functools.singledispatchmethod
    def render(self, item: object) -> str:
        return "object"

    @render.register
    def _(self, item: int) -> str:
        return "int"

    @render.register
    def _(self, item: str) -> str:
        return "str"

    @property
    def size(self) -> int:
        return self._size

    class Inner:
        def ping(self) -> str:
            return "pong"


class FancyAcmeWidget(AcmeWidget):
    pass


def make_widget(size: int) -> AcmeWidget:
    return AcmeWidget(size)


@functools.singledispatch
def describe(item: object) -> str:
    return "object"


@describe.register
def _(item: int) -> str:
    return "int"


def broken(thing: MissingType) -> None:  # noqa: F821
    pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_extension(monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    module = ModuleType(EXTENSION_MODULE)
    for obj in (
        AcmeWidget,
        FancyAcmeWidget,
        AcmeGadget,
        AcmeSprocket,
        make_widget,
        describe,
        broken,
    ):
        setattr(module, obj.__name__, obj)
    module.T = T
    monkeypatch.setitem(sys.modules, EXTENSION_MODULE, module)
    return module


class RecordingSink:
    """Diagnostic sink that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def descriptors() -> list[ModuleDescriptor]:
    return [
        ModuleDescriptor("Acme.Widgets", "Acme Widgets", active=True),
        ModuleDescriptor("acme.disabled", "Acme Disabled", active=False),
        ModuleDescriptor("acme.dup", "Acme Dup (old)", active=False),
        ModuleDescriptor("ACME.DUP", "Acme Dup", active=True),
    ]


@pytest.fixture
def registry(descriptors: list[ModuleDescriptor]) -> ModuleRegistry:
    return ModuleRegistry(StaticModuleProvider(descriptors))


@pytest.fixture
def guard(registry: ModuleRegistry, sink: RecordingSink, sample_extension: ModuleType) -> CompatibilityGuard:
    return CompatibilityGuard(registry, sink=sink)
