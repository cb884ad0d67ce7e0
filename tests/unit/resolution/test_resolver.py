"""Unit tests — SymbolResolver."""

from __future__ import annotations

import sys
from types import ModuleType
from typing import Any, TypeVar
from unittest.mock import patch

import pytest

from extcompat.config import ResolverConfig
from extcompat.exceptions import TypeLookupError
from extcompat.resolution.descriptors import SymbolDescriptor
from extcompat.resolution.resolver import SymbolResolver
from extcompat.resolution.types import Ref

API = "acme_widgets.api"
WIDGET = f"{API}.AcmeWidget"


@pytest.fixture
def resolver() -> SymbolResolver:
    return SymbolResolver()


# ---------------------------------------------------------------------------
# Owners and types
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestFindOwner:
    def test_loaded_module(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_owner(API) is sample_extension

    def test_class_in_module(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_owner(WIDGET) is sample_extension.AcmeWidget

    def test_nested_class(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_owner(f"{WIDGET}.Inner") is sample_extension.AcmeWidget.Inner

    def test_missing_attribute(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_owner(f"{API}.NoSuchClass") is None

    @pytest.mark.parametrize("name", [None, "", "   ", "a..b", ".a", "a."])
    def test_malformed_names(self, resolver: SymbolResolver, name: str | None) -> None:
        assert resolver.find_owner(name) is None

    def test_builtins(self, resolver: SymbolResolver) -> None:
        assert resolver.find_owner("int") is int

    def test_short_name_scan(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_owner("AcmeWidget") is sample_extension.AcmeWidget

    def test_short_name_scan_nested(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_owner("AcmeWidget.Inner") is sample_extension.AcmeWidget.Inner

    def test_short_name_scan_disabled(self, sample_extension: ModuleType) -> None:
        resolver = SymbolResolver(search_short_names=False)
        assert resolver.find_owner("AcmeWidget") is None

    def test_unloaded_module_not_imported_by_default(self, resolver: SymbolResolver) -> None:
        with patch("extcompat.resolution.resolver.importlib.import_module") as mock_import:
            assert resolver.find_owner("not_loaded_pkg_xyz.Thing") is None
        mock_import.assert_not_called()

    def test_import_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        module = ModuleType("late_pkg_xyz")
        module.Thing = type("Thing", (), {})

        def fake_import(name: str) -> ModuleType:
            if name != "late_pkg_xyz":
                raise ModuleNotFoundError(name)
            monkeypatch.setitem(sys.modules, name, module)
            return module

        resolver = SymbolResolver(import_missing=True)
        with patch("extcompat.resolution.resolver.importlib.import_module", side_effect=fake_import):
            assert resolver.find_owner("late_pkg_xyz.Thing") is module.Thing

    def test_import_failure_degrades_to_none(self) -> None:
        resolver = SymbolResolver(import_missing=True, search_short_names=False)
        with patch(
            "extcompat.resolution.resolver.importlib.import_module",
            side_effect=RuntimeError("extension import blew up"),
        ):
            assert resolver.find_owner("broken_pkg_xyz.Thing") is None

    def test_from_config(self) -> None:
        resolver = SymbolResolver.from_config(ResolverConfig(import_missing=True, search_short_names=False))
        assert resolver.import_missing is True
        assert resolver.search_short_names is False


@pytest.mark.unit
class TestFindType:
    def test_class(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_type(WIDGET) is sample_extension.AcmeWidget

    def test_module_is_not_a_type(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_type(API) is None

    def test_function_is_not_a_type(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.find_type(f"{API}.make_widget") is None

    def test_require_type_raises(self, resolver: SymbolResolver) -> None:
        with pytest.raises(TypeLookupError, match="no_such_pkg_xyz.Nope"):
            resolver.require_type("no_such_pkg_xyz.Nope")

    def test_require_type(self, resolver: SymbolResolver) -> None:
        assert resolver.require_type("str") is str


# ---------------------------------------------------------------------------
# Methods
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestResolveMethodKinds:
    def test_instance_method_excludes_self(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "spin")
        assert handle is not None
        assert handle.parameter_types == (int,)
        assert handle.owner is sample_extension.AcmeWidget
        assert handle.method_name == "spin"
        assert handle.qualified_name.endswith("AcmeWidget.spin")
        assert handle(sample_extension.AcmeWidget(), 4) == 8

    def test_staticmethod_keeps_all_parameters(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "create")
        assert handle is not None
        assert handle.parameter_types == (int, str)
        assert isinstance(handle(3, "red"), sample_extension.AcmeWidget)

    def test_classmethod_excludes_cls_and_is_bound(
        self, resolver: SymbolResolver, sample_extension: ModuleType
    ) -> None:
        handle = resolver.resolve(WIDGET, "from_gadget")
        assert handle is not None
        assert handle.parameter_types == (sample_extension.AcmeGadget,)
        assert isinstance(handle(sample_extension.AcmeGadget()), sample_extension.AcmeWidget)

    def test_module_function(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(API, "make_widget")
        assert handle is not None
        assert handle.parameter_types == (int,)
        assert handle.owner_name == API

    def test_inherited_method(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(f"{API}.FancyAcmeWidget", "spin")
        assert handle is not None
        assert handle.parameter_types == (int,)
        assert handle.owner is sample_extension.FancyAcmeWidget

    def test_builtin_method(self, resolver: SymbolResolver) -> None:
        handle = resolver.resolve("str", "upper")
        assert handle is not None
        assert handle.parameter_types == ()
        assert handle("abc") == "ABC"

    @pytest.mark.parametrize("method", ["size", "Inner", "no_such_method", ""])
    def test_non_methods(self, resolver: SymbolResolver, sample_extension: ModuleType, method: str) -> None:
        assert resolver.resolve(WIDGET, method) is None

    def test_owner_must_be_class_or_module(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve(f"{API}.make_widget", "__call__") is None

    def test_unknown_owner(self, resolver: SymbolResolver) -> None:
        assert resolver.resolve("no_such_pkg_xyz.Widget", "spin") is None

    def test_unintrospectable_signature(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        with patch("extcompat.resolution.resolver.inspect.signature", side_effect=ValueError("no signature")):
            assert resolver.resolve(WIDGET, "spin") is None


@pytest.mark.unit
class TestResolveParameterTypes:
    def test_ref_parameter_unwrapped(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "rename")
        assert handle is not None
        assert handle.parameter_types == (str, str)

    def test_ref_parameter_is_usable(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "rename")
        out: Ref[str] = Ref("")
        assert handle is not None
        assert handle(sample_extension.AcmeWidget(), "new", out) is True
        assert out.value == "old"

    def test_annotated_parameter_unwrapped(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "tag")
        assert handle is not None
        assert handle.parameter_types == (str,)

    def test_unannotated_parameters_are_any(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "untyped")
        assert handle is not None
        assert handle.parameter_types == (Any, Any)

    def test_unresolvable_annotation_kept_as_text(
        self, resolver: SymbolResolver, sample_extension: ModuleType
    ) -> None:
        handle = resolver.resolve(API, "broken")
        assert handle is not None
        assert handle.parameter_types == ("MissingType",)


@pytest.mark.unit
class TestResolveFilters:
    def test_matching_parameter_filter(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve(WIDGET, "spin", [int]) is not None

    @pytest.mark.parametrize("parameter_filter", [[str], [], [int, int]])
    def test_non_matching_parameter_filter(
        self, resolver: SymbolResolver, sample_extension: ModuleType, parameter_filter: list[Any]
    ) -> None:
        assert resolver.resolve(WIDGET, "spin", parameter_filter) is None

    def test_filter_with_ref_matches(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve(WIDGET, "rename", [str, Ref[str]]) is not None

    def test_singledispatch_method_unfiltered_takes_base(
        self, resolver: SymbolResolver, sample_extension: ModuleType
    ) -> None:
        handle = resolver.resolve(WIDGET, "render")
        assert handle is not None
        assert handle.parameter_types == (object,)

    @pytest.mark.parametrize("overload,expected", [(int, "int"), (str, "str"), (object, "object")])
    def test_singledispatch_method_overload(
        self, resolver: SymbolResolver, sample_extension: ModuleType, overload: type, expected: str
    ) -> None:
        handle = resolver.resolve(WIDGET, "render", [overload])
        assert handle is not None
        assert handle.parameter_types == (overload,)
        assert handle(sample_extension.AcmeWidget(), overload()) == expected

    def test_singledispatch_method_no_matching_overload(
        self, resolver: SymbolResolver, sample_extension: ModuleType
    ) -> None:
        assert resolver.resolve(WIDGET, "render", [float]) is None

    def test_singledispatch_function_overload(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(API, "describe", [int])
        assert handle is not None
        assert handle(1) == "int"

    def test_generic_unbound(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "convert")
        assert handle is not None
        (parameter,) = handle.parameter_types
        assert isinstance(parameter, TypeVar)

    def test_generic_filter_binds_type_variable(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "convert", [int], [int])
        assert handle is not None
        assert handle.parameter_types == (int,)
        assert handle.generic_arguments == (int,)

    def test_generic_filter_inside_ref(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve(WIDGET, "swap", generic_filter=[str])
        assert handle is not None
        assert handle.parameter_types == (str, str)

    def test_generic_filter_arity_mismatch(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve(WIDGET, "convert", generic_filter=[int, str]) is None

    def test_generic_filter_on_non_generic(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve(WIDGET, "spin", generic_filter=[int]) is None

    def test_empty_generic_filter_is_no_filter(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve(WIDGET, "spin", generic_filter=[]) is not None


@pytest.mark.unit
class TestResolveToken:
    @pytest.mark.parametrize(
        "token",
        [
            f"{API}:AcmeWidget.spin",
            f"{WIDGET}:spin",
            "AcmeWidget:spin",
        ],
    )
    def test_token_forms(self, resolver: SymbolResolver, sample_extension: ModuleType, token: str) -> None:
        handle = resolver.resolve_token(token)
        assert handle is not None
        assert handle.owner is sample_extension.AcmeWidget

    def test_module_function_token(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        handle = resolver.resolve_token(f"{API}:make_widget", [int])
        assert handle is not None

    @pytest.mark.parametrize("token", ["", "no_colon", f"{WIDGET}:", ":spin", "a:b:c"])
    def test_malformed_token(self, resolver: SymbolResolver, sample_extension: ModuleType, token: str) -> None:
        assert resolver.resolve_token(token) is None

    def test_filters_forwarded(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        assert resolver.resolve_token(f"{WIDGET}:render", [str]).parameter_types == (str,)  # type: ignore[union-attr]
        assert resolver.resolve_token(f"{WIDGET}:spin", [str]) is None

    def test_resolve_symbol(self, resolver: SymbolResolver, sample_extension: ModuleType) -> None:
        descriptor = SymbolDescriptor(WIDGET, "render", parameter_filter=[int])
        handle = resolver.resolve_symbol(descriptor)
        assert handle is not None
        assert handle.parameter_types == (int,)
