"""Resolution — Parameter type normalization.

Python has no by-reference parameters, so extensions that hand results back
through an argument take a mutable cell instead.  :class:`Ref` is that
cell; a parameter annotated ``Ref[T]`` is compared as plain ``T``.
``Annotated[T, ...]`` metadata is stripped the same way.

Also here: type-variable discovery and substitution for generic routines,
and the display names used in diagnostics.
"""

from __future__ import annotations

from typing import Annotated, Any, Generic, TypeVar, get_args, get_origin

T = TypeVar("T")


class Ref(Generic[T]):
    """Mutable cell for out/ref-style parameters.

    Usage::

        def try_parse(text: str, result: Ref[int]) -> bool:
            result.value = int(text)
            return True

        out = Ref(0)
        if try_parse("42", out):
            print(out.value)
    """

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


def normalize_parameter_type(annotation: Any) -> Any:
    """Strip ``Ref[...]`` and ``Annotated[...]`` wrappers, outermost first.

    A bare ``Ref`` carries no element type and normalizes to ``Any``.
    """
    while True:
        if annotation is Ref:
            return Any
        origin = get_origin(annotation)
        if origin is Annotated or origin is Ref:
            annotation = get_args(annotation)[0]
            continue
        return annotation


def _is_plain_class(annotation: Any) -> bool:
    return isinstance(annotation, type) and get_origin(annotation) is None


def type_parameters(routine: Any, annotations: list[Any]) -> tuple[TypeVar, ...]:
    """Return the type variables a generic filter binds, in binding order.

    PEP 695 routines declare them in ``__type_params__``; otherwise they are
    the free ``TypeVar``s of *annotations* in order of first appearance.
    """
    declared = getattr(routine, "__type_params__", ())
    if declared:
        return tuple(p for p in declared if isinstance(p, TypeVar))

    found: list[TypeVar] = []
    for annotation in annotations:
        _collect_type_vars(annotation, found)
    return tuple(found)


def _collect_type_vars(annotation: Any, found: list[TypeVar]) -> None:
    if isinstance(annotation, TypeVar):
        if annotation not in found:
            found.append(annotation)
        return
    if _is_plain_class(annotation):
        return
    for param in getattr(annotation, "__parameters__", ()):
        if isinstance(param, TypeVar) and param not in found:
            found.append(param)


def substitute(annotation: Any, mapping: dict[TypeVar, Any]) -> Any:
    """Replace the type variables of *annotation* using *mapping*."""
    if isinstance(annotation, TypeVar):
        return mapping.get(annotation, annotation)
    if _is_plain_class(annotation):
        return annotation
    params = getattr(annotation, "__parameters__", ())
    if not params:
        return annotation
    args = tuple(mapping.get(p, p) for p in params)
    try:
        return annotation[args[0]] if len(args) == 1 else annotation[args]
    except TypeError:
        return annotation


def type_name(annotation: Any) -> str:
    """Human-readable name of a type for diagnostics."""
    if _is_plain_class(annotation):
        if annotation.__module__ == "builtins":
            return annotation.__qualname__
        return f"{annotation.__module__}.{annotation.__qualname__}"
    if annotation is Any:
        return "typing.Any"
    return repr(annotation)
