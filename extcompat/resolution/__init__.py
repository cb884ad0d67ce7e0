"""Resolution layer — descriptors, type normalization and the resolver."""

from extcompat.resolution.descriptors import ResolvedHandle, SymbolDescriptor
from extcompat.resolution.resolver import SymbolResolver
from extcompat.resolution.types import Ref, normalize_parameter_type, type_name

__all__ = [
    "Ref",
    "ResolvedHandle",
    "SymbolDescriptor",
    "SymbolResolver",
    "normalize_parameter_type",
    "type_name",
]
