"""extcompat — Safe interop with optional, independently versioned extensions.

A host asks two questions about an extension it cannot import at build
time: is it present and enabled, and does it still expose the function I
call, with the parameters I pass?  extcompat answers both without letting
an absent or changed extension raise into the host.

Layers (bottom to top):
    1. Registry      — read-only view over the host's installed modules
    2. Resolution    — find owners and methods by name in loaded modules
    3. Verification  — exact positional signature check
    4. Guard         — registry → resolution → verification, handle or None
"""

__version__ = "0.1.0"

from extcompat.guard import CompatibilityGuard
from extcompat.registry import ModuleDescriptor, ModuleRegistry
from extcompat.resolution import Ref, ResolvedHandle, SymbolDescriptor, SymbolResolver
from extcompat.verification import FailureKind, SignatureVerifier, VerificationOutcome

__all__ = [
    "__version__",
    "CompatibilityGuard",
    "FailureKind",
    "ModuleDescriptor",
    "ModuleRegistry",
    "Ref",
    "ResolvedHandle",
    "SignatureVerifier",
    "SymbolDescriptor",
    "SymbolResolver",
    "VerificationOutcome",
]
