"""Data contracts: the extracted module, its declarations and diagnostics."""

from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, Severity
from .values import Known, LiteralResult, NotStatic
from .module import (
    Module,
    ModuleCall,
    ModuleFragment,
    OutputDecl,
    ProviderConfig,
    ProviderRef,
    ProviderRequirement,
    RepetitionKind,
    Resource,
    ResourceMode,
    VariableDecl,
)

__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSink",
    "Severity",
    "Known",
    "LiteralResult",
    "NotStatic",
    "Module",
    "ModuleCall",
    "ModuleFragment",
    "OutputDecl",
    "ProviderConfig",
    "ProviderRef",
    "ProviderRequirement",
    "RepetitionKind",
    "Resource",
    "ResourceMode",
    "VariableDecl",
]
