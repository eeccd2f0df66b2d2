"""Pydantic models for the extracted module (versioned, stable, explicit)."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from .diagnostics import Diagnostic, Severity
from .values import LiteralResult
from ..syntax.tree import SourceRange


class ResourceMode(str, Enum):
    """Managed resources versus data sources."""
    MANAGED = "managed"
    DATA = "data"


class RepetitionKind(str, Enum):
    """Which repetition argument a resource or module call declares."""
    NONE = "none"
    COUNT = "count"
    FOR_EACH = "for_each"


class ProviderRef(BaseModel):
    """Reference to a provider configuration, `name` or `name.alias`."""
    name: str = Field(..., description="Provider local name")
    alias: Optional[str] = Field(None, description="Configuration alias")

    class Config:
        frozen = True

    @classmethod
    def parse(cls, text: str) -> "ProviderRef":
        name, _, alias = text.partition(".")
        return cls(name=name, alias=alias or None)

    def __str__(self) -> str:
        return f"{self.name}.{self.alias}" if self.alias else self.name


class ProviderRequirement(BaseModel):
    """Entry of a required_providers block."""
    source: Optional[str] = Field(None, description="Source address, absent when not declared")
    version_constraints: List[str] = Field(default_factory=list, description="Raw version constraints")
    configuration_aliases: List[ProviderRef] = Field(default_factory=list)

    class Config:
        frozen = True


class VariableDecl(BaseModel):
    """Input variable declaration."""
    name: str
    description: Optional[str] = None
    default: Optional[LiteralResult] = Field(None, description="Static default, or a not-static marker")
    required: bool = Field(True, description="True when no default is declared")
    sensitive: bool = False
    nullable: Optional[bool] = None
    type: Optional[str] = Field(None, description="Raw type constraint text, not interpreted")
    pos: Optional[SourceRange] = None

    class Config:
        frozen = True


class OutputDecl(BaseModel):
    """Output value declaration."""
    name: str
    description: Optional[str] = None
    value: Optional[LiteralResult] = Field(None, description="Static value, or a not-static marker")
    sensitive: bool = False
    type: Optional[str] = None
    depends_on: List[str] = Field(default_factory=list)
    pos: Optional[SourceRange] = None

    class Config:
        frozen = True


class ProviderConfig(BaseModel):
    """Provider configuration block; provider-specific arguments are opaque."""
    name: str
    alias: Optional[str] = None
    version_constraint: Optional[str] = None
    pos: Optional[SourceRange] = None

    class Config:
        frozen = True

    @property
    def key(self) -> str:
        return f"{self.name}.{self.alias}" if self.alias else self.name


class Resource(BaseModel):
    """Managed resource or data source."""
    mode: ResourceMode
    type: str
    name: str
    provider: Optional[str] = Field(None, description="Explicit provider reference text")
    depends_on: List[str] = Field(default_factory=list)
    count_or_for_each: RepetitionKind = RepetitionKind.NONE
    provisioners: List[str] = Field(default_factory=list)
    pos: Optional[SourceRange] = None

    class Config:
        frozen = True
        use_enum_values = True

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    @property
    def implied_provider(self) -> str:
        """Explicit provider's local name, else the resource type prefix."""
        if self.provider:
            return ProviderRef.parse(self.provider).name
        return self.type.split("_", 1)[0]


class ModuleCall(BaseModel):
    """Child module call."""
    name: str
    source: Optional[str] = Field(None, description="Module source address, recorded verbatim")
    version_constraint: Optional[str] = None
    count_or_for_each: RepetitionKind = RepetitionKind.NONE
    providers: Dict[str, str] = Field(default_factory=dict, description="Child provider name -> parent reference")
    depends_on: List[str] = Field(default_factory=list)
    pos: Optional[SourceRange] = None

    class Config:
        frozen = True
        use_enum_values = True


class ModuleFragment(BaseModel):
    """Declarations found in a single file, before merging."""
    file_path: str
    override: bool = False
    required_core: List[str] = Field(default_factory=list)
    required_providers: Dict[str, ProviderRequirement] = Field(default_factory=dict)
    variables: Dict[str, VariableDecl] = Field(default_factory=dict)
    outputs: Dict[str, OutputDecl] = Field(default_factory=dict)
    provider_configs: Dict[str, ProviderConfig] = Field(default_factory=dict)
    managed_resources: Dict[str, Resource] = Field(default_factory=dict)
    data_resources: Dict[str, Resource] = Field(default_factory=dict)
    module_calls: Dict[str, ModuleCall] = Field(default_factory=dict)
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    class Config:
        frozen = True


class Module(BaseModel):
    """Static summary of one configuration directory."""
    path: str = Field(..., description="Module root directory")
    required_core: List[str] = Field(default_factory=list, description="Raw required_version constraints")
    required_providers: Dict[str, ProviderRequirement] = Field(default_factory=dict)
    variables: Dict[str, VariableDecl] = Field(default_factory=dict)
    outputs: Dict[str, OutputDecl] = Field(default_factory=dict)
    provider_configs: Dict[str, ProviderConfig] = Field(default_factory=dict)
    managed_resources: Dict[str, Resource] = Field(default_factory=dict)
    data_resources: Dict[str, Resource] = Field(default_factory=dict)
    module_calls: Dict[str, ModuleCall] = Field(default_factory=dict)
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    class Config:
        frozen = True

    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)
