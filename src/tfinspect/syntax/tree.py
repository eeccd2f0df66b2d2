"""Generic block/attribute tree shared by the native and JSON syntaxes."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class SyntaxKind(str, Enum):
    """Surface syntax of a configuration file."""
    NATIVE = "native"
    JSON = "json"


class SourceRange(BaseModel):
    """Best-effort location of a construct inside its file (1-based)."""
    start_line: int = Field(..., ge=1, description="First line of the construct")
    end_line: int = Field(..., ge=1, description="Last line of the construct")
    start_column: Optional[int] = Field(None, ge=1, description="Start column, when known")
    end_column: Optional[int] = Field(None, ge=1, description="End column, when known")

    class Config:
        frozen = True

    def __str__(self) -> str:
        if self.start_column is not None:
            return f"{self.start_line},{self.start_column}"
        return str(self.start_line)


class ExpressionKind(str, Enum):
    """Shape of an expression node, as far as static analysis cares."""
    LITERAL = "literal"
    TUPLE = "tuple"
    OBJECT = "object"
    TEMPLATE = "template"
    TRAVERSAL = "traversal"
    FUNCTION_CALL = "function_call"
    CONDITIONAL = "conditional"
    FOR = "for"
    OPERATION = "operation"


class ObjectEntry(BaseModel):
    """One `key = value` pair of an object constructor."""
    key: str = Field(..., description="Key text")
    key_static: bool = Field(True, description="False when the key is itself an expression")
    value: "Expression"

    class Config:
        frozen = True


class Expression(BaseModel):
    """
    Expression node of the generic tree.

    Literal nodes carry `value`, tuples carry `items`, objects carry
    `entries`. Every other kind keeps only its source text in `source`,
    because nothing above this layer evaluates it.
    """
    kind: ExpressionKind
    value: Any = None
    items: List["Expression"] = Field(default_factory=list)
    entries: List[ObjectEntry] = Field(default_factory=list)
    source: Optional[str] = Field(None, description="Source text of a non-literal expression")
    range: Optional[SourceRange] = None

    class Config:
        frozen = True

    def as_text(self) -> Optional[str]:
        """Raw text of a traversal-like node, or the value of a string literal."""
        if self.kind == ExpressionKind.LITERAL:
            return self.value if isinstance(self.value, str) else None
        return self.source


class GenericBlock(BaseModel):
    """A labelled block with its attributes and nested blocks."""
    type: str = Field(..., description="Block type label, e.g. 'resource'")
    labels: List[str] = Field(default_factory=list)
    attributes: Dict[str, Expression] = Field(default_factory=dict)
    blocks: List["GenericBlock"] = Field(default_factory=list)
    range: Optional[SourceRange] = None

    class Config:
        frozen = True


class GenericBody(BaseModel):
    """Parsed contents of one file."""
    attributes: Dict[str, Expression] = Field(default_factory=dict)
    blocks: List[GenericBlock] = Field(default_factory=list)

    class Config:
        frozen = True


ObjectEntry.model_rebuild()
Expression.model_rebuild()
GenericBlock.model_rebuild()
