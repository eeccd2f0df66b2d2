"""Generic syntax tree and the parsers that produce it."""

from .tree import (
    Expression,
    ExpressionKind,
    GenericBlock,
    GenericBody,
    ObjectEntry,
    SourceRange,
    SyntaxKind,
)
from .expressions import classify_string, from_python_value

__all__ = [
    "Expression",
    "ExpressionKind",
    "GenericBlock",
    "GenericBody",
    "ObjectEntry",
    "SourceRange",
    "SyntaxKind",
    "classify_string",
    "from_python_value",
]
