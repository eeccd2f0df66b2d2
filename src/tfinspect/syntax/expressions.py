"""Build generic expression nodes from plain Python values.

Both parsers hand us decoded Python values: python-hcl2 renders every
non-literal expression as a `${...}` string and the JSON syntax treats every
string as a template. Strings are therefore classified here, in one place,
so the two syntaxes cannot drift apart.
"""

import re
from typing import Any, Optional, Union
from .tree import Expression, ExpressionKind, ObjectEntry, SourceRange

TRAVERSAL_RE = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_-]*"
    r"(?:\.[A-Za-z_][A-Za-z0-9_-]*|\.[0-9]+|\.\*|\[[^\[\]]*\])*$"
)
_FUNCTION_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:::[A-Za-z_][A-Za-z0-9_]*)*\(")
_SIGNED_NUMBER_RE = re.compile(r"^-\s*(\d+(\.\d+)?([eE][+-]?\d+)?)$")


def from_python_value(value: Any, source_range: Optional[SourceRange] = None) -> Expression:
    """Convert a decoded scalar/list/dict into an expression node."""
    if isinstance(value, str):
        return classify_string(value, source_range)
    if value is None or isinstance(value, (bool, int, float)):
        return Expression(kind=ExpressionKind.LITERAL, value=value, range=source_range)
    if isinstance(value, (list, tuple)):
        return Expression(
            kind=ExpressionKind.TUPLE,
            items=[from_python_value(item, source_range) for item in value],
            range=source_range,
        )
    if isinstance(value, dict):
        entries = []
        for key, item in value.items():
            key_text = unquote(str(key))
            entries.append(ObjectEntry(
                key=key_text,
                key_static=not has_template_sequence(key_text),
                value=from_python_value(item, source_range),
            ))
        return Expression(kind=ExpressionKind.OBJECT, entries=entries, range=source_range)
    # Anything else is an opaque node the parser produced; keep its text.
    return Expression(kind=ExpressionKind.OPERATION, source=str(value), range=source_range)


def classify_string(text: str, source_range: Optional[SourceRange] = None) -> Expression:
    """Classify a string as a literal, a template or a wrapped expression."""
    if not has_template_sequence(text):
        return Expression(kind=ExpressionKind.LITERAL, value=_unescape(text), range=source_range)

    inner = wrapped_expression(text)
    if inner is not None:
        inner = inner.strip()
        number = _signed_number(inner)
        if number is not None:
            return Expression(kind=ExpressionKind.LITERAL, value=number, range=source_range)
        return Expression(kind=_classify_inner(inner), source=inner, range=source_range)

    return Expression(kind=ExpressionKind.TEMPLATE, source=text, range=source_range)


def wrapped_expression(text: str) -> Optional[str]:
    """Inner text when the whole string is a single `${...}`, else None."""
    if text.startswith("${") and _closing_brace(text, 1) == len(text) - 1:
        return text[2:-1]
    return None


def unquote(text: str) -> str:
    """Strip one pair of surrounding double quotes, if present."""
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def _signed_number(inner: str) -> Union[int, float, None]:
    """A negated number literal, which python-hcl2 renders as `${-1}`."""
    match = _SIGNED_NUMBER_RE.match(inner)
    if not match:
        return None
    digits = "-" + match.group(1)
    if match.group(2) or match.group(3):
        return float(digits)
    return int(digits)


def _classify_inner(inner: str) -> ExpressionKind:
    if inner.startswith("[for ") or inner.startswith("{for "):
        return ExpressionKind.FOR
    if TRAVERSAL_RE.match(inner):
        return ExpressionKind.TRAVERSAL
    match = _FUNCTION_RE.match(inner)
    if match and _closing_paren(inner, match.end() - 1) == len(inner) - 1:
        return ExpressionKind.FUNCTION_CALL
    if "?" in inner and ":" in inner:
        return ExpressionKind.CONDITIONAL
    return ExpressionKind.OPERATION


def has_template_sequence(text: str) -> bool:
    """True when the string holds an unescaped `${` or `%{` sequence."""
    i = 0
    while i < len(text) - 1:
        pair = text[i:i + 2]
        if pair in ("$$", "%%") and text[i + 2:i + 3] == "{":
            i += 3
            continue
        if pair in ("${", "%{"):
            return True
        i += 1
    return False


def _unescape(text: str) -> str:
    return text.replace("$${", "${").replace("%%{", "%{")


def _closing_brace(text: str, open_index: int) -> int:
    return _matching(text, open_index, "{", "}")


def _closing_paren(text: str, open_index: int) -> int:
    return _matching(text, open_index, "(", ")")


def _matching(text: str, open_index: int, opener: str, closer: str) -> int:
    """Index of the bracket closing `text[open_index]`, or -1."""
    depth = 0
    in_string = False
    i = open_index
    while i < len(text):
        char = text[i]
        if in_string:
            if char == "\\":
                i += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1
