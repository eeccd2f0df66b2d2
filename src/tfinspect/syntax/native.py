"""Native syntax (.tf) adapter on top of python-hcl2.

python-hcl2 returns nested dictionaries. With `with_meta=True` every block
body carries `__start_line__`/`__end_line__`, which is how blocks are told
apart from object-valued attributes and how source ranges are recovered.

Attribute values need one more pass before they match what the JSON syntax
yields: quoted strings keep their backslash escapes, and objects or tuples
passed to a function call are embedded in the call text as Python reprs.
"""

import ast
import re
import string
from typing import Any, Dict, List, Optional, Tuple
import hcl2
from lark.exceptions import LarkError, UnexpectedInput
from .expressions import from_python_value, has_template_sequence, unquote, wrapped_expression
from .tree import GenericBlock, GenericBody, SourceRange
from ..contracts.diagnostics import DiagnosticKind, DiagnosticSink
from ..utils.logging import get_logger

logger = get_logger("syntax.native")

START_LINE = "__start_line__"
END_LINE = "__end_line__"
_META_KEYS = (START_LINE, END_LINE)

_ESCAPE_RE = re.compile(r'\\(u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|[nrt"\\])')
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
# A bracket directly after one of these is an index or a template opener.
_NOT_COLLECTION_AFTER = set(string.ascii_letters + string.digits + "_-$%.*])\"'")


def parse_native(raw_text: str, sink: DiagnosticSink) -> GenericBody:
    """
    Parse native syntax into a generic body.

    A parse failure is recorded as one syntax error and yields an empty body,
    so the file contributes nothing else to the module.
    """
    if not raw_text.endswith("\n"):
        raw_text += "\n"

    try:
        document = hcl2.loads(raw_text, with_meta=True)
    except UnexpectedInput as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        source_range = None
        if isinstance(line, int) and line >= 1:
            source_range = SourceRange(
                start_line=line,
                end_line=line,
                start_column=column if isinstance(column, int) and column >= 1 else None,
            )
        sink.error(DiagnosticKind.SYNTAX_ERROR, "Invalid configuration syntax", _first_line(str(e)), source_range)
        return GenericBody()
    except (LarkError, ValueError) as e:
        sink.error(DiagnosticKind.SYNTAX_ERROR, "Invalid configuration syntax", _first_line(str(e)))
        return GenericBody()

    attributes, blocks = _convert_body(document, None)
    logger.debug(f"Parsed {len(blocks)} top-level blocks from {sink.file_path}")
    return GenericBody(attributes=attributes, blocks=blocks)


def _convert_body(body: Dict[str, Any], source_range: Optional[SourceRange]) -> Tuple[Dict, List[GenericBlock]]:
    attributes = {}
    blocks = []
    for key, value in body.items():
        if key in _META_KEYS:
            continue
        name = unquote(str(key))
        instances = _block_instances(value)
        if instances is None:
            attributes[name] = from_python_value(native_value(value), source_range)
            continue
        for labels, inner in instances:
            inner_range = _range_of(inner)
            inner_attributes, inner_blocks = _convert_body(inner, inner_range)
            blocks.append(GenericBlock(
                type=name,
                labels=labels,
                attributes=inner_attributes,
                blocks=inner_blocks,
                range=inner_range,
            ))

    # Repeated blocks of one type are grouped under one key; restore source order.
    blocks.sort(key=lambda block: block.range.start_line if block.range else 0)
    return attributes, blocks


def _block_instances(value: Any) -> Optional[List[Tuple[List[str], Dict[str, Any]]]]:
    """Return (labels, body) pairs when `value` encodes blocks, else None."""
    if not isinstance(value, list) or not value:
        return None
    instances = []
    for element in value:
        unwrapped = _unwrap_labels(element)
        if unwrapped is None:
            return None
        instances.extend(unwrapped)
    return instances


def _unwrap_labels(element: Any) -> Optional[List[Tuple[List[str], Dict[str, Any]]]]:
    if not isinstance(element, dict):
        return None
    if START_LINE in element:
        return [([], element)]
    if not element:
        return None
    found = []
    for key, inner in element.items():
        nested = _unwrap_labels(inner)
        if nested is None:
            return None
        label = unquote(str(key))
        found.extend(([label] + labels, body) for labels, body in nested)
    return found


def _range_of(body: Dict[str, Any]) -> Optional[SourceRange]:
    start = body.get(START_LINE)
    end = body.get(END_LINE, start)
    if not isinstance(start, int) or start < 1:
        return None
    if not isinstance(end, int) or end < start:
        end = start
    return SourceRange(start_line=start, end_line=end)


def native_value(value: Any) -> Any:
    """Normalize one decoded attribute value from python-hcl2."""
    if isinstance(value, str):
        if has_template_sequence(value):
            return restore_collections(value)
        return decode_escapes(value)
    if isinstance(value, list):
        return [native_value(item) for item in value]
    if isinstance(value, dict):
        return {native_value(unquote(str(key))): native_value(item) for key, item in value.items()}
    return value


def decode_escapes(text: str) -> str:
    """Decode the backslash escapes of a quoted string."""
    return _ESCAPE_RE.sub(_decode_escape, text)


def _decode_escape(match: "re.Match") -> str:
    code = match.group(1)
    if code[0] in "uU":
        point = int(code[1:], 16)
        if point > 0x10FFFF:
            return match.group(0)
        return chr(point)
    return _SIMPLE_ESCAPES[code]


def restore_collections(text: str) -> str:
    """
    Rewrite Python reprs of objects and tuples inside expression text as HCL.

    `object({ a = string })` arrives as `object({'a': '${string}'})` and
    becomes `object({a=string})`. Brackets that are indexes, templates or
    for expressions are left alone.
    """
    pieces = []
    in_string = False
    i = 0
    while i < len(text):
        char = text[i]
        if in_string:
            if char == "\\":
                pieces.append(text[i:i + 2])
                i += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in "[{" and (i == 0 or text[i - 1] not in _NOT_COLLECTION_AFTER):
            end = _repr_end(text, i)
            collection = _literal_collection(text[i:end + 1]) if end != -1 else None
            if collection is not None:
                pieces.append(_to_hcl(collection))
                i = end + 1
                continue
        pieces.append(char)
        i += 1
    return "".join(pieces)


def _repr_end(text: str, start: int) -> int:
    """Index of the bracket closing the repr at `start`, or -1."""
    depth = 0
    quote = None
    i = start
    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _literal_collection(text: str) -> Any:
    try:
        value = ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return None
    return value if isinstance(value, (list, dict)) else None


def _to_hcl(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, str):
        inner = wrapped_expression(value)
        if inner is not None:
            return restore_collections(inner)
        return f'"{value}"'
    if isinstance(value, list):
        return "[" + ", ".join(_to_hcl(item) for item in value) + "]"
    if isinstance(value, dict):
        entries = []
        for key, item in value.items():
            key_text = str(key) if _IDENTIFIER_RE.match(str(key)) else f'"{key}"'
            entries.append(f"{key_text}={_to_hcl(item)}")
        return "{" + ", ".join(entries) + "}"
    return str(value)


def _first_line(message: str) -> str:
    message = message.strip()
    return message.splitlines()[0] if message else "The file could not be parsed."
