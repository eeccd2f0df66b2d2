"""JSON syntax (.tf.json) adapter.

In the JSON form nothing marks a property as a block: whether `"lifecycle"`
is a nested block or an attribute, and how many levels of object keys are
labels, depends on the block type. That knowledge comes in as a
`BlockLayout` tree built from the schema table.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
from .expressions import from_python_value
from .tree import GenericBlock, GenericBody, SourceRange
from ..contracts.diagnostics import DiagnosticKind, DiagnosticSink
from ..utils.logging import get_logger

logger = get_logger("syntax.json")

COMMENT_KEY = "//"


@dataclass(frozen=True)
class BlockLayout:
    """Label count and nested block layouts for one block type."""
    labels: int = 0
    nested: Mapping[str, "BlockLayout"] = field(default_factory=dict)


def parse_json(raw_text: str, sink: DiagnosticSink, layout: BlockLayout) -> GenericBody:
    """Parse a JSON-syntax document into a generic body."""
    try:
        document = json.loads(raw_text)
    except json.JSONDecodeError as e:
        sink.error(
            DiagnosticKind.SYNTAX_ERROR,
            "Invalid JSON syntax",
            e.msg,
            SourceRange(start_line=e.lineno, end_line=e.lineno, start_column=e.colno),
        )
        return GenericBody()

    if not isinstance(document, dict):
        sink.error(
            DiagnosticKind.SYNTAX_ERROR,
            "Invalid JSON configuration",
            "The root of a JSON configuration file must be an object.",
        )
        return GenericBody()

    attributes = {}
    blocks = []
    for key, value in document.items():
        if key == COMMENT_KEY:
            continue
        block_layout = layout.nested.get(key)
        if block_layout is None:
            if isinstance(value, dict):
                # Unknown block types are reported by the extractor, not here.
                block_layout = BlockLayout()
            else:
                attributes[key] = from_python_value(value)
                continue
        blocks.extend(_blocks(key, value, block_layout, sink))

    logger.debug(f"Parsed {len(blocks)} top-level blocks from {sink.file_path}")
    return GenericBody(attributes=attributes, blocks=blocks)


def _blocks(block_type: str, value: Any, layout: BlockLayout, sink: DiagnosticSink) -> List[GenericBlock]:
    blocks = []
    for labels, body in _expand(value, layout.labels, [], block_type, sink):
        attributes, nested = _convert_body(body, layout, sink)
        blocks.append(GenericBlock(type=block_type, labels=labels, attributes=attributes, blocks=nested))
    return blocks


def _expand(value: Any, remaining: int, labels: List[str], block_type: str,
            sink: DiagnosticSink) -> Iterator[Tuple[List[str], Dict[str, Any]]]:
    """Walk `remaining` levels of label keys; arrays may appear at any level."""
    if isinstance(value, list):
        for item in value:
            yield from _expand(item, remaining, labels, block_type, sink)
        return

    if not isinstance(value, dict):
        sink.error(
            DiagnosticKind.SYNTAX_ERROR,
            f"Invalid {block_type} block",
            f"Expected a JSON object for the {block_type} block"
            + (f" {' '.join(repr(label) for label in labels)}" if labels else "")
            + f", found {type(value).__name__}.",
        )
        return

    if remaining == 0:
        yield labels, value
        return

    for key, inner in value.items():
        if key == COMMENT_KEY:
            continue
        yield from _expand(inner, remaining - 1, labels + [key], block_type, sink)


def _convert_body(body: Dict[str, Any], layout: BlockLayout,
                  sink: DiagnosticSink) -> Tuple[Dict[str, Any], List[GenericBlock]]:
    attributes = {}
    blocks = []
    for key, value in body.items():
        if key == COMMENT_KEY:
            continue
        nested_layout: Optional[BlockLayout] = layout.nested.get(key)
        if nested_layout is None:
            attributes[key] = from_python_value(value)
        else:
            blocks.extend(_blocks(key, value, nested_layout, sink))
    return attributes, blocks
