"""Syntax tree provider: one entry point for both surface syntaxes."""

from typing import List, Optional, Tuple
from .json_syntax import BlockLayout, parse_json
from .native import parse_native
from .tree import GenericBody, SyntaxKind
from ..contracts.diagnostics import Diagnostic, DiagnosticSink


def parse(raw_text: str, syntax_kind: SyntaxKind, file_path: str,
          layout: Optional[BlockLayout] = None) -> Tuple[GenericBody, List[Diagnostic]]:
    """
    Parse raw file text into a generic body.

    Args:
        raw_text: File contents
        syntax_kind: Native or JSON syntax
        file_path: Path used for diagnostic provenance
        layout: Block layout for the JSON syntax (defaults to the extractor's schema table)

    Returns:
        Tuple of (body, parse diagnostics)
    """
    sink = DiagnosticSink(file_path)
    if SyntaxKind(syntax_kind) == SyntaxKind.JSON:
        if layout is None:
            from ..extract.schema import JSON_LAYOUT
            layout = JSON_LAYOUT
        body = parse_json(raw_text, sink, layout)
    else:
        body = parse_native(raw_text, sink)
    return body, sink.diagnostics
