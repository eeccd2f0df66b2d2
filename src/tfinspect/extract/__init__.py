"""Extraction engine: literal evaluation, schema decoding, per-file extraction and merging."""

from .literal import evaluate
from .schema import BLOCK_SCHEMAS, AttributeKind, BlockSchema, DecodedBlock, decode
from .file_extractor import extract
from .merger import merge

__all__ = [
    "AttributeKind",
    "BLOCK_SCHEMAS",
    "BlockSchema",
    "DecodedBlock",
    "decode",
    "evaluate",
    "extract",
    "merge",
]
