"""Tests for the JSON syntax adapter."""

import json
from tfinspect.contracts.diagnostics import DiagnosticKind
from tfinspect.syntax.provider import parse
from tfinspect.syntax.tree import ExpressionKind, SyntaxKind


def parse_document(document):
    return parse(json.dumps(document), SyntaxKind.JSON, "main.tf.json")


class TestJsonBlocks:
    """Block structure comes from the schema layout."""

    def test_resource_labels(self):
        body, diagnostics = parse_document({
            "resource": {"aws_instance": {"web": {"ami": "ami-123", "count": 2}}},
        })
        assert diagnostics == []
        block = body.blocks[0]
        assert block.type == "resource"
        assert block.labels == ["aws_instance", "web"]
        assert block.attributes["ami"].value == "ami-123"
        assert block.range is None

    def test_nested_block_vs_attribute(self):
        """lifecycle is a block in a resource; tags stays an attribute."""
        body, _ = parse_document({
            "resource": {"aws_s3_bucket": {"logs": {
                "tags": {"env": "prod"},
                "lifecycle": {"prevent_destroy": True},
            }}},
        })
        block = body.blocks[0]
        assert block.attributes["tags"].kind == ExpressionKind.OBJECT
        assert [b.type for b in block.blocks] == ["lifecycle"]

    def test_arrays_of_blocks(self):
        """Arrays may appear at any label level."""
        body, _ = parse_document({
            "variable": [{"a": {}}, {"b": {"default": 1}}],
            "resource": {"null_resource": [{"x": {}}, {"y": {}}]},
        })
        labels = [(b.type, b.labels) for b in body.blocks]
        assert labels == [
            ("variable", ["a"]),
            ("variable", ["b"]),
            ("resource", ["null_resource", "x"]),
            ("resource", ["null_resource", "y"]),
        ]

    def test_strings_are_templates(self):
        """Interpolation inside JSON strings is classified like native syntax."""
        body, _ = parse_document({"output": {"id": {"value": "${aws_instance.web.id}"}}})
        value = body.blocks[0].attributes["value"]
        assert value.kind == ExpressionKind.TRAVERSAL
        assert value.source == "aws_instance.web.id"

    def test_comments_are_skipped(self):
        body, _ = parse_document({
            "//": "generated",
            "variable": {"x": {"//": "note", "default": 1}},
        })
        assert body.attributes == {}
        assert list(body.blocks[0].attributes) == ["default"]


class TestJsonErrors:
    """Malformed documents produce syntax diagnostics."""

    def test_invalid_json(self):
        body, diagnostics = parse('{"variable": ', SyntaxKind.JSON, "bad.tf.json")
        assert body.blocks == []
        assert diagnostics[0].kind == DiagnosticKind.SYNTAX_ERROR
        assert diagnostics[0].source_range.start_line == 1
        assert diagnostics[0].file_path == "bad.tf.json"

    def test_root_must_be_object(self):
        _, diagnostics = parse("[1, 2]", SyntaxKind.JSON, "bad.tf.json")
        assert diagnostics[0].summary == "Invalid JSON configuration"

    def test_block_must_be_object(self):
        _, diagnostics = parse_document({"resource": {"aws_instance": {"web": "oops"}}})
        assert diagnostics[0].summary == "Invalid resource block"
