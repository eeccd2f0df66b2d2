"""Tests for the block schema decoder."""

import pytest
from tfinspect.contracts.diagnostics import DiagnosticKind, DiagnosticSink, Severity
from tfinspect.contracts.values import Known, NotStatic
from tfinspect.extract.schema import (
    BLOCK_SCHEMAS,
    AttributeKind,
    AttributeSpec,
    BlockSchema,
    NestedBlockSpec,
    decode,
)
from tfinspect.syntax.expressions import from_python_value
from tfinspect.syntax.tree import GenericBlock, SourceRange


def make_block(block_type, labels=(), attributes=None, blocks=(), line=1):
    """Build a generic block from plain Python values."""
    return GenericBlock(
        type=block_type,
        labels=list(labels),
        attributes={k: from_python_value(v) for k, v in (attributes or {}).items()},
        blocks=list(blocks),
        range=SourceRange(start_line=line, end_line=line),
    )


@pytest.fixture
def sink():
    return DiagnosticSink("main.tf")


class TestLabels:
    """Label count and content checks."""

    def test_missing_label(self, sink):
        """A resource without its name label is rejected with one error."""
        block = make_block("resource", ["aws_instance"], {"ami": "ami-123"})
        assert decode(block, BLOCK_SCHEMAS["resource"], sink) is None
        assert len(sink.diagnostics) == 1
        diagnostic = sink.diagnostics[0]
        assert diagnostic.severity == Severity.ERROR
        assert diagnostic.kind == DiagnosticKind.SCHEMA_VIOLATION
        assert diagnostic.summary == "Missing name for resource"

    def test_extra_label(self, sink):
        """Too many labels are rejected."""
        block = make_block("variable", ["a", "b"])
        assert decode(block, BLOCK_SCHEMAS["variable"], sink) is None
        assert sink.diagnostics[0].summary == "Extraneous label for variable"

    def test_empty_label(self, sink):
        """An empty label is rejected."""
        block = make_block("variable", [""])
        assert decode(block, BLOCK_SCHEMAS["variable"], sink) is None
        assert sink.diagnostics[0].summary == "Invalid name for variable"


class TestAttributes:
    """Attribute decoding per attribute kind."""

    def test_any_keeps_literal_result(self, sink):
        """ANY attributes hold a LiteralResult, static or not."""
        block = make_block("variable", ["region"], {"default": "us-east-1"})
        decoded = decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert decoded.get("default") == Known(value="us-east-1")
        assert len(sink.diagnostics) == 0

    def test_any_tolerates_reference(self, sink):
        """A reference in an ANY attribute is recorded without a diagnostic."""
        block = make_block("output", ["id"], {"value": "${aws_instance.web.id}"})
        decoded = decode(block, BLOCK_SCHEMAS["output"], sink)
        assert isinstance(decoded.get("value"), NotStatic)
        assert len(sink.diagnostics) == 0

    def test_string_not_static(self, sink):
        """A string attribute that must be static gives a warning and stays absent."""
        block = make_block("variable", ["x"], {"description": "${var.other}"})
        decoded = decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert not decoded.has("description")
        assert len(sink.diagnostics) == 1
        assert sink.diagnostics[0].severity == Severity.WARNING
        assert sink.diagnostics[0].kind == DiagnosticKind.UNRESOLVED_EXPRESSION

    def test_string_from_number(self, sink):
        """Numbers are accepted where a string is expected."""
        block = make_block("terraform", attributes={"required_version": 1})
        decoded = decode(block, BLOCK_SCHEMAS["terraform"], sink)
        assert decoded.get("required_version") == "1"

    def test_bool_from_string(self, sink):
        """The strings "true" and "false" are accepted as bools."""
        block = make_block("variable", ["x"], {"sensitive": "true"})
        decoded = decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert decoded.get("sensitive") is True

    def test_wrong_type(self, sink):
        """A list where a bool is expected is an error."""
        block = make_block("variable", ["x"], {"sensitive": [1]})
        decoded = decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert not decoded.has("sensitive")
        assert sink.diagnostics[0].summary == "Incorrect attribute value type"
        assert sink.diagnostics[0].severity == Severity.ERROR

    def test_type_expression_text(self, sink):
        """Type constraints are kept as raw text."""
        block = make_block("variable", ["x"], {"type": "${list(string)}"})
        decoded = decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert decoded.get("type") == "list(string)"

    def test_reference_list(self, sink):
        """depends_on keeps reference text in order."""
        block = make_block("resource", ["aws_instance", "web"],
                           {"depends_on": ["${aws_vpc.main}", "${module.net}"]})
        decoded = decode(block, BLOCK_SCHEMAS["resource"], sink)
        assert decoded.get("depends_on") == ["aws_vpc.main", "module.net"]

    def test_reference_from_json_string(self, sink):
        """A plain string holding a reference is accepted (JSON syntax form)."""
        block = make_block("resource", ["aws_instance", "web"], {"provider": "aws.west"})
        decoded = decode(block, BLOCK_SCHEMAS["resource"], sink)
        assert decoded.get("provider") == "aws.west"

    def test_invalid_reference(self, sink):
        """A function call where a reference is expected is an error."""
        block = make_block("resource", ["aws_instance", "web"], {"provider": "${lookup(var.p, 1)}"})
        decoded = decode(block, BLOCK_SCHEMAS["resource"], sink)
        assert not decoded.has("provider")
        assert sink.diagnostics[0].summary == "Invalid reference"

    def test_missing_required(self, sink):
        """A module call without source is reported; decoding still succeeds."""
        block = make_block("module", ["net"], {"version": "1.0"})
        decoded = decode(block, BLOCK_SCHEMAS["module"], sink)
        assert decoded is not None
        assert decoded.get("version") == "1.0"
        assert sink.diagnostics[0].summary == "Missing required argument"

    def test_unknown_attribute_on_closed_schema(self, sink):
        """Unknown attributes of closed schemas are warnings."""
        block = make_block("variable", ["x"], {"colour": "blue"})
        decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert sink.diagnostics[0].summary == "Unsupported argument"
        assert sink.diagnostics[0].severity == Severity.WARNING

    def test_open_schema_keeps_extra(self, sink):
        """Resource arguments are provider-specific and kept aside silently."""
        block = make_block("resource", ["aws_instance", "web"], {"ami": "ami-123"})
        decoded = decode(block, BLOCK_SCHEMAS["resource"], sink)
        assert "ami" in decoded.extra
        assert len(sink.diagnostics) == 0


class TestNestedBlocks:
    """Nested block checks."""

    def test_duplicate_singleton(self, sink):
        """A second lifecycle block is an error and is dropped."""
        block = make_block("resource", ["aws_instance", "web"], blocks=[
            make_block("lifecycle", attributes={"prevent_destroy": True}, line=2),
            make_block("lifecycle", attributes={"prevent_destroy": False}, line=5),
        ])
        decoded = decode(block, BLOCK_SCHEMAS["resource"], sink)
        assert len(decoded.nested("lifecycle")) == 1
        assert decoded.nested("lifecycle")[0].get("prevent_destroy") is True
        assert sink.diagnostics[0].summary == "Duplicate lifecycle block"
        assert sink.diagnostics[0].source_range.start_line == 5

    def test_unexpected_block(self, sink):
        """Closed schemas reject unknown nested blocks."""
        block = make_block("variable", ["x"], blocks=[make_block("lifecycle")])
        decoded = decode(block, BLOCK_SCHEMAS["variable"], sink)
        assert decoded.nested("lifecycle") == []
        assert sink.diagnostics[0].summary == "Unsupported block type"

    def test_repeated_blocks_allowed(self, sink):
        """Non-singleton nested blocks accumulate in order."""
        block = make_block("resource", ["null_resource", "x"], blocks=[
            make_block("provisioner", ["local-exec"], {"command": "echo 1"}),
            make_block("provisioner", ["remote-exec"]),
        ])
        decoded = decode(block, BLOCK_SCHEMAS["resource"], sink)
        assert [p.labels[0] for p in decoded.nested("provisioner")] == ["local-exec", "remote-exec"]

    def test_opaque_block_is_not_inspected(self, sink):
        """Backend contents are not checked."""
        backend = make_block("backend", ["s3"], {"bucket": "${var.bucket}"})
        block = make_block("terraform", blocks=[backend])
        decoded = decode(block, BLOCK_SCHEMAS["terraform"], sink)
        assert decoded.nested("backend")[0].labels == ["s3"]
        assert len(sink.diagnostics) == 0


class TestCustomSchema:
    """Schemas are data; a new one can be decoded without code changes."""

    def test_custom_schema(self, sink):
        schema = BlockSchema(
            labels=("name",),
            attributes={"enabled": AttributeSpec(AttributeKind.BOOL, required=True)},
            blocks={"rule": NestedBlockSpec(BlockSchema(open_attributes=True))},
        )
        block = make_block("policy", ["p"], {"enabled": False},
                           blocks=[make_block("rule", attributes={"x": 1})])
        decoded = decode(block, schema, sink)
        assert decoded.get("enabled") is False
        assert decoded.nested("rule")[0].extra["x"].value == 1
        assert len(sink.diagnostics) == 0
