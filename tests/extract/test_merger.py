"""Tests for the module merger."""

import pytest
from tfinspect.contracts.diagnostics import DiagnosticKind, Severity
from tfinspect.contracts.values import Known
from tfinspect.extract.file_extractor import extract
from tfinspect.extract.merger import merge
from tfinspect.syntax.expressions import from_python_value
from tfinspect.syntax.tree import GenericBlock, GenericBody, SourceRange


def make_block(block_type, labels=(), attributes=None, blocks=(), line=1):
    """Build a generic block from plain Python values."""
    return GenericBlock(
        type=block_type,
        labels=list(labels),
        attributes={k: from_python_value(v) for k, v in (attributes or {}).items()},
        blocks=list(blocks),
        range=SourceRange(start_line=line, end_line=line),
    )


def fragment(file_path, *blocks, override=False):
    return extract(GenericBody(blocks=list(blocks)), file_path, override=override)


def requirements(**providers):
    return make_block("terraform", blocks=[make_block("required_providers", attributes=providers)])


@pytest.fixture
def two_files():
    a = fragment(
        "mod/a.tf",
        make_block("resource", ["aws_instance", "x"], {"ami": "ami-a"}, line=1),
        make_block("variable", ["region"], {"default": "us-east-1"}, line=5),
    )
    b = fragment(
        "mod/b.tf",
        make_block("resource", ["aws_instance", "x"], {"ami": "ami-b"}, line=3),
        make_block("output", ["ip"], {"value": "${aws_instance.x.public_ip}"}, line=8),
    )
    return a, b


class TestDuplicates:
    """The same key declared in two files."""

    def test_first_declaration_wins(self, two_files):
        """One entry (from a.tf) and one error citing b.tf."""
        a, b = two_files
        module = merge([a, b], "mod")
        assert list(module.managed_resources) == ["aws_instance.x"]
        assert module.managed_resources["aws_instance.x"].pos.start_line == 1
        errors = module.errors()
        assert len(errors) == 1
        assert errors[0].kind == DiagnosticKind.MERGE_CONFLICT
        assert errors[0].file_path == "mod/b.tf"
        assert errors[0].source_range.start_line == 3
        assert "mod/a.tf:1" in errors[0].detail

    def test_other_declarations_are_kept(self, two_files):
        module = merge(list(two_files), "mod")
        assert module.variables["region"].default == Known(value="us-east-1")
        assert "ip" in module.outputs


class TestDeterminism:
    """Input order never changes the result."""

    def test_fragment_order_does_not_matter(self, two_files):
        a, b = two_files
        assert merge([a, b], "mod").model_dump_json() == merge([b, a], "mod").model_dump_json()

    def test_repeated_merge_is_identical(self, two_files):
        first = merge(list(two_files), "mod").model_dump_json()
        second = merge(list(two_files), "mod").model_dump_json()
        assert first == second

    def test_diagnostics_follow_file_order(self):
        """File diagnostics in file-name order, then merge diagnostics."""
        a = fragment("a.tf", make_block("resorce", ["x", "y"]),
                     make_block("variable", ["v"], line=3))
        b = fragment("b.tf", make_block("resorce", ["x", "z"]),
                     make_block("variable", ["v"], line=4))
        module = merge([b, a], "mod")
        assert [(d.file_path, d.kind) for d in module.diagnostics] == [
            ("a.tf", DiagnosticKind.SCHEMA_VIOLATION),
            ("b.tf", DiagnosticKind.SCHEMA_VIOLATION),
            ("b.tf", DiagnosticKind.MERGE_CONFLICT),
        ]


class TestProviderRequirements:
    """required_providers entries across files."""

    def test_conflicting_sources(self):
        """Exactly one merge conflict; the first-declared source is kept."""
        a = fragment("a.tf", requirements(aws={"source": "hashicorp/aws", "version": ">= 4"}))
        b = fragment("b.tf", requirements(aws={"source": "example/aws", "version": "< 6"}))
        module = merge([a, b], "mod")
        conflicts = [d for d in module.diagnostics if d.kind == DiagnosticKind.MERGE_CONFLICT]
        assert len(conflicts) == 1
        assert conflicts[0].severity == Severity.ERROR
        assert conflicts[0].file_path == "b.tf"
        assert module.required_providers["aws"].source == "hashicorp/aws"

    def test_constraints_are_combined(self):
        """Compatible requirements union their version constraints in file order."""
        a = fragment("a.tf", requirements(aws={"source": "hashicorp/aws", "version": ">= 4"}))
        b = fragment("b.tf", requirements(aws={"version": "< 6"}))
        module = merge([b, a], "mod")
        requirement = module.required_providers["aws"]
        assert requirement.source == "hashicorp/aws"
        assert requirement.version_constraints == [">= 4", "< 6"]
        assert module.diagnostics == []

    def test_required_core_keeps_duplicates(self):
        a = fragment("a.tf", make_block("terraform", attributes={"required_version": ">= 1.0"}))
        b = fragment("b.tf", make_block("terraform", attributes={"required_version": ">= 1.0"}))
        assert merge([a, b], "mod").required_core == [">= 1.0", ">= 1.0"]


class TestOverrides:
    """Override files are applied after primary files."""

    def test_override_replaces_set_fields(self):
        base = fragment("main.tf", make_block("variable", ["region"], {
            "default": "us-east-1", "description": "Region",
        }))
        override = fragment("override.tf", make_block("variable", ["region"], {"default": "eu-west-1"}),
                            override=True)
        module = merge([override, base], "mod")
        variable = module.variables["region"]
        assert variable.default == Known(value="eu-west-1")
        assert variable.description == "Region"
        assert module.diagnostics == []

    def test_override_without_base(self):
        override = fragment("x_override.tf", make_block("output", ["missing"], {"value": 1}),
                            override=True)
        module = merge([override], "mod")
        assert module.outputs == {}
        assert module.errors()[0].summary == "Missing base output declaration to override"

    def test_override_required_version(self):
        base = fragment("main.tf", make_block("terraform", attributes={"required_version": ">= 1.0"}))
        override = fragment("override.tf", make_block("terraform", attributes={"required_version": ">= 1.6"}),
                            override=True)
        assert merge([base, override], "mod").required_core == [">= 1.6"]


class TestEmpty:
    def test_no_fragments(self):
        """Merging nothing still returns a module."""
        module = merge([], "mod")
        assert module.path == "mod"
        assert module.managed_resources == {}
        assert module.diagnostics == []
