"""Tests for markdown and JSON reports."""

import json
from pathlib import Path
import pytest
from tfinspect.contracts.diagnostics import DiagnosticKind, DiagnosticSink
from tfinspect.contracts.module import (
    Module,
    ModuleCall,
    ProviderRequirement,
    Resource,
    ResourceMode,
    VariableDecl,
)
from tfinspect.contracts.values import Known
from tfinspect.syntax.tree import SourceRange
from tfinspect.report.artifact import build_summary, generate_artifacts, render_json
from tfinspect.report.markdown import generate_markdown, render_markdown


@pytest.fixture
def sample_module():
    sink = DiagnosticSink("mod/main.tf")
    sink.error(DiagnosticKind.MERGE_CONFLICT, "Duplicate resource declaration",
               "Already declared.", SourceRange(start_line=12, end_line=14))
    return Module(
        path="mod",
        required_core=[">= 1.5"],
        required_providers={"aws": ProviderRequirement(source="hashicorp/aws", version_constraints=["~> 5.0"])},
        variables={
            "region": VariableDecl(name="region", default=Known(value="us-east-1"), required=False,
                                   description="AWS region"),
            "name": VariableDecl(name="name"),
        },
        managed_resources={
            "aws_instance.web": Resource(mode=ResourceMode.MANAGED, type="aws_instance", name="web",
                                         pos=SourceRange(start_line=3, end_line=9)),
        },
        module_calls={"vpc": ModuleCall(name="vpc", source="./modules/vpc")},
        diagnostics=sink.diagnostics,
    )


class TestMarkdown:
    """Markdown summary content."""

    def test_sections(self, sample_module):
        content = render_markdown(sample_module)
        assert content.startswith("# Module `mod`")
        assert "Core Version Requirements: `>= 1.5`" in content
        assert "- **aws** (`hashicorp/aws`): `~> 5.0`" in content
        assert "- `name` (required)" in content
        assert '- `region` (default `"us-east-1"`): AWS region' in content
        assert "- `aws_instance.web` (line 3)" in content
        assert "- `vpc` from `./modules/vpc`" in content
        assert "- Error: Duplicate resource declaration (`mod/main.tf:12`)" in content

    def test_empty_sections_are_omitted(self):
        content = render_markdown(Module(path="empty"))
        assert "## Managed Resources" not in content
        assert "## Problems\n\nNone detected." in content

    def test_determinism(self, sample_module, tmp_path):
        first = tmp_path / "one.md"
        second = tmp_path / "two.md"
        generate_markdown(sample_module, first)
        generate_markdown(sample_module, second)
        assert first.read_text(encoding="utf-8") == second.read_text(encoding="utf-8")


class TestJsonOutput:
    """JSON rendering and artifacts."""

    def test_render_json_round_trips(self, sample_module):
        data = json.loads(render_json(sample_module))
        assert data["variables"]["region"]["default"] == {"kind": "known", "value": "us-east-1"}
        assert data["managed_resources"]["aws_instance.web"]["mode"] == "managed"
        assert data["diagnostics"][0]["severity"] == "error"
        assert Module.model_validate(data) == sample_module

    def test_summary_counts(self, sample_module):
        summary = build_summary(sample_module)
        assert summary["variable_count"] == 2
        assert summary["managed_resource_count"] == 1
        assert summary["error_count"] == 1
        assert summary["warning_count"] == 0

    def test_artifacts(self, sample_module, tmp_path):
        generate_artifacts(sample_module, tmp_path / "out")
        names = sorted(p.name for p in Path(tmp_path / "out").iterdir())
        assert names == ["diagnostics.json", "module.json", "summary.json"]
