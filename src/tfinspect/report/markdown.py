"""Markdown report generation from an extracted Module."""

import json
from pathlib import Path
from typing import List, Optional
from ..contracts.module import Module
from ..contracts.values import Known
from ..utils.errors import TfInspectError
from ..utils.logging import get_logger

logger = get_logger("report.markdown")


def render_markdown(module: Module) -> str:
    """
    Render a module summary as markdown.

    Sections without entries are left out, except Problems, which always
    states whether anything was found.
    """
    sections: List[str] = []

    sections.append(f"# Module `{module.path}`")
    sections.append("")

    if module.required_core:
        sections.append("Core Version Requirements: " + ", ".join(f"`{c}`" for c in module.required_core))
        sections.append("")

    if module.required_providers:
        sections.append("## Provider Requirements")
        sections.append("")
        for name in sorted(module.required_providers):
            requirement = module.required_providers[name]
            line = f"- **{name}**"
            if requirement.source:
                line += f" (`{requirement.source}`)"
            if requirement.version_constraints:
                line += ": " + ", ".join(f"`{c}`" for c in requirement.version_constraints)
            sections.append(line)
            for alias in requirement.configuration_aliases:
                sections.append(f"  - alias `{alias}`")
        sections.append("")

    if module.variables:
        sections.append("## Input Variables")
        sections.append("")
        for name in sorted(module.variables):
            variable = module.variables[name]
            line = f"- `{name}`"
            if variable.required:
                line += " (required)"
            elif variable.default is not None:
                line += f" (default `{_value_text(variable.default)}`)"
            if variable.description:
                line += f": {variable.description}"
            sections.append(line)
        sections.append("")

    if module.outputs:
        sections.append("## Output Values")
        sections.append("")
        for name in sorted(module.outputs):
            output = module.outputs[name]
            line = f"- `{name}`"
            if output.sensitive:
                line += " (sensitive)"
            if output.description:
                line += f": {output.description}"
            sections.append(line)
        sections.append("")

    _resource_section(sections, "Managed Resources", module.managed_resources)
    _resource_section(sections, "Data Resources", module.data_resources)

    if module.module_calls:
        sections.append("## Child Modules")
        sections.append("")
        for name in sorted(module.module_calls):
            call = module.module_calls[name]
            line = f"- `{name}` from `{call.source}`"
            if call.version_constraint:
                line += f" (`{call.version_constraint}`)"
            sections.append(line)
        sections.append("")

    sections.append("## Problems")
    sections.append("")
    if module.diagnostics:
        for diagnostic in module.diagnostics:
            label = "Error" if diagnostic.is_error else "Warning"
            sections.append(f"- {label}: {diagnostic.summary} (`{diagnostic.location()}`)")
            if diagnostic.detail:
                sections.append(f"  - {diagnostic.detail}")
    else:
        sections.append("None detected.")
    sections.append("")

    return "\n".join(sections)


def generate_markdown(module: Module, output_path: Path) -> None:
    """
    Write the markdown report for a module to a file.

    Args:
        module: Extracted module
        output_path: Path to output markdown file

    Raises:
        TfInspectError: If file write fails
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(render_markdown(module))
        logger.info(f"Generated markdown report: {output_path}")
    except OSError as e:
        raise TfInspectError(f"Failed to write markdown report: {e}") from e


def _resource_section(sections: List[str], title: str, resources) -> None:
    if not resources:
        return
    sections.append(f"## {title}")
    sections.append("")
    for address in sorted(resources):
        resource = resources[address]
        line = f"- `{address}`"
        location = _line(resource.pos)
        if location:
            line += f" ({location})"
        sections.append(line)
    sections.append("")


def _line(source_range) -> Optional[str]:
    if source_range is None:
        return None
    return f"line {source_range.start_line}"


def _value_text(result) -> str:
    if isinstance(result, Known):
        return json.dumps(result.value, sort_keys=True)
    return "(not static)"
