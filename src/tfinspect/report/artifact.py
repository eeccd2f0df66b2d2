"""JSON output and CI/CD artifacts from an extracted Module."""

import json
from pathlib import Path
from typing import Any, Dict
from ..contracts.module import Module
from ..utils.errors import TfInspectError
from ..utils.logging import get_logger

logger = get_logger("report.artifact")


def render_json(module: Module) -> str:
    """Serialize the whole module, diagnostics included."""
    return json.dumps(module.model_dump(mode="json"), indent=2)


def build_summary(module: Module) -> Dict[str, Any]:
    """Counts of each declaration kind and of diagnostics by severity."""
    return {
        "path": module.path,
        "required_core": list(module.required_core),
        "provider_count": len(module.required_providers),
        "variable_count": len(module.variables),
        "output_count": len(module.outputs),
        "managed_resource_count": len(module.managed_resources),
        "data_resource_count": len(module.data_resources),
        "module_call_count": len(module.module_calls),
        "error_count": len(module.errors()),
        "warning_count": len(module.warnings()),
    }


def generate_artifacts(module: Module, output_dir: Path) -> None:
    """
    Write CI/CD artifacts for a module.

    Creates the following files in output_dir:
    - module.json: Full module, as render_json produces it
    - summary.json: Declaration and diagnostic counts
    - diagnostics.json: Diagnostics only

    Args:
        module: Extracted module
        output_dir: Directory to write artifacts to

    Raises:
        TfInspectError: If a file cannot be written
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TfInspectError(f"Failed to create output directory: {e}") from e

    artifacts = {
        "module.json": render_json(module),
        "summary.json": json.dumps(build_summary(module), indent=2),
        "diagnostics.json": json.dumps(
            [d.model_dump(mode="json") for d in module.diagnostics], indent=2
        ),
    }
    for name, content in artifacts.items():
        path = output_dir / name
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
            logger.debug(f"Written {name}: {path}")
        except OSError as e:
            raise TfInspectError(f"Failed to write {name}: {e}") from e

    logger.info(f"Generated artifacts in {output_dir}")
