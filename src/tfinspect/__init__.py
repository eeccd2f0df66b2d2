"""tfinspect - Static extraction of Terraform module structure."""

from typing import Optional
from .config import InspectConfig
from .contracts import Diagnostic, Module
from .ingest.module_loader import load_module
from .utils.logging import setup_logging, get_logger
from .utils.errors import TfInspectError

__version__ = "0.1.0"

__all__ = ["Diagnostic", "InspectConfig", "Module", "inspect_module", "load_module"]

setup_logging()
logger = get_logger("tfinspect")


def inspect_module(path: str, strict: bool = False, config: Optional[InspectConfig] = None) -> Module:
    """Extract a module directory, wrapping unexpected failures in TfInspectError."""
    try:
        logger.info(f"Starting inspection of module: {path}")
        return load_module(path, strict=strict, config=config)
    except TfInspectError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during inspection: {e}", exc_info=True)
        raise TfInspectError(f"Inspection failed: {e}") from e
