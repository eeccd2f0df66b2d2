"""Load a module directory: discover, parse and extract files, then merge."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional
from .discovery import SourceFile, discover_files
from ..config.models import InspectConfig
from ..contracts.diagnostics import DiagnosticKind, DiagnosticSink
from ..contracts.module import Module, ModuleFragment
from ..extract.file_extractor import extract
from ..extract.merger import merge
from ..syntax.provider import parse
from ..utils.errors import ModuleLoadError
from ..utils.logging import get_logger

logger = get_logger("ingest.module_loader")


def load_module(path: str, strict: bool = False, config: Optional[InspectConfig] = None) -> Module:
    """
    Load and extract a module directory.

    Each file is read, parsed and extracted on its own worker; the merge
    waits for all of them and then runs once, in file-name order.

    Args:
        path: Module directory
        strict: Raise on the first unreadable or unparsable file instead of
            recording a diagnostic (also enabled by extraction.strict)
        config: Settings; defaults are used when None

    Returns:
        Module with aggregated diagnostics

    Raises:
        DiscoveryError: If the directory is missing or cannot be listed
        ModuleLoadError: In strict mode, if a file cannot be read or parsed
    """
    if config is None:
        config = InspectConfig()
    strict = strict or config.extraction.strict

    sources = discover_files(path, include_overrides=config.discovery.include_overrides)
    if not sources:
        logger.warning(f"No configuration files found in {path}")
        return Module(path=str(path))

    workers = min(config.extraction.max_workers, len(sources))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        fragments: List[ModuleFragment] = list(
            executor.map(lambda source: load_fragment(source, strict), sources)
        )

    module = merge(fragments, str(path))
    logger.info(
        f"Loaded module {path}: {len(sources)} files, "
        f"{len(module.managed_resources)} resources, {len(module.data_resources)} data sources, "
        f"{len(module.variables)} variables, {len(module.errors())} errors, "
        f"{len(module.warnings())} warnings"
    )
    return module


def load_fragment(source: SourceFile, strict: bool = False) -> ModuleFragment:
    """Read, parse and extract one file."""
    try:
        raw_text = Path(source.path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if strict:
            raise ModuleLoadError(f"Cannot read {source.path}: {e}") from e
        logger.warning(f"Could not read {source.path}: {e}")
        sink = DiagnosticSink(source.path)
        sink.error(DiagnosticKind.FILE_ERROR, "Failed to read file", str(e))
        return ModuleFragment(file_path=source.path, override=source.override,
                              diagnostics=sink.diagnostics)

    body, parse_diagnostics = parse(raw_text, source.syntax_kind, source.path)
    if strict:
        syntax_errors = [
            d for d in parse_diagnostics
            if d.is_error and d.kind == DiagnosticKind.SYNTAX_ERROR
        ]
        if syntax_errors:
            first = syntax_errors[0]
            raise ModuleLoadError(f"Syntax error in {first.location()}: {first.summary}. {first.detail}".rstrip())

    return extract(body, source.path, override=source.override, parse_diagnostics=parse_diagnostics)
