"""Find the configuration files that make up a module directory."""

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
from ..syntax.tree import SyntaxKind
from ..utils.errors import DiscoveryError
from ..utils.logging import get_logger

logger = get_logger("ingest.discovery")

NATIVE_SUFFIX = ".tf"
JSON_SUFFIX = ".tf.json"


class SourceFile(BaseModel):
    """One configuration file selected for extraction."""
    path: str = Field(..., description="Path of the file")
    syntax_kind: SyntaxKind = Field(..., description="Surface syntax, from the file extension")
    override: bool = Field(False, description="True for override.tf and *_override.tf files")

    class Config:
        frozen = True


def syntax_kind_for(name: str) -> Optional[SyntaxKind]:
    """Return the syntax of a file name, or None when it is not a configuration file."""
    if name.endswith(JSON_SUFFIX):
        return SyntaxKind.JSON
    if name.endswith(NATIVE_SUFFIX):
        return SyntaxKind.NATIVE
    return None


def is_ignored(name: str) -> bool:
    """Hidden files, editor backups and emacs lock files are never configuration."""
    return name.startswith(".") or name.endswith("~") or (name.startswith("#") and name.endswith("#"))


def is_override(name: str) -> bool:
    if name.endswith(JSON_SUFFIX):
        stem = name[:-len(JSON_SUFFIX)]
    else:
        stem = name[:-len(NATIVE_SUFFIX)]
    return stem == "override" or stem.endswith("_override")


def discover_files(path: str, include_overrides: bool = True) -> List[SourceFile]:
    """
    List the configuration files of a module directory.

    Primary files come first, sorted by name, followed by override files,
    also sorted by name. Subdirectories are not searched.

    Args:
        path: Module directory
        include_overrides: When False, override files are left out

    Returns:
        Ordered list of SourceFile

    Raises:
        DiscoveryError: If the path is missing, not a directory or unreadable
    """
    directory = Path(path)
    if not directory.exists():
        raise DiscoveryError(
            f"Module directory not found: {path}. "
            "Please check the path and ensure the directory exists."
        )
    if not directory.is_dir():
        raise DiscoveryError(
            f"Path is not a directory: {path}. "
            "Please provide the directory that holds the module's .tf files."
        )

    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as e:
        raise DiscoveryError(f"Cannot read module directory {path}: {e}") from e

    primary: List[SourceFile] = []
    overrides: List[SourceFile] = []
    for entry in entries:
        name = entry.name
        if is_ignored(name) or not entry.is_file():
            continue
        kind = syntax_kind_for(name)
        if kind is None:
            continue
        if is_override(name):
            if include_overrides:
                overrides.append(SourceFile(path=str(entry), syntax_kind=kind, override=True))
            else:
                logger.debug(f"Excluding override file {entry}")
            continue
        primary.append(SourceFile(path=str(entry), syntax_kind=kind))

    logger.debug(f"Discovered {len(primary)} primary and {len(overrides)} override files in {path}")
    return primary + overrides
