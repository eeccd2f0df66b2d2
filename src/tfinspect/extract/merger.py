"""Combine per-file fragments into one module.

The merge is a single sequential reduction. Fragments are sorted here, not
by the caller, so the result does not depend on the order in which parallel
workers finished: primary files first, override files last, each group
ordered by file name.
"""

from pathlib import PurePath
from typing import Dict, Iterable, List, Optional, Tuple
from .declarations import (
    IDENTITY_FIELDS,
    combine_requirements,
    conflicting_sources_detail,
    duplicate_detail,
    location,
)
from ..contracts.diagnostics import Diagnostic, DiagnosticKind, Severity
from ..contracts.module import Module, ModuleFragment, ProviderRequirement
from ..syntax.tree import SourceRange
from ..utils.logging import get_logger

logger = get_logger("extract.merger")

# (collection attribute, noun used in diagnostics)
KEYED_COLLECTIONS: Tuple[Tuple[str, str], ...] = (
    ("variables", "variable"),
    ("outputs", "output"),
    ("provider_configs", "provider configuration"),
    ("managed_resources", "resource"),
    ("data_resources", "data resource"),
    ("module_calls", "module call"),
)


def fragment_order(fragment: ModuleFragment) -> Tuple[bool, str, str]:
    """Sort key: overrides last, then file name, then full path."""
    return (fragment.override, PurePath(fragment.file_path).name, fragment.file_path)


class _Merger:
    def __init__(self):
        self.required_core: List[str] = []
        self.required_providers: Dict[str, ProviderRequirement] = {}
        self.collections: Dict[str, Dict] = {name: {} for name, _ in KEYED_COLLECTIONS}
        self.origins: Dict[Tuple[str, str], str] = {}
        self.requirement_origins: Dict[str, str] = {}
        self.override_core: Optional[List[str]] = None
        self.file_diagnostics: List[Diagnostic] = []
        self.merge_diagnostics: List[Diagnostic] = []

    def _record(self, file_path: str, summary: str, detail: str,
                source_range: Optional[SourceRange]) -> None:
        self.merge_diagnostics.append(Diagnostic(
            severity=Severity.ERROR,
            kind=DiagnosticKind.MERGE_CONFLICT,
            summary=summary,
            detail=detail,
            file_path=file_path,
            source_range=source_range,
        ))

    def add(self, fragment: ModuleFragment) -> None:
        self.file_diagnostics.extend(fragment.diagnostics)
        if fragment.override:
            self._add_override(fragment)
            return

        self.required_core.extend(fragment.required_core)
        for name, requirement in fragment.required_providers.items():
            self._add_requirement(fragment.file_path, name, requirement)

        for collection, noun in KEYED_COLLECTIONS:
            merged = self.collections[collection]
            for key, declaration in getattr(fragment, collection).items():
                if key in merged:
                    first_file = self.origins[(collection, key)]
                    self._record(
                        fragment.file_path,
                        f"Duplicate {noun} declaration",
                        duplicate_detail(noun, key, location(first_file, merged[key].pos)),
                        declaration.pos,
                    )
                    continue
                merged[key] = declaration
                self.origins[(collection, key)] = fragment.file_path

    def _add_requirement(self, file_path: str, name: str, requirement: ProviderRequirement) -> None:
        existing = self.required_providers.get(name)
        if existing is None:
            self.required_providers[name] = requirement
            self.requirement_origins[name] = file_path
            return
        combined, conflict = combine_requirements(existing, requirement)
        if conflict:
            first_file = self.requirement_origins[name]
            self._record(
                file_path,
                "Conflicting provider source",
                conflicting_sources_detail(name, existing.source, requirement.source,
                                           first_file),
                None,
            )
        self.required_providers[name] = combined

    def _add_override(self, fragment: ModuleFragment) -> None:
        if fragment.required_core:
            if self.override_core is None:
                self.override_core = []
            self.override_core.extend(fragment.required_core)

        for name, requirement in fragment.required_providers.items():
            existing = self.required_providers.get(name)
            if existing is None:
                self.required_providers[name] = requirement
                self.requirement_origins[name] = fragment.file_path
                continue
            update = {}
            if requirement.source is not None:
                update["source"] = requirement.source
            if requirement.version_constraints:
                update["version_constraints"] = list(requirement.version_constraints)
            if requirement.configuration_aliases:
                update["configuration_aliases"] = list(requirement.configuration_aliases)
            self.required_providers[name] = existing.model_copy(update=update)

        for collection, noun in KEYED_COLLECTIONS:
            merged = self.collections[collection]
            for key, declaration in getattr(fragment, collection).items():
                base = merged.get(key)
                if base is None:
                    self._record(
                        fragment.file_path,
                        f"Missing base {noun} declaration to override",
                        f'There is no {noun} named "{key}" in a primary configuration file; '
                        "override files can only modify existing declarations.",
                        declaration.pos,
                    )
                    continue
                merged[key] = _apply_override(base, declaration)
                logger.debug(f"Applied override for {noun} {key} from {fragment.file_path}")

    def build(self, path: str) -> Module:
        required_core = self.required_core if self.override_core is None else self.override_core
        return Module(
            path=path,
            required_core=required_core,
            required_providers=self.required_providers,
            diagnostics=self.file_diagnostics + self.merge_diagnostics,
            **self.collections,
        )


def _apply_override(base, override):
    """Replace the fields the override explicitly sets, keeping identity fields."""
    update = {
        name: getattr(override, name)
        for name in override.model_fields_set
        if name not in IDENTITY_FIELDS
    }
    return base.model_copy(update=update)


def merge(fragments: Iterable[ModuleFragment], path: str) -> Module:
    """
    Merge per-file fragments into a module.

    Never raises for configuration problems: conflicts become merge_conflict
    diagnostics and the first declaration (in file order) wins.
    """
    merger = _Merger()
    ordered = sorted(fragments, key=fragment_order)
    for fragment in ordered:
        merger.add(fragment)
    module = merger.build(path)
    logger.debug(
        f"Merged {len(ordered)} files: {len(module.managed_resources)} resources, "
        f"{len(module.diagnostics)} diagnostics"
    )
    return module
