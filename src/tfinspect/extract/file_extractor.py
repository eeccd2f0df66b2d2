"""Per-file extraction: one generic body in, one module fragment out."""

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional
from .declarations import (
    build_module_call,
    build_output,
    build_provider_config,
    build_requirements,
    build_resource,
    build_variable,
    combine_requirements,
    conflicting_sources_detail,
    duplicate_detail,
    location,
)
from .schema import BLOCK_SCHEMAS, PASSIVE_BLOCK_TYPES, BlockSchema, DecodedBlock, decode
from ..contracts.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink
from ..contracts.module import ModuleFragment, ProviderRequirement, ResourceMode
from ..syntax.tree import GenericBody, SourceRange
from ..utils.logging import get_logger

logger = get_logger("extract.file_extractor")


class FragmentBuilder:
    """Mutable accumulator for one file's declarations."""

    def __init__(self, sink: DiagnosticSink):
        self.sink = sink
        self.required_core: List[str] = []
        self.required_providers: Dict[str, ProviderRequirement] = {}
        self.variables: Dict = {}
        self.outputs: Dict = {}
        self.provider_configs: Dict = {}
        self.managed_resources: Dict = {}
        self.data_resources: Dict = {}
        self.module_calls: Dict = {}
        self._requirement_pos: Dict[str, Optional[SourceRange]] = {}

    def add_keyed(self, collection: str, noun: str, key: str, value, pos: Optional[SourceRange]) -> None:
        """Add a declaration; a repeated key in the same file keeps the first one."""
        target = getattr(self, collection)
        if key in target:
            first = target[key]
            self.sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                f"Duplicate {noun} declaration",
                duplicate_detail(noun, key, location(self.sink.file_path, first.pos)),
                pos,
            )
            return
        target[key] = value

    def add_requirement(self, name: str, requirement: ProviderRequirement, pos: Optional[SourceRange]) -> None:
        existing = self.required_providers.get(name)
        if existing is None:
            self.required_providers[name] = requirement
            self._requirement_pos[name] = pos
            return
        combined, conflict = combine_requirements(existing, requirement)
        if conflict:
            self.sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Conflicting provider source",
                conflicting_sources_detail(
                    name, existing.source, requirement.source,
                    location(self.sink.file_path, self._requirement_pos.get(name)),
                ),
                pos,
            )
        self.required_providers[name] = combined

    def build(self, file_path: str, override: bool) -> ModuleFragment:
        return ModuleFragment(
            file_path=file_path,
            override=override,
            required_core=self.required_core,
            required_providers=self.required_providers,
            variables=self.variables,
            outputs=self.outputs,
            provider_configs=self.provider_configs,
            managed_resources=self.managed_resources,
            data_resources=self.data_resources,
            module_calls=self.module_calls,
            diagnostics=self.sink.diagnostics,
        )


def _handle_terraform(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    if decoded.has("required_version"):
        out.required_core.append(decoded.get("required_version"))
    for block in decoded.nested("required_providers"):
        for name, requirement in build_requirements(block, out.sink):
            out.add_requirement(name, requirement, block.range)


def _handle_variable(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    variable = build_variable(decoded)
    out.add_keyed("variables", "variable", variable.name, variable, decoded.range)


def _handle_output(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    output = build_output(decoded)
    out.add_keyed("outputs", "output", output.name, output, decoded.range)


def _handle_provider(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    config = build_provider_config(decoded)
    out.add_keyed("provider_configs", "provider configuration", config.key, config, decoded.range)
    if config.version_constraint is not None:
        out.sink.warning(
            DiagnosticKind.SCHEMA_VIOLATION,
            "Version constraints inside provider configuration blocks are deprecated",
            f'Move the version constraint of provider "{config.key}" into a required_providers block.',
            decoded.range,
        )
        out.add_requirement(
            config.name,
            ProviderRequirement(version_constraints=[config.version_constraint]),
            decoded.range,
        )


def _handle_resource(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    resource = build_resource(decoded, ResourceMode.MANAGED, out.sink)
    out.add_keyed("managed_resources", "resource", resource.address, resource, decoded.range)


def _handle_data(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    resource = build_resource(decoded, ResourceMode.DATA, out.sink)
    out.add_keyed("data_resources", "data resource", resource.address, resource, decoded.range)


def _handle_module(decoded: DecodedBlock, out: FragmentBuilder) -> None:
    call = build_module_call(decoded, out.sink)
    out.add_keyed("module_calls", "module call", call.name, call, decoded.range)


@dataclass(frozen=True)
class BlockHandler:
    """Schema plus the function that files the decoded block into a fragment."""
    schema: BlockSchema
    handle: Callable[[DecodedBlock, FragmentBuilder], None]


BLOCK_HANDLERS: Mapping[str, BlockHandler] = {
    "terraform": BlockHandler(BLOCK_SCHEMAS["terraform"], _handle_terraform),
    "variable": BlockHandler(BLOCK_SCHEMAS["variable"], _handle_variable),
    "output": BlockHandler(BLOCK_SCHEMAS["output"], _handle_output),
    "provider": BlockHandler(BLOCK_SCHEMAS["provider"], _handle_provider),
    "resource": BlockHandler(BLOCK_SCHEMAS["resource"], _handle_resource),
    "data": BlockHandler(BLOCK_SCHEMAS["data"], _handle_data),
    "module": BlockHandler(BLOCK_SCHEMAS["module"], _handle_module),
}


def extract(body: GenericBody, file_path: str, override: bool = False,
            parse_diagnostics: Optional[List[Diagnostic]] = None) -> ModuleFragment:
    """
    Extract the declarations of one file.

    Args:
        body: Generic body produced by the syntax tree provider
        file_path: Path recorded on every diagnostic
        override: Whether the file is an override file
        parse_diagnostics: Diagnostics from parsing, kept ahead of extraction diagnostics

    Returns:
        ModuleFragment holding only what this file declares
    """
    sink = DiagnosticSink(file_path)
    if parse_diagnostics:
        sink.extend(parse_diagnostics)
    out = FragmentBuilder(sink)

    for name, expression in body.attributes.items():
        sink.error(
            DiagnosticKind.SCHEMA_VIOLATION,
            "Unsupported argument",
            f'An argument named "{name}" is not expected at the top level of a configuration file.',
            expression.range,
        )

    for block in body.blocks:
        handler = BLOCK_HANDLERS.get(block.type)
        if handler is None:
            if block.type in PASSIVE_BLOCK_TYPES:
                logger.debug(f"Skipping {block.type} block in {file_path}")
            else:
                sink.warning(
                    DiagnosticKind.SCHEMA_VIOLATION,
                    "Unsupported block type",
                    f'Blocks of type "{block.type}" are not recognized and were skipped.',
                    block.range,
                )
            continue

        decoded = decode(block, handler.schema, sink)
        if decoded is None:
            logger.debug(f"Skipping malformed {block.type} block in {file_path}")
            continue
        handler.handle(decoded, out)

    fragment = out.build(file_path, override)
    logger.debug(
        f"Extracted {file_path}: {len(fragment.managed_resources)} resources, "
        f"{len(fragment.variables)} variables, {len(fragment.diagnostics)} diagnostics"
    )
    return fragment
