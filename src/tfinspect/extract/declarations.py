"""Turn schema-decoded blocks into typed declarations.

Builders only pass the fields a block actually sets, so `model_fields_set`
on the result tells an override file's explicit settings apart from
defaults.
"""

from typing import Any, Dict, List, Optional, Tuple
from .literal import evaluate
from .schema import DecodedBlock
from ..contracts.diagnostics import DiagnosticKind, DiagnosticSink
from ..contracts.module import (
    ModuleCall,
    OutputDecl,
    ProviderConfig,
    ProviderRef,
    ProviderRequirement,
    RepetitionKind,
    Resource,
    ResourceMode,
    VariableDecl,
)
from ..contracts.values import Known
from ..syntax.tree import Expression, ExpressionKind, SourceRange

# Fields that identify a declaration and are never replaced by an override.
IDENTITY_FIELDS = frozenset({"name", "type", "mode", "pos"})


def build_variable(decoded: DecodedBlock) -> VariableDecl:
    fields: Dict[str, Any] = {"name": decoded.labels[0], "pos": decoded.range}
    _copy_present(decoded, fields, "description", "sensitive", "nullable", "type")
    if decoded.has("default"):
        default = decoded.get("default")
        fields["required"] = False
        if not (isinstance(default, Known) and default.value is None):
            fields["default"] = default
    return VariableDecl(**fields)


def build_output(decoded: DecodedBlock) -> OutputDecl:
    fields: Dict[str, Any] = {"name": decoded.labels[0], "pos": decoded.range}
    _copy_present(decoded, fields, "description", "sensitive", "depends_on")
    if decoded.has("value"):
        fields["value"] = decoded.get("value")
    return OutputDecl(**fields)


def build_provider_config(decoded: DecodedBlock) -> ProviderConfig:
    fields: Dict[str, Any] = {"name": decoded.labels[0], "pos": decoded.range}
    _copy_present(decoded, fields, "alias")
    if decoded.has("version"):
        fields["version_constraint"] = decoded.get("version")
    return ProviderConfig(**fields)


def build_resource(decoded: DecodedBlock, mode: ResourceMode, sink: DiagnosticSink) -> Resource:
    fields: Dict[str, Any] = {
        "mode": mode,
        "type": decoded.labels[0],
        "name": decoded.labels[1],
        "pos": decoded.range,
    }
    _copy_present(decoded, fields, "provider", "depends_on")
    repetition = _repetition(decoded, sink)
    if repetition is not None:
        fields["count_or_for_each"] = repetition
    provisioners = [p.labels[0] for p in decoded.nested("provisioner")]
    if provisioners:
        fields["provisioners"] = provisioners
    return Resource(**fields)


def build_module_call(decoded: DecodedBlock, sink: DiagnosticSink) -> ModuleCall:
    fields: Dict[str, Any] = {"name": decoded.labels[0], "pos": decoded.range}
    _copy_present(decoded, fields, "source", "providers", "depends_on")
    if decoded.has("version"):
        fields["version_constraint"] = decoded.get("version")
    repetition = _repetition(decoded, sink)
    if repetition is not None:
        fields["count_or_for_each"] = repetition
    return ModuleCall(**fields)


def build_requirements(decoded: DecodedBlock, sink: DiagnosticSink) -> List[Tuple[str, ProviderRequirement]]:
    """Decode the entries of one required_providers block, in declaration order."""
    requirements = []
    for name, expression in decoded.extra.items():
        source_range = expression.range or decoded.range
        if expression.kind == ExpressionKind.LITERAL and isinstance(expression.value, str):
            # Legacy shorthand: `name = "<version constraint>"`.
            requirements.append((name, ProviderRequirement(version_constraints=[expression.value])))
            continue
        if expression.kind != ExpressionKind.OBJECT:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Invalid required_providers object",
                f'The requirement for provider "{name}" must be an object with "source" and '
                '"version" attributes.',
                source_range,
            )
            continue
        requirements.append((name, _requirement_from_object(name, expression, source_range, sink)))
    return requirements


def combine_requirements(existing: ProviderRequirement,
                         incoming: ProviderRequirement) -> Tuple[ProviderRequirement, bool]:
    """
    Union two requirements for the same provider name.

    Returns the combined requirement and whether the declared sources
    conflict; on conflict the existing source is kept.
    """
    conflict = (
        existing.source is not None
        and incoming.source is not None
        and existing.source != incoming.source
    )
    aliases = list(existing.configuration_aliases)
    for alias in incoming.configuration_aliases:
        if alias not in aliases:
            aliases.append(alias)
    combined = ProviderRequirement(
        source=existing.source if existing.source is not None else incoming.source,
        version_constraints=existing.version_constraints + incoming.version_constraints,
        configuration_aliases=aliases,
    )
    return combined, conflict


def conflicting_sources_detail(name: str, first: Optional[str], second: Optional[str],
                               first_location: str) -> str:
    return (
        f'Provider "{name}" is required with source "{second}", but it was already required '
        f'with source "{first}" at {first_location}. The first source is kept.'
    )


def duplicate_detail(noun: str, key: str, first_location: str) -> str:
    return (
        f'A {noun} named "{key}" was already declared at {first_location}. '
        f"{noun.capitalize()} names must be unique within a module; the first declaration is kept."
    )


def location(file_path: str, source_range: Optional[SourceRange]) -> str:
    return f"{file_path}:{source_range}" if source_range else file_path


def _requirement_from_object(name: str, expression: Expression, source_range: Optional[SourceRange],
                             sink: DiagnosticSink) -> ProviderRequirement:
    fields: Dict[str, Any] = {}
    for entry in expression.entries:
        key = entry.key
        if key == "configuration_aliases":
            fields["configuration_aliases"] = _aliases(name, entry.value, source_range, sink)
            continue
        if key not in ("source", "version"):
            sink.warning(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Unsupported argument",
                f'An argument named "{key}" is not expected in the requirement for provider "{name}".',
                entry.value.range or source_range,
            )
            continue
        result = evaluate(entry.value)
        if not isinstance(result, Known):
            sink.warning(
                DiagnosticKind.UNRESOLVED_EXPRESSION,
                "Expression is not static",
                f'The "{key}" of provider "{name}" must be a literal string, but the {result.reason}; '
                "it is recorded as unknown.",
                entry.value.range or source_range,
            )
            continue
        if not isinstance(result.value, str):
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Incorrect attribute value type",
                f'The "{key}" of provider "{name}" must be a string.',
                entry.value.range or source_range,
            )
            continue
        if key == "source":
            fields["source"] = result.value
        else:
            fields["version_constraints"] = [result.value]
    return ProviderRequirement(**fields)


def _aliases(name: str, expression: Expression, source_range: Optional[SourceRange],
             sink: DiagnosticSink) -> List[ProviderRef]:
    items = expression.items if expression.kind == ExpressionKind.TUPLE else None
    if items is None:
        sink.error(
            DiagnosticKind.SCHEMA_VIOLATION,
            "Invalid configuration_aliases value",
            f'The configuration_aliases of provider "{name}" must be a list of provider references.',
            expression.range or source_range,
        )
        return []
    aliases = []
    for item in items:
        text = item.as_text()
        if item.kind not in (ExpressionKind.TRAVERSAL, ExpressionKind.LITERAL) or not text or "." not in text:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Invalid configuration alias",
                f'Configuration aliases of provider "{name}" must look like {name}.<alias>.',
                item.range or source_range,
            )
            continue
        ref = ProviderRef.parse(text)
        if ref.name != name:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Invalid configuration alias",
                f'Configuration alias "{text}" does not belong to provider "{name}".',
                item.range or source_range,
            )
            continue
        aliases.append(ref)
    return aliases


def _repetition(decoded: DecodedBlock, sink: DiagnosticSink) -> Optional[RepetitionKind]:
    has_count = decoded.has("count")
    has_for_each = decoded.has("for_each")
    if has_count and has_for_each:
        sink.error(
            DiagnosticKind.SCHEMA_VIOLATION,
            'Invalid combination of "count" and "for_each"',
            f'The "count" and "for_each" meta-arguments are mutually exclusive in {decoded.type} '
            f'"{".".join(decoded.labels)}"; only "count" is recorded.',
            decoded.range,
        )
    if has_count:
        return RepetitionKind.COUNT
    if has_for_each:
        return RepetitionKind.FOR_EACH
    return None


def _copy_present(decoded: DecodedBlock, fields: Dict[str, Any], *names: str) -> None:
    for name in names:
        if decoded.has(name):
            fields[name] = decoded.get(name)
