"""Block schemas and the schema-driven block decoder.

A schema says, per block type, which labels it takes, which attributes are
expected (and how each is evaluated), and which nested blocks may appear.
`decode` applies a schema to one generic block, records every violation in
the diagnostic sink and always returns whatever could be decoded.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from .literal import evaluate
from ..contracts.diagnostics import DiagnosticKind, DiagnosticSink
from ..contracts.values import Known, NotStatic
from ..syntax.expressions import TRAVERSAL_RE
from ..syntax.json_syntax import BlockLayout
from ..syntax.tree import Expression, ExpressionKind, GenericBlock, SourceRange


class AttributeKind(str, Enum):
    """How an attribute's expression is turned into a decoded value."""
    ANY = "any"                        # LiteralResult, NotStatic tolerated
    STATIC = "static"                  # literal value; NotStatic -> warning, absent
    STRING = "string"                  # static string (numbers are converted)
    BOOL = "bool"                      # static bool ("true"/"false" strings are converted)
    REFERENCE = "reference"            # single reference, kept as text
    REFERENCE_LIST = "reference_list"  # list of references, kept as text
    REFERENCE_MAP = "reference_map"    # object of references, kept as text
    TYPE_EXPR = "type_expr"            # raw type constraint text
    PRESENCE = "presence"              # only whether it is set


@dataclass(frozen=True)
class AttributeSpec:
    kind: AttributeKind = AttributeKind.ANY
    required: bool = False


@dataclass(frozen=True)
class NestedBlockSpec:
    schema: "BlockSchema"
    singleton: bool = False


@dataclass(frozen=True)
class BlockSchema:
    """
    Schema for one block type.

    Open schemas tolerate unknown attributes (`open_attributes`) or unknown
    nested blocks (`open_blocks`) silently; opaque schemas only check labels.
    """
    labels: Tuple[str, ...] = ()
    attributes: Mapping[str, AttributeSpec] = field(default_factory=dict)
    blocks: Mapping[str, NestedBlockSpec] = field(default_factory=dict)
    open_attributes: bool = False
    open_blocks: bool = False
    opaque: bool = False

    def layout(self) -> BlockLayout:
        """Label/nesting layout the JSON syntax needs to find blocks."""
        return BlockLayout(
            labels=len(self.labels),
            nested={name: spec.schema.layout() for name, spec in self.blocks.items()},
        )


@dataclass
class DecodedBlock:
    """Schema-checked content of one block."""
    type: str
    labels: List[str]
    range: Optional[SourceRange]
    values: Dict[str, Any] = field(default_factory=dict)
    blocks: Dict[str, List["DecodedBlock"]] = field(default_factory=dict)
    extra: Dict[str, Expression] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return name in self.values

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def nested(self, block_type: str) -> List["DecodedBlock"]:
        return self.blocks.get(block_type, [])


def decode(block: GenericBlock, schema: BlockSchema, sink: DiagnosticSink) -> Optional[DecodedBlock]:
    """
    Decode a block against its schema.

    Returns None only when the labels are wrong, since a block without its
    identifying labels cannot be placed anywhere. Every other violation is
    recorded and decoding continues.
    """
    if not _check_labels(block, schema, sink):
        return None

    decoded = DecodedBlock(type=block.type, labels=list(block.labels), range=block.range)
    if schema.opaque:
        return decoded

    for name, expression in block.attributes.items():
        spec = schema.attributes.get(name)
        if spec is None:
            if schema.open_attributes:
                decoded.extra[name] = expression
            else:
                sink.warning(
                    DiagnosticKind.SCHEMA_VIOLATION,
                    "Unsupported argument",
                    f'An argument named "{name}" is not expected in a {block.type} block.',
                    expression.range or block.range,
                )
            continue
        _decode_attribute(name, expression, spec, decoded, block, sink)

    for name, spec in schema.attributes.items():
        if spec.required and name not in block.attributes:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Missing required argument",
                f'The argument "{name}" is required in a {block.type} block, but no definition was found.',
                block.range,
            )

    for nested in block.blocks:
        nested_spec = schema.blocks.get(nested.type)
        if nested_spec is None:
            if not schema.open_blocks:
                sink.error(
                    DiagnosticKind.SCHEMA_VIOLATION,
                    "Unsupported block type",
                    f'Blocks of type "{nested.type}" are not expected in a {block.type} block.',
                    nested.range or block.range,
                )
            continue

        existing = decoded.blocks.get(nested.type, [])
        if nested_spec.singleton and existing:
            first = existing[0]
            where = f" at line {first.range.start_line}" if first.range else ""
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                f"Duplicate {nested.type} block",
                f"Only one {nested.type} block is allowed in a {block.type} block; "
                f"another was already defined{where}.",
                nested.range or block.range,
            )
            continue

        child = decode(nested, nested_spec.schema, sink)
        if child is not None:
            decoded.blocks.setdefault(nested.type, []).append(child)

    return decoded


def _check_labels(block: GenericBlock, schema: BlockSchema, sink: DiagnosticSink) -> bool:
    expected = len(schema.labels)
    actual = len(block.labels)
    if actual < expected:
        missing = schema.labels[actual]
        sink.error(
            DiagnosticKind.SCHEMA_VIOLATION,
            f"Missing {missing} for {block.type}",
            f"All {block.type} blocks must have {expected} label(s): {', '.join(schema.labels)}.",
            block.range,
        )
        return False
    if actual > expected:
        sink.error(
            DiagnosticKind.SCHEMA_VIOLATION,
            f"Extraneous label for {block.type}",
            f"Only {expected} label(s) are expected for {block.type} blocks"
            + (f" ({', '.join(schema.labels)})" if expected else "") + ".",
            block.range,
        )
        return False
    for label_name, label in zip(schema.labels, block.labels):
        if not label:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                f"Invalid {label_name} for {block.type}",
                f"The {label_name} label of a {block.type} block must not be empty.",
                block.range,
            )
            return False
    return True


def _decode_attribute(name: str, expression: Expression, spec: AttributeSpec, decoded: DecodedBlock,
                      block: GenericBlock, sink: DiagnosticSink) -> None:
    source_range = expression.range or block.range
    kind = spec.kind

    if kind == AttributeKind.PRESENCE:
        decoded.values[name] = True
        return

    if kind == AttributeKind.REFERENCE:
        reference = _reference_text(expression)
        if reference is None:
            _invalid_reference(name, block, source_range, sink)
        else:
            decoded.values[name] = reference
        return

    if kind == AttributeKind.REFERENCE_LIST:
        if expression.kind != ExpressionKind.TUPLE:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Invalid expression",
                f'The "{name}" argument of a {block.type} block must be a list of references.',
                source_range,
            )
            return
        references = []
        for item in expression.items:
            reference = _reference_text(item)
            if reference is None:
                _invalid_reference(name, block, item.range or source_range, sink)
            else:
                references.append(reference)
        decoded.values[name] = references
        return

    if kind == AttributeKind.REFERENCE_MAP:
        if expression.kind != ExpressionKind.OBJECT:
            sink.error(
                DiagnosticKind.SCHEMA_VIOLATION,
                "Invalid expression",
                f'The "{name}" argument of a {block.type} block must be a map of references.',
                source_range,
            )
            return
        mapping = {}
        for entry in expression.entries:
            reference = _reference_text(entry.value)
            if reference is None or not entry.key_static:
                _invalid_reference(name, block, entry.value.range or source_range, sink)
            else:
                mapping[entry.key] = reference
        decoded.values[name] = mapping
        return

    if kind == AttributeKind.TYPE_EXPR:
        text = expression.as_text()
        if text is None:
            sink.warning(
                DiagnosticKind.UNRESOLVED_EXPRESSION,
                "Unrecognized type constraint",
                f'The "{name}" argument of a {block.type} block is not a type expression; it is ignored.',
                source_range,
            )
        else:
            decoded.values[name] = text
        return

    result = evaluate(expression)
    if isinstance(result, NotStatic) and result.malformed:
        sink.warning(
            DiagnosticKind.UNRESOLVED_EXPRESSION,
            "Unsupported literal syntax",
            f'The "{name}" argument of a {block.type} block could not be read: {result.reason}.',
            source_range,
        )

    if kind == AttributeKind.ANY:
        decoded.values[name] = result
        return

    if not isinstance(result, Known):
        if not result.malformed:
            sink.warning(
                DiagnosticKind.UNRESOLVED_EXPRESSION,
                "Expression is not static",
                f'The "{name}" argument of a {block.type} block must be a literal value, '
                f"but the {result.reason}; it is recorded as unknown.",
                source_range,
            )
        return

    value = result.value
    if kind == AttributeKind.STRING:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            _wrong_type(name, "a string", block, source_range, sink)
            return
    elif kind == AttributeKind.BOOL:
        if isinstance(value, str) and value in ("true", "false"):
            value = value == "true"
        if not isinstance(value, bool):
            _wrong_type(name, "a bool", block, source_range, sink)
            return
    decoded.values[name] = value


def _reference_text(expression: Expression) -> Optional[str]:
    """Reference text of a traversal, or of a string holding one (JSON syntax)."""
    if expression.kind == ExpressionKind.TRAVERSAL:
        return expression.source
    if expression.kind == ExpressionKind.LITERAL and isinstance(expression.value, str):
        if TRAVERSAL_RE.match(expression.value):
            return expression.value
    return None


def _invalid_reference(name: str, block: GenericBlock, source_range: Optional[SourceRange],
                       sink: DiagnosticSink) -> None:
    sink.error(
        DiagnosticKind.SCHEMA_VIOLATION,
        "Invalid reference",
        f'The "{name}" argument of a {block.type} block requires static references, '
        "not arbitrary expressions.",
        source_range,
    )


def _wrong_type(name: str, expected: str, block: GenericBlock, source_range: Optional[SourceRange],
                sink: DiagnosticSink) -> None:
    sink.error(
        DiagnosticKind.SCHEMA_VIOLATION,
        "Incorrect attribute value type",
        f'The "{name}" argument of a {block.type} block must be {expected}.',
        source_range,
    )


def _attrs(**kinds: AttributeKind) -> Dict[str, AttributeSpec]:
    return {name: AttributeSpec(kind) for name, kind in kinds.items()}


CONDITION = BlockSchema(attributes={
    "condition": AttributeSpec(AttributeKind.PRESENCE, required=True),
    "error_message": AttributeSpec(AttributeKind.ANY, required=True),
})

REQUIRED_PROVIDERS = BlockSchema(open_attributes=True)

TERRAFORM = BlockSchema(
    attributes=_attrs(required_version=AttributeKind.STRING, experiments=AttributeKind.ANY,
                      language=AttributeKind.ANY),
    blocks={
        "required_providers": NestedBlockSpec(REQUIRED_PROVIDERS, singleton=True),
        "backend": NestedBlockSpec(BlockSchema(labels=("type",), opaque=True), singleton=True),
        "cloud": NestedBlockSpec(BlockSchema(opaque=True), singleton=True),
        "provider_meta": NestedBlockSpec(BlockSchema(labels=("provider",), opaque=True)),
    },
)

VARIABLE = BlockSchema(
    labels=("name",),
    attributes=_attrs(description=AttributeKind.STRING, default=AttributeKind.ANY,
                      type=AttributeKind.TYPE_EXPR, sensitive=AttributeKind.BOOL,
                      nullable=AttributeKind.BOOL, ephemeral=AttributeKind.BOOL),
    blocks={"validation": NestedBlockSpec(CONDITION)},
)

OUTPUT = BlockSchema(
    labels=("name",),
    attributes={
        "value": AttributeSpec(AttributeKind.ANY, required=True),
        **_attrs(description=AttributeKind.STRING, sensitive=AttributeKind.BOOL,
                 depends_on=AttributeKind.REFERENCE_LIST, ephemeral=AttributeKind.BOOL),
    },
    blocks={"precondition": NestedBlockSpec(CONDITION)},
)

PROVIDER = BlockSchema(
    labels=("name",),
    attributes=_attrs(alias=AttributeKind.STRING, version=AttributeKind.STRING),
    open_attributes=True,
    open_blocks=True,
)

LIFECYCLE = BlockSchema(
    attributes=_attrs(create_before_destroy=AttributeKind.BOOL, prevent_destroy=AttributeKind.BOOL,
                      ignore_changes=AttributeKind.PRESENCE, replace_triggered_by=AttributeKind.PRESENCE),
    blocks={
        "precondition": NestedBlockSpec(CONDITION),
        "postcondition": NestedBlockSpec(CONDITION),
    },
)

CONNECTION = BlockSchema(open_attributes=True)

PROVISIONER = BlockSchema(
    labels=("type",),
    attributes=_attrs(when=AttributeKind.PRESENCE, on_failure=AttributeKind.PRESENCE),
    blocks={"connection": NestedBlockSpec(CONNECTION, singleton=True)},
    open_attributes=True,
)

_REPETITION = _attrs(count=AttributeKind.PRESENCE, for_each=AttributeKind.PRESENCE,
                     provider=AttributeKind.REFERENCE, depends_on=AttributeKind.REFERENCE_LIST)

RESOURCE = BlockSchema(
    labels=("type", "name"),
    attributes=_REPETITION,
    blocks={
        "lifecycle": NestedBlockSpec(LIFECYCLE, singleton=True),
        "connection": NestedBlockSpec(CONNECTION, singleton=True),
        "provisioner": NestedBlockSpec(PROVISIONER),
    },
    open_attributes=True,
    open_blocks=True,
)

DATA = BlockSchema(
    labels=("type", "name"),
    attributes=_REPETITION,
    blocks={"lifecycle": NestedBlockSpec(LIFECYCLE, singleton=True)},
    open_attributes=True,
    open_blocks=True,
)

MODULE = BlockSchema(
    labels=("name",),
    attributes={
        "source": AttributeSpec(AttributeKind.STRING, required=True),
        **_attrs(version=AttributeKind.STRING, count=AttributeKind.PRESENCE,
                 for_each=AttributeKind.PRESENCE, providers=AttributeKind.REFERENCE_MAP,
                 depends_on=AttributeKind.REFERENCE_LIST),
    },
    open_attributes=True,
)

BLOCK_SCHEMAS: Mapping[str, BlockSchema] = {
    "terraform": TERRAFORM,
    "variable": VARIABLE,
    "output": OUTPUT,
    "provider": PROVIDER,
    "resource": RESOURCE,
    "data": DATA,
    "module": MODULE,
}

# Blocks Terraform accepts but this inspector does not model.
PASSIVE_BLOCK_TYPES = frozenset({"locals", "moved", "import", "check", "removed"})

JSON_LAYOUT = BlockLayout(
    nested={
        **{name: schema.layout() for name, schema in BLOCK_SCHEMAS.items()},
        "locals": BlockLayout(),
        "moved": BlockLayout(),
        "import": BlockLayout(),
        "check": BlockLayout(labels=1),
        "removed": BlockLayout(),
    },
)
