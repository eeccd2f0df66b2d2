"""Static evaluation of literal expressions.

Only literal scalars, tuples and object constructors are reduced. References,
function calls, conditionals, for-expressions, operators and templates with
interpolations are reported as not statically known rather than evaluated.
"""

from ..contracts.values import Known, LiteralResult, NotStatic
from ..syntax.tree import Expression, ExpressionKind

_NOT_STATIC_REASONS = {
    ExpressionKind.TRAVERSAL: "references {source}",
    ExpressionKind.FUNCTION_CALL: "calls a function: {source}",
    ExpressionKind.CONDITIONAL: "is a conditional expression: {source}",
    ExpressionKind.FOR: "is a for expression: {source}",
    ExpressionKind.OPERATION: "is a computed expression: {source}",
    ExpressionKind.TEMPLATE: "is a string template with interpolation: {source}",
}


def evaluate(expression: Expression) -> LiteralResult:
    """Reduce an expression to a literal value, or explain why it cannot be."""
    kind = expression.kind

    if kind == ExpressionKind.LITERAL:
        if expression.value is None or isinstance(expression.value, (str, bool, int, float)):
            return Known(value=expression.value)
        return NotStatic(reason=f"unsupported literal value {expression.value!r}", malformed=True)

    if kind == ExpressionKind.TUPLE:
        values = []
        for item in expression.items:
            result = evaluate(item)
            if not isinstance(result, Known):
                return result
            values.append(result.value)
        return Known(value=values)

    if kind == ExpressionKind.OBJECT:
        mapping = {}
        for entry in expression.entries:
            if not entry.key_static:
                return NotStatic(reason=f"object key {entry.key!r} is an expression")
            result = evaluate(entry.value)
            if not isinstance(result, Known):
                return result
            mapping[entry.key] = result.value
        return Known(value=mapping)

    template = _NOT_STATIC_REASONS.get(kind)
    if template is None:
        return NotStatic(reason=f"unsupported expression kind {kind}", malformed=True)
    return NotStatic(reason="expression " + template.format(source=expression.source or "?"))
