"""Tests for the literal evaluator."""

import pytest
from tfinspect.contracts.values import Known, NotStatic
from tfinspect.extract.literal import evaluate
from tfinspect.syntax.expressions import classify_string, from_python_value
from tfinspect.syntax.tree import Expression, ExpressionKind, ObjectEntry


class TestLiteralValues:
    """Literal scalars, tuples and objects evaluate to Known."""

    @pytest.mark.parametrize("value", ["us-east-1", 3, 2.5, True, False, None])
    def test_scalars(self, value):
        """Scalars come back unchanged."""
        assert evaluate(from_python_value(value)) == Known(value=value)

    def test_nested_collections(self):
        """Tuples and objects are evaluated recursively."""
        expression = from_python_value({"tags": {"env": "prod"}, "ports": [80, 443]})
        result = evaluate(expression)
        assert result == Known(value={"tags": {"env": "prod"}, "ports": [80, 443]})

    def test_escaped_interpolation_is_literal(self):
        """`$${` is an escaped sequence, not an interpolation."""
        result = evaluate(classify_string("cost is $${price}"))
        assert result == Known(value="cost is ${price}")

    @pytest.mark.parametrize("text,expected", [("${-1}", -1), ("${- 2.5}", -2.5), ("${-1e3}", -1000.0)])
    def test_negative_numbers(self, text, expected):
        """A negated number is a literal, not a computed expression."""
        result = evaluate(classify_string(text))
        assert result == Known(value=expected)
        assert type(result.value) is type(expected)

    def test_negation_of_reference_is_not_static(self):
        assert isinstance(evaluate(classify_string("${-var.offset}")), NotStatic)

    def test_same_structure_same_result(self):
        """Structurally equal literals give equal results."""
        first = evaluate(from_python_value({"a": [1, 2], "b": None}))
        second = evaluate(from_python_value({"a": [1, 2], "b": None}))
        assert first == second


class TestNotStatic:
    """Anything that needs a scope is reported as not static."""

    def test_variable_reference(self):
        """A bare reference is a traversal."""
        result = evaluate(classify_string("${var.region}"))
        assert isinstance(result, NotStatic)
        assert "var.region" in result.reason
        assert result.malformed is False

    def test_function_call(self):
        """Function calls are never evaluated."""
        expression = classify_string('${lookup(var.map, "key")}')
        assert expression.kind == ExpressionKind.FUNCTION_CALL
        assert isinstance(evaluate(expression), NotStatic)

    def test_template_with_interpolation(self):
        """A string mixing text and interpolation is a template."""
        expression = classify_string("prefix-${var.name}")
        assert expression.kind == ExpressionKind.TEMPLATE
        assert isinstance(evaluate(expression), NotStatic)

    def test_conditional_and_for(self):
        """Conditionals and for expressions are not static."""
        conditional = classify_string('${var.enabled ? "a" : "b"}')
        loop = classify_string("${[for s in var.list : upper(s)]}")
        assert conditional.kind == ExpressionKind.CONDITIONAL
        assert loop.kind == ExpressionKind.FOR
        assert isinstance(evaluate(conditional), NotStatic)
        assert isinstance(evaluate(loop), NotStatic)

    def test_reference_inside_collection(self):
        """One reference anywhere in a collection makes the whole value not static."""
        expression = from_python_value({"name": "web", "subnets": ["subnet-1", "${aws_subnet.a.id}"]})
        result = evaluate(expression)
        assert isinstance(result, NotStatic)
        assert "aws_subnet.a.id" in result.reason

    def test_expression_key(self):
        """An object key that is itself an expression cannot be evaluated."""
        expression = Expression(
            kind=ExpressionKind.OBJECT,
            entries=[ObjectEntry(key="${var.k}", key_static=False, value=from_python_value("v"))],
        )
        assert isinstance(evaluate(expression), NotStatic)

    def test_unsupported_literal_is_malformed(self):
        """A literal node holding something other than a scalar is malformed."""
        result = evaluate(Expression(kind=ExpressionKind.LITERAL, value=object()))
        assert isinstance(result, NotStatic)
        assert result.malformed is True
