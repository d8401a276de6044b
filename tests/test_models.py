"""Test classes OperationRequest and OperationResult."""
from pydantic import ValidationError
import pytest

from infix_calculator.common.models import OperationRequest, OperationResult


def test_operation_request_valid() -> None:
    """Test that a valid OperationRequest can be created."""
    req = OperationRequest(expression="a = 2 + 2 * 3")
    assert req.expression == "a = 2 + 2 * 3"


@pytest.mark.parametrize("expression", ["", "   ", "\t\n"])
def test_operation_request_rejects_blank(expression) -> None:
    """Blank lines are not requests."""
    with pytest.raises(ValidationError):
        OperationRequest(expression=expression)


def test_operation_request_strips_whitespace() -> None:
    assert OperationRequest(expression="  a + 1 \n").expression == "a + 1"


def test_operation_request_invalid_type() -> None:
    """Test that non-string expressions raise a validation error."""
    with pytest.raises(ValidationError):
        OperationRequest(expression=123)


def test_operation_result_value() -> None:
    """A successful result renders as '<expr> = <value>'."""
    res = OperationResult(line=1, expression="2 + 2 * 3", result=8)
    assert res.ok
    assert isinstance(res.result, int)
    assert res.render() == "2 + 2 * 3 = 8"


def test_operation_result_error() -> None:
    """A failed result renders with its error message."""
    res = OperationResult(line=2, expression="5/0", error="Division by zero")
    assert not res.ok
    assert res.render() == "5/0 -> ERROR: Division by zero"


@pytest.mark.parametrize("kwargs", [
    {"line": 1, "expression": "1"},
    {"line": 1, "expression": "1", "result": 1, "error": "boom"},
    {"line": 0, "expression": "1", "result": 1},
    {"line": 1, "expression": "1", "result": "not an int"},
    {"line": 1, "expression": 42, "result": 1},
])
def test_operation_result_invalid(kwargs) -> None:
    with pytest.raises(ValidationError):
        OperationResult(**kwargs)


def test_operation_result_round_trips_through_dict() -> None:
    res = OperationResult(line=3, expression="~0", result=-1)
    assert OperationResult.model_validate(res.model_dump()) == res
