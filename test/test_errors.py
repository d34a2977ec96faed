from __future__ import annotations

import pytest

from telejson import (
    CircularReferenceEncodeError,
    DecodeTelejsonError,
    EncodeTelejsonError,
    FunctionEvaluationError,
    FunctionSourceWarning,
    JSRegExpTelejsonError,
    TaggedValueDecodeError,
    TelejsonError,
    TelejsonWarning,
    UnhandledValueEncodeError,
    UnresolvedReferenceDecodeError,
)


def test_telejson_error_str__without_fields() -> None:
    assert str(TelejsonError("Something went wrong")) == "Something went wrong"


@pytest.mark.parametrize(
    "error,expected",
    [
        pytest.param(
            UnhandledValueEncodeError("Cannot encode", value={1}),
            "Cannot encode: value={1}",
            id="UnhandledValueEncodeError",
        ),
        pytest.param(
            CircularReferenceEncodeError("Cycle", value=[]),
            "Cycle: value=[]",
            id="CircularReferenceEncodeError",
        ),
        pytest.param(
            TaggedValueDecodeError("Bad tag", tagged="_date_x"),
            "Bad tag: tagged='_date_x'",
            id="TaggedValueDecodeError",
        ),
        pytest.param(
            UnresolvedReferenceDecodeError("Missing", path="root.a"),
            "Missing: path='root.a'",
            id="UnresolvedReferenceDecodeError",
        ),
        pytest.param(
            FunctionEvaluationError("Failed", name="f", source="() => {}"),
            "Failed: name='f', source='() => {}'",
            id="FunctionEvaluationError",
        ),
    ],
)
def test_telejson_error_str__with_fields(error: TelejsonError, expected: str) -> None:
    assert str(error) == expected


def test_telejson_error_message() -> None:
    error = TaggedValueDecodeError("Bad tag", tagged="_date_x")
    assert error.message == "Bad tag"
    assert error.args == ("Bad tag",)


def test_error_hierarchy() -> None:
    assert issubclass(EncodeTelejsonError, TelejsonError)
    assert issubclass(EncodeTelejsonError, ValueError)
    assert issubclass(DecodeTelejsonError, TelejsonError)
    assert issubclass(DecodeTelejsonError, ValueError)
    assert issubclass(UnhandledValueEncodeError, EncodeTelejsonError)
    assert issubclass(CircularReferenceEncodeError, EncodeTelejsonError)
    assert issubclass(TaggedValueDecodeError, DecodeTelejsonError)
    assert issubclass(UnresolvedReferenceDecodeError, DecodeTelejsonError)
    assert issubclass(FunctionEvaluationError, TelejsonError)
    assert issubclass(JSRegExpTelejsonError, TelejsonError)
    assert issubclass(FunctionSourceWarning, TelejsonWarning)
    assert issubclass(TelejsonWarning, UserWarning)
