from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, cast


@dataclass(init=False)
class TelejsonError(Exception):
    """The base class that all telejson errors are subclasses of."""

    if not TYPE_CHECKING:
        message: str  # needed to have dataclass include message in the repr, etc

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)

    @property
    def message(self) -> str:
        return cast(str, self.args[0])

    def __str__(self) -> str:
        field_values = [
            (f.name, getattr(self, f.name)) for f in fields(self) if f.name != "message"
        ]
        values_fmt = ", ".join(f"{f}={v!r}" for (f, v) in field_values)

        if values_fmt:
            return f"{self.message}: {values_fmt}"
        return self.message


@dataclass(init=False)
class EncodeTelejsonError(TelejsonError, ValueError):
    pass


@dataclass(init=False)
class UnhandledValueEncodeError(EncodeTelejsonError):
    """
    A value has no JSON representation.

    Raised by the JSON tree walker when a value returned by the encode step is
    not a primitive, a mapping or a sequence.
    """

    value: object

    def __init__(self, message: str, *args: object, value: object) -> None:
        super().__init__(message, *args)
        self.value = value


@dataclass(init=False)
class CircularReferenceEncodeError(EncodeTelejsonError):
    """
    A container was reached again while it was still being written.

    The default encode step replaces repeated containers with duplicate
    markers, so this only happens with steps that don't track references.
    """

    value: object

    def __init__(self, message: str, *args: object, value: object) -> None:
        super().__init__(message, *args)
        self.value = value


@dataclass(init=False)
class DecodeTelejsonError(TelejsonError, ValueError):
    pass


@dataclass(init=False)
class TaggedValueDecodeError(DecodeTelejsonError):
    """A string starts with a tag but its payload is not valid for the tag."""

    tagged: str

    def __init__(self, message: str, *args: object, tagged: str) -> None:
        super().__init__(message, *args)
        self.tagged = tagged


@dataclass(init=False)
class UnresolvedReferenceDecodeError(DecodeTelejsonError):
    """
    A duplicate marker refers to a path that does not exist in the decoded value.

    Encoders only emit paths of containers they have already written, so this
    indicates a corrupted or hand-edited payload.
    """

    path: str

    def __init__(self, message: str, *args: object, path: str) -> None:
        super().__init__(message, *args)
        self.path = path


@dataclass(init=False)
class FunctionEvaluationError(TelejsonError):
    """A revived function's source could not be turned into a callable."""

    name: str
    source: str

    def __init__(self, message: str, *args: object, name: str, source: str) -> None:
        super().__init__(message, *args)
        self.name = name
        self.source = source


class JSRegExpTelejsonError(TelejsonError):
    pass


class TelejsonWarning(UserWarning):
    """The base class of warnings issued by telejson."""


class FunctionSourceWarning(TelejsonWarning):
    """A function was encoded without its source code."""
