"""Encode Python values as JSON text, tagging values that JSON can't represent."""

from __future__ import annotations

import functools
import inspect
import json
import math
import re
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from telejson._errors import UnhandledValueEncodeError
from telejson._references import Key, VisitedObjectLog, join_path
from telejson._walk import JSONValue, RootHolder, object_members, replace_tree
from telejson.constants import (
    CONSTRUCTOR_NAME_KEY,
    DATE_PATTERN,
    DEFAULT_MAX_DEPTH,
    GENERIC_OBJECT_NAME,
    MAX_INDENT,
    PAYLOAD_SEPARATOR,
    ROOT_PATH,
    Tag,
)
from telejson.jstypes.jsfunction import JSFunction
from telejson.jstypes.jsobject import JSObject
from telejson.jstypes.jsregexp import JSRegExp
from telejson.jstypes.jssymbol import JSSymbol
from telejson.jstypes.jsundefined import JSUndefined
from telejson.source import function_source

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

    Indent: TypeAlias = "int | str | None"

UNLIMITED_DEPTH: Final = sys.maxsize

_PLAIN_MAPPING_TYPES: Final = (dict, JSObject)
"""Mappings written without a constructor-name marker."""


def is_function(value: object) -> bool:
    """True for values encoded as functions: routines, classes and JSFunctions."""
    return (
        isinstance(value, (JSFunction, functools.partial, type))
        or inspect.isroutine(value)
    )


def is_container(value: object) -> bool:
    """True for values whose members are encoded, rather than the value itself."""
    return not (
        value is None
        or isinstance(value, (str, bool, int, float, re.Pattern, JSRegExp, JSSymbol))
        or value is JSUndefined
        or is_function(value)
    )


def encode_regexp(value: JSRegExp | re.Pattern[Any]) -> str:
    if isinstance(value, re.Pattern):
        value = JSRegExp.from_python_pattern(value)
    return Tag.RegExp.tagged(value.payload)


def encode_atomic(value: object) -> object:
    """Encode a value that is not a container.

    Values JSON can represent are returned unchanged, others are returned as a
    tagged string. Strings shaped like JavaScript dates are tagged as dates.
    """
    if isinstance(value, (JSRegExp, re.Pattern)):
        return encode_regexp(value)
    if is_function(value):
        name, source = function_source(value)
        return Tag.Function.tagged(f"{name}{PAYLOAD_SEPARATOR}{source}")
    if isinstance(value, JSSymbol):
        return Tag.Symbol.tagged(value.description)
    if isinstance(value, str) and DATE_PATTERN.match(value):
        return Tag.Date.tagged(value)
    if value is JSUndefined:
        return Tag.Undefined.tagged()
    if isinstance(value, float):
        if value == -math.inf:
            return Tag.NegativeInfinity.tagged()
        if value == math.inf:
            return Tag.Infinity.tagged()
        if math.isnan(value):
            return Tag.NaN.tagged()
    return value


def summarize_container(value: object) -> str:
    """The lossy placeholder written for containers nested too deeply."""
    if isinstance(value, (list, tuple)):
        return f"[Array({len(value)})]"
    return f"[{GENERIC_OBJECT_NAME}]"


def container_members(value: object) -> list[Any] | tuple[Any, ...] | Mapping[Any, Any]:
    """Get the container to write in place of `value`.

    Lists, tuples, dicts and JSObjects are written as they are. Other
    mappings and objects are written as a new dict of their members, ending
    with a constructor-name marker holding their class name. The value itself
    is never modified.
    """
    if isinstance(value, (list, tuple)) or type(value) in _PLAIN_MAPPING_TYPES:
        return value  # type: ignore[return-value]

    members: dict[Any, Any] | None
    if isinstance(value, Mapping):
        members = dict(value)
    else:
        members = object_members(value)
    if members is None:
        raise UnhandledValueEncodeError(
            "Value is not a list, tuple, mapping, dataclass or object with a "
            "__dict__",
            value=value,
        )
    name = type(value).__name__
    if name != GENERIC_OBJECT_NAME:
        members[CONSTRUCTOR_NAME_KEY] = name
    return members


@dataclass(init=False, slots=True)
class EncodeContext:
    """The state of a single encode traversal.

    An `EncodeContext` is the encode step: it's called with each node by
    [`replace_tree()`](`telejson._walk.replace_tree`). It records the path
    each container is first seen at, and replaces later occurrences of the
    same container with a duplicate marker holding that path.
    """

    max_depth: int
    objects: VisitedObjectLog
    stack: list[object]
    """The containers being written, from the outermost (excluding the root)
    to the innermost."""
    keys: list[str]
    """The path to the innermost container on the stack."""

    def __init__(self, *, max_depth: int = UNLIMITED_DEPTH) -> None:
        self.max_depth = max_depth
        self.reset()

    def reset(self) -> None:
        self.objects = VisitedObjectLog()
        self.stack = []
        self.keys = [ROOT_PATH]

    def __call__(self, key: Key, value: object, container: object) -> object:
        if isinstance(container, RootHolder):
            return self.encode_root(value)

        # The walker has finished with containers that aren't the current
        # container's ancestors.
        while self.stack and container is not self.stack[-1]:
            self.stack.pop()
            self.keys.pop()

        if not is_container(value):
            return encode_atomic(value)
        if len(self.stack) >= self.max_depth:
            return summarize_container(value)
        if value in self.objects:
            return Tag.Duplicate.tagged(self.objects.get_path(value))

        members = container_members(value)
        self.keys.append(str(key))
        self.stack.append(members)
        self.objects.record_reference(value, join_path(self.keys))
        return members

    def encode_root(self, value: object) -> object:
        self.reset()
        if not is_container(value):
            return encode_atomic(value)
        members = container_members(value)
        self.objects.record_reference(value, ROOT_PATH)
        return members


def replacer(max_depth: int | None = None) -> EncodeContext:
    """Create an encode step for a single traversal.

    The step can be used with any tree walker that calls it like
    [`replace_tree()`](`telejson._walk.replace_tree`) does. `max_depth` is
    unlimited by default.
    """
    return EncodeContext(
        max_depth=UNLIMITED_DEPTH if max_depth is None else _check_max_depth(max_depth)
    )


def _check_max_depth(max_depth: int) -> int:
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ValueError(f"max_depth must be a positive int: {max_depth=}")
    return max_depth


def _json_format(space: Indent) -> dict[str, Any]:
    # JSON.stringify() ignores indents that aren't numbers or strings, and
    # clamps them to 10.
    indent: int | str | None = None
    if isinstance(space, int) and not isinstance(space, bool):
        indent = min(space, MAX_INDENT) if space >= 1 else None
    elif isinstance(space, str):
        indent = space[:MAX_INDENT] or None
    if indent is None:
        return dict(indent=None, separators=(",", ":"))
    return dict(indent=indent, separators=(",", ": "))


@dataclass(slots=True)
class Encoder:
    """
    Encode Python values as JSON text.

    Parameters
    ----------
    max_depth
        Containers nested inside this many containers (not counting the root)
        are written as a lossy summary, like `[Array(3)]` or `[Object]`.
    space
        The indentation of the JSON text. An int indents by that many spaces,
        a str indents with the string. Both are limited to 10. Text is
        compact when not set.
    """

    max_depth: int = field(default=DEFAULT_MAX_DEPTH)
    space: Indent = field(default=None)

    def __post_init__(self) -> None:
        _check_max_depth(self.max_depth)

    def encode(self, value: object) -> JSONValue:
        """Encode a value as a tree of JSON-compatible Python values."""
        return replace_tree(value, EncodeContext(max_depth=self.max_depth))

    def stringify(self, value: object) -> str:
        """Encode a value as JSON text."""
        return json.dumps(
            self.encode(value),
            ensure_ascii=False,
            allow_nan=False,
            **_json_format(self.space),
        )


def stringify(
    value: object, *, max_depth: int = DEFAULT_MAX_DEPTH, space: Indent = None
) -> str:
    """
    Serialize a Python value as JSON text, including values JSON can't represent.

    Shared and cyclic references to lists, dicts and objects are preserved.
    Functions, regular expressions, symbols, dates, `JSUndefined`, `NaN` and
    the Infinities are written as tagged strings that
    [`parse()`](`telejson.parse`) understands.

    Parameters
    ----------
    value
        The Python value to serialize.
    max_depth
        Containers nested more deeply than this are written as a lossy
        summary that can't be decoded to the original value.
    space
        Indentation, as with `JSON.stringify()`.

    Returns
    -------
    :
        The JSON text.

    Raises
    ------
    UnhandledValueEncodeError
        When `value` contains a value that has no JSON representation, like a
        `set`.

    Examples
    --------
    >>> a = {"name": "a"}
    >>> a["self"] = a
    >>> stringify(a)
    '{"name":"a","self":"_duplicate_root"}'
    >>> stringify({"pattern": re.compile("a+", re.ASCII), "nothing": float("nan")})
    '{"pattern":"_regexp_|a+","nothing":"_NaN_"}'
    """
    return Encoder(max_depth=max_depth, space=space).stringify(value)


dumps = stringify
