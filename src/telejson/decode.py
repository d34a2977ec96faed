"""Decode JSON text produced by `stringify()` into Python values."""

from __future__ import annotations

import json
import warnings
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Final

from telejson._errors import (
    JSRegExpTelejsonError,
    TaggedValueDecodeError,
    TelejsonWarning,
)
from telejson._references import DeferredReference, Key
from telejson._walk import JSONValue, RootHolder, revive_tree
from telejson.constants import (
    CONSTRUCTOR_NAME_KEY,
    GENERIC_OBJECT_NAME,
    PAYLOAD_SEPARATOR,
    Tag,
)
from telejson.evaluate import FunctionEvaluator, restricted_evaluator
from telejson.jstypes.jsfunction import JSFunction
from telejson.jstypes.jsobject import JSObject, named_object_type
from telejson.jstypes.jsregexp import JSRegExp
from telejson.jstypes.jssymbol import JSSymbol
from telejson.jstypes.jsundefined import JSUndefined

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

_CONSTANTS: Final[dict[str, object]] = {
    Tag.Undefined.tagged(): JSUndefined,
    Tag.NegativeInfinity.tagged(): float("-inf"),
    Tag.Infinity.tagged(): float("inf"),
    Tag.NaN.tagged(): float("nan"),
}

NamedTypes: TypeAlias = "dict[str, type[JSObject]]"


def decode_function(
    tagged: str, function_evaluator: FunctionEvaluator | None
) -> JSFunction:
    name, separator, source = Tag.Function.payload(tagged).partition(PAYLOAD_SEPARATOR)
    if not separator:
        raise TaggedValueDecodeError(
            "Function payload has no '|' between name and source", tagged=tagged
        )
    return JSFunction(name, source, canonical=True, evaluator=function_evaluator)


def decode_regexp(tagged: str) -> JSRegExp:
    try:
        return JSRegExp.from_payload(Tag.RegExp.payload(tagged))
    except (JSRegExpTelejsonError, ValueError) as e:
        raise TaggedValueDecodeError(
            f"Invalid RegExp payload: {e}", tagged=tagged
        ) from e


def decode_date(tagged: str) -> datetime:
    """Decode a tagged date as a timezone-aware datetime.

    Dates without a UTC offset are taken to be UTC.
    """
    try:
        value = datetime.fromisoformat(Tag.Date.payload(tagged))
    except ValueError as e:
        raise TaggedValueDecodeError(
            f"Date payload is not an ISO 8601 date: {e}", tagged=tagged
        ) from e
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(init=False, slots=True)
class DecodeContext:
    """The state of a single decode traversal.

    A `DecodeContext` is the decode step: it's called with each node by
    [`revive_tree()`](`telejson._walk.revive_tree`). Duplicate markers are
    collected as `DeferredReference`s and resolved when the root is reached,
    as the containers they refer to may not have been decoded yet.
    """

    function_evaluator: FunctionEvaluator | None
    references: list[DeferredReference]
    named_types: NamedTypes
    """The types created for constructor names, so that all objects with the
    same constructor name get the same type."""

    def __init__(
        self, *, function_evaluator: FunctionEvaluator | None = restricted_evaluator
    ) -> None:
        self.function_evaluator = function_evaluator
        self.references = []
        self.named_types = {}

    def __call__(self, key: Key, value: object, container: object) -> object:
        value = self.decode_value(key, value, container)
        if isinstance(container, RootHolder):
            for reference in self.references:
                reference.apply(value)
        return value

    def decode_value(self, key: Key, value: object, container: object) -> object:
        if key == CONSTRUCTOR_NAME_KEY and isinstance(container, MutableMapping):
            return value
        if isinstance(value, MutableMapping) and CONSTRUCTOR_NAME_KEY in value:
            return self.decode_named_object(value)
        if not isinstance(value, str):
            return value

        if value.startswith(Tag.Function):
            return decode_function(value, self.function_evaluator)
        if value.startswith(Tag.RegExp):
            return decode_regexp(value)
        if value.startswith(Tag.Date):
            return decode_date(value)
        if value.startswith(Tag.Duplicate):
            self.references.append(
                DeferredReference(
                    target_key=key,
                    container=container,  # type: ignore[arg-type]
                    source_path=Tag.Duplicate.payload(value),
                )
            )
            return None
        if value.startswith(Tag.Symbol):
            return JSSymbol(Tag.Symbol.payload(value))
        return _CONSTANTS.get(value, value)

    def decode_named_object(
        self, value: MutableMapping[str, object]
    ) -> MutableMapping[str, object]:
        name = value.pop(CONSTRUCTOR_NAME_KEY)
        if not isinstance(name, str) or name in ("", GENERIC_OBJECT_NAME):
            return value
        if not isinstance(value, JSObject):
            warnings.warn(
                TelejsonWarning(
                    f"Cannot give a {type(value).__name__} the constructor name "
                    f"{name!r}, only JSObject can be re-typed"
                ),
                stacklevel=2,
            )
            return value
        value.__class__ = self.named_type(name)
        return value

    def named_type(self, name: str) -> type[JSObject]:
        named_type = self.named_types.get(name)
        if named_type is None:
            try:
                named_type = named_object_type(name)
            except ValueError as e:
                raise TaggedValueDecodeError(
                    f"Constructor name is not a valid type name: {e}", tagged=name
                ) from e
            self.named_types[name] = named_type
        return named_type


def reviver(
    function_evaluator: FunctionEvaluator | None = restricted_evaluator,
) -> DecodeContext:
    """Create a decode step for a single traversal.

    The step can be used with any tree walker that calls it like
    [`revive_tree()`](`telejson._walk.revive_tree`) does.
    """
    return DecodeContext(function_evaluator=function_evaluator)


@dataclass(slots=True)
class Decoder:
    """
    Decode JSON text or trees written by [`Encoder`](`telejson.Encoder`).

    Parameters
    ----------
    function_evaluator
        Creates callables from the source of decoded functions when they're
        first called. When None, decoded functions can't be called.
    """

    function_evaluator: FunctionEvaluator | None = field(
        default=restricted_evaluator
    )

    def decode(self, tree: JSONValue) -> Any:
        """Decode a tree of JSON values, modifying it in place.

        Mappings in the tree must be `JSObject`s for decoded objects to get
        their constructor names.
        """
        return revive_tree(
            tree, DecodeContext(function_evaluator=self.function_evaluator)
        )

    def parse(self, text: str | bytes) -> Any:
        """Decode JSON text."""
        return self.decode(json.loads(text, object_pairs_hook=JSObject))


def parse(
    text: str | bytes,
    *,
    function_evaluator: FunctionEvaluator | None = restricted_evaluator,
) -> Any:
    """
    Deserialize JSON text written by [`stringify()`](`telejson.stringify`).

    **Security:** functions in the text are decoded as
    [`JSFunction`](`telejson.jstypes.JSFunction`) objects that run their
    source code when called. Don't call functions from untrusted text; pass
    `function_evaluator=None` to make them uncallable.

    Parameters
    ----------
    text
        The JSON text.
    function_evaluator
        Creates callables from the source of decoded functions when they're
        first called.

    Returns
    -------
    :
        The decoded value. JSON objects are decoded as
        [`JSObject`](`telejson.jstypes.JSObject`), a `dict` subclass.

    Raises
    ------
    json.JSONDecodeError
        When `text` is not valid JSON.
    TaggedValueDecodeError
        When a tagged string's payload is malformed.
    UnresolvedReferenceDecodeError
        When a duplicate marker refers to a path that doesn't exist.

    Examples
    --------
    >>> value = parse('{"name":"a","self":"_duplicate_root"}')
    >>> value["self"] is value
    True
    >>> parse('["_NaN_", "_undefined_", "_date_2024-01-02T03:04:05.000Z"]')
    [nan, JSUndefined, datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)]
    """
    return Decoder(function_evaluator=function_evaluator).parse(text)


loads = parse


def looks_like_json(text: str) -> bool:
    """Guess whether text is a JSON array, object or string.

    This only checks the first and last characters. Text that looks like JSON
    can still fail to parse.

    >>> looks_like_json(' {"a": 1} ')
    True
    >>> looks_like_json("42")
    False
    """
    stripped = text.strip()
    return len(stripped) >= 2 and stripped[0] in '[{"' and stripped[-1] in ']}"'
