"""Walk JSON trees, calling a step function at every node.

These walkers give Python the replacer and reviver callbacks of JavaScript's
`JSON.stringify()` and `JSON.parse()`. The encode and decode steps plug into
them, but any step with the same signature can be used.
"""

from __future__ import annotations

import math
from collections.abc import (
    Generator,
    Iterator,
    Mapping,
    MutableMapping,
    MutableSequence,
    Sequence,
)
from contextlib import contextmanager
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol

from telejson._errors import (
    CircularReferenceEncodeError,
    TelejsonError,
    UnhandledValueEncodeError,
)
from telejson._references import Key

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

JSONPrimitive: TypeAlias = "str | int | float | bool | None"
JSONValue: TypeAlias = (
    "JSONPrimitive | list[JSONValue] | dict[str, JSONValue]"
)

ROOT_KEY = ""


class RootHolder(dict[str, Any]):
    """The container passed to the step with the root value.

    Steps recognise the first (or, when decoding, last) call by its
    container being a RootHolder. The root key is `""`, but objects can also
    have `""` keys, so the key alone is not enough.
    """

    __slots__ = ()

    @property
    def root(self) -> Any:
        return self[ROOT_KEY]


class StepFn(Protocol):
    """
    The signature of encode and decode steps.

    Called with a node's key, its value and the container holding it. The
    return value replaces the node.
    """

    def __call__(self, key: Key, value: Any, container: Any, /) -> Any: ...


def js_date_text(value: datetime) -> str:
    """Format a datetime the way JavaScript's `Date.prototype.toJSON()` does.

    Naive datetimes are taken to be UTC.

    >>> js_date_text(datetime(2024, 1, 2, 3, 4, 5, 678900))
    '2024-01-02T03:04:05.678Z'
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return f"{value.replace(tzinfo=None).isoformat(timespec='milliseconds')}Z"


def _json_key(key: object) -> str:
    # The same key conversions as json.dumps()
    if isinstance(key, str):
        return key
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    if isinstance(key, int):
        return int.__repr__(key)
    if isinstance(key, float):
        return float.__repr__(key)
    raise UnhandledValueEncodeError(
        "Mapping keys must be str, int, float, bool or None", value=key
    )


def _to_json(value: object) -> object:
    if isinstance(value, datetime):
        return js_date_text(value)
    return value


def _where(keys: Sequence[Key]) -> str:
    return "".join(f"[{k!r}]" for k in keys) or "the root"


def replace_tree(value: object, step: StepFn) -> JSONValue:
    """Build a JSON tree from `value`, passing every node through `step`.

    Nodes are visited parents before children, starting with the root, which
    is passed with key `""` in a `RootHolder`. The containers the step returns
    are the containers passed to the step with their members, so a step can
    substitute a container with another one.
    """
    holder = RootHolder({ROOT_KEY: value})
    active: set[int] = set()
    location: list[Key] = []

    def write(key: Key, value: object, container: object) -> JSONValue:
        try:
            value = step(key, _to_json(value), container)
        except TelejsonError as e:
            e.add_note(f"While encoding the value at {_where(location)}")
            raise

        if value is None or isinstance(value, (str, bool, int)):
            return value
        if isinstance(value, float):
            # JSON.stringify() writes null for NaN and the Infinities
            return value if math.isfinite(value) else None
        if isinstance(value, Mapping):
            with _entered(active, value, location):
                return {
                    k: write(k, v, value)
                    for k, v in _mapping_items(value, location)
                }
        if isinstance(value, (list, tuple)):
            with _entered(active, value, location):
                result: list[JSONValue] = []
                for i, item in enumerate(value):
                    location.append(i)
                    result.append(write(i, item, value))
                    location.pop()
                return result
        raise UnhandledValueEncodeError(
            f"Value has no JSON representation at {_where(location)}", value=value
        )

    return write(ROOT_KEY, value, holder)


def _mapping_items(
    mapping: Mapping[Any, object], location: list[Key]
) -> Iterator[tuple[str, object]]:
    for key, value in mapping.items():
        json_key = _json_key(key)
        location.append(json_key)
        try:
            yield json_key, value
        finally:
            location.pop()


@contextmanager
def _entered(
    active: set[int], value: object, location: list[Key]
) -> Generator[None, None, None]:
    if id(value) in active:
        raise CircularReferenceEncodeError(
            f"Value contains itself at {_where(location)}", value=value
        )
    active.add(id(value))
    try:
        yield
    finally:
        active.discard(id(value))


def revive_tree(tree: JSONValue, step: StepFn) -> Any:
    """Pass every node of a parsed JSON tree through `step`.

    Nodes are visited children before parents, ending with the root, which is
    passed with key `""` in a `RootHolder`. The step's return value replaces
    the node in its container, which is modified in place.
    """
    holder = RootHolder({ROOT_KEY: tree})
    location: list[Key] = []

    def internalize(container: Any, key: Key) -> Any:
        value = container[key]
        if isinstance(value, MutableSequence):
            for i in range(len(value)):
                location.append(i)
                value[i] = internalize(value, i)
                location.pop()
        elif isinstance(value, MutableMapping):
            for k in list(value):
                location.append(k)
                value[k] = internalize(value, k)
                location.pop()
        try:
            return step(key, value, container)
        except TelejsonError as e:
            e.add_note(f"While decoding the value at {_where(location)}")
            raise

    return internalize(holder, ROOT_KEY)


def object_members(value: object) -> dict[str, Any] | None:
    """Get the members of a non-mapping object, as JSON.stringify() would see them.

    Dataclass instances contribute their fields, other objects their
    `__dict__`. Returns None for objects that have neither.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in fields(value)}
    members = getattr(value, "__dict__", None)
    if isinstance(members, dict):
        return dict(members)
    return None
