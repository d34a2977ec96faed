from __future__ import annotations

import reprlib
from typing import Any, Final

_IDENTIFIER_REPR_LIMIT: Final = 255


class JSObject(dict[str, Any]):
    """
    A Python equivalent of a JavaScript plain Object, as decoded from JSON.

    `JSObject` is a `dict`, so it compares equal to a `dict` with the same
    items. Decoded objects that had a constructor name other than `Object`
    are instances of a subclass with that name, created by
    [`named_object_type()`](`telejson.jstypes.named_object_type`).
    """

    __slots__ = ()

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        name = type(self).__name__
        if all(
            isinstance(k, str) and k.isidentifier() and len(k) < _IDENTIFIER_REPR_LIMIT
            for k in self
        ):
            items = ", ".join(f"{k}={v!r}" for k, v in self.items())
            return f"{name}({items})"
        return f"{name}({dict.__repr__(self)})"


def named_object_type(name: str) -> type[JSObject]:
    """Create a `JSObject` subclass whose `__name__` is `name`.

    Instances of `JSObject` can be re-typed in place to the returned type by
    assigning their `__class__`, because the subclass adds no instance
    layout of its own.

    Raises
    ------
    ValueError
        If `name` can't be the name of a type, like names containing null
        characters.

    >>> Point = named_object_type("Point")
    >>> Point(x=1, y=2)
    Point(x=1, y=2)
    >>> Point.__name__
    'Point'
    """
    return type(name, (JSObject,), {"__slots__": (), "__module__": __name__})
