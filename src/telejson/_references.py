from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from typing import Union

from telejson._errors import TelejsonError, UnresolvedReferenceDecodeError
from telejson.constants import PATH_SEPARATOR, ROOT_PATH

Key = Union[str, int]
"""A mapping key or a sequence index."""


class ObjectReferenceTelejsonError(TelejsonError, KeyError):
    pass


@dataclass(init=False)
class ObjectNotVisitedTelejsonError(ObjectReferenceTelejsonError):
    obj: object

    def __init__(self, message: str, *args: object, obj: object) -> None:
        super(ObjectNotVisitedTelejsonError, self).__init__(message, *args)
        self.obj = obj


@dataclass(init=False, slots=True)
class VisitedObjectLog:
    """The containers seen while encoding, with the path they were first seen at.

    Containers are identified by identity, not equality. The log keeps a
    reference to each container so that their ids can't be reused while the
    log exists.
    """

    _path_by_pyid: dict[int, str]
    _objects: list[object]

    def __init__(self) -> None:
        self._path_by_pyid = dict()
        self._objects = []

    def __contains__(self, obj: object) -> bool:
        return id(obj) in self._path_by_pyid

    def __len__(self) -> int:
        return len(self._objects)

    def get_path(self, obj: object) -> str:
        try:
            return self._path_by_pyid[id(obj)]
        except KeyError:
            raise ObjectNotVisitedTelejsonError(
                "Object has not been recorded in the log", obj=obj
            ) from None

    def record_reference(self, obj: object, path: str) -> None:
        if id(obj) in self._path_by_pyid:
            raise ValueError(f"Object is already recorded at {self.get_path(obj)!r}")
        self._objects.append(obj)
        self._path_by_pyid[id(obj)] = path


def join_path(keys: Sequence[Key]) -> str:
    return PATH_SEPARATOR.join(str(k) for k in keys)


def resolve_path(root: object, path: str) -> object:
    """Look up the value a dotted path refers to.

    The path's first segment must be `root`. Later segments are mapping keys or
    sequence indexes. Keys containing the separator are found by trying longer
    runs of segments as a single key when the shorter run doesn't resolve.

    >>> resolve_path({"a": [{"b": 1}]}, "root.a.0.b")
    1
    >>> resolve_path({"a.b": {"c": 2}}, "root.a.b.c")
    2
    """
    if path == ROOT_PATH:
        return root
    prefix = f"{ROOT_PATH}{PATH_SEPARATOR}"
    if not path.startswith(prefix):
        raise UnresolvedReferenceDecodeError(
            f"Reference path does not start with {ROOT_PATH!r}", path=path
        )
    segments = path[len(prefix) :].split(PATH_SEPARATOR)
    found, value = _resolve_segments(root, segments)
    if not found:
        raise UnresolvedReferenceDecodeError(
            "Reference path does not exist in the decoded value", path=path
        )
    return value


def _resolve_segments(node: object, segments: list[str]) -> tuple[bool, object]:
    if not segments:
        return True, node
    if isinstance(node, Mapping):
        for end in range(1, len(segments) + 1):
            key = PATH_SEPARATOR.join(segments[:end])
            if key in node:
                found, value = _resolve_segments(node[key], segments[end:])
                if found:
                    return found, value
        return False, None
    if isinstance(node, Sequence) and not isinstance(node, str):
        index = segments[0]
        if not (index.isascii() and index.isdigit() and int(index) < len(node)):
            return False, None
        return _resolve_segments(node[int(index)], segments[1:])
    return False, None


@dataclass(slots=True)
class DeferredReference:
    """A duplicate marker waiting for the decoded value to be complete.

    The referenced container may not exist yet when its marker is decoded,
    so the assignment happens once the whole tree has been decoded.
    """

    target_key: Key
    container: MutableMapping[str, object] | MutableSequence[object]
    source_path: str

    def apply(self, root: object) -> None:
        value = resolve_path(root, self.source_path)
        if isinstance(self.container, MutableSequence):
            if not isinstance(self.target_key, int):
                raise TypeError(
                    f"Cannot assign a reference to a sequence item with a "
                    f"non-integer key: {self.target_key!r}"
                )
            self.container[self.target_key] = value
        else:
            self.container[str(self.target_key)] = value
