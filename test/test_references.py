from __future__ import annotations

from copy import copy

import pytest

from telejson import UnresolvedReferenceDecodeError
from telejson._references import (
    DeferredReference,
    ObjectNotVisitedTelejsonError,
    VisitedObjectLog,
    join_path,
    resolve_path,
)


def test_visited_object_log__paths_can_be_retrieved_by_object() -> None:
    obj1, obj2, list1, list2 = object(), object(), list[object](), list[object]()
    objects = VisitedObjectLog()

    objects.record_reference(obj1, "root")
    objects.record_reference(obj2, "root.a")
    objects.record_reference(list1, "root.a.0")
    objects.record_reference(list2, "root.b")

    assert objects.get_path(obj1) == "root"
    assert objects.get_path(obj2) == "root.a"
    assert objects.get_path(list1) == "root.a.0"
    assert objects.get_path(list2) == "root.b"
    assert len(objects) == 4


def test_visited_object_log__contains_recorded_objects() -> None:
    obj, lst = object(), list[object]()
    objects = VisitedObjectLog()

    objects.record_reference(obj, "root")
    objects.record_reference(lst, "root.a")

    assert obj in objects
    assert lst in objects


def test_visited_object_log__identifies_objects_by_identity() -> None:
    obj, lst = object(), list[object]()
    objects = VisitedObjectLog()

    objects.record_reference(obj, "root")
    objects.record_reference(lst, "root.a")

    assert copy(obj) not in objects
    assert copy(lst) not in objects
    assert [] not in objects


def test_visited_object_log__objects_can_only_be_recorded_once() -> None:
    obj = object()
    objects = VisitedObjectLog()
    objects.record_reference(obj, "root.a")

    with pytest.raises(ValueError, match="Object is already recorded at 'root.a'"):
        objects.record_reference(obj, "root.b")


def test_visited_object_log__unrecorded_object_has_no_path() -> None:
    obj = object()
    objects = VisitedObjectLog()

    with pytest.raises(ObjectNotVisitedTelejsonError) as exc_info:
        objects.get_path(obj)

    assert exc_info.value.obj is obj
    assert isinstance(exc_info.value, KeyError)
    assert str(exc_info.value) == (
        f"Object has not been recorded in the log: obj={obj!r}"
    )


def test_join_path() -> None:
    assert join_path(["root"]) == "root"
    assert join_path(["root", "a", 0, "b"]) == "root.a.0.b"


@pytest.mark.parametrize(
    "root,path,expected",
    [
        pytest.param([1], "root", [1], id="root"),
        pytest.param({"a": [{"b": 1}]}, "root.a.0.b", 1, id="nested"),
        pytest.param({"a.b": {"c": 2}}, "root.a.b.c", 2, id="dotted-key"),
        pytest.param(
            {"a": {"b": {"c": 1}}, "a.b": {"c": 2}}, "root.a.b.c", 1, id="shortest-first"
        ),
        pytest.param(
            {"a": {"x": 1}, "a.b": {"c": 2}}, "root.a.b.c", 2, id="backtracks"
        ),
        pytest.param({"": {"": 3}}, "root..", 3, id="empty-keys"),
        pytest.param({"0": "a"}, "root.0", "a", id="numeric-key"),
    ],
)
def test_resolve_path(root: object, path: str, expected: object) -> None:
    assert resolve_path(root, path) == expected


@pytest.mark.parametrize(
    "root,path",
    [
        pytest.param({}, "root.a", id="missing-key"),
        pytest.param([1], "root.1", id="index-out-of-range"),
        pytest.param([1], "root.-1", id="negative-index"),
        pytest.param([1], "root.a", id="non-numeric-index"),
        pytest.param([1], "root.\u00b2", id="non-ascii-digit"),
        pytest.param([1], "root.\u0660", id="non-ascii-decimal"),
        pytest.param({"a": 1}, "root.a.b", id="through-primitive"),
        pytest.param({"a": "xyz"}, "root.a.0", id="through-str"),
        pytest.param({"a": 1}, "a", id="no-root"),
        pytest.param({"a": 1}, "rooted.a", id="wrong-root"),
    ],
)
def test_resolve_path__unresolved(root: object, path: str) -> None:
    with pytest.raises(UnresolvedReferenceDecodeError) as exc_info:
        resolve_path(root, path)
    assert exc_info.value.path == path


def test_deferred_reference__assigns_mapping_members() -> None:
    target: list[object] = []
    container: dict[str, object] = {"b": None}
    root = {"a": target, "c": container}

    DeferredReference("b", container, "root.a").apply(root)

    assert container["b"] is target


def test_deferred_reference__assigns_sequence_items() -> None:
    container: list[object] = [None]
    root = {"a": container}

    DeferredReference(0, container, "root").apply(root)

    assert container[0] is root


def test_deferred_reference__sequence_items_need_integer_keys() -> None:
    container: list[object] = [None]

    with pytest.raises(TypeError, match="non-integer key: '0'"):
        DeferredReference("0", container, "root").apply({"a": container})
