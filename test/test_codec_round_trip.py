from __future__ import annotations

import math
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from telejson import Decoder, Encoder, parse, stringify
from telejson.jstypes import JSFunction, JSObject, JSSymbol, JSUndefined

from .strategies import extended_values, json_values

deep_encoder = Encoder(max_depth=1000)
decoder = Decoder()


def round_trip(value: object) -> Any:
    return decoder.parse(deep_encoder.stringify(value))


@dataclass
class Point:
    x: int
    y: int


class Tree:
    def __init__(self, name: str) -> None:
        self.name = name
        self.children: list[Tree] = []
        self.parent: Tree | None = None

    def add(self, child: Tree) -> Tree:
        child.parent = self
        self.children.append(child)
        return child


def triple(x: int) -> int:
    # Triple x
    return x * 3


@given(json_values)
def test_json_values(value: object) -> None:
    assert round_trip(value) == value


@given(extended_values)
def test_extended_values(value: object) -> None:
    assert round_trip(value) == value
    assert round_trip([value]) == [value]
    assert round_trip({"a": value}) == {"a": value}


@given(st.lists(json_values, min_size=1, max_size=5))
def test_shared_members_stay_shared(members: list[object]) -> None:
    shared = list(members)
    value = round_trip({"a": shared, "b": [shared], "c": {"d": shared}})

    assert value["a"] == members
    assert value["b"][0] is value["a"]
    assert value["c"]["d"] is value["a"]


def test_nan() -> None:
    value = round_trip({"a": math.nan})
    assert math.isnan(value["a"])


def test_undefined() -> None:
    assert round_trip(JSUndefined) is JSUndefined
    assert round_trip({"a": JSUndefined})["a"] is JSUndefined


def test_symbol_description() -> None:
    symbol = round_trip(JSSymbol("foo"))
    assert isinstance(symbol, JSSymbol)
    assert symbol.description == "foo"


def test_datetime_is_truncated_to_milliseconds() -> None:
    value = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
    assert round_trip(value) == value.replace(microsecond=678000)


def test_cyclic_object_graph() -> None:
    root = Tree("root")
    child = root.add(Tree("child"))
    child.add(Tree("grandchild"))

    value = round_trip(root)

    assert type(value).__name__ == "Tree"
    assert value["name"] == "root"
    assert value["parent"] is None
    (decoded_child,) = value["children"]
    assert decoded_child["parent"] is value
    (decoded_grandchild,) = decoded_child["children"]
    assert decoded_grandchild["parent"] is decoded_child
    assert decoded_grandchild["name"] == "grandchild"


def test_cyclic_list() -> None:
    a: list[object] = [1]
    a.append(a)
    b: list[object] = [a, a]

    value = round_trip(b)

    assert value[0] is value[1]
    assert value[0][1] is value[0]


def test_named_objects() -> None:
    value = round_trip({"point": Point(1, 2), "ordered": OrderedDict(a=1)})

    assert type(value["point"]).__name__ == "Point"
    assert value["point"] == {"x": 1, "y": 2}
    assert type(value["ordered"]).__name__ == "OrderedDict"
    assert isinstance(value["ordered"], JSObject)


def test_named_objects_round_trip_again() -> None:
    once = round_trip(Point(1, 2))
    twice = round_trip(once)

    assert type(twice).__name__ == "Point"
    assert twice == {"x": 1, "y": 2}


def test_python_functions() -> None:
    value = round_trip({"triple": triple, "double": lambda x: x * 2})

    assert isinstance(value["triple"], JSFunction)
    assert value["triple"](2) == 6
    assert value["double"](2) == 4


def test_python_lambdas_sharing_a_line() -> None:
    value = round_trip({"inc": lambda x: x + 1, "dbl": lambda x: x * 2})

    assert value["inc"](10) == 11
    assert value["dbl"](10) == 20


def test_revived_functions_encode_unchanged() -> None:
    text = stringify(triple)
    assert stringify(parse(text)) == text


def test_javascript_functions_encode_unchanged() -> None:
    text = '"_function_add|function add(a, b) {return a // b;}"'
    assert stringify(parse(text)) == text


def test_depth_summaries_are_lossy() -> None:
    value = parse(stringify([[[[1]]]], max_depth=2))
    assert value == [[["[Array(1)]"]]]


def test_str_that_looks_like_a_date_is_decoded_as_a_date() -> None:
    value = parse(stringify("2024-01-02T03:04:05.000Z"))
    assert value == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
