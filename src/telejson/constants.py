"""Constant values of the tagged-string format."""

from __future__ import annotations

import operator
import re
from collections.abc import Mapping
from enum import IntFlag, StrEnum
from functools import lru_cache, reduce
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Literal, overload

from telejson._errors import JSRegExpTelejsonError

if TYPE_CHECKING:
    from typing_extensions import Self

DEFAULT_MAX_DEPTH: Final = 10
"""The container nesting depth beyond which `stringify()` summarises values."""

ROOT_PATH: Final = "root"
"""The first segment of every dotted path; on its own it refers to the root."""

PATH_SEPARATOR: Final = "."

CONSTRUCTOR_NAME_KEY: Final = "_constructor-name_"
"""The mapping key that records the class name of an encoded object."""

GENERIC_OBJECT_NAME: Final = "Object"
"""Objects with this constructor name decode as plain `JSObject`."""

DATE_PATTERN: Final = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z\Z", re.ASCII
)
"""Strings of this shape are encoded (and decoded) as Dates."""

OPAQUE_FUNCTION_PATTERN: Final = re.compile(
    r"(\[native code\]|WEBPACK_IMPORTED_MODULE)"
)
"""JavaScript function sources that can't be revived."""

JS_NOOP_FUNCTION_SOURCE: Final = "() => {}"
PY_NOOP_FUNCTION_SOURCE: Final = "lambda *args, **kwargs: None"

MAX_INDENT: Final = 10
"""JSON.stringify() clamps indentation to 10 spaces or characters."""


class Tag(StrEnum):
    """The prefixes of tagged strings.

    Each tag marks a string as the encoded form of a value that plain JSON
    can't represent. Tags with a payload (like `Date`) are followed by the
    payload text, the others are the entire string.
    """

    RegExp = "_regexp_"
    """`_regexp_<flags>|<source>`"""
    Function = "_function_"
    """`_function_<name>|<source>`"""
    Symbol = "_symbol_"
    """`_symbol_<description>`"""
    Date = "_date_"
    """`_date_<ISO 8601 text>`"""
    Duplicate = "_duplicate_"
    """`_duplicate_<dotted path of the first occurrence>`"""
    Undefined = "_undefined_"
    NegativeInfinity = "_-Infinity_"
    Infinity = "_Infinity_"
    NaN = "_NaN_"

    def tagged(self, payload: str = "") -> str:
        return f"{self.value}{payload}"

    def payload(self, tagged: str) -> str:
        if not tagged.startswith(self.value):
            raise ValueError(f"{tagged!r} does not start with the tag {self.value!r}")
        return tagged[len(self.value) :]


PAYLOAD_SEPARATOR: Final = "|"
"""Separates the first field of RegExp and Function payloads from the source."""


class JSRegExpFlag(IntFlag):
    """
    JavaScript RegExp flags.

    This is an [IntFlag enum](`enum.IntFlag`). `str()` renders the active
    flags as the flag characters, in the same order as JavaScript's
    `RegExp.prototype.flags`.
    """

    HasIndices = "d", 0, re.NOFLAG
    Global = "g", 1, re.NOFLAG
    IgnoreCase = "i", 2, re.IGNORECASE
    Linear = "l", 3, None
    Multiline = "m", 4, re.MULTILINE
    DotAll = "s", 5, re.DOTALL
    Unicode = "u", 6, re.UNICODE
    UnicodeSets = "v", 7, re.UNICODE
    Sticky = "y", 8, re.NOFLAG
    NoFlag = "", None, re.NOFLAG

    __char: str  # only present on defined values, not combinations
    __python_flag: re.RegexFlag | None

    if not TYPE_CHECKING:  # this __new__ breaks the default Enum types if mypy sees it

        def __new__(
            cls, char: str, bit_index: int | None, python_flag: re.RegexFlag | None
        ) -> Self:
            value = 0 if bit_index is None else (1 << bit_index)
            obj = int.__new__(cls, value)
            obj._value_ = value
            obj.__char = char
            obj.__python_flag = python_flag
            return obj

    @staticmethod
    @lru_cache(maxsize=1)  # noqa: B019
    def _char_mapping() -> Mapping[str, JSRegExpFlag]:
        return MappingProxyType({f.__char: f for f in JSRegExpFlag if f.__char})

    @staticmethod
    @lru_cache(maxsize=1)  # noqa: B019
    def _python_flag_mapping() -> Mapping[re.RegexFlag, JSRegExpFlag]:
        return MappingProxyType(
            {
                f.__python_flag: f
                for f in JSRegExpFlag
                # Exclude Unicode because Unicode and UnicodeSets are mutually
                # exclusive and UnicodeSets enables more features.
                if f.__python_flag and f is not JSRegExpFlag.Unicode
            }
        )

    @staticmethod
    def from_chars(chars: str) -> JSRegExpFlag:
        """Get the flags named by JavaScript flag characters, like `"gi"`."""
        mapping = JSRegExpFlag._char_mapping()
        unknown = sorted(set(c for c in chars if c not in mapping))
        if unknown:
            raise JSRegExpTelejsonError(
                f"Unknown JavaScript RegExp flags: {''.join(unknown)!r}"
            )
        return reduce(
            operator.or_, (mapping[c] for c in chars), JSRegExpFlag.NoFlag
        )

    @staticmethod
    def from_python_flags(python_flags: re.RegexFlag | int) -> JSRegExpFlag:
        """Get the JavaScript flags equivalent to Python `re` module flags."""
        python_flags = re.RegexFlag(python_flags)
        if python_flags & re.VERBOSE:
            raise JSRegExpTelejsonError(
                "No equivalent JavaScript RegExp flags exist for RegexFlag.VERBOSE"
            )
        mapping = JSRegExpFlag._python_flag_mapping()
        return reduce(
            operator.or_,
            (mapping[f] for f in python_flags if f in mapping),
            JSRegExpFlag.NoFlag,
        )

    @overload
    def as_python_flags(self, *, throw: Literal[False]) -> re.RegexFlag | None: ...

    @overload
    def as_python_flags(self, *, throw: Literal[True] = True) -> re.RegexFlag: ...

    def as_python_flags(self, *, throw: bool = True) -> re.RegexFlag | None:
        """
        Get the Python `re` module flags that correspond to this value's active flags.

        Some flags don't have a direct equivalent, such as Linear. These result
        in there being no Python equivalent, so the result is None.

        Some flag don't affect Python because they adjust the JavaScript
        matching API which isn't used in Python. For example, `HasIndices`.
        These are ignored.
        """
        flags = re.NOFLAG
        for f in self:
            if f.__python_flag is None:
                break
            flags |= f.__python_flag
        else:
            return flags

        if not throw:
            return None

        incompatible = ", ".join(
            f"JSRegExp.{f.name}" for f in self if f.__python_flag is None
        )
        raise JSRegExpTelejsonError(
            f"No equivalent Python flags exist for {incompatible}"
        )

    def __str__(self) -> str:
        return "".join(f.__char for f in self)
