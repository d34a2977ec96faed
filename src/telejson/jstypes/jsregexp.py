from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import AnyStr, Final, Literal, overload

from telejson._errors import JSRegExpTelejsonError
from telejson.constants import PAYLOAD_SEPARATOR, JSRegExpFlag

EMPTY_SOURCE: Final = "(?:)"
"""How JavaScript writes the source of a RegExp that matches the empty string."""


@dataclass(frozen=True, order=True, slots=True)
class JSRegExp:
    """A JavaScript RegExp, as its source text and flags.

    Encoded RegExps are tagged as `_regexp_<flags>|<source>`, the flags and
    source being the same strings as JavaScript's `RegExp.prototype.flags`
    and `RegExp.prototype.source`.

    `JSRegExp` doesn't match text itself. Python's `re` syntax overlaps with
    JavaScript's but isn't the same, so
    [`as_python_pattern()`](`telejson.jstypes.JSRegExp.as_python_pattern`)
    only works for patterns written in the common subset.
    """

    source: str
    flags: JSRegExpFlag = field(default=JSRegExpFlag.NoFlag)

    def __post_init__(self) -> None:
        if self.source == "":
            # `//` is a comment, not an empty RegExp literal.
            object.__setattr__(self, "source", EMPTY_SOURCE)
        if self.flags & JSRegExpFlag.Unicode and self.flags & JSRegExpFlag.UnicodeSets:
            raise ValueError(
                "The Unicode and UnicodeSets flags cannot be set together: "
                "JavaScript rejects RegExps with both u and v flags."
            )

    @property
    def payload(self) -> str:
        """The text following the RegExp tag: the flags, `|`, then the source.

        >>> JSRegExp("a|b", JSRegExpFlag.Global).payload
        'g|a|b'
        """
        return f"{self.flags!s}{PAYLOAD_SEPARATOR}{self.source}"

    @staticmethod
    def from_payload(payload: str) -> JSRegExp:
        """Create a JSRegExp from the text following the RegExp tag.

        The flags end at the first `|`, the source may contain more.

        Raises
        ------
        JSRegExpTelejsonError
            If there is no `|`, or a flag is not known.
        ValueError
            If the flags are not a valid combination.
        """
        flags, separator, source = payload.partition(PAYLOAD_SEPARATOR)
        if not separator:
            raise JSRegExpTelejsonError(
                f"RegExp payload has no {PAYLOAD_SEPARATOR!r} between flags and source"
            )
        return JSRegExp(source, JSRegExpFlag.from_chars(flags))

    @staticmethod
    def from_python_pattern(pattern: re.Pattern[AnyStr]) -> JSRegExp:
        """Create a JSRegExp with the source and flags of a Python pattern.

        The source is not translated, so the result only behaves the same in
        JavaScript if the pattern uses syntax both languages share. Python
        `str` patterns always have `re.UNICODE` set, which becomes the `v`
        flag.
        """
        source = pattern.pattern
        if isinstance(source, bytes):
            source = source.decode()
        try:
            flags = JSRegExpFlag.from_python_flags(pattern.flags)
        except JSRegExpTelejsonError as e:
            raise JSRegExpTelejsonError(
                f"Python re.Pattern flags cannot be represented by "
                f"JavaScript RegExp: {e}"
            ) from e
        return JSRegExp(source, flags=flags)

    @overload
    def as_python_pattern(self, throw: Literal[False]) -> re.Pattern[str] | None: ...

    @overload
    def as_python_pattern(self, throw: Literal[True] = True) -> re.Pattern[str]: ...

    def as_python_pattern(self, throw: bool = True) -> re.Pattern[str] | None:
        """Compile the source and flags with Python's `re` module.

        Fails when a flag has no Python equivalent (like `l`) or the source
        uses JavaScript-only syntax. Compiling can also succeed with a pattern
        that matches differently than it would in JavaScript.
        """
        try:
            return re.compile(self.source, self.flags.as_python_flags())
        except (JSRegExpTelejsonError, re.error) as e:
            if not throw:
                return None
            raise JSRegExpTelejsonError(
                f"JSRegExp is not a valid Python re.Pattern: {e}"
            ) from e

    def __str__(self) -> str:
        return f"/{self.source}/{self.flags!s}"
