from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, eq=False, slots=True)
class JSSymbol:
    """
    A JavaScript Symbol.

    Like JavaScript Symbols, every `JSSymbol` is unique: two symbols with the
    same description are not equal. Only the description survives encoding,
    so decoding produces a new symbol with an equal `description`.
    """

    description: str = ""

    def __repr__(self) -> str:
        return f"JSSymbol({self.description!r})"

    def __str__(self) -> str:
        return f"Symbol({self.description})"
