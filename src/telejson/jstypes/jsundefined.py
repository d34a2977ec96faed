from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Final, Literal

if TYPE_CHECKING:
    from typing_extensions import TypeAlias


class JSUndefinedEnum(Enum):
    """The single-member enum holding `JSUndefined`.

    An enum member is a singleton that survives copying and pickling, so
    `value is JSUndefined` is always a reliable test.
    """

    JSUndefined = "_undefined_"

    def __repr__(self) -> str:
        return self.name

    __str__ = __repr__

    def __bool__(self) -> bool:
        return False


JSUndefinedType: TypeAlias = Literal[JSUndefinedEnum.JSUndefined]
JSUndefined: Final = JSUndefinedEnum.JSUndefined
"""JavaScript's `undefined`, which `stringify()` tags as `_undefined_`.

Python has no equivalent of its own: `None` is `null`. Members of decoded
objects keep `JSUndefined` values rather than being deleted.
"""
