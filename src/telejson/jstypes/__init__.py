"""Python representations of the JavaScript types that plain JSON can't hold."""

from __future__ import annotations

from telejson.constants import JSRegExpFlag as JSRegExpFlag
from telejson.jstypes.jsfunction import JSFunction as JSFunction
from telejson.jstypes.jsobject import JSObject as JSObject
from telejson.jstypes.jsobject import named_object_type as named_object_type
from telejson.jstypes.jsregexp import JSRegExp as JSRegExp
from telejson.jstypes.jssymbol import JSSymbol as JSSymbol
from telejson.jstypes.jsundefined import JSUndefined as JSUndefined
from telejson.jstypes.jsundefined import JSUndefinedEnum as JSUndefinedEnum
from telejson.jstypes.jsundefined import JSUndefinedType as JSUndefinedType
