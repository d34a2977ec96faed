"""The main public API of telejson."""

from __future__ import annotations

from telejson._errors import (
    CircularReferenceEncodeError as CircularReferenceEncodeError,
)
from telejson._errors import DecodeTelejsonError as DecodeTelejsonError
from telejson._errors import EncodeTelejsonError as EncodeTelejsonError
from telejson._errors import FunctionEvaluationError as FunctionEvaluationError
from telejson._errors import FunctionSourceWarning as FunctionSourceWarning
from telejson._errors import JSRegExpTelejsonError as JSRegExpTelejsonError
from telejson._errors import TaggedValueDecodeError as TaggedValueDecodeError
from telejson._errors import TelejsonError as TelejsonError
from telejson._errors import TelejsonWarning as TelejsonWarning
from telejson._errors import UnhandledValueEncodeError as UnhandledValueEncodeError
from telejson._errors import (
    UnresolvedReferenceDecodeError as UnresolvedReferenceDecodeError,
)
from telejson.constants import JSRegExpFlag as JSRegExpFlag
from telejson.constants import Tag as Tag
from telejson.decode import DecodeContext as DecodeContext
from telejson.decode import Decoder as Decoder
from telejson.decode import loads as loads
from telejson.decode import looks_like_json as looks_like_json
from telejson.decode import parse as parse
from telejson.decode import reviver as reviver
from telejson.encode import EncodeContext as EncodeContext
from telejson.encode import Encoder as Encoder
from telejson.encode import dumps as dumps
from telejson.encode import replacer as replacer
from telejson.encode import stringify as stringify
from telejson.evaluate import FunctionEvaluator as FunctionEvaluator
from telejson.evaluate import restricted_evaluator as restricted_evaluator
from telejson.source import normalize_source as normalize_source
