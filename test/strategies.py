from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Final

from hypothesis import strategies as st

from telejson.constants import CONSTRUCTOR_NAME_KEY, DATE_PATTERN, JSRegExpFlag, Tag
from telejson.jstypes import JSRegExp, JSUndefined

ALL_FLAG_BITS: Final = 0b111111111


def is_plain_text(text: str) -> bool:
    """True if text decodes as itself: it's not tagged or date-shaped."""
    return not text.startswith(tuple(Tag)) and DATE_PATTERN.match(text) is None


plain_text = st.text().filter(is_plain_text)
"""Generate strings that aren't changed by decoding."""

object_keys = st.text().filter(lambda key: key != CONSTRUCTOR_NAME_KEY)

json_primitives = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=False, allow_infinity=False),
    plain_text,
)

json_values = st.recursive(
    json_primitives,
    lambda children: st.one_of(
        st.lists(children, max_size=5),
        st.dictionaries(object_keys, children, max_size=5),
    ),
    max_leaves=20,
)
"""Generate trees of JSON values that decode to equal values."""

js_regexp_flags = (
    st.integers(min_value=0, max_value=ALL_FLAG_BITS)
    .map(JSRegExpFlag)
    .filter(
        lambda f: not (f & JSRegExpFlag.Unicode and f & JSRegExpFlag.UnicodeSets)
    )
)
"""Generate valid combinations of RegExp flags."""

js_regexps = st.builds(JSRegExp, source=st.text(), flags=js_regexp_flags)

utc_datetimes = st.datetimes(
    min_value=datetime(1000, 1, 1),
    max_value=datetime(9999, 12, 31),
    timezones=st.just(timezone.utc),
).map(lambda dt: dt.replace(microsecond=dt.microsecond // 1000 * 1000))
"""Generate datetimes that have exactly the millisecond precision of JS Dates."""

extended_values = st.one_of(
    js_regexps,
    utc_datetimes,
    st.just(JSUndefined),
    st.sampled_from([math.inf, -math.inf]),
)
"""Generate values that plain JSON can't represent, but which decode to an
equal value."""

js_source_text = st.text(alphabet=st.sampled_from(list("ab/*'\"`\\\n \t;{}=")))
"""Generate text dense in the characters the JavaScript comment scanner
treats specially."""
