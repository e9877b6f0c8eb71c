"""Hypothesis strategies for property testing.

Provides reusable strategies for session payloads, signing keys and
cookie header fragments.
"""

from hypothesis import strategies as st

# JSON scalars orjson round-trips exactly (no NaN/inf, ints within 64 bits)
json_scalars = (
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**53), max_value=2**53)
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=20)
)

json_values = st.recursive(
    json_scalars,
    lambda children: st.lists(children, max_size=4)
    | st.dictionaries(st.text(max_size=10), children, max_size=4),
    max_leaves=12,
)


@st.composite
def session_payload(draw):
    """Generate a session payload: a dict of string keys to JSON values."""
    return draw(st.dictionaries(st.text(max_size=12), json_values, max_size=6))


@st.composite
def secret_key(draw):
    """Generate a signing key of at least 32 UTF-8 bytes."""
    # Every character encodes to at least one byte
    return draw(st.text(min_size=32, max_size=64))


cookie_names = st.from_regex(r"[A-Za-z0-9!#$&'*+\-.^_`|~]{1,16}", fullmatch=True)
