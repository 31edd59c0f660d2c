"""
Validation of identifiers taken from the URL path.

Malformed input is expected traffic, so nothing here raises: each
validator returns ``None`` when the value is unusable and the caller
answers 400.
"""
import re

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

# Primary keys are positive BIGINTs.
MAX_ID = 2**63 - 1
_MAX_ID_DIGITS = len(str(MAX_ID))


def validate_id(raw: object) -> int | None:
    """
    Return *raw* as an ``int`` if it is a base-10 integer token with no
    residual characters and a value in ``1..MAX_ID``, otherwise None.

    ``"42"`` and ``" 42 "`` give 42; ``"42abc"``, ``"4.2"``, ``"0"`` and
    ``""`` give None.  ``bool`` is not accepted even though it subclasses
    ``int``.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        token = raw.strip()
        if not _INTEGER_RE.fullmatch(token):
            return None
        # Bound the length before int() so huge tokens never hit the
        # interpreter's digit limit.
        if len(token.lstrip("+-").lstrip("0")) > _MAX_ID_DIGITS:
            return None
        value = int(token)
    else:
        return None
    if not 1 <= value <= MAX_ID:
        return None
    return value


def validate_username(raw: object) -> str | None:
    """Return *raw* trimmed of surrounding whitespace, or None if nothing is left."""
    if not isinstance(raw, str):
        return None
    username = raw.strip()
    return username or None
