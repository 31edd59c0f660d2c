"""
Tag codec: a post's tag list is stored as a single delimited text column.

``decode(encode(tags)) == tags`` holds for every list whose items do not
contain ``DELIMITER``.  Tags containing the delimiter are not escaped and
will be split on the way back; callers that need such tags are out of
luck.  ``[]``, ``[""]`` and a missing value all read back as ``[]``.
"""

DELIMITER = ","


def encode(tags: list[str]) -> str:
    return DELIMITER.join(tags)


def decode(stored: str | None) -> list[str]:
    if not stored:
        return []
    return stored.split(DELIMITER)
