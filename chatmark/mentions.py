"""Mention name normalization."""

import re

MAX_MENTION_NAME_LENGTH = 50

MENTION_NAME_CHARS = r"[A-Za-z0-9_-]"

_NAME_PATTERN = re.compile(MENTION_NAME_CHARS + "+")


def normalize_mention_name(name: str) -> str:
    """Bound a mention name to MAX_MENTION_NAME_LENGTH characters.

    The tokenizer only matches names made of letters, digits, underscore and
    hyphen, so for its input this is a pure truncation. Anything else (empty
    strings, other characters, non-strings) normalizes to "".
    """
    if not isinstance(name, str):
        return ""
    truncated = name[:MAX_MENTION_NAME_LENGTH]
    if not _NAME_PATTERN.fullmatch(truncated):
        return ""
    return truncated
