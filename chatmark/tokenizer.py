"""Chat message markdown tokenizer.

Supported syntax:

- ``**bold**``, ``*italic*``, ``||spoiler||``
- ``> quote`` (whole line)
- ``[text](url)`` and bare ``http(s)://`` URLs
- ``@user[id]`` / ``@user`` and ``#channel[id]`` / ``#channel`` mentions

Each line is scanned left to right. At every position the matchers in
``_MATCHERS`` are tried in order and the first one that matches wins; when
none does, plain text is consumed up to the next character that could start a
match. Links whose URL fails validation and mentions whose identifier fails
validation degrade instead of being dropped, so ``tokenize`` never raises and
never loses content.
"""

import logging
import re
from collections.abc import Callable

from chatmark.mentions import MENTION_NAME_CHARS, normalize_mention_name
from chatmark.tokens import (
    Bold,
    Italic,
    LineBreak,
    Link,
    Mention,
    MentionKind,
    Quote,
    Spoiler,
    Text,
    Token,
)
from chatmark.validation import is_valid_identifier, is_valid_url, validate_url

logger = logging.getLogger(__name__)

MENTION_WITH_ID_PATTERN = re.compile(
    r"([@#])(%s+)\[([A-Za-z0-9_-]+)\]" % MENTION_NAME_CHARS
)
MENTION_PATTERN = re.compile(r"([@#])(%s+)" % MENTION_NAME_CHARS)

# The URL may contain one level of balanced parentheses
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(((?:[^()]|\([^()]*\))+)\)")

BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
SPOILER_PATTERN = re.compile(r"\|\|(.+?)\|\|")
# No '*' inside, so a '**bold**' opener never reads as italic
ITALIC_PATTERN = re.compile(r"\*([^*\n]+)\*")

AUTOLINK_PATTERN = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+", re.IGNORECASE)

# Anything that could start one of the matches above
TEXT_BOUNDARY_PATTERN = re.compile(r"\[|https?://|\*|\|\||@|#", re.IGNORECASE)

MatchResult = tuple[int, Token]


def _mention(trigger: str, raw_name: str, mention_id: str | None) -> Mention | None:
    name = normalize_mention_name(raw_name)
    if not name:
        return None
    return Mention(name=name, kind=MentionKind.from_trigger(trigger), id=mention_id)


def _match_mention_with_id(text: str, pos: int) -> MatchResult | None:
    match = MENTION_WITH_ID_PATTERN.match(text, pos)
    if not match:
        return None
    trigger, raw_name, raw_id = match.groups()
    mention_id = raw_id if is_valid_identifier(raw_id) else None
    if mention_id is None:
        logger.debug("Dropping invalid mention id %r for %s%s", raw_id, trigger, raw_name)
    mention = _mention(trigger, raw_name, mention_id)
    if mention is None:
        return None
    return match.end(), mention


def _match_mention(text: str, pos: int) -> MatchResult | None:
    match = MENTION_PATTERN.match(text, pos)
    if not match:
        return None
    mention = _mention(match.group(1), match.group(2), None)
    if mention is None:
        return None
    return match.end(), mention


def _match_link(text: str, pos: int) -> MatchResult | None:
    match = LINK_PATTERN.match(text, pos)
    if not match:
        return None
    label, url = match.groups()
    validated = validate_url(url)
    if validated is not None:
        return match.end(), Link(text=label, url=validated)
    logger.debug("Rejected link URL %r", url)
    return match.end(), Text(content=match.group(0))


def _container_matcher(pattern: re.Pattern, cls: type) -> Callable[[str, int], MatchResult | None]:
    def matcher(text: str, pos: int) -> MatchResult | None:
        match = pattern.match(text, pos)
        if not match or not match.group(1):
            return None
        return match.end(), cls(content=tuple(_parse_inline(match.group(1))))

    matcher.__name__ = f"_match_{cls.__name__.lower()}"
    return matcher


def _match_autolink(text: str, pos: int) -> MatchResult | None:
    match = AUTOLINK_PATTERN.match(text, pos)
    if not match:
        return None
    url = match.group(0)
    if is_valid_url(url):
        return match.end(), Link(text=url, url=url)
    logger.debug("Rejected bare URL %r", url)
    return match.end(), Text(content=url)


def _match_text(text: str, pos: int) -> MatchResult:
    boundary = TEXT_BOUNDARY_PATTERN.search(text, pos)
    end = boundary.start() if boundary else len(text)
    if end == pos:
        # Nothing matched at a trigger character: take it literally
        end = pos + 1
    return end, Text(content=text[pos:end])


_MATCHERS: tuple[Callable[[str, int], MatchResult | None], ...] = (
    _match_mention_with_id,
    _match_mention,
    _match_link,
    _container_matcher(BOLD_PATTERN, Bold),
    _container_matcher(SPOILER_PATTERN, Spoiler),
    _container_matcher(ITALIC_PATTERN, Italic),
    _match_autolink,
)


def _parse_inline(text: str) -> list[Token]:
    """Parse inline markup within a single line."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        for matcher in _MATCHERS:
            result = matcher(text, pos)
            if result is not None:
                break
        else:
            result = _match_text(text, pos)
        pos, token = result
        tokens.append(token)
    return tokens


def tokenize(text: str) -> list[Token]:
    """Parse a chat message into a list of tokens.

    Lines are separated by LineBreak tokens (none after the last line). A line
    starting with ``>`` becomes a single Quote holding the rest of the line.

    Args:
        text: Raw message content as stored.

    Returns:
        A freshly built token list; empty for empty input.
    """
    if not text:
        return []

    tokens: list[Token] = []
    lines = text.split("\n")
    for index, line in enumerate(lines):
        if line.strip().startswith(">"):
            quoted = line.lstrip()[1:].lstrip()
            tokens.append(Quote(content=tuple(_parse_inline(quoted))))
        else:
            tokens.extend(_parse_inline(line))
        if index < len(lines) - 1:
            tokens.append(LineBreak())
    return tokens
