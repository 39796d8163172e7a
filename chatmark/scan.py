"""Find mentions in token trees and stored messages."""

import logging
from collections.abc import Iterable, Iterator

from chatmark.tokenizer import tokenize
from chatmark.tokens import Mention, MentionKind, Token, walk

logger = logging.getLogger(__name__)


def iter_mentions(tokens: Iterable[Token]) -> Iterator[Mention]:
    """Yield every mention in a token tree, including nested ones."""
    for token in walk(tokens):
        if isinstance(token, Mention):
            yield token


def find_mentions(
    tokens: Iterable[Token],
    kind: MentionKind,
    mention_id: str | None = None,
) -> list[Mention]:
    """Return mentions of ``kind``, optionally restricted to one identifier.

    Mentions without an identifier never match a specific ``mention_id``.
    """
    return [
        m for m in iter_mentions(tokens)
        if m.kind is kind and (mention_id is None or m.id == mention_id)
    ]


def count_mentions(messages: Iterable[str], kind: MentionKind, mention_id: str) -> int:
    """Count references to one user or channel across a batch of messages.

    Args:
        messages: Stored message contents.
        kind: Whether ``mention_id`` is a user or a channel.
        mention_id: Identifier of the participant being counted.

    Returns:
        Total number of matching mentions over all messages.
    """
    total = 0
    scanned = 0
    for content in messages:
        scanned += 1
        if not content:
            continue
        total += len(find_mentions(tokenize(content), kind, mention_id))
    logger.debug(
        "Counted %d %s mentions of %s in %d messages", total, kind.value, mention_id, scanned
    )
    return total


def mentions_participant(content: str, kind: MentionKind, mention_id: str) -> bool:
    """Return True if ``content`` mentions the given user or channel."""
    return any(
        m.kind is kind and m.id == mention_id for m in iter_mentions(tokenize(content))
    )
