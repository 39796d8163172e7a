"""Render token trees to HTML.

Token trees may come from untrusted sources (decoded JSON, imported
documents), so links and mention identifiers are validated again here before
anything becomes navigable. All text is HTML-escaped.
"""

import logging
from collections.abc import Iterable
from html import escape
from urllib.parse import quote

from chatmark.mentions import normalize_mention_name
from chatmark.tokenizer import tokenize
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
from chatmark.validation import is_valid_identifier, validate_url

logger = logging.getLogger(__name__)

_CONTAINER_TAGS = {
    Bold: ("<strong>", "</strong>"),
    Italic: ("<em>", "</em>"),
    Spoiler: ('<span class="spoiler">', "</span>"),
    Quote: ("<blockquote>", "</blockquote>"),
}


def mention_href(mention: Mention, server_id: str) -> str | None:
    """Route for a mention within a server, or None if it must not be linked."""
    if not server_id or mention.id is None or not is_valid_identifier(mention.id):
        return None
    section = "conversations" if mention.kind is MentionKind.USER else "channels"
    return f"/servers/{quote(server_id, safe='')}/{section}/{mention.id}"


def _render_link(token: Link, link_target: str) -> str:
    url = validate_url(token.url)
    if url is None:
        logger.warning("Refusing to render link with invalid URL %r", token.url)
        return escape(token.text)
    return (
        f'<a href="{escape(url)}" target="{escape(link_target)}" '
        f'rel="noopener noreferrer">{escape(token.text)}</a>'
    )


def _render_mention(token: Mention, server_id: str | None) -> str:
    name = normalize_mention_name(token.name)
    if name != token.name:
        logger.warning("Refusing to render mention with invalid name %r", token.name)
        return escape(f"{token.kind.trigger}{token.name}")
    label = escape(f"{token.kind.trigger}{name}")
    if token.id is not None and not is_valid_identifier(token.id):
        logger.warning("Ignoring invalid mention id %r", token.id)
    href = mention_href(token, server_id) if server_id else None
    if href is None:
        return f'<span class="mention">{label}</span>'
    return (
        f'<a class="mention" href="{escape(href)}" '
        f'data-mention-type="{token.kind.value}">{label}</a>'
    )


def render_token(token: Token, server_id: str | None = None, link_target: str = "_blank") -> str:
    if isinstance(token, Text):
        return escape(token.content)
    if isinstance(token, LineBreak):
        return "<br>"
    if isinstance(token, Link):
        return _render_link(token, link_target)
    if isinstance(token, Mention):
        return _render_mention(token, server_id)
    open_tag, close_tag = _CONTAINER_TAGS[type(token)]
    inner = render_html(token.content, server_id=server_id, link_target=link_target)
    return f"{open_tag}{inner}{close_tag}"


def render_html(
    tokens: Iterable[Token],
    server_id: str | None = None,
    link_target: str = "_blank",
) -> str:
    """Render a token tree to an HTML fragment.

    Args:
        tokens: Token tree, trusted or not.
        server_id: Server scope for mention links. Without it mentions are
            rendered as plain labels.
        link_target: ``target`` attribute for external links.
    """
    return "".join(render_token(t, server_id, link_target) for t in tokens)


def render_message(
    content: str,
    server_id: str | None = None,
    link_target: str = "_blank",
) -> str:
    """Tokenize and render stored message content."""
    return render_html(tokenize(content), server_id=server_id, link_target=link_target)
