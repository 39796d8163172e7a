"""MCP server exposing the chatmark engine as tools."""

import json
import logging

from mcp.server.fastmcp import FastMCP

from chatmark import __version__
from chatmark.config import get_config

logger = logging.getLogger(__name__)

mcp = FastMCP("chatmark")

_INTERNAL_ERROR = json.dumps({"error": "Internal error. Check server logs for details."})


def _too_long(content: str) -> str | None:
    config = get_config()
    if config.exceeds_limit(content):
        return json.dumps({
            "error": f"Message exceeds {config.max_message_length} characters."
        })
    return None


@mcp.tool()
def markdown_tokenize(content: str) -> str:
    """Parse chat message markdown into a token tree.

    Args:
        content: Message content as stored.
    """
    error = _too_long(content)
    if error:
        return error
    try:
        from chatmark.tokenizer import tokenize
        from chatmark.tokens import tokens_to_json

        return tokens_to_json(tokenize(content), indent=2)
    except Exception:
        logger.exception("markdown_tokenize failed")
        return _INTERNAL_ERROR


@mcp.tool()
def markdown_render(content: str, server_id: str | None = None) -> str:
    """Render chat message markdown as HTML.

    Args:
        content: Message content as stored.
        server_id: Server scope for mention links (default from config).
    """
    error = _too_long(content)
    if error:
        return error
    try:
        from chatmark.renderer import render_message

        config = get_config()
        html = render_message(
            content,
            server_id=server_id or config.server_id,
            link_target=config.link_target,
        )
        return json.dumps({"html": html})
    except Exception:
        logger.exception("markdown_render failed")
        return _INTERNAL_ERROR


@mcp.tool()
def url_validate(url: str) -> str:
    """Check whether a URL may be rendered as a clickable link."""
    from chatmark.validation import validate_url

    validated = validate_url(url)
    return json.dumps({"valid": validated is not None, "url": validated})


@mcp.tool()
def identifier_validate(identifier: str) -> str:
    """Check whether a mention identifier is a well-formed version-4 UUID."""
    from chatmark.validation import is_valid_identifier

    return json.dumps({"valid": is_valid_identifier(identifier)})


@mcp.tool()
def mentions_count(messages: list[str], kind: str, mention_id: str) -> str:
    """Count mentions of one user or channel across messages.

    Args:
        messages: Message contents to scan.
        kind: "user" or "channel".
        mention_id: Identifier of the user or channel.
    """
    try:
        from chatmark.scan import count_mentions
        from chatmark.tokens import MentionKind

        try:
            mention_kind = MentionKind(kind)
        except ValueError:
            return json.dumps({"error": f"Unknown mention kind: {kind!r}. Use 'user' or 'channel'."})

        config = get_config()
        count = count_mentions(
            (config.clamp(m) for m in messages), mention_kind, mention_id
        )
        return json.dumps({"count": count, "messages": len(messages)})
    except Exception:
        logger.exception("mentions_count failed")
        return _INTERNAL_ERROR


@mcp.tool()
def editor_serialize(state: str) -> str:
    """Convert serialized editor state JSON into chat markdown.

    Args:
        state: The editor state as a JSON string.
    """
    from chatmark.document import DocumentDecodeError, document_from_lexical
    from chatmark.serializer import serialize

    try:
        markdown = serialize(document_from_lexical(state))
    except DocumentDecodeError as e:
        logger.warning("editor_serialize rejected state: %s", e)
        return json.dumps({"error": str(e)})
    except Exception:
        logger.exception("editor_serialize failed")
        return _INTERNAL_ERROR
    return json.dumps({"markdown": markdown})


def serve() -> None:
    """Start the MCP server using stdio transport."""
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting chatmark MCP server v%s", __version__)
    mcp.run(transport="stdio")
