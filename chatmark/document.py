"""Rich-text document model read by the serializer.

The editor owns documents; this module only describes them and converts the
editor's serialized JSON state into them.
"""

import json
import logging
from dataclasses import dataclass, field

from chatmark.tokens import MentionKind

logger = logging.getLogger(__name__)

# Text format bit flags used by the editor state
FORMAT_BOLD = 1
FORMAT_ITALIC = 2


@dataclass(frozen=True)
class TextRun:
    text: str
    bold: bool = False
    italic: bool = False
    spoiler: bool = False


@dataclass(frozen=True)
class LinkRun:
    text: str
    url: str


@dataclass(frozen=True)
class MentionRun:
    name: str
    kind: MentionKind
    id: str | None = None


Run = TextRun | LinkRun | MentionRun


@dataclass(frozen=True)
class Paragraph:
    runs: tuple[Run, ...] = ()
    quote: bool = False


@dataclass(frozen=True)
class Document:
    paragraphs: tuple[Paragraph, ...] = field(default_factory=tuple)


class DocumentDecodeError(ValueError):
    """Raised when editor state cannot be converted into a Document."""


def _children(node: dict) -> list:
    children = node.get("children", [])
    if not isinstance(children, list):
        raise DocumentDecodeError(f"Node {node.get('type')!r} has non-list children")
    return children


def _inline_text(node: dict) -> str:
    """Concatenated text of an inline node and its descendants."""
    if isinstance(node.get("text"), str):
        return node["text"]
    return "".join(_inline_text(child) for child in _children(node) if isinstance(child, dict))


def _text_run(node: dict) -> TextRun:
    text = node.get("text")
    if not isinstance(text, str):
        raise DocumentDecodeError("Text node without a string 'text' field")
    fmt = node.get("format", 0)
    if not isinstance(fmt, int):
        fmt = 0
    return TextRun(text=text, bold=bool(fmt & FORMAT_BOLD), italic=bool(fmt & FORMAT_ITALIC))


def _mention_run(node: dict) -> MentionRun:
    name = node.get("mentionName")
    if not isinstance(name, str):
        raise DocumentDecodeError("Mention node without a 'mentionName'")
    try:
        kind = MentionKind(node.get("mentionType", "user"))
    except ValueError:
        raise DocumentDecodeError(
            f"Unknown mention type: {node.get('mentionType')!r}"
        ) from None
    mention_id = node.get("mentionId") or None
    if mention_id is not None and not isinstance(mention_id, str):
        raise DocumentDecodeError(f"Mention id must be a string, got {mention_id!r}")
    return MentionRun(name=name, kind=kind, id=mention_id)


def _paragraphs_from_block(block: dict) -> list[Paragraph]:
    """Convert one block node; line breaks split it into several paragraphs."""
    quote = block.get("type") == "quote"
    paragraphs: list[Paragraph] = []
    runs: list[Run] = []

    for node in _children(block):
        if not isinstance(node, dict):
            raise DocumentDecodeError(f"Inline node must be an object, got {node!r}")
        node_type = node.get("type")
        if node_type == "linebreak":
            paragraphs.append(Paragraph(runs=tuple(runs), quote=quote))
            runs = []
        elif node_type == "text":
            runs.append(_text_run(node))
        elif node_type in ("link", "autolink"):
            url = node.get("url")
            if not isinstance(url, str):
                raise DocumentDecodeError("Link node without a string 'url'")
            runs.append(LinkRun(text=_inline_text(node), url=url))
        elif node_type == "mention":
            runs.append(_mention_run(node))
        elif isinstance(node.get("text"), str):
            runs.append(TextRun(text=node["text"]))
        else:
            logger.debug("Skipping unsupported inline node %r", node_type)

    paragraphs.append(Paragraph(runs=tuple(runs), quote=quote))
    return paragraphs


def _collect_blocks(node: dict) -> list[Paragraph]:
    node_type = node.get("type")
    if node_type in ("paragraph", "quote"):
        return _paragraphs_from_block(node)
    if "children" in node:
        # Containers such as lists flatten into their child blocks
        paragraphs = []
        for child in _children(node):
            if isinstance(child, dict):
                paragraphs.extend(_collect_blocks(child))
        return paragraphs
    logger.debug("Skipping unsupported block node %r", node_type)
    return []


def document_from_lexical(state: dict | str) -> Document:
    """Build a Document from the editor's serialized state.

    Args:
        state: The state as a dict or JSON string, with a ``root`` node.

    Raises:
        DocumentDecodeError: If the state is not valid editor JSON.
    """
    if isinstance(state, str):
        try:
            state = json.loads(state)
        except json.JSONDecodeError as e:
            raise DocumentDecodeError(f"Invalid editor state JSON: {e}") from e
    if not isinstance(state, dict):
        raise DocumentDecodeError("Editor state must be an object")
    root = state.get("root")
    if not isinstance(root, dict):
        raise DocumentDecodeError("Editor state has no 'root' node")

    paragraphs = []
    for block in _children(root):
        if not isinstance(block, dict):
            raise DocumentDecodeError(f"Block node must be an object, got {block!r}")
        paragraphs.extend(_collect_blocks(block))
    return Document(paragraphs=tuple(paragraphs))
