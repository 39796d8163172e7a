"""Token tree produced by the tokenizer, plus its JSON codec."""

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum


class MentionKind(Enum):
    """What a mention refers to."""

    USER = "user"
    CHANNEL = "channel"

    @property
    def trigger(self) -> str:
        """The character that introduces this kind of mention in markdown."""
        return "@" if self is MentionKind.USER else "#"

    @classmethod
    def from_trigger(cls, trigger: str) -> "MentionKind":
        return cls.USER if trigger == "@" else cls.CHANNEL


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class Bold:
    content: tuple["Token", ...]


@dataclass(frozen=True)
class Italic:
    content: tuple["Token", ...]


@dataclass(frozen=True)
class Spoiler:
    content: tuple["Token", ...]


@dataclass(frozen=True)
class Quote:
    content: tuple["Token", ...]


@dataclass(frozen=True)
class Link:
    """A navigable link. Only built from URLs that passed validation."""

    text: str
    url: str


@dataclass(frozen=True)
class Mention:
    """Reference to a user or channel.

    ``id`` is None when the message carried no identifier or an invalid one;
    such mentions render as a plain label.
    """

    name: str
    kind: MentionKind
    id: str | None = None


@dataclass(frozen=True)
class LineBreak:
    pass


Token = Text | Bold | Italic | Spoiler | Quote | Link | Mention | LineBreak

CONTAINER_TYPES = (Bold, Italic, Spoiler, Quote)

_CONTAINER_NAMES = {
    Bold: "bold",
    Italic: "italic",
    Spoiler: "spoiler",
    Quote: "quote",
}
_CONTAINERS_BY_NAME = {name: cls for cls, name in _CONTAINER_NAMES.items()}


class TokenDecodeError(ValueError):
    """Raised when a serialized token tree cannot be decoded."""


def walk(tokens: Iterable[Token]) -> Iterator[Token]:
    """Iterate depth-first over every token, yielding containers before their children."""
    for token in tokens:
        yield token
        if isinstance(token, CONTAINER_TYPES):
            yield from walk(token.content)


def plain_text(tokens: Iterable[Token]) -> str:
    """Flatten a token tree to the text a reader would see."""
    parts = []
    for token in tokens:
        if isinstance(token, Text):
            parts.append(token.content)
        elif isinstance(token, CONTAINER_TYPES):
            parts.append(plain_text(token.content))
        elif isinstance(token, Link):
            parts.append(token.text)
        elif isinstance(token, Mention):
            parts.append(f"{token.kind.trigger}{token.name}")
        elif isinstance(token, LineBreak):
            parts.append("\n")
    return "".join(parts)


def token_to_dict(token: Token) -> dict:
    """Convert a token to a JSON-compatible dict."""
    if isinstance(token, Text):
        return {"type": "text", "content": token.content}
    if isinstance(token, CONTAINER_TYPES):
        return {
            "type": _CONTAINER_NAMES[type(token)],
            "content": [token_to_dict(child) for child in token.content],
        }
    if isinstance(token, Link):
        return {"type": "link", "text": token.text, "url": token.url}
    if isinstance(token, Mention):
        data = {"type": "mention", "name": token.name, "mentionType": token.kind.value}
        if token.id is not None:
            data["mentionId"] = token.id
        return data
    if isinstance(token, LineBreak):
        return {"type": "lineBreak"}
    raise TypeError(f"Not a token: {token!r}")


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise TokenDecodeError(f"Token field {key!r} must be a string, got {value!r}")
    return value


def token_from_dict(data: dict) -> Token:
    """Rebuild a token from its dict form.

    URLs and mention ids are taken as given; a decoded tree is untrusted and
    must be re-validated by whoever renders it.

    Raises:
        TokenDecodeError: If the payload is not a well-formed token.
    """
    if not isinstance(data, dict):
        raise TokenDecodeError(f"Token must be an object, got {type(data).__name__}")
    kind = data.get("type")

    if kind == "text":
        return Text(content=_require_str(data, "content"))
    if kind in _CONTAINERS_BY_NAME:
        children = data.get("content")
        if not isinstance(children, list):
            raise TokenDecodeError(f"Token {kind!r} must have a list of children")
        return _CONTAINERS_BY_NAME[kind](
            content=tuple(token_from_dict(child) for child in children)
        )
    if kind == "link":
        return Link(text=_require_str(data, "text"), url=_require_str(data, "url"))
    if kind == "mention":
        try:
            mention_kind = MentionKind(data.get("mentionType"))
        except ValueError:
            raise TokenDecodeError(
                f"Unknown mention type: {data.get('mentionType')!r}"
            ) from None
        mention_id = data.get("mentionId")
        if mention_id is not None and not isinstance(mention_id, str):
            raise TokenDecodeError(f"Mention id must be a string, got {mention_id!r}")
        return Mention(name=_require_str(data, "name"), kind=mention_kind, id=mention_id)
    if kind == "lineBreak":
        return LineBreak()
    raise TokenDecodeError(f"Unknown token type: {kind!r}")


def tokens_to_json(tokens: Iterable[Token], indent: int | None = None) -> str:
    return json.dumps([token_to_dict(t) for t in tokens], indent=indent)


def tokens_from_json(text: str) -> list[Token]:
    """Decode a JSON array of tokens.

    Raises:
        TokenDecodeError: If the text is not valid JSON or not a token list.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TokenDecodeError(f"Invalid token JSON: {e}") from e
    if not isinstance(data, list):
        raise TokenDecodeError("Token JSON must be an array")
    return [token_from_dict(item) for item in data]
