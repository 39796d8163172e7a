"""Tests for editor state conversion."""

import json

import pytest

from chatmark.document import (
    Document,
    DocumentDecodeError,
    LinkRun,
    MentionRun,
    Paragraph,
    TextRun,
    document_from_lexical,
)
from chatmark.serializer import serialize
from chatmark.tokens import MentionKind

ALICE = "550e8400-e29b-41d4-a716-446655440000"


def state(*blocks: dict) -> dict:
    return {"root": {"type": "root", "children": list(blocks)}}


def paragraph(*children: dict, type: str = "paragraph") -> dict:
    return {"type": type, "children": list(children)}


def text(value: str, fmt: int = 0) -> dict:
    return {"type": "text", "text": value, "format": fmt}


class TestDocumentFromLexical:
    def test_text_formats(self):
        result = document_from_lexical(state(paragraph(
            text("plain"), text("bold", 1), text("italic", 2), text("both", 3),
        )))
        assert result == Document(paragraphs=(Paragraph(runs=(
            TextRun("plain"),
            TextRun("bold", bold=True),
            TextRun("italic", italic=True),
            TextRun("both", bold=True, italic=True),
        )),))

    def test_mention_node(self):
        result = document_from_lexical(state(paragraph({
            "type": "mention",
            "text": "@alice",
            "mentionName": "alice",
            "mentionType": "user",
            "mentionId": ALICE,
        })))
        assert result.paragraphs[0].runs == (
            MentionRun(name="alice", kind=MentionKind.USER, id=ALICE),
        )

    def test_mention_with_empty_id(self):
        result = document_from_lexical(state(paragraph({
            "type": "mention", "mentionName": "general", "mentionType": "channel", "mentionId": "",
        })))
        assert result.paragraphs[0].runs == (
            MentionRun(name="general", kind=MentionKind.CHANNEL, id=None),
        )

    def test_link_node(self):
        result = document_from_lexical(state(paragraph({
            "type": "link",
            "url": "https://example.com",
            "children": [text("exam"), text("ple", 1)],
        })))
        assert result.paragraphs[0].runs == (LinkRun(text="example", url="https://example.com"),)

    def test_quote_block(self):
        result = document_from_lexical(state(paragraph(text("q"), type="quote")))
        assert result.paragraphs == (Paragraph(runs=(TextRun("q"),), quote=True),)

    def test_linebreak_splits_paragraph(self):
        result = document_from_lexical(state(paragraph(
            text("a"), {"type": "linebreak"}, text("b"),
        )))
        assert result.paragraphs == (
            Paragraph(runs=(TextRun("a"),)),
            Paragraph(runs=(TextRun("b"),)),
        )

    def test_list_flattens_to_paragraphs(self):
        result = document_from_lexical(state({
            "type": "list",
            "children": [
                {"type": "listitem", "children": [paragraph(text("one"))]},
                {"type": "listitem", "children": [paragraph(text("two"))]},
            ],
        }))
        assert [p.runs for p in result.paragraphs] == [(TextRun("one"),), (TextRun("two"),)]

    def test_unknown_inline_with_text(self):
        result = document_from_lexical(state(paragraph({"type": "hashtag", "text": "#tag"})))
        assert result.paragraphs[0].runs == (TextRun("#tag"),)

    def test_unknown_nodes_skipped(self):
        result = document_from_lexical(state(
            paragraph({"type": "image", "src": "x.png"}, text("ok")),
            {"type": "horizontalrule"},
        ))
        assert result.paragraphs == (Paragraph(runs=(TextRun("ok"),)),)

    def test_accepts_json_string(self):
        raw = json.dumps(state(paragraph(text("hi"))))
        assert document_from_lexical(raw).paragraphs[0].runs == (TextRun("hi"),)

    def test_empty_root(self):
        assert document_from_lexical(state()) == Document()


class TestDocumentDecodeErrors:
    def test_invalid_json(self):
        with pytest.raises(DocumentDecodeError, match="Invalid editor state JSON"):
            document_from_lexical("{nope")

    def test_missing_root(self):
        with pytest.raises(DocumentDecodeError, match="root"):
            document_from_lexical({"editorState": {}})

    def test_not_an_object(self):
        with pytest.raises(DocumentDecodeError):
            document_from_lexical("[1, 2]")

    def test_text_without_string(self):
        with pytest.raises(DocumentDecodeError):
            document_from_lexical(state(paragraph({"type": "text", "text": 3})))

    def test_link_without_url(self):
        with pytest.raises(DocumentDecodeError):
            document_from_lexical(state(paragraph({"type": "link", "children": []})))

    def test_bad_mention_type(self):
        with pytest.raises(DocumentDecodeError, match="mention type"):
            document_from_lexical(state(paragraph({
                "type": "mention", "mentionName": "x", "mentionType": "role",
            })))

    def test_children_must_be_list(self):
        with pytest.raises(DocumentDecodeError):
            document_from_lexical({"root": {"children": "x"}})


class TestEditorToMarkdown:
    def test_full_message(self):
        result = serialize(document_from_lexical(state(
            paragraph(
                text("Hey "),
                {"type": "mention", "mentionName": "alice", "mentionType": "user",
                 "mentionId": ALICE},
                text(", read "),
                {"type": "link", "url": "https://example.com",
                 "children": [text("this")]},
            ),
            paragraph(text("important", 1), type="quote"),
        )))
        assert result == (
            f"Hey @alice[{ALICE}], read [this](https://example.com)\n> **important**"
        )
