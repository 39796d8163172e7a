"""Tests for mention name normalization and mention scanning."""

from chatmark.mentions import MAX_MENTION_NAME_LENGTH, normalize_mention_name
from chatmark.scan import count_mentions, find_mentions, iter_mentions, mentions_participant
from chatmark.tokenizer import tokenize
from chatmark.tokens import Mention, MentionKind

ALICE = "550e8400-e29b-41d4-a716-446655440000"
BOB = "650e8400-e29b-41d4-a716-446655440001"
GENERAL = "00000000-0000-4000-8000-000000000000"


class TestNormalizeMentionName:
    def test_short_name_unchanged(self):
        assert normalize_mention_name("alice") == "alice"
        assert normalize_mention_name("some_user-42") == "some_user-42"

    def test_truncates_to_limit(self):
        assert MAX_MENTION_NAME_LENGTH == 50
        assert normalize_mention_name("x" * 100) == "x" * 50

    def test_exact_limit(self):
        assert normalize_mention_name("y" * 50) == "y" * 50

    def test_invalid_characters(self):
        assert normalize_mention_name("user name") == ""
        assert normalize_mention_name("<script>") == ""
        assert normalize_mention_name("ünïcode") == ""

    def test_empty_and_non_string(self):
        assert normalize_mention_name("") == ""
        assert normalize_mention_name(None) == ""


class TestIterMentions:
    def test_finds_nested_mentions(self):
        tokens = tokenize(f"@alice[{ALICE}] **hi @bob[{BOB}]**\n> ||#general[{GENERAL}]||")
        names = [m.name for m in iter_mentions(tokens)]
        assert names == ["alice", "bob", "general"]


class TestFindMentions:
    def test_filter_by_kind(self):
        tokens = tokenize(f"@alice[{ALICE}] #general[{GENERAL}] @bob")
        users = find_mentions(tokens, MentionKind.USER)
        assert [m.name for m in users] == ["alice", "bob"]

    def test_filter_by_id(self):
        tokens = tokenize(f"@alice[{ALICE}] @bob[{BOB}] @alice")
        found = find_mentions(tokens, MentionKind.USER, ALICE)
        assert found == [Mention(name="alice", kind=MentionKind.USER, id=ALICE)]

    def test_kind_must_match(self):
        tokens = tokenize(f"#alice[{ALICE}]")
        assert find_mentions(tokens, MentionKind.USER, ALICE) == []


class TestCountMentions:
    def test_counts_across_messages(self):
        messages = [
            f"hey @alice[{ALICE}]",
            f"**@alice[{ALICE}]** and @bob[{BOB}]",
            "no mentions here",
            f"> @alice[{ALICE}] @alice[{ALICE}]",
            "",
        ]
        assert count_mentions(messages, MentionKind.USER, ALICE) == 4
        assert count_mentions(messages, MentionKind.USER, BOB) == 1

    def test_ignores_invalid_ids(self):
        messages = ["@alice[not-a-uuid]", "@alice"]
        assert count_mentions(messages, MentionKind.USER, "not-a-uuid") == 0

    def test_accepts_generator(self):
        messages = (f"#general[{GENERAL}]" for _ in range(3))
        assert count_mentions(messages, MentionKind.CHANNEL, GENERAL) == 3


class TestMentionsParticipant:
    def test_true_when_mentioned(self):
        assert mentions_participant(f"hi ||@bob[{BOB}]||", MentionKind.USER, BOB)

    def test_false_otherwise(self):
        assert not mentions_participant("hi @bob", MentionKind.USER, BOB)
        assert not mentions_participant(f"#bob[{BOB}]", MentionKind.USER, BOB)
