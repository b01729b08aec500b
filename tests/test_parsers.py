import pytest

from app.modules.posts.parsers import (
    MENTION, TEXT, TOPIC, WHITESPACE,
    extract_mentions, extract_topics, is_mention, is_topic, is_uuid, split_content, tokenize,
)

USER_ID = "3f2b8c1e-9a4d-4e6f-8b2a-1c3d5e7f9a0b"


@pytest.mark.parametrize("content", [
    "hello @alice check #news",
    "  leading and trailing  ",
    "hi@bob, #a#b\n\tline two @carol.",
    f"thanks @{USER_ID}!",
])
def test_split_is_lossless(content):
    assert "".join(split_content(content)) == content


def test_split_empty_content():
    assert split_content("") == []


def test_split_keeps_whitespace_runs():
    assert split_content("a  b") == ["a", "  ", "b"]


def test_split_separates_embedded_tokens():
    assert split_content("hi@bob,") == ["hi", "@bob", ","]


def test_uuid_mention_is_one_token():
    parts = split_content(f"@{USER_ID} hey")
    assert parts[0] == f"@{USER_ID}"


def test_tokenize_kinds():
    kinds = [token.kind for token in tokenize("hello @alice #news")]
    assert kinds == [TEXT, WHITESPACE, MENTION, WHITESPACE, TOPIC]


def test_token_value_strips_sigil():
    tokens = tokenize("@alice #news")
    assert tokens[0].value == "alice"
    assert tokens[2].value == "news"


def test_predicates():
    assert is_mention("@alice.b_2")
    assert not is_mention("@")
    assert not is_mention("alice")
    assert is_topic("#news")
    assert not is_topic("#")


def test_extract_mentions_unique_in_order():
    assert extract_mentions("@bob @alice @bob") == ["bob", "alice"]


def test_extract_topics_unique_in_order():
    assert extract_topics("#b #a #b text") == ["b", "a"]


def test_topics_are_case_sensitive():
    assert extract_topics("#News #news") == ["News", "news"]


def test_is_uuid():
    assert is_uuid(USER_ID)
    assert is_uuid(USER_ID.upper())
    assert not is_uuid("alice")
