"""
Tokenizer for post content.

Splits raw text into whitespace runs, mention tokens (``@username`` or
``@<profile-uuid>``), topic tokens (``#topic``) and plain text. Splitting is
lossless: joining the parts gives back the original string.
"""
import re
from dataclasses import dataclass
from typing import List

UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
USERNAME_PATTERN = r"[a-zA-Z0-9._]+"

# UUID alternative first so an id is never cut at its first hyphen
MENTION_REGEX = re.compile(rf"@(?:{UUID_PATTERN}|{USERNAME_PATTERN})")
TOPIC_REGEX = re.compile(r"#\w+")

_WHITESPACE_SPLIT = re.compile(r"(\s+)")
_TOKEN_SPLIT = re.compile(rf"(@{UUID_PATTERN}|@{USERNAME_PATTERN}|#\w+)")
_UUID_REGEX = re.compile(rf"^{UUID_PATTERN}$")

WHITESPACE = "whitespace"
MENTION = "mention"
TOPIC = "topic"
TEXT = "text"


@dataclass(frozen=True)
class Token:
    kind: str
    text: str

    @property
    def value(self) -> str:
        """Token body without its sigil for mentions and topics"""
        if self.kind in (MENTION, TOPIC):
            return self.text[1:]
        return self.text


def is_mention(part: str) -> bool:
    return MENTION_REGEX.fullmatch(part) is not None


def is_topic(part: str) -> bool:
    return TOPIC_REGEX.fullmatch(part) is not None


def is_uuid(value: str) -> bool:
    return _UUID_REGEX.match(value) is not None


def split_content(content: str) -> List[str]:
    """Split content into parts for rendering.

    Whitespace runs are kept as their own parts. A chunk that is entirely a
    mention or topic stays whole; any other chunk is sub-split around the
    mentions and topics embedded in it (``"hi@bob,"`` -> ``["hi", "@bob", ","]``).
    """
    if not content:
        return []

    parts: List[str] = []
    for chunk in _WHITESPACE_SPLIT.split(content):
        if not chunk:
            continue
        if chunk.isspace() or is_mention(chunk) or is_topic(chunk):
            parts.append(chunk)
            continue
        parts.extend(piece for piece in _TOKEN_SPLIT.split(chunk) if piece)
    return parts


def _classify(part: str) -> str:
    if part.isspace():
        return WHITESPACE
    if is_mention(part):
        return MENTION
    if is_topic(part):
        return TOPIC
    return TEXT


def tokenize(content: str) -> List[Token]:
    return [Token(_classify(part), part) for part in split_content(content)]


def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def extract_mentions(content: str) -> List[str]:
    """Mentioned usernames (or ids), without the @, in first-seen order"""
    return _unique([token.value for token in tokenize(content) if token.kind == MENTION])


def extract_topics(content: str) -> List[str]:
    """Topic names, without the #, in first-seen order"""
    return _unique([token.value for token in tokenize(content) if token.kind == TOPIC])
