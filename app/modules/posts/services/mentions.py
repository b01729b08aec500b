"""
Mention and topic resolution.

Write path: ``@username`` tokens are stored as ``@<profile-id>`` and the ids
collected on the post; ``#topic`` tokens are upserted and stored by id.
Read path: ids are mapped back to usernames for display.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.modules.posts.parsers import MENTION, TOPIC, tokenize
from app.modules.posts.schemas.post import ContentSegment
from app.modules.topics.services.topic import upsert_topics
from app.modules.user_management.services.user import get_users_by_ids, get_users_by_usernames

logger = logging.getLogger(__name__)


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def resolve_mentions(db: Session, content: str) -> Tuple[str, List[str]]:
    """Swap every resolvable @username for @<id>.

    Replacement works on the token spans produced by the tokenizer, so a
    username that is a substring of another token is never touched. Unknown
    usernames stay as literal text.
    """
    tokens = tokenize(content)
    usernames = _unique(token.value for token in tokens if token.kind == MENTION)
    if not usernames:
        return content, []

    by_username = {profile.username: profile.id for profile in get_users_by_usernames(db, usernames)}
    if len(by_username) < len(usernames):
        logger.debug(f"Unresolved mentions left as text: {set(usernames) - set(by_username)}")

    parts = []
    mention_ids = []
    for token in tokens:
        user_id = by_username.get(token.value) if token.kind == MENTION else None
        if user_id is None:
            parts.append(token.text)
            continue
        parts.append(f"@{user_id}")
        mention_ids.append(user_id)
    return "".join(parts), _unique(mention_ids)


def resolve_topics(db: Session, content: str) -> List[str]:
    """Ids of the topics named in content, creating topics seen for the first time"""
    names = _unique(token.value for token in tokenize(content) if token.kind == TOPIC)
    return [topic.id for topic in upsert_topics(db, names)]


def build_username_map(db: Session, posts: Iterable) -> Dict[str, str]:
    """id -> username for every user mentioned across a batch of posts, in one query"""
    mention_ids = {user_id for post in posts for user_id in (post.mentions or []) if user_id}
    return {profile.id: profile.username for profile in get_users_by_ids(db, mention_ids)}


def render_content(
    content: str,
    mention_ids: Optional[List[str]],
    username_map: Dict[str, str],
) -> Tuple[str, List[ContentSegment]]:
    """Display text and link segments for a stored post body.

    Only ids listed on the post itself are treated as mentions; an id that no
    longer resolves (deleted user) and any unresolved @username render as
    plain text.
    """
    allowed = set(mention_ids or [])
    display = []
    segments: List[ContentSegment] = []

    def add_text(text: str):
        display.append(text)
        if segments and segments[-1].type == "text":
            segments[-1].text += text
        else:
            segments.append(ContentSegment(type="text", text=text))

    for token in tokenize(content):
        if token.kind == MENTION and token.value in allowed and token.value in username_map:
            label = f"@{username_map[token.value]}"
            display.append(label)
            segments.append(ContentSegment(
                type="mention", text=label, user_id=token.value, href=f"/users/{token.value}"
            ))
        elif token.kind == TOPIC:
            display.append(token.text)
            segments.append(ContentSegment(
                type="topic", text=token.text, topic=token.value, href=f"/topics/{token.value}"
            ))
        else:
            add_text(token.text)
    return "".join(display), segments
