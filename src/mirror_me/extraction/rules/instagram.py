"""Extraction rules for Instagram data exports (JSON)."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple

from ..config import InstagramFiles
from ..records import InstagramMessage, InstagramRecord
from ..values import (
    JsonValue,
    as_list,
    decode_string,
    epoch_millis_to_datetime,
    epoch_seconds_to_datetime,
    first,
    get_value,
    get_value_from_object_array,
)
from .base import Rule, RuleSet, build_rule_set

logger = logging.getLogger(__name__)

PROVIDER = "instagram"

# Threads with more participants than this are group chats and are skipped
MAX_CONVERSATION_PARTICIPANTS = 2

STRING_LIST_DATA = "string_list_data"
STRING_MAP_DATA = "string_map_data"


def _present(values: Iterable[Optional[Any]]) -> Tuple[Any, ...]:
    return tuple(value for value in values if value is not None)


def _list_timestamps(data: JsonValue, wrapper_key: str) -> Tuple[datetime, ...]:
    """Timestamps of the first string_list_data item of every wrapped record."""
    items = get_value_from_object_array(data, wrapper_key, [STRING_LIST_DATA])
    return _present(epoch_seconds_to_datetime(get_value(first(item), 'timestamp')) for item in items)


def _list_values(data: JsonValue, wrapper_key: str) -> Tuple[str, ...]:
    """Values of the first string_list_data item of every wrapped record."""
    items = get_value_from_object_array(data, wrapper_key, [STRING_LIST_DATA])
    return _present(get_value(first(item), 'value') for item in items)


def _map_values(data: JsonValue, wrapper_key: str, label: str) -> Tuple[str, ...]:
    """Leaf values reached through string_map_data -> label -> value."""
    items = get_value_from_object_array(data, wrapper_key, [STRING_MAP_DATA])
    return _present(get_value(get_value(item, label), 'value') for item in items)


def _with_contributions(record: InstagramRecord, **changes: Any) -> InstagramRecord:
    return replace(record, contributions=replace(record.contributions, **changes))


def extract_comments(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    return _with_contributions(record, comments=_list_timestamps(data, 'comments_media_comments'))


def extract_likes(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    return _with_contributions(record, likes=_list_timestamps(data, 'likes_media_likes'))


def extract_posts(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    posts = _present(
        epoch_seconds_to_datetime(get_value(first(get_value(post, 'media')), 'creation_timestamp'))
        for post in as_list(data) or []
    )
    return _with_contributions(record, posts=posts)


def extract_stories(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    timestamps = get_value_from_object_array(data, 'ig_stories', ['creation_timestamp'])
    stories = _present(epoch_seconds_to_datetime(ts) for ts in timestamps)
    return _with_contributions(record, stories=stories)


def extract_messages(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    """
    Append the messages of a one-to-one conversation.

    The first listed participant is the other party of the thread. Only
    messages not sent by that participant are kept, each tagged with the
    participant's name so counts can be grouped per conversation partner.
    Group threads are skipped.
    """
    participants = as_list(get_value(data, 'participants'))
    if not participants or len(participants) > MAX_CONVERSATION_PARTICIPANTS:
        logger.debug("Skipping group or empty conversation")
        return record

    name = get_value(participants[0], 'name')
    if not isinstance(name, str):
        return record
    participant = decode_string(name)

    messages: List[InstagramMessage] = []
    for message in as_list(get_value(data, 'messages')) or []:
        sender = get_value(message, 'sender_name')
        if isinstance(sender, str) and decode_string(sender) == participant:
            continue
        date = epoch_millis_to_datetime(get_value(message, 'timestamp_ms'))
        if date is None:
            continue
        messages.append(InstagramMessage(participant=participant, date=date))

    return _with_contributions(record, messages=record.contributions.messages + tuple(messages))


def extract_followers(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    followers = _list_values(data, 'relationships_followers')
    return replace(record, relationships=replace(record.relationships, followers=followers))


def extract_followings(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    followings = _list_values(data, 'relationships_following')
    return replace(record, relationships=replace(record.relationships, followings=followings))


def extract_ads_interests(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    ads = _map_values(data, 'inferred_data_ig_interest', 'Interest')
    return replace(record, interests=replace(record.interests, ads=ads))


def extract_topics(record: InstagramRecord, data: JsonValue) -> InstagramRecord:
    topics = _map_values(data, 'topics_your_topics', 'Name')
    return replace(record, interests=replace(record.interests, topics=topics))


def build_instagram_rules(files: InstagramFiles) -> RuleSet[InstagramRecord]:
    """Build the Instagram rule set for the given filename table."""
    return build_rule_set(
        PROVIDER,
        hierarchical=True,
        new_record=InstagramRecord,
        rules=[
            Rule(files.comments, extract_comments),
            Rule(files.messages, extract_messages),
            Rule(files.posts, extract_posts),
            Rule(files.likes, extract_likes),
            Rule(files.followers, extract_followers),
            Rule(files.followings, extract_followings),
            Rule(files.ads_interests, extract_ads_interests),
            Rule(files.your_topics, extract_topics),
            Rule(files.stories, extract_stories),
        ],
    )
