"""Normalized records produced by one extraction run.

Records are frozen: rules build a new record with ``dataclasses.replace``
instead of mutating the one they were given.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class IpLog:
    date: Optional[str]
    ip: Optional[str]


@dataclass(frozen=True)
class SubredditActivity:
    """A comment or post, reduced to when and where."""
    date: Optional[str]
    subreddit: Optional[str]


@dataclass(frozen=True)
class Vote:
    subreddit: str
    direction: bool  # True for an upvote


@dataclass(frozen=True)
class RedditMessage:
    date: Optional[str]
    sender: Optional[str]


@dataclass(frozen=True)
class RedditContributions:
    comments: Tuple[SubredditActivity, ...] = ()
    votes: Tuple[Vote, ...] = ()
    posts: Tuple[SubredditActivity, ...] = ()
    messages: Tuple[RedditMessage, ...] = ()


@dataclass(frozen=True)
class RedditRecord:
    """Facts extracted from a Reddit data export."""
    gender: str = ""
    ip_logs: Tuple[IpLog, ...] = ()
    contributions: RedditContributions = field(default_factory=RedditContributions)
    subreddits: int = 0


@dataclass(frozen=True)
class InstagramMessage:
    participant: str
    date: datetime


@dataclass(frozen=True)
class InstagramContributions:
    comments: Tuple[datetime, ...] = ()
    messages: Tuple[InstagramMessage, ...] = ()
    posts: Tuple[datetime, ...] = ()
    likes: Tuple[datetime, ...] = ()
    stories: Tuple[datetime, ...] = ()


@dataclass(frozen=True)
class Relationships:
    followers: Tuple[str, ...] = ()
    followings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Interests:
    ads: Tuple[str, ...] = ()
    topics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InstagramRecord:
    """Facts extracted from an Instagram data export."""
    contributions: InstagramContributions = field(default_factory=InstagramContributions)
    relationships: Relationships = field(default_factory=Relationships)
    interests: Interests = field(default_factory=Interests)


NormalizedRecord = Union[RedditRecord, InstagramRecord]


def record_to_dict(record: Any) -> Any:
    """Convert a record into JSON-ready builtins (datetimes as ISO-8601 strings)."""
    if is_dataclass(record):
        return {f.name: record_to_dict(getattr(record, f.name)) for f in fields(record)}
    if isinstance(record, (tuple, list)):
        return [record_to_dict(item) for item in record]
    if isinstance(record, datetime):
        return record.isoformat()
    return record


def collection_sizes(record: NormalizedRecord) -> Dict[str, int]:
    """Count the items of every tuple field, keyed by dotted field path."""
    sizes: Dict[str, int] = {}

    def visit(node: Any, prefix: str) -> None:
        for f in fields(node):
            value = getattr(node, f.name)
            path = f"{prefix}{f.name}"
            if is_dataclass(value):
                visit(value, f"{path}.")
            elif isinstance(value, tuple):
                sizes[path] = len(value)

    visit(record, "")
    return sizes
