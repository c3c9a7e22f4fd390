"""Extraction rules for Reddit data exports (delimited text)."""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..config import RedditFiles
from ..records import IpLog, RedditMessage, RedditRecord, SubredditActivity, Vote
from ..values import JsonValue, as_list, get_value, populate_array
from .base import Rule, RuleSet, build_rule_set

logger = logging.getLogger(__name__)

PROVIDER = "reddit"

SUBREDDIT_MARKER = "/r/"
NO_VOTE = "none"
UPVOTE = "up"


def _rows(data: JsonValue, *fields: str) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    populate_array(rows, as_list(data) or [], fields)
    return rows


def _with_contributions(record: RedditRecord, **changes: Any) -> RedditRecord:
    return replace(record, contributions=replace(record.contributions, **changes))


def subreddit_from_permalink(permalink: str) -> Optional[str]:
    """
    Return the text between the first ``/r/`` and the next ``/`` after it.

    A permalink ending right after the subreddit name yields the rest of the
    string; one without ``/r/`` yields None.

    >>> subreddit_from_permalink("https://www.reddit.com/r/learnprogramming/comments/xyz")
    'learnprogramming'
    """
    # Intentionally not a raw substring: no /r/ means no vote, no closing / means rest of string
    marker = permalink.find(SUBREDDIT_MARKER)
    if marker == -1:
        return None
    start = marker + len(SUBREDDIT_MARKER)
    end = permalink.find('/', start)
    return permalink[start:] if end == -1 else permalink[start:end]


def extract_gender(record: RedditRecord, data: JsonValue) -> RedditRecord:
    rows = as_list(data)
    gender = get_value(rows[0], 'account_gender') if rows else None
    if gender is None:
        return record
    return replace(record, gender=gender)


def extract_ip_logs(record: RedditRecord, data: JsonValue) -> RedditRecord:
    logs = tuple(IpLog(date=row['date'], ip=row['ip']) for row in _rows(data, 'date', 'ip'))
    return replace(record, ip_logs=record.ip_logs + logs)


def extract_comments(record: RedditRecord, data: JsonValue) -> RedditRecord:
    comments = tuple(SubredditActivity(**row) for row in _rows(data, 'date', 'subreddit'))
    return _with_contributions(record, comments=record.contributions.comments + comments)


def extract_posts(record: RedditRecord, data: JsonValue) -> RedditRecord:
    posts = tuple(SubredditActivity(**row) for row in _rows(data, 'date', 'subreddit'))
    return _with_contributions(record, posts=record.contributions.posts + posts)


def extract_messages(record: RedditRecord, data: JsonValue) -> RedditRecord:
    messages = tuple(
        RedditMessage(date=row['date'], sender=row['from'])
        for row in _rows(data, 'date', 'from')
    )
    return _with_contributions(record, messages=record.contributions.messages + messages)


def extract_votes(record: RedditRecord, data: JsonValue) -> RedditRecord:
    """Record subreddit and direction of every vote that was not withdrawn."""
    votes = []
    for row in _rows(data, 'permalink', 'direction'):
        permalink, direction = row['permalink'], row['direction']
        if permalink is None or direction is None or direction == NO_VOTE:
            continue
        subreddit = subreddit_from_permalink(permalink)
        if subreddit is None:
            logger.debug(f"No subreddit in permalink: {permalink}")
            continue
        votes.append(Vote(subreddit=subreddit, direction=direction == UPVOTE))
    return _with_contributions(record, votes=record.contributions.votes + tuple(votes))


def extract_subreddit_count(record: RedditRecord, data: JsonValue) -> RedditRecord:
    return replace(record, subreddits=len(as_list(data) or []))


def build_reddit_rules(files: RedditFiles) -> RuleSet[RedditRecord]:
    """Build the Reddit rule set for the given filename table."""
    return build_rule_set(
        PROVIDER,
        hierarchical=False,
        new_record=RedditRecord,
        rules=[
            Rule(files.gender, extract_gender),
            Rule(files.ip_logs, extract_ip_logs),
            Rule(files.comments, extract_comments),
            Rule(files.posts, extract_posts),
            Rule(files.votes, extract_votes),
            Rule(files.messages, extract_messages),
            Rule(files.subreddits, extract_subreddit_count),
        ],
    )
