"""Summary statistics over a normalized record."""

import logging
from collections import Counter
from typing import Any, Dict

from .records import InstagramRecord, NormalizedRecord, RedditRecord, collection_sizes

logger = logging.getLogger(__name__)


def summarize(record: NormalizedRecord) -> Dict[str, Any]:
    """
    Build a summary of a normalized record.

    Includes:
    - Item counts for every collection
    - Reddit: gender, subscribed subreddit count, vote totals, and
      comments plus posts per subreddit
    - Instagram: follower/following/mutual counts and messages per
      conversation partner

    Args:
        record: Finished record of any provider

    Returns:
        Dictionary ready for JSON serialization
    """
    summary: Dict[str, Any] = {'counts': collection_sizes(record)}

    if isinstance(record, RedditRecord):
        summary.update(_reddit_summary(record))
    elif isinstance(record, InstagramRecord):
        summary.update(_instagram_summary(record))

    return summary


def _reddit_summary(record: RedditRecord) -> Dict[str, Any]:
    contributions = record.contributions
    upvotes = sum(1 for vote in contributions.votes if vote.direction)
    activity = Counter(
        item.subreddit
        for item in contributions.comments + contributions.posts
        if item.subreddit
    )
    return {
        'gender': record.gender,
        'subreddits': record.subreddits,
        'votes': {
            'up': upvotes,
            'down': len(contributions.votes) - upvotes,
        },
        'activity_per_subreddit': dict(activity.most_common()),
    }


def _instagram_summary(record: InstagramRecord) -> Dict[str, Any]:
    followers = record.relationships.followers
    followings = set(record.relationships.followings)
    mutuals = [name for name in followers if name in followings]
    per_participant = Counter(message.participant for message in record.contributions.messages)
    return {
        'relationships': {
            'followers': len(followers),
            'followings': len(record.relationships.followings),
            'mutuals': len(mutuals),
        },
        'messages_per_participant': dict(per_participant.most_common()),
    }
