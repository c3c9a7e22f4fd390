"""Shared fixtures: in-memory export archives."""

import io
import json
import zipfile

import pytest


def build_archive(entries):
    """Build zip bytes from {path: text | bytes | json-able object}; paths ending in '/' are directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for path, content in entries.items():
            if path.endswith('/'):
                zf.writestr(path, b"")
            elif isinstance(content, (str, bytes)):
                zf.writestr(path, content)
            else:
                zf.writestr(path, json.dumps(content))
    return buffer.getvalue()


@pytest.fixture
def make_archive():
    """Factory fixture returning zip bytes for a dict of entries."""
    return build_archive


REDDIT_ENTRIES = {
    "export/": b"",
    "export/account_gender.csv": "account_gender\nmale\n",
    "export/ip_logs.csv": "date,ip\n2021-01-01 10:00:00 UTC,10.0.0.1\n2021-01-02 11:00:00 UTC,10.0.0.2\n",
    "export/comments.csv": (
        "id,permalink,date,ip,subreddit,gildings,link,body\n"
        "c1,/r/python/comments/a/,2021-02-01 09:00:00 UTC,10.0.0.1,python,0,https://x,hello\n"
        "c2,/r/rust/comments/b/,2021-02-02 09:00:00 UTC,10.0.0.1,rust,0,https://y,\"multi\nline\"\n"
    ),
    "export/posts.csv": (
        "id,permalink,date,ip,subreddit,gildings,title\n"
        "p1,/r/python/comments/c/,2021-03-01 12:00:00 UTC,10.0.0.1,python,0,First\n"
    ),
    "export/post_votes.csv": (
        "id,permalink,direction\n"
        "v1,https://www.reddit.com/r/learnprogramming/comments/xyz/,up\n"
        "v2,https://www.reddit.com/r/python/comments/abc/,down\n"
        "v3,https://www.reddit.com/r/rust/comments/def/,none\n"
    ),
    "export/messages.csv": (
        "id,permalink,thread_id,date,ip,from,to,subject,body\n"
        "m1,/message/m1,t1,2021-04-01 08:00:00 UTC,10.0.0.1,alice,bob,Hi,Hello\n"
    ),
    "export/subscribed_subreddits.csv": "subreddit\npython\nrust\nlearnprogramming\n",
    "export/readme.txt": "not parsed",
    "export/statistics.csv": "statistic,value\nkarma,10\n",
}


INSTAGRAM_ENTRIES = {
    "comments/post_comments.json": {
        "comments_media_comments": [
            {"title": "", "string_list_data": [{"value": "nice", "timestamp": 1700000000}]},
            {"title": "", "string_list_data": [{"value": "cool", "timestamp": 1700000100}]},
        ]
    },
    "messages/inbox/alice_1/message_1.json": {
        "participants": [{"name": "ZoÃ«"}, {"name": "me"}],
        "messages": [
            {"sender_name": "me", "timestamp_ms": 1700000200000, "content": "hi"},
            {"sender_name": "ZoÃ«", "timestamp_ms": 1700000300000, "content": "hey"},
            {"sender_name": "me", "timestamp_ms": 1700000400000, "content": "bye"},
        ],
    },
    "messages/inbox/group_1/message_1.json": {
        "participants": [{"name": "a"}, {"name": "b"}, {"name": "me"}],
        "messages": [{"sender_name": "me", "timestamp_ms": 1700000500000}],
    },
    "content/posts_1.json": [
        {"media": [{"uri": "a.jpg", "creation_timestamp": 1690000000}]},
        {"media": [{"uri": "b.jpg", "creation_timestamp": 1690000100}, {"uri": "c.jpg", "creation_timestamp": 1}]},
    ],
    "likes/liked_posts.json": {
        "likes_media_likes": [
            {"title": "someone", "string_list_data": [{"href": "https://x", "value": "❤", "timestamp": 1680000000}]},
        ]
    },
    "followers_and_following/followers.json": {
        "relationships_followers": [
            {"title": "", "string_list_data": [{"href": "https://i/a", "value": "alice", "timestamp": 1}]},
            {"title": "", "string_list_data": [{"href": "https://i/b", "value": "bob", "timestamp": 2}]},
        ]
    },
    "followers_and_following/following.json": {
        "relationships_following": [
            {"title": "", "string_list_data": [{"href": "https://i/a", "value": "alice", "timestamp": 3}]},
            {"title": "", "string_list_data": [{"href": "https://i/c", "value": "carol", "timestamp": 4}]},
        ]
    },
    "information_about_you/ads_interests.json": {
        "inferred_data_ig_interest": [
            {"media_map_data": {}, "string_map_data": {"Interest": {"href": "", "value": "Hiking"}}},
            {"media_map_data": {}, "string_map_data": {"Interest": {"href": "", "value": "Coffee"}}},
        ]
    },
    "your_topics/your_topics.json": {
        "topics_your_topics": [
            {"media_map_data": {}, "string_map_data": {"Name": {"href": "", "value": "Animals"}}},
        ]
    },
    "content/stories.json": {
        "ig_stories": [
            {"uri": "s1.mp4", "creation_timestamp": 1695000000, "title": ""},
            {"uri": "s2.mp4", "creation_timestamp": 1695000100, "title": ""},
        ]
    },
    "media/photo.jpg": b"\xff\xd8\xff",
}


@pytest.fixture
def reddit_archive():
    """Zip bytes of a small Reddit export."""
    return build_archive(REDDIT_ENTRIES)


@pytest.fixture
def instagram_archive():
    """Zip bytes of a small Instagram export."""
    return build_archive(INSTAGRAM_ENTRIES)


@pytest.fixture
def reddit_entries():
    """Mutable copy of the Reddit export entries."""
    return dict(REDDIT_ENTRIES)


@pytest.fixture
def instagram_entries():
    """Mutable copy of the Instagram export entries."""
    return dict(INSTAGRAM_ENTRIES)
