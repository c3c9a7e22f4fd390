"""Tests for the extraction orchestrator."""

from datetime import datetime, timezone

import pytest

from mirror_me.extraction.errors import EntryParseError, InvalidArchiveFormat
from mirror_me.extraction.orchestrator import extract, extract_file
from mirror_me.extraction.providers import Provider, get_rule_set
from mirror_me.extraction.records import (
    InstagramMessage,
    InstagramRecord,
    RedditMessage,
    RedditRecord,
    SubredditActivity,
    Vote,
)
from mirror_me.extraction.rules import Rule, build_rule_set


def utc(seconds):
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


@pytest.fixture
def reddit_rules():
    return get_rule_set(Provider.REDDIT)


@pytest.fixture
def instagram_rules():
    return get_rule_set(Provider.INSTAGRAM)


class TestRedditExtraction:
    """Test end-to-end Reddit extraction."""

    @pytest.mark.asyncio
    async def test_full_record(self, reddit_archive, reddit_rules):
        """Test that every rule contributes to the record."""
        record = await extract(reddit_archive, reddit_rules)

        assert isinstance(record, RedditRecord)
        assert record.gender == "male"
        assert [log.ip for log in record.ip_logs] == ["10.0.0.1", "10.0.0.2"]
        assert record.contributions.comments == (
            SubredditActivity("2021-02-01 09:00:00 UTC", "python"),
            SubredditActivity("2021-02-02 09:00:00 UTC", "rust"),
        )
        assert record.contributions.posts == (SubredditActivity("2021-03-01 12:00:00 UTC", "python"),)
        assert record.contributions.votes == (
            Vote("learnprogramming", True),
            Vote("python", False),
        )
        assert record.contributions.messages == (RedditMessage("2021-04-01 08:00:00 UTC", "alice"),)
        assert record.subreddits == 3

    @pytest.mark.asyncio
    async def test_deterministic(self, reddit_archive, reddit_rules):
        """Test that the same archive always yields the same record."""
        first = await extract(reddit_archive, reddit_rules)
        second = await extract(reddit_archive, reddit_rules)

        assert first == second

    @pytest.mark.asyncio
    async def test_entries_in_any_directory(self, make_archive, reddit_rules):
        """Test that entries are matched by basename wherever they live."""
        data = make_archive({"deep/nested/dir/account_gender.csv": "account_gender\nfemale\n"})

        record = await extract(data, reddit_rules)

        assert record.gender == "female"


class TestInstagramExtraction:
    """Test end-to-end Instagram extraction."""

    @pytest.mark.asyncio
    async def test_full_record(self, instagram_archive, instagram_rules):
        """Test that every rule contributes to the record."""
        record = await extract(instagram_archive, instagram_rules)

        assert isinstance(record, InstagramRecord)
        contributions = record.contributions
        assert contributions.comments == (utc(1700000000), utc(1700000100))
        assert contributions.messages == (
            InstagramMessage("Zoë", utc(1700000200)),
            InstagramMessage("Zoë", utc(1700000400)),
        )
        assert contributions.posts == (utc(1690000000), utc(1690000100))
        assert contributions.likes == (utc(1680000000),)
        assert contributions.stories == (utc(1695000000), utc(1695000100))
        assert record.relationships.followers == ("alice", "bob")
        assert record.relationships.followings == ("alice", "carol")
        assert record.interests.ads == ("Hiking", "Coffee")
        assert record.interests.topics == ("Animals",)


class TestEmptyAndUnmatched:
    """Test archives without matching content."""

    @pytest.mark.asyncio
    async def test_empty_archive_yields_empty_record(self, make_archive, reddit_rules, instagram_rules):
        """Test that an empty archive produces the initial record."""
        data = make_archive({})

        assert await extract(data, reddit_rules) == RedditRecord()
        assert await extract(data, instagram_rules) == InstagramRecord()

    @pytest.mark.asyncio
    async def test_unmatched_entries_are_never_parsed(self, make_archive, instagram_rules):
        """Test that malformed files without a rule do not fail the run."""
        data = make_archive({"unrelated.json": "{broken", "other/notes.csv": "\""})

        assert await extract(data, instagram_rules) == InstagramRecord()

    @pytest.mark.asyncio
    async def test_provider_mismatch_yields_empty_record(self, instagram_archive, reddit_rules):
        """Test that another provider's archive matches no rules."""
        assert await extract(instagram_archive, reddit_rules) == RedditRecord()


class TestFailures:
    """Test error propagation."""

    @pytest.mark.asyncio
    async def test_invalid_archive(self, reddit_rules):
        """Test that non-archive bytes raise InvalidArchiveFormat."""
        with pytest.raises(InvalidArchiveFormat):
            await extract(b"not a zip", reddit_rules)

    @pytest.mark.asyncio
    async def test_unmatched_latin1_entry_does_not_fail_the_run(self, make_archive, reddit_rules):
        """Test that a non-UTF-8 file no rule reads leaves the other rules working."""
        data = make_archive({
            "export/account_gender.csv": "account_gender\nfemale\n",
            "export/statistics.csv": "statistic,value\ncaf\xe9,1\n".encode("latin-1"),
        })

        record = await extract(data, reddit_rules)

        assert record.gender == "female"

    @pytest.mark.asyncio
    async def test_malformed_entry_fails_by_default(self, make_archive, instagram_entries, instagram_rules):
        """Test that a malformed matched entry fails the run."""
        instagram_entries["followers_and_following/followers.json"] = '{"relationships_followers": ['

        with pytest.raises(EntryParseError):
            await extract(make_archive(instagram_entries), instagram_rules)

    @pytest.mark.asyncio
    async def test_malformed_entry_skipped_when_enabled(self, make_archive, instagram_entries, instagram_rules):
        """Test that skipping malformed entries keeps the rest of the record."""
        instagram_entries["followers_and_following/followers.json"] = '{"relationships_followers": ['

        record = await extract(make_archive(instagram_entries), instagram_rules, skip_malformed_entries=True)

        assert record.relationships.followers == ()
        assert record.relationships.followings == ("alice", "carol")


class TestFormatSelection:
    """Test parser selection."""

    @pytest.mark.asyncio
    async def test_extension_based_when_unset(self, make_archive):
        """Test that a rule set without a fixed format parses by extension."""
        seen = {}

        def remember(record, data):
            seen[len(seen)] = data
            return record

        rule_set = build_rule_set("demo", None, dict, [Rule("a.csv", remember), Rule("b.json", remember)])
        data = make_archive({"a.csv": "x\n1\n", "b.json": '{"x": 1}'})

        await extract(data, rule_set)

        assert seen == {0: [{"x": "1"}], 1: {"x": 1}}

    @pytest.mark.asyncio
    async def test_explicit_flag_overrides_rule_set(self, make_archive):
        """Test that the hierarchical flag forces one parser for every entry."""
        seen = []

        def remember(record, data):
            seen.append(data)
            return record

        rule_set = build_rule_set("demo", False, dict, [Rule("a.json", remember)])
        data = make_archive({"a.json": '[1, 2]'})

        await extract(data, rule_set, hierarchical=True)

        assert seen == [[1, 2]]

    @pytest.mark.asyncio
    async def test_rules_fold_in_archive_order(self, make_archive):
        """Test that each rule sees the record built by the previous entries."""
        def add(name):
            return Rule(name, lambda record, data: record + (name,))

        rule_set = build_rule_set("demo", True, tuple, [add("b.json"), add("a.json")])
        data = make_archive({"x/a.json": "{}", "y/b.json": "{}", "z/a.json": "{}"})

        assert await extract(data, rule_set) == ("a.json", "b.json", "a.json")


class TestExtractFile:
    """Test extraction from a file on disk."""

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path, reddit_archive, reddit_rules):
        """Test that a saved archive yields the same record as its bytes."""
        path = tmp_path / "reddit.zip"
        path.write_bytes(reddit_archive)

        assert await extract_file(path, reddit_rules) == await extract(reddit_archive, reddit_rules)
