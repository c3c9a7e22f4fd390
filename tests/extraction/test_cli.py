"""Tests for the extraction CLI."""

import json
import logging

import pytest

from mirror_me.extraction import cli
from mirror_me.extraction.cli import extract_command, main
from mirror_me.extraction.config import ExtractionConfig, MirrorMeConfig
from mirror_me.extraction.providers import Provider


@pytest.fixture
def config(tmp_path):
    return MirrorMeConfig(extraction=ExtractionConfig(data_dir=str(tmp_path / "data")))


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point user config lookup at an empty directory and write a defaults file."""
    monkeypatch.setattr(cli.ConfigLoader, "_load_user_config", lambda self: None)
    monkeypatch.setattr(cli.ConfigLoader, "_load_system_config", lambda self: None)
    data_dir = (tmp_path / "data").as_posix()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text(f'[extraction]\ndata_dir = "{data_dir}"\n', encoding="utf-8")
    return defaults


class TestExtractCommand:
    """Test the extract command."""

    def test_prints_record(self, tmp_path, config, reddit_archive, capsys):
        """Test that the record is printed as JSON."""
        archive = tmp_path / "reddit.zip"
        archive.write_bytes(reddit_archive)

        assert extract_command(config, Provider.REDDIT, [archive]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["provider"] == "reddit"
        assert output["record"]["gender"] == "male"
        assert "summary" not in output

    def test_summary_and_save(self, tmp_path, config, instagram_archive, capsys):
        """Test that the summary is included and the output saved."""
        archive = tmp_path / "instagram.zip"
        archive.write_bytes(instagram_archive)

        code = extract_command(config, Provider.INSTAGRAM, [archive], include_summary=True, save_name="ig.json")

        assert code == 0
        printed = capsys.readouterr().out
        assert json.loads(printed)["summary"]["relationships"]["mutuals"] == 1
        saved = tmp_path / "data" / "ig.json"
        assert saved.read_text(encoding="utf-8") == printed.rstrip("\n")

    def test_only_first_archive_is_used(self, tmp_path, config, reddit_archive, capsys):
        """Test that additional archives are ignored."""
        archive = tmp_path / "reddit.zip"
        archive.write_bytes(reddit_archive)

        assert extract_command(config, Provider.REDDIT, [archive, tmp_path / "missing.zip"]) == 0

    def test_missing_archive(self, tmp_path, config):
        """Test that a missing file fails."""
        assert extract_command(config, Provider.REDDIT, [tmp_path / "missing.zip"]) == 1

    def test_invalid_archive(self, tmp_path, config, capsys):
        """Test that a non-archive file fails without output."""
        archive = tmp_path / "bad.zip"
        archive.write_bytes(b"not a zip")

        assert extract_command(config, Provider.REDDIT, [archive]) == 1
        assert capsys.readouterr().out == ""

    def test_malformed_entry_override(self, tmp_path, config, make_archive, instagram_entries):
        """Test that the override skips malformed entries."""
        instagram_entries["information_about_you/ads_interests.json"] = "{broken"
        archive = tmp_path / "instagram.zip"
        archive.write_bytes(make_archive(instagram_entries))

        assert extract_command(config, Provider.INSTAGRAM, [archive]) == 1
        assert extract_command(config, Provider.INSTAGRAM, [archive], skip_malformed_override=True) == 0

    def test_invalid_save_name(self, tmp_path, config, reddit_archive):
        """Test that a save name with directories fails."""
        archive = tmp_path / "reddit.zip"
        archive.write_bytes(reddit_archive)

        assert extract_command(config, Provider.REDDIT, [archive], save_name="../out.json") == 1


class TestMain:
    """Test argument parsing and config loading."""

    def test_main_with_config_file(self, tmp_path, isolated_config, reddit_archive, capsys):
        """Test a full run through main."""
        archive = tmp_path / "reddit.zip"
        archive.write_bytes(reddit_archive)

        code = main(["reddit", str(archive), "--config", str(isolated_config), "--summary", "--save", "r.json"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["summary"]["subreddits"] == 3
        assert (tmp_path / "data" / "r.json").exists()

    def test_missing_config_file(self, tmp_path, isolated_config, reddit_archive):
        """Test that an explicit but missing config file fails."""
        archive = tmp_path / "reddit.zip"
        archive.write_bytes(reddit_archive)

        assert main(["reddit", str(archive), "--config", str(tmp_path / "nope.toml")]) == 1

    def test_unknown_provider(self, tmp_path):
        """Test that argparse rejects unknown providers."""
        with pytest.raises(SystemExit):
            main(["myspace", str(tmp_path / "a.zip")])
