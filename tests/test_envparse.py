"""Tests for workboard.lib.envparse module."""

import pytest

from workboard.lib.envparse import load_env, parse_env


class TestParseEnv:
    """Tests for parse_env."""

    def test_basic(self):
        assert parse_env("API_URL=http://x/api\nTICKET_LIMIT=10\n") == {
            "API_URL": "http://x/api",
            "TICKET_LIMIT": "10",
        }

    def test_comments_and_blank_lines(self):
        text = "# board settings\n\nLOG_LEVEL=INFO\n"
        assert parse_env(text) == {"LOG_LEVEL": "INFO"}

    def test_quotes_stripped(self):
        assert parse_env('A="hello world"\nB=\'x\'') == {"A": "hello world", "B": "x"}

    def test_trailing_comment_on_unquoted_value(self):
        assert parse_env("LUNCH_START=12:30 # earlier on fridays") == {"LUNCH_START": "12:30"}

    def test_hash_inside_quotes_kept(self):
        assert parse_env('API_TOKEN="abc #123"') == {"API_TOKEN": "abc #123"}

    def test_export_prefix(self):
        assert parse_env("export LOG_LEVEL=DEBUG") == {"LOG_LEVEL": "DEBUG"}

    def test_empty_value(self):
        assert parse_env("API_TOKEN=") == {"API_TOKEN": ""}

    def test_missing_equals(self):
        with pytest.raises(ValueError, match="expected KEY=value"):
            parse_env("JUST_A_KEY")

    def test_invalid_key(self):
        with pytest.raises(ValueError, match="invalid key"):
            parse_env("api_url=http://x")

    @pytest.mark.parametrize("value", [
        "`whoami`",
        "$(cat token)",
        "${HOME}",
        "a; rm -rf /",
        "a && b",
        "a || b",
    ])
    def test_forbidden_patterns(self, value):
        with pytest.raises(ValueError, match="forbidden pattern"):
            parse_env(f"API_TOKEN={value}")


class TestLoadEnv:
    """Tests for load_env."""

    def test_reads_file(self, tmp_path):
        path = tmp_path / "workboard.env"
        path.write_text("LOG_LEVEL=ERROR\n")
        assert load_env(path) == {"LOG_LEVEL": "ERROR"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_env(tmp_path / "missing.env")
