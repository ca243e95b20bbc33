"""
Unit tests for the os-release parser.

Tests key folding, quote stripping, skipped lines and read failures.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from version_service.os_release import (
    ReadError,
    format_os_release,
    parse_os_release,
    read_os_release,
)


class TestParseOsRelease:
    """Test parse_os_release() on in-memory lines."""

    def test_keys_are_lowercased(self):
        record = parse_os_release(["VERSION_ID=1.2", "Pretty_Name=x"])
        assert record == {"version_id": "1.2", "pretty_name": "x"}

    def test_surrounding_quotes_stripped(self):
        record = parse_os_release(['NAME="Deep Librescoot"'])
        assert record["name"] == "Deep Librescoot"

    def test_only_one_layer_of_quotes_stripped(self):
        record = parse_os_release(['NAME=""nested""'])
        assert record["name"] == '"nested"'

    def test_internal_quotes_and_escapes_kept(self):
        record = parse_os_release(['DESC="say \\"hi\\" now"'])
        assert record["desc"] == 'say \\"hi\\" now'

    def test_unbalanced_quote_kept(self):
        record = parse_os_release(['NAME="open'])
        assert record["name"] == '"open'

    def test_split_on_first_equals_only(self):
        record = parse_os_release(["OPTS=a=b=c"])
        assert record["opts"] == "a=b=c"

    def test_empty_value(self):
        record = parse_os_release(["VERSION_CODENAME=", 'VARIANT=""'])
        assert record == {"version_codename": "", "variant": ""}

    def test_whitespace_not_trimmed(self):
        record = parse_os_release(["ID = x "])
        assert record == {"id ": " x "}

    def test_skipped_lines(self):
        record = parse_os_release(
            [
                "",
                "# comment=with equals",
                "no separator here",
                "ID=ok",
            ]
        )
        assert record == {"id": "ok"}

    def test_line_endings_removed(self):
        record = parse_os_release(["ID=a\n", "VERSION_ID=2\r\n"])
        assert record == {"id": "a", "version_id": "2"}

    def test_last_duplicate_wins(self):
        record = parse_os_release(["ID=first", "id=second"])
        assert record == {"id": "second"}

    def test_sample_file(self, sample_os_release_content):
        record = parse_os_release(sample_os_release_content.splitlines())

        assert record == {
            "name": "Deep Librescoot",
            "version": "0.9.2 (stable)",
            "id": "librescoot",
            "id_like": "poky",
            "version_id": "0.9.2",
            "pretty_name": "Deep Librescoot 0.9.2",
            "build_id": "20240115-1a2b3c",
            "variant": "mdb",
        }

    @pytest.mark.parametrize(
        "line",
        ["", "#ID=x", "# ID=x", "JUSTTEXT", "   "],
    )
    def test_lines_without_entries(self, line):
        assert parse_os_release([line]) == {}


class TestFormatOsRelease:
    """Test re-serialization of release records."""

    def test_format_unquoted_lines(self):
        text = format_os_release({"id": "librescoot", "name": "Deep Librescoot"})
        assert text == "id=librescoot\nname=Deep Librescoot\n"

    def test_reparse_yields_same_mapping(self, sample_os_release_content):
        record = parse_os_release(sample_os_release_content.splitlines())
        reparsed = parse_os_release(format_os_release(record).splitlines())
        assert reparsed == record

    def test_empty_record(self):
        assert format_os_release({}) == ""


class TestReadOsRelease:
    """Test read_os_release() against the filesystem."""

    def test_read_file(self, tmp_path, sample_os_release_content):
        path = tmp_path / "os-release"
        path.write_text(sample_os_release_content)

        record = read_os_release(path)

        assert record["id"] == "librescoot"
        assert len(record) == 8

    def test_missing_file_raises_read_error(self, tmp_path):
        with pytest.raises(ReadError, match="failed to open"):
            read_os_release(tmp_path / "missing")

    def test_read_error_is_oserror(self, tmp_path):
        with pytest.raises(OSError):
            read_os_release(tmp_path / "missing")

    def test_invalid_utf8_raises_read_error(self, tmp_path):
        path = tmp_path / "os-release"
        path.write_bytes(b"ID=ok\nNAME=\xff\xfe\n")

        with pytest.raises(ReadError, match="error reading"):
            read_os_release(path)

    def test_mid_stream_io_error_discards_partial_results(self, tmp_path):
        def failing_lines():
            yield "ID=partial\n"
            raise OSError("Input/output error")

        handle = MagicMock()
        handle.__enter__.return_value = handle
        handle.__iter__.side_effect = lambda: failing_lines()

        with patch("builtins.open", return_value=handle):
            with pytest.raises(ReadError, match="Input/output error"):
                read_os_release(tmp_path / "os-release")
