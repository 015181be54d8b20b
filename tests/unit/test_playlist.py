"""
Unit tests for the M3U playlist writer.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from motion_server.models.listing import PlaylistEntry
from motion_server.tools.playlist import PlaylistWriter, render_playlist, time_in_seconds


class TestTimeInSeconds:
    """Test cases for duration conversion."""

    @pytest.mark.parametrize("value,expected", [
        ("1:02:03", 3723),
        ("03:25", 205),
        ("42", 42),
        ("LIVE", -1),
        ("Infinity", -1),
        ("x:10", 10),
        ("inf", 0),
        ("1:-inf", 60),
    ])
    def test_conversion(self, value, expected):
        assert time_in_seconds(value) == expected


class TestRenderPlaylist:
    """Test cases for playlist text rendering."""

    def test_extinf_lines(self):
        entries = [
            PlaylistEntry(file="Artist/01.mp3", artist="Band", title="Song", duration="3:05"),
            PlaylistEntry(file="http://radio.example/stream", title="Radio", duration="LIVE"),
            PlaylistEntry(file="Artist/02.mp3"),
        ]

        text = render_playlist(entries, "\n")

        assert text.splitlines() == [
            "#EXTM3U",
            "#EXTINF:185,Band - Song",
            os.path.normpath("Artist/01.mp3"),
            "#EXTINF:-1,Radio",
            "http://radio.example/stream",
            os.path.normpath("Artist/02.mp3"),
        ]
        assert text.endswith("\n")

    def test_title_without_duration(self):
        text = render_playlist([PlaylistEntry(file="a.mp3", title="A")], "\n")

        assert "#EXTINF:A" in text.splitlines()

    def test_numeric_duration_from_client(self):
        entry = PlaylistEntry(file="a.mp3", title="A", duration=61.7)

        assert entry.duration == "61"
        assert "#EXTINF:61,A" in render_playlist([entry], "\n")

    def test_infinite_duration_is_live(self):
        entry = PlaylistEntry(file="a.mp3", title="A", duration=float("inf"))

        assert entry.duration == "LIVE"


class TestPlaylistWriter:
    """Test cases for PlaylistWriter."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)
        self.writer = PlaylistWriter(line_break="\n")
        self.entries = [PlaylistEntry(file="song.mp3", title="Song")]

    def teardown_method(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_extension_added(self):
        result = self.writer.save(str(self.root / "mix"), self.entries)

        assert result.ok
        assert result.file == str(self.root / "mix.m3u8")
        assert (self.root / "mix.m3u8").read_text().startswith("#EXTM3U\n")

    def test_existing_extension_kept(self):
        result = self.writer.save(str(self.root / "mix.M3U"), self.entries)

        assert result.file == str(self.root / "mix.M3U")

    def test_never_overwrites_on_create(self):
        (self.root / "mix.m3u8").write_text("old")

        first = self.writer.save(str(self.root / "mix.m3u8"), self.entries)
        second = self.writer.save(str(self.root / "mix.m3u8"), self.entries)

        assert first.file == str(self.root / "mix_1.m3u8")
        assert second.file == str(self.root / "mix_2.m3u8")
        assert (self.root / "mix.m3u8").read_text() == "old"

    def test_overwrite_on_update(self):
        (self.root / "mix.m3u8").write_text("old")

        result = self.writer.save(str(self.root / "mix.m3u8"), self.entries, overwrite=True)

        assert result.file == str(self.root / "mix.m3u8")
        assert (self.root / "mix.m3u8").read_text() != "old"

    def test_write_error_reported(self):
        with patch("builtins.open", side_effect=PermissionError("denied")):
            result = self.writer.save(str(self.root / "mix.m3u8"), self.entries)

        assert not result.ok
        assert "denied" in result.error
        assert result.to_dict() == {"error": "denied"}
