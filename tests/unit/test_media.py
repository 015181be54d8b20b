"""
Unit tests for media classification and cover selection.
"""

import re
import pytest

from motion_server.tools.media import MediaClassifier, create_extension_pattern, find_image
from motion_server.models.config import MediaConfig
from motion_server.models.listing import DirectoryListing


class TestExtensionPattern:
    """Test cases for create_extension_pattern."""

    def test_matches_listed_extensions(self):
        regex = re.compile(create_extension_pattern(["mp3", ".flac"]), re.IGNORECASE)

        assert regex.search("song.mp3")
        assert regex.search("SONG.FLAC")
        assert not regex.search("song.mp3.txt")
        assert not regex.search("mp3")

    def test_escapes_special_characters(self):
        regex = re.compile(create_extension_pattern(["c++"]))

        assert regex.search("file.c++")
        assert not regex.search("file.cc")

    def test_empty_list_never_matches(self):
        regex = re.compile(create_extension_pattern([]))

        assert not regex.search("anything.mp3")


class TestCoverSelection:
    """Test cases for MediaClassifier.select_cover."""

    def setup_method(self):
        self.classifier = MediaClassifier()

    def test_cover_preferred(self):
        assert self.classifier.select_cover(["cover.jpg", "other.png"]) == "cover.jpg"

    def test_first_image_fallback(self):
        assert self.classifier.select_cover(["other.png"]) == "other.png"

    def test_no_images(self):
        assert self.classifier.select_cover([]) is None

    def test_priority_order(self):
        images = ["front.png", "Folder.jpg", "album-cover.jpeg"]

        assert self.classifier.select_cover(images) == "album-cover.jpeg"
        assert self.classifier.select_cover(images[:2]) == "Folder.jpg"
        assert self.classifier.select_cover(images[:1]) == "front.png"

    def test_case_insensitive(self):
        assert self.classifier.select_cover(["a.png", "COVER.PNG"]) == "COVER.PNG"

    def test_pattern_must_precede_extension(self):
        # 'cover' appears only after the extension, so the first image wins
        assert self.classifier.select_cover(["a.jpg", "b.jpg.cover"]) == "a.jpg"

    def test_find_image_returns_first_match(self):
        pattern = create_extension_pattern(["jpg"])

        assert find_image(["x-front.jpg", "front.jpg"], "front", pattern) == "x-front.jpg"
        assert find_image(["x.jpg"], "front", pattern) is None

    def test_custom_cover_patterns(self):
        classifier = MediaClassifier(MediaConfig(cover_patterns=["art"]))

        assert classifier.select_cover(["cover.jpg", "art.png"]) == "art.png"


class TestClassification:
    """Test cases for filename classification."""

    def setup_method(self):
        self.classifier = MediaClassifier()

    @pytest.mark.parametrize("name", ["a.mp3", "b.FLAC", "c.m4a", "d.ogg", "list.m3u8"])
    def test_audio(self, name):
        assert self.classifier.is_audio(name)

    @pytest.mark.parametrize("name", ["a.jpg", "b.WEBP", "c.avif", "d.bmp"])
    def test_image(self, name):
        assert self.classifier.is_image(name)
        assert not self.classifier.is_audio(name)

    def test_subtitle(self):
        assert self.classifier.is_subtitle("track.vtt")
        assert self.classifier.is_subtitle("track.SRT")

    def test_servable(self):
        assert self.classifier.is_servable("song.mp3")
        assert self.classifier.is_servable("cover.jpg")
        assert self.classifier.is_servable("lyrics.srt")
        assert not self.classifier.is_servable("evil.exe")
        assert not self.classifier.is_servable("notes.txt")

    def test_classify_keeps_audio_and_picks_cover(self):
        listing = DirectoryListing(
            dirs=["CD1"],
            files=["01.mp3", "02.flac", "back.jpg", "cover.jpg", "info.nfo"]
        )

        result = self.classifier.classify(listing)

        assert result.dirs == ["CD1"]
        assert result.files == ["01.mp3", "02.flac"]
        assert result.cover == "cover.jpg"

    def test_classify_no_cover_without_audio(self):
        listing = DirectoryListing(files=["cover.jpg", "readme.txt"])

        result = self.classifier.classify(listing)

        assert result.files == []
        assert result.cover is None
        assert "cover" not in result.to_dict()

    def test_find_cover_ignores_audio_requirement(self):
        listing = DirectoryListing(files=["front.png", "notes.txt"])

        assert self.classifier.find_cover(listing) == "front.png"

    def test_servable_follows_configured_extensions(self):
        classifier = MediaClassifier(MediaConfig(audio_extensions=["opus"], subtitle_extensions=["lrc"]))

        assert classifier.is_servable("track.OPUS")
        assert classifier.is_servable("track.lrc")
        assert not classifier.is_servable("track.mp3")
        assert not classifier.is_servable("track.srt")

    def test_custom_extensions(self):
        classifier = MediaClassifier(MediaConfig(audio_extensions=[".OPUS"]))

        assert classifier.is_audio("track.opus")
        assert not classifier.is_audio("track.mp3")
