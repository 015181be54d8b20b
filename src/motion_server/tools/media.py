"""
Media classification for motion-server.

Filenames are matched against audio, image and subtitle extension patterns,
and a representative cover image is picked for a directory by name priority.
"""

import re
import logging
from typing import List, Optional

from ..models.config import MediaConfig
from ..models.listing import DirectoryListing


logger = logging.getLogger(__name__)


def create_extension_pattern(extensions: List[str]) -> str:
    """
    Create a single regex pattern matching any of the given extensions.

    Args:
        extensions: File extensions (with or without leading dot)

    Returns:
        Regex pattern anchored at the end of the name
    """
    alternatives = [re.escape(ext.lstrip('.')) for ext in extensions if ext.lstrip('.')]
    if not alternatives:
        return r'(?!)'  # Never matches anything
    return rf"\.(?:{'|'.join(alternatives)})$"


def find_image(images: List[str], pattern: str, image_pattern: str) -> Optional[str]:
    """
    Return the first image whose name contains ``pattern`` before its extension.

    Args:
        images: Image filenames in listing order
        pattern: Name fragment to look for (case-insensitive)
        image_pattern: Extension pattern from :func:`create_extension_pattern`

    Returns:
        The matching filename, or None
    """
    regex = re.compile(rf'{re.escape(pattern)}.*{image_pattern}', re.IGNORECASE)
    for image in images:
        if regex.search(image):
            return image
    return None


class MediaClassifier:
    """
    Classifies filenames and selects cover art.

    Extension sets and the cover priority come from :class:`MediaConfig`.
    """

    def __init__(self, media_config: Optional[MediaConfig] = None):
        self.config = media_config or MediaConfig()
        self._image_pattern = create_extension_pattern(self.config.image_extensions)
        self._audio_regex = re.compile(create_extension_pattern(self.config.audio_extensions), re.IGNORECASE)
        self._image_regex = re.compile(self._image_pattern, re.IGNORECASE)
        self._subtitle_regex = re.compile(create_extension_pattern(self.config.subtitle_extensions), re.IGNORECASE)
        self._servable_regex = re.compile(create_extension_pattern(self.config.servable_extensions()), re.IGNORECASE)

    def is_audio(self, filename: str) -> bool:
        return self._audio_regex.search(filename) is not None

    def is_image(self, filename: str) -> bool:
        return self._image_regex.search(filename) is not None

    def is_subtitle(self, filename: str) -> bool:
        return self._subtitle_regex.search(filename) is not None

    def is_servable(self, filename: str) -> bool:
        """Check whether a file may be sent to the client as raw bytes."""
        return self._servable_regex.search(filename) is not None

    def select_cover(self, images: List[str]) -> Optional[str]:
        """
        Pick the cover image for a directory.

        Patterns from the configuration are tried in priority order
        (``cover``, ``folder``, ``front`` by default); when none match, the
        first image is used.

        Args:
            images: Image filenames in listing order

        Returns:
            Selected filename, or None when there are no images
        """
        for pattern in self.config.cover_patterns:
            found = find_image(images, pattern, self._image_pattern)
            if found:
                return found
        return images[0] if images else None

    def find_cover(self, listing: DirectoryListing) -> Optional[str]:
        """Select a cover among the image files of a raw listing."""
        return self.select_cover([f for f in listing.files if self.is_image(f)])

    def classify(self, listing: DirectoryListing) -> DirectoryListing:
        """
        Reduce a raw listing to what the player shows.

        Only audio files are kept. A cover is attached only when the
        directory holds at least one audio file.

        Args:
            listing: Raw listing from the directory lister

        Returns:
            New DirectoryListing with audio files and optional cover
        """
        audio = []
        images = []
        for name in listing.files:
            if self.is_image(name):
                images.append(name)
            if self.is_audio(name):
                audio.append(name)

        cover = self.select_cover(images) if audio else None
        if cover:
            logger.debug(f"Selected cover {cover} among {len(images)} images")

        return DirectoryListing(dirs=list(listing.dirs), files=audio, cover=cover)
