"""
Extended M3U playlist writer for motion-server.
"""

import os
import logging
from typing import List

from ..models.listing import PlaylistEntry, SaveResult


logger = logging.getLogger(__name__)

PLAYLIST_EXTENSIONS = ('.m3u', '.m3u8')
DEFAULT_EXTENSION = '.m3u8'


def time_in_seconds(time: str) -> int:
    """
    Convert 'hh:mm:ss' (or 'mm:ss', or 'ss') to seconds.

    Live streams are reported as -1. Non-numeric or infinite parts count as zero.

    Args:
        time: Duration string from the client

    Returns:
        Duration in whole seconds
    """
    if time in ('LIVE', 'Infinity'):
        return -1

    total = 0
    for part in time.split(':'):
        try:
            value = int(float(part))
        except (ValueError, OverflowError):
            value = 0
        total = total * 60 + value
    return total


def render_playlist(entries: List[PlaylistEntry], line_break: str = os.linesep) -> str:
    """
    Render playlist entries as extended M3U text.

    Args:
        entries: Playlist tracks in order
        line_break: Line terminator to use

    Returns:
        Playlist file contents
    """
    lines = ['#EXTM3U']

    for entry in entries:
        if entry.title:
            duration = f"{time_in_seconds(entry.duration)}," if entry.duration else ''
            artist = f"{entry.artist} - " if entry.artist else ''
            lines.append(f"#EXTINF:{duration}{artist}{entry.title}")
        lines.append(entry.file if entry.file.startswith('http') else os.path.normpath(entry.file))

    return line_break.join(lines) + line_break


class PlaylistWriter:
    """Saves client playlists to the filesystem."""

    def __init__(self, line_break: str = os.linesep):
        self.line_break = line_break

    def resolve_target(self, path: str, overwrite: bool = False) -> str:
        """
        Work out the file that will actually be written.

        The extension is forced to .m3u or .m3u8. Unless ``overwrite`` is set,
        existing files are kept and a numeric suffix is added instead.

        Args:
            path: Requested playlist path
            overwrite: Whether an existing file may be replaced

        Returns:
            Path of the file to write
        """
        directory, filename = os.path.split(os.path.normpath(path))
        name, ext = os.path.splitext(filename)

        if ext.lower() not in PLAYLIST_EXTENSIONS:
            ext += DEFAULT_EXTENSION

        target = os.path.join(directory, name + ext)
        if overwrite:
            return target

        increment = 0
        while os.path.exists(target):
            increment += 1
            target = os.path.join(directory, f"{name}_{increment}{ext}")
        return target

    def save(self, path: str, entries: List[PlaylistEntry], overwrite: bool = False) -> SaveResult:
        """
        Write a playlist file.

        Args:
            path: Requested playlist path
            entries: Playlist tracks
            overwrite: Replace an existing file instead of picking a new name

        Returns:
            SaveResult with the written file path, or the error message
        """
        target = self.resolve_target(path, overwrite)
        text = render_playlist(entries, self.line_break)

        try:
            with open(target, 'w', encoding='utf-8', newline='') as f:
                f.write(text)
        except OSError as e:
            logger.warning(f"Cannot write playlist {target}: {e}")
            return SaveResult(error=str(e))

        logger.info(f"Playlist saved to {target} ({len(entries)} tracks)")
        return SaveResult(file=target)
