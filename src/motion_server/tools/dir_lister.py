"""
Directory lister for motion-server.

This module reads a single directory, splits its entries into subdirectories
and files, hides dotfiles on request and sorts both lists by base letters,
ignoring case and accents except as tie-breakers.
"""

import os
import logging
import unicodedata
from typing import Dict, List, Optional, Tuple

from ..models.listing import DirectoryListing


logger = logging.getLogger(__name__)


def _strip_accents(text: str) -> str:
    return "".join(ch for ch in text if not unicodedata.combining(ch))


def collation_key(name: str) -> Tuple[str, str, str]:
    """
    Sort key for case-insensitive, accent-aware ordering.

    Names compare by base letters first, so accented names sort next to
    their unaccented forms. Ties are broken by accents, then by case with
    lowercase first. The order does not depend on the process locale.

    Args:
        name: File or directory name

    Returns:
        Tuple usable as a ``sorted`` key
    """
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    return _strip_accents(decomposed), decomposed, name.swapcase()


def sort_names(names: List[str]) -> List[str]:
    """Return ``names`` sorted with :func:`collation_key`."""
    return sorted(names, key=collation_key)


class DirectoryLister:
    """
    Lists the contents of one directory at a time.

    Reads are synchronous and never raise for a missing or unreadable
    directory: :meth:`get_dir` returns ``None`` instead.
    """

    def __init__(self, show_hidden: bool = False):
        """
        Initialize the directory lister.

        Args:
            show_hidden: Default for including names that start with a dot
        """
        self.show_hidden = show_hidden
        self._stats = {
            'directories_listed': 0,
            'entries_skipped': 0,
            'errors': 0
        }

    def get_dir(self, directory_path: str, show_hidden: Optional[bool] = None) -> Optional[DirectoryListing]:
        """
        Read a directory and partition its entries.

        Args:
            directory_path: Directory to read
            show_hidden: Override the lister default for dotfiles

        Returns:
            DirectoryListing with sorted dirs and files, or None when the
            directory cannot be read
        """
        if show_hidden is None:
            show_hidden = self.show_hidden

        dirs: List[str] = []
        files: List[str] = []

        try:
            with os.scandir(os.path.normpath(directory_path)) as entries:
                for entry in entries:
                    if entry.name.startswith('.') and not show_hidden:
                        continue

                    try:
                        if entry.is_dir():
                            dirs.append(entry.name)
                        elif entry.is_file():
                            files.append(entry.name)
                        else:
                            self._stats['entries_skipped'] += 1
                    except OSError as e:
                        logger.debug(f"Cannot determine type of {entry.path}: {e}")
                        self._stats['entries_skipped'] += 1
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read directory {directory_path}: {e}")
            self._stats['errors'] += 1
            return None

        self._stats['directories_listed'] += 1
        return DirectoryListing(dirs=sort_names(dirs), files=sort_names(files))

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the listing operations.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'directories_listed': 0,
            'entries_skipped': 0,
            'errors': 0
        }
