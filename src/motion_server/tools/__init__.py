"""
Filesystem tools for motion-server.

This package contains the directory lister, media classifier, mount
enumeration and playlist writer used by the HTTP layer.
"""

from .dir_lister import DirectoryLister, sort_names
from .media import MediaClassifier
from .mounts import MountProvider, get_mount_provider
from .playlist import PlaylistWriter

__all__ = [
    'DirectoryLister',
    'sort_names',
    'MediaClassifier',
    'MountProvider',
    'get_mount_provider',
    'PlaylistWriter'
]
