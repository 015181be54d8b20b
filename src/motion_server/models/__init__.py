"""
Data models for motion-server.

This module contains the configuration and per-request data structures.
"""

from .config import MediaConfig, ServerConfig
from .listing import DirectoryListing, PlaylistEntry, SaveResult

__all__ = ['MediaConfig', 'ServerConfig', 'DirectoryListing', 'PlaylistEntry', 'SaveResult']
