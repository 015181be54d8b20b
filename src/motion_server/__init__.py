"""
motion-server - Core Package

Companion file server for a browser-based audio spectrum visualizer and
music player: directory browsing, cover art, mount points and playlists.
"""

__version__ = "0.1.0"
__author__ = "motion-server Team"

SERVER_SIGNATURE = f"motion-server v{__version__}"
