"""
HTTP layer for motion-server.
"""

from .app import MotionServer, create_app

__all__ = ['MotionServer', 'create_app']
