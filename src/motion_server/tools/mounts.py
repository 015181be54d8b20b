"""
Mount point and drive enumeration for motion-server.

Each platform lists its filesystems with a different utility. The
:class:`MountProvider` interface hides that difference; one implementation is
chosen at startup by :func:`get_mount_provider` and the rest of the server
only ever calls :meth:`MountProvider.list_mounts`.
"""

import os
import sys
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional


logger = logging.getLogger(__name__)


class MountProvider(ABC):
    """
    Enumerates mount points (or drive letters) visible to the server.

    Subclasses provide the command to run and how to pull a mount out of one
    output line; filtering out entries that cannot be stat'ed is shared.
    """

    command: List[str] = []
    timeout_seconds: int = 10

    def list_mounts(self) -> List[str]:
        """
        Run the platform utility and return accessible mounts.

        Returns:
            Mount points in command output order; empty when the command fails
        """
        try:
            output = self._run_command()
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Mount enumeration with {' '.join(self.command)} failed: {e}")
            return []

        mounts = []
        # first line holds column titles
        for line in output.splitlines()[1:]:
            mount = self.parse_line(line)
            if mount and self._is_accessible(mount):
                mounts.append(mount)
        return mounts

    def _run_command(self) -> str:
        result = subprocess.run(
            self.command,
            capture_output=True,
            text=True,
            check=True,
            timeout=self.timeout_seconds
        )
        return result.stdout

    @abstractmethod
    def parse_line(self, line: str) -> Optional[str]:
        """Extract the mount point from one line of command output."""

    def _is_accessible(self, mount: str) -> bool:
        try:
            os.stat(mount + os.sep)
            return True
        except OSError:
            logger.debug(f"Cannot stat mount point: {mount}")
            return False


class UnixMountProvider(MountProvider):
    """Mount points reported by ``df`` on Linux, tmpfs excluded."""

    command = ['df', '-hx', 'tmpfs']

    def parse_line(self, line: str) -> Optional[str]:
        line = line.strip()
        if not line:
            return None
        # mount point is the last column
        return line.rsplit(None, 1)[-1].strip() or None


class MacMountProvider(UnixMountProvider):
    """Mount points reported by BSD ``df`` on macOS."""

    command = ['df', '-hnT', 'notmpfs']


class WindowsDriveProvider(MountProvider):
    """Logical drive letters reported by ``wmic``."""

    command = ['wmic', 'logicaldisk', 'get', 'name']

    def parse_line(self, line: str) -> Optional[str]:
        drive = line[:2].strip()
        if len(drive) == 2 and drive.endswith(':'):
            return drive
        return None


def get_mount_provider(platform: Optional[str] = None) -> MountProvider:
    """
    Select the mount provider for a platform.

    Args:
        platform: ``sys.platform`` style name; defaults to the running platform

    Returns:
        MountProvider instance for that platform
    """
    platform = platform or sys.platform
    if platform.startswith('win'):
        return WindowsDriveProvider()
    if platform == 'darwin':
        return MacMountProvider()
    return UnixMountProvider()
