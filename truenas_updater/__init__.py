"""Top-level package for truenas-updater.

Updates TrueNAS Scale applications through the management API while
holding back Plex when someone is streaming.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("truenas-app-updater")
    # Handle None return in Python 3.13+ for uninstalled packages
    if __version__ is None:
        __version__ = "dev"
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
