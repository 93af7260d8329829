"""keepup: package version freshness and end-of-life tracking for a host fleet."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("keepup")
except PackageNotFoundError:
    # Source checkout without an install
    __version__ = "0.0.0+unknown"
