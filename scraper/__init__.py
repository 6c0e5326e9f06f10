"""Jobfeed package public API."""
from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("jobfeed")
except Exception:  # fallback when not installed
    __version__ = "0.1.0"

from .jobfeed.collector import ListingCollector, SurfaceNotReady  # re-export
from .jobfeed.models import JobRecord  # re-export

__all__ = ["__version__", "ListingCollector", "SurfaceNotReady", "JobRecord"]
