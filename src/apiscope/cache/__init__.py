"""Disk-based caching of remote spec documents.

This package provides :class:`SpecCache`, which stores the text of specs
fetched over HTTP using :mod:`diskcache`, keyed by URL with a configurable
TTL. It is consumed by :func:`~apiscope.parser.loader.read_source` and is
controlled by the ``cache`` section of :class:`~apiscope.models.AppConfig`.
"""

from apiscope.cache.cache import SpecCache

__all__ = ["SpecCache"]
