"""Periodic synchroniser for aria2 BitTorrent tracker lists."""

__version__ = "0.1.0"
