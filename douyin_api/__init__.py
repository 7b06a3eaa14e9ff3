"""Douyin share-link resolver API."""

__version__ = "2.3.1"
