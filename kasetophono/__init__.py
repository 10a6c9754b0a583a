"""Kasetophono catalog service: crawls the blog feed, serves the cassette catalog and drives mpv playback."""

__version__ = "0.1.0"
