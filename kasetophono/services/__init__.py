"""Crawl pipeline, catalog lifecycle, playback and tracklist services."""
