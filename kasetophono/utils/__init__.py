"""Shared utilities: errors, logging, concurrency and text helpers."""
