"""Concrete provider implementations."""
