"""Evano Streams API."""
