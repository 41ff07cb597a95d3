"""State/store layer.

This package is the single source of truth for the server snapshot that
consumers read between refreshes.
"""
