"""Ingestion layer.

This package turns the decoded aggregate response into normalized domain
objects and assembles them into snapshots.
"""

__all__: list[str] = []
