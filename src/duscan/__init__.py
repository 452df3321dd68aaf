"""duscan - disk usage traversal and reporting.

This package walks directory trees once, aggregates allocated (or apparent)
sizes bottom-up under an immutable filter policy, and renders ``du``-style
reports.
"""

from duscan.__main__ import main

__all__ = ["main"]
