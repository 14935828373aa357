"""CLI command modules."""

from . import bids, db, org, tenders

__all__ = [
    "bids",
    "db",
    "org",
    "tenders",
]
