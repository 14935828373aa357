"""
Tenderflow - versioned tender and bid lifecycle engine.

Keeps a current record plus an append-only history for every tender and
bid, checks who may act on them, and rolls entities forward to any
earlier version.
"""

__version__ = "0.1.0"
__app_name__ = "tenderflow"
