"""Database persistence layer."""

from .db import Database, init_db
from .models import (
    VERSIONED_MODELS,
    Base,
    Bid,
    BidHistory,
    Employee,
    Organization,
    OrganizationResponsible,
    Review,
    Tender,
    TenderHistory,
)
from .repo import DirectoryRepository, EntityStore, HistoryRepository, ReviewRepository

__all__ = [
    "Database",
    "init_db",
    "VERSIONED_MODELS",
    "Base",
    "Bid",
    "BidHistory",
    "Employee",
    "Organization",
    "OrganizationResponsible",
    "Review",
    "Tender",
    "TenderHistory",
    "DirectoryRepository",
    "EntityStore",
    "HistoryRepository",
    "ReviewRepository",
]
