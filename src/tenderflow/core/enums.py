"""
Domain enumerations shared by the persistence layer and the orchestrator.
"""

from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Versioned entity kinds."""

    TENDER = "tender"
    BID = "bid"


class TenderStatus(str, Enum):
    """Tender lifecycle status."""

    CREATED = "Created"
    PUBLISHED = "Published"
    CLOSED = "Closed"


class ServiceType(str, Enum):
    """Kind of service a tender procures."""

    CONSTRUCTION = "Construction"
    DELIVERY = "Delivery"
    MANUFACTURE = "Manufacture"


class BidStatus(str, Enum):
    """Bid lifecycle status."""

    CREATED = "Created"
    PUBLISHED = "Published"
    CANCELED = "Canceled"


class BidDecision(str, Enum):
    """Decision recorded on a bid by the tender's responsible party.

    A bid without a decision stores NULL.
    """

    APPROVED = "Approved"
    REJECTED = "Rejected"


class AuthorType(str, Enum):
    """Who a bid is authored on behalf of."""

    ORGANIZATION = "Organization"
    USER = "User"


class OrganizationType(str, Enum):
    """Legal form of an organization."""

    IE = "IE"
    LLC = "LLC"
    JSC = "JSC"
