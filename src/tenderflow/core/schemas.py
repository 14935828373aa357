"""
Typed inputs and results for engine operations.

Inputs validate the body of create/edit calls; results are detached
snapshots of ORM rows that stay usable after the session closes.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .enums import AuthorType, BidDecision, BidStatus, ServiceType, TenderStatus
from .errors import DomainError, validation

NAME_MAX = 100
DESCRIPTION_MAX = 500
FEEDBACK_MAX = 1000

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Inputs
# =============================================================================


class TenderCreate(_Schema):
    """Body of a create-tender call."""

    name: str = Field(min_length=1, max_length=NAME_MAX)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX)
    service_type: ServiceType
    organization_id: str = Field(min_length=1, max_length=36)
    creator_username: str = Field(min_length=1, max_length=50)


class TenderPatch(_Schema):
    """Partial tender edit. Empty or missing fields are left unchanged."""

    name: str | None = Field(default=None, max_length=NAME_MAX)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX)
    service_type: ServiceType | None = None


class BidCreate(_Schema):
    """Body of a create-bid call."""

    name: str = Field(min_length=1, max_length=NAME_MAX)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX)
    tender_id: str = Field(min_length=1, max_length=36)
    author_type: AuthorType
    author_id: str = Field(min_length=1, max_length=36)
    organization_id: str | None = Field(default=None, max_length=36)


class BidPatch(_Schema):
    """Partial bid edit. Empty or missing fields are left unchanged."""

    name: str | None = Field(default=None, max_length=NAME_MAX)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX)


# =============================================================================
# Results
# =============================================================================


class TenderView(_Schema):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    service_type: ServiceType
    status: TenderStatus
    version: int
    organization_id: str
    creator_username: str
    created_at: datetime
    updated_at: datetime | None = None


class BidView(_Schema):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    feedback: str | None = None
    status: BidStatus
    tender_id: str
    organization_id: str | None = None
    decision: BidDecision | None = None
    author_id: str
    author_username: str
    author_type: AuthorType
    version: int
    created_at: datetime
    updated_at: datetime | None = None


class ReviewView(_Schema):
    model_config = ConfigDict(from_attributes=True)

    id: str
    bid_id: str
    author_username: str
    description: str
    created_at: datetime


class HistoryView(_Schema):
    """One superseded version of a tender or bid."""

    model_config = ConfigDict(from_attributes=True)

    version: int
    name: str
    description: str
    status: str
    updated_at: datetime


# =============================================================================
# Parsing
# =============================================================================


def parse_input(model: type[ModelT], payload: ModelT | dict[str, Any]) -> ModelT:
    """Validate a payload into ``model``.

    Raises:
        DomainError: VALIDATION with the first offending field and message
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise _validation_error(e) from e


def _validation_error(error: ValidationError) -> DomainError:
    first = error.errors()[0]
    loc = ".".join(str(x) for x in first["loc"]) or "body"
    return validation(f"{loc}: {first['msg']}")
