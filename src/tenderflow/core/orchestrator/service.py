"""
Request orchestrator.

One method per engine operation. Every method validates its input, runs
its pipeline checks and delegates to the version manager or the entity
store inside a single transaction.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Iterable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from tenderflow.core import errors
from tenderflow.core.config.models import AppConfig
from tenderflow.core.enums import (
    AuthorType,
    BidDecision,
    BidStatus,
    EntityKind,
    ServiceType,
    TenderStatus,
)
from tenderflow.core.errors import DomainError, StaleVersionError
from tenderflow.core.logging import get_contextual_logger
from tenderflow.core.ports import ListFilter, Page
from tenderflow.core.schemas import (
    FEEDBACK_MAX,
    BidCreate,
    BidPatch,
    BidView,
    HistoryView,
    ReviewView,
    TenderCreate,
    TenderPatch,
    TenderView,
    parse_input,
)
from tenderflow.persistence.db import Database

from .pipeline import Checks, RequestContext

T = TypeVar("T")
EnumT = TypeVar("EnumT", bound=Enum)


def _parse_enum(enum_cls: type[EnumT], value: Any, field: str) -> EnumT:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise errors.validation(f"{field}: must be one of {allowed}") from None


class Orchestrator:
    """Entry point for every tender and bid operation."""

    def __init__(self, database: Database, config: AppConfig | None = None) -> None:
        """Initialize the orchestrator.

        Args:
            database: Storage handle; each operation opens one session on it
            config: Application config (defaults when omitted)
        """
        self.database = database
        self.config = config or AppConfig()

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _execute(
        self,
        operation: str,
        action: Callable[[RequestContext], T],
        checks: Checks | None = None,
        username: str | None = None,
        versioned: bool = False,
    ) -> T:
        """Run checks and ``action`` in one transaction.

        Versioned writes are retried from scratch, checks included, when
        another writer bumped the version first.
        """
        log = get_contextual_logger("orchestrator", operation=operation, username=username)
        attempts = self.config.versioning.max_write_attempts if versioned else 1

        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            retry=retry_if_exception_type(StaleVersionError),
            before_sleep=before_sleep_log(log, logging.INFO),
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    with self.database.session() as session:
                        context = RequestContext.bind(session)
                        if checks is not None:
                            checks.run(context.auth)
                        result = action(context)
        except DomainError as e:
            log.info(f"Rejected [{e.status}]: {e.reason}")
            raise
        except StaleVersionError as e:
            log.warning(f"Giving up after {attempts} attempts: {e}")
            raise errors.conflict() from e
        except SQLAlchemyError as e:
            log.exception(f"Storage failure: {e}")
            raise errors.internal() from e

        log.info("Completed")
        return result

    def _page(self, offset: int | None, limit: int | None) -> Page:
        pagination = self.config.pagination
        offset = 0 if offset is None else offset
        limit = pagination.default_limit if limit is None else limit

        if offset < 0:
            raise errors.validation("offset: must not be negative")
        if limit < 0:
            raise errors.validation("limit: must not be negative")
        if limit > pagination.max_limit:
            raise errors.validation(f"limit: must not exceed {pagination.max_limit}")
        return Page(offset=offset, limit=limit)

    @staticmethod
    def _version(version: Any) -> int:
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise errors.validation("version: must be a positive integer")
        return version

    # =========================================================================
    # Tenders
    # =========================================================================

    def create_tender(self, payload: TenderCreate | dict[str, Any]) -> TenderView:
        data = parse_input(TenderCreate, payload)

        def action(ctx: RequestContext) -> TenderView:
            row = ctx.versions.create(
                EntityKind.TENDER,
                {
                    "name": data.name,
                    "description": data.description,
                    "service_type": data.service_type,
                    "status": TenderStatus.CREATED.value,
                    "organization_id": data.organization_id,
                    "creator_username": data.creator_username,
                },
            )
            return TenderView.model_validate(row)

        checks = Checks(
            actors=(data.creator_username,),
            relationship=lambda auth: auth.require_organization_responsible(
                data.organization_id, data.creator_username
            ),
        )
        return self._execute("create_tender", action, checks, username=data.creator_username)

    def get_tenders(
        self,
        service_types: Iterable[str] | None = None,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[TenderView]:
        """Published tenders, optionally narrowed to some service types."""
        types = tuple(
            _parse_enum(ServiceType, value, "service_type").value for value in (service_types or ())
        )
        page = self._page(offset, limit)
        list_filter = ListFilter(statuses=(TenderStatus.PUBLISHED.value,), service_types=types)

        def action(ctx: RequestContext) -> list[TenderView]:
            rows = ctx.store.list(EntityKind.TENDER, list_filter, page)
            return [TenderView.model_validate(row) for row in rows]

        return self._execute("get_tenders", action)

    def get_user_tenders(
        self,
        username: str,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[TenderView]:
        """Every tender created by ``username``, whatever its status."""
        page = self._page(offset, limit)
        list_filter = ListFilter(creator_username=username)

        def action(ctx: RequestContext) -> list[TenderView]:
            rows = ctx.store.list(EntityKind.TENDER, list_filter, page)
            return [TenderView.model_validate(row) for row in rows]

        return self._execute("get_user_tenders", action, Checks(actors=(username,)), username=username)

    def get_tender_status(self, tender_id: str, username: str) -> TenderStatus:
        def action(ctx: RequestContext) -> TenderStatus:
            return TenderStatus(ctx.store.get_by_id(EntityKind.TENDER, tender_id).status)

        return self._execute(
            "get_tender_status", action, self._tender_checks(tender_id, username), username=username
        )

    def update_tender_status(self, tender_id: str, status: str, username: str) -> TenderView:
        new_status = _parse_enum(TenderStatus, status, "status")

        def action(ctx: RequestContext) -> TenderView:
            row = ctx.versions.edit(EntityKind.TENDER, tender_id, {"status": new_status.value})
            return TenderView.model_validate(row)

        return self._execute(
            "update_tender_status",
            action,
            self._tender_checks(tender_id, username),
            username=username,
            versioned=True,
        )

    def edit_tender(
        self,
        tender_id: str,
        patch: TenderPatch | dict[str, Any],
        username: str,
    ) -> TenderView:
        """Apply a partial edit. Empty or missing fields are left unchanged."""
        data = parse_input(TenderPatch, patch)

        def action(ctx: RequestContext) -> TenderView:
            row = ctx.versions.edit(EntityKind.TENDER, tender_id, data.model_dump())
            return TenderView.model_validate(row)

        return self._execute(
            "edit_tender",
            action,
            self._tender_checks(tender_id, username),
            username=username,
            versioned=True,
        )

    def rollback_tender(self, tender_id: str, version: int, username: str) -> TenderView:
        """Restore the content of ``version`` as a new version."""
        target = self._version(version)

        def action(ctx: RequestContext) -> TenderView:
            row = ctx.versions.rollback(EntityKind.TENDER, tender_id, target)
            return TenderView.model_validate(row)

        checks = self._tender_checks(tender_id, username)
        checks.version = target
        return self._execute("rollback_tender", action, checks, username=username, versioned=True)

    def get_tender_history(self, tender_id: str, username: str) -> list[HistoryView]:
        """Superseded versions of a tender, oldest first."""

        def action(ctx: RequestContext) -> list[HistoryView]:
            rows = ctx.history.list_versions(EntityKind.TENDER, tender_id)
            return [HistoryView.model_validate(row) for row in rows]

        return self._execute(
            "get_tender_history", action, self._tender_checks(tender_id, username), username=username
        )

    @staticmethod
    def _tender_checks(tender_id: str, username: str) -> Checks:
        return Checks(
            target=(EntityKind.TENDER, tender_id),
            actors=(username,),
            relationship=lambda auth: auth.require_tender_responsible(tender_id, username),
        )

    # =========================================================================
    # Bids
    # =========================================================================

    def create_bid(self, payload: BidCreate | dict[str, Any]) -> BidView:
        """Create a bid on behalf of an organization.

        Bids authored by a plain user are rejected before any other check.
        """
        data = parse_input(BidCreate, payload)
        if data.author_type == AuthorType.USER.value:
            raise errors.validation("authorType: bids can only be created on behalf of an organization")

        def action(ctx: RequestContext) -> BidView:
            author = ctx.directory.get_employee_by_id(data.author_id)
            row = ctx.versions.create(
                EntityKind.BID,
                {
                    "name": data.name,
                    "description": data.description,
                    "status": BidStatus.CREATED.value,
                    "tender_id": data.tender_id,
                    "organization_id": data.organization_id,
                    "author_id": data.author_id,
                    "author_username": author.username,
                    "author_type": data.author_type,
                },
            )
            return BidView.model_validate(row)

        checks = Checks(
            target=(EntityKind.TENDER, data.tender_id),
            actor_ids=(data.author_id,),
            relationship=lambda auth: auth.require_employee_responsible(
                data.author_id, data.organization_id
            ),
        )
        return self._execute("create_bid", action, checks)

    def get_user_bids(
        self,
        username: str,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[BidView]:
        """Every bid authored by ``username``, whatever its status."""
        page = self._page(offset, limit)
        list_filter = ListFilter(author_username=username)

        def action(ctx: RequestContext) -> list[BidView]:
            rows = ctx.store.list(EntityKind.BID, list_filter, page)
            return [BidView.model_validate(row) for row in rows]

        return self._execute("get_user_bids", action, Checks(actors=(username,)), username=username)

    def get_bids_for_tender(
        self,
        tender_id: str,
        username: str,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[BidView]:
        """Published bids on a tender, for its responsible parties."""
        page = self._page(offset, limit)
        list_filter = ListFilter(tender_id=tender_id, statuses=(BidStatus.PUBLISHED.value,))

        def action(ctx: RequestContext) -> list[BidView]:
            rows = ctx.store.list(EntityKind.BID, list_filter, page)
            return [BidView.model_validate(row) for row in rows]

        return self._execute(
            "get_bids_for_tender", action, self._tender_checks(tender_id, username), username=username
        )

    def get_bid_status(self, bid_id: str, username: str) -> BidStatus:
        def action(ctx: RequestContext) -> BidStatus:
            return BidStatus(ctx.store.get_by_id(EntityKind.BID, bid_id).status)

        checks = Checks(
            target=(EntityKind.BID, bid_id),
            actors=(username,),
            relationship=lambda auth: auth.require_bid_viewer(bid_id, username),
        )
        return self._execute("get_bid_status", action, checks, username=username)

    def update_bid_status(self, bid_id: str, status: str, username: str) -> BidView:
        new_status = _parse_enum(BidStatus, status, "status")

        def action(ctx: RequestContext) -> BidView:
            row = ctx.versions.edit(EntityKind.BID, bid_id, {"status": new_status.value})
            return BidView.model_validate(row)

        return self._execute(
            "update_bid_status",
            action,
            self._bid_responsible_checks(bid_id, username),
            username=username,
            versioned=True,
        )

    def edit_bid(self, bid_id: str, patch: BidPatch | dict[str, Any], username: str) -> BidView:
        """Apply a partial edit. Empty or missing fields are left unchanged."""
        data = parse_input(BidPatch, patch)

        def action(ctx: RequestContext) -> BidView:
            row = ctx.versions.edit(EntityKind.BID, bid_id, data.model_dump())
            return BidView.model_validate(row)

        return self._execute(
            "edit_bid",
            action,
            self._bid_author_checks(bid_id, username),
            username=username,
            versioned=True,
        )

    def rollback_bid(self, bid_id: str, version: int, username: str) -> BidView:
        """Restore the content of ``version`` as a new version."""
        target = self._version(version)

        def action(ctx: RequestContext) -> BidView:
            row = ctx.versions.rollback(EntityKind.BID, bid_id, target)
            return BidView.model_validate(row)

        checks = self._bid_author_checks(bid_id, username)
        checks.version = target
        return self._execute("rollback_bid", action, checks, username=username, versioned=True)

    def submit_bid_decision(self, bid_id: str, decision: str, username: str) -> BidView:
        new_decision = _parse_enum(BidDecision, decision, "decision")

        def action(ctx: RequestContext) -> BidView:
            row = ctx.versions.edit(EntityKind.BID, bid_id, {"decision": new_decision.value})
            return BidView.model_validate(row)

        return self._execute(
            "submit_bid_decision",
            action,
            self._bid_responsible_checks(bid_id, username),
            username=username,
            versioned=True,
        )

    def submit_bid_feedback(self, bid_id: str, feedback: str, username: str) -> BidView:
        """Leave a review on a bid. The bid itself is not modified."""
        if not feedback:
            raise errors.validation("bidFeedback: must not be empty")
        if len(feedback) > FEEDBACK_MAX:
            raise errors.validation(f"bidFeedback: must be at most {FEEDBACK_MAX} characters")

        def action(ctx: RequestContext) -> BidView:
            ctx.reviews.create(bid_id, username, feedback)
            return BidView.model_validate(ctx.store.get_by_id(EntityKind.BID, bid_id))

        return self._execute(
            "submit_bid_feedback",
            action,
            self._bid_responsible_checks(bid_id, username),
            username=username,
        )

    def get_bid_reviews(
        self,
        tender_id: str,
        author_username: str,
        requester_username: str,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[ReviewView]:
        """Reviews on bids written by ``author_username``.

        Readable by the responsible parties of ``tender_id``.
        """
        page = self._page(offset, limit)

        def action(ctx: RequestContext) -> list[ReviewView]:
            rows = ctx.reviews.list_for_bid_author(author_username, page)
            return [ReviewView.model_validate(row) for row in rows]

        checks = Checks(
            target=(EntityKind.TENDER, tender_id),
            actors=(requester_username,),
            relationship=lambda auth: auth.require_tender_responsible(tender_id, requester_username),
        )
        return self._execute("get_bid_reviews", action, checks, username=requester_username)

    def get_bid_history(self, bid_id: str, username: str) -> list[HistoryView]:
        """Superseded versions of a bid, oldest first."""

        def action(ctx: RequestContext) -> list[HistoryView]:
            rows = ctx.history.list_versions(EntityKind.BID, bid_id)
            return [HistoryView.model_validate(row) for row in rows]

        return self._execute(
            "get_bid_history", action, self._bid_author_checks(bid_id, username), username=username
        )

    @staticmethod
    def _bid_author_checks(bid_id: str, username: str) -> Checks:
        return Checks(
            target=(EntityKind.BID, bid_id),
            actors=(username,),
            relationship=lambda auth: auth.require_bid_author(bid_id, username),
        )

    @staticmethod
    def _bid_responsible_checks(bid_id: str, username: str) -> Checks:
        return Checks(
            target=(EntityKind.BID, bid_id),
            actors=(username,),
            relationship=lambda auth: auth.require_bid_responsible(bid_id, username),
        )
