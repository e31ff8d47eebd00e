"""
Main Orchestrator for Paycal

This module ties the pure engine to storage and auditing, and defines
the end-to-end mutation flows:
1. Add (event -> expand -> merge -> reschedule -> save)
2. Update (replace -> reschedule -> save)
3. Delete (redistribute split -> remove -> reschedule -> save)

DESIGN DECISION: The engine never holds state. Every mutation loads the
user's snapshot, builds a new one, re-runs the reschedule pass over the
WHOLE set and writes the whole set back. There is no listener model:
whoever changes the calendar goes through here and the pass re-runs.

Mutations for the same user are serialised with a per-user lock so two
concurrent requests cannot interleave load/save.
"""

import asyncio
import datetime as dt
import weakref
from decimal import Decimal
from typing import Callable, Optional, Union
from uuid import UUID

from paycal.audit import AuditLogger, configure_logging, create_correlation_id
from paycal.config import get_settings
from paycal.engine import (
    debt_bills,
    delete_with_redistribution,
    expand,
    expand_all,
    parse_split_title,
    reschedule_with_report,
    running_balance,
    savings_bill,
    should_offer_split,
    split_bill,
    subscription_bills,
    vacation_savings,
)
from paycal.models.event import CalendarEvent, new_event_id
from paycal.models.views import RescheduleReport
from paycal.services.storage import (
    EventStorageInterface,
    InMemoryAuditStorage,
    InMemoryEventStorage,
    JsonFileEventStorage,
    NotFoundError,
    StorageError,
)
from paycal.validation import coerce_events


LINKAGE_FIELDS = ("debt_id", "subscription_id", "vacation_plan_id", "recurring_group_id")


class CalendarService:
    """
    Orchestrates every change to a user's calendar.

    Flow for each mutation:
    1. Lock the user
    2. Load the snapshot
    3. Apply the change with pure engine functions
    4. Reschedule the full set
    5. Save the full set, audit what happened
    """

    def __init__(
        self,
        storage: EventStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        occurrence_count: Optional[int] = None,
        lookahead_months: Optional[int] = None,
        id_factory: Optional[Callable[[], str]] = None,
        today: Optional[Callable[[], dt.date]] = None,
    ):
        engine_settings = get_settings().engine

        self._storage = storage
        self._audit_logger = audit_logger
        self._occurrence_count = occurrence_count or engine_settings.occurrence_count
        self._lookahead_months = lookahead_months or engine_settings.lookahead_months
        self._split_threshold = Decimal(str(engine_settings.split_suggestion_threshold))
        self._default_savings_percentage = Decimal(
            str(engine_settings.default_savings_percentage)
        )
        self._id_factory = id_factory or new_event_id
        self._today = today or dt.date.today
        # Locks live only while a mutation holds or awaits them
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def _commit(
        self,
        user_id: str,
        snapshot: list[CalendarEvent],
        correlation_id: UUID,
    ) -> RescheduleReport:
        """Reschedule the full snapshot, persist it and audit the outcome."""
        original_dates = {event.id: event.date.isoformat() for event in snapshot}
        report = reschedule_with_report(snapshot, self._lookahead_months)

        try:
            await self._storage.replace_events(user_id, report.events)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_failed(
                    user_id=user_id,
                    operation="replace_events",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_reschedule_report(
                user_id=user_id,
                report=report,
                original_dates=original_dates,
                correlation_id=correlation_id,
            )
        return report

    # =========================================================================
    # READS
    # =========================================================================

    async def get_events(self, user_id: str) -> list[CalendarEvent]:
        return await self._storage.list_events(user_id)

    async def balance_at(self, user_id: str, on_date: dt.date) -> Decimal:
        """Projected balance at the end of `on_date`."""
        return running_balance(await self._storage.list_events(user_id), on_date)

    def offers_split(self, event: CalendarEvent) -> bool:
        """Whether the UI should offer to split this bill across paydays."""
        return should_offer_split(event, self._split_threshold)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def add_event(
        self,
        user_id: str,
        event: Union[CalendarEvent, dict],
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Add an event, expanding it first if it recurs.

        Raises:
            MalformedEventError: the record does not validate
            InvalidFrequencyError: recurring with an unusable frequency
        """
        correlation_id = correlation_id or create_correlation_id()
        event = coerce_events([event])[0]
        occurrences = expand(event, self._occurrence_count, self._id_factory)

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            coerce_events(current + occurrences)

            if self._audit_logger:
                await self._audit_logger.log_event_added(
                    user_id=user_id,
                    event_id=event.id,
                    event_type=event.type.value,
                    title=event.title,
                    occurrences=len(occurrences),
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, current + occurrences, correlation_id)

    async def add_payday(
        self,
        user_id: str,
        payday: Union[CalendarEvent, dict],
        create_savings_bill: bool = False,
        savings_percentage: Optional[Decimal] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Add a payday and, optionally, a same-day "Savings" bill for a
        share of it. Both are expanded if the payday recurs.
        """
        correlation_id = correlation_id or create_correlation_id()
        payday = coerce_events([payday])[0]
        new_events = [payday]

        savings = None
        if create_savings_bill:
            if savings_percentage is None and payday.savings_percentage is None:
                savings_percentage = self._default_savings_percentage
            savings = savings_bill(payday, savings_percentage, self._id_factory)
            new_events.append(savings)

        occurrences = expand_all(new_events, self._occurrence_count, self._id_factory)

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            coerce_events(current + occurrences)

            if self._audit_logger:
                await self._audit_logger.log_event_added(
                    user_id=user_id,
                    event_id=payday.id,
                    event_type=payday.type.value,
                    title=payday.title,
                    occurrences=len(occurrences),
                    correlation_id=correlation_id,
                )
                if savings is not None:
                    await self._audit_logger.log_savings_created(
                        user_id=user_id,
                        event_id=savings.id,
                        payday_id=payday.id,
                        amount=savings.amount,
                        correlation_id=correlation_id,
                    )
            return await self._commit(user_id, current + occurrences, correlation_id)

    async def add_split_bill(
        self,
        user_id: str,
        title: str,
        amount: Decimal,
        due_date: dt.date,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Add a bill as instalments on each payday before its due date.

        Raises:
            NoPaydaysAvailableError: no payday between tomorrow and due_date
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            parts = split_bill(
                title,
                Decimal(amount),
                due_date,
                current,
                self._today(),
                self._id_factory,
            )

            if self._audit_logger:
                await self._audit_logger.log_split_created(
                    user_id=user_id,
                    title=title,
                    total=Decimal(amount),
                    parts=len(parts),
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, current + parts, correlation_id)

    async def add_subscription(
        self,
        user_id: str,
        name: str,
        amount: Decimal,
        due_day: int,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """Add twelve months of bills for a subscription."""
        bills = subscription_bills(
            name,
            Decimal(amount),
            due_day,
            self._today(),
            subscription_id,
            self._id_factory,
        )
        return await self._add_generated(user_id, bills, f"{name} Subscription", correlation_id)

    async def add_debt(
        self,
        user_id: str,
        name: str,
        balance: Decimal,
        annual_rate_percent: Decimal,
        minimum_payment: Decimal,
        due_day: int,
        debt_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """Add minimum-payment bills until the debt is paid off."""
        bills = debt_bills(
            name,
            Decimal(balance),
            Decimal(annual_rate_percent),
            Decimal(minimum_payment),
            due_day,
            self._today(),
            debt_id,
            self._id_factory,
        )
        return await self._add_generated(user_id, bills, f"{name} Payment", correlation_id)

    async def add_vacation_plan(
        self,
        user_id: str,
        destination: str,
        cost: Decimal,
        start_date: dt.date,
        vacation_plan_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Save toward a trip on every payday until it starts.

        Raises:
            NoPaydaysAvailableError: no payday between today and start_date
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            bills = vacation_savings(
                destination,
                Decimal(cost),
                start_date,
                current,
                self._today(),
                vacation_plan_id,
                self._id_factory,
            )
            if self._audit_logger:
                await self._audit_logger.log_split_created(
                    user_id=user_id,
                    title=f"Vacation - {destination}",
                    total=Decimal(cost),
                    parts=len(bills),
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, current + bills, correlation_id)

    async def _add_generated(
        self,
        user_id: str,
        events: list[CalendarEvent],
        title: str,
        correlation_id: Optional[UUID],
    ) -> RescheduleReport:
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            if self._audit_logger:
                await self._audit_logger.log_event_added(
                    user_id=user_id,
                    event_id=events[0].id if events else "",
                    event_type="bill",
                    title=title,
                    occurrences=len(events),
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, current + events, correlation_id)

    async def update_event(
        self,
        user_id: str,
        event: Union[CalendarEvent, dict],
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Replace an existing event (matched by id). The updated event is
        not re-expanded.

        Raises:
            NotFoundError: no event with that id for the user
            MalformedEventError: the record does not validate
        """
        correlation_id = correlation_id or create_correlation_id()
        event = coerce_events([event])[0]

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            existing = next((e for e in current if e.id == event.id), None)
            if existing is None:
                raise NotFoundError(f"Event {event.id} not found for user {user_id}")

            before = existing.model_dump()
            after = event.model_dump()
            changed = sorted(key for key in after if before.get(key) != after[key])

            snapshot = [event if e.id == event.id else e for e in current]

            if self._audit_logger:
                await self._audit_logger.log_event_updated(
                    user_id=user_id,
                    event_id=event.id,
                    changed_fields=changed,
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, snapshot, correlation_id)

    async def delete_event(
        self,
        user_id: str,
        event_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Delete one event. Deleting a split instalment first spreads its
        amount over the remaining instalments of the same group.

        Raises:
            NotFoundError: no event with that id for the user
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            deleted = next((e for e in current if e.id == event_id), None)
            if deleted is None:
                raise NotFoundError(f"Event {event_id} not found for user {user_id}")

            snapshot, siblings = delete_with_redistribution(current, event_id)

            if self._audit_logger:
                await self._audit_logger.log_event_deleted(
                    user_id=user_id,
                    event_id=event_id,
                    title=deleted.title,
                    correlation_id=correlation_id,
                )
                if siblings:
                    parsed = parse_split_title(deleted.title)
                    await self._audit_logger.log_split_redistributed(
                        user_id=user_id,
                        deleted_id=event_id,
                        base_title=parsed.base if parsed else deleted.title,
                        sibling_ids=[s.id for s in siblings],
                        correlation_id=correlation_id,
                    )
            return await self._commit(user_id, snapshot, correlation_id)

    async def delete_recurring_series(
        self,
        user_id: str,
        title: str,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """Delete every recurring event with exactly this title."""
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            snapshot = [
                e for e in current
                if not (e.title == title and e.is_recurring)
            ]

            if self._audit_logger:
                await self._audit_logger.log_series_deleted(
                    user_id=user_id,
                    title=title,
                    removed=len(current) - len(snapshot),
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, snapshot, correlation_id)

    async def delete_linked_events(
        self,
        user_id: str,
        field: str,
        value: str,
        correlation_id: Optional[UUID] = None,
    ) -> RescheduleReport:
        """
        Delete every event linked to a debt, subscription, vacation plan
        or recurring group, e.g. delete_linked_events(uid, "debt_id", debt.id).
        """
        if field not in LINKAGE_FIELDS:
            raise ValueError(f"Unknown linkage field {field!r}; expected one of {LINKAGE_FIELDS}")
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock_for(user_id):
            current = await self._storage.list_events(user_id)
            snapshot = [e for e in current if getattr(e, field) != value]

            if self._audit_logger:
                await self._audit_logger.log_series_deleted(
                    user_id=user_id,
                    title=f"{field}={value}",
                    removed=len(current) - len(snapshot),
                    correlation_id=correlation_id,
                )
            return await self._commit(user_id, snapshot, correlation_id)


def create_app_components(
    use_storage: bool = True,
) -> tuple[CalendarService, EventStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for an in-memory calendar.

    Returns:
        (calendar_service, event_storage)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    storage_settings = settings.storage
    if use_storage and storage_settings.backend == "json":
        event_storage: EventStorageInterface = JsonFileEventStorage(
            storage_settings.snapshot_path
        )
    else:
        event_storage = InMemoryEventStorage()

    audit_logger = AuditLogger(InMemoryAuditStorage())
    engine_settings = settings.engine

    service = CalendarService(
        storage=event_storage,
        audit_logger=audit_logger,
        occurrence_count=engine_settings.occurrence_count,
        lookahead_months=engine_settings.lookahead_months,
    )
    return service, event_storage
