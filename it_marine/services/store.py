# ==============================================================================
# DOMAIN STORE - Owner of the canonical application state
# ==============================================================================
# Holds ONE AppData snapshot. Every mutation builds a new snapshot and never
# touches the previous one, so a reader holding an old snapshot stays valid.
#
# RULES:
# - New records are PREPENDED (most recent first is the display order)
# - update / delete / status change on an unknown id is a silent no-op
# - Tickets refresh updatedAt on every mutation
# - Purchase tickets get totalPrice from the VAT calculation on submit/edit
# - Subscribers are called synchronously, once per committed snapshot, in
#   subscription order, before the mutation returns (auto-save hooks here)
# - One writer at a time: read, build, commit and notify run under _lock, so
#   two request threads never lose a record or save snapshots out of order
# ==============================================================================

from dataclasses import replace
from datetime import datetime
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from it_marine.constants import (
    ASSET_PREFIX,
    INSPECTION_IMAGE_PREFIX,
    INSPECTION_PREFIX,
    PERMANENT_STAFF_NAME,
    TICKET_PREFIX,
    WORK_LOG_PREFIX,
    build_default_data,
)
from it_marine.models import (
    AppData,
    Asset,
    AssetStatus,
    InspectionImage,
    LocationCategory,
    PurchaseTicket,
    RepairTicket,
    ShipInspection,
    TaskStatus,
    Ticket,
    TicketType,
    WorkLog,
)
from it_marine.services.pricing import calculate_vat
from it_marine.utils import generate_id, parse_timestamp, timestamp


R = TypeVar('R')
Listener = Callable[[AppData], None]

# Fields only a purchase ticket may carry
PURCHASE_FIELDS = frozenset(['company_name', 'quantity', 'price', 'is_vat_inclusive'])


def _replace_by_id(records: Tuple[R, ...], record_id: str,
                   change: Callable[[R], R]) -> Tuple[Optional[Tuple[R, ...]], Optional[R]]:
    """
    Applies change to the record with record_id.

    Returns:
        (new collection, new record), or (None, None) when the id is unknown
    """
    for index, record in enumerate(records):
        if record.id == record_id:
            updated = change(record)
            return records[:index] + (updated,) + records[index + 1:], updated
    return None, None


def _remove_by_id(records: Tuple[R, ...], record_id: str) -> Tuple[Optional[Tuple[R, ...]], Optional[R]]:
    for index, record in enumerate(records):
        if record.id == record_id:
            return records[:index] + records[index + 1:], record
    return None, None


def _with_total(ticket: Ticket) -> Ticket:
    """Recomputes totalPrice of a purchase ticket from quantity, price and VAT mode."""
    if isinstance(ticket, PurchaseTicket):
        breakdown = calculate_vat(ticket.quantity, ticket.price, ticket.is_vat_inclusive)
        return replace(ticket, total_price=breakdown.total_price)
    return ticket


class DomainStore:
    """
    State container for work logs, tickets, assets and ship inspections.

    Usage:
        store = DomainStore(repo.load())
        store.subscribe(repo.save)
        log = store.add_work_log(date='2025-06-01', time='09:00', location='...',
                                 task_description='...')
        store.update_work_log_status(log.id, TaskStatus.COMPLETED)
    """

    def __init__(
        self,
        initial: Optional[AppData] = None,
        clock: Callable[[], datetime] = None,
        operator: str = PERMANENT_STAFF_NAME
    ):
        """
        Args:
            initial: Starting snapshot (default dataset when None)
            clock: Returns "now"; injectable for tests
            operator: Name stamped on new work logs, assets and inspections
        """
        self._clock = clock or datetime.now
        self._data = initial if initial is not None else build_default_data(self._clock())
        self._operator = operator
        self._listeners: List[Listener] = []
        # Reentrant: a listener may read the store while a mutation holds it
        self._lock = threading.RLock()

    # =========================================================================
    # SNAPSHOT AND SUBSCRIPTIONS
    # =========================================================================

    @property
    def snapshot(self) -> AppData:
        """Current immutable state."""
        return self._data

    @property
    def operator(self) -> str:
        return self._operator

    def now(self) -> datetime:
        return self._clock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registers listener(snapshot), called after every committed change.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, data: AppData) -> AppData:
        # Callers hold _lock, so listeners see snapshots in commit order
        self._data = data
        for listener in list(self._listeners):
            listener(data)
        return data

    def replace(self, data: AppData) -> AppData:
        """Swaps in a whole new state (backup import)."""
        with self._lock:
            return self._commit(data)

    def reset(self) -> AppData:
        """Restores the default dataset."""
        with self._lock:
            return self._commit(build_default_data(self._clock()))

    def _today(self) -> str:
        return self._clock().strftime('%Y-%m-%d')

    def _stamp(self, created_at: Optional[str] = None) -> str:
        """Current timestamp, never earlier than created_at."""
        now = self._clock()
        created = parse_timestamp(created_at)
        if created is not None and created > now:
            return created_at
        return timestamp(now)

    @staticmethod
    def _ids(records: Iterable[Any]) -> set:
        return {r.id for r in records}

    def _change(self, collection: str, record_id: str, change: Callable[[R], R]) -> Optional[R]:
        """
        Replaces one record of a collection under the lock.

        Returns:
            The stored record, or None when the id does not exist
        """
        with self._lock:
            data = self._data
            records, stored = _replace_by_id(getattr(data, collection), record_id, change)
            if records is None:
                return None
            self._commit(replace(data, **{collection: records}))
            return stored

    def _remove(self, collection: str, record_id: str) -> Optional[R]:
        with self._lock:
            data = self._data
            records, removed = _remove_by_id(getattr(data, collection), record_id)
            if records is None:
                return None
            self._commit(replace(data, **{collection: records}))
            return removed

    def _prepend(self, collection: str, build: Callable[[AppData], R]) -> R:
        """Builds a record from the current snapshot and puts it first."""
        with self._lock:
            data = self._data
            record = build(data)
            self._commit(replace(data, **{collection: (record,) + getattr(data, collection)}))
            return record

    # =========================================================================
    # WORK LOGS
    # =========================================================================

    def add_work_log(
        self,
        date: str,
        time: str,
        location: str,
        task_description: str,
        status: TaskStatus = TaskStatus.PENDING
    ) -> WorkLog:
        """
        Creates a work log signed by the operator and prepends it.

        Returns:
            The created WorkLog
        """
        status = TaskStatus(status)
        return self._prepend('work_logs', lambda data: WorkLog(
            id=generate_id(WORK_LOG_PREFIX, self._ids(data.work_logs)),
            date=date,
            time=time,
            staff_name=self._operator,
            location=location,
            task_description=task_description,
            status=status,
        ))

    def update_work_log(self, updated: WorkLog) -> Optional[WorkLog]:
        """
        Replaces the work log with the same id.

        Returns:
            The stored record, or None when the id does not exist
        """
        return self._change('work_logs', updated.id, lambda _: updated)

    def update_work_log_status(self, log_id: str, status: TaskStatus) -> Optional[WorkLog]:
        """Changes only the status of a work log."""
        status = TaskStatus(status)
        return self._change('work_logs', log_id, lambda log: replace(log, status=status))

    def delete_work_log(self, log_id: str) -> Optional[WorkLog]:
        """Removes a work log. Returns it, or None when it did not exist."""
        return self._remove('work_logs', log_id)

    # =========================================================================
    # TICKETS
    # =========================================================================

    def add_ticket(
        self,
        ticket_type: Union[TicketType, str],
        subject: str,
        details: str,
        location: str,
        status: TaskStatus = TaskStatus.PENDING,
        images: Iterable[str] = (),
        requester_name: Optional[str] = None,
        requester_position: Optional[str] = None,
        **purchase_fields: Any
    ) -> Ticket:
        """
        Creates a repair or purchase ticket and prepends it.

        Args:
            ticket_type: Repair or Purchase
            purchase_fields: company_name, quantity, price, is_vat_inclusive
                (Purchase only)

        Returns:
            The created ticket; for purchases totalPrice is already computed

        Raises:
            ValueError: Purchase fields given for a repair ticket, or an
                unknown field name
        """
        ticket_type = TicketType(ticket_type)
        unknown = set(purchase_fields) - PURCHASE_FIELDS
        if unknown:
            raise ValueError(f"Unknown ticket fields: {', '.join(sorted(unknown))}")
        if purchase_fields and ticket_type != TicketType.PURCHASE:
            raise ValueError('Purchase fields require a Purchase ticket')
        status = TaskStatus(status)
        images = tuple(images or ())

        def build(data: AppData) -> Ticket:
            now = self._stamp()
            common = dict(
                id=generate_id(TICKET_PREFIX, self._ids(data.tickets)),
                subject=subject,
                details=details,
                location=location,
                status=status,
                created_at=now,
                updated_at=now,
                images=images,
                requester_name=requester_name,
                requester_position=requester_position,
            )
            if ticket_type == TicketType.PURCHASE:
                return _with_total(PurchaseTicket(**common, **purchase_fields))
            return RepairTicket(**common)

        return self._prepend('tickets', build)

    def update_ticket(self, updated: Ticket) -> Optional[Ticket]:
        """
        Replaces the ticket with the same id.

        updatedAt is always refreshed; a purchase ticket's totalPrice is
        recomputed from the submitted quantity, price and VAT mode.
        """
        def change(current: Ticket) -> Ticket:
            return _with_total(replace(
                updated,
                created_at=current.created_at,
                updated_at=self._stamp(current.created_at),
            ))

        return self._change('tickets', updated.id, change)

    def update_ticket_status(self, ticket_id: str, status: TaskStatus) -> Optional[Ticket]:
        """Changes only the status (and updatedAt) of a ticket."""
        status = TaskStatus(status)
        return self._change(
            'tickets', ticket_id,
            lambda t: replace(t, status=status, updated_at=self._stamp(t.created_at))
        )

    def delete_ticket(self, ticket_id: str) -> Optional[Ticket]:
        return self._remove('tickets', ticket_id)

    # =========================================================================
    # ASSETS
    # =========================================================================

    def add_asset(
        self,
        name: str,
        serial_number: str,
        category: str,
        location_category: Union[LocationCategory, str],
        location_name: str,
        last_checked: Optional[str] = None,
        staff_name: Optional[str] = None,
        position: Optional[str] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None
    ) -> Asset:
        """
        Registers a new asset with status Active and prepends it.

        last_checked defaults to today and staff_name to the operator.
        """
        location_category = LocationCategory(location_category)
        return self._prepend('assets', lambda data: Asset(
            id=generate_id(ASSET_PREFIX, self._ids(data.assets)),
            name=name,
            serial_number=serial_number,
            category=category,
            location_category=location_category,
            location_name=location_name,
            status=AssetStatus.ACTIVE,
            last_checked=last_checked or self._today(),
            staff_name=staff_name or self._operator,
            position=position,
            description=description,
            image_url=image_url,
        ))

    def update_asset(self, updated: Asset) -> Optional[Asset]:
        return self._change('assets', updated.id, lambda _: updated)

    def update_asset_status(self, asset_id: str, status: AssetStatus) -> Optional[Asset]:
        status = AssetStatus(status)
        return self._change('assets', asset_id, lambda a: replace(a, status=status))

    def delete_asset(self, asset_id: str) -> Optional[Asset]:
        return self._remove('assets', asset_id)

    # =========================================================================
    # SHIP INSPECTIONS
    # =========================================================================

    def _slots(self, images: Iterable[Union[InspectionImage, Dict[str, Any]]]) -> Tuple[InspectionImage, ...]:
        """Normalizes checklist slots and gives an id to those without one."""
        slots = []
        taken = set()
        for image in images or ():
            if not isinstance(image, InspectionImage):
                image = InspectionImage.from_dict(image)
            if not image.id or image.id in taken:
                image = replace(image, id=generate_id(INSPECTION_IMAGE_PREFIX, taken))
            taken.add(image.id)
            slots.append(image)
        return tuple(slots)

    def add_inspection(
        self,
        ship_name: str,
        images: Iterable[Union[InspectionImage, Dict[str, Any]]] = ()
    ) -> ShipInspection:
        """Records an inspection dated today, signed by the operator, and prepends it."""
        slots = self._slots(images)
        return self._prepend('ship_inspections', lambda data: ShipInspection(
            id=generate_id(INSPECTION_PREFIX, self._ids(data.ship_inspections)),
            ship_name=ship_name,
            date=self._today(),
            inspector=self._operator,
            images=slots,
        ))

    def update_inspection(self, updated: ShipInspection) -> Optional[ShipInspection]:
        """Replaces a whole inspection (slots included)."""
        updated = replace(updated, images=self._slots(updated.images))
        return self._change('ship_inspections', updated.id, lambda _: updated)

    def delete_inspection(self, inspection_id: str) -> Optional[ShipInspection]:
        return self._remove('ship_inspections', inspection_id)
