# ==============================================================================
# DERIVED VIEWS - Filtering, grouping and dashboard figures
# ==============================================================================
# Pure functions over a snapshot. Nothing here mutates state.
#
# DATE USED BY THE FILTER:
# - Work log    → date        (the only type that honours the day filter)
# - Ticket      → createdAt
# - Asset       → lastChecked
# - Inspection  → date
#
# Months are compared as two-digit strings: startMonth="11", endMonth="02"
# matches nothing (no wrap across the year boundary).
# ==============================================================================

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, TypeVar

from it_marine.models import (
    AppData,
    Asset,
    AssetStatus,
    BaseTicket,
    Filter,
    LocationCategory,
    ShipInspection,
    TaskStatus,
    TERMINAL_STATUSES,
    TicketType,
    WorkLog,
)
from it_marine.performance_logger import profile_function
from it_marine.utils import parse_timestamp


R = TypeVar('R')

OVERDUE_AFTER = timedelta(hours=24)


# ==============================================================================
# RECORD ACCESSORS
# ==============================================================================

def record_date_text(record: Any) -> str:
    """Date string the filter and the date grouping look at."""
    if isinstance(record, (WorkLog, ShipInspection)):
        return record.date
    if isinstance(record, BaseTicket):
        return record.created_at
    if isinstance(record, Asset):
        return record.last_checked
    return ''


def search_fields(record: Any) -> Tuple[Optional[str], ...]:
    """Fields searched by Filter.search_text for each record type."""
    if isinstance(record, WorkLog):
        return (record.location, record.task_description)
    if isinstance(record, BaseTicket):
        return (record.subject, record.details, record.location)
    if isinstance(record, Asset):
        return (record.name, record.serial_number, record.category,
                record.location_name, record.staff_name, record.position)
    if isinstance(record, ShipInspection):
        return (record.ship_name, record.inspector)
    return ()


# ==============================================================================
# PREDICATES
# ==============================================================================

def matches_text(record: Any, flt: Filter) -> bool:
    """Case-insensitive substring match on the record's searchable fields."""
    needle = flt.search_text.lower()
    if not needle:
        return True
    return any(needle in (value or '').lower() for value in search_fields(record))


def matches_date(record: Any, flt: Filter) -> bool:
    """
    Year equal, month inside [start_month, end_month], and (work logs only)
    day equal unless the filter day is 'all'. Unparsable dates never match.
    """
    when = parse_timestamp(record_date_text(record))
    if when is None:
        return False
    if str(when.year) != flt.year:
        return False
    month = f'{when.month:02d}'
    if not (flt.start_month <= month <= flt.end_month):
        return False
    if isinstance(record, WorkLog) and not flt.any_day:
        return f'{when.day:02d}' == flt.day
    return True


@profile_function(name='Filter records')
def filter_records(records: Iterable[R], flt: Filter) -> List[R]:
    """
    Records satisfying both the date and the text predicate.

    Original relative order is preserved.
    """
    return [r for r in records if matches_date(r, flt) and matches_text(r, flt)]


def filter_work_logs(logs: Iterable[WorkLog], flt: Filter) -> List[WorkLog]:
    return filter_records(logs, flt)


def filter_tickets(tickets: Iterable[BaseTicket], flt: Filter,
                   ticket_type: Optional[TicketType] = None) -> List[BaseTicket]:
    """Filters tickets, optionally keeping a single type (repairs / purchases)."""
    if ticket_type is not None:
        ticket_type = TicketType(ticket_type)
        tickets = [t for t in tickets if t.type == ticket_type]
    return filter_records(tickets, flt)


def filter_assets(assets: Iterable[Asset], flt: Filter) -> List[Asset]:
    return filter_records(assets, flt)


def filter_inspections(inspections: Iterable[ShipInspection], flt: Filter) -> List[ShipInspection]:
    """Filtered inspections, newest date first (stable within a date)."""
    return sorted(filter_records(inspections, flt), key=lambda i: i.date, reverse=True)


# ==============================================================================
# GROUPING (folder views)
# ==============================================================================

class DateGroup(NamedTuple):
    date: str
    records: List[Any]


class NameGroup(NamedTuple):
    name: str
    records: List[Any]
    total: int
    active: int
    maintenance: int
    lost: int


def _date_key(record: Any) -> str:
    return record_date_text(record)[:10]


def group_by_date(records: Iterable[R]) -> List[DateGroup]:
    """
    Groups records by calendar date, most recent date first.
    Order inside a group follows the input order.
    """
    groups: Dict[str, List[R]] = {}
    for record in records:
        groups.setdefault(_date_key(record), []).append(record)
    return [DateGroup(date, groups[date]) for date in sorted(groups, reverse=True)]


def group_by_name(assets: Iterable[Asset]) -> List[NameGroup]:
    """Groups assets by name (ascending) with per-status counts."""
    groups: Dict[str, List[Asset]] = {}
    for asset in assets:
        groups.setdefault(asset.name, []).append(asset)

    result = []
    for name in sorted(groups):
        members = groups[name]
        result.append(NameGroup(
            name=name,
            records=members,
            total=len(members),
            active=sum(1 for a in members if a.status == AssetStatus.ACTIVE),
            maintenance=sum(1 for a in members if a.status == AssetStatus.MAINTENANCE),
            lost=sum(1 for a in members if a.status == AssetStatus.LOST),
        ))
    return result


# ==============================================================================
# AGGREGATION (dashboard widgets, always over the full asset list)
# ==============================================================================

class AssetSummary(NamedTuple):
    counts_by_category: Dict[str, int]
    counts_by_location_category: Dict[str, int]
    counts_by_status: Dict[str, int]

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            'categories': dict(self.counts_by_category),
            'locations': dict(self.counts_by_location_category),
            'status': dict(self.counts_by_status),
        }


@profile_function(name='Summarize assets')
def summarize_assets(assets: Iterable[Asset]) -> AssetSummary:
    """
    Single pass producing three independent tallies.
    Every asset status starts at 0 so the widget always shows all four.
    """
    categories: Counter = Counter()
    locations: Counter = Counter()
    status: Dict[str, int] = {s.value: 0 for s in AssetStatus}
    for asset in assets:
        categories[asset.category] += 1
        locations[asset.location_category.value] += 1
        status[asset.status.value] = status.get(asset.status.value, 0) + 1
    return AssetSummary(dict(categories), dict(locations), status)


class DrillDownRow(NamedTuple):
    location_name: str
    count: int
    location_category: LocationCategory
    representative_staff_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'locationName': self.location_name,
            'count': self.count,
            'locationCategory': self.location_category.value,
            'staffName': self.representative_staff_name,
        }


def drill_down(assets: Iterable[Asset], category: str) -> List[DrillDownRow]:
    """
    Assets of one category per location, largest count first.

    The staff name shown for a location is the one of the first asset met
    for that location, not an aggregate.
    """
    counts: Dict[str, int] = {}
    first_seen: Dict[str, Asset] = {}
    for asset in assets:
        if asset.category != category:
            continue
        if asset.location_name not in first_seen:
            first_seen[asset.location_name] = asset
            counts[asset.location_name] = 0
        counts[asset.location_name] += 1

    rows = [
        DrillDownRow(
            location_name=name,
            count=counts[name],
            location_category=first.location_category,
            representative_staff_name=first.staff_name,
        )
        for name, first in first_seen.items()
    ]
    rows.sort(key=lambda row: row.count, reverse=True)
    return rows


class DashboardCounts(NamedTuple):
    pending_repairs: int
    waiting_purchases: int
    total_assets: int
    completed_work_logs: int

    def to_dict(self) -> Dict[str, int]:
        return {
            'pendingRepairs': self.pending_repairs,
            'waitingPurchases': self.waiting_purchases,
            'totalAssets': self.total_assets,
            'completedWorkLogs': self.completed_work_logs,
        }


def dashboard_counts(data: AppData) -> DashboardCounts:
    """Figures shown on the four dashboard cards."""
    return DashboardCounts(
        pending_repairs=sum(
            1 for t in data.tickets
            if t.type == TicketType.REPAIR and t.status != TaskStatus.COMPLETED
        ),
        waiting_purchases=sum(
            1 for t in data.tickets
            if t.type == TicketType.PURCHASE and t.status == TaskStatus.WAITING_PURCHASE
        ),
        total_assets=len(data.assets),
        completed_work_logs=sum(1 for w in data.work_logs if w.status == TaskStatus.COMPLETED),
    )


# ==============================================================================
# OVERDUE FLAG (display only, never changes state)
# ==============================================================================

def _started_at(record: Any) -> Optional[datetime]:
    if isinstance(record, WorkLog):
        if record.time:
            return parse_timestamp(f'{record.date}T{record.time}')
        return parse_timestamp(record.date)
    if isinstance(record, BaseTicket):
        return parse_timestamp(record.created_at)
    return None


def is_overdue(record: Any, now: Optional[datetime] = None) -> bool:
    """
    True when a work log or ticket is still open (not Completed/Cancelled)
    and more than 24 hours have passed since its date/time.
    """
    status = getattr(record, 'status', None)
    if not isinstance(status, TaskStatus) or status in TERMINAL_STATUSES:
        return False
    started = _started_at(record)
    if started is None:
        return False
    return (now or datetime.now()) - started > OVERDUE_AFTER


def overdue_ids(records: Sequence[Any], now: Optional[datetime] = None) -> List[str]:
    return [r.id for r in records if is_overdue(r, now)]
