# ==============================================================================
# DOMAIN ENTITIES - Dataclass definitions
# ==============================================================================
# Each entity is one kind of record kept by the IT department.
# Entities are frozen: a snapshot of AppData can be handed to any reader and
# it stays valid until that reader fetches a new one.
#
# PERSISTED FORMAT:
# JSON keys keep the camelCase names used by the exported backups
# (workLogs, staffName, createdAt, ...) so old backups stay importable.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple, Union, ClassVar
from enum import Enum


# ==============================================================================
# ENUMERATIONS - Valid states and types
# ==============================================================================

class TaskStatus(str, Enum):
    """Status of a work log or a ticket."""
    PENDING = "Pending"
    WAITING_PURCHASE = "Waiting Purchase"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# A record in one of these states is never flagged as overdue
TERMINAL_STATUSES = frozenset([TaskStatus.COMPLETED, TaskStatus.CANCELLED])


class TicketType(str, Enum):
    """Ticket kinds. Only PURCHASE tickets carry pricing fields."""
    REPAIR = "Repair"
    PURCHASE = "Purchase"


class LocationCategory(str, Enum):
    """Where an asset lives."""
    SHIP = "Ship"
    PORT = "Port"
    OFFICE = "Office"
    SHIPYARD = "Shipyard"
    WAT_RAJSINGKORN = "Wat Rajsingkorn"
    GAS_STATION = "Gas Station"


class AssetStatus(str, Enum):
    """Lifecycle status of an asset. No automatic transitions exist."""
    ACTIVE = "Active"
    MAINTENANCE = "Maintenance"
    RETIRED = "Retired"
    LOST = "Lost"


class InspectionStatus(str, Enum):
    """Status of one equipment slot in a ship inspection."""
    NORMAL = "Normal"
    BROKEN = "Broken"
    LOST = "Lost"
    CLAIMING = "Claiming"
    WAITING_PURCHASE = "WaitingPurchase"


def _to_enum(enum_cls, value, default):
    """Converts a raw value into enum_cls, falling back to default."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _optional_enum(enum_cls, value):
    if value is None:
        return None
    return _to_enum(enum_cls, value, None)


def _text(data: Dict[str, Any], key: str) -> str:
    """Required text field; a missing key or an explicit null becomes ''."""
    value = data.get(key)
    return '' if value is None else str(value)


def _put_optional(d: Dict[str, Any], key: str, value: Any) -> None:
    """Adds key to d only when value is not None."""
    if value is not None:
        d[key] = value.value if isinstance(value, Enum) else value


# ==============================================================================
# WORK LOGS
# ==============================================================================

@dataclass(frozen=True)
class WorkLog:
    """
    One task performed by field staff on a given date and time.

    Attributes:
        id: Unique identifier (wl-...)
        date: Calendar date YYYY-MM-DD
        time: Time of day hh:mm
        staff_name: Who did the work (fixed operator on creation)
        location: Free text location
        task_description: What was done
        status: Pending / In Progress / Completed
    """
    id: str
    date: str
    time: str
    staff_name: str
    location: str
    task_description: str
    status: TaskStatus = TaskStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date,
            'time': self.time,
            'staffName': self.staff_name,
            'location': self.location,
            'taskDescription': self.task_description,
            'status': self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkLog':
        return cls(
            id=_text(data, 'id'),
            date=_text(data, 'date'),
            time=_text(data, 'time'),
            staff_name=_text(data, 'staffName'),
            location=_text(data, 'location'),
            task_description=_text(data, 'taskDescription'),
            status=_to_enum(TaskStatus, data.get('status'), TaskStatus.PENDING),
        )


# ==============================================================================
# TICKETS - Repair / Purchase variants
# ==============================================================================

@dataclass(frozen=True)
class BaseTicket:
    """
    Fields shared by both ticket variants.

    Attributes:
        id: Unique identifier (tk-...)
        subject: Short title
        details: Free text description of the fault
        location: Where the fault is
        status: Current TaskStatus
        created_at: ISO timestamp of creation
        updated_at: ISO timestamp of the last mutation (>= created_at)
        images: Inline JPEG data URIs
        requester_name: Person asking for the repair
        requester_position: Their position
    """
    id: str
    subject: str
    details: str
    location: str
    status: TaskStatus
    created_at: str
    updated_at: str
    images: Tuple[str, ...] = ()
    requester_name: Optional[str] = None
    requester_position: Optional[str] = None

    type: ClassVar[TicketType]

    def _base_dict(self) -> Dict[str, Any]:
        d = {
            'id': self.id,
            'type': self.type.value,
            'subject': self.subject,
            'details': self.details,
            'location': self.location,
            'status': self.status.value,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }
        if self.images:
            d['images'] = list(self.images)
        _put_optional(d, 'requesterName', self.requester_name)
        _put_optional(d, 'requesterPosition', self.requester_position)
        return d

    def to_dict(self) -> Dict[str, Any]:
        return self._base_dict()

    @staticmethod
    def _base_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
        created_at = _text(data, 'createdAt')
        return {
            'id': _text(data, 'id'),
            'subject': _text(data, 'subject'),
            'details': _text(data, 'details'),
            'location': _text(data, 'location'),
            'status': _to_enum(TaskStatus, data.get('status'), TaskStatus.PENDING),
            'created_at': created_at,
            'updated_at': data.get('updatedAt') or created_at,
            'images': tuple(data.get('images') or ()),
            'requester_name': data.get('requesterName'),
            'requester_position': data.get('requesterPosition'),
        }


@dataclass(frozen=True)
class RepairTicket(BaseTicket):
    """Repair request raised for a piece of equipment."""

    type: ClassVar[TicketType] = TicketType.REPAIR

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RepairTicket':
        return cls(**cls._base_kwargs(data))


@dataclass(frozen=True)
class PurchaseTicket(BaseTicket):
    """
    Purchase request. Adds vendor and pricing fields.

    total_price is never edited on its own: it is the grand total of
    quantity * price under the VAT mode, computed by services.pricing.
    """
    company_name: str = ''
    quantity: float = 0
    price: float = 0.0
    total_price: float = 0.0
    is_vat_inclusive: bool = False

    type: ClassVar[TicketType] = TicketType.PURCHASE

    def to_dict(self) -> Dict[str, Any]:
        d = self._base_dict()
        d.update({
            'companyName': self.company_name,
            'quantity': self.quantity,
            'price': self.price,
            'totalPrice': self.total_price,
            'isVatInclusive': self.is_vat_inclusive,
        })
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PurchaseTicket':
        return cls(
            company_name=_text(data, 'companyName'),
            quantity=data.get('quantity') or 0,
            price=data.get('price') or 0.0,
            total_price=data.get('totalPrice') or 0.0,
            is_vat_inclusive=bool(data.get('isVatInclusive', False)),
            **cls._base_kwargs(data)
        )


Ticket = Union[RepairTicket, PurchaseTicket]


def ticket_from_dict(data: Dict[str, Any]) -> Ticket:
    """Builds the ticket variant matching data['type'] (Repair by default)."""
    if _to_enum(TicketType, data.get('type'), TicketType.REPAIR) == TicketType.PURCHASE:
        return PurchaseTicket.from_dict(data)
    return RepairTicket.from_dict(data)


# ==============================================================================
# ASSETS
# ==============================================================================

@dataclass(frozen=True)
class Asset:
    """
    A tracked piece of equipment.

    Attributes:
        id: Unique identifier (as-...)
        name: Equipment name (assets are grouped by it)
        serial_number: Manufacturer serial
        category: Free text category (drill-down key)
        location_category: LocationCategory
        location_name: Concrete place (ship number, office room, ...)
        status: AssetStatus, Active on creation
        last_checked: Date YYYY-MM-DD of last check
        staff_name: Responsible staff member
        position: Optional position on site
        description: Optional notes
        image_url: Optional JPEG data URI
    """
    id: str
    name: str
    serial_number: str
    category: str
    location_category: LocationCategory
    location_name: str
    status: AssetStatus = AssetStatus.ACTIVE
    last_checked: str = ''
    staff_name: str = ''
    position: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'id': self.id,
            'name': self.name,
            'serialNumber': self.serial_number,
            'category': self.category,
            'locationCategory': self.location_category.value,
            'locationName': self.location_name,
            'status': self.status.value,
            'lastChecked': self.last_checked,
            'staffName': self.staff_name,
        }
        _put_optional(d, 'position', self.position)
        _put_optional(d, 'description', self.description)
        _put_optional(d, 'imageUrl', self.image_url)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Asset':
        return cls(
            id=_text(data, 'id'),
            name=_text(data, 'name'),
            serial_number=_text(data, 'serialNumber'),
            category=_text(data, 'category'),
            location_category=_to_enum(
                LocationCategory, data.get('locationCategory'), LocationCategory.OFFICE
            ),
            location_name=_text(data, 'locationName'),
            status=_to_enum(AssetStatus, data.get('status'), AssetStatus.ACTIVE),
            last_checked=_text(data, 'lastChecked'),
            staff_name=_text(data, 'staffName'),
            position=data.get('position'),
            description=data.get('description'),
            image_url=data.get('imageUrl'),
        )


# ==============================================================================
# SHIP INSPECTIONS
# ==============================================================================

@dataclass(frozen=True)
class InspectionImage:
    """One checklist slot: a labelled, optionally photographed piece of equipment."""
    id: str
    label: str
    url: Optional[str] = None
    status: Optional[InspectionStatus] = None
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {'id': self.id, 'label': self.label, 'url': self.url}
        _put_optional(d, 'status', self.status)
        _put_optional(d, 'details', self.details)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InspectionImage':
        return cls(
            id=_text(data, 'id'),
            label=_text(data, 'label'),
            url=data.get('url'),
            status=_optional_enum(InspectionStatus, data.get('status')),
            details=data.get('details'),
        )


@dataclass(frozen=True)
class ShipInspection:
    """Dated equipment checklist for one ship."""
    id: str
    ship_name: str
    date: str
    inspector: str
    images: Tuple[InspectionImage, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'shipName': self.ship_name,
            'date': self.date,
            'inspector': self.inspector,
            'images': [img.to_dict() for img in self.images],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ShipInspection':
        return cls(
            id=_text(data, 'id'),
            ship_name=_text(data, 'shipName'),
            date=_text(data, 'date'),
            inspector=_text(data, 'inspector'),
            images=tuple(InspectionImage.from_dict(i) for i in data.get('images') or ()),
        )


# ==============================================================================
# AGGREGATE ROOT
# ==============================================================================

@dataclass(frozen=True)
class AppData:
    """
    Whole application state: the unit of persistence and of the store.

    Collections are tuples ordered most-recent-first.
    """
    work_logs: Tuple[WorkLog, ...] = ()
    tickets: Tuple[Ticket, ...] = ()
    assets: Tuple[Asset, ...] = ()
    ship_inspections: Tuple[ShipInspection, ...] = field(default=())

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            'workLogs': [w.to_dict() for w in self.work_logs],
            'tickets': [t.to_dict() for t in self.tickets],
            'assets': [a.to_dict() for a in self.assets],
            'shipInspections': [i.to_dict() for i in self.ship_inspections],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppData':
        """
        Builds the aggregate from its JSON form.

        A missing shipInspections key (older backups) becomes an empty list.
        """
        return cls(
            work_logs=tuple(WorkLog.from_dict(w) for w in data.get('workLogs') or ()),
            tickets=tuple(ticket_from_dict(t) for t in data.get('tickets') or ()),
            assets=tuple(Asset.from_dict(a) for a in data.get('assets') or ()),
            ship_inspections=tuple(
                ShipInspection.from_dict(i) for i in data.get('shipInspections') or ()
            ),
        )
