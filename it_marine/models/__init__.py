# ==============================================================================
# MODELS LAYER - Data structures of the system
# ==============================================================================
# Every domain entity is a frozen dataclass:
#   - Type hints document the shape of each record
#   - to_dict / from_dict map to the persisted camelCase JSON
#   - Independent of where the JSON ends up (local file, export, import)
# ==============================================================================

from .entities import (
    # Statuses and kinds
    TaskStatus,
    TERMINAL_STATUSES,
    TicketType,
    LocationCategory,
    AssetStatus,
    InspectionStatus,

    # Records
    WorkLog,
    BaseTicket,
    RepairTicket,
    PurchaseTicket,
    Ticket,
    ticket_from_dict,
    Asset,
    InspectionImage,
    ShipInspection,

    # Aggregate
    AppData,
)
from .filters import Filter, ALL_DAYS, MONTHS, DAYS

__all__ = [
    'TaskStatus',
    'TERMINAL_STATUSES',
    'TicketType',
    'LocationCategory',
    'AssetStatus',
    'InspectionStatus',

    'WorkLog',
    'BaseTicket',
    'RepairTicket',
    'PurchaseTicket',
    'Ticket',
    'ticket_from_dict',
    'Asset',
    'InspectionImage',
    'ShipInspection',

    'AppData',

    'Filter',
    'ALL_DAYS',
    'MONTHS',
    'DAYS',
]
