# ==============================================================================
# SERVICES LAYER - Business logic
# ==============================================================================
# PRINCIPLES:
# 1. The store is the only writer of application state
# 2. Views are pure functions of a snapshot
# 3. Routes only translate request → service → response
#
# STRUCTURE:
# ├── store.py           → DomainStore: create/update/delete/status change
# ├── view_service.py    → Filters, folder grouping, dashboard figures, overdue
# ├── pricing.py         → VAT for purchase tickets
# ├── report_service.py  → Data for the printable day report
# ├── image_service.py   → JPEG uploads → data URIs
# └── summary_service.py → Gemini status summary
# ==============================================================================

from it_marine.services.store import DomainStore
from it_marine.services.pricing import VatBreakdown, calculate_vat, VAT_RATE
from it_marine.services.view_service import (
    AssetSummary,
    DashboardCounts,
    DateGroup,
    DrillDownRow,
    NameGroup,
    dashboard_counts,
    drill_down,
    filter_assets,
    filter_inspections,
    filter_records,
    filter_tickets,
    filter_work_logs,
    group_by_date,
    group_by_name,
    is_overdue,
    overdue_ids,
    summarize_assets,
)
from it_marine.services.report_service import build_day_report, translate_status
from it_marine.services.image_service import UnsupportedImageError, encode_jpeg
from it_marine.services.summary_service import SummaryClient, build_summary_prompt

__all__ = [
    'DomainStore',
    'VatBreakdown',
    'calculate_vat',
    'VAT_RATE',
    'AssetSummary',
    'DashboardCounts',
    'DateGroup',
    'DrillDownRow',
    'NameGroup',
    'dashboard_counts',
    'drill_down',
    'filter_assets',
    'filter_inspections',
    'filter_records',
    'filter_tickets',
    'filter_work_logs',
    'group_by_date',
    'group_by_name',
    'is_overdue',
    'overdue_ids',
    'summarize_assets',
    'build_day_report',
    'translate_status',
    'UnsupportedImageError',
    'encode_jpeg',
    'SummaryClient',
    'build_summary_prompt',
]
