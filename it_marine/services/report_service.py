# ==============================================================================
# DAY REPORT - Data handed to the printable work log report
# ==============================================================================
# The core only supplies data: date, staff name and the rows of that day.
# Rendering and the print dialog belong to the template (templates/report.html).
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, List

from it_marine.constants import PERMANENT_STAFF_NAME
from it_marine.models import AppData, TaskStatus
from it_marine.services.view_service import group_by_date

# Thai labels printed for each status
STATUS_LABELS = {
    TaskStatus.PENDING: 'รอดำเนินการ',
    TaskStatus.WAITING_PURCHASE: 'รอจัดซื้อ',
    TaskStatus.IN_PROGRESS: 'กำลังทำ',
    TaskStatus.COMPLETED: 'เสร็จสิ้น',
    TaskStatus.CANCELLED: 'ยกเลิก',
}

THAI_MONTHS = (
    'มกราคม', 'กุมภาพันธ์', 'มีนาคม', 'เมษายน', 'พฤษภาคม', 'มิถุนายน',
    'กรกฎาคม', 'สิงหาคม', 'กันยายน', 'ตุลาคม', 'พฤศจิกายน', 'ธันวาคม',
)


def translate_status(status: TaskStatus) -> str:
    return STATUS_LABELS.get(status, getattr(status, 'value', str(status)))


def format_thai_date(date_str: str) -> str:
    """'2025-06-01' → '1 มิถุนายน 2568' (Buddhist era). Unparsable input is returned as is."""
    try:
        d = datetime.strptime(date_str, '%Y-%m-%d')
    except (TypeError, ValueError):
        return date_str
    return f'{d.day} {THAI_MONTHS[d.month - 1]} {d.year + 543}'


def build_day_report(data: AppData, date: str, staff_name: str = PERMANENT_STAFF_NAME) -> Dict[str, Any]:
    """
    Rows of the work logs recorded on date, in folder order.

    Returns:
        {
            'date': 'YYYY-MM-DD',
            'formattedDate': str,
            'staffName': str,
            'rows': [{'time', 'location', 'taskDescription', 'status', 'statusLabel'}]
        }
    """
    rows: List[Dict[str, Any]] = []
    for group in group_by_date(data.work_logs):
        if group.date != date:
            continue
        for log in group.records:
            rows.append({
                'time': log.time,
                'location': log.location,
                'taskDescription': log.task_description,
                'status': log.status.value,
                'statusLabel': translate_status(log.status),
            })
    return {
        'date': date,
        'formattedDate': format_thai_date(date),
        'staffName': staff_name,
        'rows': rows,
    }
