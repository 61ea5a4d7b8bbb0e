# ==============================================================================
# CONSTANTS - Fixed operator, storage key and the seed dataset
# ==============================================================================

from datetime import datetime
from typing import Optional

from it_marine.models import (
    AppData,
    Asset,
    AssetStatus,
    LocationCategory,
    RepairTicket,
    TaskStatus,
    WorkLog,
)

# Every record created from this dashboard is signed with this name
PERMANENT_STAFF_NAME = 'มนชัย เจริญอินทร์'

# Single key (file name stem) under which the whole AppData is stored
STORAGE_KEY = 'it_marine_app_data'

# Id prefixes per collection
WORK_LOG_PREFIX = 'wl'
TICKET_PREFIX = 'tk'
ASSET_PREFIX = 'as'
INSPECTION_PREFIX = 'ins'
INSPECTION_IMAGE_PREFIX = 'img'


def build_default_data(now: Optional[datetime] = None) -> AppData:
    """
    Seed dataset used on first start or when the stored file is unusable.

    Args:
        now: Reference time (defaults to the current local time)

    Returns:
        AppData with one work log, one repair ticket and two assets
    """
    now = now or datetime.now()
    today = now.strftime('%Y-%m-%d')
    stamp = now.isoformat(timespec='seconds')
    return AppData(
        work_logs=(
            WorkLog(
                id='wl-1',
                date=today,
                time='09:00',
                staff_name=PERMANENT_STAFF_NAME,
                location='ท่าเรือสาทร',
                task_description='ตรวจสอบความเรียบร้อยระบบเครือข่ายและเครื่องขายตั๋วอัตโนมัติ',
                status=TaskStatus.COMPLETED,
            ),
        ),
        tickets=(
            RepairTicket(
                id='tk-1',
                subject='เราเตอร์ขัดข้อง - เรือด่วนลำที่ 105',
                details='สัญญาณ Wi-Fi หลุดบ่อยครั้งในระหว่างเดินทาง คาดว่าเกิดจากสายสัญญาณหลวม',
                location='เรือด่วนลำที่ 105',
                status=TaskStatus.IN_PROGRESS,
                created_at=stamp,
                updated_at=stamp,
            ),
        ),
        assets=(
            Asset(
                id='as-1',
                name='เซิร์ฟเวอร์หลัก CPX-DATA-01',
                serial_number='CPX-HQ-SV9921',
                category='เซิร์ฟเวอร์',
                location_category=LocationCategory.OFFICE,
                location_name='ห้องไอที ชั้น 2 สำนักงานใหญ่',
                status=AssetStatus.ACTIVE,
                last_checked=today,
                staff_name=PERMANENT_STAFF_NAME,
            ),
            Asset(
                id='as-2',
                name='เครื่องรับสัญญาณดาวเทียม Marine-V3',
                serial_number='SAT-BOAT-002',
                category='อุปกรณ์สื่อสาร',
                location_category=LocationCategory.SHIP,
                location_name='เรือด่วนลำที่ 202',
                status=AssetStatus.ACTIVE,
                last_checked=today,
                staff_name=PERMANENT_STAFF_NAME,
            ),
        ),
        ship_inspections=(),
    )
