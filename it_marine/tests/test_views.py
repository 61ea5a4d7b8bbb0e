# -*- coding: utf-8 -*-
"""
Derived views: filters, folder grouping, dashboard figures and the overdue flag
"""
from datetime import datetime

from it_marine.models import (
    AppData,
    Asset,
    AssetStatus,
    Filter,
    LocationCategory,
    PurchaseTicket,
    RepairTicket,
    ShipInspection,
    TaskStatus,
    TicketType,
    WorkLog,
)
from it_marine.services import (
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


def _log(id, date, time='09:00', status=TaskStatus.PENDING, location='ท่าเรือ', task='งาน'):
    return WorkLog(id=id, date=date, time=time, staff_name='staff', location=location,
                   task_description=task, status=status)


def _repair(id, created_at, status=TaskStatus.PENDING, subject='ซ่อม'):
    return RepairTicket(id=id, subject=subject, details='', location='เรือ', status=status,
                        created_at=created_at, updated_at=created_at)


def _purchase(id, created_at, status=TaskStatus.WAITING_PURCHASE):
    return PurchaseTicket(id=id, subject='ซื้อ', details='', location='ออฟฟิศ', status=status,
                          created_at=created_at, updated_at=created_at)


def _asset(id, name, category='Network', location_name='Room 1', status=AssetStatus.ACTIVE,
           location_category=LocationCategory.OFFICE, staff_name='staff', last_checked='2025-06-01'):
    return Asset(id=id, name=name, serial_number=f'SN-{id}', category=category,
                 location_category=location_category, location_name=location_name,
                 status=status, last_checked=last_checked, staff_name=staff_name)


LOGS = [
    _log('wl-1', '2025-06-01', location='Sathorn Pier', task='Router reboot'),
    _log('wl-2', '2025-05-20', task='Printer'),
    _log('wl-3', '2024-12-31', task='Old year'),
    _log('wl-4', '2025-06-15', task='Camera'),
    _log('wl-5', 'not-a-date', task='Broken record'),
]


# =============================================================================
# FILTER
# =============================================================================

def test_filter_is_ordered_subset():
    result = filter_work_logs(LOGS, Filter(year='2025'))
    assert [r.id for r in result] == ['wl-1', 'wl-2', 'wl-4']


def test_filter_with_every_year_returns_full_set():
    valid = LOGS[:4]
    years = {log.date[:4] for log in valid}
    matched = []
    for year in years:
        matched.extend(filter_records(valid, Filter(search_text='', day='any', year=year)))
    assert sorted(r.id for r in matched) == sorted(r.id for r in valid)


def test_unparsable_date_never_matches():
    assert all(r.id != 'wl-5' for r in filter_work_logs(LOGS, Filter(year='2025')))


def test_month_range_and_wrapped_range():
    assert [r.id for r in filter_work_logs(LOGS, Filter(year='2025', start_month='06'))] == ['wl-1', 'wl-4']
    assert filter_work_logs(LOGS, Filter(year='2025', start_month='11', end_month='02')) == []


def test_day_filter_only_narrows_work_logs():
    flt = Filter(year='2025', day='15')
    assert [r.id for r in filter_work_logs(LOGS, flt)] == ['wl-4']
    tickets = [_repair('tk-1', '2025-06-01T08:00:00.000')]
    assert filter_tickets(tickets, flt) == tickets


def test_text_search_is_case_insensitive():
    flt = Filter(year='2025', search_text='sathorn')
    assert [r.id for r in filter_work_logs(LOGS, flt)] == ['wl-1']
    assert [r.id for r in filter_work_logs(LOGS, Filter(year='2025', search_text='ROUTER'))] == ['wl-1']


def test_filter_tickets_by_type():
    tickets = [_repair('tk-1', '2025-06-01T08:00:00'), _purchase('tk-2', '2025-06-01T09:00:00')]
    result = filter_tickets(tickets, Filter(year='2025'), TicketType.PURCHASE)
    assert [t.id for t in result] == ['tk-2']


def test_filter_assets_uses_last_checked_and_asset_fields():
    assets = [_asset('as-1', 'Switch', location_name='Pier 3'), _asset('as-2', 'Camera', last_checked='2024-01-01')]
    assert [a.id for a in filter_assets(assets, Filter(year='2025'))] == ['as-1']
    assert [a.id for a in filter_assets(assets, Filter(year='2025', search_text='pier'))] == ['as-1']


def test_filter_inspections_newest_first():
    inspections = [
        ShipInspection(id='ins-1', ship_name='เรือ 1', date='2025-03-01', inspector='x'),
        ShipInspection(id='ins-2', ship_name='เรือ 2', date='2025-05-01', inspector='x'),
    ]
    assert [i.id for i in filter_inspections(inspections, Filter(year='2025'))] == ['ins-2', 'ins-1']


def test_filter_from_args():
    flt = Filter.from_args({'search': ' pier ', 'day': 'any', 'startMonth': '3', 'year': '2025'})
    assert flt == Filter(search_text='pier', day='all', start_month='03', end_month='12', year='2025')
    assert Filter.from_args({'day': '7'}, year='2024').day == '07'
    out_of_range = Filter.from_args({'day': '40', 'endMonth': '13'}, year='2024')
    assert (out_of_range.day, out_of_range.end_month) == ('all', '12')


# =============================================================================
# GROUPING
# =============================================================================

def test_group_by_date_descending_and_stable():
    logs = [_log('a', '2025-05-01'), _log('b', '2025-06-01'), _log('c', '2025-05-01')]
    groups = group_by_date(logs)
    assert [g.date for g in groups] == ['2025-06-01', '2025-05-01']
    assert [r.id for r in groups[1].records] == ['a', 'c']


def test_group_by_date_is_idempotent():
    logs = [_log('a', '2025-05-01'), _log('b', '2025-06-01'), _log('c', '2025-05-01'), _log('d', '2025-04-02')]
    first = group_by_date(logs)
    flattened = [r for g in first for r in g.records]
    assert group_by_date(flattened) == first


def test_tickets_grouped_by_created_at_day():
    tickets = [_repair('tk-1', '2025-06-01T08:00:00.000'), _repair('tk-2', '2025-06-01T18:00:00.000')]
    groups = group_by_date(tickets)
    assert len(groups) == 1 and groups[0].date == '2025-06-01'


def test_group_by_name_ascending_with_counts():
    assets = [
        _asset('1', 'Switch'),
        _asset('2', 'Camera', status=AssetStatus.LOST),
        _asset('3', 'Switch', status=AssetStatus.MAINTENANCE),
    ]
    groups = group_by_name(assets)
    assert [g.name for g in groups] == ['Camera', 'Switch']
    switch = groups[1]
    assert (switch.total, switch.active, switch.maintenance, switch.lost) == (2, 1, 1, 0)


# =============================================================================
# AGGREGATION
# =============================================================================

def test_summarize_assets_counts_every_status():
    summary = summarize_assets([
        _asset('1', 'A', category='Network', location_category=LocationCategory.SHIP),
        _asset('2', 'B', category='Network'),
        _asset('3', 'C', category='Server', status=AssetStatus.RETIRED),
    ])
    assert summary.counts_by_category == {'Network': 2, 'Server': 1}
    assert summary.counts_by_location_category == {'Ship': 1, 'Office': 2}
    assert summary.counts_by_status == {'Active': 2, 'Maintenance': 0, 'Retired': 1, 'Lost': 0}


def test_summarize_assets_empty():
    assert summarize_assets([]).to_dict()['status'] == {'Active': 0, 'Maintenance': 0, 'Retired': 0, 'Lost': 0}


def test_drill_down_sorted_by_count_with_first_staff_name():
    assets = [
        _asset('1', 'A', location_name='Pier', staff_name='first'),
        _asset('2', 'B', location_name='Ship 7', staff_name='ship'),
        _asset('3', 'C', location_name='Pier', staff_name='second'),
        _asset('4', 'D', category='Other', location_name='Pier'),
    ]
    rows = drill_down(assets, 'Network')
    assert [(r.location_name, r.count) for r in rows] == [('Pier', 2), ('Ship 7', 1)]
    assert rows[0].representative_staff_name == 'first'
    assert drill_down(assets, 'Unknown') == []


def test_dashboard_counts():
    data = AppData(
        work_logs=(_log('wl-1', '2025-06-01', status=TaskStatus.COMPLETED), _log('wl-2', '2025-06-01')),
        tickets=(
            _repair('tk-1', '2025-06-01T08:00:00'),
            _repair('tk-2', '2025-06-01T08:00:00', status=TaskStatus.COMPLETED),
            _purchase('tk-3', '2025-06-01T08:00:00'),
            _purchase('tk-4', '2025-06-01T08:00:00', status=TaskStatus.PENDING),
        ),
        assets=(_asset('as-1', 'A'),),
    )
    counts = dashboard_counts(data)
    assert counts.to_dict() == {
        'pendingRepairs': 1, 'waitingPurchases': 1, 'totalAssets': 1, 'completedWorkLogs': 1,
    }


# =============================================================================
# OVERDUE
# =============================================================================

def test_overdue_boundary():
    log = _log('wl-1', '2025-06-01', time='09:00')
    assert is_overdue(log, datetime(2025, 6, 2, 9, 1))
    assert not is_overdue(log, datetime(2025, 6, 2, 8, 59))


def test_terminal_status_never_overdue():
    now = datetime(2025, 7, 1)
    assert not is_overdue(_log('wl-1', '2025-06-01', status=TaskStatus.COMPLETED), now)
    assert not is_overdue(_repair('tk-1', '2025-06-01T09:00:00', status=TaskStatus.CANCELLED), now)
    assert is_overdue(_repair('tk-2', '2025-06-01T09:00:00', status=TaskStatus.IN_PROGRESS), now)


def test_overdue_ids():
    logs = [_log('old', '2025-05-01'), _log('new', '2025-06-01')]
    assert overdue_ids(logs, datetime(2025, 6, 1, 12, 0)) == ['old']


def test_work_log_scenario(store, clock):
    """Create → appears first on its date → complete → count +1, overdue clears."""
    clock.advance(days=1, hours=2)
    completed_before = dashboard_counts(store.snapshot).completed_work_logs

    log = store.add_work_log(date='2025-06-01', time='09:00', location='ท่าเรือ', task_description='งาน')
    group = next(g for g in group_by_date(store.snapshot.work_logs) if g.date == '2025-06-01')
    assert group.records[0].id == log.id
    assert is_overdue(store.snapshot.work_logs[0], clock())

    store.update_work_log_status(log.id, TaskStatus.COMPLETED)
    assert dashboard_counts(store.snapshot).completed_work_logs == completed_before + 1
    assert not is_overdue(store.snapshot.work_logs[0], clock())
