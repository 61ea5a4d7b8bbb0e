# -*- coding: utf-8 -*-
"""
Persistence: local JSON document, backup export and import
"""
import io
import json
from datetime import date

import pytest

from it_marine.app_container import AppContainer
from it_marine.models import AppData, PurchaseTicket, ShipInspection, InspectionImage, InspectionStatus, TaskStatus
from it_marine.repositories import AppDataRepository, ImportValidationError, parse_import


def _sample_data(store):
    store.add_ticket('Purchase', subject='Laptop', details='x', location='HQ',
                     company_name='Vendor', quantity=2, price=500, is_vat_inclusive=False)
    store.add_inspection('เรือ 105', images=[{'label': 'Router', 'status': 'Broken', 'details': 'สายขาด'}])
    return store.snapshot


def test_load_missing_file_gives_defaults(data_dir):
    repo = AppDataRepository(data_dir)
    data = repo.load()
    assert [a.id for a in data.assets] == ['as-1', 'as-2']


def test_load_corrupt_file_gives_defaults(data_dir, data_file):
    repo = AppDataRepository(data_dir)
    with open(data_file, 'w', encoding='utf-8') as f:
        f.write('{not json')
    assert [w.id for w in repo.load().work_logs] == ['wl-1']


def test_load_non_object_gives_defaults(data_dir, data_file):
    repo = AppDataRepository(data_dir)
    with open(data_file, 'w', encoding='utf-8') as f:
        json.dump([1, 2, 3], f)
    assert len(repo.load().assets) == 2


def test_load_backfills_ship_inspections(data_dir, data_file):
    repo = AppDataRepository(data_dir)
    with open(data_file, 'w', encoding='utf-8') as f:
        json.dump({'workLogs': [], 'tickets': [], 'assets': []}, f)
    assert repo.load() == AppData()


def test_save_then_load(store, data_dir, data_file):
    repo = AppDataRepository(data_dir)
    data = _sample_data(store)
    repo.save(data)
    assert repo.load() == data
    with open(data_file, encoding='utf-8') as f:
        raw = json.load(f)
    assert set(raw) == {'workLogs', 'tickets', 'assets', 'shipInspections'}
    assert raw['tickets'][0]['totalPrice'] == 1070.0


def test_export_import_round_trip(store):
    data = _sample_data(store)
    restored = parse_import(AppDataRepository.export_bytes(data))
    assert restored == data
    assert isinstance(restored.tickets[0], PurchaseTicket)
    assert restored.ship_inspections[0].images[0].status == InspectionStatus.BROKEN


def test_export_keeps_thai_text_readable(store):
    payload = AppDataRepository.export_bytes(store.snapshot).decode('utf-8')
    assert 'เราเตอร์ขัดข้อง' in payload
    assert payload.startswith('{\n  "workLogs"')


def test_export_filename():
    assert AppDataRepository.export_filename(date(2025, 6, 1)) == 'it_backup_2025-06-01.json'


def test_import_backfills_ship_inspections():
    data = parse_import('{"workLogs": [], "tickets": [], "assets": []}')
    assert data.ship_inspections == ()


@pytest.mark.parametrize('content, message', [
    ('not json', 'Failed to parse backup file'),
    ('[]', 'Invalid backup file format'),
    ('{"workLogs": [], "tickets": []}', 'Invalid backup file format'),
    ('{"workLogs": [], "tickets": {}, "assets": []}', 'Invalid backup file format'),
    ('{"workLogs": [1], "tickets": [], "assets": []}', 'Invalid backup file format'),
])
def test_import_rejects_malformed_backups(content, message):
    with pytest.raises(ImportValidationError) as exc:
        parse_import(content)
    assert str(exc.value) == message


def test_import_file_returns_none_on_rejection():
    assert AppDataRepository.import_file(io.BytesIO(b'{"tickets": []}')) is None
    data = AppDataRepository.import_file(io.BytesIO(b'{"workLogs": [], "tickets": [], "assets": []}'))
    assert data == AppData()


def test_container_saves_once_per_mutation(data_dir, clock, monkeypatch):
    container = AppContainer(data_dir, clock=clock)
    saved = []
    original_save = container.app_data_repo.save
    monkeypatch.setattr(container.app_data_repo, 'save', lambda data: (saved.append(data), original_save(data)))

    log = container.store.add_work_log('2025-06-01', '09:00', 'A', 'B')
    container.store.update_work_log_status(log.id, TaskStatus.COMPLETED)
    container.store.delete_work_log('wl-missing')

    assert len(saved) == 2
    assert saved[-1] is container.store.snapshot

    # reloading from disk gives the persisted state
    container.reset()
    reloaded = container.store.snapshot
    assert reloaded.work_logs[0].status == TaskStatus.COMPLETED


def test_save_failure_does_not_break_the_store(data_dir, clock, monkeypatch, capsys):
    container = AppContainer(data_dir, clock=clock)

    def failing_save(data):
        raise OSError('disk full')

    monkeypatch.setattr(container.app_data_repo, 'save', failing_save)
    log = container.store.add_work_log('2025-06-01', '09:00', 'A', 'B')
    assert container.store.snapshot.work_logs[0] == log
    assert '[STORAGE ERROR]' in capsys.readouterr().out


def test_inspection_slot_without_status_round_trips():
    inspection = ShipInspection(id='ins-1', ship_name='เรือ', date='2025-06-01', inspector='x',
                                images=(InspectionImage(id='img-1', label='CCTV'),))
    data = AppData(ship_inspections=(inspection,))
    assert parse_import(AppDataRepository.export_bytes(data)) == data


def test_import_turns_null_text_fields_into_empty_strings():
    data = parse_import(json.dumps({
        'workLogs': [{'id': 'wl-1', 'date': None, 'time': None, 'location': None, 'status': 'Pending'}],
        'tickets': [{'id': 'tk-1', 'type': 'Repair', 'subject': None, 'location': None, 'createdAt': None}],
        'assets': [{'id': 'as-1', 'name': None, 'category': None, 'locationName': None}],
        'shipInspections': [{'id': None, 'shipName': None, 'date': None, 'images': [{'label': None}]}],
    }))
    log, ticket, asset, inspection = (data.work_logs[0], data.tickets[0], data.assets[0],
                                      data.ship_inspections[0])
    assert (log.date, log.time, log.location) == ('', '', '')
    assert (ticket.subject, ticket.location, ticket.created_at, ticket.updated_at) == ('', '', '', '')
    assert (asset.name, asset.category, asset.location_name) == ('', '', '')
    assert (inspection.id, inspection.ship_name, inspection.date) == ('', '', '')
    assert inspection.images[0].label == ''
