# ==============================================================================
# FLASK APPLICATION - HTTP surface of the IT dashboard
# ==============================================================================
# Routes only translate request → service → response. State lives in the
# DomainStore held by the AppContainer; every committed change is written to
# disk by the container's auto-save subscriber.
#
# RESPONSES:
# - JSON everywhere, except the printable day report (HTML) and the backup
#   download (attachment)
# - Bad input → 400 {"ok": false, "error": "<message>"}
# - update / delete / status change on an unknown id → 200 with
#   {"ok": true, "found": false, "records": [...unchanged collection...]}
# ==============================================================================

import io
from typing import Any, Dict, Iterable, List, Optional

from flask import Blueprint, Flask, current_app, jsonify, render_template, request, send_file
from werkzeug.exceptions import RequestEntityTooLarge

from it_marine import config
from it_marine.app_container import AppContainer, get_container
from it_marine.models import (
    AssetStatus,
    Filter,
    LocationCategory,
    ShipInspection,
    TaskStatus,
    TicketType,
    WorkLog,
    Asset,
    ticket_from_dict,
)
from it_marine.performance_logger import init_profiling
from it_marine.repositories import AppDataRepository, ImportValidationError, parse_import
from it_marine.services import (
    UnsupportedImageError,
    build_day_report,
    calculate_vat,
    dashboard_counts,
    drill_down,
    encode_jpeg,
    filter_assets,
    filter_inspections,
    filter_tickets,
    filter_work_logs,
    group_by_date,
    group_by_name,
    overdue_ids,
    summarize_assets,
)
from it_marine.services.image_service import REJECTION_MESSAGE

# Number of work logs shown in the dashboard's "recent" panel
RECENT_WORK_LOGS = 5

TRUE_VALUES = ('1', 'true', 'yes', 'on')


class RequestValidationError(ValueError):
    """Bad request body or query. The message is user-facing."""
    pass


bp = Blueprint('it_marine', __name__)


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _container() -> AppContainer:
    return current_app.extensions['it_marine']


def _store():
    return _container().store


def _payload() -> Dict[str, Any]:
    """JSON body, or form fields when the request is a plain form post."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise RequestValidationError('Request body must be a JSON object')
    return data


def _require(payload: Dict[str, Any], *keys: str) -> None:
    missing = [k for k in keys if not str(payload.get(k) or '').strip()]
    if missing:
        raise RequestValidationError(f"Missing fields: {', '.join(missing)}")


def _parse_enum(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        raise RequestValidationError(f'Invalid {enum_cls.__name__}: {value}') from None


def _to_number(value: Any, field_name: str) -> float:
    if value in (None, ''):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RequestValidationError(f'{field_name} must be a number') from None
    return int(number) if number.is_integer() else number


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


def _list_field(payload: Dict[str, Any], key: str) -> List[Any]:
    value = payload.get(key) or []
    if not isinstance(value, list):
        raise RequestValidationError(f'{key} must be a list')
    return value


def _pricing(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Purchase fields of a payload, coerced to numbers/bool (camelCase keys)."""
    pricing = {}
    if 'companyName' in payload:
        pricing['companyName'] = payload.get('companyName') or ''
    if 'quantity' in payload:
        pricing['quantity'] = _to_number(payload.get('quantity'), 'quantity')
    if 'price' in payload:
        pricing['price'] = _to_number(payload.get('price'), 'price')
    if 'isVatInclusive' in payload:
        pricing['isVatInclusive'] = _to_bool(payload.get('isVatInclusive'))
    return pricing


def _merge(current, payload: Dict[str, Any], record_id: str) -> Dict[str, Any]:
    """Stored record overlaid with the submitted fields. The id cannot change."""
    merged = current.to_dict()
    merged.update(payload)
    merged['id'] = record_id
    return merged


def _find(records: Iterable[Any], record_id: str):
    return next((r for r in records if r.id == record_id), None)


def _dicts(records: Iterable[Any]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]


def _result(record, collection: Iterable[Any], status: int = 200):
    """Response of a mutation: the stored record, or the unchanged collection."""
    if record is None:
        return jsonify({'ok': True, 'found': False, 'records': _dicts(collection)})
    return jsonify({'ok': True, 'found': True, 'record': record.to_dict()}), status


def _date_groups(records: Iterable[Any]) -> List[Dict[str, Any]]:
    return [{'date': g.date, 'records': _dicts(g.records)} for g in group_by_date(records)]


# ═══════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/data', methods=['GET'])
def get_data():
    return jsonify(_store().snapshot.to_dict())


@bp.route('/api/dashboard', methods=['GET'])
def dashboard():
    """Cards, asset widgets and the filtered recent work logs."""
    store = _store()
    data = store.snapshot
    now = store.now()
    logs = filter_work_logs(data.work_logs, Filter.from_args(request.args))
    return jsonify({
        'counts': dashboard_counts(data).to_dict(),
        'assetSummary': summarize_assets(data.assets).to_dict(),
        'recentWorkLogs': _dicts(logs[:RECENT_WORK_LOGS]),
        'overdueWorkLogs': overdue_ids(logs, now),
        'overdueTickets': overdue_ids(data.tickets, now),
    })


# ═══════════════════════════════════════════════════════════════════════════
# WORK LOGS
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/worklogs', methods=['GET'])
def list_work_logs():
    store = _store()
    logs = filter_work_logs(store.snapshot.work_logs, Filter.from_args(request.args))
    return jsonify({'groups': _date_groups(logs), 'overdue': overdue_ids(logs, store.now())})


@bp.route('/api/worklogs', methods=['POST'])
def create_work_log():
    store = _store()
    payload = _payload()
    _require(payload, 'location', 'taskDescription')
    now = store.now()
    log = store.add_work_log(
        date=payload.get('date') or now.strftime('%Y-%m-%d'),
        time=payload.get('time') or now.strftime('%H:%M'),
        location=payload['location'],
        task_description=payload['taskDescription'],
        status=_parse_enum(TaskStatus, payload.get('status') or TaskStatus.PENDING.value),
    )
    return jsonify({'ok': True, 'record': log.to_dict()}), 201


@bp.route('/api/worklogs/<log_id>', methods=['PUT'])
def update_work_log(log_id):
    store = _store()
    current = _find(store.snapshot.work_logs, log_id)
    if current is None:
        return _result(None, store.snapshot.work_logs)
    merged = _merge(current, _payload(), log_id)
    _parse_enum(TaskStatus, merged.get('status'))
    stored = store.update_work_log(WorkLog.from_dict(merged))
    return _result(stored, store.snapshot.work_logs)


@bp.route('/api/worklogs/<log_id>', methods=['DELETE'])
def delete_work_log(log_id):
    store = _store()
    removed = store.delete_work_log(log_id)
    return _result(removed, store.snapshot.work_logs)


@bp.route('/api/worklogs/<log_id>/status', methods=['POST'])
def change_work_log_status(log_id):
    store = _store()
    status = _parse_enum(TaskStatus, _payload().get('status'))
    stored = store.update_work_log_status(log_id, status)
    return _result(stored, store.snapshot.work_logs)


# ═══════════════════════════════════════════════════════════════════════════
# TICKETS (Repair / Purchase)
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/tickets', methods=['GET'])
def list_tickets():
    store = _store()
    raw_type = request.args.get('type')
    ticket_type = _parse_enum(TicketType, raw_type) if raw_type else None
    tickets = filter_tickets(store.snapshot.tickets, Filter.from_args(request.args), ticket_type)
    return jsonify({'groups': _date_groups(tickets), 'overdue': overdue_ids(tickets, store.now())})


@bp.route('/api/tickets', methods=['POST'])
def create_ticket():
    store = _store()
    payload = _payload()
    _require(payload, 'subject', 'location')
    ticket_type = _parse_enum(TicketType, payload.get('type') or TicketType.REPAIR.value)

    purchase_fields = {}
    if ticket_type == TicketType.PURCHASE:
        pricing = _pricing(payload)
        purchase_fields = dict(
            company_name=pricing.get('companyName', ''),
            quantity=pricing.get('quantity', 0),
            price=pricing.get('price', 0),
            is_vat_inclusive=pricing.get('isVatInclusive', False),
        )

    ticket = store.add_ticket(
        ticket_type,
        subject=payload['subject'],
        details=payload.get('details') or '',
        location=payload['location'],
        status=_parse_enum(TaskStatus, payload.get('status') or TaskStatus.PENDING.value),
        images=_list_field(payload, 'images'),
        requester_name=payload.get('requesterName') or None,
        requester_position=payload.get('requesterPosition') or None,
        **purchase_fields
    )
    return jsonify({'ok': True, 'record': ticket.to_dict()}), 201


@bp.route('/api/tickets/vat', methods=['POST'])
def preview_vat():
    """Live VAT breakdown shown while a purchase form is being filled."""
    pricing = _pricing(_payload())
    breakdown = calculate_vat(
        pricing.get('quantity', 0), pricing.get('price', 0), pricing.get('isVatInclusive', False)
    )
    return jsonify(breakdown.to_dict())


@bp.route('/api/tickets/<ticket_id>', methods=['PUT'])
def update_ticket(ticket_id):
    store = _store()
    current = _find(store.snapshot.tickets, ticket_id)
    if current is None:
        return _result(None, store.snapshot.tickets)
    payload = _payload()
    merged = _merge(current, payload, ticket_id)
    _parse_enum(TaskStatus, merged.get('status'))
    if _parse_enum(TicketType, merged.get('type')) == TicketType.PURCHASE:
        merged.update(_pricing(payload))
    _list_field(merged, 'images')
    stored = store.update_ticket(ticket_from_dict(merged))
    return _result(stored, store.snapshot.tickets)


@bp.route('/api/tickets/<ticket_id>', methods=['DELETE'])
def delete_ticket(ticket_id):
    store = _store()
    removed = store.delete_ticket(ticket_id)
    return _result(removed, store.snapshot.tickets)


@bp.route('/api/tickets/<ticket_id>/status', methods=['POST'])
def change_ticket_status(ticket_id):
    store = _store()
    status = _parse_enum(TaskStatus, _payload().get('status'))
    stored = store.update_ticket_status(ticket_id, status)
    return _result(stored, store.snapshot.tickets)


# ═══════════════════════════════════════════════════════════════════════════
# ASSETS
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/assets', methods=['GET'])
def list_assets():
    assets = filter_assets(_store().snapshot.assets, Filter.from_args(request.args))
    return jsonify({'groups': [
        {
            'name': g.name,
            'total': g.total,
            'active': g.active,
            'maintenance': g.maintenance,
            'lost': g.lost,
            'records': _dicts(g.records),
        }
        for g in group_by_name(assets)
    ]})


@bp.route('/api/assets', methods=['POST'])
def create_asset():
    store = _store()
    payload = _payload()
    _require(payload, 'name', 'category', 'locationCategory', 'locationName')
    asset = store.add_asset(
        name=payload['name'],
        serial_number=payload.get('serialNumber') or '',
        category=payload['category'],
        location_category=_parse_enum(LocationCategory, payload['locationCategory']),
        location_name=payload['locationName'],
        last_checked=payload.get('lastChecked') or None,
        staff_name=payload.get('staffName') or None,
        position=payload.get('position') or None,
        description=payload.get('description') or None,
        image_url=payload.get('imageUrl') or None,
    )
    return jsonify({'ok': True, 'record': asset.to_dict()}), 201


@bp.route('/api/assets/summary', methods=['GET'])
def asset_summary():
    return jsonify(summarize_assets(_store().snapshot.assets).to_dict())


@bp.route('/api/assets/drilldown', methods=['GET'])
def asset_drill_down():
    category = (request.args.get('category') or '').strip()
    if not category:
        raise RequestValidationError('Missing fields: category')
    rows = drill_down(_store().snapshot.assets, category)
    return jsonify({'category': category, 'rows': [row.to_dict() for row in rows]})


@bp.route('/api/assets/<asset_id>', methods=['PUT'])
def update_asset(asset_id):
    store = _store()
    current = _find(store.snapshot.assets, asset_id)
    if current is None:
        return _result(None, store.snapshot.assets)
    merged = _merge(current, _payload(), asset_id)
    _parse_enum(AssetStatus, merged.get('status'))
    _parse_enum(LocationCategory, merged.get('locationCategory'))
    stored = store.update_asset(Asset.from_dict(merged))
    return _result(stored, store.snapshot.assets)


@bp.route('/api/assets/<asset_id>', methods=['DELETE'])
def delete_asset(asset_id):
    store = _store()
    removed = store.delete_asset(asset_id)
    return _result(removed, store.snapshot.assets)


@bp.route('/api/assets/<asset_id>/status', methods=['POST'])
def change_asset_status(asset_id):
    store = _store()
    status = _parse_enum(AssetStatus, _payload().get('status'))
    stored = store.update_asset_status(asset_id, status)
    return _result(stored, store.snapshot.assets)


# ═══════════════════════════════════════════════════════════════════════════
# SHIP INSPECTIONS
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/inspections', methods=['GET'])
def list_inspections():
    inspections = filter_inspections(_store().snapshot.ship_inspections, Filter.from_args(request.args))
    return jsonify({'records': _dicts(inspections)})


@bp.route('/api/inspections', methods=['POST'])
def create_inspection():
    store = _store()
    payload = _payload()
    _require(payload, 'shipName')
    inspection = store.add_inspection(payload['shipName'], images=_list_field(payload, 'images'))
    return jsonify({'ok': True, 'record': inspection.to_dict()}), 201


@bp.route('/api/inspections/<inspection_id>', methods=['PUT'])
def update_inspection(inspection_id):
    store = _store()
    current = _find(store.snapshot.ship_inspections, inspection_id)
    if current is None:
        return _result(None, store.snapshot.ship_inspections)
    merged = _merge(current, _payload(), inspection_id)
    _list_field(merged, 'images')
    stored = store.update_inspection(ShipInspection.from_dict(merged))
    return _result(stored, store.snapshot.ship_inspections)


@bp.route('/api/inspections/<inspection_id>', methods=['DELETE'])
def delete_inspection(inspection_id):
    store = _store()
    removed = store.delete_inspection(inspection_id)
    return _result(removed, store.snapshot.ship_inspections)


# ═══════════════════════════════════════════════════════════════════════════
# IMAGES, BACKUPS, REPORTS, AI
# ═══════════════════════════════════════════════════════════════════════════

@bp.route('/api/images', methods=['POST'])
def upload_image():
    upload = request.files.get('file')
    if upload is None:
        raise UnsupportedImageError(REJECTION_MESSAGE)
    url = encode_jpeg(upload.filename, upload.mimetype, upload.read())
    return jsonify({'ok': True, 'url': url})


@bp.route('/backup/export', methods=['GET'])
def export_backup():
    store = _store()
    return send_file(
        io.BytesIO(AppDataRepository.export_bytes(store.snapshot)),
        mimetype='application/json',
        as_attachment=True,
        download_name=AppDataRepository.export_filename(store.now().date()),
    )


@bp.route('/backup/import', methods=['POST'])
def import_backup():
    """Replaces the whole state with an uploaded backup. Rejected files change nothing."""
    upload = request.files.get('file')
    if upload is None:
        raise RequestValidationError('No backup file uploaded')
    try:
        data = parse_import(upload.read())
    except ImportValidationError as e:
        print(f"[IMPORT] Rejected backup {upload.filename}: {e}")
        raise
    _store().replace(data)
    print(f"[IMPORT] Restored {upload.filename}: {len(data.work_logs)} work logs, "
          f"{len(data.tickets)} tickets, {len(data.assets)} assets, "
          f"{len(data.ship_inspections)} inspections")
    return jsonify({
        'ok': True,
        'counts': {
            'workLogs': len(data.work_logs),
            'tickets': len(data.tickets),
            'assets': len(data.assets),
            'shipInspections': len(data.ship_inspections),
        },
    })


@bp.route('/reports/worklogs/<date>', methods=['GET'])
def work_log_report(date):
    store = _store()
    report = build_day_report(store.snapshot, date, staff_name=store.operator)
    return render_template('report.html', report=report)


@bp.route('/api/summary', methods=['GET'])
def ai_summary():
    text = _container().summary_client.summarize(_store().snapshot)
    return jsonify({'summary': text})


# ═══════════════════════════════════════════════════════════════════════════
# ERROR HANDLERS
# ═══════════════════════════════════════════════════════════════════════════

def _bad_request(error):
    return jsonify({'ok': False, 'error': str(error)}), 400


def _too_large(error):
    limit_mb = config.MAX_CONTENT_LENGTH // (1024 * 1024)
    return jsonify({'ok': False, 'error': f'File too large (max {limit_mb} MB)'}), 413


def _set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    return response


# ═══════════════════════════════════════════════════════════════════════════
# APPLICATION FACTORY
# ═══════════════════════════════════════════════════════════════════════════

def create_app(container: Optional[AppContainer] = None, logs_dir: Optional[str] = None) -> Flask:
    """
    Builds the Flask app.

    Args:
        container: Dependencies to serve (the global container by default)
        logs_dir: Folder for the profiling logs (config.LOGS_DIR by default)

    Usage:
        app = create_app()
        app.run()
    """
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
    # Thai text stays readable in responses
    app.json.ensure_ascii = False

    app.extensions['it_marine'] = container or get_container()

    init_profiling(app, logs_dir=logs_dir)

    app.register_blueprint(bp)
    app.register_error_handler(RequestValidationError, _bad_request)
    app.register_error_handler(ImportValidationError, _bad_request)
    app.register_error_handler(UnsupportedImageError, _bad_request)
    app.register_error_handler(RequestEntityTooLarge, _too_large)
    app.after_request(_set_security_headers)
    return app


if __name__ == "__main__":
    app = create_app()
    if not config.FLASK_DEBUG:
        print(f"\n{'='*50}")
        print(f"  Server running at http://{config.FLASK_HOST}:{config.FLASK_PORT}")
        print(f"  Data folder: {app.extensions['it_marine'].base_path}")
        print(f"{'='*50}\n")
    app.run(debug=config.FLASK_DEBUG, host=config.FLASK_HOST, port=config.FLASK_PORT)
