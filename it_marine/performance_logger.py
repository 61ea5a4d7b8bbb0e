# ==============================================================================
# INTERNAL PROFILING
# ==============================================================================
# Measures route and function timings without getting in the user's way.
# Writes human-readable logs under LOGS_DIR (see config.py).
#
# ENABLE/DISABLE: ENABLE_PROFILING environment variable ('0' disables)
# ==============================================================================

import os
import time
import threading
from datetime import datetime
from functools import wraps
from collections import defaultdict

from it_marine import config

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = config.ENABLE_PROFILING

# Time thresholds (milliseconds)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

_logs_dir = config.LOGS_DIR

# Readable names for the routes (logs meant for humans)
ROUTE_NAMES = {
    # Dashboard
    'GET /api/dashboard': 'View dashboard',
    'GET /api/data': 'Read full snapshot',

    # Work logs
    'GET /api/worklogs': 'List work logs',
    'POST /api/worklogs': 'Record work log',
    'PUT /api/worklogs/<log_id>': 'Edit work log',
    'DELETE /api/worklogs/<log_id>': 'Delete work log',
    'POST /api/worklogs/<log_id>/status': 'Change work log status',

    # Tickets
    'GET /api/tickets': 'List tickets',
    'POST /api/tickets': 'Open ticket',
    'PUT /api/tickets/<ticket_id>': 'Edit ticket',
    'DELETE /api/tickets/<ticket_id>': 'Delete ticket',
    'POST /api/tickets/<ticket_id>/status': 'Change ticket status',
    'POST /api/tickets/vat': 'Preview VAT',

    # Assets
    'GET /api/assets': 'List assets',
    'POST /api/assets': 'Register asset',
    'PUT /api/assets/<asset_id>': 'Edit asset',
    'DELETE /api/assets/<asset_id>': 'Delete asset',
    'POST /api/assets/<asset_id>/status': 'Change asset status',
    'GET /api/assets/summary': 'Asset summary',
    'GET /api/assets/drilldown': 'Asset drill-down',

    # Inspections
    'GET /api/inspections': 'List inspections',
    'POST /api/inspections': 'Record inspection',
    'PUT /api/inspections/<inspection_id>': 'Edit inspection',
    'DELETE /api/inspections/<inspection_id>': 'Delete inspection',

    # Backups, reports, AI
    'GET /backup/export': 'Export backup',
    'POST /backup/import': 'Import backup',
    'POST /api/images': 'Encode image',
    'GET /reports/worklogs/<date>': 'Print day report',
    'GET /api/summary': 'AI summary',
}


# ═══════════════════════════════════════════════════════════════════════════
# FUNCTION STATISTICS (in memory)
# ═══════════════════════════════════════════════════════════════════════════

# {function_name: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()
_write_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# LOG WRITERS
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp():
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _write_log(filename, content):
    """Appends content to a log file. Logging problems never reach the app."""
    try:
        with _write_lock:
            os.makedirs(_logs_dir, exist_ok=True)
            with open(os.path.join(_logs_dir, filename), 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        pass


def _get_route_name(method, path, rule=None):
    """Readable name for a route, falling back to 'METHOD /path'."""
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ ROUTE PROFILING
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms):
    """Records one request in performance.log"""
    action_name = _get_route_name(method, path, rule)
    log_entry = f"""
════════════════════════════════════════
[PERFORMANCE] {_get_timestamp()}
────────────────────────────────────────
Action: {action_name}
Route: {method} {path}
Time: {time_ms:.0f} ms
"""
    _write_log(PERFORMANCE_LOG, log_entry)


def log_slow_route(method, path, rule, time_ms, level='WARNING'):
    """Records a slow request in slow_routes.log (WARNING >300ms, CRITICAL >700ms)"""
    action_name = _get_route_name(method, path, rule)
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL
    log_entry = f"""
[{level}] {_get_timestamp()}
────────────────────────────────────────
Slow route: {action_name}
Detail: {method} {path}
Time: {time_ms:.0f} ms (threshold: {threshold} ms)
────────────────────────────────────────
"""
    _write_log(SLOW_ROUTES_LOG, log_entry)


def init_profiling(app, logs_dir=None):
    """
    Registers before_request / after_request timing hooks on a Flask app.

    Usage:
        from it_marine.performance_logger import init_profiling
        init_profiling(app)
    """
    global _logs_dir
    if logs_dir:
        _logs_dir = logs_dir

    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request

        if not hasattr(g, 'start_time'):
            return response
        if request.path.startswith('/static'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        rule = str(request.url_rule) if request.url_rule else request.path

        log_route_performance(request.method, request.path, rule, elapsed)
        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(request.method, request.path, rule, elapsed, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(request.method, request.path, rule, elapsed, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ FUNCTION DECORATOR
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Measures calls, average and max time of a function.

    Usage:
        @profile_function
        def my_function():
            ...

        @profile_function(name="Filter records")
        def filter_records():
            ...
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn

        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms
                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Allow bare @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    severity = 'CRITICAL' if time_ms >= THRESHOLD_CRITICAL else 'SLOW'
    log_entry = f"""
[{severity}] {_get_timestamp()}
Function: {func_name}
Time: {time_ms:.0f} ms
────────────────────────────────────────
"""
    _write_log(SLOW_FUNCTIONS_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ STATISTICS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Returns:
        dict: {name: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def reset_stats():
    """Clears all statistics (handy in tests)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
