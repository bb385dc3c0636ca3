"""
Plan state persistence for the LH2 AOP dashboard.

One row (id = 1) holds the whole plan as JSON text columns. PostgreSQL is used
when DB_HOST is set (threaded connection pool); otherwise a local SQLite file.
Graceful degradation: init_db() returns False when no backend is reachable.
"""

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from plan import DEFAULT_OVERHEAD, DEFAULT_RPM_SEASONALITY

log = logging.getLogger('lh2')

_pool = None
_sqlite_path = ''
_backend = ''  # 'postgres' | 'sqlite' | ''

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'dashboard.db')

# blob key -> column
_COLUMNS = [
    ('overhead', 'overhead'),
    ('rpmSeasonality', 'rpm_seasonality'),
    ('baselineData', 'baseline_data'),
    ('syndConfigs', 'synd_configs'),
    ('hiringPlans', 'hiring_plans'),
    ('discConfigs', 'disc_configs'),
]

_CREATE_SQL = """
    CREATE TABLE IF NOT EXISTS app_state (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        overhead TEXT,
        rpm_seasonality TEXT,
        baseline_data TEXT,
        synd_configs TEXT,
        hiring_plans TEXT,
        disc_configs TEXT,
        last_updated TEXT,
        updated_by TEXT
    )
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def default_state() -> dict:
    """Fresh state: default overhead and seasonality; brand sections left null."""
    return {
        'overhead': dict(DEFAULT_OVERHEAD),
        'rpmSeasonality': dict(DEFAULT_RPM_SEASONALITY),
        'baselineData': None,
        'syndConfigs': None,
        'hiringPlans': None,
        'discConfigs': None,
        'lastUpdated': _now_iso(),
        'updatedBy': 'system',
    }


# ---------------------------------------------------------------------------
# Connection handling
# ---------------------------------------------------------------------------

def _init_postgres() -> bool:
    global _pool
    try:
        import psycopg2
        from psycopg2 import pool as pg_pool

        host = os.getenv('DB_HOST', '')
        _pool = pg_pool.ThreadedConnectionPool(
            minconn=1,
            maxconn=int(os.getenv('DB_MAX_CONN', '10')),
            host=host,
            port=int(os.getenv('DB_PORT', '5432')),
            dbname=os.getenv('DB_NAME', 'lh2_dashboard'),
            user=os.getenv('DB_USER', 'postgres'),
            password=os.getenv('DB_PASSWORD', ''),
            connect_timeout=5,
        )
        log.info("PostgreSQL pool initialised (%s:%s/%s)",
                 host, os.getenv('DB_PORT', '5432'), os.getenv('DB_NAME', 'lh2_dashboard'))
        return True
    except Exception as e:
        log.warning("PostgreSQL unavailable: %s", e)
        _pool = None
        return False


def init_db(path: Optional[str] = None) -> bool:
    """Pick a backend, create the table and seed the default row. True on success."""
    global _backend, _sqlite_path
    _backend = ''
    if os.getenv('DB_HOST') and path is None:
        if _init_postgres():
            _backend = 'postgres'
    if not _backend:
        _sqlite_path = path or os.getenv('LH2_DB_PATH') or DEFAULT_DB_PATH
        try:
            os.makedirs(os.path.dirname(os.path.abspath(_sqlite_path)), exist_ok=True)
            conn = sqlite3.connect(_sqlite_path)
            conn.execute('PRAGMA journal_mode=WAL')
            conn.close()
            _backend = 'sqlite'
            log.info("SQLite state store: %s", _sqlite_path)
        except (sqlite3.Error, OSError) as e:
            log.warning("SQLite unavailable (read-only filesystem?): %s", e)
            return False

    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(_CREATE_SQL)
    if not state_exists():
        _write(default_state(), 'system', insert=True)
        log.info("Initialised database with default state")
    else:
        log.info("Existing state found in database")
    return True


def is_available() -> bool:
    return bool(_backend)


def backend() -> str:
    return _backend


@contextmanager
def get_conn():
    """Context manager: yields a connection, commits on success, rolls back on error."""
    if _backend == 'postgres':
        conn = _pool.getconn()
    elif _backend == 'sqlite':
        conn = sqlite3.connect(_sqlite_path)
    else:
        raise RuntimeError("State store not initialised")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        if _backend == 'postgres':
            _pool.putconn(conn)
        else:
            conn.close()


def _sql(query: str) -> str:
    """Queries are written with '?' placeholders; psycopg2 wants '%s'."""
    return query.replace('?', '%s') if _backend == 'postgres' else query


# ---------------------------------------------------------------------------
# State CRUD
# ---------------------------------------------------------------------------

def state_exists() -> bool:
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute('SELECT id FROM app_state WHERE id = 1')
        return cur.fetchone() is not None


def _write(state: dict, updated_by: str, insert: bool = False) -> str:
    last_updated = state.get('lastUpdated') if insert else _now_iso()
    values = [json.dumps(state.get(key)) for key, _ in _COLUMNS]
    cols = [col for _, col in _COLUMNS] + ['last_updated', 'updated_by']
    with get_conn() as conn:
        cur = conn.cursor()
        if insert:
            cur.execute(_sql(
                f"INSERT INTO app_state (id, {', '.join(cols)}) "
                f"VALUES (1, {', '.join('?' for _ in cols)})"
            ), values + [last_updated, updated_by])
        else:
            cur.execute(_sql(
                f"UPDATE app_state SET {', '.join(c + ' = ?' for c in cols)} WHERE id = 1"
            ), values + [last_updated, updated_by])
    return last_updated


def load_state() -> dict:
    """Return the stored plan blob, or the default state when no row exists."""
    cols = [col for _, col in _COLUMNS] + ['last_updated', 'updated_by']
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(f"SELECT {', '.join(cols)} FROM app_state WHERE id = 1")
        row = cur.fetchone()
    if row is None:
        return default_state()

    state = {}
    for (key, _), raw in zip(_COLUMNS, row):
        state[key] = json.loads(raw) if raw else None
    state['lastUpdated'] = row[-2]
    state['updatedBy'] = row[-1]
    return state


def save_state(state: dict) -> str:
    """Persist a plan blob. Returns the new last-updated timestamp."""
    ts = _write(state, state.get('updatedBy') or 'user')
    log.info("State saved at %s", ts)
    return ts


def reset_state() -> dict:
    """Overwrite the stored plan with the defaults and return them."""
    state = default_state()
    state['updatedBy'] = 'system-reset'
    state['lastUpdated'] = _write(state, 'system-reset')
    log.info("State reset to defaults")
    return state
