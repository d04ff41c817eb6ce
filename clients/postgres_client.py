"""
PostgreSQL client with connection pooling.

Uses psycopg2 with ThreadedConnectionPool. Tenant isolation is not done by
the database here: scoped services build their own WHERE clauses from the
caller's Scope, so connections carry no per-request session settings.

Every call runs as one statement in its own transaction. Multi-step state
changes (redeeming a link, for instance) are written as a single statement
with CTEs so they stay atomic.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple
from uuid import UUID

import psycopg2
import psycopg2.extras
import psycopg2.pool

logger = logging.getLogger(__name__)

Params = Tuple | Dict | None

_adapters_registered = False


def _adapt(value: Any) -> Any:
    """UUIDs go over the wire as text, at any nesting depth."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (list, tuple)):
        return type(value)(_adapt(v) for v in value)
    if isinstance(value, dict):
        return {k: _adapt(v) for k, v in value.items()}
    return value


class PostgresClient:
    """
    PostgreSQL client returning plain row dicts.

    Usage:
        db = PostgresClient(database_url)
        videos = db.execute("SELECT * FROM videos WHERE is_active = %s", (True,))
        video = db.execute_single("SELECT * FROM videos WHERE id = %s", (video_id,))
    """

    # One pool per database URL, shared by every client pointed at it
    _connection_pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str, minconn: int = 2, maxconn: int = 20):
        self._database_url = database_url
        self._minconn = minconn
        self._maxconn = maxconn
        self._pool()

    def _pool(self) -> psycopg2.pool.ThreadedConnectionPool:
        """Return this URL's pool, opening it on first use."""
        global _adapters_registered

        with self._pools_lock:
            pool = self._connection_pools.get(self._database_url)
            if pool is not None:
                return pool

            pool = psycopg2.pool.ThreadedConnectionPool(
                minconn=self._minconn,
                maxconn=self._maxconn,
                dsn=self._database_url,
                connect_timeout=30,
            )
            if not _adapters_registered:
                psycopg2.extras.register_default_jsonb(globally=True)
                psycopg2.extras.register_uuid()
                _adapters_registered = True

            self._connection_pools[self._database_url] = pool
            logger.info(f"Connection pool opened ({self._minconn}-{self._maxconn} connections)")
            return pool

    @contextmanager
    def get_connection(self):
        """Borrow a pooled connection, rolling back anything left uncommitted."""
        pool = self._pool()
        conn = pool.getconn()
        if conn is None:
            raise RuntimeError("Could not get connection from pool")

        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            pool.putconn(conn)

    @contextmanager
    def _cursor(self, dict_rows: bool = True) -> Iterator[Any]:
        """Cursor inside a transaction that commits when the block exits cleanly."""
        factory = psycopg2.extras.RealDictCursor if dict_rows else None
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=factory) as cur:
                yield cur
            conn.commit()

    def _convert_params(self, params: Params) -> Params:
        return None if params is None else _adapt(params)

    def execute(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        with self._cursor() as cur:
            cur.execute(query, self._convert_params(params))
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def execute_single(self, query: str, params: Params = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        rows = self.execute(query, params)
        return rows[0] if rows else None

    def execute_scalar(self, query: str, params: Params = None) -> Any:
        """Execute query, return first value of first row or None."""
        with self._cursor(dict_rows=False) as cur:
            cur.execute(query, self._convert_params(params))
            row = cur.fetchone()
            return row[0] if row else None

    def execute_returning(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """
        Execute INSERT/UPDATE/DELETE ... RETURNING and return the rows.

        Unlike execute(), a statement without RETURNING is an error here
        (psycopg2.ProgrammingError on fetch).
        """
        with self._cursor() as cur:
            cur.execute(query, self._convert_params(params))
            return [dict(row) for row in cur.fetchall()]

    def ping(self) -> bool:
        """Health check. Raises psycopg2.Error if the database is unreachable."""
        return self.execute_scalar("SELECT 1") == 1

    def close(self) -> None:
        """Close this URL's pool."""
        with self._pools_lock:
            pool = self._connection_pools.pop(self._database_url, None)
            if pool is not None:
                pool.closeall()

    @classmethod
    def close_all_pools(cls) -> None:
        """Close every pool (process shutdown)."""
        with cls._pools_lock:
            for pool in cls._connection_pools.values():
                pool.closeall()
            cls._connection_pools.clear()
