import sqlite3
import threading
import logging
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
import json

from app.core.exceptions import Conflict, StoreUnavailable

logger = logging.getLogger(__name__)


class Database:
    """
    Database wrapper for SQLite

    Local backend for the record store. The hosted backend
    (app.db.d1_http_client.D1HTTPClient) exposes the same methods, so
    repositories work unchanged against either one.

    One connection is shared between FastAPI worker threads; every
    statement runs under a re-entrant lock.
    """

    def __init__(self, db_path: str = "payout_gateway.db"):
        self.db_path = db_path
        self.connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def connect(self):
        """Establish database connection"""
        with self._lock:
            if not self.connection:
                try:
                    self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
                except sqlite3.Error as e:
                    raise StoreUnavailable(f"Could not open database {self.db_path}: {e}")
                self.connection.row_factory = sqlite3.Row  # Return rows as dictionaries
                self.connection.execute("PRAGMA foreign_keys = ON")
            return self.connection

    def close(self):
        """Close database connection"""
        with self._lock:
            if self.connection:
                self.connection.close()
                self.connection = None

    def _run(self, query: str, params: Tuple, fetch: Optional[str] = None):
        with self._lock:
            conn = self.connect()
            try:
                cursor = conn.cursor()
                cursor.execute(query, params)
                if fetch == "one":
                    result = cursor.fetchone()
                elif fetch == "all":
                    result = cursor.fetchall()
                else:
                    result = cursor
                conn.commit()
                return result
            except sqlite3.IntegrityError as e:
                conn.rollback()
                raise Conflict(f"Record violates a constraint: {e}")
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"SQLite error: {e} (query: {query.split()[0]})")
                raise StoreUnavailable(f"Database error: {e}")

    def execute(self, query: str, params: Tuple = ()) -> sqlite3.Cursor:
        """Execute a single query"""
        return self._run(query, params)

    def execute_write(self, query: str, params: Tuple = ()) -> int:
        """Execute an INSERT/UPDATE/DELETE and return the number of affected rows"""
        return self._run(query, params).rowcount

    def fetch_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch a single row"""
        row = self._run(query, params, fetch="one")
        return dict(row) if row else None

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows"""
        rows = self._run(query, params, fetch="all")
        return [dict(row) for row in rows]

    def fetch_value(self, query: str, params: Tuple = ()) -> Any:
        """Fetch a single value"""
        row = self._run(query, params, fetch="one")
        return row[0] if row else None

    @staticmethod
    def now() -> int:
        """Get current timestamp in milliseconds"""
        return int(datetime.now(timezone.utc).timestamp() * 1000)

    @staticmethod
    def to_json(data: Any) -> str:
        """Convert Python object to JSON string"""
        return json.dumps(data) if data else None

    @staticmethod
    def row_to_dict(row: Dict[str, Any], json_fields: List[str] = None) -> Dict[str, Any]:
        """Convert database row to dictionary with proper types"""
        if json_fields is None:
            json_fields = []

        result = dict(row)

        # Convert JSON fields
        for field in json_fields:
            if field in result and result[field]:
                try:
                    result[field] = json.loads(result[field])
                except (json.JSONDecodeError, TypeError):
                    pass

        # Convert boolean fields (stored as 0/1 in SQLite)
        for key, value in result.items():
            if key.startswith('is_'):
                result[key] = bool(value)

        return result

    def init_schema(self, schema_path: str = "database/schema.sql"):
        """Initialize database schema from SQL file"""
        with open(schema_path, 'r') as f:
            schema = f.read()

        with self._lock:
            conn = self.connect()
            try:
                conn.executescript(schema)
                conn.commit()
            except sqlite3.Error as e:
                raise StoreUnavailable(f"Error initializing schema: {e}")
        logger.info(f"Database schema initialized from {schema_path}")
