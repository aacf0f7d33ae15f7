"""
Cloudflare D1 HTTP API Client

Hosted backend for the record store. Talks to Cloudflare D1 via the REST
API and exposes the same interface as app.db.base.Database.
"""

import requests
import logging
from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import Conflict, StoreUnavailable
from app.db.base import Database

logger = logging.getLogger(__name__)


class D1HTTPClient:
    """
    HTTP client for Cloudflare D1 REST API

    Usage:
        from app.core.config import settings
        client = D1HTTPClient(
            account_id=settings.D1_ACCOUNT_ID,
            database_id=settings.D1_DATABASE_ID,
            api_token=settings.D1_API_TOKEN
        )

        # Execute query
        rows = client.fetch_all("SELECT * FROM profiles WHERE email = ?", ("test@example.com",))
    """

    def __init__(self, account_id: str, database_id: str, api_token: str, timeout: float = 15.0):
        """
        Initialize D1 HTTP client

        Args:
            account_id: Cloudflare account ID
            database_id: D1 database ID
            api_token: Cloudflare API token with D1 permissions
            timeout: Per-request timeout in seconds
        """
        self.account_id = account_id
        self.database_id = database_id
        self.timeout = timeout
        self.base_url = f"https://api.cloudflare.com/client/v4/accounts/{account_id}/d1/database/{database_id}/query"
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json"
        })

    def execute(self, query: str, params: Tuple = ()) -> Dict[str, Any]:
        """
        Execute a SQL query

        Returns {"results": [...], "meta": {...}}. Raises StoreUnavailable on
        transport or API errors, Conflict on constraint violations.
        """
        payload = {
            "sql": query
        }

        if params:
            payload["params"] = list(params)

        try:
            response = self.session.post(self.base_url, json=payload, timeout=self.timeout)
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"D1 request failed: {e}")
            raise StoreUnavailable(f"Database request failed: {e}")
        except ValueError:
            raise StoreUnavailable(f"Database returned a non-JSON response (HTTP {response.status_code})")

        if not data.get("success"):
            errors = data.get("errors") or [{"message": "Unknown error"}]
            message = errors[0].get("message", str(errors[0])) if isinstance(errors[0], dict) else str(errors[0])
            if "constraint" in message.lower():
                raise Conflict(f"Record violates a constraint: {message}")
            logger.error(f"D1 query error: {message}")
            raise StoreUnavailable(f"Database error: {message}")

        results = data.get("result", [])
        if results:
            return {
                "results": results[0].get("results", []),
                "meta": results[0].get("meta", {})
            }
        return {"results": [], "meta": {}}

    def execute_write(self, query: str, params: Tuple = ()) -> int:
        """Execute an INSERT/UPDATE/DELETE and return the number of affected rows"""
        result = self.execute(query, params)
        return int(result["meta"].get("changes", 0))

    def fetch_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch a single row"""
        rows = self.execute(query, params)["results"]
        return rows[0] if rows else None

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows"""
        return self.execute(query, params)["results"]

    def fetch_value(self, query: str, params: Tuple = ()) -> Any:
        """Fetch a single value"""
        row = self.fetch_one(query, params)

        if row:
            return list(row.values())[0]

        return None

    # Row conversion and timestamps are backend independent
    now = staticmethod(Database.now)
    to_json = staticmethod(Database.to_json)
    row_to_dict = staticmethod(Database.row_to_dict)

    def init_schema(self, schema_path: str = "database/schema.sql"):
        """Apply the schema file statement by statement"""
        with open(schema_path, 'r') as f:
            schema = f.read()

        statements = [s.strip() for s in schema.split(";") if s.strip()]
        for statement in statements:
            self.execute(statement)
        logger.info(f"D1 schema initialized from {schema_path} ({len(statements)} statements)")

    def close(self):
        """Close the HTTP session"""
        self.session.close()
