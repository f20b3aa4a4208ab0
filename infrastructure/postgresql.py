# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Infrastructure - Sync PostgreSQL connection handling
# PURPOSE: Blocking database access for schema deployment scripts
# CREATED: 16 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Sync psycopg access for CLI tooling (schema deployment). The API uses the
async pool in repositories.database instead; both resolve the same
connection string.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from repositories.database import get_connection_string

logger = logging.getLogger(__name__)


class PostgreSQLRepository:
    """
    Sync repository for PostgreSQL database operations.

    Usage:
        repo = PostgreSQLRepository(schema_name="sdlapp")
        with repo.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        schema_name: str = "sdlapp",
    ):
        """
        Initialize PostgreSQL repository.

        Args:
            connection_string: Optional explicit connection string
            schema_name: Schema the repository works in
        """
        self.schema_name = schema_name
        self._conn_string = connection_string

    @property
    def conn_string(self) -> str:
        """Get or resolve the connection string (lazy)."""
        if self._conn_string is None:
            self._conn_string = get_connection_string()
        return self._conn_string

    @contextmanager
    def get_connection(self):
        """
        Context manager for PostgreSQL connections.

        Yields:
            psycopg connection with dict_row factory
        """
        try:
            conn = psycopg.connect(self.conn_string, row_factory=dict_row)
        except psycopg.OperationalError as e:
            logger.error(f"PostgreSQL connection error: {e}")
            raise
        with conn:
            yield conn

    def _query(self, query, params: Optional[tuple], many: bool):
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                rows = cur.fetchall() if many else cur.fetchone()
            conn.commit()
        return rows

    def fetch_one(self, query, params: Optional[tuple] = None) -> Optional[Dict[str, Any]]:
        """Execute query and fetch one row (dict_row)."""
        return self._query(query, params, many=False)

    def fetch_all(self, query, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        return self._query(query, params, many=True)

    def execute_ddl_statements(self, statements: List[sql.Composable]) -> Dict[str, Any]:
        """
        Execute DDL statements in one transaction.

        Statements are idempotent (IF NOT EXISTS / DO blocks), so a rerun
        against an existing schema is a no-op. The first failure rolls
        everything back.

        Returns:
            Dict with success, executed, skipped and errors
        """
        executed = 0
        errors: List[str] = []
        with self.get_connection() as conn:
            try:
                with conn.cursor() as cur:
                    for stmt in statements:
                        cur.execute(stmt)
                        executed += 1
                conn.commit()
            except psycopg.Error as e:
                conn.rollback()
                errors.append(str(e))
                logger.error(f"DDL statement {executed + 1} failed: {e}")

        return {
            "success": not errors,
            "executed": executed if not errors else 0,
            "skipped": len(statements) - executed if not errors else len(statements),
            "errors": errors,
        }

    def get_tables_in_schema(self, schema_name: Optional[str] = None) -> List[str]:
        """List base tables in a schema."""
        rows = self.fetch_all(
            """
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = %s AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            (schema_name or self.schema_name,),
        )
        return [row["table_name"] for row in rows]


__all__ = [
    "PostgreSQLRepository",
]
