# ============================================================================
# SCHEMA REPOSITORY TESTS
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Tests - Projection reads against a recording connection
# PURPOSE: Verify statement order and transaction scope of SchemaRepository.load
# CREATED: 19 OCT 2026
# ============================================================================
"""
SchemaRepository Tests

The connection fake records every statement and transaction boundary so
the tests can check which statements share a transaction.

Run with:
    pytest tests/test_schema_repo.py -v
"""

import asyncio
from contextlib import asynccontextmanager

import pytest

from infrastructure.base_repository import RepositoryError
from repositories.schema_repo import SchemaRepository


class RecordingCursor:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params=None):
        self.conn.events.append("select")
        if self.conn.fail_on_select == self.conn.events.count("select"):
            raise RuntimeError("canceling statement due to conflict with recovery")

    async def fetchall(self):
        return []


class RecordingConnection:
    def __init__(self, fail_on_select=None):
        self.events = []
        self.fail_on_select = fail_on_select

    @asynccontextmanager
    async def transaction(self):
        self.events.append("begin")
        try:
            yield
        except BaseException:
            self.events.append("rollback")
            raise
        self.events.append("commit")

    async def execute(self, query, params=None):
        self.events.append(f"execute:{query.as_string(None)}")

    def cursor(self, row_factory=None):
        return RecordingCursor(self)


class RecordingPool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def connection(self):
        yield self.conn


class TestLoad:
    """SchemaRepository.load()."""

    def test_reads_share_one_snapshot(self):
        conn = RecordingConnection()
        repo = SchemaRepository(RecordingPool(conn))

        persisted = asyncio.run(repo.load(1))

        assert persisted.entities == []
        assert conn.events == [
            "begin",
            "execute:SET TRANSACTION ISOLATION LEVEL REPEATABLE READ, READ ONLY",
            "select",
            "select",
            "select",
            "commit",
        ]

    def test_caller_connection_is_used_as_is(self):
        pool_conn = RecordingConnection()
        caller_conn = RecordingConnection()
        repo = SchemaRepository(RecordingPool(pool_conn))

        asyncio.run(repo.load(1, conn=caller_conn))

        assert caller_conn.events == ["select", "select", "select"]
        assert pool_conn.events == []

    def test_failed_read_rolls_back(self):
        conn = RecordingConnection(fail_on_select=2)
        repo = SchemaRepository(RecordingPool(conn))

        with pytest.raises(RepositoryError, match="projection load failed for 1"):
            asyncio.run(repo.load(1))

        assert conn.events[-1] == "rollback"
        assert "commit" not in conn.events
