# ============================================================================
# DATABASE INITIALIZER - INFRASTRUCTURE AS CODE
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# STATUS: Infrastructure - Database initialization orchestrator
# PURPOSE: Bootstrap the sdlapp schema from Pydantic models
# CREATED: 16 OCT 2026
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
DatabaseInitializer - deploys the schema store.

Steps, each recorded as a StepResult:
    test_connection  SELECT version() (skipped on dry run)
    deploy_schema    PydanticToSQL.generate_all() in one transaction
    verify_tables    every store model has its table (skipped on dry run)

A failed connection stops the run. A failed deployment fails the run. A
missing table after deployment is only a warning, since the DDL itself
reported success.

Usage:
    from infrastructure import DatabaseInitializer

    result = DatabaseInitializer().initialize_all(dry_run=True)
    print(result.to_dict()["summary"])
"""

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from core.config import get_defaults
from core.schema.sql_generator import PydanticToSQL, store_models

logger = logging.getLogger(__name__)

SUCCESS = "success"
FAILED = "failed"


# ============================================================================
# RESULTS
# ============================================================================

@dataclass
class StepResult:
    """Result of a single initialization step."""
    name: str
    status: str = "pending"
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def fail(self, error: str, message: str) -> "StepResult":
        self.status = FAILED
        self.error = error
        self.message = message
        return self


@dataclass
class InitializationResult:
    """Complete result of database initialization."""
    database_host: str
    database_name: str
    timestamp: str
    success: bool = False
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        counts = Counter(s.status for s in self.steps)
        return {
            "database_host": self.database_host,
            "database_name": self.database_name,
            "timestamp": self.timestamp,
            "success": self.success,
            "steps": [vars(s).copy() for s in self.steps],
            "errors": self.errors,
            "warnings": self.warnings,
            "summary": {
                "total_steps": len(self.steps),
                "successful": counts[SUCCESS],
                "failed": counts[FAILED],
                "skipped": counts["skipped"],
            },
        }


# ============================================================================
# INITIALIZER
# ============================================================================

class DatabaseInitializer:
    """
    Deploys the store schema. Every statement is idempotent, so running it
    against an existing installation changes nothing.
    """

    EXPECTED_TABLES = [PydanticToSQL.get_model_metadata(m)["table"] for m in store_models()]

    def __init__(self, repo=None, schema_name: Optional[str] = None):
        """
        Args:
            repo: Sync repository (defaults to PostgreSQLRepository)
            schema_name: Target schema (defaults to configuration)
        """
        self.schema_name = schema_name or get_defaults().database.schema_name
        self.host = os.environ.get("POSTGRES_HOST", "localhost")
        self.database = os.environ.get("POSTGRES_DB", "postgres")
        self._repo = repo

    @property
    def repo(self):
        if self._repo is None:
            from infrastructure.postgresql import PostgreSQLRepository
            self._repo = PostgreSQLRepository(schema_name=self.schema_name)
        return self._repo

    # ========================================================================
    # RUN
    # ========================================================================

    def initialize_all(self, dry_run: bool = False) -> InitializationResult:
        """
        Deploy the schema.

        Args:
            dry_run: Generate and log the DDL without connecting
        """
        result = InitializationResult(
            database_host=self.host,
            database_name=self.database,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        mode = "DRY RUN" if dry_run else "EXECUTE"
        logger.info(f"Initializing {self.host}/{self.database} schema {self.schema_name} ({mode})")

        if not dry_run:
            step = self._run("test_connection", self._test_connection)
            result.steps.append(step)
            if step.status == FAILED:
                result.errors.append(f"Connection failed: {step.error}")
                return result

        step = self._run("deploy_schema", lambda s: self._deploy_schema(s, dry_run))
        result.steps.append(step)
        if step.status == FAILED:
            result.errors.append(f"Schema deployment failed: {step.error}")

        if not dry_run:
            step = self.verify_installation()
            result.steps.append(step)
            if step.status == FAILED:
                result.warnings.append(f"Verification issue: {step.error}")

        result.success = not result.errors
        summary = result.to_dict()["summary"]
        logger.info(
            f"Initialization {'complete' if result.success else 'FAILED'}: "
            f"{summary['successful']} succeeded, {summary['failed']} failed"
        )
        return result

    def verify_installation(self) -> StepResult:
        """Check that every expected table exists."""
        return self._run("verify_tables", self._verify_tables)

    def _run(self, name: str, action: Callable[[StepResult], None]) -> StepResult:
        """Run one step; an exception fails the step instead of the run."""
        step = StepResult(name=name)
        try:
            action(step)
        except Exception as e:
            logger.error(f"Step {name} failed: {e}")
            step.fail(str(e), f"{name} failed: {e}")
        logger.info(f"   {name}: {step.status} - {step.message}")
        return step

    # ========================================================================
    # STEPS
    # ========================================================================

    def _test_connection(self, step: StepResult) -> None:
        row = self.repo.fetch_one("SELECT version() AS version, current_database() AS db")
        step.status = SUCCESS
        step.message = f"Connected to {row['db']}"
        step.details = {"version": row["version"][:50], "database": row["db"]}

    def _deploy_schema(self, step: StepResult, dry_run: bool) -> None:
        statements = PydanticToSQL(schema_name=self.schema_name).generate_all()

        if dry_run:
            for i, stmt in enumerate(statements, 1):
                logger.info(f"   [{i}] {stmt.as_string(None)[:100]}")
            step.status = SUCCESS
            step.message = f"[DRY RUN] Would execute {len(statements)} statements"
            step.details = {"statements_count": len(statements)}
            return

        outcome = self.repo.execute_ddl_statements(statements)
        step.details = {
            "statements_executed": outcome["executed"],
            "statements_skipped": outcome["skipped"],
            "schema": self.schema_name,
        }
        if outcome["errors"]:
            step.fail(
                "; ".join(outcome["errors"][:3]),
                f"Rolled back after {outcome['executed']} statements",
            )
            return
        step.status = SUCCESS
        step.message = f"Deployed {outcome['executed']} statements"

    def _verify_tables(self, step: StepResult) -> None:
        existing = self.repo.get_tables_in_schema(self.schema_name)
        expected = self.EXPECTED_TABLES
        missing = [t for t in expected if t not in existing]
        step.details = {"expected": expected, "existing": existing, "missing": missing}

        if missing:
            step.fail(f"Missing tables: {missing}", f"{len(missing)} tables missing")
        else:
            step.status = SUCCESS
            step.message = f"All {len(expected)} expected tables exist"


__all__ = [
    "DatabaseInitializer",
    "InitializationResult",
    "StepResult",
]
