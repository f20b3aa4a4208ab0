#!/usr/bin/env python
# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT
# ============================================================================
# EPOCH: 1 - SDL ENGINE
# PURPOSE: Deploy the sdlapp schema to PostgreSQL using PydanticToSQL
# USAGE:
#   python scripts/deploy_schema.py --dry-run    # Preview SQL
#   python scripts/deploy_schema.py              # Execute deployment
#   python scripts/deploy_schema.py --status     # Check current status
# ============================================================================

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from infrastructure import DatabaseInitializer, PostgreSQLRepository


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deploy the sdlapp schema to PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/deploy_schema.py --dry-run     # Preview DDL without executing
  python scripts/deploy_schema.py               # Deploy schema
  python scripts/deploy_schema.py --status      # Check current installation

Environment Variables:
  DATABASE_URL          Full PostgreSQL connection string
  POSTGRES_HOST         Database host (default: localhost)
  POSTGRES_DB           Database name (default: postgres)
  POSTGRES_USER         Database user (default: postgres)
  POSTGRES_PASSWORD     Database password
  POSTGRES_PORT         Database port (default: 5432)
  POSTGRES_SSLMODE      SSL mode (default: prefer)
        """
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Check current installation status"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    repo = PostgreSQLRepository(connection_string=args.connection) if args.connection else None
    initializer = DatabaseInitializer(repo=repo)

    print("=" * 70)
    print("SDL ENGINE - Schema Deployment")
    print("=" * 70)
    print(f"Host: {initializer.host}")
    print(f"Database: {initializer.database}")
    print(f"Schema: {initializer.schema_name}")
    print("=" * 70)

    if args.status:
        step = initializer.verify_installation()
        print(f"\n[STATUS] {step.status}: {step.message}")
        for table in step.details.get("existing", []):
            print(f"  - {initializer.schema_name}.{table}")
        return 0 if step.status == "success" else 1

    print(f"\nMode: {'DRY RUN' if args.dry_run else 'EXECUTE'}\n")
    result = initializer.initialize_all(dry_run=args.dry_run)

    print("\n[RESULTS]\n")
    for step in result.steps:
        print(f"[{step.status.upper()}] {step.name}: {step.message}")
        if step.error:
            print(f"   Error: {step.error}")
        if step.details and args.verbose:
            for key, value in step.details.items():
                print(f"   {key}: {value}")

    print("\n" + "=" * 70)
    if not result.success:
        print("Deployment failed!")
        for error in result.errors:
            print(f"   - {error}")
        return 1
    print("Deployment completed successfully")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
