#!/usr/bin/env python3
"""
ZeroDB Table Creation Script

Creates the users and challenges tables for Challenge Hub.
Supports dry-run mode and idempotent execution.

Usage:
    python scripts/setup-zerodb-tables.py             # Preview tables (default)
    python scripts/setup-zerodb-tables.py --dry-run   # Same, explicitly
    python scripts/setup-zerodb-tables.py --apply     # Create tables
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add python-api to path
sys.path.insert(0, str(Path(__file__).parent.parent / "python-api"))

from config import settings
from integrations.zerodb.client import ZeroDBClient
from integrations.zerodb.tables import TablesAPI
from rich.console import Console

console = Console()


# Nested sub-documents (audience, prizes, timeline, ...) are stored as jsonb
TABLE_SCHEMAS = {
    "users": {
        "description": "Accounts, roles, preferences and challenge links",
        "schema": {
            "fields": {
                "user_id": {"type": "uuid", "primary_key": True},
                "name": {"type": "text", "required": True},
                "email": {"type": "text", "unique": True, "required": True},
                "password_hash": {"type": "text", "required": True},
                "role": {
                    "type": "text",
                    "check": "role IN ('participant', 'reviewer', 'administrator')"
                },
                "expertise": {"type": "jsonb"},
                "organization": {"type": "jsonb"},
                "preferences": {"type": "jsonb"},
                "created_challenges": {"type": "jsonb"},
                "participating_challenges": {"type": "jsonb"},
                "created_at": {"type": "timestamp", "default": "NOW()"}
            }
        }
    },

    "challenges": {
        "description": "Challenge definitions with announcements and submissions",
        "schema": {
            "fields": {
                "challenge_id": {"type": "uuid", "primary_key": True},
                "title": {"type": "text", "required": True},
                "problem_statement": {"type": "text", "required": True},
                "goals": {"type": "jsonb"},
                "challenge_type": {
                    "type": "text",
                    "check": "challenge_type IN ('Ideation', 'Design', 'Development', 'Data Science')"
                },
                "audience": {"type": "jsonb"},
                "communication": {"type": "jsonb"},
                "submission": {"type": "jsonb"},
                "prizes": {"type": "jsonb"},
                "timeline": {"type": "jsonb"},
                "evaluation": {"type": "jsonb"},
                "status": {
                    "type": "text",
                    "check": "status IN ('draft', 'active', 'completed', 'cancelled')"
                },
                "creator": {"type": "uuid", "required": True},
                "announcements": {"type": "jsonb"},
                "submissions": {"type": "jsonb"},
                "created_at": {"type": "timestamp", "default": "NOW()"},
                "updated_at": {"type": "timestamp", "default": "NOW()"}
            }
        }
    },
}


def print_header(message: str):
    console.rule(f"[bold blue]{message}")


def print_success(message: str):
    console.print(f"[green]✓ {message}")


def print_warning(message: str):
    console.print(f"[yellow]⚠ {message}")


def print_error(message: str):
    console.print(f"[red]✗ {message}")


def print_info(message: str):
    console.print(f"[blue]ℹ {message}")


async def check_existing_tables(tables_api: TablesAPI) -> set:
    """
    Check which tables already exist in ZeroDB.

    Returns:
        Set of existing table names
    """
    try:
        existing_tables = await tables_api.list()
        return {table.get("name") for table in existing_tables}
    except Exception as e:
        print_warning(f"Could not fetch existing tables: {e}")
        return set()


async def create_table(
    tables_api: TablesAPI,
    table_name: str,
    table_config: dict,
    dry_run: bool = False
) -> bool:
    """
    Create a single table in ZeroDB.

    Args:
        tables_api: ZeroDB Tables API client
        table_name: Name of the table
        table_config: Table configuration with schema
        dry_run: If True, only print what would be created

    Returns:
        True if successful, False otherwise
    """
    try:
        if dry_run:
            print_info(f"Would create table: {table_name}")
            console.print(f"  Description: {table_config['description']}")
            console.print(f"  Fields: {len(table_config['schema']['fields'])} columns")
            return True

        await tables_api.create(
            name=table_name,
            schema=table_config["schema"],
            description=table_config["description"]
        )

        print_success(f"Created table: {table_name}")
        return True

    except Exception as e:
        print_error(f"Failed to create table {table_name}: {e}")
        return False


async def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Create ZeroDB tables for Challenge Hub"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview tables without creating them"
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Create tables in ZeroDB"
    )

    args = parser.parse_args()

    if args.dry_run and args.apply:
        parser.error("--dry-run and --apply are mutually exclusive")
    # Nothing is written unless --apply is given
    args.dry_run = not args.apply

    mode = "DRY RUN MODE" if args.dry_run else "APPLY MODE"
    print_header(f"ZeroDB Table Setup - {mode}")

    existing_tables: set = set()
    client = None
    tables_api = None
    if not args.dry_run:
        try:
            client = ZeroDBClient(
                api_key=settings.ZERODB_API_KEY or None,
                project_id=settings.ZERODB_PROJECT_ID or None,
                base_url=settings.ZERODB_BASE_URL,
                timeout=settings.ZERODB_TIMEOUT,
            )
            tables_api = client.tables
            print_success("Connected to ZeroDB")
        except ValueError as e:
            print_error(f"Failed to connect to ZeroDB: {e}")
            print_info("Make sure ZERODB_API_KEY and ZERODB_PROJECT_ID are set")
            sys.exit(1)

        print_info("Checking for existing tables...")
        existing_tables = await check_existing_tables(tables_api)
        if existing_tables:
            print_warning(f"Found {len(existing_tables)} existing tables: {', '.join(sorted(existing_tables))}")

    print_info(f"Processing {len(TABLE_SCHEMAS)} tables...")

    created = 0
    skipped = 0
    failed = 0

    for table_name, table_config in TABLE_SCHEMAS.items():
        if table_name in existing_tables:
            print_warning(f"Skipped table (already exists): {table_name}")
            skipped += 1
            continue

        success = await create_table(tables_api, table_name, table_config, args.dry_run)

        if success:
            created += 1
        else:
            failed += 1

    if client is not None:
        await client.close()

    print_header("Summary")

    if args.dry_run:
        print_info(f"Would create: {created} tables")
    else:
        print_success(f"Created: {created} tables")
        if skipped > 0:
            print_warning(f"Skipped: {skipped} tables (already exist)")
        if failed > 0:
            print_error(f"Failed: {failed} tables")

    if failed > 0:
        sys.exit(1)
    print_success("Table setup complete!")


if __name__ == "__main__":
    asyncio.run(main())
