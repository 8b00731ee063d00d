#!/usr/bin/env python3
"""
Create the coaching tables in Snowflake.

Creates one sequence and one table per entity kind if they do not exist.
With --seed-demo the demo roster is loaded as well, which is only meant
for a fresh development schema.

Usage:
    python scripts/init_snowflake_schema.py [--seed-demo] [--dry-run]

Requires:
    - .env file with Snowflake credentials
"""

import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from cricketcoach.config.settings import get_settings  # noqa: E402
from cricketcoach.core.coaching.errors import StorageUnavailableError  # noqa: E402
from cricketcoach.infrastructure.persistence.demo_data import load_demo_roster  # noqa: E402
from cricketcoach.infrastructure.snowflake.client import get_snowflake_connection  # noqa: E402
from cricketcoach.infrastructure.snowflake.repositories.coaching import (  # noqa: E402
    SCHEMA_STATEMENTS,
    SnowflakeCoachingRepository,
    SnowflakeConfig,
)


def build_config() -> SnowflakeConfig:
    settings = get_settings()
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Create the coaching schema in Snowflake')
    parser.add_argument('--seed-demo', action='store_true', help='Load the demo roster after creating tables')
    parser.add_argument('--dry-run', action='store_true', help='Print the DDL without connecting')
    args = parser.parse_args()

    if args.dry_run:
        print("\n=== DRY RUN - No statements will be executed ===\n")
        for statement in SCHEMA_STATEMENTS:
            print(statement.strip() + ";\n")
        return

    config = build_config()
    if not config.account or not config.user:
        print("ERROR: Missing SNOWFLAKE_ACCOUNT or SNOWFLAKE_USER")
        sys.exit(1)

    print(f"Connecting to Snowflake account: {config.account}")
    try:
        with get_snowflake_connection(config) as conn:
            repository = SnowflakeCoachingRepository(conn)
            repository.ensure_schema()
            print(f"Schema ready in {config.database}.{config.schema}")

            if args.seed_demo:
                if repository.players.all():
                    print("Players already exist, skipping demo roster")
                else:
                    players = load_demo_roster(repository)
                    print(f"Loaded demo roster: {len(players)} players")
    except StorageUnavailableError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
