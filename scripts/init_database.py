#!/usr/bin/env python
"""
Database initialization script for the social graph.

This script:
1. Creates the database schema (users, graph_edges with indexes)
2. Optionally seeds a small demo campus (users across departments and
   years, follow edges and interactions)
3. Verifies the schema

Usage:
    # Create tables only
    python scripts/init_database.py

    # Drop everything and seed demo data
    python scripts/init_database.py --reset --seed
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from socialgraph.api.config import get_database_path
from socialgraph.database import init_database, verify_schema, crud
from socialgraph.services import build_services
from socialgraph.utils.logging_config import configure_maintenance_logging


DEMO_USERS = [
    # user_id, name, department, year
    ("alice", "Alice Chen", "Computer Science", 2026),
    ("bob", "Bob Kumar", "Computer Science", 2026),
    ("carol", "Carol Diaz", "Computer Science", 2025),
    ("dan", "Dan Okafor", "Mathematics", 2026),
    ("erin", "Erin Walsh", "Mathematics", 2024),
    ("farah", "Farah Haddad", "Physics", 2026),
    ("gus", "Gus Lindqvist", "Physics", 2025),
    ("prof_ng", "Dr. Ng", "Computer Science", None),
]

DEMO_FOLLOWS = [
    ("alice", "bob"), ("bob", "alice"),
    ("alice", "carol"), ("bob", "dan"),
    ("carol", "dan"), ("carol", "prof_ng"),
    ("dan", "erin"), ("farah", "gus"),
    ("gus", "farah"), ("bob", "prof_ng"),
]

DEMO_INTERACTIONS = [
    ("alice", "bob", "message", 5),
    ("bob", "alice", "message", 5),
    ("alice", "carol", "like", 3),
    ("farah", "gus", "comment", 2),
]


def print_section(title):
    """Print a formatted section header."""
    print(f"\n{'='*60}")
    print(f"{title}")
    print('='*60)


def seed_demo_data(db_path: str, college: str = "main") -> None:
    """Populate the demo campus through the graph engine."""
    services = build_services(db_path=db_path, cache_enabled=False)
    try:
        with services.db_manager.session_scope() as session:
            for user_id, name, department, year in DEMO_USERS:
                if crud.get_user(session, user_id) is None:
                    crud.create_user(
                        session,
                        user_id=user_id,
                        name=name,
                        department=department,
                        year=year,
                        college=college,
                    )
        print(f"  ✓ {len(DEMO_USERS)} users")

        for source_id, target_id in DEMO_FOLLOWS:
            services.graph.follow_user(source_id, target_id)
        print(f"  ✓ {len(DEMO_FOLLOWS)} follow edges")

        for source_id, target_id, interaction, times in DEMO_INTERACTIONS:
            for _ in range(times):
                services.graph.update_edge_weight(source_id, target_id, interaction)
        print(f"  ✓ {sum(t for *_, t in DEMO_INTERACTIONS)} interactions")
    finally:
        services.close()


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the social graph database")
    parser.add_argument(
        '--db-path',
        default=None,
        help='Database file path or URL (default: DATABASE_URL or data/socialgraph.db)'
    )
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Drop and recreate database tables (WARNING: deletes all data)'
    )
    parser.add_argument(
        '--seed',
        action='store_true',
        help='Seed a small demo campus'
    )
    args = parser.parse_args()

    configure_maintenance_logging()
    db_path = args.db_path or get_database_path()

    print_section("1. Creating schema")
    db_manager = init_database(db_path=db_path, reset=args.reset)

    if args.seed:
        print_section("2. Seeding demo data")
        seed_demo_data(db_path)

    print_section("3. Verifying schema")
    ok = verify_schema(db_manager)
    db_manager.close()

    if ok:
        print("\n✅ Database initialization successful!")
        return 0
    print("\n❌ Database initialization failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
