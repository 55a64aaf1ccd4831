# reset_db.py
"""
Database reset utility - drops all fleet tables and recreates them fresh.

Usage:
    python reset_db.py           # Reset only
    python reset_db.py --seed    # Reset + seed sample tractors
"""
import argparse

from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from config.database import get_sync_database_url
from db_base import Base

# Import all models to register them with Base.metadata
import db_models  # noqa: F401


def reset_database() -> bool:
    """Drop all tables and recreate them."""
    sync_url = get_sync_database_url(settings.DATABASE_URL)

    print("=" * 60)
    print("DATABASE RESET UTILITY")
    print("=" * 60)
    print(f"\nConnecting to: {sync_url.split('@')[1] if '@' in sync_url else sync_url}")

    engine = create_engine(sync_url)
    try:
        existing = inspect(engine).get_table_names()
        if existing:
            print(f"\nFound {len(existing)} tables: {', '.join(existing)}")
            print("\nDropping fleet tables...")
        else:
            print("\nNo existing tables found.")
        Base.metadata.drop_all(bind=engine)

        print("\n" + "-" * 60)
        print("Creating fresh tables from SQLAlchemy models...")
        print("-" * 60)
        Base.metadata.create_all(bind=engine)

        inspector = inspect(engine)
        tables = sorted(inspector.get_table_names())
        print(f"\nCreated {len(tables)} tables:")
        for table in tables:
            print(f"\n  {table}:")
            for column in inspector.get_columns(table):
                print(f"    - {column['name']}: {column['type']}")

        print("\n" + "=" * 60)
        print("DATABASE RESET COMPLETE!")
        print("=" * 60)
        return True

    except SQLAlchemyError as e:
        print(f"\nERROR: {e}")
        return False

    finally:
        engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Reset database - drop all fleet tables and recreate fresh"
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Also seed the database with sample tractors after reset"
    )
    args = parser.parse_args()

    success = reset_database()

    if success and args.seed:
        from seed_database import seed_tractors
        seed_tractors()
    elif success:
        print("\nTo seed sample tractors, run:")
        print("  python reset_db.py --seed")
        print("  OR")
        print("  python seed_database.py")


if __name__ == "__main__":
    main()
