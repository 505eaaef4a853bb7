"""
Run database migrations for ordertrack.

Applies SQL migration files from migrations/ to the configured database:
DATABASE_URL if set, otherwise the Cloud SQL instance in
INSTANCE_CONNECTION_NAME with IAM authentication.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.engine import Engine

from ordertrack.config import Settings, load_settings
from ordertrack.db import DatabaseConnection

# Load environment variables
load_dotenv()

# Migration directory
MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"


def connect(settings: Settings) -> DatabaseConnection:
    """Open the configured database, exiting when nothing is configured."""
    if settings.database_url:
        return DatabaseConnection.from_url(settings.database_url)

    if not settings.instance_connection_name:
        print("❌ Neither DATABASE_URL nor INSTANCE_CONNECTION_NAME is set")
        print("   Cloud SQL format: project:region:instance")
        sys.exit(1)

    try:
        return DatabaseConnection.from_cloud_sql(
            instance_connection_name=settings.instance_connection_name,
            db_name=settings.db_name,
            db_user=settings.db_user,
        )
    except Exception as e:
        print(f"❌ Failed to connect to Cloud SQL: {e}")
        sys.exit(1)


def run_migration(migration_file: Path, engine: Engine):
    """Run a single migration file using SQLAlchemy."""
    print(f"📝 Running migration: {migration_file.name}")

    sql = migration_file.read_text()

    try:
        with engine.begin() as conn:
            conn.execute(text(sql))
        print(f"✅ Migration {migration_file.name} completed successfully")
    except Exception as e:
        print(f"❌ Migration {migration_file.name} failed: {e}")
        sys.exit(1)


def grant_postgres_access(engine: Engine):
    """Grant postgres user access to all tables.

    When using IAM authentication, tables are owned by the service account.
    This grants the postgres user access so tables can be viewed in Cloud SQL Studio.
    """
    print("\n🔐 Granting postgres user access to tables...")

    try:
        with engine.begin() as conn:
            conn.execute(text("GRANT USAGE ON SCHEMA public TO postgres"))
            conn.execute(
                text(
                    "GRANT SELECT, INSERT, UPDATE, DELETE "
                    "ON ALL TABLES IN SCHEMA public TO postgres"
                )
            )
            conn.execute(
                text(
                    "ALTER DEFAULT PRIVILEGES IN SCHEMA public "
                    "GRANT SELECT, INSERT, UPDATE, DELETE ON TABLES TO postgres"
                )
            )

        print("✅ Postgres user access granted")
    except Exception as e:
        print(f"⚠️  Failed to grant postgres access (non-fatal): {e}")


def list_migrations() -> list[Path]:
    """List all available migration files."""
    migrations = sorted(MIGRATIONS_DIR.glob("*.sql"))
    # Exclude rollback files
    return [m for m in migrations if "rollback" not in m.name.lower()]


def main():
    """Main function."""
    print("🚀 Ordertrack Database Migration Tool")
    print("=" * 50)

    if not MIGRATIONS_DIR.exists():
        print(f"❌ Migrations directory not found: {MIGRATIONS_DIR}")
        sys.exit(1)

    if len(sys.argv) > 1:
        migration_file = Path(sys.argv[1])
        if not migration_file.exists():
            migration_file = MIGRATIONS_DIR / sys.argv[1]
        if not migration_file.exists():
            print(f"❌ Migration file not found: {sys.argv[1]}")
            sys.exit(1)
        migrations = [migration_file]
    else:
        migrations = list_migrations()

    if not migrations:
        print("⚠️  No migrations found")
        sys.exit(0)

    print(f"\nFound {len(migrations)} migration(s):")
    for migration in migrations:
        print(f"  - {migration.name}")

    settings = load_settings()
    target = settings.database_url or settings.instance_connection_name
    print("\n⚠️  This will apply migrations to:")
    print(f"   Target: {target}")
    print(f"   Database: {settings.db_name}")

    response = input("\nProceed? (yes/no): ").strip().lower()
    if response not in ["yes", "y"]:
        print("❌ Migration cancelled")
        sys.exit(0)

    print("\n🔌 Connecting to database...")
    db = connect(settings)

    print("\n" + "=" * 50)
    for migration in migrations:
        run_migration(migration, db.engine)

    if not settings.database_url:
        grant_postgres_access(db.engine)

    db.close()

    print("\n" + "=" * 50)
    print("✅ All migrations completed successfully!")


if __name__ == "__main__":
    main()
