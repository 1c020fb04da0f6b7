"""Database URL helpers shared by the app and the Alembic env.

Kept free of settings imports so migrations run with only DATABASE_URL set.
"""


def normalize_database_url(database_url: str) -> str:
    """Force async drivers for the URLs people usually paste into .env."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url
