# alembic/env.py
"""
Migration environment for the HMS schema.

The database URL always comes from hms.core.config.Settings (DATABASE_URL),
never from alembic.ini, so migrations and the app hit the same database.
SQLite runs in batch mode because it can't ALTER most columns in place.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from hms.core.config import get_settings
from hms.models.metadata import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

DATABASE_URL = get_settings().database_url


def _context_options(dialect_name: str) -> dict:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": dialect_name == "sqlite",
    }


def run_offline() -> None:
    """Emit SQL to stdout instead of executing it (alembic upgrade --sql)."""
    context.configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_context_options(DATABASE_URL.split(":", 1)[0].split("+", 1)[0]),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool, future=True)
    with engine.connect() as connection:
        context.configure(connection=connection, **_context_options(connection.dialect.name))
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
