from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from expense_tracker.core.config import settings
from expense_tracker.db.session import Base
from expense_tracker.db import models  # noqa: F401  registers users/expenses

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# autogenerate diffs against the ORM tables
target_metadata = Base.metadata

# alembic.ini carries no URL; the app's Settings are the only source
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting (``alembic upgrade --sql``)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
