"""Alembic environment configuration.

Reads the database URL from volunteer_slots.config and registers all models
so autogenerate can detect schema changes.
"""
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from volunteer_slots.config import settings
from volunteer_slots.database import Base

# Import all models so they register with Base.metadata
from volunteer_slots.models.user import User, UserEmail  # noqa: F401
from volunteer_slots.models.organization import Organization, OrganizationMember  # noqa: F401
from volunteer_slots.models.project import Project  # noqa: F401
from volunteer_slots.models.signup import Signup  # noqa: F401
from volunteer_slots.models.anonymous_signup import AnonymousSignup  # noqa: F401
from volunteer_slots.models.slot_counter import SlotCounter  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite cannot ALTER constraints in place
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
