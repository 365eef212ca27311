"""Alembic environment for the mock exam tables.

Migrations run synchronously over psycopg2 (``get_sync_url()``).  The
lifecycle tables may share a database with the rest of the school
platform, so autogenerate only considers tables on ``Base.metadata`` and
the revision table is kept separate.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from mockexam_db.config import get_sync_url
from mockexam_db.models import Base

VERSION_TABLE = "mockexam_alembic_version"

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def include_object(obj, name, type_, reflected, compare_to):
    if type_ == "table" and reflected:
        return name in target_metadata.tables
    return True


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        version_table=VERSION_TABLE,
        include_object=include_object,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the SQL script without connecting."""
    _configure(
        url=get_sync_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(get_sync_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
