"""Organization database migrations.

Runs against one organization (``-x org=<subdomain>``) or, by default, every
active organization registered in the system database.
"""

import logging
from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from migrations.version_table import ensure_alembic_version_table
from paratransit.core.config import settings
from paratransit.db.base import OrgBase
from paratransit.db.session import SessionLocal
from paratransit.db.tenancy import org_database_url
# Register every model with its metadata
import paratransit.db.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = OrgBase.metadata


def target_subdomains() -> list[str]:
    selected = context.get_x_argument(as_dictionary=True).get("org")
    if selected:
        return [selected]

    from paratransit.services import organization_service

    db = SessionLocal()
    try:
        return [org.subdomain for org in organization_service.list_active(db)]
    finally:
        db.close()


def run_migrations_offline() -> None:
    """Emit SQL once; the script applies to any organization database."""
    context.configure(
        url=settings.org_database_template,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    for subdomain in target_subdomains():
        logger.info("Migrating organization database %s", subdomain)
        connectable = create_engine(org_database_url(subdomain), poolclass=pool.NullPool)

        with connectable.connect() as connection:
            with connection.begin():
                ensure_alembic_version_table(connection)

            context.configure(connection=connection, target_metadata=target_metadata)

            with context.begin_transaction():
                context.run_migrations()
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
