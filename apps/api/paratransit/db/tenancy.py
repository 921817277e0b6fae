"""Per-organization database routing.

Each organization (tenant) owns a database named after its subdomain. Engines
are created lazily on first use and cached for the life of the process.
"""

import logging
import os
import re
import threading

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ProgrammingError
from sqlalchemy.orm import Session, sessionmaker

from paratransit.core.config import settings
from paratransit.db.base import OrgBase
from paratransit.db.session import engine as system_engine, engine_options

logger = logging.getLogger(__name__)

SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,13}[a-z0-9])?$")


def org_database_url(subdomain: str, template: str | None = None) -> str:
    """
    Build the database URL for an organization.

    PostgreSQL/MySQL: the template's database name is replaced by the subdomain.
    SQLite files: a sibling file named after the subdomain.
    SQLite in-memory: the template itself (all orgs share one database).
    """
    url = make_url(template or settings.org_database_template)
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            return url.render_as_string(hide_password=False)
        directory = os.path.dirname(url.database)
        return url.set(database=os.path.join(directory, f"{subdomain}.db")).render_as_string(
            hide_password=False
        )
    return url.set(database=subdomain).render_as_string(hide_password=False)


class OrgDatabaseRegistry:
    """Lazily creates and caches one engine + sessionmaker per org subdomain."""

    def __init__(self, template: str | None = None):
        self._template = template
        self._lock = threading.Lock()
        self._engines: dict[str, Engine] = {}
        self._sessionmakers: dict[str, sessionmaker] = {}

    def get_engine(self, subdomain: str) -> Engine:
        with self._lock:
            engine = self._engines.get(subdomain)
            if engine is None:
                url = org_database_url(subdomain, self._template)
                engine = create_engine(url, **engine_options(url))
                self._engines[subdomain] = engine
                self._sessionmakers[subdomain] = sessionmaker(
                    autocommit=False, autoflush=False, bind=engine
                )
                logger.info("Created engine for org database %s", subdomain)
            return engine

    def session(self, subdomain: str) -> Session:
        """Open a new session on the organization's database."""
        if subdomain not in self._sessionmakers:
            self.get_engine(subdomain)
        return self._sessionmakers[subdomain]()

    def dispose(self, subdomain: str) -> None:
        with self._lock:
            engine = self._engines.pop(subdomain, None)
            self._sessionmakers.pop(subdomain, None)
        if engine is not None:
            engine.dispose()

    def dispose_all(self) -> None:
        with self._lock:
            engines = list(self._engines.values())
            self._engines.clear()
            self._sessionmakers.clear()
        for engine in engines:
            engine.dispose()

    @property
    def subdomains(self) -> list[str]:
        return sorted(self._engines)


org_registry = OrgDatabaseRegistry()


def provision_org_database(subdomain: str, registry: OrgDatabaseRegistry | None = None) -> None:
    """
    Create the organization's database and its tables.

    PostgreSQL: CREATE DATABASE (cloned from ORG_TEMPLATE_DATABASE when set);
    an existing database is left in place. Tables are then created with
    OrgBase.metadata.create_all, which skips tables that already exist.

    Raises:
        ValueError: Subdomain is not a valid database name
    """
    if not SUBDOMAIN_RE.match(subdomain):
        raise ValueError(f"Invalid organization subdomain '{subdomain}'")
    registry = registry or org_registry
    backend = make_url(settings.org_database_template).get_backend_name()

    if backend.startswith("postgresql"):
        statement = f'CREATE DATABASE "{subdomain}"'
        if settings.ORG_TEMPLATE_DATABASE:
            statement += f' TEMPLATE "{settings.ORG_TEMPLATE_DATABASE}"'
        # CREATE DATABASE cannot run inside a transaction block
        with system_engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
            try:
                conn.execute(text(statement))
                logger.info("Created database for org %s", subdomain)
            except ProgrammingError as e:
                if "already exists" not in str(e):
                    raise
                logger.info("Database for org %s already exists", subdomain)

    OrgBase.metadata.create_all(registry.get_engine(subdomain))
