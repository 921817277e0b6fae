"""Helpers shared by the system and organization migration environments."""

from sqlalchemy import inspect, text

ALEMBIC_VERSION_TABLE = "alembic_version"
ALEMBIC_VERSION_COL_LEN = 128


def ensure_alembic_version_table(connection) -> None:
    """Create alembic_version with a wide version_num column, or widen an existing one."""
    inspector = inspect(connection)
    existing_tables = set(inspector.get_table_names())

    if ALEMBIC_VERSION_TABLE not in existing_tables:
        connection.execute(
            text(
                f"""
                CREATE TABLE {ALEMBIC_VERSION_TABLE} (
                    version_num VARCHAR({ALEMBIC_VERSION_COL_LEN}) NOT NULL,
                    CONSTRAINT alembic_version_pkc PRIMARY KEY (version_num)
                )
                """
            )
        )
        return

    if connection.dialect.name == "sqlite":
        return

    for column in inspector.get_columns(ALEMBIC_VERSION_TABLE):
        if column.get("name") != "version_num":
            continue

        current_len = getattr(column.get("type"), "length", None)
        if current_len is not None and current_len < ALEMBIC_VERSION_COL_LEN:
            connection.execute(
                text(
                    f"ALTER TABLE {ALEMBIC_VERSION_TABLE} "
                    f"ALTER COLUMN version_num TYPE VARCHAR({ALEMBIC_VERSION_COL_LEN})"
                )
            )
        break
