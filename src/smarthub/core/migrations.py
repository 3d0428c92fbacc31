"""Versioned schema migrations applied through the connection pool.

Migrations are plain ``.sql`` files shipped inside the ``smarthub/sql``
package directory and named ``<version>_<description>.sql``. Applied
versions are recorded in ``schema_migrations``; each pending file runs in
its own transaction together with its bookkeeping row, under a
transaction-scoped advisory lock so concurrent starters do not apply the
same file twice.

Examples:
    ```python
    async with pool:
        applied = await apply_migrations(pool)
    ```

See Also:
    [Pool.transaction()][smarthub.core.pool.Pool.transaction]: Transaction
        scope used for every migration.
"""

from __future__ import annotations

from importlib.resources import files
from typing import TYPE_CHECKING, NamedTuple

from .logger import Logger


if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

    from .pool import Pool


_ADVISORY_LOCK_KEY = 0x534D4854  # "SMHT"

_CREATE_MIGRATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version     TEXT PRIMARY KEY,
    applied_at  TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""


class Migration(NamedTuple):
    """One schema migration file."""

    version: str
    name: str
    sql: str


def load_migrations(directory: Traversable | None = None) -> list[Migration]:
    """Read migration files from ``directory`` ordered by version.

    Args:
        directory: Directory to scan; defaults to the packaged ``sql``
            directory.

    Raises:
        ValueError: If two files share a version prefix.
    """
    directory = directory or files("smarthub") / "sql"
    migrations: dict[str, Migration] = {}
    for entry in directory.iterdir():
        if not entry.is_file() or not entry.name.endswith(".sql"):
            continue
        stem = entry.name.removesuffix(".sql")
        version, _, name = stem.partition("_")
        if version in migrations:
            raise ValueError(f"duplicate migration version {version}: {entry.name}")
        migrations[version] = Migration(version, name, entry.read_text(encoding="utf-8"))
    return [migrations[v] for v in sorted(migrations)]


async def apply_migrations(
    pool: Pool,
    migrations: list[Migration] | None = None,
    *,
    logger: Logger | None = None,
) -> list[str]:
    """Apply every migration not yet recorded in ``schema_migrations``.

    Returns:
        Versions applied by this call, in order. Empty when the schema is
        already current.
    """
    logger = logger or Logger("migrations")
    if migrations is None:
        migrations = load_migrations()

    logger.info("migrations_starting", available=len(migrations))
    await pool.execute(_CREATE_MIGRATIONS_TABLE)

    applied: list[str] = []
    for migration in migrations:
        async with pool.transaction() as conn:
            await conn.execute("SELECT pg_advisory_xact_lock($1)", _ADVISORY_LOCK_KEY)
            exists = await conn.fetchval(
                "SELECT 1 FROM schema_migrations WHERE version = $1", migration.version
            )
            if exists:
                continue
            await conn.execute(migration.sql)
            await conn.execute(
                "INSERT INTO schema_migrations (version) VALUES ($1)", migration.version
            )
        applied.append(migration.version)
        logger.info("migration_applied", version=migration.version, name=migration.name)

    logger.info("migrations_completed", applied=len(applied))
    return applied
