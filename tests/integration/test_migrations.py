"""Integration tests for schema migrations against a real PostgreSQL."""

import pytest

from smarthub.core.migrations import apply_migrations, load_migrations


pytestmark = pytest.mark.integration


class TestApplyMigrations:
    """apply_migrations() on a live database."""

    async def test_fresh_database(self, bare_pool) -> None:
        applied = await apply_migrations(bare_pool)
        assert applied == [m.version for m in load_migrations()]

        tables = await bare_pool.fetch(
            "SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'"
        )
        names = {row["table_name"] for row in tables}
        assert {"smart_models", "smart_features", "schema_migrations"} <= names

    async def test_idempotent(self, bare_pool) -> None:
        await apply_migrations(bare_pool)
        assert await apply_migrations(bare_pool) == []

    async def test_versions_recorded(self, pool) -> None:
        versions = await pool.fetch("SELECT version FROM schema_migrations ORDER BY version")
        assert [row["version"] for row in versions] == [m.version for m in load_migrations()]
