"""Schema integrity tests for the Alembic migrations."""
from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config


@pytest.fixture(scope="module")
def alembic_config(tmp_path_factory: pytest.TempPathFactory) -> Config:
    """Provide Alembic config bound to a temporary SQLite database."""

    project_root = Path(__file__).resolve().parents[2]
    db_path = tmp_path_factory.mktemp("db") / "test.db"

    config = Config(str(project_root / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    config.set_main_option("script_location", str(project_root / "migrations"))
    return config


@pytest.fixture(scope="module")
def migrated_engine(alembic_config: Config):
    """Run migrations against SQLite and yield an engine."""

    command.upgrade(alembic_config, "head")
    engine = sa.create_engine(alembic_config.get_main_option("sqlalchemy.url"))
    try:
        yield engine
    finally:
        engine.dispose()


def test_proposals_table_exists(migrated_engine: sa.Engine) -> None:
    inspector = sa.inspect(migrated_engine)
    assert "proposals" in set(inspector.get_table_names())


def test_proposals_columns_match_model(migrated_engine: sa.Engine) -> None:
    inspector = sa.inspect(migrated_engine)
    columns = {column["name"]: column for column in inspector.get_columns("proposals")}

    assert set(columns) == {
        "id",
        "owner",
        "title",
        "description",
        "voters",
        "yes_votes",
        "no_votes",
        "created_at",
        "updated_at",
    }
    assert columns["updated_at"]["nullable"] is True
    assert columns["created_at"]["nullable"] is False


def test_owner_index_present(migrated_engine: sa.Engine) -> None:
    inspector = sa.inspect(migrated_engine)
    indexes = {index["name"]: index["column_names"] for index in inspector.get_indexes("proposals")}
    assert indexes.get("ix_proposals_owner") == ["owner"]
