"""
Alembic migration tests - the migrated schema matches the models
"""
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from awareness_api.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config(db_path: Path) -> Config:
    config = Config()
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    return config


@pytest.mark.migrations
class TestMigrations:

    def test_upgrade_creates_every_model_table(self, tmp_path):
        db_path = tmp_path / "migrated.db"
        command.upgrade(alembic_config(db_path), "head")

        engine = create_engine(f"sqlite:///{db_path}")
        try:
            inspector = inspect(engine)
            tables = set(inspector.get_table_names()) - {"alembic_version"}
            assert tables == set(Base.metadata.tables)

            for name, table in Base.metadata.tables.items():
                migrated = {column["name"] for column in inspector.get_columns(name)}
                assert migrated == set(table.columns.keys()), name
        finally:
            engine.dispose()

    def test_downgrade_removes_tables(self, tmp_path):
        db_path = tmp_path / "migrated.db"
        config = alembic_config(db_path)
        command.upgrade(config, "head")
        command.downgrade(config, "base")

        engine = create_engine(f"sqlite:///{db_path}")
        try:
            assert set(inspect(engine).get_table_names()) == {"alembic_version"}
        finally:
            engine.dispose()
