import os
import subprocess
import sys
import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

_default_test_db = Path(tempfile.gettempdir()) / f"tms_test_{os.getpid()}.db"
TEST_DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{_default_test_db}")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from tms import database  # noqa: E402
from tms.database import SessionLocal  # noqa: E402
from tms.models.project import Project  # noqa: E402
from tms.models.timesheet import Timesheet, TimesheetStatus  # noqa: E402


def _ensure_database_exists(database_url: str) -> None:
    url = make_url(database_url)

    if url.drivername.startswith("sqlite"):
        if url.database and Path(url.database).exists():
            Path(url.database).unlink()
        return

    if not url.drivername.startswith("postgresql"):
        return

    db_name = url.database
    admin_url = url.set(database="postgres")
    admin_engine = create_engine(admin_url, isolation_level="AUTOCOMMIT")

    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": db_name},
            ).scalar()
            if not exists:
                safe_db_name = db_name.replace('"', '""')
                conn.execute(text(f'CREATE DATABASE "{safe_db_name}"'))
    finally:
        admin_engine.dispose()


def _truncate_all_tables() -> None:
    with database.engine.begin() as conn:
        if conn.dialect.name == "postgresql":
            rows = conn.execute(
                text(
                    """
                    SELECT tablename
                    FROM pg_tables
                    WHERE schemaname = 'public'
                      AND tablename <> 'alembic_version'
                    """
                )
            ).fetchall()

            table_names = [row[0] for row in rows]
            if table_names:
                quoted = ", ".join([f'"public"."{name}"' for name in table_names])
                conn.execute(text(f"TRUNCATE TABLE {quoted} RESTART IDENTITY CASCADE"))
            return

        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database() -> None:
    _ensure_database_exists(TEST_DATABASE_URL)

    env = os.environ.copy()
    env["DATABASE_URL"] = TEST_DATABASE_URL

    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        cwd=Path(__file__).resolve().parents[2],
        env=env,
    )

    database.configure_database()


@pytest.fixture(scope="function", autouse=True)
def _truncate_tables_between_tests():
    _truncate_all_tables()
    yield
    _truncate_all_tables()


@pytest.fixture
def project_factory():
    def _create(name: str = "Website Redesign", hourly_rate=None) -> Project:
        db = SessionLocal()
        try:
            row = Project(name=name, hourly_rate=hourly_rate, is_active=True)
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()

    return _create


@pytest.fixture
def timesheet_factory(project_factory):
    def _create(
        project_id: str = None,
        period_start: date = date(2025, 9, 1),
        period_end: date = date(2025, 9, 7),
        status: TimesheetStatus = TimesheetStatus.DRAFT,
    ) -> Timesheet:
        if project_id is None:
            project_id = project_factory().id

        db = SessionLocal()
        try:
            row = Timesheet(
                project_id=project_id,
                period_start=period_start,
                period_end=period_end,
                status=status.value,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()

    return _create
