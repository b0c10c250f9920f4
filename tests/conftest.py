from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from jobtracker import dependencies
from jobtracker.create_tables import init_db
from jobtracker.db import get_db, make_engine
from jobtracker.main import app


@pytest.fixture
def db_engine(tmp_path: Path):
    """Temporary SQLite database with the schema and the default template."""
    eng = make_engine(f"sqlite:///{(tmp_path / 'jobtracker.db').as_posix()}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def fresh_trophy_session():
    """Each test starts with an unloaded reconciliation state and no toasts."""
    dependencies.reset_trophy_session()
    yield
    dependencies.reset_trophy_session()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
