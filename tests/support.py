from __future__ import annotations

from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice import models  # noqa: F401
from backoffice.db import Base, get_db
from backoffice.main import app

SUPERADMIN_HEADERS = {"x-user-type": "superadmin", "x-user-id": "sa-1"}
ADMIN_HEADERS = {"x-user-type": "admin", "x-user-id": "admin-1"}
EMPLOYEE_HEADERS = {"x-user-type": "employee", "x-user-id": "emp-1"}


class SqliteDatabase:
    """Fresh in-memory schema per test, shared by the app and the test body."""

    def __init__(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def session(self) -> Session:
        return self.session_factory()

    def override(self) -> Generator[Session, None, None]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()


class ApiTestCase:
    """Mixin for TestCase classes that exercise the HTTP routes."""

    def setUp(self) -> None:  # type: ignore[override]
        self.database = SqliteDatabase()
        app.dependency_overrides[get_db] = self.database.override
        self.client = TestClient(app)

    def tearDown(self) -> None:  # type: ignore[override]
        app.dependency_overrides.clear()
        self.database.dispose()
