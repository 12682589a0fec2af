from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.context import reset_principal_id, reset_scope_level, set_principal_id, set_scope_level
from app.core.auth import AuthUser, get_current_user
from app.core.config import get_settings
from app.core.database import Base, get_db
from app.identity.source import ClaimsRoleAssignmentSource, InMemoryRoleAssignmentSource, set_role_source
from app.logging import JsonLogFormatter, RequestIdentityFilter
from app.main import app


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def setup_env() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_get_current_user(request: Request) -> AuthUser:
        return AuthUser(sub=request.headers.get("x-test-user", "anonymous"))

    set_role_source(
        InMemoryRoleAssignmentSource(
            {
                "admin": [{"scope": "superadmin"}],
                "broken": [{"scope": "university", "regionId": 1}],
            }
        )
    )
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_role_source(ClaimsRoleAssignmentSource())


def test_logs_include_correlation_id_for_http(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.get("/api/members/123", headers={"x-test-user": "admin", "X-Correlation-Id": "abc-123"})
    assert response.status_code == 404

    records = [record for record in caplog.records if record.name == "app.request" and record.getMessage() == "http.request"]
    assert records
    assert any(
        getattr(record, "correlation_id", None) == "abc-123"
        and getattr(record, "method", None) == "GET"
        and getattr(record, "path", None) == "/api/members/{id}"
        and getattr(record, "status_code", None) == 404
        and isinstance(getattr(record, "duration_ms", None), float)
        for record in records
    )


def test_denied_requests_are_logged_as_warnings(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.get("/api/members", headers={"x-test-user": "broken", "X-Correlation-Id": "abc-403"})
    assert response.status_code == 403

    denied = [record for record in caplog.records if record.name == "app.request" and record.getMessage() == "http.denied"]
    assert denied
    assert denied[-1].levelno == logging.WARNING
    assert getattr(denied[-1], "status_code", None) == 403
    assert getattr(denied[-1], "correlation_id", None) == "abc-403"


def test_unresolved_scope_is_logged_with_principal(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.get("/api/members", headers={"x-test-user": "nobody"})
    assert response.status_code == 401

    records = [record for record in caplog.records if record.name == "app.identity"]
    assert any(
        record.getMessage() == "identity.scope_unresolved" and getattr(record, "principal_id", None) == "nobody"
        for record in records
    )


def test_request_log_carries_principal_and_resolved_scope(
    client: TestClient,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)

    response = client.get("/api/regions", headers={"x-test-user": "admin"})
    assert response.status_code == 200

    records = [record for record in caplog.records if record.name == "app.request" and record.getMessage() == "http.request"]
    assert any(
        getattr(record, "principal_id", None) == "admin" and getattr(record, "scope", None) == "superadmin"
        for record in records
    )


def test_unresolved_scope_names_role_source(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    client.get("/api/members", headers={"x-test-user": "nobody"})

    records = [record for record in caplog.records if record.getMessage() == "identity.scope_unresolved"]
    assert records
    assert getattr(records[-1], "role_source", None) == "InMemoryRoleAssignmentSource"


def test_json_formatter_lifts_identity_and_drops_unknown_fields() -> None:
    record = logging.makeLogRecord(
        {
            "name": "app.request",
            "levelname": "INFO",
            "msg": "http.request",
            "correlation_id": "corr-1",
            "principal_id": "user-1",
            "scope": "region",
            "status_code": 200,
            "secret_token": "do-not-log",
        }
    )

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["event"] == "http.request"
    assert payload["correlation_id"] == "corr-1"
    assert payload["principal_id"] == "user-1"
    assert payload["scope"] == "region"
    assert payload["fields"] == {"status_code": 200}


def test_identity_filter_fills_scope_from_request_context() -> None:
    record = logging.makeLogRecord({"name": "app.members", "msg": "member.listed"})
    principal_token = set_principal_id("lead-7")
    scope_token = set_scope_level("university")
    try:
        assert RequestIdentityFilter().filter(record)
    finally:
        reset_scope_level(scope_token)
        reset_principal_id(principal_token)

    assert record.principal_id == "lead-7"
    assert record.scope == "university"


def test_json_formatter_truncates_long_errors() -> None:
    record = logging.makeLogRecord({"name": "app.identity", "msg": "identity.scope_unresolved", "error": "x" * 900})

    payload = json.loads(JsonLogFormatter().format(record))

    assert len(payload["fields"]["error"]) == 500
