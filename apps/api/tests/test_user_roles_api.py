from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import audit
from app.core.auth import AuthUser, get_current_user
from app.core.database import Base, get_db
from app.identity.models import UserRole
from app.identity.source import ClaimsRoleAssignmentSource, DbRoleAssignmentSource, set_role_source
from app.main import app
from app.organization.models import AlumniSmallGroup, Region, SmallGroup, University


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


@pytest.fixture()
def hierarchy(db_session: Session) -> dict[str, int]:
    north = Region(name="North")
    south = Region(name="South")
    db_session.add_all([north, south])
    db_session.flush()

    north_uni = University(name="North University", region_id=north.id)
    south_uni = University(name="South University", region_id=south.id)
    db_session.add_all([north_uni, south_uni])
    db_session.flush()

    north_group = SmallGroup(name="North Group", region_id=north.id, university_id=north_uni.id)
    north_alumni = AlumniSmallGroup(name="North Alumni", region_id=north.id)
    db_session.add_all([north_group, north_alumni])
    db_session.flush()

    db_session.add_all(
        [
            UserRole(user_id="root", scope="superadmin"),
            UserRole(user_id="north-lead", scope="region", region_id=north.id),
        ]
    )
    db_session.commit()
    return {
        "north": north.id,
        "south": south.id,
        "north_uni": north_uni.id,
        "south_uni": south_uni.id,
        "north_group": north_group.id,
        "north_alumni": north_alumni.id,
    }


@pytest.fixture()
def client(db_session: Session, hierarchy: dict[str, int]) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_get_current_user(request: Request) -> AuthUser:
        return AuthUser(sub=request.headers.get("x-test-user", "anonymous"))

    set_role_source(DbRoleAssignmentSource())
    audit.audit_entries.clear()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_role_source(ClaimsRoleAssignmentSource())


def as_user(user_id: str) -> dict[str, str]:
    return {"x-test-user": user_id}


def test_me_scope_describes_resolved_scope(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.get("/api/me/scope", headers=as_user("north-lead"))

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == "north-lead"
    assert body["scope"]["scope"] == "region"
    assert body["scope"]["region_id"] == hierarchy["north"]
    assert body["well_formed"] is True
    assert body["conditions"] == {"kind": "restricted", "filters": {"region_id": hierarchy["north"]}}


def test_me_scope_for_superadmin_is_unrestricted(client: TestClient) -> None:
    response = client.get("/api/me/scope", headers=as_user("root"))

    assert response.json()["conditions"] == {"kind": "unrestricted", "filters": {}}


def test_me_scope_without_roles_is_unauthenticated(client: TestClient) -> None:
    response = client.get("/api/me/scope", headers=as_user("nobody"))

    assert response.status_code == 401


def test_assigned_role_takes_effect_and_narrowest_wins(client: TestClient, hierarchy: dict[str, int]) -> None:
    first = client.post(
        "/api/user-roles",
        json={"user_id": "ada", "scope": "region", "region_id": hierarchy["north"]},
        headers=as_user("root"),
    )
    second = client.post(
        "/api/user-roles",
        json={
            "user_id": "ada",
            "scope": "smallgroup",
            "region_id": hierarchy["north"],
            "university_id": hierarchy["north_uni"],
            "small_group_id": hierarchy["north_group"],
        },
        headers=as_user("root"),
    )
    me = client.get("/api/me/scope", headers=as_user("ada"))

    assert first.status_code == 201
    assert second.status_code == 201
    assert me.json()["scope"]["scope"] == "smallgroup"
    assert me.json()["conditions"]["filters"] == {
        "small_group_id": hierarchy["north_group"],
        "university_id": hierarchy["north_uni"],
        "region_id": hierarchy["north"],
    }
    assigned = audit.entries_for("user_role.assigned")
    assert len(assigned) == 2
    assert assigned[0]["actor_user_id"] == "root"


def test_assignment_requires_defining_identifier(client: TestClient) -> None:
    response = client.post("/api/user-roles", json={"user_id": "ada", "scope": "university"}, headers=as_user("root"))

    assert response.status_code == 422
    assert response.json()["detail"] == "university scope requires university_id"


def test_unrestricted_assignment_rejects_identifiers(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.post(
        "/api/user-roles",
        json={"user_id": "ada", "scope": "national", "region_id": hierarchy["north"]},
        headers=as_user("root"),
    )

    assert response.status_code == 422


def test_assignment_lineage_is_verified(client: TestClient, hierarchy: dict[str, int]) -> None:
    mismatched = client.post(
        "/api/user-roles",
        json={"user_id": "ada", "scope": "university", "university_id": hierarchy["south_uni"], "region_id": hierarchy["north"]},
        headers=as_user("root"),
    )
    unknown = client.post(
        "/api/user-roles",
        json={"user_id": "ada", "scope": "alumnismallgroup", "alumni_group_id": 9999},
        headers=as_user("root"),
    )

    assert mismatched.status_code == 400
    assert unknown.status_code == 404
    assert unknown.json()["detail"] == "alumni small group not found"


def test_duplicate_assignment_conflicts(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.post(
        "/api/user-roles",
        json={"user_id": "north-lead", "scope": "region", "region_id": hierarchy["north"]},
        headers=as_user("root"),
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "role assignment already exists"


def test_restricted_principal_cannot_administer_roles(client: TestClient, hierarchy: dict[str, int]) -> None:
    listing = client.get("/api/user-roles", headers=as_user("north-lead"))
    assign = client.post(
        "/api/user-roles",
        json={"user_id": "north-lead", "scope": "superadmin"},
        headers=as_user("north-lead"),
    )

    assert listing.status_code == 403
    assert assign.status_code == 403
    assert assign.json()["detail"] == "Access denied - create requires national authority"


def test_list_and_revoke_roles(client: TestClient) -> None:
    listing = client.get("/api/user-roles", params={"userId": "north-lead"}, headers=as_user("root"))
    role_id = listing.json()[0]["id"]

    revoked = client.delete(f"/api/user-roles/{role_id}", headers=as_user("root"))
    again = client.delete(f"/api/user-roles/{role_id}", headers=as_user("root"))
    after = client.get("/api/me/scope", headers=as_user("north-lead"))

    assert [row["scope"] for row in listing.json()] == ["region"]
    assert revoked.status_code == 204
    assert again.status_code == 404
    assert after.status_code == 401
    assert audit.entries_for("user_role.revoked")[0]["before"]["user_id"] == "north-lead"
