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
from app.core.config import get_settings
from app.core.database import Base, get_db
from app.identity.source import ClaimsRoleAssignmentSource, InMemoryRoleAssignmentSource, set_role_source
from app.main import app
from app.organization.models import AlumniSmallGroup, Region, SmallGroup, University
from app.platform.security.context import RoleAssignment, ScopeLevel


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
    north_group_two = SmallGroup(name="North Group Two", region_id=north.id, university_id=north_uni.id)
    south_group = SmallGroup(name="South Group", region_id=south.id, university_id=south_uni.id)
    north_alumni = AlumniSmallGroup(name="North Alumni", region_id=north.id)
    south_alumni = AlumniSmallGroup(name="South Alumni", region_id=south.id)
    db_session.add_all([north_group, north_group_two, south_group, north_alumni, south_alumni])
    db_session.commit()
    return {
        "north": north.id,
        "south": south.id,
        "north_uni": north_uni.id,
        "south_uni": south_uni.id,
        "north_group": north_group.id,
        "north_group_two": north_group_two.id,
        "south_group": south_group.id,
        "north_alumni": north_alumni.id,
        "south_alumni": south_alumni.id,
    }


@pytest.fixture()
def client(db_session: Session, hierarchy: dict[str, int]) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_get_current_user(request: Request) -> AuthUser:
        return AuthUser(sub=request.headers.get("x-test-user", "anonymous"))

    set_role_source(
        InMemoryRoleAssignmentSource(
            {
                "admin": [RoleAssignment(scope=ScopeLevel.SUPERADMIN)],
                "north-lead": [RoleAssignment(scope=ScopeLevel.REGION, region_id=hierarchy["north"])],
                "north-uni-lead": [
                    RoleAssignment(
                        scope=ScopeLevel.UNIVERSITY,
                        university_id=hierarchy["north_uni"],
                        region_id=hierarchy["north"],
                    )
                ],
                "group-lead": [
                    RoleAssignment(
                        scope=ScopeLevel.SMALLGROUP,
                        small_group_id=hierarchy["north_group"],
                        university_id=hierarchy["north_uni"],
                        region_id=hierarchy["north"],
                    )
                ],
                "alumni-lead": [
                    RoleAssignment(
                        scope=ScopeLevel.ALUMNISMALLGROUP,
                        alumni_group_id=hierarchy["north_alumni"],
                        region_id=hierarchy["north"],
                    )
                ],
                "bare-group-lead": [
                    RoleAssignment(scope=ScopeLevel.SMALLGROUP, small_group_id=hierarchy["north_group"])
                ],
                "bare-alumni-lead": [
                    RoleAssignment(scope=ScopeLevel.ALUMNISMALLGROUP, alumni_group_id=hierarchy["north_alumni"])
                ],
                "broken": [RoleAssignment(scope=ScopeLevel.REGION)],
            }
        )
    )
    audit.audit_entries.clear()
    get_settings.cache_clear()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_role_source(ClaimsRoleAssignmentSource())


def as_user(user_id: str) -> dict[str, str]:
    return {"x-test-user": user_id}


def test_anonymous_caller_is_rejected(client: TestClient) -> None:
    response = client.get("/api/regions")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_principal_without_roles_is_unauthenticated(client: TestClient) -> None:
    response = client.get("/api/regions", headers=as_user("stranger"))

    assert response.status_code == 401
    assert response.json()["detail"] == "No role assignments for principal"


def test_superadmin_lists_every_region(client: TestClient) -> None:
    response = client.get("/api/regions", headers=as_user("admin"))

    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["North", "South"]


def test_region_lead_sees_only_own_region(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.get("/api/regions", headers=as_user("north-lead"))

    assert response.status_code == 200
    assert [row["id"] for row in response.json()] == [hierarchy["north"]]

    forbidden = client.get(f"/api/regions/{hierarchy['south']}", headers=as_user("north-lead"))
    assert forbidden.status_code == 403
    assert forbidden.json()["detail"] == "Access denied"


def test_region_lead_cannot_request_other_region(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.get(
        "/api/universities",
        params={"regionId": hierarchy["south"]},
        headers=as_user("north-lead"),
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied to requested region"
    denied = audit.entries_for("rls.denied")
    assert denied
    assert denied[-1]["actor_user_id"] == "north-lead"


def test_superadmin_region_filter_narrows_universities(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.get(
        "/api/universities",
        params={"regionId": hierarchy["south"]},
        headers=as_user("admin"),
    )

    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["South University"]


def test_small_group_lead_lists_only_own_group(client: TestClient) -> None:
    groups = client.get("/api/small-groups", headers=as_user("group-lead"))
    universities = client.get("/api/universities", headers=as_user("group-lead"))
    regions = client.get("/api/regions", headers=as_user("group-lead"))

    assert groups.status_code == 200
    assert [row["name"] for row in groups.json()] == ["North Group"]
    assert universities.json() == []
    assert regions.json() == []


def test_leaf_role_without_ancestor_ids_does_not_list_whole_directory(client: TestClient) -> None:
    groups = client.get("/api/small-groups", headers=as_user("bare-group-lead"))
    alumni = client.get("/api/alumni-small-groups", headers=as_user("bare-alumni-lead"))

    assert [row["name"] for row in groups.json()] == ["North Group"]
    assert [row["name"] for row in alumni.json()] == ["North Alumni"]


def test_small_group_lead_cannot_read_sibling_group(client: TestClient, hierarchy: dict[str, int]) -> None:
    own = client.get(f"/api/small-groups/{hierarchy['north_group']}", headers=as_user("group-lead"))
    sibling = client.get(f"/api/small-groups/{hierarchy['north_group_two']}", headers=as_user("group-lead"))

    assert own.status_code == 200
    assert sibling.status_code == 403


def test_alumni_lead_only_reaches_own_alumni_group(client: TestClient, hierarchy: dict[str, int]) -> None:
    listing = client.get("/api/alumni-small-groups", headers=as_user("alumni-lead"))
    other = client.get(f"/api/alumni-small-groups/{hierarchy['south_alumni']}", headers=as_user("alumni-lead"))

    assert listing.status_code == 200
    assert [row["name"] for row in listing.json()] == ["North Alumni"]
    assert other.status_code == 403


def test_region_lead_cannot_reach_university_in_other_region(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.get(f"/api/universities/{hierarchy['south_uni']}", headers=as_user("north-lead"))

    assert response.status_code == 403


def test_malformed_scope_is_forbidden(client: TestClient) -> None:
    response = client.get("/api/regions", headers=as_user("broken"))

    assert response.status_code == 403
    assert response.json()["detail"] == "Malformed role assignment for scope 'region'"


def test_region_creation_requires_national_authority(client: TestClient) -> None:
    denied = client.post("/api/regions", json={"name": "East"}, headers=as_user("north-lead"))
    created = client.post("/api/regions", json={"name": "  East "}, headers=as_user("admin"))
    duplicate = client.post("/api/regions", json={"name": "East"}, headers=as_user("admin"))

    assert denied.status_code == 403
    assert denied.json()["detail"] == "Access denied - create requires national authority"
    assert created.status_code == 201
    assert created.json()["name"] == "East"
    assert duplicate.status_code == 409


def test_university_lead_creates_small_group_in_own_university(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.post(
        "/api/small-groups",
        json={"name": "New Group", "region_id": hierarchy["north"], "university_id": hierarchy["north_uni"]},
        headers=as_user("north-uni-lead"),
    )

    assert response.status_code == 201
    assert response.json()["university_id"] == hierarchy["north_uni"]


def test_university_lead_cannot_create_small_group_elsewhere(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.post(
        "/api/small-groups",
        json={"name": "Rogue Group", "region_id": hierarchy["south"], "university_id": hierarchy["south_uni"]},
        headers=as_user("north-uni-lead"),
    )

    assert response.status_code == 403


def test_small_group_lineage_mismatch_is_rejected(client: TestClient, hierarchy: dict[str, int]) -> None:
    response = client.post(
        "/api/small-groups",
        json={"name": "Crossed Group", "region_id": hierarchy["north"], "university_id": hierarchy["south_uni"]},
        headers=as_user("north-lead"),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "university does not belong to the selected region"


def test_region_lead_creates_university_only_in_own_region(client: TestClient, hierarchy: dict[str, int]) -> None:
    created = client.post(
        "/api/universities",
        json={"name": "North Tech", "region_id": hierarchy["north"]},
        headers=as_user("north-lead"),
    )
    denied = client.post(
        "/api/universities",
        json={"name": "South Tech", "region_id": hierarchy["south"]},
        headers=as_user("north-lead"),
    )

    assert created.status_code == 201
    assert denied.status_code == 403
    assert denied.json()["detail"] == "Access denied - region mismatch"


def test_update_and_delete_alumni_group(client: TestClient, hierarchy: dict[str, int]) -> None:
    updated = client.put(
        f"/api/alumni-small-groups/{hierarchy['north_alumni']}",
        json={"name": "North Alumni Fellowship", "region_id": hierarchy["north"]},
        headers=as_user("north-lead"),
    )
    deleted = client.delete(f"/api/alumni-small-groups/{hierarchy['north_alumni']}", headers=as_user("north-lead"))
    missing = client.get(f"/api/alumni-small-groups/{hierarchy['north_alumni']}", headers=as_user("north-lead"))

    assert updated.status_code == 200
    assert updated.json()["name"] == "North Alumni Fellowship"
    assert deleted.status_code == 204
    assert missing.status_code == 404


def test_unknown_region_is_not_found(client: TestClient) -> None:
    response = client.get("/api/regions/9999", headers=as_user("admin"))

    assert response.status_code == 404
    assert response.json()["detail"] == "region not found"
