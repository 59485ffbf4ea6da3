"""Tests for the roles API and application startup."""
import json
import uuid
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from rolegate.auth.catalog import default_catalog
from rolegate.auth.checker import Principal
from rolegate.auth.constants import Role
from rolegate.auth.provider import EngineProvider
from rolegate.config import Settings
from rolegate.dependencies import get_current_principal
from rolegate.errors import ConfigurationError
from rolegate.main import create_app


def make_client(role: str | None) -> TestClient:
    app = create_app(Settings(), EngineProvider(default_catalog()))
    if role is not None:
        principal = Principal(id=uuid.uuid4(), role=role)

        async def override_principal() -> Principal:
            return principal

        app.dependency_overrides[get_current_principal] = override_principal
    return TestClient(app)


class TestRolesEndpoints:
    def test_list_roles_in_rank_order(self):
        response = make_client(Role.ADMIN.value).get("/roles")

        assert response.status_code == 200
        roles = response.json()
        assert [role["name"] for role in roles] == [
            "Officer", "Leader", "Manager", "Management", "Stakeholder", "Admin", "Super Admin",
        ]
        assert roles[0]["rank"] == 1
        assert roles[-1]["display"]["name"] == "Super Administrator"

    def test_list_roles_requires_role_read(self):
        response = make_client(Role.MANAGEMENT.value).get("/roles")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    def test_role_permissions(self):
        response = make_client(Role.STAKEHOLDER.value).get(
            f"/roles/{quote(Role.OFFICER.value)}/permissions"
        )

        assert response.status_code == 200
        assert response.json() == {
            "role": "Officer",
            "permissions": ["analytics.read", "content.read", "dashboard.read"],
        }

    def test_role_permissions_unknown_role(self):
        response = make_client(Role.ADMIN.value).get("/roles/Root/permissions")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_manageable_roles(self):
        response = make_client(Role.MANAGER.value).get("/roles/manageable")

        assert response.status_code == 200
        assert [role["name"] for role in response.json()] == ["Officer", "Leader"]

    def test_manageable_roles_for_unknown_role_is_empty(self):
        response = make_client("Root").get("/roles/manageable")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize(
        ("assigner", "target", "allowed"),
        [
            (Role.SUPER_ADMIN.value, Role.SUPER_ADMIN.value, True),
            (Role.ADMIN.value, Role.SUPER_ADMIN.value, False),
            (Role.ADMIN.value, Role.OFFICER.value, True),
            (Role.ADMIN.value, "Root", False),
        ],
    )
    def test_validate_assignment(self, assigner, target, allowed):
        response = make_client(assigner).post(
            "/roles/assignments/validate", json={"target_role": target}
        )

        assert response.status_code == 200
        assert response.json() == {
            "assigner_role": assigner,
            "target_role": target,
            "allowed": allowed,
        }

    def test_validate_assignment_requires_role_assign(self):
        response = make_client(Role.STAKEHOLDER.value).post(
            "/roles/assignments/validate", json={"target_role": Role.OFFICER.value}
        )
        assert response.status_code == 403

    def test_validate_assignment_rejects_empty_target(self):
        response = make_client(Role.ADMIN.value).post(
            "/roles/assignments/validate", json={"target_role": ""}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_my_permissions(self):
        response = make_client(Role.LEADER.value).get("/me/permissions")

        assert response.status_code == 200
        assert response.json() == {
            "role": "Leader",
            "permissions": [
                "analytics.read",
                "content.read",
                "content.update",
                "dashboard.read",
                "dashboard.update",
            ],
        }

    def test_my_permissions_requires_authentication(self):
        response = make_client(None).get("/me/permissions")
        assert response.status_code == 401

    def test_unknown_route_uses_error_envelope(self):
        response = make_client(Role.ADMIN.value).get("/nope")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestStartup:
    def test_builtin_catalog_loaded_on_startup(self):
        provider = EngineProvider()
        app = create_app(Settings(catalog_source="builtin"), provider)

        with TestClient(app) as client:
            assert provider.ready is True
            assert client.get("/health").json() == {"status": "ok"}

    def test_file_catalog_loaded_on_startup(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({
            "admin_role": "Lead",
            "roles": [
                {"name": "Member", "rank": 1, "permissions": ["content.read"]},
                {"name": "Lead", "rank": 2, "permissions": ["role.read"], "inherits": ["Member"]},
            ],
        }))
        provider = EngineProvider()
        app = create_app(
            Settings(catalog_source="file", catalog_path=str(path)), provider
        )

        with TestClient(app):
            engine = provider.get()

        assert engine.roles == ("Member", "Lead")
        assert engine.has_permission("Lead", "content.read") is True

    def test_invalid_catalog_aborts_startup(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({
            "roles": [{"name": "Member", "rank": 1, "inherits": ["Ghost"]}],
        }))
        provider = EngineProvider()
        app = create_app(
            Settings(catalog_source="file", catalog_path=str(path)), provider
        )

        with pytest.raises(ConfigurationError, match="Ghost"):
            with TestClient(app):
                pass

        assert provider.ready is False

    def test_health_reports_unpublished_engine(self):
        app = create_app(Settings(), EngineProvider())

        # Without entering the lifespan no catalog is published
        response = TestClient(app).get("/health")

        assert response.status_code == 503

    def test_unreadable_catalog_file_aborts_startup(self, tmp_path, caplog):
        path = tmp_path / "catalog.json"
        path.write_bytes(b'{"roles": [{"name": "Off\xff", "rank": 1}]}')
        provider = EngineProvider()
        app = create_app(
            Settings(catalog_source="file", catalog_path=str(path)), provider
        )

        with caplog.at_level("CRITICAL", logger="rolegate"):
            with pytest.raises(ConfigurationError, match="Cannot read catalog file"):
                with TestClient(app):
                    pass

        assert provider.ready is False
        assert any("Refusing to start" in record.getMessage() for record in caplog.records)

    def test_requests_before_publication_are_unavailable(self):
        app = create_app(Settings(), EngineProvider())
        principal = Principal(id=uuid.uuid4(), role=Role.ADMIN.value)

        async def override_principal() -> Principal:
            return principal

        app.dependency_overrides[get_current_principal] = override_principal

        response = TestClient(app).get("/me/permissions")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "CATALOG_UNAVAILABLE"
