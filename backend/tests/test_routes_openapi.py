"""
Tests for OpenAPI route existence and endpoint registration.

These tests verify that critical routes are properly registered in the FastAPI
application and appear in the OpenAPI schema. This catches issues where routes
might be defined but not included in the main app.
"""
import pytest
from fastapi.testclient import TestClient
from app.main import app


class TestOpenAPIRouteExistence:
    """Tests that verify routes exist in the OpenAPI schema."""

    @pytest.fixture
    def client(self):
        """Create a test client for the FastAPI app."""
        return TestClient(app)

    def test_openapi_schema_available(self, client):
        """OpenAPI schema should be accessible."""
        response = client.get("/openapi.json")
        assert response.status_code == 200
        assert "paths" in response.json()

    def test_decode_route_exists_in_openapi(self, client):
        """
        Verify /api/v1/bank-returns/decode exists in OpenAPI.

        A 404 on upload in production usually means the router wasn't mounted.
        """
        response = client.get("/openapi.json")
        assert response.status_code == 200

        paths = response.json().get("paths", {})

        decode_path = "/api/v1/bank-returns/decode"
        assert decode_path in paths, (
            f"Route {decode_path} not found in OpenAPI. "
            f"Available /bank-returns paths: "
            f"{[p for p in paths.keys() if '/bank-returns' in p]}"
        )
        assert "post" in paths[decode_path], (
            f"POST method not defined for {decode_path}"
        )

    def test_banks_route_exists_in_openapi(self, client):
        """Verify /api/v1/bank-returns/banks exists in OpenAPI."""
        response = client.get("/openapi.json")
        assert response.status_code == 200

        paths = response.json().get("paths", {})
        assert "get" in paths.get("/api/v1/bank-returns/banks", {})

    def test_meta_version_route_exists_in_openapi(self, client):
        """Verify /api/v1/meta/version exists in OpenAPI."""
        response = client.get("/openapi.json")
        assert response.status_code == 200

        paths = response.json().get("paths", {})

        meta_version_path = "/api/v1/meta/version"
        assert meta_version_path in paths, (
            f"Route {meta_version_path} not found in OpenAPI"
        )


class TestMetaVersionEndpoint:
    """Tests for the /meta/version endpoint."""

    @pytest.fixture
    def client(self):
        """Create a test client for the FastAPI app."""
        return TestClient(app)

    def test_meta_version_returns_200(self, client):
        """Meta version endpoint should be reachable for deployment checks."""
        response = client.get("/api/v1/meta/version")

        assert response.status_code == 200, (
            f"Expected 200, got {response.status_code}"
        )

    def test_meta_version_returns_expected_fields(self, client):
        """Meta version should return git_sha, build_time, env_name and bank codes."""
        response = client.get("/api/v1/meta/version")
        assert response.status_code == 200

        data = response.json()
        assert "git_sha" in data
        assert "build_time" in data
        assert "env_name" in data

        # Values should be strings
        assert isinstance(data["git_sha"], str)
        assert isinstance(data["build_time"], str)
        assert isinstance(data["env_name"], str)

        assert data["bank_codes"][:2] == ["001", "341"]
        assert "000" not in data["bank_codes"]


# Run tests with pytest
if __name__ == "__main__":
    pytest.main([__file__, "-v"])


class TestAppSettings:
    """Settings that shape the application object."""

    def test_debug_follows_settings(self):
        from app.core.config import settings

        assert app.debug == settings.DEBUG
