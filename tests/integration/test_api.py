"""Integration tests for API endpoints."""

import pytest
from httpx import AsyncClient

PROJECT = {
    "id": "proj-api",
    "name": "Landing Page",
    "kind": "builder.io",
    "build_command": "npm run build",
    "output_directory": "dist",
    "ssl_enabled": True,
}

FAST_OPTIONS = {"retry_base_delay": 0, "timeout_minutes": 1}


async def create_workflow(client: AsyncClient, **overrides) -> dict:
    body = {"project": PROJECT, "platform": "vercel", "options": FAST_OPTIONS}
    body.update(overrides)
    response = await client.post("/v1/workflows", json=body)
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        """Test health check returns healthy status."""
        response = await client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "environment" in data
        assert "timestamp" in data
        assert response.headers["X-Request-ID"]


class TestPlatformEndpoints:
    """Tests for platform catalog endpoints."""

    @pytest.mark.asyncio
    async def test_list_platforms(self, client: AsyncClient):
        response = await client.get("/v1/platforms")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 7
        assert data["platforms"][0]["platform"] == "vercel"

    @pytest.mark.asyncio
    async def test_compatible_platforms(self, client: AsyncClient):
        response = await client.get(
            "/v1/platforms/compatible", params={"kind": "replit"}
        )

        assert response.status_code == 200
        assert [p["platform"] for p in response.json()["platforms"]] == [
            "heroku",
            "aws_s3",
        ]

    @pytest.mark.asyncio
    async def test_recommend(self, client: AsyncClient):
        response = await client.post(
            "/v1/platforms/recommend",
            json={
                "project": PROJECT,
                "preferences": {"prefer_free": True, "prefer_easy_setup": True},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["platform"] == "vercel"
        assert data["ranking"][0]["score"] == 55

    @pytest.mark.asyncio
    async def test_recommend_unknown_kind(self, client: AsyncClient):
        response = await client.post(
            "/v1/platforms/recommend",
            json={"project": {**PROJECT, "kind": "static"}},
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "NOCOMPATIBLEPLATFORMERROR"


class TestValidationEndpoints:
    """Tests for validation endpoints."""

    @pytest.mark.asyncio
    async def test_readiness(self, client: AsyncClient):
        response = await client.post("/v1/validation/readiness", json=PROJECT)

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert len(data["checks"]) == 6

    @pytest.mark.asyncio
    async def test_post_deploy(self, client: AsyncClient):
        response = await client.post(
            "/v1/validation/post-deploy",
            json={"url": "https://landing-page.vercel.app", "project": PROJECT},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert len(data["checks"]) == 5


class TestGuidanceEndpoints:
    """Tests for guidance endpoints."""

    @pytest.mark.asyncio
    async def test_deployment_guidance(self, client: AsyncClient):
        response = await client.post(
            "/v1/guidance/deployment",
            json={"platform": "netlify", "project": PROJECT},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["steps"][0]["title"] == "Create Netlify Account"
        assert data["estimated_minutes"] == sum(
            s["estimated_minutes"] for s in data["steps"]
        )

    @pytest.mark.asyncio
    async def test_production_guidance(self, client: AsyncClient):
        response = await client.post(
            "/v1/guidance/production",
            json={"platform": "vercel", "project": PROJECT},
        )

        assert response.status_code == 200
        titles = [s["title"] for s in response.json()["steps"]]
        assert titles[-1] == "Configure Vercel Production Settings"


class TestWorkflowEndpoints:
    """Tests for workflow endpoints."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, client: AsyncClient):
        created = await create_workflow(client)

        assert created["status"] == "pending"
        assert len(created["steps"]) == 6

        response = await client.get(f"/v1/workflows/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_create_recommends_platform(self, client: AsyncClient):
        created = await create_workflow(
            client, platform=None, preferences={"prefer_easy_setup": True}
        )

        assert created["config"]["platform"] == "vercel"

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_kind(self, client: AsyncClient):
        response = await client.post(
            "/v1/workflows",
            json={"project": {**PROJECT, "kind": "static"}, "platform": "vercel"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALIDCONFIGERROR"

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_kind_before_recommending(
        self, client: AsyncClient
    ):
        response = await client.post(
            "/v1/workflows", json={"project": {**PROJECT, "kind": "static"}}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALIDCONFIGERROR"

    @pytest.mark.asyncio
    async def test_execute_runs_in_background(self, client: AsyncClient):
        created = await create_workflow(client)

        response = await client.post(f"/v1/workflows/{created['id']}/execute")
        assert response.status_code == 202

        # The background task has finished once the response is delivered
        status_response = await client.get(f"/v1/workflows/{created['id']}")
        data = status_response.json()
        assert data["status"] == "completed"
        assert data["deployment_url"] == "https://landing-page.vercel.app"

    @pytest.mark.asyncio
    async def test_execute_twice_conflicts(self, client: AsyncClient):
        created = await create_workflow(client)
        await client.post(f"/v1/workflows/{created['id']}/execute")

        response = await client.post(f"/v1/workflows/{created['id']}/execute")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_cancel(self, client: AsyncClient):
        created = await create_workflow(client)

        response = await client.post(f"/v1/workflows/{created['id']}/cancel")

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_list_workflows(self, client: AsyncClient):
        await create_workflow(client)
        await create_workflow(client)

        response = await client.get("/v1/workflows", params={"status": "pending"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert len(data["workflows"]) == 2

    @pytest.mark.asyncio
    async def test_delete_workflow(self, client: AsyncClient):
        created = await create_workflow(client)

        response = await client.delete(f"/v1/workflows/{created['id']}")
        assert response.status_code == 204

        response = await client.get(f"/v1/workflows/{created['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_workflow(self, client: AsyncClient):
        response = await client.get("/v1/workflows/wf_missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "WORKFLOWNOTFOUNDERROR"

    @pytest.mark.asyncio
    async def test_stream_terminal_workflow(self, client: AsyncClient):
        created = await create_workflow(client)
        await client.post(f"/v1/workflows/{created['id']}/cancel")

        response = await client.get(f"/v1/workflows/{created['id']}/stream")

        assert response.status_code == 200
        assert "event: connected" in response.text
        assert '"status": "cancelled"' in response.text
