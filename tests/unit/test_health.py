import pytest
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient
from fastapi import status


class TestHealthAPI:
    """헬스 체크 엔드포인트 테스트"""

    @pytest.mark.asyncio
    async def test_health_reports_each_backend(self, client: AsyncClient):
        health = {"mysql": True, "mongodb": True, "redis": False, "overall": False}

        with patch("app.api.health.check_database_health", AsyncMock(return_value=health)):
            response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["databases"] == {"mysql": "connected", "mongodb": "connected", "redis": "disconnected"}

    @pytest.mark.asyncio
    async def test_readiness_fails_when_backend_down(self, client: AsyncClient):
        health = {"mysql": False, "mongodb": True, "redis": True, "overall": False}

        with patch("app.api.health.check_database_health", AsyncMock(return_value=health)):
            response = await client.get("/health/ready")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_liveness(self, client: AsyncClient):
        response = await client.get("/health/live")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "alive"
