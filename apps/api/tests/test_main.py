"""App bootstrap: settings defaults, OpenAPI and health."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.main import app

pytestmark = pytest.mark.anyio


class TestBootstrap:
    def test_version_defaults_without_environment(self, monkeypatch):
        monkeypatch.delenv("APP_VERSION", raising=False)
        assert Settings(_env_file=None).APP_VERSION == "0.1.0"

    async def test_openapi_is_built(self):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/openapi.json")
        assert resp.status_code == 200
        assert resp.json()["info"]["version"] == app.version
        assert resp.headers["X-API-Version"] == "v1"
