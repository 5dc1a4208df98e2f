"""
Trusted host handling outside debug mode
"""

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.core.middleware import add_security_middleware


def _build_app(settings: Settings) -> FastAPI:
    app = FastAPI()
    add_security_middleware(app, settings)

    @app.get("/ping")
    async def ping():
        return {"status": "ok"}

    return app


async def _get(app: FastAPI, base_url: str):
    async with AsyncClient(transport=ASGITransport(app=app), base_url=base_url) as client:
        return await client.get("/ping")


async def test_configured_host_is_accepted():
    app = _build_app(Settings(debug=False, allowed_hosts_str="api.videotube.example, localhost"))

    assert (await _get(app, "http://api.videotube.example")).status_code == 200
    assert (await _get(app, "http://localhost")).status_code == 200


async def test_unknown_host_is_rejected():
    app = _build_app(Settings(debug=False, allowed_hosts_str="api.videotube.example"))

    response = await _get(app, "http://elsewhere.example")

    assert response.status_code == 400


async def test_default_hosts_are_local_only():
    settings = Settings(debug=False)
    app = _build_app(settings)

    assert settings.allowed_hosts == ["localhost", "127.0.0.1", "0.0.0.0"]
    assert (await _get(app, "http://127.0.0.1")).status_code == 200
