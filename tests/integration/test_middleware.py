import httpx
import pytest

from apps.api.main import create_app
from core.config import Settings
from core.storage.fixture_store import FixtureStore


def test_request_id_is_echoed(client):
    response = client.get("/posts", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Response-Time"].endswith("ms")


def test_request_id_is_generated(client):
    response = client.get("/posts")
    assert response.headers["X-Request-ID"]


def test_no_cache_headers(client, make_client):
    response = client.get("/posts")
    assert response.headers["Cache-Control"] == "no-cache"
    assert response.headers["Pragma"] == "no-cache"
    assert response.headers["Expires"] == "-1"

    cached = make_client(no_cache=True).get("/posts")
    assert "Pragma" not in cached.headers


def test_cors_preflight(client):
    origin = "http://frontend.test"
    response = client.options(
        "/posts",
        headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in (origin, "*")


def test_cors_disabled(make_client):
    response = make_client(no_cors=True).get("/posts", headers={"Origin": "http://frontend.test"})
    assert "access-control-allow-origin" not in response.headers


def test_read_only_rejects_writes(make_client):
    client = make_client(read_only=True)
    assert client.get("/posts").status_code == 200
    response = client.post("/posts", json={"title": "New"})
    assert response.status_code == 403
    assert client.delete("/posts/1").status_code == 403
    assert len(client.get("/posts").json()) == 3


def test_static_files_served_before_routes(make_client, tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>Mock server</h1>", encoding="utf-8")
    (public / "app.js").write_text("console.log('hi')", encoding="utf-8")
    client = make_client()

    home = client.get("/")
    assert home.status_code == 200
    assert "Mock server" in home.text
    assert client.get("/app.js").text == "console.log('hi')"
    assert client.get("/posts").status_code == 200


def test_gzip_large_responses(make_client):
    data = {"items": [{"id": index, "text": "x" * 50} for index in range(1, 50)]}
    response = make_client(data=data).get("/items", headers={"Accept-Encoding": "gzip"})
    assert response.headers["content-encoding"] == "gzip"
    assert len(response.json()) == 49


@pytest.mark.asyncio
async def test_async_client_round_trip(tmp_path, fixture_data):
    app = create_app(Settings(static_dir=str(tmp_path / "public")), FixtureStore(fixture_data))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        created = await client.post("/comments", json={"body": "async", "postId": 3})
        token = await client.post("/api-security/om-auth/cloud/token")
        listed = await client.get("/posts/3/comments")
    assert created.status_code == 201
    assert token.json()["access_token"] == "fakeString"
    assert [comment["body"] for comment in listed.json()] == ["async"]


def test_static_lookup_ignores_nul_bytes(make_client, tmp_path):
    (tmp_path / "public").mkdir()
    response = make_client().get("/posts%00x")
    assert response.status_code == 404
