"""
API smoke tests.

The app runs with its lifespan through asgi_lifespan, requests go through
httpx's ASGITransport, and the compositor dependency is swapped for one
whose remote fetches hit a MockTransport.
"""

from contextlib import asynccontextmanager
from io import BytesIO

import httpx
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from PIL import Image

from conftest import make_png, mock_client
from versecard.main import app
from versecard.routes import get_compositor
from versecard.services.background import BackgroundResolver
from versecard.services.compositor import VerseCompositor


@pytest.fixture(autouse=True)
def compositor(settings):
    resolver = BackgroundResolver(client=mock_client(lambda request: httpx.Response(404)), settings=settings)
    compositor = VerseCompositor(resolver=resolver, settings=settings)
    app.dependency_overrides[get_compositor] = lambda: compositor
    yield compositor
    app.dependency_overrides.clear()


@asynccontextmanager
async def lifespan_client():
    async with LifespanManager(app) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.mark.asyncio
async def test_health_endpoint():
    async with lifespan_client() as c:
        resp = await c.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_lists_scripts_and_backgrounds():
    async with lifespan_client() as c:
        scripts = (await c.get("/api/scripts")).json()
        themes = (await c.get("/api/backgrounds")).json()

    urdu = next(s for s in scripts if s["language"] == "ur")
    assert urdu["direction"] == "rtl"
    assert urdu["script"] == "nastaliq"
    assert {"id": "starry", "name": "Starry Night"} in themes


@pytest.mark.asyncio
async def test_segment_endpoint():
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/segment", json={"lines": ["a", "b", "c"], "language": "hi"})
    assert resp.status_code == 200
    verses = resp.json()["verses"]
    assert [v["text"] for v in verses] == ["a\nb", "c"]
    assert verses[1] == {"index": 1, "text": "c", "language": "hi"}


@pytest.mark.asyncio
async def test_segment_endpoint_accepts_stanza_content():
    content = [{"couplet": "one\ntwo"}, {"couplet": "three"}]
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/segment", json={"content": content, "language": "en"})
    assert [v["text"] for v in resp.json()["verses"]] == ["one\ntwo", "three"]


@pytest.mark.asyncio
async def test_segment_rejects_unknown_language():
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/segment", json={"lines": ["a"], "language": "fr"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_render_procedural_download():
    form = {"text": "Roses are red\nViolets are blue", "attribution": "Anon", "title": "Roses", "language": "en"}
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/render", data=form)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/jpeg"
    assert "roses-verse.jpg" in resp.headers["content-disposition"]
    assert Image.open(BytesIO(resp.content)).size == (1080, 1080)


@pytest.mark.asyncio
async def test_render_with_uploaded_background():
    form = {"text": "Sugar is sweet", "attribution": "Anon"}
    files = {"background_file": ("bg.png", make_png(320, 240), "image/png")}
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/render", data=form, files=files)

    assert resp.status_code == 200
    assert Image.open(BytesIO(resp.content)).size == (320, 240)
    assert "untitled-verse.jpg" in resp.headers["content-disposition"]


@pytest.mark.asyncio
async def test_render_empty_verse_is_rejected():
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/render", data={"text": "  ", "attribution": "Anon"})
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Select a verse before creating an image."


@pytest.mark.asyncio
async def test_render_broken_remote_background():
    form = {"text": "Roses are red", "background_url": "https://invalid.example/404.png"}
    async with lifespan_client() as c:
        resp = await c.post("/api/verses/render", data=form)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "The background image could not be loaded."
