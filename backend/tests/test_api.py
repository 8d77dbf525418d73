from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from franchise_mapper.main import app
from franchise_mapper.services.catalog import get_gateway
from franchise_mapper.services.errors import RateLimitedError, UpstreamError
from franchise_mapper.services.franchise.resolver import get_cache


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def franchise_catalog(catalog):
    catalog.add(1, year=2000, popularity=100, relations=[("SEQUEL", 2)], title="Season One")
    catalog.add(2, year=2005, popularity=500, relations=[("PREQUEL", 1), ("SIDE_STORY", 3)], title="Season Two")
    catalog.add(3, format="MOVIE", year=2006, popularity=50, relations=[("PARENT", 2)], title="The Movie")
    catalog.search_index["season two"] = 2
    return catalog


@pytest.fixture
async def client(franchise_catalog):
    get_cache().clear()
    app.dependency_overrides[get_gateway] = lambda: franchise_catalog
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
    get_cache().clear()


def _node(node_id: int, format: str = "TV", year: int = 2000, edges: list[tuple[str, int]] = ()) -> dict:
    return {
        "id": node_id,
        "title": {"english": f"Entry {node_id}"},
        "format": format,
        "year": year,
        "edges": [{"relation_type": t, "target_id": target} for t, target in edges],
    }


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_security_headers(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"


# --- /api/franchise/resolve ---


@pytest.mark.anyio
async def test_resolve_by_id(client: AsyncClient):
    resp = await client.post("/api/franchise/resolve", json={"query": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["root_id"] == 1
    assert data["cached"] is False
    assert data["truncated"] is False
    franchise = data["franchise"]
    assert franchise["id"] == 2
    assert franchise["title"]["english"] == "Season Two"
    assert sorted(int(k) for k in franchise["nodes"]) == [1, 2, 3]


@pytest.mark.anyio
async def test_resolve_by_title_then_cached(client: AsyncClient, franchise_catalog):
    first = await client.post("/api/franchise/resolve", json={"query": "Season Two"})
    assert first.status_code == 200
    batches = len(franchise_catalog.batch_calls)

    second = await client.post("/api/franchise/resolve", json={"query": 1})
    assert second.status_code == 200
    assert second.json()["cached"] is True
    assert len(franchise_catalog.batch_calls) == batches


@pytest.mark.anyio
async def test_resolve_refresh_recrawls(client: AsyncClient, franchise_catalog):
    await client.post("/api/franchise/resolve", json={"query": 1})
    batches = len(franchise_catalog.batch_calls)
    resp = await client.post("/api/franchise/resolve", json={"query": 1, "refresh": True})
    assert resp.json()["cached"] is False
    assert len(franchise_catalog.batch_calls) > batches


@pytest.mark.anyio
async def test_resolve_unknown_title(client: AsyncClient):
    resp = await client.post("/api/franchise/resolve", json={"query": "nothing like this"})
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_resolve_nothing_trackable(client: AsyncClient, franchise_catalog):
    franchise_catalog.add(40, format="MUSIC")
    resp = await client.post("/api/franchise/resolve", json={"query": 40})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_resolve_rate_limited(client: AsyncClient, franchise_catalog):
    franchise_catalog.fetch_relations = AsyncMock(side_effect=RateLimitedError(retry_after=12))
    resp = await client.post("/api/franchise/resolve", json={"query": 1})
    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "12"


@pytest.mark.anyio
async def test_resolve_upstream_failure(client: AsyncClient, franchise_catalog):
    franchise_catalog.fetch_batch = AsyncMock(side_effect=UpstreamError("boom", status_code=500))
    resp = await client.post("/api/franchise/resolve", json={"query": 1})
    assert resp.status_code == 502
    assert get_cache().lookup(1) is None


# --- Cached franchise and timeline ---


@pytest.mark.anyio
async def test_get_franchise_requires_resolution(client: AsyncClient):
    resp = await client.get("/api/franchise/2")
    assert resp.status_code == 404

    await client.post("/api/franchise/resolve", json={"query": 1})
    resp = await client.get("/api/franchise/2")
    assert resp.status_code == 200
    assert resp.json()["cover"] == "https://img.example/2.jpg"


@pytest.mark.anyio
async def test_franchise_timeline(client: AsyncClient):
    await client.post("/api/franchise/resolve", json={"query": 1})
    resp = await client.get("/api/franchise/2/timeline")
    assert resp.status_code == 200
    data = resp.json()
    assert data["franchise_id"] == 2
    assert data["total_nodes"] == 3
    assert [era["main"]["id"] for era in data["eras"]] == [1, 2]
    assert [e["id"] for e in data["eras"][1]["extras"]] == [3]


@pytest.mark.anyio
async def test_franchise_timeline_applies_view_policy(client: AsyncClient):
    await client.post("/api/franchise/resolve", json={"query": 1})

    resp = await client.get("/api/franchise/2/timeline", params={"formats": ["TV"]})
    eras = resp.json()["eras"]
    assert [(era["main"]["id"], era["extras"]) for era in eras] == [(1, []), (2, [])]

    resp = await client.get("/api/franchise/2/timeline", params={"hide": [2]})
    eras = resp.json()["eras"]
    assert [(era["main"]["id"], [e["id"] for e in era["extras"]]) for era in eras] == [(1, [3])]


@pytest.mark.anyio
async def test_franchise_timeline_not_cached(client: AsyncClient):
    resp = await client.get("/api/franchise/99/timeline")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_timeline_from_explicit_nodes(client: AsyncClient):
    nodes = [
        _node(1, year=2000, edges=[("SEQUEL", 2)]),
        _node(2, year=2010),
        _node(11, "MOVIE", 2001, [("SIDE_STORY", 1)]),
        _node(12, "OVA", 2011, [("SIDE_STORY", 2)]),
    ]
    resp = await client.post("/api/franchise/timeline", json={"nodes": nodes})
    assert resp.status_code == 200
    data = resp.json()
    assert data["franchise_id"] is None
    assert data["total_nodes"] == 4
    assert [(era["main"]["id"], [e["id"] for e in era["extras"]]) for era in data["eras"]] == [
        (1, [11]),
        (2, [12]),
    ]


@pytest.mark.anyio
async def test_timeline_duplicate_ids(client: AsyncClient):
    resp = await client.post("/api/franchise/timeline", json={"nodes": [_node(1), _node(1)]})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_timeline_bad_sort(client: AsyncClient):
    resp = await client.post("/api/franchise/timeline", json={"nodes": [_node(1)], "policy": {"sort": "rating"}})
    assert resp.status_code == 422


# --- /api/catalog ---


@pytest.mark.anyio
async def test_search_short_term_returns_nothing(client: AsyncClient, franchise_catalog):
    resp = await client.get("/api/catalog/search", params={"q": "se"})
    assert resp.status_code == 200
    assert resp.json() == []
    assert franchise_catalog.search_calls == []


@pytest.mark.anyio
async def test_search(client: AsyncClient):
    resp = await client.get("/api/catalog/search", params={"q": "season"})
    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()] == [1, 2]


@pytest.mark.anyio
async def test_media_detail(client: AsyncClient):
    resp = await client.get("/api/catalog/media/3")
    assert resp.status_code == 200
    assert resp.json()["format"] == "MOVIE"

    resp = await client.get("/api/catalog/media/404")
    assert resp.status_code == 404
