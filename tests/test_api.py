"""Tests for the REST API."""

from contextlib import asynccontextmanager

import pytest
from aiohttp.test_utils import TestClient, TestServer

from fountainscan.api.server import ApiServer
from fountainscan.config import Config
from fountainscan.service.list_store import ListKind
from fountainscan.service.scanner import ScanService
from fountainscan.storage.database import Database


@asynccontextmanager
async def api_client(tmp_path, **overrides):
    config = Config(data_dir=tmp_path / "data", config_dir=tmp_path / "config", **overrides)
    database = Database(config.database_path)
    await database.connect()
    service = ScanService(config)
    api = ApiServer(service=service, database=database)
    try:
        async with TestClient(TestServer(api.app)) as client:
            yield client, service
    finally:
        await database.close()


@pytest.mark.asyncio
async def test_index_and_health(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.get("/")
        assert resp.status == 200
        assert await resp.text() == "FountainScan backend running"

        resp = await client.get("/healthz")
        data = await resp.json()
        assert data["ok"] is True
        assert data["user_reports"] == 0
        assert data["blacklist_entries"] == 0


@pytest.mark.asyncio
async def test_cors_preflight(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.options("/scan")
        assert resp.status == 204
        assert resp.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.asyncio
async def test_scan_endpoint(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.post(
            "/scan",
            json={"url": "http://promo.tk/verify-account", "content": "Act-Now! urgent", "key": "tab-3"},
        )
        assert resp.status == 200
        data = await resp.json()
        assert data["success"] is True
        assert data["domain"] == "promo.tk"
        # https 10 + tld 15 + urgency 2x10 + generic 3
        assert data["analysis"]["score"] == 48
        assert data["analysis"]["status"] == "warning"
        assert data["notification"]["priority"] == 1

        resp = await client.get("/scans/tab-3")
        assert resp.status == 200
        assert (await resp.json())["analysis"]["score"] == 48

        resp = await client.get("/scans/unknown")
        assert resp.status == 404


@pytest.mark.asyncio
async def test_scan_requires_url(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.post("/scan", json={"content": "hello"})
        assert resp.status == 400
        resp = await client.post("/scan", data="not json")
        assert resp.status == 400


@pytest.mark.asyncio
async def test_scan_bare_host(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.post("/scan", json={"url": "example.com"})
        data = await resp.json()
        assert data["url"] == "https://example.com"
        assert data["analysis"]["status"] == "safe"


@pytest.mark.asyncio
async def test_page_queue(tmp_path):
    async with api_client(tmp_path) as (client, service):
        resp = await client.post("/page", json={"url": "https://example.com/", "key": "1"})
        assert resp.status == 202
        assert service.status()["page_queue_size"] == 1

        resp = await client.post("/page", json={"url": "about:blank", "key": "1"})
        assert resp.status == 503

        resp = await client.post("/page", json={"url": "https://example.com/"})
        assert resp.status == 400


@pytest.mark.asyncio
async def test_settings_and_rules(tmp_path):
    async with api_client(tmp_path) as (client, service):
        service.lists.add(ListKind.BLACKLIST, "scam.example")

        resp = await client.get("/rules")
        assert (await resp.json())["count"] == 0

        resp = await client.post("/settings", json={"blockingEnabled": True})
        assert await resp.json() == {"alertsEnabled": True, "blockingEnabled": True}

        resp = await client.get("/rules")
        data = await resp.json()
        assert data["count"] == 2
        assert data["rules"][0]["action"]["redirect"]["extensionPath"] == (
            "/blocked.html?url=scam.example"
        )


@pytest.mark.asyncio
async def test_list_endpoints(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.post("/blacklist", json={"domain": "*.phish.example"})
        assert await resp.json() == {"success": True, "added": True}
        resp = await client.post("/blacklist", json={"domain": "*.PHISH.example"})
        assert (await resp.json())["added"] is False

        resp = await client.get("/blacklist")
        assert await resp.json() == ["*.phish.example"]

        resp = await client.get("/blacklist/login.phish.example")
        assert await resp.json() == {"blacklisted": True, "matches": ["*.phish.example"]}

        resp = await client.get("/whitelist/phish.example")
        assert (await resp.json())["whitelisted"] is False

        resp = await client.delete("/blacklist/*.phish.example")
        assert resp.status == 200
        resp = await client.delete("/blacklist/*.phish.example")
        assert resp.status == 404

        resp = await client.post("/whitelist", json={})
        assert resp.status == 400


@pytest.mark.asyncio
async def test_report_auto_blacklists(tmp_path):
    async with api_client(tmp_path) as (client, service):
        resp = await client.post(
            "/report",
            json={"url": "https://grant-payout.example/claim", "reason": "Asked for BVN"},
        )
        data = await resp.json()
        assert data["success"] is True
        assert data["blacklisted"] is True
        assert service.lists.entries(ListKind.BLACKLIST) == ("grant-payout.example",)

        resp = await client.get("/reports")
        reports = await resp.json()
        assert reports[0]["report_reason"] == "Asked for BVN"

        resp = await client.post("/reports", json={"reported_url": "https://x.example/"})
        assert resp.status == 400


@pytest.mark.asyncio
async def test_report_without_auto_blacklist(tmp_path):
    async with api_client(tmp_path, auto_blacklist_reports=False) as (client, service):
        resp = await client.post(
            "/reports",
            json={"reported_url": "https://grant-payout.example/", "report_reason": "spam"},
        )
        assert (await resp.json())["blacklisted"] is False
        assert service.lists.entries(ListKind.BLACKLIST) == ()


@pytest.mark.asyncio
async def test_warning_logs(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.post(
            "/warnings",
            json={
                "site_url": "http://scam.example/",
                "detection_score": "80",
                "keywords": ["bvn"],
                "user_email": "user@example.com",
            },
        )
        assert resp.status == 200
        resp = await client.post("/logs", json={"message": "Popup blocked"})
        assert resp.status == 200

        resp = await client.post("/warnings", json={"site_url": "x", "keywords": "bvn"})
        assert resp.status == 400
        resp = await client.post("/warnings", json={"severity": "low"})
        assert resp.status == 400

        resp = await client.get("/warnings")
        assert len(await resp.json()) == 2

        resp = await client.get("/warnings/user/user@example.com")
        warnings = await resp.json()
        assert len(warnings) == 1
        assert warnings[0]["detection_score"] == 80
        assert warnings[0]["keywords"] == ["bvn"]


@pytest.mark.asyncio
async def test_keyword_endpoints(tmp_path):
    async with api_client(tmp_path) as (client, _):
        resp = await client.post("/keywords", json={"keyword": "npower", "severity": "medium"})
        keyword_id = (await resp.json())["id"]

        resp = await client.post("/keywords", json={"keyword": "NPOWER"})
        assert resp.status == 409

        resp = await client.get("/keywords")
        assert [k["keyword"] for k in await resp.json()] == ["npower"]

        resp = await client.delete("/keywords/abc")
        assert resp.status == 400
        resp = await client.delete(f"/keywords/{keyword_id}")
        assert resp.status == 200
        resp = await client.delete(f"/keywords/{keyword_id}")
        assert resp.status == 404


@pytest.mark.asyncio
async def test_forget_scan(tmp_path):
    async with api_client(tmp_path) as (client, _):
        await client.post("/scan", json={"url": "https://example.com/", "key": "tab-9"})

        resp = await client.delete("/scans/tab-9")
        assert resp.status == 200
        resp = await client.get("/scans/tab-9")
        assert resp.status == 404
        resp = await client.delete("/scans/tab-9")
        assert resp.status == 404


@pytest.mark.asyncio
async def test_settings_reject_non_boolean_values(tmp_path):
    async with api_client(tmp_path) as (client, service):
        resp = await client.post("/settings", json={"blockingEnabled": "false"})
        assert resp.status == 400
        resp = await client.post("/settings", json={"alertsEnabled": 0})
        assert resp.status == 400

        assert service.settings.blocking_enabled is False
        assert service.settings.alerts_enabled is True

        resp = await client.post("/settings", json={"alertsEnabled": False})
        assert await resp.json() == {"alertsEnabled": False, "blockingEnabled": False}


@pytest.mark.asyncio
async def test_prescreen_endpoint(tmp_path):
    async with api_client(tmp_path, blocking_enabled=True) as (client, service):
        resp = await client.post("/prescreen", json={"url": "https://example.com/about"})
        assert await resp.json() == {"blocked": False, "redirect_url": None}

        resp = await client.post(
            "/prescreen", json={"url": "https://offers.example/free-scholarship/easy-cash"}
        )
        data = await resp.json()
        assert data["blocked"] is True
        assert data["redirect_url"].startswith("/blocked.html?url=https%3A%2F%2Foffers.example")
        assert service.lists.entries(ListKind.BLACKLIST) == ("offers.example",)

        resp = await client.post("/prescreen", json={"url": "offers.example/home"})
        data = await resp.json()
        assert data["blocked"] is True
        assert data["redirect_url"].endswith("&reason=Domain%20is%20blacklisted")

        resp = await client.post("/prescreen", json={})
        assert resp.status == 400


@pytest.mark.asyncio
async def test_prescreen_passes_while_blocking_disabled(tmp_path):
    async with api_client(tmp_path) as (client, service):
        resp = await client.post(
            "/prescreen", json={"url": "https://offers.example/free-scholarship/easy-cash"}
        )
        assert (await resp.json())["blocked"] is False
        assert service.lists.entries(ListKind.BLACKLIST) == ()
