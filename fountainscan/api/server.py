"""REST API for scans, domain lists, reports, warning logs and keywords."""

from __future__ import annotations

import logging

from aiohttp import web

from ..engine.matcher import domain_matches
from ..service.list_store import ListKind
from ..service.scanner import ScanService
from ..storage.database import Database
from ..utils.domains import ensure_url

logger = logging.getLogger(__name__)

MAX_URL_LENGTH = 2048


def _coerce_int(value, default: int | None = None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


async def _read_json(request: web.Request) -> dict | None:
    try:
        data = await request.json()
    except Exception:
        return None
    return data if isinstance(data, dict) else None


def _bad_request(message: str) -> web.Response:
    return web.json_response({"error": message}, status=400)


@web.middleware
async def _cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        response = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
    return response


class ApiServer:
    """aiohttp application wrapping the scan service and database."""

    def __init__(
        self,
        *,
        service: ScanService,
        database: Database,
        host: str = "127.0.0.1",
        port: int = 5000,
    ):
        self.service = service
        self.database = database
        self.host = host
        self.port = port
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

        self._app = web.Application(middlewares=[_cors_middleware])
        self._register_routes()

    @property
    def app(self) -> web.Application:
        return self._app

    def _register_routes(self) -> None:
        router = self._app.router
        router.add_get("/", self._index)
        router.add_get("/healthz", self._healthz)

        router.add_post("/scan", self._scan)
        router.add_post("/page", self._page)
        router.add_post("/prescreen", self._prescreen)
        router.add_get("/scans/{key}", self._get_scan)
        router.add_delete("/scans/{key}", self._forget_scan)
        router.add_get("/rules", self._rules)
        router.add_get("/settings", self._get_settings)
        router.add_post("/settings", self._update_settings)

        for kind in ListKind:
            router.add_get(f"/{kind.value}", self._list_handler(kind, "get"))
            router.add_post(f"/{kind.value}", self._list_handler(kind, "add"))
            router.add_get(f"/{kind.value}/{{domain}}", self._list_handler(kind, "check"))
            router.add_delete(f"/{kind.value}/{{domain}}", self._list_handler(kind, "remove"))

        router.add_post("/report", self._add_report)
        router.add_post("/reports", self._add_report)
        router.add_get("/reports", self._get_reports)

        router.add_post("/warnings", self._add_warning)
        router.add_post("/logs", self._add_warning)
        router.add_get("/warnings", self._get_warnings)
        router.add_get("/warnings/user/{email}", self._get_user_warnings)

        router.add_post("/keywords", self._add_keyword)
        router.add_get("/keywords", self._get_keywords)
        router.add_delete("/keywords/{keyword_id}", self._delete_keyword)

    async def start(self) -> None:
        if self._runner:
            return
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=self.host, port=int(self.port))
        await self._site.start()
        logger.info("API server listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
        self._runner = None
        self._site = None

    # -- status --------------------------------------------------------------

    async def _index(self, request: web.Request) -> web.Response:
        return web.Response(text="FountainScan backend running")

    async def _healthz(self, request: web.Request) -> web.Response:
        payload = {"ok": True}
        try:
            payload.update(self.service.status())
            payload.update(await self.database.get_counts())
        except Exception as exc:
            logger.warning("Health status failed: %s", exc)
            payload["message"] = str(exc)
        return web.json_response(payload)

    # -- scanning ------------------------------------------------------------

    async def _scan(self, request: web.Request) -> web.Response:
        """Manual scan of a URL (optionally with page text)."""
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        url = str(data.get("url") or "").strip()
        if not url:
            return _bad_request("url is required")
        if len(url) > MAX_URL_LENGTH:
            return _bad_request("URL too long")
        key = str(data.get("key") or "").strip() or None

        outcome = self.service.scan(ensure_url(url), data.get("content") or "", key=key)
        return web.json_response({"success": True, **outcome.to_dict()})

    async def _page(self, request: web.Request) -> web.Response:
        """Queue page content for background scoring."""
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        url = str(data.get("url") or "").strip()
        key = str(data.get("key") or "").strip()
        if not url or not key:
            return _bad_request("url and key are required")

        queued = self.service.submit_page(
            key,
            url,
            str(data.get("content") or ""),
            force=bool(data.get("force", False)),
        )
        if not queued:
            return web.json_response({"queued": False}, status=503)
        return web.json_response({"queued": True, "key": key}, status=202)

    async def _prescreen(self, request: web.Request) -> web.Response:
        """Request-time URL check before a page loads."""
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        url = str(data.get("url") or "").strip()
        if not url:
            return _bad_request("url is required")
        if len(url) > MAX_URL_LENGTH:
            return _bad_request("URL too long")

        redirect_url = self.service.prescreen(ensure_url(url))
        return web.json_response({"blocked": redirect_url is not None, "redirect_url": redirect_url})

    async def _get_scan(self, request: web.Request) -> web.Response:
        snapshot = self.service.cache.get(request.match_info["key"])
        if not snapshot:
            return web.json_response({"error": "No recent scan"}, status=404)
        return web.json_response(snapshot.to_dict())

    async def _forget_scan(self, request: web.Request) -> web.Response:
        if not self.service.forget_page(request.match_info["key"]):
            return web.json_response({"error": "No recent scan"}, status=404)
        return web.json_response({"success": True})

    async def _rules(self, request: web.Request) -> web.Response:
        rules = [rule.to_dict() for rule in self.service.blocking_rules()]
        return web.json_response({"rules": rules, "count": len(rules)})

    async def _get_settings(self, request: web.Request) -> web.Response:
        settings = self.service.settings
        return web.json_response(
            {
                "alertsEnabled": settings.alerts_enabled,
                "blockingEnabled": settings.blocking_enabled,
            }
        )

    async def _update_settings(self, request: web.Request) -> web.Response:
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        for name in ("alertsEnabled", "blockingEnabled"):
            value = data.get(name)
            if value is not None and not isinstance(value, bool):
                return _bad_request(f"{name} must be a boolean")
        settings = self.service.update_settings(
            alerts_enabled=data.get("alertsEnabled"),
            blocking_enabled=data.get("blockingEnabled"),
        )
        return web.json_response(
            {
                "alertsEnabled": settings.alerts_enabled,
                "blockingEnabled": settings.blocking_enabled,
            }
        )

    # -- domain lists --------------------------------------------------------

    def _list_handler(self, kind: ListKind, action: str):
        async def handler(request: web.Request) -> web.Response:
            if action == "get":
                return web.json_response(list(self.service.lists.entries(kind)))

            if action == "add":
                data = await _read_json(request)
                if data is None:
                    return _bad_request("Invalid JSON payload")
                domain = str(data.get("domain") or "").strip()
                if not domain:
                    return _bad_request("domain is required")
                added = self.service.lists.add(kind, domain)
                return web.json_response({"success": True, "added": added})

            domain = request.match_info["domain"]
            if action == "check":
                matches = [e for e in self.service.lists.entries(kind) if domain_matches(domain, e)]
                return web.json_response({f"{kind.value}ed": bool(matches), "matches": matches})

            removed = self.service.lists.remove(kind, domain)
            if not removed:
                return web.json_response({"error": "Not found"}, status=404)
            return web.json_response({"success": True})

        return handler

    # -- reports -------------------------------------------------------------

    async def _add_report(self, request: web.Request) -> web.Response:
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        url = str(data.get("reported_url") or data.get("url") or "").strip()
        reason = str(data.get("report_reason") or data.get("reason") or "").strip()
        email = data.get("user_email") or data.get("email") or None
        if not url:
            return _bad_request("reported_url is required")
        if not reason:
            return _bad_request("report_reason is required")
        if len(url) > MAX_URL_LENGTH:
            return _bad_request("URL too long")

        try:
            report_id = await self.database.add_report(url, reason, email)
        except Exception as exc:
            logger.error("Failed to store report for %s: %s", url, exc)
            return web.json_response({"error": str(exc)}, status=500)

        blacklisted = self.service.handle_report(ensure_url(url))
        return web.json_response({"success": True, "id": report_id, "blacklisted": blacklisted})

    async def _get_reports(self, request: web.Request) -> web.Response:
        limit = _coerce_int(request.query.get("limit"))
        return web.json_response(await self.database.get_reports(limit=limit))

    # -- warning logs --------------------------------------------------------

    async def _add_warning(self, request: web.Request) -> web.Response:
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        keywords = data.get("keywords")
        if keywords is not None and not isinstance(keywords, list):
            return _bad_request("keywords must be a list")
        if not (data.get("site_url") or data.get("message")):
            return _bad_request("site_url or message is required")

        try:
            warning_id = await self.database.add_warning(
                site_url=data.get("site_url"),
                detection_score=_coerce_int(data.get("detection_score")),
                keywords=[str(k) for k in keywords] if keywords is not None else None,
                message=data.get("message"),
                severity=data.get("severity"),
                user_email=data.get("user_email"),
                source=data.get("source"),
            )
        except Exception as exc:
            logger.error("Failed to store warning log: %s", exc)
            return web.json_response({"error": str(exc)}, status=500)
        return web.json_response({"success": True, "id": warning_id})

    async def _get_warnings(self, request: web.Request) -> web.Response:
        return web.json_response(await self.database.get_warnings())

    async def _get_user_warnings(self, request: web.Request) -> web.Response:
        email = request.match_info["email"]
        return web.json_response(await self.database.get_warnings(user_email=email))

    # -- detection keywords --------------------------------------------------

    async def _add_keyword(self, request: web.Request) -> web.Response:
        data = await _read_json(request)
        if data is None:
            return _bad_request("Invalid JSON payload")
        keyword = str(data.get("keyword") or "").strip()
        if not keyword:
            return _bad_request("keyword is required")
        keyword_id = await self.database.add_keyword(keyword, data.get("severity"))
        if keyword_id is None:
            return web.json_response({"error": "Keyword already exists"}, status=409)
        return web.json_response({"success": True, "id": keyword_id})

    async def _get_keywords(self, request: web.Request) -> web.Response:
        return web.json_response(await self.database.get_keywords())

    async def _delete_keyword(self, request: web.Request) -> web.Response:
        keyword_id = _coerce_int(request.match_info["keyword_id"])
        if keyword_id is None:
            return _bad_request("Invalid keyword id")
        if not await self.database.delete_keyword(keyword_id):
            return web.json_response({"error": "Not found"}, status=404)
        return web.json_response({"success": True})
