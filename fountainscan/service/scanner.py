"""Scan service: feeds page events into the heuristic engine and acts on results."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..config import Config
from ..constants import status_escalated
from ..engine.blocking import BlockRule
from ..engine.matcher import any_match
from ..engine.models import ScanInput, ScanResult
from ..engine.scorer import HeuristicScorer
from ..utils.domains import extract_hostname
from .list_store import DomainListStore
from .policy import (
    Notification,
    ScanSettings,
    block_reason,
    blocked_page_url,
    build_notification,
    prescreen_url,
    should_block,
    should_notify,
)
from .scan_cache import ScanCache
from .throttle import ScanThrottle

logger = logging.getLogger(__name__)

SKIP_PREFIXES = ("chrome:", "chrome-extension:", "moz-extension:", "about:", "data:")


@dataclass(frozen=True)
class ScanOutcome:
    """A scan result plus what the host should do about it."""

    url: str
    domain: str
    result: ScanResult
    notification: Optional[Notification] = None
    blocked: bool = False
    redirect_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "domain": self.domain,
            "analysis": self.result.to_dict(),
            "notification": self.notification.to_dict() if self.notification else None,
            "blocked": self.blocked,
            "redirect_url": self.redirect_url,
        }


@dataclass(frozen=True)
class PageEvent:
    key: str
    url: str
    content: str = ""
    force: bool = False


def should_scan_url(url: str) -> bool:
    """Skip browser-internal pages."""
    lowered = (url or "").strip().lower()
    return bool(lowered) and not lowered.startswith(SKIP_PREFIXES)


class ScanService:
    """Single-consumer scan pipeline around the pure heuristic engine."""

    def __init__(
        self,
        config: Config,
        lists: DomainListStore | None = None,
        cache: ScanCache | None = None,
        throttle: ScanThrottle | None = None,
    ):
        self.config = config
        self.settings = ScanSettings(
            alerts_enabled=config.alerts_enabled,
            blocking_enabled=config.blocking_enabled,
        )
        self.scorer = HeuristicScorer(config.rule_set())
        self.lists = lists if lists is not None else DomainListStore.from_config(config)
        self.cache = cache if cache is not None else ScanCache(retention_seconds=config.scan_retention_seconds)
        self.throttle = (
            throttle if throttle is not None else ScanThrottle(cooldown_seconds=config.scan_cooldown_seconds)
        )

        self._page_queue: asyncio.Queue[PageEvent] = asyncio.Queue(maxsize=1000)
        self._tasks: list[asyncio.Task] = []
        self._running = False
        self._scans_completed = 0

    # -- synchronous entry points -------------------------------------------

    def evaluate(self, url: str, content: str | None = None) -> ScanOutcome:
        """Score a page and decide on notification/blocking. No side effects."""
        scan_input = ScanInput.from_page(
            url, content, max_content_length=self.config.max_content_length
        )
        snapshot = self.lists.snapshot()
        result = self.scorer.score(scan_input, snapshot.whitelist, snapshot.blacklist)
        self._scans_completed += 1

        notification = None
        if should_notify(self.settings, result):
            notification = build_notification(scan_input.domain, result)

        blocked = should_block(self.settings, result, scan_input.domain, snapshot.whitelist)
        redirect_url = blocked_page_url(url, block_reason(result)) if blocked else None

        return ScanOutcome(
            url=url,
            domain=scan_input.domain,
            result=result,
            notification=notification,
            blocked=blocked,
            redirect_url=redirect_url,
        )

    def scan(self, url: str, content: str | None = None, *, key: str | None = None) -> ScanOutcome:
        """Manual scan: evaluate, cache, and blacklist the domain if it gets blocked."""
        outcome = self.evaluate(url, content)
        if key:
            self.cache.put(key, outcome.url, outcome.domain, outcome.result)
        if outcome.blocked:
            self.blacklist_url(url)
        logger.info(
            "Scanned %s: score=%s status=%s",
            outcome.domain or url,
            outcome.result.score,
            outcome.result.status.value,
        )
        return outcome

    def prescreen(self, url: str) -> Optional[str]:
        """Request-time URL check. Returns a redirect target if the request is blocked."""
        if not self.settings.blocking_enabled or not should_scan_url(url):
            return None
        snapshot = self.lists.snapshot()
        domain = extract_hostname(url)
        if any_match(domain, snapshot.whitelist):
            return None
        if any_match(domain, snapshot.blacklist):
            return blocked_page_url(url, "Domain is blacklisted")

        outcome = prescreen_url(url)
        if not outcome.is_dangerous:
            return None
        self.blacklist_url(url)
        return blocked_page_url(url, outcome.reason)

    def blacklist_url(self, url: str) -> bool:
        """Add the URL's host to the blacklist unless an entry already covers it."""
        return self.lists.blacklist_host(url)

    def handle_report(self, reported_url: str) -> bool:
        """Apply the auto-blacklist policy for a user report."""
        if not self.config.auto_blacklist_reports:
            return False
        return self.blacklist_url(reported_url)

    def update_settings(self, *, alerts_enabled: bool | None = None, blocking_enabled: bool | None = None):
        self.settings = ScanSettings(
            alerts_enabled=self.settings.alerts_enabled if alerts_enabled is None else bool(alerts_enabled),
            blocking_enabled=(
                self.settings.blocking_enabled if blocking_enabled is None else bool(blocking_enabled)
            ),
        )
        logger.info(
            "Settings updated (alerts=%s, blocking=%s)",
            self.settings.alerts_enabled,
            self.settings.blocking_enabled,
        )
        return self.settings

    def blocking_rules(self) -> tuple[BlockRule, ...]:
        """Rules for the network layer; empty while blocking is disabled."""
        if not self.settings.blocking_enabled:
            return ()
        return self.lists.rules

    # -- page event queue ----------------------------------------------------

    def submit_page(self, key: str, url: str, content: str = "", *, force: bool = False) -> bool:
        """Queue a page-content event for the background worker."""
        if not should_scan_url(url):
            return False
        try:
            self._page_queue.put_nowait(PageEvent(key=str(key), url=url, content=content or "", force=force))
        except asyncio.QueueFull:
            logger.warning("Page queue full, dropping scan for %s", url)
            return False
        return True

    async def process_page(self, event: PageEvent) -> Optional[ScanOutcome]:
        """Score one queued page unless it was scanned within the cooldown."""
        if not self.throttle.allow(event.key, force=event.force):
            logger.debug("Throttled rescan for %s", event.key)
            return None
        previous = self.cache.get(event.key)
        outcome = self.evaluate(event.url, event.content)
        self.cache.put(event.key, outcome.url, outcome.domain, outcome.result)
        if previous and status_escalated(outcome.result.status, previous.result.status):
            logger.warning(
                "Status escalated for %s: %s -> %s",
                outcome.domain or event.url,
                previous.result.status.value,
                outcome.result.status.value,
            )
        if outcome.notification:
            logger.info("%s (%s)", outcome.notification.message, outcome.notification.context)
        if outcome.blocked:
            logger.info(
                "Blocking dangerous site: %s (Score: %s)", outcome.domain, outcome.result.score
            )
            self.blacklist_url(event.url)
        return outcome

    def forget_page(self, key: str) -> bool:
        """Drop the cached snapshot and cooldown for a closed tab/session."""
        self.throttle.forget(str(key))
        return self.cache.delete(key)

    async def start(self):
        """Start the page worker and cleanup loop."""
        if self._running:
            return
        self._running = True
        self._tasks = [
            asyncio.create_task(self._page_worker()),
            asyncio.create_task(self._cleanup_loop()),
        ]
        logger.info("Scan service started")

    async def stop(self):
        self._running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Scan service stopped")

    async def _page_worker(self):
        """Process queued page events one at a time."""
        logger.info("Page worker started")
        while self._running:
            try:
                try:
                    event = await asyncio.wait_for(self._page_queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue
                await self.process_page(event)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Page worker error: %s", e)
                await asyncio.sleep(1)

    async def _cleanup_loop(self):
        """Periodically drop expired scan snapshots."""
        interval = max(1, int(self.config.scan_cleanup_interval_seconds))
        while self._running:
            try:
                await asyncio.sleep(interval)
                self.cache.purge_expired()
                self.throttle.purge_stale()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Scan cleanup error: %s", e)

    def status(self) -> dict:
        snapshot = self.lists.snapshot()
        return {
            "status": "ok" if self._running else "stopped",
            "page_queue_size": self._page_queue.qsize(),
            "cached_scans": len(self.cache),
            "scans_completed": self._scans_completed,
            "whitelist_entries": len(snapshot.whitelist),
            "blacklist_entries": len(snapshot.blacklist),
            "blocking_rules": len(self.blocking_rules()),
        }
