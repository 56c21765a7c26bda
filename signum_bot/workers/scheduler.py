from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from signum_bot.core.container import ServiceHub
from signum_bot.core.errors import BotError

logger = logging.getLogger(__name__)


class WorkerScheduler:
    def __init__(self, hub: ServiceHub) -> None:
        self.hub = hub
        self.settings = hub.settings
        self.scheduler = AsyncIOScheduler(timezone="UTC")

    async def _refresh_prices(self) -> None:
        try:
            count = await self.hub.price_adapter.refresh()
        except BotError as exc:
            logger.warning("prices_refresh_failed", extra={"event": "prices_refresh_failed", "error": str(exc)})
            return
        logger.info("prices_refreshed", extra={"event": "prices_refreshed", "count": count})

    async def _check_balances(self) -> None:
        count = await self.hub.notifier.check_balances()
        logger.info("balances_checked", extra={"event": "balances_checked", "count": count})

    def start(self) -> None:
        now = datetime.now(timezone.utc)
        self.scheduler.add_job(
            self._refresh_prices, "interval", minutes=self.settings.price_refresh_min, max_instances=1, next_run_time=now
        )
        self.scheduler.add_job(self._check_balances, "interval", minutes=self.settings.notifier_period_min, max_instances=1)
        self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
