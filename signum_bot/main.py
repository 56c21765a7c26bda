from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import BotCommand, Update
from fastapi import FastAPI, HTTPException, Request

from signum_bot.adapters.prices import PriceAdapter
from signum_bot.adapters.signum.client import SignumApiClient
from signum_bot.bot.handlers import CommandHandlers
from signum_bot.bot.listener import BotListener
from signum_bot.bot.session import SessionRegistry
from signum_bot.bot.transport import ALLOWED_UPDATES, TelegramTransport, UpdatePoller
from signum_bot.core.config import Settings, get_settings
from signum_bot.core.container import ServiceHub
from signum_bot.core.errors import ConfigurationError
from signum_bot.core.http import ResilientHTTPClient
from signum_bot.core.logging import setup_logging
from signum_bot.db.session import build_engine, build_session_factory, init_models
from signum_bot.services.calculator import CalculatorService
from signum_bot.services.notifier import AccountNotifier
from signum_bot.services.users import UserService
from signum_bot.workers.scheduler import WorkerScheduler

logger = logging.getLogger(__name__)


async def _sync_bot_commands(bot: Bot) -> None:
    command_specs = [
        ("start", "Start the bot"),
        ("add", "Track an account"),
        ("del", "Stop tracking an account"),
        ("price", "Actual SIGNA prices"),
        ("calc", "Mining reward calculator"),
        ("info", "About this bot"),
    ]
    await bot.set_my_commands([BotCommand(command=c, description=d) for c, d in command_specs])


def build_hub(settings: Settings, bot: Bot, db_factory) -> ServiceHub:
    signum_http = ResilientHTTPClient(hosts=settings.signum_hosts_list(), timeout=settings.signum_request_timeout_sec)
    cmc_http = ResilientHTTPClient(timeout=settings.signum_request_timeout_sec)
    signum_api = SignumApiClient(signum_http)
    price_adapter = PriceAdapter(cmc_http, base_url=settings.cmc_base_url, api_key=settings.cmc_api_key)
    user_service = UserService(db_factory, max_accounts=settings.max_num_of_accounts)
    calculator_service = CalculatorService(
        signum_api,
        default_base_target=settings.signum_default_base_target,
        default_avg_commit=settings.signum_default_avg_commit,
        default_block_reward=settings.signum_default_block_reward,
        reinvest_every_days=settings.calc_reinvest_every_days,
    )
    handlers = CommandHandlers(settings, signum_api, user_service, price_adapter, calculator_service)

    updates: asyncio.Queue[Update] = asyncio.Queue(maxsize=settings.listener_queue_size)
    notifications: asyncio.Queue = asyncio.Queue(maxsize=settings.listener_queue_size)
    shutdown = asyncio.Event()
    listener = BotListener(
        transport=TelegramTransport(bot),
        handlers=handlers,
        sessions=SessionRegistry(),
        updates=updates,
        notifications=notifications,
        shutdown=shutdown,
        concurrent_updates=settings.listener_concurrent_updates,
    )
    return ServiceHub(
        settings=settings,
        bot=bot,
        signum_http=signum_http,
        cmc_http=cmc_http,
        signum_api=signum_api,
        price_adapter=price_adapter,
        user_service=user_service,
        calculator_service=calculator_service,
        notifier=AccountNotifier(user_service, signum_api, notifications),
        handlers=handlers,
        listener=listener,
        updates=updates,
        notifications=notifications,
        shutdown=shutdown,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)

    if not settings.telegram_bot_token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is required")

    engine = build_engine(settings.database_url)
    await init_models(engine)

    bot = Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML, link_preview_is_disabled=True),
    )
    hub = build_hub(settings, bot, build_session_factory(engine))

    try:
        await _sync_bot_commands(bot)
    except Exception as exc:  # noqa: BLE001
        logger.warning("set_bot_commands_failed", extra={"event": "set_bot_commands_failed", "error": str(exc)})

    poller_task = None
    if settings.telegram_use_webhook:
        webhook_url = settings.telegram_webhook_url.rstrip("/") + settings.telegram_webhook_path
        try:
            await bot.set_webhook(
                webhook_url,
                secret_token=settings.telegram_webhook_secret or None,
                allowed_updates=ALLOWED_UPDATES,
            )
            logger.info("webhook_configured", extra={"event": "webhook_configured"})
        except Exception:  # noqa: BLE001
            logger.exception("webhook_configure_failed", extra={"event": "webhook_configure_failed"})
    else:
        with contextlib.suppress(Exception):
            await bot.delete_webhook()
        poller = UpdatePoller(bot, hub.updates, settings.telegram_poll_timeout_sec, hub.shutdown)
        poller_task = asyncio.create_task(poller.run(), name="telegram-update-poller")

    listener_task = asyncio.create_task(hub.listener.run(), name="bot-listener")
    scheduler = WorkerScheduler(hub)
    scheduler.start()

    app.state.settings = settings
    app.state.hub = hub
    app.state.listener_task = listener_task

    try:
        yield
    finally:
        hub.shutdown.set()
        scheduler.stop()
        if poller_task:
            poller_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poller_task
        with contextlib.suppress(Exception):
            await listener_task
        await bot.session.close()
        await hub.signum_http.close()
        await hub.cmc_http.close()
        await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Signum Explorer Bot", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict:
        task = getattr(app.state, "listener_task", None)
        if task is None or task.done():
            raise HTTPException(status_code=503, detail="listener is not running")
        return {"status": "ok", "signum_host": app.state.hub.signum_http.current_host}

    @app.post(settings.telegram_webhook_path)
    async def telegram_webhook(req: Request) -> dict:
        app_settings = app.state.settings
        if not app_settings.telegram_use_webhook:
            raise HTTPException(status_code=400, detail="Webhook mode disabled")

        if app_settings.telegram_webhook_secret:
            secret = req.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
            if secret != app_settings.telegram_webhook_secret:
                raise HTTPException(status_code=403, detail="Invalid secret")

        update = Update.model_validate(await req.json())
        await app.state.hub.updates.put(update)
        return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("signum_bot.main:app", host=settings.host, port=settings.port, reload=False)
