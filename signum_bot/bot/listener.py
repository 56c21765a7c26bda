from __future__ import annotations

import asyncio
import logging
import re
from contextlib import suppress

from aiogram.types import Update

from signum_bot.bot.handlers import CommandHandlers
from signum_bot.bot.messages import BotAnswer, NotifierMessage
from signum_bot.bot.session import Session, SessionRegistry
from signum_bot.bot.templates import UNKNOWN_COMMAND, error_text
from signum_bot.bot.transport import TelegramTransport
from signum_bot.core.config import (
    BUTTON_CALC,
    BUTTON_INFO,
    BUTTON_PRICES,
    COMMAND_ADD,
    COMMAND_CALC,
    COMMAND_DEL,
    COMMAND_INFO,
    COMMAND_PRICE,
    COMMAND_START,
)

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    text = _WS_RE.sub(" ", (text or "").strip())
    return text.replace(",", ".")


def resolve_chat_id(update: Update) -> int | None:
    if update.message is not None and update.message.chat is not None:
        return update.message.chat.id
    callback = update.callback_query
    if callback is not None:
        if callback.message is not None and callback.message.chat is not None:
            return callback.message.chat.id
        if callback.from_user is not None:
            return callback.from_user.id
    return None


class BotListener:
    """Single control loop arbitrating shutdown, notifier messages and inbound updates.

    Each iteration services exactly one ready source. Updates are interpreted under the
    owning chat's session lock; with ``concurrent_updates`` each update runs on its own
    task and the lock alone keeps commands of one chat from interleaving.
    """

    def __init__(
        self,
        transport: TelegramTransport,
        handlers: CommandHandlers,
        sessions: SessionRegistry,
        updates: asyncio.Queue[Update],
        notifications: asyncio.Queue[NotifierMessage],
        shutdown: asyncio.Event,
        concurrent_updates: bool = False,
    ) -> None:
        self.transport = transport
        self.handlers = handlers
        self.sessions = sessions
        self.updates = updates
        self.notifications = notifications
        self.shutdown = shutdown
        self.concurrent_updates = concurrent_updates
        self._inflight: set[asyncio.Task] = set()

    async def run(self) -> None:
        logger.info("listener_started", extra={"event": "listener_started"})
        stop_waiter = asyncio.create_task(self.shutdown.wait())
        notification_getter: asyncio.Task | None = None
        update_getter: asyncio.Task | None = None
        try:
            while not self.shutdown.is_set():
                if notification_getter is None:
                    notification_getter = asyncio.create_task(self.notifications.get())
                if update_getter is None:
                    update_getter = asyncio.create_task(self.updates.get())

                done, _ = await asyncio.wait(
                    {stop_waiter, notification_getter, update_getter},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if self.shutdown.is_set():
                    break

                if notification_getter in done:
                    item = notification_getter.result()
                    notification_getter = None
                    await self._deliver_notification(item)
                elif update_getter in done:
                    item = update_getter.result()
                    update_getter = None
                    await self._dispatch(item)
        finally:
            for task in (stop_waiter, notification_getter, update_getter):
                if task is not None and not task.done():
                    task.cancel()
                    with suppress(asyncio.CancelledError):
                        await task
            if self._inflight:
                await asyncio.gather(*self._inflight, return_exceptions=True)
            logger.info("listener_stopped", extra={"event": "listener_stopped"})

    async def _deliver_notification(self, item: NotifierMessage) -> None:
        ok = await self.transport.send_text(item.chat_id, item.text)
        if not ok:
            logger.warning("notification_dropped", extra={"event": "notification_dropped", "chat_id": item.chat_id})

    async def _dispatch(self, update: Update) -> None:
        chat_id = resolve_chat_id(update)
        if chat_id is None:
            logger.debug("update_dropped", extra={"event": "update_dropped"})
            return
        session = self.sessions.acquire(chat_id)
        if not self.concurrent_updates:
            await self.handle_update(session, update)
            return
        task = asyncio.create_task(self.handle_update(session, update))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def handle_update(self, session: Session, update: Update) -> None:
        async with session.lock:
            answer = await self._interpret(session, update)
        if update.callback_query is not None:
            await self.transport.answer_callback(update.callback_query.id)
        if answer is not None:
            await self.transport.send_answer(session.chat_id, answer)

    async def _interpret(self, session: Session, update: Update) -> BotAnswer | None:
        message = update.message
        try:
            if message is not None and message.text:
                text = normalize_text(message.text)
                logger.info(
                    "message_received",
                    extra={"event": "message_received", "chat_id": session.chat_id},
                )
                answer = await self._route_text(session, text)
                answer.main_menu = await self.handlers.main_menu(session.chat_id)
                return answer
            if update.callback_query is not None:
                return await self.handlers.process_callback(session, update.callback_query)
        except Exception as exc:  # noqa: BLE001
            logger.exception("command_failed", extra={"event": "command_failed", "chat_id": session.chat_id})
            return BotAnswer(text=error_text(exc))
        return None

    async def _route_text(self, session: Session, text: str) -> BotAnswer:
        if text.startswith(COMMAND_START):
            session.reset_state()
            return BotAnswer(text=await self.handlers.start(session))
        if text.startswith(COMMAND_ADD):
            session.reset_state()
            return BotAnswer(text=await self.handlers.process_add(session, text))
        if text.startswith(COMMAND_DEL):
            session.reset_state()
            return BotAnswer(text=await self.handlers.process_del(session, text))
        if text.startswith(COMMAND_PRICE) or text == BUTTON_PRICES:
            session.reset_state()
            return BotAnswer(text=self.handlers.price())
        if text.startswith(COMMAND_CALC) or text == BUTTON_CALC:
            session.reset_state()
            command = text if text.startswith(COMMAND_CALC) else COMMAND_CALC
            return await self.handlers.process_calc(session, command)
        if text.startswith(COMMAND_INFO) or text == BUTTON_INFO:
            session.reset_state()
            return BotAnswer(text=self.handlers.info())
        if text.startswith("/"):
            session.reset_state()
            return BotAnswer(text=UNKNOWN_COMMAND)
        return await self.handlers.process_message(session, text)
