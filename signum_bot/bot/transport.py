from __future__ import annotations

import asyncio
import logging

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup, Update

from signum_bot.bot.messages import BotAnswer

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]


class TelegramTransport:
    """Outbound side of the chat. Delivery is fire-and-forget: failures are logged, never raised."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send_text(
        self,
        chat_id: int,
        text: str,
        reply_markup: InlineKeyboardMarkup | ReplyKeyboardMarkup | None = None,
    ) -> bool:
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=reply_markup)
            return True
        except Exception as exc:  # noqa: BLE001
            logger.warning("send_message_failed", extra={"event": "send_message_failed", "chat_id": chat_id, "error": str(exc)})
            return False

    async def send_answer(self, chat_id: int, answer: BotAnswer) -> bool:
        if answer.empty:
            return False
        if answer.edit_message_id is not None:
            try:
                await self.bot.edit_message_text(
                    text=answer.text,
                    chat_id=chat_id,
                    message_id=answer.edit_message_id,
                    reply_markup=answer.inline_keyboard,
                )
                return True
            except TelegramBadRequest as exc:
                # "message is not modified" or the message is gone; a fresh message still delivers the answer
                logger.info("edit_message_fallback", extra={"event": "edit_message_fallback", "chat_id": chat_id, "error": str(exc)})
            except Exception as exc:  # noqa: BLE001
                logger.warning("edit_message_failed", extra={"event": "edit_message_failed", "chat_id": chat_id, "error": str(exc)})
                return False
        return await self.send_text(chat_id, answer.text, answer.inline_keyboard or answer.main_menu)

    async def answer_callback(self, callback_id: str) -> None:
        try:
            await self.bot.answer_callback_query(callback_query_id=callback_id)
        except Exception as exc:  # noqa: BLE001
            logger.debug("answer_callback_failed", extra={"event": "answer_callback_failed", "error": str(exc)})


class UpdatePoller:
    """Long-polls Telegram and feeds updates into the listener's queue."""

    def __init__(self, bot: Bot, queue: asyncio.Queue[Update], timeout_sec: int, shutdown: asyncio.Event) -> None:
        self.bot = bot
        self.queue = queue
        self.timeout_sec = timeout_sec
        self.shutdown = shutdown
        self.offset: int | None = None

    async def poll_once(self) -> int:
        updates = await self.bot.get_updates(offset=self.offset, timeout=self.timeout_sec, allowed_updates=ALLOWED_UPDATES)
        for update in updates:
            self.offset = update.update_id + 1
            await self.queue.put(update)
        return len(updates)

    async def run(self) -> None:
        logger.info("update_poller_started", extra={"event": "update_poller_started"})
        backoff = 1.0
        while not self.shutdown.is_set():
            try:
                await self.poll_once()
                backoff = 1.0
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.warning("get_updates_failed", extra={"event": "get_updates_failed", "error": str(exc)})
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 30.0)
        logger.info("update_poller_stopped", extra={"event": "update_poller_stopped"})
