from __future__ import annotations

from dataclasses import dataclass

from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup


@dataclass(frozen=True)
class NotifierMessage:
    chat_id: int
    text: str


@dataclass
class BotAnswer:
    text: str = ""
    main_menu: ReplyKeyboardMarkup | None = None
    inline_keyboard: InlineKeyboardMarkup | None = None
    # callback answers edit the message the button belongs to when set
    edit_message_id: int | None = None

    @property
    def empty(self) -> bool:
        return not self.text
