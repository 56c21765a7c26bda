from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder, ReplyKeyboardBuilder

from signum_bot.core.config import BUTTON_CALC, BUTTON_INFO, BUTTON_PRICES


def main_menu(account_labels: list[str]) -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()
    for label in account_labels:
        kb.button(text=label)
    kb.button(text=BUTTON_PRICES)
    kb.button(text=BUTTON_CALC)
    kb.button(text=BUTTON_INFO)
    rows = [2] * (len(account_labels) // 2)
    if len(account_labels) % 2:
        rows.append(1)
    kb.adjust(*rows, 3)
    return kb.as_markup(resize_keyboard=True)


def account_actions(account_id: str, tracked: bool, faucet: bool = False) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="🔄 Refresh", callback_data=f"acc:{account_id}")
    if tracked:
        kb.button(text="🗑 Stop tracking", callback_data=f"del:{account_id}")
    else:
        kb.button(text="➕ Track", callback_data=f"add:{account_id}")
    if faucet:
        kb.button(text="🚰 Faucet", callback_data=f"faucet:{account_id}")
    kb.adjust(2, 1)
    return kb.as_markup()


def calc_presets() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for tib in (10, 50, 100, 500):
        kb.button(text=f"{tib} TiB", callback_data=f"calc:{tib}")
    kb.adjust(4)
    return kb.as_markup()
