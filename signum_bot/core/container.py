from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from aiogram import Bot
from aiogram.types import Update

from signum_bot.adapters.prices import PriceAdapter
from signum_bot.adapters.signum.client import SignumApiClient
from signum_bot.bot.handlers import CommandHandlers
from signum_bot.bot.listener import BotListener
from signum_bot.bot.messages import NotifierMessage
from signum_bot.core.config import Settings
from signum_bot.core.http import ResilientHTTPClient
from signum_bot.services.calculator import CalculatorService
from signum_bot.services.notifier import AccountNotifier
from signum_bot.services.users import UserService


@dataclass
class ServiceHub:
    settings: Settings
    bot: Bot
    signum_http: ResilientHTTPClient
    cmc_http: ResilientHTTPClient
    signum_api: SignumApiClient
    price_adapter: PriceAdapter
    user_service: UserService
    calculator_service: CalculatorService
    notifier: AccountNotifier
    handlers: CommandHandlers
    listener: BotListener
    updates: asyncio.Queue[Update]
    notifications: asyncio.Queue[NotifierMessage]
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)
