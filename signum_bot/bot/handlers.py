from __future__ import annotations

import logging
import math

from aiogram.types import CallbackQuery, Message

from signum_bot.adapters.prices import PriceAdapter
from signum_bot.adapters.signum.client import SignumApiClient, looks_like_account
from signum_bot.bot.keyboards import account_actions, calc_presets, main_menu
from signum_bot.bot.messages import BotAnswer
from signum_bot.bot.session import Flow, Session
from signum_bot.bot.templates import (
    UNKNOWN_COMMAND,
    account_template,
    calc_template,
    error_text,
    info_text,
    transaction_sent_template,
    welcome_text,
)
from signum_bot.core.config import Settings
from signum_bot.core.errors import ConfigurationError, SignumApiError, TransactionError, UpstreamError
from signum_bot.services.calculator import CalculatorService
from signum_bot.services.users import UserService

logger = logging.getLogger(__name__)

FAUCET_MESSAGE = "Welcome to Signum! Sent by Signum Explorer Bot faucet"


def _args(message: str) -> list[str]:
    return message.split(" ")[1:]


def _as_float(value: str) -> float | None:
    try:
        out = float(value)
    except ValueError:
        return None
    return out if math.isfinite(out) and out >= 0 else None


class CommandHandlers:
    """Command logic. Every method runs with the session lock held by the listener."""

    def __init__(
        self,
        settings: Settings,
        api: SignumApiClient,
        users: UserService,
        prices: PriceAdapter,
        calculator: CalculatorService,
    ) -> None:
        self.settings = settings
        self.api = api
        self.users = users
        self.prices = prices
        self.calculator = calculator
        self._faucet_sent: set[str] = set()
        self._faucet_pending: set[str] = set()

    async def main_menu(self, chat_id: int):
        accounts = await self.users.list_accounts(chat_id)
        return main_menu([a.account_rs for a in accounts])

    async def start(self, session: Session) -> str:
        await self.users.ensure_user(session.chat_id)
        return welcome_text()

    def info(self) -> str:
        return info_text()

    def price(self) -> str:
        return self.prices.actual_prices_text()

    async def process_add(self, session: Session, message: str) -> str:
        args = _args(message)
        if not args:
            session.await_input(Flow.ADD)
            return "➕ Send the account to track (<code>S-XXXX-XXXX-XXXX-XXXXX</code> or numeric id)"
        return await self._add_account(session.chat_id, args[0])

    async def process_del(self, session: Session, message: str) -> str:
        args = _args(message)
        if not args:
            session.await_input(Flow.DEL)
            return "🗑 Send the account to stop tracking"
        return await self._del_account(session.chat_id, args[0])

    async def process_calc(self, session: Session, message: str) -> BotAnswer:
        args = _args(message)
        if not args:
            session.await_input(Flow.CALC, 1)
            return BotAnswer(text="🧮 Send your plot size in TiB or pick one", inline_keyboard=calc_presets())
        tib = _as_float(args[0])
        if tib is None or tib == 0:
            return BotAnswer(text="🚫 Plot size must be a positive number of TiB, e.g. <code>/calc 100 5000</code>")
        if len(args) < 2:
            session.await_input(Flow.CALC, 2, tib)
            return BotAnswer(text=f"🧮 {tib:g} TiB. Now send your commitment in SIGNA")
        commitment = _as_float(args[1])
        if commitment is None:
            return BotAnswer(text="🚫 Commitment must be a number of SIGNA, e.g. <code>/calc 100 5000</code>")
        return BotAnswer(text=await self._calculate(tib, commitment))

    async def process_message(self, session: Session, message: str) -> BotAnswer:
        state = session.state
        if state.flow is Flow.ADD:
            session.reset_state()
            return BotAnswer(text=await self._add_account(session.chat_id, message))
        if state.flow is Flow.DEL:
            session.reset_state()
            return BotAnswer(text=await self._del_account(session.chat_id, message))
        if state.flow is Flow.CALC and state.step == 1:
            tib = _as_float(message)
            if tib is None or tib == 0:
                return BotAnswer(text="🚫 Send a positive number of TiB")
            session.await_input(Flow.CALC, 2, tib)
            return BotAnswer(text=f"🧮 {tib:g} TiB. Now send your commitment in SIGNA")
        if state.flow is Flow.CALC and state.step == 2:
            commitment = _as_float(message)
            if commitment is None:
                return BotAnswer(text="🚫 Send the commitment as a number of SIGNA")
            session.reset_state()
            return BotAnswer(text=await self._calculate(float(state.data[0]), commitment))

        if looks_like_account(message):
            return await self._account_answer(session.chat_id, message)
        return BotAnswer(text=f"{UNKNOWN_COMMAND}\n\nSend an account or use the menu buttons")

    async def process_callback(self, session: Session, callback: CallbackQuery) -> BotAnswer:
        data = callback.data or ""
        action, _, value = data.partition(":")
        edit_id = callback.message.message_id if isinstance(callback.message, Message) else None

        if action == "acc" and value:
            answer = await self._account_answer(session.chat_id, value)
        elif action == "add" and value:
            session.reset_state()
            answer = await self._account_answer(session.chat_id, value, note=await self._add_account(session.chat_id, value))
        elif action == "del" and value:
            session.reset_state()
            answer = await self._account_answer(session.chat_id, value, note=await self._del_account(session.chat_id, value))
        elif action == "faucet" and value:
            answer = BotAnswer(text=await self._faucet(value))
            edit_id = None
        elif action == "calc" and _as_float(value):
            session.await_input(Flow.CALC, 2, float(value))
            answer = BotAnswer(text=f"🧮 {float(value):g} TiB. Now send your commitment in SIGNA")
            edit_id = None
        else:
            answer = BotAnswer(text=UNKNOWN_COMMAND)
            edit_id = None
        answer.edit_message_id = edit_id
        return answer

    async def _account_answer(self, chat_id: int, account: str, note: str = "") -> BotAnswer:
        try:
            acc = await self.api.get_account(account)
        except (UpstreamError, SignumApiError) as exc:
            return BotAnswer(text=f"🚫 Could not load account {account}: {exc}")
        tracked = await self.users.get_account(chat_id, acc.account) is not None
        faucet = bool(self.settings.faucet_secret_phrase) and not acc.public_key and acc.account not in self._faucet_sent
        text = account_template(acc, tracked)
        if note:
            text = f"{note}\n\n{text}"
        return BotAnswer(text=text, inline_keyboard=account_actions(acc.account, tracked=tracked, faucet=faucet))

    async def _add_account(self, chat_id: int, account: str) -> str:
        account = account.strip()
        if not looks_like_account(account):
            return f"🚫 Incorrect account format: {account}"
        try:
            acc = await self.api.get_account(account)
        except (UpstreamError, SignumApiError) as exc:
            return f"🚫 Could not load account {account}: {exc}"
        try:
            row = await self.users.add_account(chat_id, acc.account, acc.account_rs, acc.balance_nqt, name=acc.name)
        except RuntimeError as exc:
            return f"🚫 {exc}"
        logger.info("account_added", extra={"event": "account_added", "chat_id": chat_id, "account": row.account_rs})
        return f"✅ Account <b>{row.account_rs}</b> added"

    async def _del_account(self, chat_id: int, account: str) -> str:
        account = account.strip()
        if not await self.users.delete_account(chat_id, account):
            return f"🚫 Account {account} is not tracked"
        logger.info("account_deleted", extra={"event": "account_deleted", "chat_id": chat_id, "account": account})
        return f"🗑 Account <b>{account}</b> deleted"

    async def _calculate(self, tib: float, commitment: float) -> str:
        stats = await self.calculator.network_stats()
        return calc_template(self.calculator.calculate(tib, commitment, stats))

    async def _faucet(self, account_id: str) -> str:
        if account_id in self._faucet_sent:
            return "🚰 Faucet was already sent to this account"
        if account_id in self._faucet_pending:
            return "🚰 Faucet for this account is already on its way"
        # reserved before the first await; other chats may run concurrently
        self._faucet_pending.add(account_id)
        try:
            return await self._send_faucet(account_id)
        finally:
            self._faucet_pending.discard(account_id)

    async def _send_faucet(self, account_id: str) -> str:
        try:
            acc = await self.api.get_account(account_id)
        except (UpstreamError, SignumApiError) as exc:
            return f"🚫 Could not load account {account_id}: {exc}"
        if acc.public_key:
            return "🚰 Faucet is only for new accounts without a public key"
        try:
            resp = await self.api.send_money(
                self.settings.faucet_secret_phrase,
                recipient=acc.account,
                amount_nqt=self.settings.faucet_amount_nqt,
                fee_nqt=self.settings.faucet_fee_nqt,
                message=FAUCET_MESSAGE,
            )
        except ConfigurationError:
            return "🚰 Faucet is not configured"
        except TransactionError as exc:
            logger.warning("faucet_failed", extra={"event": "faucet_failed", "account": acc.account_rs, "error": str(exc)})
            return error_text(exc)
        self._faucet_sent.add(acc.account)
        return transaction_sent_template(resp, acc.account_rs, self.settings.faucet_amount_nqt)
