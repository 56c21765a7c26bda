from __future__ import annotations

import asyncio
import logging

from signum_bot.adapters.signum.client import SignumApiClient
from signum_bot.bot.messages import NotifierMessage
from signum_bot.core.errors import SignumApiError, UpstreamError
from signum_bot.core.fmt import fmt_signa, nqt_to_signa
from signum_bot.services.users import UserService

logger = logging.getLogger(__name__)


class AccountNotifier:
    """Polls tracked accounts and queues a message for every balance change."""

    def __init__(self, users: UserService, api: SignumApiClient, queue: asyncio.Queue[NotifierMessage]) -> None:
        self.users = users
        self.api = api
        self.queue = queue

    async def check_balances(self) -> int:
        rows = await self.users.all_accounts()
        balances: dict[str, float] = {}
        sent = 0
        for chat_id, row in rows:
            if row.account_id not in balances:
                try:
                    acc = await self.api.get_account(row.account_id)
                except (UpstreamError, SignumApiError) as exc:
                    logger.warning(
                        "notifier_account_failed",
                        extra={"event": "notifier_account_failed", "account": row.account_rs, "error": str(exc)},
                    )
                    continue
                balances[row.account_id] = acc.balance_nqt
            balance = balances[row.account_id]
            if balance == row.balance_nqt:
                continue

            await self.users.update_balance(row.id, balance)
            delta = nqt_to_signa(balance - row.balance_nqt)
            sign = "+" if delta > 0 else "-"
            text = (
                f"💸 <b>{row.account_rs}</b> balance changed: {sign}{fmt_signa(abs(delta))} SIGNA\n"
                f"Now: <b>{fmt_signa(nqt_to_signa(balance))} SIGNA</b>"
            )
            await self.queue.put(NotifierMessage(chat_id=chat_id, text=text))
            sent += 1
        return sent
