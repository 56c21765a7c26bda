from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from signum_bot.adapters.signum.models import Account
from signum_bot.core.errors import UpstreamError
from signum_bot.services.notifier import AccountNotifier


class _DummyUsers:
    def __init__(self, rows) -> None:
        self.rows = rows
        self.updated: list[tuple[int, float]] = []

    async def all_accounts(self):
        return self.rows

    async def update_balance(self, row_id: int, balance_nqt: float) -> None:
        self.updated.append((row_id, balance_nqt))


class _DummyApi:
    def __init__(self, balances: dict[str, float], failing: set[str] | None = None) -> None:
        self.balances = balances
        self.failing = failing or set()
        self.calls: list[str] = []

    async def get_account(self, account: str) -> Account:
        self.calls.append(account)
        if account in self.failing:
            raise UpstreamError("all hosts failed")
        return Account(account=account, account_rs=f"S-{account}", balance_nqt=self.balances[account])


def _row(row_id: int, account_id: str, balance: float):
    return SimpleNamespace(id=row_id, account_id=account_id, account_rs=f"S-{account_id}", balance_nqt=balance)


@pytest.mark.asyncio
async def test_queues_message_only_for_changed_balances() -> None:
    users = _DummyUsers([(10, _row(1, "A", 100_000_000)), (11, _row(2, "B", 5))])
    api = _DummyApi({"A": 350_000_000, "B": 5})
    queue: asyncio.Queue = asyncio.Queue()

    sent = await AccountNotifier(users, api, queue).check_balances()  # type: ignore[arg-type]

    assert sent == 1
    assert users.updated == [(1, 350_000_000)]
    msg = queue.get_nowait()
    assert msg.chat_id == 10
    assert "+2.5 SIGNA" in msg.text
    assert queue.empty()


@pytest.mark.asyncio
async def test_shared_account_is_fetched_once_and_failures_skipped() -> None:
    users = _DummyUsers([(10, _row(1, "A", 0)), (11, _row(2, "A", 0)), (12, _row(3, "C", 0))])
    api = _DummyApi({"A": 100_000_000}, failing={"C"})
    queue: asyncio.Queue = asyncio.Queue()

    sent = await AccountNotifier(users, api, queue).check_balances()  # type: ignore[arg-type]

    assert sent == 2
    assert api.calls == ["A", "C"]
    assert {queue.get_nowait().chat_id, queue.get_nowait().chat_id} == {10, 11}
