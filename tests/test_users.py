from __future__ import annotations

import pytest

from signum_bot.db.session import build_engine, build_session_factory, init_models
from signum_bot.services.users import UserService


async def _service(max_accounts: int = 2) -> UserService:
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)
    return UserService(build_session_factory(engine), max_accounts=max_accounts)


@pytest.mark.asyncio
async def test_add_list_delete_accounts() -> None:
    users = await _service()
    await users.ensure_user(10)
    assert await users.list_accounts(10) == []

    row = await users.add_account(10, "111", "s-aaaa-bbbb-cccc-ddddd", 5.0)
    assert row.account_rs == "S-AAAA-BBBB-CCCC-DDDDD"
    assert [a.account_id for a in await users.list_accounts(10)] == ["111"]
    assert await users.get_account(10, "s-aaaa-bbbb-cccc-ddddd") is not None
    assert await users.get_account(11, "111") is None

    assert await users.delete_account(10, "S-AAAA-BBBB-CCCC-DDDDD") is True
    assert await users.delete_account(10, "111") is False
    assert await users.list_accounts(10) == []


@pytest.mark.asyncio
async def test_duplicate_and_limit_are_rejected() -> None:
    users = await _service(max_accounts=2)
    await users.add_account(10, "111", "S-AAAA-BBBB-CCCC-DDDDD", 0)
    with pytest.raises(RuntimeError, match="already tracked"):
        await users.add_account(10, "111", "S-AAAA-BBBB-CCCC-DDDDD", 0)
    await users.add_account(10, "222", "S-EEEE-FFFF-GGGG-HHHHH", 0)
    with pytest.raises(RuntimeError, match="at most 2"):
        await users.add_account(10, "333", "S-JJJJ-KKKK-LLLL-MMMMM", 0)
    # the limit is per chat
    await users.add_account(11, "333", "S-JJJJ-KKKK-LLLL-MMMMM", 0)


@pytest.mark.asyncio
async def test_all_accounts_and_update_balance() -> None:
    users = await _service()
    first = await users.add_account(10, "111", "S-AAAA-BBBB-CCCC-DDDDD", 1.0)
    await users.add_account(11, "111", "S-AAAA-BBBB-CCCC-DDDDD", 1.0)

    rows = await users.all_accounts()
    assert [(chat_id, row.account_id) for chat_id, row in rows] == [(10, "111"), (11, "111")]

    await users.update_balance(first.id, 9.0)
    rows = await users.all_accounts()
    assert rows[0][1].balance_nqt == 9.0
    assert rows[1][1].balance_nqt == 1.0
