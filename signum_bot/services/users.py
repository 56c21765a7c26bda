from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from signum_bot.db.models import TrackedAccount, User


class UserService:
    def __init__(self, db_factory, max_accounts: int) -> None:
        self.db_factory = db_factory
        self.max_accounts = max_accounts

    async def _get_or_create_user(self, session: AsyncSession, chat_id: int) -> User:
        q = await session.execute(
            select(User).options(selectinload(User.accounts)).where(User.telegram_chat_id == chat_id)
        )
        user = q.scalar_one_or_none()
        if user:
            user.last_seen_at = datetime.utcnow()
            return user
        user = User(telegram_chat_id=chat_id, accounts=[])
        session.add(user)
        await session.flush()
        return user

    async def ensure_user(self, chat_id: int) -> None:
        async with self.db_factory() as session:
            await self._get_or_create_user(session, chat_id)
            await session.commit()

    async def list_accounts(self, chat_id: int) -> list[TrackedAccount]:
        async with self.db_factory() as session:
            q = await session.execute(
                select(TrackedAccount)
                .join(User, User.id == TrackedAccount.user_id)
                .where(User.telegram_chat_id == chat_id)
                .order_by(TrackedAccount.id)
            )
            return list(q.scalars().all())

    async def get_account(self, chat_id: int, account: str) -> TrackedAccount | None:
        key = account.strip().upper()
        async with self.db_factory() as session:
            q = await session.execute(
                select(TrackedAccount)
                .join(User, User.id == TrackedAccount.user_id)
                .where(User.telegram_chat_id == chat_id)
                .where(or_(TrackedAccount.account_id == key, TrackedAccount.account_rs == key))
            )
            return q.scalar_one_or_none()

    async def add_account(
        self,
        chat_id: int,
        account_id: str,
        account_rs: str,
        balance_nqt: float,
        name: str | None = None,
    ) -> TrackedAccount:
        async with self.db_factory() as session:
            user = await self._get_or_create_user(session, chat_id)
            if any(a.account_id == account_id for a in user.accounts):
                raise RuntimeError(f"Account {account_rs} is already tracked")
            if len(user.accounts) >= self.max_accounts:
                raise RuntimeError(f"You can track at most {self.max_accounts} accounts")
            row = TrackedAccount(
                user_id=user.id,
                account_id=account_id,
                account_rs=account_rs.upper(),
                name=name or None,
                balance_nqt=balance_nqt,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row

    async def delete_account(self, chat_id: int, account: str) -> bool:
        key = account.strip().upper()
        async with self.db_factory() as session:
            user = await self._get_or_create_user(session, chat_id)
            result = await session.execute(
                delete(TrackedAccount)
                .where(TrackedAccount.user_id == user.id)
                .where(or_(TrackedAccount.account_id == key, TrackedAccount.account_rs == key))
            )
            await session.commit()
            return bool(result.rowcount)

    async def all_accounts(self) -> list[tuple[int, TrackedAccount]]:
        async with self.db_factory() as session:
            q = await session.execute(
                select(User.telegram_chat_id, TrackedAccount)
                .select_from(TrackedAccount)
                .join(User, User.id == TrackedAccount.user_id)
                .order_by(TrackedAccount.id)
            )
            return [(int(chat_id), acc) for chat_id, acc in q.all()]

    async def update_balance(self, row_id: int, balance_nqt: float) -> None:
        async with self.db_factory() as session:
            row = await session.get(TrackedAccount, row_id)
            if row is None:
                return
            row.balance_nqt = balance_nqt
            row.updated_at = datetime.utcnow()
            await session.commit()
