from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum


class Flow(str, Enum):
    IDLE = "idle"
    ADD = "add"
    DEL = "del"
    CALC = "calc"


@dataclass(frozen=True)
class InteractionState:
    flow: Flow = Flow.IDLE
    step: int = 0
    data: tuple = ()

    @property
    def idle(self) -> bool:
        return self.flow is Flow.IDLE


IDLE = InteractionState()


@dataclass
class Session:
    """Per-chat record. ``state`` is only read or written while ``lock`` is held."""

    chat_id: int
    state: InteractionState = IDLE
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def reset_state(self) -> None:
        self.state = IDLE

    def await_input(self, flow: Flow, step: int = 1, *data) -> None:
        self.state = InteractionState(flow=flow, step=step, data=tuple(data))


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}

    def acquire(self, chat_id: int) -> Session:
        # no await between lookup and insert, so concurrent tasks on one loop see the same Session
        session = self._sessions.get(chat_id)
        if session is None:
            session = Session(chat_id=chat_id)
            self._sessions[chat_id] = session
        return session

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._sessions
