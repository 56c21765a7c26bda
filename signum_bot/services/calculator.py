from __future__ import annotations

import logging
from dataclasses import dataclass

from signum_bot.adapters.signum.client import SignumApiClient
from signum_bot.core.errors import SignumApiError, UpstreamError
from signum_bot.core.fmt import nqt_to_signa

logger = logging.getLogger(__name__)

BLOCKS_PER_DAY = 360
GENESIS_BASE_TARGET = 18325193796
CAPACITY_FACTOR = 1.0995
# PoC+ scaling: commitment ratio r gives r ** 0.4515 effective capacity, capped to [1/8, 8]
COMMITMENT_EXPONENT = 0.4515449935
MIN_FACTOR, MAX_FACTOR = 0.125, 8.0


@dataclass
class NetworkStats:
    base_target: float
    avg_commit: float  # SIGNA per TiB
    block_reward: float
    live: bool


@dataclass
class CalcResult:
    tib: float
    commitment: float
    network_tib: float
    factor: float
    per_day: float
    per_month: float
    per_year: float
    per_year_reinvest: float
    live: bool


def network_capacity_tib(base_target: float) -> float:
    return GENESIS_BASE_TARGET / base_target / CAPACITY_FACTOR


def commitment_factor(tib: float, commitment: float, avg_commit: float) -> float:
    if tib <= 0 or avg_commit <= 0:
        return MIN_FACTOR
    ratio = (commitment / tib) / avg_commit
    if ratio <= 0:
        return MIN_FACTOR
    return max(MIN_FACTOR, min(MAX_FACTOR, ratio**COMMITMENT_EXPONENT))


def daily_reward(tib: float, commitment: float, stats: NetworkStats) -> tuple[float, float]:
    network = network_capacity_tib(stats.base_target)
    factor = commitment_factor(tib, commitment, stats.avg_commit)
    share = min(1.0, tib * factor / network) if network > 0 else 0.0
    return BLOCKS_PER_DAY * stats.block_reward * share, factor


class CalculatorService:
    def __init__(
        self,
        api: SignumApiClient,
        default_base_target: float,
        default_avg_commit: float,
        default_block_reward: float,
        reinvest_every_days: int,
    ) -> None:
        self.api = api
        self.default_base_target = default_base_target
        self.default_avg_commit = default_avg_commit
        self.default_block_reward = default_block_reward
        self.reinvest_every_days = max(1, reinvest_every_days)

    async def network_stats(self) -> NetworkStats:
        try:
            info = await self.api.get_mining_info()
        except (UpstreamError, SignumApiError) as exc:
            logger.warning("mining_info_unavailable", extra={"event": "mining_info_unavailable", "error": str(exc)})
            info = None
        if info is None or info.base_target <= 0:
            return NetworkStats(self.default_base_target, self.default_avg_commit, self.default_block_reward, live=False)
        avg_commit = nqt_to_signa(info.average_commitment_nqt) or self.default_avg_commit
        return NetworkStats(
            base_target=info.base_target,
            avg_commit=avg_commit,
            block_reward=info.last_block_reward or self.default_block_reward,
            live=True,
        )

    def calculate(self, tib: float, commitment: float, stats: NetworkStats) -> CalcResult:
        per_day, factor = daily_reward(tib, commitment, stats)

        compounded = commitment
        earned = 0.0
        day = 0
        while day < 365:
            days = min(self.reinvest_every_days, 365 - day)
            reward, _ = daily_reward(tib, compounded, stats)
            earned += reward * days
            compounded += reward * days
            day += days

        return CalcResult(
            tib=tib,
            commitment=commitment,
            network_tib=network_capacity_tib(stats.base_target),
            factor=factor,
            per_day=per_day,
            per_month=per_day * 30,
            per_year=per_day * 365,
            per_year_reinvest=earned,
            live=stats.live,
        )
