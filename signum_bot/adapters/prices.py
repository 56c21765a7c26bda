from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from signum_bot.core.errors import ConfigurationError, UpstreamError
from signum_bot.core.fmt import fmt_pct, fmt_usd
from signum_bot.core.http import ResilientHTTPClient

logger = logging.getLogger(__name__)

TRACKED_SYMBOLS = ("SIGNA", "BTC")


@dataclass
class Quote:
    symbol: str
    price_usd: float
    change_24h: float
    change_7d: float
    updated_at: datetime


class PriceAdapter:
    def __init__(self, http: ResilientHTTPClient, base_url: str, api_key: str) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.quotes: dict[str, Quote] = {}

    async def refresh(self) -> int:
        if not self.api_key:
            raise ConfigurationError("CMC_API_KEY is not set")
        data = await self.http.get_json(
            f"{self.base_url}/cryptocurrency/quotes/latest",
            params={"symbol": ",".join(TRACKED_SYMBOLS), "convert": "USD"},
            headers={"X-CMC_PRO_API_KEY": self.api_key, "Accept": "application/json"},
        )
        status = data.get("status") or {}
        if status.get("error_code"):
            raise UpstreamError(f"CMC error {status.get('error_code')}: {status.get('error_message')}")

        now = datetime.now(timezone.utc)
        updated = 0
        for symbol in TRACKED_SYMBOLS:
            row = (data.get("data") or {}).get(symbol)
            if isinstance(row, list):
                row = row[0] if row else None
            if not isinstance(row, dict):
                continue
            usd = (row.get("quote") or {}).get("USD") or {}
            try:
                price = float(usd["price"])
            except (KeyError, TypeError, ValueError):
                continue
            self.quotes[symbol] = Quote(
                symbol=symbol,
                price_usd=price,
                change_24h=float(usd.get("percent_change_24h") or 0.0),
                change_7d=float(usd.get("percent_change_7d") or 0.0),
                updated_at=now,
            )
            updated += 1
        return updated

    def signa_in_btc(self) -> float | None:
        signa = self.quotes.get("SIGNA")
        btc = self.quotes.get("BTC")
        if not signa or not btc or btc.price_usd <= 0:
            return None
        return signa.price_usd / btc.price_usd

    def actual_prices_text(self) -> str:
        signa = self.quotes.get("SIGNA")
        if not signa:
            return "💵 Prices are not available yet, try again in a few minutes"
        lines = [
            "💵 <b>Actual prices</b>",
            f"SIGNA: <b>{fmt_usd(signa.price_usd)}</b> ({fmt_pct(signa.change_24h)} 24h, {fmt_pct(signa.change_7d)} 7d)",
        ]
        in_btc = self.signa_in_btc()
        if in_btc is not None:
            lines.append(f"SIGNA/BTC: <b>{in_btc * 1e8:.0f} sat</b>")
        btc = self.quotes.get("BTC")
        if btc:
            lines.append(f"BTC: <b>{fmt_usd(btc.price_usd)}</b> ({fmt_pct(btc.change_24h)} 24h)")
        lines.append(f"<i>Updated {signa.updated_at.strftime('%H:%M UTC')}</i>")
        return "\n".join(lines)
