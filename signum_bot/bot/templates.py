from __future__ import annotations

from signum_bot.adapters.signum.models import Account, TransactionResponse
from signum_bot.core.config import AUTHOR_TEXT, INSTRUCTION_TEXT, NAME, VERSION
from signum_bot.core.fmt import fmt_signa, nqt_to_signa, safe_html
from signum_bot.services.calculator import CalcResult

UNKNOWN_COMMAND = "🚫 Unknown command"


def welcome_text() -> str:
    return f"Welcome to {NAME}\n{INSTRUCTION_TEXT}"


def info_text() -> str:
    return f"{NAME} {VERSION}\n{INSTRUCTION_TEXT}{AUTHOR_TEXT}"


def error_text(exc: Exception) -> str:
    return f"🚫 Error: {safe_html(str(exc))}"


def account_template(acc: Account, tracked: bool) -> str:
    title = safe_html(acc.name) if acc.name else acc.account_rs
    lines = [
        f"💳 <b>{title}</b>",
        f"<code>{acc.account_rs}</code> ({acc.account})",
        "",
        f"Balance: <b>{fmt_signa(nqt_to_signa(acc.balance_nqt))} SIGNA</b>",
    ]
    if acc.unconfirmed_balance_nqt != acc.balance_nqt:
        lines.append(f"Unconfirmed: {fmt_signa(nqt_to_signa(acc.unconfirmed_balance_nqt))} SIGNA")
    if acc.committed_balance_nqt:
        lines.append(f"Committed: {fmt_signa(nqt_to_signa(acc.committed_balance_nqt))} SIGNA")
    if not acc.public_key:
        lines.append("\n<i>Account has no public key yet</i>")
    if tracked:
        lines.append("\n👁 Tracked: you get a message when the balance changes")
    return "\n".join(lines)


def calc_template(result: CalcResult) -> str:
    source = "live network data" if result.live else "default network data"
    return "\n".join(
        [
            f"🧮 <b>{result.tib:g} TiB</b> with <b>{fmt_signa(result.commitment)} SIGNA</b> commitment",
            f"Network: {result.network_tib:,.0f} TiB, capacity factor x{result.factor:.2f}",
            "",
            f"Day: <b>{fmt_signa(result.per_day)} SIGNA</b>",
            f"Month: <b>{fmt_signa(result.per_month)} SIGNA</b>",
            f"Year: <b>{fmt_signa(result.per_year)} SIGNA</b>",
            f"Year with reinvesting: <b>{fmt_signa(result.per_year_reinvest)} SIGNA</b>",
            f"\n<i>Estimate from {source}</i>",
        ]
    )


def transaction_sent_template(resp: TransactionResponse, recipient_rs: str, amount_nqt: float) -> str:
    return (
        f"✅ Sent {fmt_signa(nqt_to_signa(amount_nqt))} SIGNA to <code>{recipient_rs}</code>\n"
        f"Transaction: <code>{resp.transaction}</code>"
    )
