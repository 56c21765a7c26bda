from __future__ import annotations

import math

ONE_SIGNA_NQT = 100_000_000


def fmt_nqt(v: float) -> str:
    """Integer-valued NQT string for the wire. Fractions are truncated toward zero, never rounded."""
    return str(math.trunc(v))


def nqt_to_signa(v: float) -> float:
    return float(v) / ONE_SIGNA_NQT


def fmt_signa(v: float) -> str:
    """Human-readable SIGNA amount: 1,234.56 for big balances, more decimals for dust."""
    if v >= 1_000:
        return f"{v:,.2f}"
    if v >= 1:
        return f"{v:.4f}".rstrip("0").rstrip(".")
    if v == 0:
        return "0"
    return f"{v:.8f}".rstrip("0").rstrip(".")


def fmt_usd(v: float) -> str:
    if v >= 1_000:
        return f"${v:,.2f}"
    if v >= 1:
        return f"${v:.3f}"
    if v >= 0.01:
        return f"${v:.4f}"
    return f"${v:.6f}"


def fmt_pct(v: float) -> str:
    sign = "+" if v >= 0 else ""
    return f"{sign}{v:.2f}%"


def safe_html(text: str) -> str:
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
