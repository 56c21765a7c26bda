from __future__ import annotations

import pytest

from signum_bot.core.fmt import fmt_nqt, fmt_signa, nqt_to_signa, safe_html


@pytest.mark.parametrize(
    "value,expected",
    [(12.9, "12"), (5.4, "5"), (0.99, "0"), (-3.7, "-3"), (735000.0, "735000"), (1e10, "10000000000")],
)
def test_fmt_nqt_truncates_toward_zero(value: float, expected: str) -> None:
    assert fmt_nqt(value) == expected


def test_fmt_signa() -> None:
    assert fmt_signa(nqt_to_signa(123_456_789_000)) == "1,234.57"
    assert fmt_signa(2.5) == "2.5"
    assert fmt_signa(0.00000001) == "0.00000001"
    assert fmt_signa(0) == "0"


def test_safe_html() -> None:
    assert safe_html("<b>&</b>") == "&lt;b&gt;&amp;&lt;/b&gt;"
