from __future__ import annotations

import math
from datetime import UTC, datetime
from decimal import Decimal

_SATS_PER_BTC = 100_000_000
_MAX_INT = 2**63 - 1
# 9999-12-31T23:59:59Z, the last second datetime can represent
_MAX_TIMESTAMP = 253_402_300_799


def _saturate(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _MAX_INT:
        return _MAX_INT
    return int(value)


def format_number(num: int) -> str:
    """Group digits in threes with commas: 1000000 -> "1,000,000"."""
    return f"{max(0, int(num)):,}"


def format_decimal(value: float) -> str:
    """Shortest exact decimal, no exponent and no trailing zeros: 1.0 -> "1", 1e-07 -> "0.0000001"."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_gh_to_th(amount: float) -> str:
    return f"{format_number(_saturate(amount / 1000.0))} Th/s"


def format_sats(amount: int) -> str:
    return f"{format_number(amount)} SAT"


def format_btc_to_sats(amount: float) -> str:
    sats = amount * _SATS_PER_BTC
    if math.isfinite(sats):
        # 1e-8 BTC must render as 1 SAT despite binary float error
        sats = round(sats, 6)
    return format_sats(_saturate(sats))


def timestamp_to_utc_datetime(timestamp: float) -> datetime:
    if not math.isfinite(timestamp):
        timestamp = 0
    clamped = min(max(int(timestamp), 0), _MAX_TIMESTAMP)
    return datetime.fromtimestamp(clamped, UTC)


def format_date(timestamp: float, fmt: str) -> str:
    return timestamp_to_utc_datetime(timestamp).strftime(fmt)
