from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from portfolio_dashboard.config import settings

SENTINEL = "—"


def display_zone() -> ZoneInfo:
    return ZoneInfo(settings.display_timezone)


def parse_timestamp(value: str) -> datetime:
    # Naive timestamps are read as UTC.
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def alignment_key(value: str) -> datetime:
    return parse_timestamp(value).astimezone(UTC).replace(microsecond=0)


def format_short_date(moment: datetime) -> str:
    local = moment.astimezone(display_zone())
    return f"{local:%b} {local.day}"


def format_long_timestamp(moment: datetime) -> str:
    local = moment.astimezone(display_zone())
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {local.year}, {hour}:{local:%M} {local:%p} {local.tzname()}"


def format_currency(amount: float | None, signed: bool = False) -> str:
    if amount is None:
        return SENTINEL
    sign = "-" if amount < 0 else ("+" if signed else "")
    return f"{sign}${abs(amount):,.2f}"


def format_percent(pct: float | None, signed: bool = True) -> str:
    if pct is None:
        return SENTINEL
    return f"{pct:+.2f}%" if signed else f"{pct:.2f}%"


def format_ratio(value: float | None) -> str:
    if value is None:
        return SENTINEL
    return f"{value:.2f}"
