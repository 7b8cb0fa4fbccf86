"""Pure helpers shared by manual entry and CSV import: annual value, currency, field parsing."""
import math
import re
from datetime import date, datetime

from pydantic import AnyUrl, TypeAdapter, ValidationError

from bidtracker.models.enums import TcvTermBasis

_URL_ADAPTER = TypeAdapter(AnyUrl)
_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")
_DATE_FORMAT = "%Y-%m-%d"


def compute_annual_value(
    tcv_gbp: int,
    initial_term_months: int,
    extension_term_months: int | None,
    tcv_term_basis: TcvTermBasis | str,
) -> int | None:
    """
    Annualise a total contract value over the term selected by the TCV basis.
    Returns None when the effective term is not positive or the result is not finite.
    """
    extension = extension_term_months or 0
    if TcvTermBasis(tcv_term_basis) is TcvTermBasis.initial_plus_extension:
        total_months = initial_term_months + extension
    else:
        total_months = initial_term_months
    if total_months <= 0:
        return None
    try:
        value = tcv_gbp * 12 / total_months
    except OverflowError:
        return None
    if not math.isfinite(value):
        return None
    # Half-up rounding, not Python's round-half-even.
    return math.floor(value + 0.5)


def format_currency_gbp(value: int | float | None) -> str:
    if value is None or not math.isfinite(value):
        return "—"
    sign = "-" if value < 0 else ""
    return f"{sign}£{abs(round(value)):,}"


def is_valid_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def parse_whole_number(raw: str | int | None) -> int | None:
    """
    Parse an integer cell. Blank -> None. Raises ValueError when the text is not a whole number
    ("12", "+12" and "12.0" are accepted; "12.5", "abc", "inf" are not).
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"not a whole number: {raw!r}")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not math.isfinite(number) or not number.is_integer():
            raise ValueError(f"not a whole number: {text!r}") from None
        return int(number)


def parse_date(raw: str | None) -> date | None:
    """Strict YYYY-MM-DD parse. Blank -> None, malformed -> ValueError."""
    text = (raw or "").strip()
    if not text:
        return None
    return datetime.strptime(text, _DATE_FORMAT).date()


def parse_loose_date(raw: str | None) -> date | None:
    """Accept an ISO date or ISO datetime; anything else is treated as absent."""
    text = (raw or "").strip()
    if not text:
        return None
    try:
        return parse_date(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_time(raw: str | None) -> str | None:
    """Validate a 24-hour HH:MM string. Blank -> None, malformed -> ValueError."""
    text = (raw or "").strip()
    if not text:
        return None
    match = _TIME_PATTERN.match(text)
    if not match:
        raise ValueError("Submission time must be HH:MM.")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError("Submission time must be a valid 24-hour time.")
    return text


def format_date(value: date | None) -> str:
    return value.isoformat() if value else ""
