"""Placeholder interpolation for request paths and bodies.

Placeholders look like ``{$name}`` or ``{$name|options}``. Supported names:

- ``currentTimestamp``: Unix time in milliseconds
- ``currentDate``: today's date, optionally shifted, e.g.
  ``{$currentDate|days+1,months-2,format=%d/%m/%Y}``
- ``range``: random integer, e.g. ``{$range|min=1,max=10}``
- ``random``: random element, e.g. ``{$random|foo,bar}``

Every occurrence is interpolated on its own, so two ``{$random|a,b}`` tokens
in the same string may resolve to different values. Tokens that cannot be
interpolated are left untouched.
"""

import calendar
import random
import re
import time
from collections.abc import Callable
from datetime import date, timedelta

from preheat.core.logging import get_logger


logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\$(?P<name>[A-Za-z]+)(?:\|(?P<options>[^{}]*))?\}")
DATE_OFFSET_PATTERN = re.compile(r"^(?P<unit>days|months|years)(?P<amount>[+-]\d+)$")
DEFAULT_DATE_FORMAT = "%Y-%m-%d"

_rng = random.SystemRandom()


class PlaceholderError(ValueError):
    """Raised internally when a placeholder has invalid options."""


def _current_timestamp(options: str | None) -> str:
    return str(time.time_ns() // 1_000_000)


def _shift_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def _current_date(options: str | None) -> str:
    day = date.today()
    fmt = DEFAULT_DATE_FORMAT
    for option in _split_options(options):
        if option.startswith("format="):
            fmt = option[len("format=") :]
            continue
        match = DATE_OFFSET_PATTERN.match(option)
        if not match:
            raise PlaceholderError(f"invalid currentDate option: {option}")
        amount = int(match.group("amount"))
        unit = match.group("unit")
        if unit == "days":
            day += timedelta(days=amount)
        elif unit == "months":
            day = _shift_months(day, amount)
        else:
            day = _shift_months(day, amount * 12)
    return day.strftime(fmt)


def _range(options: str | None) -> str:
    bounds: dict[str, int] = {}
    for option in _split_options(options):
        key, sep, value = option.partition("=")
        if not sep or key not in ("min", "max"):
            raise PlaceholderError(f"invalid range option: {option}")
        try:
            bounds[key] = int(value)
        except ValueError as e:
            raise PlaceholderError(f"invalid range bound: {option}") from e

    if "min" not in bounds or "max" not in bounds:
        raise PlaceholderError("range requires both min and max")
    if bounds["min"] > bounds["max"]:
        raise PlaceholderError("range min is greater than max")
    return str(_rng.randint(bounds["min"], bounds["max"]))


def _random_element(options: str | None) -> str:
    choices = _split_options(options)
    if not choices:
        raise PlaceholderError("random requires at least one value")
    return _rng.choice(choices)


def _split_options(options: str | None) -> list[str]:
    if not options:
        return []
    return [option.strip() for option in options.split(",") if option.strip()]


PLACEHOLDERS: dict[str, Callable[[str | None], str]] = {
    "currentTimestamp": _current_timestamp,
    "currentDate": _current_date,
    "range": _range,
    "random": _random_element,
}


def _interpolate_match(match: re.Match[str]) -> str:
    token = match.group(0)
    name = match.group("name")
    handler = PLACEHOLDERS.get(name)
    if handler is None:
        logger.warning(
            "placeholder_not_interpolated", placeholder=token, reason="unknown"
        )
        return token

    try:
        return handler(match.group("options"))
    except PlaceholderError as e:
        logger.warning("placeholder_not_interpolated", placeholder=token, reason=str(e))
        return token


def interpolate_placeholders(text: str) -> str:
    """Replace every placeholder in ``text`` with a freshly generated value."""
    return PLACEHOLDER_PATTERN.sub(_interpolate_match, text)
