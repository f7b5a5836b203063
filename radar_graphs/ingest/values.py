"""Cell-level value parsing for telemetry files of unknown locale.

Numbers
  Field separators and decimal separators collide across locales ("1,5" is 1.5 in
  cs-CZ and two fields elsewhere), so every cell is tried three ways, in order:
  current locale, invariant (dot) form, then the same text with commas turned into dots.

Timestamps
  Explicit formats first (first match wins), then the locale's own day/month order,
  then pandas' invariant flexible parser.

Both parsers return ``None`` on failure; callers store NaN and move on.

The locale is process state owned by the host. The notebook viewer switches to the
user's numeric and date locale when it starts; plain library use sees whatever the
host set (the C locale unless someone called ``locale.setlocale``).
"""

from __future__ import annotations

import locale
import re
from datetime import datetime, timezone
from typing import Optional

import pandas as pd
from dateutil import parser as dateutil_parser


# Order matters: the first format that parses wins.
TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M:%S.%f",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S.%f",
)

_HAS_DIGIT = re.compile(r"\d")


def _try_float(s: str) -> Optional[float]:
    try:
        return float(s)
    except ValueError:
        return None


def parse_number(s: Optional[str]) -> Optional[float]:
    """Parse a numeric cell; returns None for blank or unparseable text."""
    if s is None:
        return None
    txt = str(s).strip()
    # float() and locale.atof() would read "1_5" as 15.
    if not txt or "_" in txt:
        return None

    try:
        return float(locale.atof(txt))
    except ValueError:
        pass

    v = _try_float(txt)
    if v is not None:
        return v

    return _try_float(txt.replace(",", "."))


def _locale_dayfirst() -> bool:
    """True when the current locale writes the day before the month."""
    try:
        d_fmt = locale.nl_langinfo(locale.D_FMT)
    except (AttributeError, ValueError):
        return False
    i_day = d_fmt.find("%d")
    i_mon = d_fmt.find("%m")
    return 0 <= i_day < i_mon


def _naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(s: Optional[str]) -> Optional[datetime]:
    """Parse a wall-clock cell; returns None when no parser accepts it.

    Plain numbers are never timestamps (a numeric time column must stay numeric).
    """
    if s is None:
        return None
    txt = str(s).strip()
    if not txt or not _HAS_DIGIT.search(txt):
        return None

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(txt, fmt)
        except ValueError:
            continue

    if parse_number(txt) is not None:
        return None

    try:
        return _naive(dateutil_parser.parse(txt, dayfirst=_locale_dayfirst()))
    except (ValueError, OverflowError):
        pass

    try:
        ts = pd.Timestamp(txt)
    except (ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return _naive(ts.to_pydatetime())
