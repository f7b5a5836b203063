"""Header-driven schema detection for radar telemetry files.

This module guesses, from header text alone, which column carries time (and in
which unit) and which columns are worth plotting as Y signals.

Matching rules
  Headers are compared after lower-casing and collapsing runs of whitespace,
  underscores and hyphens into one space; a key matches when it is a substring
  of the normalised header. Short keys ("t", "v", "ai") therefore match broadly.

Y selection
  radar_voltage / radar_adc columns, when present, exclude everything else.
  Otherwise the priority groups below are consulted in order and the first
  non-empty group wins; later groups are not looked at.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from radar_graphs.models.series import SchemaMap
from radar_graphs.ingest.values import parse_timestamp


TIME_KEYS = ("time", "timestamp", "t", "sample time")

RADAR_VOLTAGE_KEYS = ("radar voltage", "radar_voltage")
RADAR_ADC_KEYS = ("radar adc", "radar_adc")

RADAR_Y_TITLE = "Voltage/ADC"
TIME_TITLE = "Time [s]"
VALUE_TITLE = "Value"

_UNIT_SCALES = {
    "s": 1.0,
    "sec": 1.0,
    "second": 1.0,
    "seconds": 1.0,
    "ms": 1.0 / 1000.0,
    "millisecond": 1.0 / 1000.0,
    "milliseconds": 1.0 / 1000.0,
    "us": 1.0 / 1_000_000.0,
    "µs": 1.0 / 1_000_000.0,
    "microsecond": 1.0 / 1_000_000.0,
    "microseconds": 1.0 / 1_000_000.0,
}

_SEPARATORS = re.compile(r"[\s_\-]+")
_BRACKET_UNIT = re.compile(r"^(.*?)\s*\[(.+?)\]\s*$")
_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Header text helpers
# ---------------------------------------------------------------------------


def header_like(header: str, *keys: str) -> bool:
    """True if any key is a substring of the normalised header."""
    h = _SEPARATORS.sub(" ", (header or "").strip().lower())
    return any(k.strip().lower() in h for k in keys)


def is_radar_voltage_header(header: str) -> bool:
    return header_like(header, *RADAR_VOLTAGE_KEYS)


def is_radar_adc_header(header: str) -> bool:
    return header_like(header, *RADAR_ADC_KEYS)


def is_radar_header(header: str) -> bool:
    return is_radar_voltage_header(header) or is_radar_adc_header(header)


def clean_header_for_legend(header: str) -> str:
    return _WHITESPACE.sub(" ", (header or "").strip())


def split_header_unit(header: str) -> Tuple[str, Optional[str]]:
    """
    Split a header into (base name, unit).

    "Voltage [V]" -> ("Voltage", "V"); "time_ms" -> ("time", "ms"); "speed" -> ("speed", None).
    """
    h = (header or "").strip()
    m = _BRACKET_UNIT.match(h)
    if m:
        return m.group(1).strip(), m.group(2).strip()

    lower = h.lower()
    for suffix, unit in (("_ms", "ms"), ("_us", "us"), ("_s", "s")):
        if lower.endswith(suffix):
            return h[: -len(suffix)], unit
    return h, None


def time_scale_for_unit(unit: Optional[str], raw_header: str) -> float:
    """Scale that converts raw time values to seconds."""
    scale = _UNIT_SCALES.get((unit or "").lower())
    if scale is not None:
        return scale
    lower = (raw_header or "").lower()
    if "ms" in lower:
        return 1.0 / 1000.0
    if "us" in lower or "µs" in lower:
        return 1.0 / 1_000_000.0
    return 1.0


# ---------------------------------------------------------------------------
# Y priority rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class YRule:
    """One priority group of Y header keys. Lower rank = more relevant."""
    label: str
    rank: int
    keys: Tuple[str, ...]

    def matches(self, header: str) -> bool:
        return header_like(header, *self.keys)


# Candidate selection: first group with any match wins.
Y_PRIORITY_GROUPS: Tuple[YRule, ...] = (
    YRule("voltage", 0, ("voltage", "volt", "v", "analog in", "analog input", "ai")),
    YRule("speed", 1, ("speed", "velocity")),
    YRule("range", 2, ("range", "distance")),
    YRule("signal", 3, ("amplitude", "snr", "signal", "strength")),
)

# Ordering of the selected candidates.
Y_SCORE_RULES: Tuple[YRule, ...] = (
    YRule("voltage", 0, ("voltage", "volt", "v", "analog")),
    YRule("speed", 1, ("speed", "velocity")),
    YRule("range", 2, ("range", "distance")),
    YRule("signal", 3, ("amplitude", "snr", "signal")),
)
OTHER_RANK = 4

VOLTAGE_TITLE_KEYS = ("voltage", "volt", "v", "analog")


def y_score(header: str) -> int:
    for rule in Y_SCORE_RULES:
        if rule.matches(header):
            return rule.rank
    return OTHER_RANK


def _header_at(headers: Sequence[str], i: int) -> str:
    return headers[i] if 0 <= i < len(headers) else ""


def select_y_group(
    headers: Sequence[str],
    *,
    exclude: Optional[int] = None,
    rules: Sequence[YRule] = Y_PRIORITY_GROUPS,
) -> List[int]:
    """Columns matched by the first rule that matches anything (header order kept)."""
    for rule in rules:
        hits = [i for i, h in enumerate(headers) if i != exclude and rule.matches(h)]
        if hits:
            return hits
    return []


def prioritize_y(headers: Sequence[str], candidates: Sequence[int], cap: int = 12) -> List[int]:
    """Stable re-sort of candidates by y_score, capped."""
    ordered = sorted(candidates, key=lambda i: y_score(_header_at(headers, i)))
    return ordered[: max(0, int(cap))]


def best_y_title(headers: Sequence[str], y_indices: Sequence[int]) -> Tuple[str, Optional[str]]:
    """
    Axis title for the chosen Y columns.

    The first header that reads as a voltage forces "Voltage" (unit "V" if none seen);
    otherwise the first candidate's base name plus its bracketed unit, else "Value".
    """
    chosen: Optional[str] = None
    unit: Optional[str] = None
    for yi in y_indices:
        if yi >= len(headers):
            continue
        base, u = split_header_unit(headers[yi])
        if chosen is None:
            chosen = base.strip()
        if unit is None and u is not None:
            unit = u
        if header_like(base, *VOLTAGE_TITLE_KEYS):
            chosen = "Voltage"
            if u is None and unit is None:
                unit = "V"
            break

    if not chosen or not chosen.strip():
        chosen = VALUE_TITLE
    title = f"{chosen} [{unit}]" if unit is not None else chosen
    return title, unit


# ---------------------------------------------------------------------------
# Schema detection
# ---------------------------------------------------------------------------


def detect_schema(headers: Sequence[str]) -> SchemaMap:
    """
    Locate the time column and the first matching Y priority group.

    A map with ``x_index=None`` means no time-like header exists; the caller
    then uses the positional fallback.
    """
    smap = SchemaMap()

    for i, h in enumerate(headers):
        base, unit = split_header_unit(h)
        if header_like(base, *TIME_KEYS):
            smap.x_index = i
            smap.time_scale_to_seconds = time_scale_for_unit(unit, h)
            smap.x_title = TIME_TITLE
            break

    smap.y_indices = select_y_group(headers, exclude=smap.x_index)
    return smap


# ---------------------------------------------------------------------------
# X column classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateTimeLikely:
    """The X column holds wall-clock timestamps."""
    n_ok: int
    n_probed: int


@dataclass(frozen=True)
class Numeric:
    """The X column holds plain numbers."""
    n_ok: int
    n_probed: int


XColumnKind = Union[DateTimeLikely, Numeric]


def _cell(row: Sequence[str], index: int) -> Optional[str]:
    return row[index] if 0 <= index < len(row) else None


def classify_x_column(
    rows: Sequence[Sequence[str]],
    start: int,
    index: int,
    *,
    probe_rows: int = 20,
    parse: Callable[[Optional[str]], Optional[datetime]] = parse_timestamp,
) -> XColumnKind:
    """DateTimeLikely if at least half of the first ``probe_rows`` data cells parse as timestamps."""
    total = min(int(probe_rows), max(0, len(rows) - start))
    if total == 0:
        return Numeric(n_ok=0, n_probed=0)
    ok = sum(1 for r in rows[start:start + total] if parse(_cell(r, index)) is not None)
    if ok >= max(1, total // 2):
        return DateTimeLikely(n_ok=ok, n_probed=total)
    return Numeric(n_ok=ok, n_probed=total)


def elapsed_seconds(rows: Sequence[Sequence[str]], start: int, index: int) -> np.ndarray:
    """Seconds since the first parseable timestamp; NaN where a cell does not parse."""
    out = np.full(max(0, len(rows) - start), np.nan, dtype=np.float64)
    t0: Optional[datetime] = None
    for k, r in enumerate(rows[start:]):
        dt = parse_timestamp(_cell(r, index))
        if dt is None:
            continue
        if t0 is None:
            t0 = dt
        out[k] = (dt - t0).total_seconds()
    return out
