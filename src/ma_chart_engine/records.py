"""
Record normalization: raw chart rows -> canonical ChartEntry.

Raw rows come from scraped NDJSON/CSV dumps where malformed rows are common, so
rejection is a silent skip carrying a SkipReason, never an exception. Callers
that only want the good rows use `normalize_records`; the dataset builder uses
`normalize_records_with_report` to log aggregate skip counts.

Week indices are NOT assigned here: every entry leaves with week_index=-1 and
is resolved by WeekIndex once the full date set is known.
"""
from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from shared.config.constants import (
    CHART_START_DATE,
    IGNORED_ORIGIN_CODES,
    RANK_MAX_HOT100,
    RANK_MIN,
    UNKNOWN_LABEL,
)

__all__ = [
    "ChartEntry",
    "NormalizeOptions",
    "NormalizeResult",
    "SkipReason",
    "identity_key",
    "normalize_origins",
    "normalize_record",
    "normalize_records",
    "normalize_records_with_report",
    "parse_chart_date",
    "parse_rank",
]

DATE_KEYS = ("date", "chart_date", "chart_week")
RANK_KEYS = ("rank", "peak-rank", "peak_rank", "current_week")
NAME_KEYS = ("name", "track_name", "title", "song")
ARTIST_KEYS = ("artists", "artist", "performer")
GENRE_KEYS = ("genre", "track_genre")
ORIGIN_KEYS = ("country", "origin", "origins")
TRACK_ID_KEYS = ("id", "track_id", "trackId", "spotify_id")

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y")


class SkipReason(str, Enum):
    NOT_A_RECORD = "not_a_record"
    MISSING_DATE = "missing_date"
    INVALID_DATE = "invalid_date"
    BEFORE_START = "before_start"
    INVALID_RANK = "invalid_rank"
    RANK_OUT_OF_RANGE = "rank_out_of_range"
    MISSING_IDENTITY = "missing_identity"


@dataclass(frozen=True)
class ChartEntry:
    date: date
    date_string: str
    rank: int
    track_id: str
    name: str
    artists: Tuple[str, ...]
    genre: str
    origins: Tuple[str, ...]
    week_index: int = -1

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def is_collaboration(self) -> bool:
        return len(self.origins) >= 2

    @property
    def track_key(self) -> str:
        return identity_key(self.name, self.artists)


@dataclass(frozen=True)
class NormalizeOptions:
    start_date: Optional[date] = date.fromisoformat(CHART_START_DATE)
    max_rank: int = RANK_MAX_HOT100
    require_identity: bool = False
    ignored_codes: frozenset = field(default=IGNORED_ORIGIN_CODES)


@dataclass(frozen=True)
class NormalizeResult:
    entry: Optional[ChartEntry] = None
    skip: Optional[SkipReason] = None

    @property
    def ok(self) -> bool:
        return self.entry is not None


def identity_key(name: str, artists: Sequence[str]) -> str:
    return f"{', '.join(artists)}|||{name}"


def _first(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _first_str(raw: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        cleaned = _clean_str(raw.get(key))
        if cleaned:
            return cleaned
    return None


def parse_chart_date(value: Any) -> Optional[date]:
    """Coerce ISO-ish strings, dates and datetimes to a calendar date (UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    text = _clean_str(value)
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_rank(value: Any) -> Optional[int]:
    """Return the rank as int when it is a finite integer value, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    text = _clean_str(value)
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        as_float = float(text)
    except ValueError:
        return None
    if math.isfinite(as_float) and as_float.is_integer():
        return int(as_float)
    return None


def normalize_origins(value: Any, ignored: frozenset = IGNORED_ORIGIN_CODES) -> Tuple[str, ...]:
    """Single code or list -> upper-cased, de-duplicated codes minus the blacklist."""
    if isinstance(value, str):
        candidates: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple, set, frozenset)):
        candidates = value
    else:
        return ()
    seen: List[str] = []
    for code in candidates:
        cleaned = _clean_str(code)
        if not cleaned:
            continue
        upper = cleaned.upper()
        if upper in ignored or upper in seen:
            continue
        seen.append(upper)
    return tuple(seen)


def _artists(raw: Mapping[str, Any]) -> Tuple[str, ...]:
    listed = raw.get("artists")
    if isinstance(listed, (list, tuple)):
        return tuple(a.strip() for a in listed if isinstance(a, str) and a.strip())
    single = _first_str(raw, ARTIST_KEYS)
    return (single,) if single else ()


def _genre(raw: Mapping[str, Any]) -> str:
    genres = raw.get("genres")
    if isinstance(genres, (list, tuple)):
        for g in genres:
            cleaned = _clean_str(g)
            if cleaned:
                return cleaned
    return _first_str(raw, GENRE_KEYS) or UNKNOWN_LABEL


def _track_id(raw: Mapping[str, Any]) -> Optional[str]:
    value = _first(raw, TRACK_ID_KEYS)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    text = str(value).strip()
    return text or None


def normalize_record(raw: Any, options: Optional[NormalizeOptions] = None) -> NormalizeResult:
    opts = options or NormalizeOptions()
    if not isinstance(raw, Mapping):
        return NormalizeResult(skip=SkipReason.NOT_A_RECORD)

    raw_date = _first(raw, DATE_KEYS)
    if raw_date is None or (isinstance(raw_date, str) and not raw_date.strip()):
        return NormalizeResult(skip=SkipReason.MISSING_DATE)
    chart_date = parse_chart_date(raw_date)
    if chart_date is None:
        return NormalizeResult(skip=SkipReason.INVALID_DATE)
    if opts.start_date is not None and chart_date < opts.start_date:
        return NormalizeResult(skip=SkipReason.BEFORE_START)

    rank = parse_rank(_first(raw, RANK_KEYS))
    if rank is None:
        return NormalizeResult(skip=SkipReason.INVALID_RANK)
    if rank < RANK_MIN or rank > opts.max_rank:
        return NormalizeResult(skip=SkipReason.RANK_OUT_OF_RANGE)

    name = _first_str(raw, NAME_KEYS)
    artists = _artists(raw)
    track_id = _track_id(raw)
    if track_id is None:
        if opts.require_identity and not (name or artists):
            return NormalizeResult(skip=SkipReason.MISSING_IDENTITY)
        track_id = identity_key(name or UNKNOWN_LABEL, artists)

    entry = ChartEntry(
        date=chart_date,
        date_string=chart_date.isoformat(),
        rank=rank,
        track_id=track_id,
        name=name or UNKNOWN_LABEL,
        artists=artists,
        genre=_genre(raw),
        origins=normalize_origins(_first(raw, ORIGIN_KEYS), opts.ignored_codes),
    )
    return NormalizeResult(entry=entry)


def normalize_records_with_report(
    raws: Iterable[Any], options: Optional[NormalizeOptions] = None
) -> Tuple[List[ChartEntry], Counter]:
    entries: List[ChartEntry] = []
    skipped: Counter = Counter()
    for raw in raws:
        result = normalize_record(raw, options)
        if result.entry is not None:
            entries.append(result.entry)
        else:
            skipped[result.skip] += 1
    return entries, skipped


def normalize_records(raws: Iterable[Any], options: Optional[NormalizeOptions] = None) -> List[ChartEntry]:
    entries, _ = normalize_records_with_report(raws, options)
    return entries
