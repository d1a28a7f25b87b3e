"""
Chart settings: view profiles plus CLI/env/JSON overrides.

Precedence everywhere: CLI > env (MA_CHART_*) > JSON config file > view profile.

Views:
- globalization: NDJSON snapshot, weeks from 1980, ranks 1..100.
- geographic: CSV snapshot (fallback list), no start bound, rows need a name
  or artist.
- universe: NDJSON snapshot, weeks from 1980, ranks 1..200, timeline opens on
  the latest week.

Env overrides:
- MA_CHART_VIEW, MA_CHART_START_DATE, MA_CHART_MAX_RANK, MA_CHART_TOP_N,
  MA_CHART_HOME, MA_CHART_TOP_PIN_N, MA_CHART_WINDOW_WEEKS, MA_CHART_SPEED_MS,
  MA_CHART_HTTP_TIMEOUT, MA_CHART_DATA (path or URL).

Notes:
- A missing or unparseable config file is logged and ignored.
- Values that cannot be coerced, or an unknown view, raise ChartConfigError.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ma_chart_engine.errors import ChartConfigError
from ma_chart_engine.records import NormalizeOptions
from shared.config.constants import (
    CHART_START_DATE,
    HOME_COUNTRY,
    PLAYBACK_SPEED_DEFAULT_MS,
    RANK_MAX_BB200,
    RANK_MAX_HOT100,
    TOP_METRICS_N,
    TOP_PIN_N,
    WINDOW_WEEKS,
)
from shared.config.paths import (
    get_chart_config_path,
    get_chart_csv_candidates,
    get_chart_ndjson_path,
)
from shared.ma_utils.config_overlay import overlay_config, parse_bool, resolve_config_value
from shared.ma_utils.logger_factory import get_configured_logger

__all__ = [
    "ChartSettings",
    "DEFAULT_VIEW",
    "VIEW_PROFILES",
    "load_chart_settings",
]

DEFAULT_VIEW = "globalization"


@dataclass
class ChartSettings:
    view: str = DEFAULT_VIEW
    start_date: Optional[str] = CHART_START_DATE
    max_rank: int = RANK_MAX_HOT100
    require_identity: bool = False
    top_n: int = TOP_METRICS_N
    home_country: str = HOME_COUNTRY
    top_pin_n: int = TOP_PIN_N
    window_weeks: int = WINDOW_WEEKS
    speed_ms: int = PLAYBACK_SPEED_DEFAULT_MS
    start_at_latest: bool = False
    http_timeout: float = 30.0
    data_source: Optional[str] = None

    def normalize_options(self) -> NormalizeOptions:
        start = date.fromisoformat(self.start_date) if self.start_date else None
        return NormalizeOptions(
            start_date=start,
            max_rank=self.max_rank,
            require_identity=self.require_identity,
        )

    def data_candidates(self) -> List[str]:
        """Sources to try in order; an explicit data_source wins outright."""
        if self.data_source:
            return [self.data_source]
        if self.view == "geographic":
            return [str(p) for p in get_chart_csv_candidates()]
        return [str(get_chart_ndjson_path())]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


VIEW_PROFILES: Dict[str, Dict[str, Any]] = {
    "globalization": {
        "start_date": CHART_START_DATE,
        "max_rank": RANK_MAX_HOT100,
        "require_identity": False,
        "start_at_latest": False,
    },
    "geographic": {
        "start_date": None,
        "max_rank": RANK_MAX_HOT100,
        "require_identity": True,
        "start_at_latest": False,
    },
    "universe": {
        "start_date": CHART_START_DATE,
        "max_rank": RANK_MAX_BB200,
        "require_identity": False,
        "start_at_latest": True,
    },
}


def _iso_date(value: Any) -> Optional[str]:
    if value is None or str(value).strip().lower() in ("", "none"):
        return None
    return date.fromisoformat(str(value).strip()).isoformat()


def _upper(value: Any) -> str:
    return str(value).strip().upper()


# (field, env var, coerce)
_FIELD_SOURCES: List[tuple] = [
    ("start_date", "MA_CHART_START_DATE", _iso_date),
    ("max_rank", "MA_CHART_MAX_RANK", int),
    ("require_identity", "MA_CHART_REQUIRE_IDENTITY", parse_bool),
    ("top_n", "MA_CHART_TOP_N", int),
    ("home_country", "MA_CHART_HOME", _upper),
    ("top_pin_n", "MA_CHART_TOP_PIN_N", int),
    ("window_weeks", "MA_CHART_WINDOW_WEEKS", int),
    ("speed_ms", "MA_CHART_SPEED_MS", int),
    ("start_at_latest", "MA_CHART_START_AT_LATEST", parse_bool),
    ("http_timeout", "MA_CHART_HTTP_TIMEOUT", float),
    ("data_source", "MA_CHART_DATA", str),
]


def _load_config_file(path: Optional[Path], log: Callable[[str], None]) -> Dict[str, Any]:
    if path is None:
        return {}
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        log(f"[WARN] chart config not found: {path}")
        return {}
    except (OSError, ValueError) as exc:
        log(f"[WARN] failed to parse chart config {path}: {exc}")
        return {}
    if not isinstance(payload, dict):
        log(f"[WARN] chart config {path} is not a JSON object; ignoring")
        return {}
    known = {f.name for f in fields(ChartSettings)}
    return {k: v for k, v in payload.items() if k in known}


def _coerce(name: str, value: Any, coerce: Callable[[Any], Any]) -> Any:
    if value is None:
        return None
    try:
        return coerce(value)
    except (TypeError, ValueError) as exc:
        raise ChartConfigError(f"invalid value for {name}: {value!r}") from exc


def _validate(settings: ChartSettings) -> ChartSettings:
    if settings.max_rank < 1:
        raise ChartConfigError(f"max_rank must be >= 1 (got {settings.max_rank})")
    if settings.top_n < 1:
        raise ChartConfigError(f"top_n must be >= 1 (got {settings.top_n})")
    if settings.window_weeks < 0:
        raise ChartConfigError(f"window_weeks must be >= 0 (got {settings.window_weeks})")
    if settings.http_timeout <= 0:
        raise ChartConfigError(f"http_timeout must be > 0 (got {settings.http_timeout})")
    if len(settings.home_country) != 2:
        raise ChartConfigError(f"home_country must be an ISO alpha-2 code (got {settings.home_country!r})")
    return settings


def load_chart_settings(
    args: Optional[object] = None,
    view: Optional[str] = None,
    config_path: Optional[Path] = None,
    log: Optional[Callable[[str], None]] = None,
) -> ChartSettings:
    """
    Build ChartSettings for a view.

    `args` may be an argparse Namespace; attributes named like ChartSettings
    fields (plus `data` for data_source) override everything else.
    """
    log = log or get_configured_logger("chart_settings")
    cli_view = getattr(args, "view", None) if args is not None else None
    view_name = resolve_config_value(cli_view or view, env_var="MA_CHART_VIEW", default=DEFAULT_VIEW)
    view_name = str(view_name).strip().lower()
    if view_name not in VIEW_PROFILES:
        raise ChartConfigError(f"unknown view {view_name!r} (expected one of {sorted(VIEW_PROFILES)})")

    cfg_path = config_path
    if cfg_path is None and args is not None and getattr(args, "config", None):
        cfg_path = Path(getattr(args, "config")).expanduser()
    if cfg_path is None:
        cfg_path = get_chart_config_path()

    base = overlay_config(asdict(ChartSettings()), VIEW_PROFILES[view_name])
    base["view"] = view_name
    file_cfg = _load_config_file(cfg_path, log)
    file_cfg.pop("view", None)
    merged = dict(base)
    merged.update(file_cfg)

    for name, env_var, coerce in _FIELD_SOURCES:
        attr = "data" if name == "data_source" else name
        cli_value = getattr(args, attr, None) if args is not None else None
        file_default = _coerce(name, merged.get(name), coerce) if name in file_cfg else merged.get(name)
        merged[name] = _coerce(
            name,
            resolve_config_value(cli_value, env_var=env_var, default=file_default),
            coerce,
        )

    return _validate(ChartSettings(**merged))
