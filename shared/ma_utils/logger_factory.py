"""
Centralized logger factory so LOG_* environment parsing lives in one place.

Usage:
    from shared.ma_utils.logger_factory import get_configured_logger

    log = get_configured_logger("chart_loader")                   # env only
    log = get_configured_logger("chart_dataset", structured=True)  # explicit override
    log = get_configured_logger("ma-chart-report", args=args)      # argparse --log-json

Environment Variables:
    - LOG_JSON: structured JSON logging ("1"/"true"; default off)
    - LOG_REDACT: secret redaction (default off)
    - LOG_REDACT_VALUES: comma-separated values to redact

Precedence: explicit keyword > argparse attribute (log_json) > env > off.
Structured loggers take `(event, fields)`; plain loggers take one string.
Both accept a single string, so library code can call `log("...")` either way.
"""
from __future__ import annotations

from typing import Callable, List, Optional

from shared.ma_utils.config_overlay import parse_bool, resolve_config_value
from shared.ma_utils.logging_adapter import make_logger, make_structured_logger

__all__ = [
    "get_configured_logger",
]


def _split_values(raw: Optional[str]) -> List[str]:
    return [v for v in (raw or "").split(",") if v]


def get_configured_logger(
    name: str,
    structured: Optional[bool] = None,
    redact: Optional[bool] = None,
    redact_values: Optional[List[str]] = None,
    defaults: Optional[dict] = None,
    args: Optional[object] = None,
) -> Callable:
    if structured is None and args is not None and getattr(args, "log_json", False):
        structured = True
    structured = resolve_config_value(structured, env_var="LOG_JSON", default=False, coerce=parse_bool)
    redact = resolve_config_value(redact, env_var="LOG_REDACT", default=False, coerce=parse_bool)
    if redact_values is None:
        redact_values = _split_values(resolve_config_value(None, env_var="LOG_REDACT_VALUES", default=""))

    if structured:
        return make_structured_logger(prefix=name, defaults=defaults)
    return make_logger(prefix=name, redact=redact, secrets=redact_values, json_output=False)
