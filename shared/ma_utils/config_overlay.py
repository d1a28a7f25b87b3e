"""
Config overlay helpers so CLI/env/file/default precedence reads the same everywhere.

Usage patterns:
- Resolve with precedence: `resolve_config_value(cli_val, env_var="MA_CHART_TOP_N", default=100, coerce=int)`.
- Merge override dicts: `overlay_config(base_cfg, overrides)` without mutating inputs.

Notes:
- Side effects: none; reads env only.
- Coercion: pass a `coerce` callable to normalize env/CLI strings to the desired type.
"""
from __future__ import annotations

import os
from typing import Any, Callable, Dict, Optional

__all__ = [
    "overlay_config",
    "parse_bool",
    "resolve_config_value",
]

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def resolve_config_value(
    cli_value: Any,
    env_var: Optional[str] = None,
    default: Any = None,
    coerce: Optional[Callable[[Any], Any]] = None,
) -> Any:
    """
    Resolve a config value with precedence:
      1) explicit CLI value (if not None)
      2) environment variable (if provided and set)
      3) fallback default
    Optionally coerce the CLI/env value.
    """
    if cli_value is not None:
        return coerce(cli_value) if coerce else cli_value
    if env_var:
        env_val = os.getenv(env_var, None)
        if env_val is not None:
            return coerce(env_val) if coerce else env_val
    return default


def overlay_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge overrides into base and return a new dict.
    None values in overrides are ignored; inputs are not mutated.
    """
    merged = dict(base or {})
    for k, v in (overrides or {}).items():
        if v is not None:
            merged[k] = v
    return merged


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ValueError(f"not a boolean: {value!r}")
