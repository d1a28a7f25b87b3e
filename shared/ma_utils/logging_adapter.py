"""
Logging adapter: helpers for consistent debug/info output with optional redaction.

Config:
- Env: LOG_JSON=1 for structured logs; LOG_REDACT=1 to mask secrets; LOG_REDACT_VALUES=secret1,secret2 to redact.
- File: shared/config/logging.json (optional, path override MA_LOG_CONFIG) for prefix/redact/secrets defaults.

This keeps emitters modular so the dataset builder, loaders and CLI can opt into
structured logging without rewriting print calls.

Usage:
- `log = make_logger(prefix="chart_loader", redact=True); log("message")`
- `slog = make_structured_logger(prefix="chart_dataset", defaults={"view": "globalization"}); slog("event", {"status": "ok"})`
- `log_stage_start(slog, "normalize", rows=1200)` / `log_stage_end(slog, "normalize", kept=1100)`

Notes:
- Side effects: writes to stderr.
- Unknown config keys are ignored to keep behavior stable.
"""
from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional

__all__ = [
    "make_logger",
    "make_structured_logger",
    "log_stage_start",
    "log_stage_end",
]

_CFG_PATH = Path(__file__).resolve().parents[1] / "config" / "logging.json"


def _file_defaults() -> Dict[str, Any]:
    """prefix/redact/secrets from the optional logging.json (env MA_LOG_CONFIG overrides the path)."""
    override = os.getenv("MA_LOG_CONFIG")
    path = Path(override).expanduser() if override else _CFG_PATH
    defaults: Dict[str, Any] = {"prefix": "", "redact": False, "secrets": []}
    try:
        if not path.exists():
            return defaults
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        # Logging config is optional.
        return defaults
    if isinstance(data, dict):
        if data.get("prefix") is not None:
            defaults["prefix"] = str(data["prefix"])
        defaults["redact"] = bool(data.get("redact", False))
        if isinstance(data.get("secrets"), list):
            defaults["secrets"] = [str(s) for s in data["secrets"] if s]
    return defaults


_FILE_DEFAULTS = _file_defaults()
_DEFAULT_JSON = os.environ.get("LOG_JSON", "0") == "1"


def _sanitize(msg: str, redact: bool, secrets: list) -> str:
    """Shorten the home directory to ~ and mask known secrets."""
    text = str(msg)
    home = str(Path.home())
    if home not in ("", "/"):
        text = text.replace(home, "~")
    if redact:
        for secret in secrets:
            if secret:
                text = text.replace(secret, "***")
    return text


def make_logger(
    prefix: str = "",
    redact: bool = False,
    secrets: Optional[list] = None,
    json_output: Optional[bool] = None,
) -> Callable[[str], None]:
    """Plain stderr logger: `[prefix] message`, or `{"prefix", "message"}` JSON when json_output."""
    label = prefix or _FILE_DEFAULTS["prefix"]
    redact = redact or _FILE_DEFAULTS["redact"]
    secrets = list(secrets) if secrets is not None else list(_FILE_DEFAULTS["secrets"])
    json_output = _DEFAULT_JSON if json_output is None else json_output

    def _log(msg: str) -> None:
        sanitized = _sanitize(msg, redact, secrets)
        if json_output:
            print(json.dumps({"prefix": label, "message": sanitized}), file=sys.stderr)
        else:
            print(f"[{label}] {sanitized}" if label else sanitized, file=sys.stderr)

    return _log


def make_structured_logger(prefix: str = "", defaults: Optional[dict] = None) -> Callable[[str, dict], None]:
    """
    Emit structured JSON logs with a consistent schema: {prefix,event,...fields}.
    Defaults are merged into each log line.
    """
    defaults = defaults or {}

    def _log(event: str, fields: Optional[dict] = None) -> None:
        payload = {"prefix": prefix, "event": event}
        payload.update(defaults)
        if fields:
            payload.update(fields)
        print(json.dumps(payload, default=str), file=sys.stderr)

    return _log


def log_stage_start(logger: Callable, stage: str, **fields) -> None:
    """
    Emit a stage_start event (structured if possible, fallback to plain text).
    Standard schema: event=stage_start, stage=<name>, extra fields (e.g., rows, view).
    """
    payload = {"stage": stage}
    payload.update(fields)
    try:
        logger("stage_start", payload)
    except TypeError:
        logger(f"[stage_start] stage={stage} {payload}")


def log_stage_end(logger: Callable, stage: str, status: str = "ok", **fields) -> None:
    """
    Emit a stage_end event with status/metrics. Matches stage_start schema.
    """
    payload = {"stage": stage, "status": status}
    payload.update(fields)
    try:
        logger("stage_end", payload)
    except TypeError:
        logger(f"[stage_end] stage={stage} status={status} {payload}")
