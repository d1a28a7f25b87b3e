from __future__ import annotations


class ChartEngineError(Exception):
    pass


class DatasetLoadError(ChartEngineError):
    """Fetching or parsing the chart snapshot failed; fatal for that load."""


class ChartConfigError(ChartEngineError):
    """Invalid settings value or unknown view profile."""
