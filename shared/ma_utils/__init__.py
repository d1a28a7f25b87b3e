"""
Shared utilities: logging adapter and configured-logger factory.
"""
from shared.ma_utils.logger_factory import get_configured_logger
from shared.ma_utils.logging_adapter import make_logger, make_structured_logger

__all__ = ["get_configured_logger", "make_logger", "make_structured_logger"]
