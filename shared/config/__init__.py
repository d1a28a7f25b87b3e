"""
Shared configuration: constants and path helpers (source of truth).
"""
from shared.config.constants import *  # noqa: F401,F403
from shared.config.paths import *  # noqa: F401,F403
