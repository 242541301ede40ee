"""
Configuration layer - Settings and constants
"""

from chatty.config.settings import settings, Settings, PROJECT_ROOT
from chatty.config.constants import MESSAGES, ERRORS, STATUS, FLOW_STEPS, PHASE_ORDER

__all__ = [
    "settings",
    "Settings",
    "PROJECT_ROOT",
    "MESSAGES",
    "ERRORS",
    "STATUS",
    "FLOW_STEPS",
    "PHASE_ORDER",
]
