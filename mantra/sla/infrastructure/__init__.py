"""
SLA Infrastructure Layer
========================

Contains:
- RulesConfigManager: YAML helpdesk rules with hot reload
- SLAScheduler: APScheduler wrapper for the periodic sweep
"""

from mantra.sla.infrastructure.external import (
    RULES_DEFAULTS,
    RULES_FROM_FILE,
    RULES_NOT_LOADED,
    RulesConfigManager,
    RulesFileHandler,
    SLAScheduler,
)

__all__ = [
    "RULES_DEFAULTS",
    "RULES_FROM_FILE",
    "RULES_NOT_LOADED",
    "RulesConfigManager",
    "RulesFileHandler",
    "SLAScheduler",
]
