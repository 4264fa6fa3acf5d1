"""
Reports Interfaces Layer
========================

Interface adapters (controllers) for the reports module.
"""

from mantra.reports.interfaces.controllers import reports_router

__all__ = ["reports_router"]
